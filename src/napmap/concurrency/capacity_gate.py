"""Counted permit pool that puts backpressure on inserters.

Wraps asyncio.Semaphore with the bookkeeping the bounded map needs:
how many inserts are currently holding a permit, and a hard ceiling
so idle plus held permits never exceed the configured capacity.

    gate = CapacityGate(2)

    async with gate.permit():
        ...   # at most 2 tasks in here at once

Two ways a permit comes back: the holder leaves permit() (or calls
release() after a bare acquire()), or reclaim() is called for a permit
freed elsewhere. The bounded map reclaims when remove() actually
deleted an entry. Either way a permit is only added while idle plus
held permits are below capacity, so at most `capacity` tasks are ever
inside permit() at once.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from napmap.errors import InvalidCapacityError
from napmap.log import trace

log = logging.getLogger(__name__)


class CapacityGate:
    """Semaphore-like gate with capacity N >= 1.

    Args:
        capacity: maximum number of permits. Must be an int >= 1.
    """

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"capacity must be an int, got {type(capacity).__name__}")
        if capacity < 1:
            raise InvalidCapacityError(capacity)
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._idle: int = capacity
        self._in_flight: int = 0
        self._peak_in_flight: int = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_flight(self) -> int:
        """Permits currently held by tasks inside permit()."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """High-water mark of in_flight since construction."""
        return self._peak_in_flight

    @property
    def available(self) -> int:
        """Idle permits. Advisory: may change as soon as the caller yields."""
        return self._idle

    def locked(self) -> bool:
        """True if acquiring a permit right now would suspend."""
        return self._semaphore.locked()

    async def acquire(self) -> None:
        if self._semaphore.locked():
            trace(log, "Gate full (capacity=%d), waiting for a permit", self._capacity)
        await self._semaphore.acquire()
        self._idle -= 1
        self._in_flight += 1
        if self._in_flight > self._peak_in_flight:
            self._peak_in_flight = self._in_flight

    def release(self) -> None:
        """Give back a permit taken with acquire()."""
        if self._in_flight > 0:
            self._in_flight -= 1
        self.reclaim()

    def reclaim(self) -> bool:
        """Return one permit to the pool on behalf of a non-holder.

        Returns False (and does nothing) if every permit is already
        accounted for, idle or held by an in-flight task.
        """
        if self._idle + self._in_flight >= self._capacity:
            return False
        self._idle += 1
        self._semaphore.release()
        return True

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[None]:
        """Hold one permit for the duration of the block."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def __repr__(self) -> str:
        return (
            f"CapacityGate(capacity={self._capacity}, "
            f"in_flight={self._in_flight}, available={self._idle})"
        )
