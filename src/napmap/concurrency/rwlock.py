"""Async read-write lock: multiple concurrent readers OR one writer.

Implementation: a reader count, a writer flag and a list of parked
futures that are all woken whenever the lock state changes. Each woken
task re-checks its own admission condition, the same loop a
threading.Condition user would write.

Writer preference: once a writer is waiting, new readers block.
This prevents writer starvation under heavy read load.

Usage:
    lock = AsyncReadWriteLock()

    async with lock.read():
        data = shared_dict[key]   # Many tasks here concurrently

    async with lock.write():
        shared_dict[key] = value  # Exclusive access

Release never suspends. A task cancelled inside the protected block
(or while queued) always gives back what it held, so cancellation
cannot leak the lock.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class AsyncReadWriteLock:
    """Read-write lock for tasks on one event loop, with writer preference.

    Uncontended acquisition completes without yielding to the event
    loop, which keeps the map's fast path free of suspension points.
    """

    def __init__(self) -> None:
        self._readers: int = 0
        self._writers_waiting: int = 0
        self._writer_active: bool = False
        self._waiters: list[asyncio.Future] = []

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer_active

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Acquire read lock. Waits if a writer is active or waiting."""
        while self._writer_active or self._writers_waiting > 0:
            await self._park()
        self._readers += 1
        try:
            yield
        finally:
            self._readers -= 1
            if self._readers == 0:
                self._wake_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Acquire write lock. Waits while readers or another writer hold it."""
        self._writers_waiting += 1
        try:
            while self._writer_active or self._readers > 0:
                await self._park()
        except BaseException:
            # Withdraw the preference so queued readers can proceed.
            self._writers_waiting -= 1
            self._wake_all()
            raise
        self._writers_waiting -= 1
        self._writer_active = True
        try:
            yield
        finally:
            self._writer_active = False
            self._wake_all()

    async def _park(self) -> None:
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        finally:
            if not fut.done():
                fut.cancel()

    def _wake_all(self) -> None:
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)
