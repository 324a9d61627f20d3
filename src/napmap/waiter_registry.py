"""Key -> Rendezvous table for tasks waiting on absent keys.

An entry exists only while some task is waiting for a key that has
not been inserted since it started waiting. insert() detaches the
entry and broadcasts on it; from then on nobody can subscribe to that
consumed rendezvous, so late arrivals always get a fresh one.

All mutation happens under one asyncio.Lock, independent of the value
table's lock. The critical sections never await while holding it.

With purge_orphans=True, a rendezvous whose every waiter was cancelled
is dropped straight away instead of lingering until the next insert
for its key. The purge runs synchronously from the cancelled task and
only removes the entry if it is still the registered one.
"""
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Callable, Generic, TypeVar

from napmap.concurrency.rendezvous import Rendezvous, Subscription
from napmap.log import trace

K = TypeVar("K")

log = logging.getLogger(__name__)


class WaiterRegistry(Generic[K]):
    """Lock-protected mapping of waited-on keys to their Rendezvous.

    Args:
        purge_orphans: drop a rendezvous once its last waiter gives up.
    """

    def __init__(self, purge_orphans: bool = False) -> None:
        self._waiters: dict[K, Rendezvous] = {}
        self._lock = asyncio.Lock()
        self._purge_orphans = purge_orphans

    @property
    def purge_orphans(self) -> bool:
        return self._purge_orphans

    async def subscribe(self, key: K) -> Subscription:
        """Subscribe to the rendezvous for key, creating it if absent."""
        async with self._lock:
            return self._rendezvous_for(key).subscribe()

    async def subscribe_unless(
        self, key: K, present: Callable[[], bool]
    ) -> Subscription | None:
        """Subscribe unless present() is true, checked under the lock.

        Closes the window between a reader's miss on the value table
        and its registration here: an insert that landed in between
        either shows up in present(), or has not reached detach() yet
        and will find the rendezvous we install.
        """
        async with self._lock:
            if present():
                return None
            return self._rendezvous_for(key).subscribe()

    async def detach(self, key: K) -> Rendezvous | None:
        """Remove and return the rendezvous for key, if any."""
        async with self._lock:
            return self._waiters.pop(key, None)

    def detach_nowait(self, key: K) -> Rendezvous | None:
        """detach() without taking the lock.

        For callers that must not suspend again, e.g. an insert being
        cancelled. Safe because no holder of the lock is ever suspended
        inside its critical section.
        """
        return self._waiters.pop(key, None)

    def is_waiting(self, key: K) -> bool:
        """True while a rendezvous for key is registered. Advisory."""
        return key in self._waiters

    def __len__(self) -> int:
        return len(self._waiters)

    def _rendezvous_for(self, key: K) -> Rendezvous:
        rendezvous = self._waiters.get(key)
        if rendezvous is None:
            on_orphaned = partial(self._discard, key) if self._purge_orphans else None
            rendezvous = Rendezvous(on_orphaned=on_orphaned)
            self._waiters[key] = rendezvous
        return rendezvous

    def _discard(self, key: K, rendezvous: Rendezvous) -> None:
        if self._waiters.get(key) is rendezvous:
            del self._waiters[key]
            trace(log, "Purged orphaned rendezvous for key=%r", key)
