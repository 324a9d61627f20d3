"""Rendezvous algorithm shared by the unbounded and bounded maps.

Two tables, two independent locks, never held at the same time:

    insert(k, v):  table.write[k] = v  ->  registry.detach(k)  ->  broadcast
    get(k):        table.read[k] hit? return
                   registry: re-check table, else subscribe  ->  await
                   table.read[k]

insert writes the table before it looks at the registry. A reader that
misses on the table re-checks it while holding the registry lock, so a
concurrent insert either shows up in that re-check or has not detached
yet and will broadcast to the subscription the reader just installed.
No wake-up is lost and no lock is ever nested inside the other.
An insert cancelled after its table write still detaches and
broadcasts before the cancellation propagates.

A woken reader returns whatever the table holds when it re-reads it,
which may be a later insert than the one that woke it, or None if the
key was removed in between.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Generic, TypeVar

from napmap.concurrency.rendezvous import Rendezvous
from napmap.log import trace
from napmap.value_table import ValueTable
from napmap.waiter_registry import WaiterRegistry

K = TypeVar("K")
V = TypeVar("V")

log = logging.getLogger(__name__)


class NapMapBase(Generic[K, V]):
    """Map whose get() waits for absent keys instead of failing.

    Subclasses hook capacity accounting in by overriding insert() and
    _entry_removed().

    Args:
        purge_orphans: drop a key's rendezvous as soon as every task
            waiting on it has been cancelled. Off by default, in which
            case the orphan is cleared by the next insert for that key.
    """

    def __init__(self, *, purge_orphans: bool = False) -> None:
        self._table: ValueTable[K, V] = ValueTable()
        self._registry: WaiterRegistry[K] = WaiterRegistry(purge_orphans)

    async def insert(self, k: K, v: V) -> None:
        """Store v under k, then wake every task waiting on k."""
        trace(log, "Insert key=%r", k)
        await self._table.put(k, v)
        try:
            rendezvous = await self._registry.detach(k)
        except asyncio.CancelledError:
            # The value is already visible; its waiters must still hear of it.
            self._notify(k, self._registry.detach_nowait(k))
            raise
        self._notify(k, rendezvous)

    def _notify(self, k: K, rendezvous: Rendezvous | None) -> None:
        if rendezvous is not None:
            woken = rendezvous.broadcast()
            trace(log, "Notified %d waiting task(s) for key=%r", woken, k)

    async def get(self, k: K) -> V | None:
        """Return the value for k, waiting for an insert if it is absent.

        Returns None only if the entry was removed between the wake-up
        and the re-read.
        """
        trace(log, "Get key=%r", k)
        found, value = await self._table.lookup(k)
        if found:
            log.debug("Contains key=%r", k)
            return value

        subscription = await self._registry.subscribe_unless(
            k, lambda: self._table.peek(k)[0]
        )
        if subscription is None:
            log.debug("Key=%r inserted before registration, not waiting", k)
        else:
            trace(log, "Waiting for key=%r...", k)
            await subscription.wait()
            trace(log, "Notified, data is available for key=%r", k)
        return await self._table.get(k)

    async def remove(self, k: K) -> V | None:
        """Delete and return the entry for k, or None if absent.

        Never wakes waiters: a task already waiting on k keeps waiting
        for the next insert.
        """
        found, value = await self._table.pop(k)
        if found:
            self._entry_removed(k)
        return value

    async def len(self) -> int:
        """Number of stored entries. Advisory under concurrent mutation."""
        return await self._table.size()

    async def is_empty(self) -> bool:
        return await self._table.is_empty()

    def is_waiting(self, k: K) -> bool:
        """True while at least one task has registered to wait on k."""
        return self._registry.is_waiting(k)

    def _entry_removed(self, k: K) -> None:
        """Called after remove() deleted an existing entry."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(entries={len(self._table)}, "
            f"waiting_keys={len(self._registry)})"
        )
