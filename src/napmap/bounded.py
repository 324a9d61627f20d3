"""Bounded nap map: inserters wait for a permit from a CapacityGate.

Each insert holds one permit across its table write and broadcast, so
at most `capacity` inserts are in flight at any moment. get() never
touches the gate; a reader is never slowed by a busy producer side.

remove() hands a permit back when it actually deleted an entry. The
gate clamps its idle pool at `capacity`, so that can never push the
limit above what the map was constructed with.
"""
from __future__ import annotations

import logging
from typing import TypeVar

from napmap.base import NapMapBase
from napmap.concurrency.capacity_gate import CapacityGate

K = TypeVar("K")
V = TypeVar("V")

log = logging.getLogger(__name__)


class NapMap(NapMapBase[K, V]):
    """Nap map that applies backpressure to inserters.

    Args:
        capacity: maximum number of concurrent inserts (>= 1).
        purge_orphans: see NapMapBase.

    Raises:
        InvalidCapacityError: if capacity < 1.
    """

    def __init__(self, capacity: int, *, purge_orphans: bool = False) -> None:
        self._gate = CapacityGate(capacity)
        super().__init__(purge_orphans=purge_orphans)
        log.debug("Created bounded nap map with capacity=%d", capacity)

    @property
    def capacity(self) -> int:
        return self._gate.capacity

    @property
    def gate(self) -> CapacityGate:
        return self._gate

    async def insert(self, k: K, v: V) -> None:
        """Store v under k and wake its waiters, holding one permit throughout."""
        async with self._gate.permit():
            await super().insert(k, v)

    def _entry_removed(self, k: K) -> None:
        self._gate.reclaim()

    def __repr__(self) -> str:
        return (
            f"NapMap(capacity={self._gate.capacity}, entries={len(self._table)}, "
            f"waiting_keys={len(self._registry)})"
        )


def napmap(capacity: int, *, purge_orphans: bool = False) -> NapMap:
    """Create a bounded nap map with the given insert capacity."""
    return NapMap(capacity, purge_orphans=purge_orphans)
