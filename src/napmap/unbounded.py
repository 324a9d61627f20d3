"""Unbounded nap map: inserts never wait.

The only limit is available memory. A producer that outruns its
consumers grows the table without any backpressure; use the bounded
NapMap when that matters.
"""
from __future__ import annotations

from typing import TypeVar

from napmap.base import NapMapBase

K = TypeVar("K")
V = TypeVar("V")


class UnboundedNapMap(NapMapBase[K, V]):
    """Nap map without a capacity gate.

    Usage:
        m = UnboundedNapMap()

        async def producer():
            await m.insert("key", 7)

        asyncio.create_task(producer())
        assert await m.get("key") == 7   # waits until the producer runs
    """


def unbounded(*, purge_orphans: bool = False) -> UnboundedNapMap:
    """Create an unbounded nap map for communicating between tasks."""
    return UnboundedNapMap(purge_orphans=purge_orphans)
