"""Authoritative key -> value mapping behind an async read-write lock.

Holds the most recently inserted value per key. Readers share the
lock; put/pop take it exclusively. Every critical section is a plain
dict operation with no await inside, which is what makes peek() a
valid snapshot without taking the lock.
"""
from __future__ import annotations

from typing import Generic, TypeVar

from napmap.concurrency.rwlock import AsyncReadWriteLock

K = TypeVar("K")
V = TypeVar("V")


class ValueTable(Generic[K, V]):
    """Dict guarded by an AsyncReadWriteLock."""

    def __init__(self) -> None:
        self._data: dict[K, V] = {}
        self._lock = AsyncReadWriteLock()

    async def get(self, key: K) -> V | None:
        """Read: returns the stored value, or None if absent."""
        async with self._lock.read():
            return self._data.get(key)

    async def lookup(self, key: K) -> tuple[bool, V | None]:
        """Read presence and value under one read lock."""
        async with self._lock.read():
            if key in self._data:
                return True, self._data[key]
            return False, None

    def peek(self, key: K) -> tuple[bool, V | None]:
        """Lock-free snapshot of (present, value).

        Never suspends, so it cannot observe a writer halfway through:
        writers hold the lock only across a single dict assignment.
        """
        if key in self._data:
            return True, self._data[key]
        return False, None

    async def put(self, key: K, value: V) -> None:
        """Write: replaces any previous value for key."""
        async with self._lock.write():
            self._data[key] = value

    async def pop(self, key: K) -> tuple[bool, V | None]:
        """Delete the entry. Returns (existed, old value or None)."""
        async with self._lock.write():
            if key in self._data:
                return True, self._data.pop(key)
            return False, None

    async def size(self) -> int:
        async with self._lock.read():
            return len(self._data)

    async def is_empty(self) -> bool:
        async with self._lock.read():
            return not self._data

    def __len__(self) -> int:
        return len(self._data)
