"""Suspension primitives the maps are assembled from.

  - AsyncReadWriteLock: multiple readers OR one writer, writer preference
  - Rendezvous / Subscription: one-shot broadcast to every waiter
  - CapacityGate: counted permits for the bounded map's inserters
"""
from napmap.concurrency.capacity_gate import CapacityGate
from napmap.concurrency.rendezvous import Rendezvous, Subscription
from napmap.concurrency.rwlock import AsyncReadWriteLock

__all__ = [
    "AsyncReadWriteLock",
    "CapacityGate",
    "Rendezvous",
    "Subscription",
]
