"""Async maps whose lookups wait for the key to be inserted.

A get() on an absent key parks the task until another task inserts
that key; every task parked on it is then woken and sees the value.

  - UnboundedNapMap / unbounded(): inserts never wait
  - NapMap / napmap(capacity): inserters wait for one of `capacity` permits
"""
from napmap.bounded import NapMap, napmap
from napmap.errors import InvalidCapacityError, NapMapError
from napmap.log import TRACE
from napmap.unbounded import UnboundedNapMap, unbounded

__all__ = [
    "InvalidCapacityError",
    "NapMap",
    "NapMapError",
    "TRACE",
    "UnboundedNapMap",
    "napmap",
    "unbounded",
]
