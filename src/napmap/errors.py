"""Exceptions raised by napmap."""
from __future__ import annotations


class NapMapError(Exception):
    """Base class for napmap errors."""


class InvalidCapacityError(NapMapError, ValueError):
    """A bounded map or capacity gate was configured with capacity < 1."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
