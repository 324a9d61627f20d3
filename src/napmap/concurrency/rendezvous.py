"""One-shot broadcast: many subscribers, a single wake-up for all of them.

A Rendezvous is created for a key the first time a task has to wait
for it. Every waiter takes a Subscription and awaits it; the inserter
calls broadcast() exactly once, which wakes every subscriber present
at that moment and marks the rendezvous consumed. A subscription taken
after the broadcast returns immediately instead of hanging.

Built on asyncio.Event, which already has the right shape: set() wakes
all current waiters, and wait() on a set event does not suspend.
"""
from __future__ import annotations

import asyncio
from typing import Callable


class Rendezvous:
    """Single-use broadcast point shared by the registry and its waiters.

    Args:
        on_orphaned: called when the last live subscription is dropped
            before any broadcast (every waiter gave up). Optional.
    """

    def __init__(self, on_orphaned: Callable[[Rendezvous], None] | None = None) -> None:
        self._event = asyncio.Event()
        self._subscribers: int = 0
        self._on_orphaned = on_orphaned

    @property
    def consumed(self) -> bool:
        return self._event.is_set()

    @property
    def subscribers(self) -> int:
        """Number of subscriptions not yet woken or dropped."""
        return self._subscribers

    def subscribe(self) -> Subscription:
        self._subscribers += 1
        return Subscription(self)

    def broadcast(self) -> int:
        """Wake every current subscriber. Returns how many were waiting.

        A second call is a no-op returning 0.
        """
        if self._event.is_set():
            return 0
        woken = self._subscribers
        self._event.set()
        return woken

    def _unsubscribe(self) -> None:
        self._subscribers -= 1
        if self._subscribers == 0 and not self._event.is_set():
            if self._on_orphaned is not None:
                self._on_orphaned(self)

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "pending"
        return f"Rendezvous({state}, subscribers={self._subscribers})"


class Subscription:
    """Handle on a Rendezvous held by one waiting task."""

    def __init__(self, rendezvous: Rendezvous) -> None:
        self._rendezvous = rendezvous
        self._active = True

    @property
    def rendezvous(self) -> Rendezvous:
        return self._rendezvous

    @property
    def active(self) -> bool:
        return self._active

    async def wait(self) -> None:
        """Suspend until the broadcast. The handle is dropped on exit,
        whether the task was woken or cancelled."""
        try:
            await self._rendezvous._event.wait()
        finally:
            self.close()

    def close(self) -> None:
        """Drop the subscription without waiting. Idempotent."""
        if self._active:
            self._active = False
            self._rendezvous._unsubscribe()
