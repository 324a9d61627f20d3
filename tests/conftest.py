"""Shared helpers for the nap map tests.

Requires: pip install pytest-asyncio
"""
from __future__ import annotations

import asyncio

import pytest


async def _wait_for_waiter(m, key, timeout: float = 2.0) -> None:
    """Yield to the loop until some task has registered to wait on key."""
    async def _poll():
        while not m.is_waiting(key):
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture()
def wait_for_waiter():
    """Async helper: await wait_for_waiter(map, key)."""
    return _wait_for_waiter
