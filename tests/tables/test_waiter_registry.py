"""Tests for the WaiterRegistry."""
from __future__ import annotations

import asyncio

import pytest

from napmap.waiter_registry import WaiterRegistry


@pytest.mark.asyncio
async def test_subscribers_share_one_rendezvous_per_key():
    reg = WaiterRegistry()
    a = await reg.subscribe("k")
    b = await reg.subscribe("k")
    c = await reg.subscribe("other")

    assert a.rendezvous is b.rendezvous
    assert a.rendezvous is not c.rendezvous
    assert a.rendezvous.subscribers == 2
    assert len(reg) == 2
    assert reg.is_waiting("k")


@pytest.mark.asyncio
async def test_detach_removes_entry():
    reg = WaiterRegistry()
    sub = await reg.subscribe("k")

    r = await reg.detach("k")
    assert r is sub.rendezvous
    assert not reg.is_waiting("k")
    assert await reg.detach("k") is None
    assert await reg.detach("never") is None


@pytest.mark.asyncio
async def test_detach_nowait_ignores_the_lock():
    reg = WaiterRegistry()
    sub = await reg.subscribe("k")
    async with reg._lock:
        assert reg.detach_nowait("k") is sub.rendezvous
    assert reg.detach_nowait("k") is None


@pytest.mark.asyncio
async def test_fresh_rendezvous_after_detach():
    """A consumed rendezvous is never handed to a new subscriber."""
    reg = WaiterRegistry()
    first = await reg.subscribe("k")
    (await reg.detach("k")).broadcast()

    second = await reg.subscribe("k")
    assert second.rendezvous is not first.rendezvous
    assert not second.rendezvous.consumed


@pytest.mark.asyncio
async def test_subscribe_unless_present():
    reg = WaiterRegistry()
    assert await reg.subscribe_unless("k", lambda: True) is None
    assert not reg.is_waiting("k")

    sub = await reg.subscribe_unless("k", lambda: False)
    assert sub is not None
    assert reg.is_waiting("k")


@pytest.mark.asyncio
async def test_orphans_kept_by_default():
    reg = WaiterRegistry()
    assert reg.purge_orphans is False
    sub = await reg.subscribe("k")
    task = asyncio.create_task(sub.wait())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # Stays until the next insert detaches it
    assert reg.is_waiting("k")
    assert (await reg.detach("k")).subscribers == 0


@pytest.mark.asyncio
async def test_orphans_purged_when_enabled():
    reg = WaiterRegistry(purge_orphans=True)
    first = await reg.subscribe("k")
    second = await reg.subscribe("k")
    t1 = asyncio.create_task(first.wait())
    t2 = asyncio.create_task(second.wait())
    await asyncio.sleep(0)

    t1.cancel()
    with pytest.raises(asyncio.CancelledError):
        await t1
    assert reg.is_waiting("k"), "Purged while a waiter was still live"

    t2.cancel()
    with pytest.raises(asyncio.CancelledError):
        await t2
    assert not reg.is_waiting("k")


@pytest.mark.asyncio
async def test_purge_leaves_newer_rendezvous_alone():
    """An old orphan must not remove the rendezvous that replaced it."""
    reg = WaiterRegistry(purge_orphans=True)
    old = await reg.subscribe("k")
    await reg.detach("k")
    new = await reg.subscribe("k")

    old.close()
    assert reg.is_waiting("k")
    assert (await reg.detach("k")) is new.rendezvous
