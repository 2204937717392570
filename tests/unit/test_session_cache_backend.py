"""
Unit Tests: Session Cache Backend and Locks

Tests the LRU cache backend and the per-session lock registry.
"""

import asyncio

import pytest

from growcoach.application.services import SessionLockRegistry
from growcoach.domain.entities import SessionEntry
from growcoach.infrastructure.cache import LRUSessionCache


def _entry(session_id: str) -> SessionEntry:
    return SessionEntry(user_id="u1", session_id=session_id)


# ============================================================================
# LRU CACHE
# ============================================================================

def test_lru_get_set_delete():
    cache = LRUSessionCache(max_entries=2)
    entry = _entry("s1")

    cache.set(entry.cache_key, entry)

    assert cache.get("u1/s1") is entry
    assert cache.get("u1/missing") is None
    assert cache.delete("u1/s1") is True
    assert cache.delete("u1/s1") is False
    assert len(cache) == 0


def test_lru_evicts_least_recently_used():
    """Test: reading an entry protects it from eviction"""
    cache = LRUSessionCache(max_entries=2)
    for session_id in ("s1", "s2"):
        cache.set(f"u1/{session_id}", _entry(session_id))

    cache.get("u1/s1")
    cache.set("u1/s3", _entry("s3"))

    assert cache.get("u1/s2") is None
    assert cache.get("u1/s1") is not None
    assert cache.get("u1/s3") is not None
    assert len(cache) == 2


def test_lru_values_snapshot():
    """Test: values() can be iterated while the cache changes"""
    cache = LRUSessionCache()
    cache.set("u1/s1", _entry("s1"))
    cache.set("u1/s2", _entry("s2"))

    for entry in cache.values():
        cache.delete(entry.cache_key)

    assert len(cache) == 0


def test_lru_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LRUSessionCache(max_entries=0)


# ============================================================================
# LOCK REGISTRY
# ============================================================================

@pytest.mark.asyncio
async def test_lock_serializes_same_key():
    """Test: holders of one key never overlap"""
    locks = SessionLockRegistry()
    active = 0
    max_active = 0

    async def worker():
        nonlocal active, max_active
        async with locks.hold("u1/s1"):
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01)
            active -= 1

    await asyncio.gather(*(worker() for _ in range(5)))

    assert max_active == 1
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_different_keys_run_concurrently():
    locks = SessionLockRegistry()
    entered = asyncio.Event()

    async def first():
        async with locks.hold("u1/s1"):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def second():
        async with locks.hold("u1/s2"):
            entered.set()

    await asyncio.gather(first(), second())


@pytest.mark.asyncio
async def test_lock_released_on_error():
    locks = SessionLockRegistry()

    with pytest.raises(RuntimeError):
        async with locks.hold("u1/s1"):
            assert locks.is_locked("u1/s1")
            raise RuntimeError("boom")

    assert not locks.is_locked("u1/s1")
    assert len(locks) == 0
