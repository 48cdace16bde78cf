import asyncio

import pytest

from techphone.utils.cache import RequestDeduplicator, TTLCache, stable_key


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_stable_key_ignores_order():
    assert stable_key({"a": 1, "b": [1, 2]}) == stable_key({"b": [1, 2], "a": 1})


def test_entries_expire():
    clock = Clock()
    cache = TTLCache(max_size=10, ttl=300, clock=clock)
    cache.set("k", "v")
    clock.now = 300
    assert cache.get("k") == "v"
    clock.now = 301
    assert cache.get("k") is None
    assert len(cache) == 0


def test_per_entry_ttl():
    clock = Clock()
    cache = TTLCache(ttl=300, clock=clock)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2)
    clock.now = 10
    assert "short" not in cache
    assert cache.get("long") == 2


def test_evicts_least_recently_used():
    cache = TTLCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_overwrite_does_not_evict():
    cache = TTLCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    assert len(cache) == 2
    assert cache.get("a") == 10 and cache.get("b") == 2


def test_delete_and_clear():
    cache = TTLCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("missing")
    assert cache.get("a") is None
    cache.clear()
    assert len(cache) == 0


async def test_concurrent_callers_share_one_call():
    dedup = RequestDeduplicator()
    calls = 0
    release = asyncio.Event()

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        return "result"

    first = asyncio.ensure_future(dedup.run("k", fetch))
    second = asyncio.ensure_future(dedup.run("k", fetch))
    await asyncio.sleep(0)
    assert dedup.active_count == 1

    release.set()
    assert await asyncio.gather(first, second) == ["result", "result"]
    assert calls == 1
    assert dedup.active_count == 0


async def test_entry_removed_after_failure():
    dedup = RequestDeduplicator()

    async def boom():
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        await dedup.run("k", boom)
    await asyncio.sleep(0)
    assert dedup.active_count == 0

    async def ok():
        return 1

    assert await dedup.run("k", ok) == 1


async def test_different_keys_run_separately():
    dedup = RequestDeduplicator()
    calls = []

    async def fetch(key):
        calls.append(key)
        return key

    results = await asyncio.gather(dedup.run("a", lambda: fetch("a")), dedup.run("b", lambda: fetch("b")))
    assert results == ["a", "b"]
    assert sorted(calls) == ["a", "b"]


def test_zero_size_cache_stores_nothing():
    cache = TTLCache(max_size=0)
    cache.set("k", 1)
    assert cache.get("k") is None
    assert len(cache) == 0
