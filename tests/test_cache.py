"""Unit tests for the response cache and its sweeper."""

from __future__ import annotations

import asyncio

from cache import ResponseCache, normalize
from tests.fakes import Clock


def test_normalize_trims_and_casefolds() -> None:
    assert normalize("  Hello World ") == "hello world"


def test_lookup_hits_on_normalized_text_within_ttl() -> None:
    clock = Clock()
    cache = ResponseCache(ttl_seconds=300, now_fn=clock)
    cache.store("s1", "Hello", "cached reply")

    clock.now += 299
    assert cache.lookup("s1", "  hello ") == "cached reply"


def test_lookup_is_scoped_per_session() -> None:
    cache = ResponseCache(now_fn=Clock())
    cache.store("s1", "hello", "reply")
    assert cache.lookup("s2", "hello") is None


def test_lookup_expires_lazily_without_sweep() -> None:
    clock = Clock()
    cache = ResponseCache(ttl_seconds=300, now_fn=clock)
    cache.store("s1", "hello", "reply")

    clock.now += 300
    assert cache.lookup("s1", "hello") is None
    # still physically present until swept
    assert len(cache) == 1


def test_store_overwrites_and_refreshes_timestamp() -> None:
    clock = Clock()
    cache = ResponseCache(ttl_seconds=300, now_fn=clock)
    cache.store("s1", "hello", "old")
    clock.now += 200
    cache.store("s1", "HELLO", "new")
    clock.now += 200

    assert cache.lookup("s1", "hello") == "new"


def test_sweep_removes_only_expired_entries() -> None:
    clock = Clock()
    cache = ResponseCache(ttl_seconds=300, now_fn=clock)
    cache.store("s1", "old", "a")
    clock.now += 250
    cache.store("s1", "young", "b")
    clock.now += 60

    removed = cache.sweep()

    assert removed == 1
    assert len(cache) == 1
    assert cache.lookup("s1", "young") == "b"


def test_background_sweeper_runs_and_stops() -> None:
    async def _run() -> None:
        clock = Clock()
        cache = ResponseCache(ttl_seconds=300, sweep_seconds=0.01, now_fn=clock)
        cache.store("s1", "hello", "reply")
        clock.now += 301

        cache.start()
        assert cache.running
        await asyncio.sleep(0.05)
        await cache.stop()

        assert not cache.running
        assert len(cache) == 0

    asyncio.run(_run())


def test_stop_without_start_is_noop() -> None:
    async def _run() -> None:
        cache = ResponseCache()
        await cache.stop()
        assert not cache.running

    asyncio.run(_run())
