"""
Unit Tests - Result Cache
"""
import pytest

from pos_reporting.serving.cache import CacheState, ResultCache


class Counter:
    """Async factory that counts its calls"""

    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return {"value": self.calls}


class TestResultCache:
    """Tests for TTL memoization"""

    def test_absent_key(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)

        assert cache.state("missing") is CacheState.ABSENT
        assert cache.get("missing") is None
        assert len(cache) == 0

    async def test_fresh_value_skips_factory(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)
        factory = Counter()

        first = await cache.get_or_set("key", factory)
        clock.advance(59)
        second = await cache.get_or_set("key", factory)

        assert factory.calls == 1
        assert first == second == {"value": 1}
        assert cache.state("key") is CacheState.FRESH

    async def test_value_at_ttl_is_still_fresh(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)
        factory = Counter()

        await cache.get_or_set("key", factory)
        clock.advance(60)

        assert cache.state("key") is CacheState.FRESH

    async def test_stale_value_is_recomputed(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)
        factory = Counter()

        await cache.get_or_set("key", factory)
        clock.advance(61)

        assert cache.state("key") is CacheState.STALE
        assert cache.get("key") is None

        value = await cache.get_or_set("key", factory)

        assert factory.calls == 2
        assert value == {"value": 2}
        assert cache.state("key") is CacheState.FRESH

    async def test_keys_are_independent(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)
        factory = Counter()

        await cache.get_or_set(("sales-summary", "2024-03-15", "all"), factory)
        await cache.get_or_set(("sales-summary", "2024-03-15", "1"), factory)

        assert factory.calls == 2
        assert len(cache) == 2

    async def test_failed_factory_leaves_no_entry(self, clock):
        cache = ResultCache("test", ttl_seconds=60, clock=clock)

        async def failing():
            raise RuntimeError("store unavailable")

        with pytest.raises(RuntimeError):
            await cache.get_or_set("key", failing)

        assert cache.state("key") is CacheState.ABSENT

    def test_set_resets_creation_time(self, clock):
        cache = ResultCache("test", ttl_seconds=10, clock=clock)
        cache.set("key", 1)
        clock.advance(8)
        cache.set("key", 2)
        clock.advance(8)

        assert cache.get("key") == 2

    def test_clear(self, clock):
        cache = ResultCache("test", clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)

        cache.clear()

        assert len(cache) == 0
