"""
Unit tests for the LRU cache store in social.graze.lodestone.model.cache

Covers hit/miss behaviour, capacity-bound eviction order, lazy expiry, the
zero-TTL "never cache" rule, concurrent access and metrics emission.
"""

import asyncio
from unittest.mock import Mock

import pytest

from social.graze.lodestone.model.cache import CacheEntry, CacheStore


class TestCacheEntry:
    def test_not_expired_before_deadline(self):
        entry = CacheEntry(data=b"{}", expires_at=100.0)
        assert entry.expired(99.0) is False
        assert entry.expired(100.0) is False

    def test_expired_after_deadline(self):
        entry = CacheEntry(data=b"{}", expires_at=100.0)
        assert entry.expired(100.5) is True


class TestCacheStore:
    """Test suite for CacheStore."""

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            CacheStore("test", 0)

    @pytest.mark.asyncio
    async def test_get_missing_key(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        assert await cache.get("missing") == (None, False)

    @pytest.mark.asyncio
    async def test_put_then_get(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        await cache.put("key", b'{"a":1}', 60)
        assert await cache.get("key") == (b'{"a":1}', True)

    @pytest.mark.asyncio
    async def test_zero_ttl_is_never_stored(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        await cache.put("key", b"{}", 0)
        assert await cache.get("key") == (None, False)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self, fake_clock):
        """Inserting capacity+1 keys evicts exactly the oldest one."""
        cache = CacheStore("test", 3, clock=fake_clock)
        for key in ("a", "b", "c"):
            await cache.put(key, key.encode(), 60)

        await cache.put("d", b"d", 60)

        assert len(cache) == 3
        assert await cache.get("a") == (None, False)
        for key in ("b", "c", "d"):
            assert await cache.get(key) == (key.encode(), True)

    @pytest.mark.asyncio
    async def test_get_refreshes_recency(self, fake_clock):
        cache = CacheStore("test", 2, clock=fake_clock)
        await cache.put("a", b"a", 60)
        await cache.put("b", b"b", 60)

        await cache.get("a")
        await cache.put("c", b"c", 60)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    @pytest.mark.asyncio
    async def test_put_existing_key_refreshes_recency(self, fake_clock):
        cache = CacheStore("test", 2, clock=fake_clock)
        await cache.put("a", b"a", 60)
        await cache.put("b", b"b", 60)

        await cache.put("a", b"a2", 60)
        await cache.put("c", b"c", 60)

        assert await cache.get("a") == (b"a2", True)
        assert "b" not in cache

    @pytest.mark.asyncio
    async def test_expired_entry_misses_but_is_not_purged(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        await cache.put("key", b"{}", 60)

        fake_clock.advance(61)

        assert await cache.get("key") == (None, False)
        assert "key" in cache

    @pytest.mark.asyncio
    async def test_expired_entry_is_overwritten(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        await cache.put("key", b"old", 60)
        fake_clock.advance(61)

        await cache.put("key", b"new", 60)

        assert await cache.get("key") == (b"new", True)
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_entry_live_until_ttl(self, fake_clock):
        cache = CacheStore("test", 4, clock=fake_clock)
        await cache.put("key", b"{}", 120)
        fake_clock.advance(119)
        assert await cache.get("key") == (b"{}", True)

    @pytest.mark.asyncio
    async def test_concurrent_access_respects_capacity(self, fake_clock):
        cache = CacheStore("test", 16, clock=fake_clock)

        async def writer(i: int) -> None:
            await cache.put(f"key-{i}", str(i).encode(), 60)
            await cache.get(f"key-{i // 2}")

        await asyncio.gather(*(writer(i) for i in range(100)))

        assert len(cache) == 16

    @pytest.mark.asyncio
    async def test_emits_hit_and_miss_metrics(self, fake_clock):
        metrics_client = Mock()
        cache = CacheStore("did", 4, clock=fake_clock, metrics_client=metrics_client)

        await cache.get("missing")
        await cache.put("key", b"{}", 60)
        await cache.get("key")

        metrics_client.increment.assert_any_call(
            "lodestone.cache.miss", 1, tag_dict={"cache": "did"}
        )
        metrics_client.increment.assert_any_call(
            "lodestone.cache.hit", 1, tag_dict={"cache": "did"}
        )
