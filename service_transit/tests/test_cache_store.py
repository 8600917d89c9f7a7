"""
Unit tests for the transit cache stores.
"""

import json
from typing import List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import TypeAdapter
from redis.exceptions import ConnectionError as RedisConnectionError

from service_transit.app.caching.cache_store import (
    MemoryCacheStore,
    RedisCacheStore,
    create_cache_store,
)
from service_transit.app.normalization.models import NormalizedRoute, RouteType
from shared.errors import CacheUnavailable
from shared.metrics import MetricsCollector
from shared.test_helpers import FakeClock


class TestMemoryCacheStore:
    """Test cases for MemoryCacheStore."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("transit")

    @pytest.fixture
    def cache(self, clock, metrics):
        return MemoryCacheStore(60, metrics=metrics, clock=clock)

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache):
        value = {"data": "test"}
        await cache.set("test-key", value)

        assert await cache.get("test-key") == value

    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self, cache):
        assert await cache.get("non-existent-key") is None

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, cache, clock):
        await cache.set("expiring-key", "test-value")

        clock.advance(59)
        assert await cache.get("expiring-key") == "test-value"

        clock.advance(1)
        assert await cache.get("expiring-key") is None

    @pytest.mark.asyncio
    async def test_overwrite_resets_expiry(self, cache, clock):
        await cache.set("key", "first")
        clock.advance(50)
        await cache.set("key", "second")
        clock.advance(50)

        assert await cache.get("key") == "second"

    @pytest.mark.asyncio
    async def test_flush_all(self, cache):
        await cache.set("key1", "value1")
        await cache.set("key2", "value2")

        assert await cache.get("key1") == "value1"
        assert await cache.get("key2") == "value2"

        await cache.flush_all()

        assert await cache.get("key1") is None
        assert await cache.get("key2") is None

    @pytest.mark.asyncio
    async def test_hit_counts_hit_only(self, cache):
        await cache.set("key", "value")

        await cache.get("key")

        assert cache.hits == 1
        assert cache.misses == 0

    @pytest.mark.asyncio
    async def test_miss_counts_miss_only(self, cache, clock):
        await cache.get("absent")
        await cache.set("key", "value")
        clock.advance(60)
        await cache.get("key")

        assert cache.hits == 0
        assert cache.misses == 2

    @pytest.mark.asyncio
    async def test_hits_and_misses_are_recorded_per_key(self, cache, metrics):
        await cache.set("routes-cache", ["route"])
        await cache.get("routes-cache")
        await cache.get("routes-cache")
        await cache.get("dir-1-cache")

        assert metrics.sample("cache_hits_total", {"key": "routes-cache"}) == 2
        assert metrics.sample("cache_misses_total", {"key": "dir-1-cache"}) == 1
        assert metrics.sample("cache_misses_total", {"key": "routes-cache"}) is None

    @pytest.mark.asyncio
    async def test_stats_ignore_expired_entries(self, cache, clock):
        await cache.set("old", 1)
        clock.advance(30)
        await cache.set("new", 2)
        clock.advance(31)

        stats = await cache.stats()

        assert stats["keys"] == 1

    @pytest.mark.asyncio
    async def test_set_emits_stats_snapshot(self, cache, metrics):
        await cache.get("missing")

        with patch.object(cache, "logger") as mock_logger:
            await cache.set("key", "value")

        mock_logger.info.assert_called_once_with("Cache stats", keys=1, hits=0, misses=1)
        assert metrics.sample("cache_keys") == 1

    @pytest.mark.asyncio
    async def test_hit_and_miss_are_logged_with_key(self, cache):
        await cache.set("key", "value")

        with patch.object(cache, "logger") as mock_logger:
            await cache.get("key")
            await cache.get("other")

        mock_logger.info.assert_any_call("Cache Hit", key="key")
        mock_logger.info.assert_any_call("Cache Miss", key="other")

    @pytest.mark.asyncio
    async def test_decode_applies_on_hit(self, cache):
        await cache.set("routes-cache", [{"route": "1", "type": "Bus"}])

        routes = await cache.get("routes-cache", TypeAdapter(List[NormalizedRoute]).validate_python)

        assert routes == [NormalizedRoute(route="1", type=RouteType.BUS)]
        assert cache.hits == 1

    @pytest.mark.asyncio
    async def test_entry_rejected_by_decode_is_a_miss(self, cache):
        await cache.set("routes-cache", [{"rt": "1"}])

        with patch.object(cache, "logger") as mock_logger:
            result = await cache.get("routes-cache", TypeAdapter(List[NormalizedRoute]).validate_python)

        assert result is None
        assert cache.hits == 0
        assert cache.misses == 1
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_none_can_not_be_cached(self, cache):
        with pytest.raises(ValueError):
            await cache.set("key", None)

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            MemoryCacheStore(0)


class TestRedisCacheStore:
    """Test cases for RedisCacheStore with a mocked redis client."""

    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get = AsyncMock()
        client.set = AsyncMock()
        client.delete = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        client.close = AsyncMock()

        async def _scan_iter(match=None):
            for key in ["transit:routes-cache"]:
                yield key

        client.scan_iter = _scan_iter
        return client

    @pytest.fixture
    def cache(self, redis_client):
        return RedisCacheStore("redis://localhost:6379/0", 30, client=redis_client)

    @pytest.mark.asyncio
    async def test_set_writes_json_with_ttl(self, cache, redis_client):
        route = NormalizedRoute(route="1", name="Bronzeville", color="#336633", type=RouteType.BUS)

        await cache.set("routes-cache", [route])

        redis_client.set.assert_called_once()
        key, payload = redis_client.set.call_args.args
        assert key == "transit:routes-cache"
        assert redis_client.set.call_args.kwargs == {"ex": 30}
        assert json.loads(payload) == [
            {"route": "1", "name": "Bronzeville", "color": "#336633", "type": "Bus"}
        ]

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, cache, redis_client):
        redis_client.get.return_value = json.dumps(["North", "South"])

        assert await cache.get("dir-1-cache") == ["North", "South"]
        redis_client.get.assert_called_once_with("transit:dir-1-cache")
        assert cache.hits == 1

    @pytest.mark.asyncio
    async def test_get_missing_is_miss(self, cache, redis_client):
        redis_client.get.return_value = None

        assert await cache.get("dir-1-cache") is None
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_malformed_payload_is_miss(self, cache, redis_client):
        redis_client.get.return_value = "{not json"

        assert await cache.get("dir-1-cache") is None
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_redis_failure_raises_cache_unavailable(self, cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(CacheUnavailable):
            await cache.get("dir-1-cache")
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_flush_deletes_prefixed_keys(self, cache, redis_client):
        await cache.flush_all()

        redis_client.delete.assert_called_once_with("transit:routes-cache")

    @pytest.mark.asyncio
    async def test_stats_count_prefixed_keys(self, cache):
        stats = await cache.stats()

        assert stats == {"keys": 1, "hits": 0, "misses": 0}


class TestCreateCacheStore:
    """Test cases for backend selection."""

    def test_memory_backend(self):
        assert isinstance(create_cache_store("memory", 60), MemoryCacheStore)

    def test_redis_backend(self):
        store = create_cache_store("redis", 60, redis_url="redis://localhost:6379/0")
        assert isinstance(store, RedisCacheStore)

    def test_redis_backend_requires_url(self):
        with pytest.raises(ValueError):
            create_cache_store("redis", 60)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_cache_store("memcached", 60)
