"""Tests for game_modules/cache_store.py: memory backend, mocked Redis, factory."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from game_modules.cache_store import (
    CacheStore,
    MemoryCacheStore,
    RedisCacheStore,
    create_cache_store,
)


class TestCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            CacheStore()  # type: ignore[abstract]


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_miss(self, cache):
        assert await cache.get("nothing") == (None, False)

    @pytest.mark.asyncio
    async def test_set_get(self, cache):
        assert await cache.set("k", {"a": 1}, 60) is True
        assert await cache.get("k") == ({"a": 1}, True)

    @pytest.mark.asyncio
    async def test_expiry_is_a_miss(self, cache, clock):
        await cache.set("k", "v", 60)
        clock.advance(59)
        assert await cache.get("k") == ("v", True)
        clock.advance(1)
        assert await cache.get("k") == (None, False)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_zero_ttl_never_expires(self, cache, clock):
        await cache.set("k", "v", 0)
        clock.advance(10 * 365 * 24 * 3600)
        assert await cache.get("k") == ("v", True)

    @pytest.mark.asyncio
    async def test_overwrite_resets_ttl(self, cache, clock):
        await cache.set("k", "old", 10)
        clock.advance(9)
        await cache.set("k", "new", 10)
        clock.advance(9)
        assert await cache.get("k") == ("new", True)

    @pytest.mark.asyncio
    async def test_delete(self, cache):
        await cache.set("k", "v", 0)
        await cache.delete("k")
        await cache.delete("k")
        assert await cache.get("k") == (None, False)

    @pytest.mark.asyncio
    async def test_set_sweeps_expired_entries(self, cache, clock):
        for i in range(1000):
            await cache.set(f"profile:{i}", i, 300)
        await cache.set("alias:gaben", "1", 0)
        assert len(cache) == 1001
        clock.advance(3600)
        await cache.set("profile:new", "v", 300)
        assert len(cache) == 2
        assert await cache.get("alias:gaben") == ("1", True)

    @pytest.mark.asyncio
    async def test_sweep_runs_at_most_once_per_interval(self, clock):
        store = MemoryCacheStore(clock=clock, sweep_interval=60)
        await store.set("a", 1, 10)
        clock.advance(30)
        await store.set("b", 2, 10)
        assert len(store) == 2
        clock.advance(30)
        await store.set("c", 3, 10)
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_explicit_sweep(self, cache, clock):
        await cache.set("a", 1, 10)
        await cache.set("b", 2, 100)
        clock.advance(10)
        assert cache.sweep() == 1
        assert len(cache) == 1


@pytest.fixture
def redis_client():
    pytest.importorskip("redis")
    client = AsyncMock()
    with patch("redis.asyncio.from_url", return_value=client) as from_url:
        yield client, from_url


class TestRedisCacheStore:
    def test_connects(self, redis_client):
        _, from_url = redis_client
        RedisCacheStore("redis://localhost:6379/0")
        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)

    @pytest.mark.asyncio
    async def test_get(self, redis_client):
        client, _ = redis_client
        client.get.return_value = json.dumps({"steamid": "1"})
        store = RedisCacheStore("redis://localhost")
        assert await store.get("k") == ({"steamid": "1"}, True)

    @pytest.mark.asyncio
    async def test_get_miss(self, redis_client):
        client, _ = redis_client
        client.get.return_value = None
        assert await RedisCacheStore("redis://localhost").get("k") == (None, False)

    @pytest.mark.asyncio
    async def test_get_corrupt_value(self, redis_client):
        client, _ = redis_client
        client.get.return_value = "{not json"
        assert await RedisCacheStore("redis://localhost").get("k") == (None, False)

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, redis_client):
        client, _ = redis_client
        client.set.return_value = True
        assert await RedisCacheStore("redis://localhost").set("k", "v", 300) is True
        client.set.assert_awaited_once_with("k", '"v"', ex=300)

    @pytest.mark.asyncio
    async def test_set_without_expiry(self, redis_client):
        client, _ = redis_client
        await RedisCacheStore("redis://localhost").set("k", "v", 0)
        client.set.assert_awaited_once_with("k", '"v"', ex=None)

    @pytest.mark.asyncio
    async def test_errors_count_as_miss(self, redis_client):
        from redis.exceptions import ConnectionError as RedisConnectionError

        client, _ = redis_client
        client.get.side_effect = RedisConnectionError("down")
        client.set.side_effect = RedisConnectionError("down")
        store = RedisCacheStore("redis://localhost")
        assert await store.get("k") == (None, False)
        assert await store.set("k", "v", 10) is False


class TestCreateCacheStore:
    def test_default_memory(self):
        assert isinstance(create_cache_store(), MemoryCacheStore)
        assert isinstance(create_cache_store("MEMORY"), MemoryCacheStore)

    def test_redis_requires_url(self):
        with pytest.raises(ValueError, match="REDIS_URL"):
            create_cache_store("redis")

    def test_redis(self, redis_client):
        assert isinstance(create_cache_store("redis", "redis://localhost"), RedisCacheStore)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_cache_store("memcached")
