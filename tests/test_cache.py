"""
Tests for the model caches.
"""

import pickle
from unittest.mock import AsyncMock, patch

import pytest

from contentcore.config import Settings
from contentcore.models.content import DynamicContent, RegionBag, RegionList
from contentcore.models.fields import StringField, TextField
from contentcore.runtime.cache import CacheLevel, MemoryCache, RedisCache, build_cache


def sample_model():
    model = DynamicContent(title="Cached", type_id="Article")
    model.regions["Hero"] = RegionBag(Title=StringField(value="Hero"))
    model.regions["Links"] = RegionList([TextField(value="a")], type_id="Article", region_id="Links")
    return model


class TestMemoryCache:
    """Test the in-process cache."""

    @pytest.mark.asyncio
    async def test_set_get_remove(self):
        cache = MemoryCache()
        await cache.set("key", "value")

        assert await cache.get("key") == "value"
        await cache.remove("key")
        assert await cache.get("key") is None
        await cache.remove("key")

    @pytest.mark.asyncio
    async def test_clones_objects(self):
        cache = MemoryCache()
        model = sample_model()
        await cache.set("model", model)

        model.title = "Changed"
        first = await cache.get("model")
        first.regions["Links"].append(TextField(value="b"))
        second = await cache.get("model")

        assert first.title == "Cached"
        assert len(second.regions["Links"]) == 1
        assert second.regions["Links"].region_id == "Links"
        assert second.regions["Hero"].Title.value == "Hero"

    @pytest.mark.asyncio
    async def test_without_cloning_shares_instances(self):
        cache = MemoryCache(clone_objects=False)
        model = sample_model()
        await cache.set("model", model)

        assert await cache.get("model") is model
        assert len(cache) == 1


class TestRedisCache:
    """Test the redis cache with a mocked client."""

    @pytest.mark.asyncio
    async def test_values_are_pickled_under_prefix(self):
        client = AsyncMock()
        with patch("contentcore.runtime.cache.redis.from_url", return_value=client) as from_url:
            cache = RedisCache("redis://localhost:6379/1", ttl_seconds=60)
            await cache.set("key", {"a": 1})
            await cache.remove("key")

        from_url.assert_called_once_with("redis://localhost:6379/1")
        key, data = client.set.await_args.args
        assert key == "contentcore:cache:key"
        assert pickle.loads(data) == {"a": 1}
        assert client.set.await_args.kwargs == {"ex": 60}
        client.delete.assert_awaited_once_with("contentcore:cache:key")

    @pytest.mark.asyncio
    async def test_get_round_trips_models(self):
        client = AsyncMock()
        client.get.return_value = pickle.dumps(sample_model())
        with patch("contentcore.runtime.cache.redis.from_url", return_value=client):
            cache = RedisCache("redis://localhost:6379/1")
            model = await cache.get("model")

        assert model.regions["Links"][0].value == "a"
        assert model.regions["Hero"].Title.value == "Hero"

    @pytest.mark.asyncio
    async def test_get_missing(self):
        client = AsyncMock()
        client.get.return_value = None
        with patch("contentcore.runtime.cache.redis.from_url", return_value=client):
            cache = RedisCache("redis://localhost:6379/1")
            assert await cache.get("missing") is None

    @pytest.mark.asyncio
    async def test_close(self):
        client = AsyncMock()
        client.get.return_value = None
        with patch("contentcore.runtime.cache.redis.from_url", return_value=client):
            cache = RedisCache("redis://localhost:6379/1")
            await cache.get("key")
            await cache.close()

        client.close.assert_awaited_once()


class TestBuildCache:
    """Test cache construction from settings."""

    def test_memory_backend(self):
        cache = build_cache(Settings(cache_backend="memory", cache_clone_objects=False))

        assert isinstance(cache, MemoryCache)
        assert cache._clone is False

    def test_redis_backend(self):
        cache = build_cache(Settings(cache_backend="redis", redis_url="redis://cache:6379/2", cache_ttl_seconds=30))

        assert isinstance(cache, RedisCache)
        assert cache._ttl == 30

    def test_no_cache_level(self):
        assert build_cache(Settings(cache_level=CacheLevel.NONE)) is None
