"""
Process-wide model cache for contentcore.

The cache is a secondary, rebuildable copy of persisted content. Services use
it as a read-through cache and purge entries after every write; nothing ever
treats it as the source of truth.

Two implementations are provided:
- MemoryCache: in-process dictionary, optionally storing deep copies
- RedisCache: shared cache backed by redis.asyncio, values pickled

Usage:
    from contentcore.runtime.cache import MemoryCache

    cache = MemoryCache()
    await cache.set("key", model)
    model = await cache.get("key")
    await cache.remove("key")
"""

import asyncio
import copy
import logging
import pickle
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, Optional

import redis.asyncio as redis

logger = logging.getLogger("contentcore.cache")


class CacheLevel(IntEnum):
    """
    How aggressively services use an injected cache.

    NONE bypasses every cache, MINIMAL only caches small lookup lists
    (languages), BASIC adds definitions and FULL caches content models.
    """

    NONE = 0
    MINIMAL = 1
    BASIC = 2
    FULL = 3


class Cache(ABC):
    """Async key/value cache interface."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value or None when missing."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a value under the given key."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove the key, ignoring missing keys."""


class MemoryCache(Cache):
    """
    Dictionary backed cache living in the current process.

    When ``clone_objects`` is enabled values are deep copied both on the way
    in and on the way out, so callers mutating a model they got from the
    cache never change the cached instance.
    """

    def __init__(self, clone_objects: bool = True):
        self._items: Dict[str, Any] = {}
        self._clone = clone_objects

    async def get(self, key: str) -> Optional[Any]:
        value = self._items.get(key)
        if value is not None and self._clone:
            return copy.deepcopy(value)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._items[key] = copy.deepcopy(value) if self._clone else value

    async def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class RedisCache(Cache):
    """
    Redis backed cache shared between processes.

    Attributes:
        _redis: Async Redis client (created lazily per event loop)
        _prefix: Prefix applied to every key

    Key Format:
        contentcore:cache:{key}
    """

    def __init__(self, url: str, ttl_seconds: Optional[int] = None, prefix: str = "contentcore:cache:"):
        self._url = url
        self._ttl = ttl_seconds
        self._prefix = prefix
        self._redis: Optional[redis.Redis] = None
        self._redis_loop: Optional[asyncio.AbstractEventLoop] = None

    async def _get_redis(self) -> redis.Redis:
        loop = asyncio.get_running_loop()
        if self._redis is None or self._redis_loop is not loop:
            # A client bound to a closed loop cannot be closed, just replace it
            self._redis_loop = loop
            self._redis = redis.from_url(self._url)
        return self._redis

    async def get(self, key: str) -> Optional[Any]:
        r = await self._get_redis()
        data = await r.get(f"{self._prefix}{key}")
        if data is None:
            return None
        return pickle.loads(data)

    async def set(self, key: str, value: Any) -> None:
        r = await self._get_redis()
        await r.set(f"{self._prefix}{key}", pickle.dumps(value), ex=self._ttl)

    async def remove(self, key: str) -> None:
        r = await self._get_redis()
        await r.delete(f"{self._prefix}{key}")

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.close()
            self._redis = None
            logger.info("Redis cache connection closed")


def build_cache(settings) -> Optional[Cache]:
    """
    Build the cache configured in settings.

    Returns None when the cache level is NONE, since no service would use it.
    """
    if settings.cache_level == CacheLevel.NONE:
        return None
    if settings.cache_backend == "redis":
        logger.info("Using redis cache")
        return RedisCache(settings.redis_url, ttl_seconds=settings.cache_ttl_seconds)
    return MemoryCache(clone_objects=settings.cache_clone_objects)
