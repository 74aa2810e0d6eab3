# contentcore/runtime/__init__.py
"""
Runtime package for contentcore: registries, hooks and the model cache.

ContentRuntime lives in contentcore.runtime.app and is not imported here,
since it depends on contentcore.config which in turn uses CacheLevel.
"""

from .cache import Cache, CacheLevel, MemoryCache, RedisCache
from .hooks import HookDispatcher, HookEvent
from .registry import (
    ContentGroupRegistry,
    ContentTypeRegistry,
    FieldTypeRegistry,
    ModelTypeRegistry,
    RegistryError,
)

__all__ = [
    "Cache",
    "CacheLevel",
    "MemoryCache",
    "RedisCache",
    "HookDispatcher",
    "HookEvent",
    "ContentGroupRegistry",
    "ContentTypeRegistry",
    "FieldTypeRegistry",
    "ModelTypeRegistry",
    "RegistryError",
]
