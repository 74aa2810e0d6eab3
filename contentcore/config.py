# ============================================================================
# contentcore - Application Configuration
# ============================================================================
"""
Configuration module using Pydantic Settings.

This module defines all configuration parameters for the content runtime,
including:
- Database connection and pooling
- Cache level and cache backend
- Repository call timeouts
- Revision retention

Environment Variables:
    Every field can be overridden by an upper-case environment variable
    (e.g. ``CACHE_LEVEL=1``) or a ``.env`` file.

Usage:
    from contentcore.config import settings
    if settings.cache_level > CacheLevel.BASIC:
        ...
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .runtime.cache import CacheLevel


class Settings(BaseSettings):
    # =========================================================================
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/contentcore.db",
        description="SQLAlchemy async database URL",
    )
    db_pool_size: int = Field(default=20, description="PostgreSQL pool size")
    db_max_overflow: int = Field(default=40, description="PostgreSQL pool overflow")
    db_pool_recycle: int = Field(default=3600, description="Recycle connections after N seconds")
    debug: bool = Field(default=False, description="Echo SQL statements")

    # =========================================================================
    # CACHE SETTINGS
    # =========================================================================
    cache_level: CacheLevel = Field(
        default=CacheLevel.FULL,
        description="0 = none, 1 = minimal, 2 = basic, 3 = full",
    )
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Cache implementation used by build_cache()"
    )
    redis_url: str = Field(default="redis://redis:6379/1", description="Redis cache URL")
    cache_ttl_seconds: Optional[int] = Field(
        default=None, description="Expiration for redis cache entries (None = never)"
    )
    cache_clone_objects: bool = Field(
        default=True, description="Memory cache stores and returns deep copies"
    )

    # =========================================================================
    # CONTENT SETTINGS
    # =========================================================================
    operation_timeout: Optional[float] = Field(
        default=None, description="Seconds allowed per repository call (None = no limit)"
    )
    revisions_to_keep: int = Field(
        default=10, ge=0, description="Revisions kept per content item (0 = unlimited)"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance (imported elsewhere)
settings = Settings()
