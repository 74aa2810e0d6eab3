# contentcore/services/content_group_service.py
"""
Content group service: persisted content group definitions.

The group list is cached under a single key from cache level BASIC upwards.
"""

import logging
from typing import List, Optional

from ..models.content_types import ContentGroup
from ..repositories.content_group_repository import ContentGroupRepository
from ..runtime.cache import Cache, CacheLevel
from ..utils.validators import validate_model

logger = logging.getLogger("contentcore.services.content_group")

CACHE_KEY = "contentcore_content_groups"


class ContentGroupService:
    def __init__(self, runtime, repository: ContentGroupRepository, cache: Optional[Cache] = None):
        self._repo = repository
        self._hooks = runtime.hooks
        cache = cache if cache is not None else runtime.cache
        self._cache = cache if runtime.cache_level >= CacheLevel.BASIC else None

    async def get_all(self) -> List[ContentGroup]:
        groups = None
        if self._cache is not None:
            try:
                groups = await self._cache.get(CACHE_KEY)
            except Exception as e:
                logger.warning(f"Failed to read content groups from cache: {e}")

        if groups is None:
            groups = await self._repo.get_all()
            if self._cache is not None:
                try:
                    await self._cache.set(CACHE_KEY, groups)
                except Exception as e:
                    logger.warning(f"Failed to cache content groups: {e}")
        return groups

    async def get_by_id(self, group_id: str) -> Optional[ContentGroup]:
        if self._cache is None:
            return await self._repo.get_by_id(group_id)
        return next((g for g in await self.get_all() if g.id == group_id), None)

    async def save(self, model: ContentGroup) -> None:
        """
        Insert or update a content group.

        Raises:
            ContentValidationError: If a constraint is violated
        """
        validate_model(model)

        await self._hooks.on_before_save(model)
        await self._repo.save(model)
        await self._hooks.on_after_save(model)

        await self._remove_from_cache()

    async def delete(self, group_id: str) -> bool:
        model = await self._repo.get_by_id(group_id)
        if model is None:
            return False
        await self.delete_model(model)
        return True

    async def delete_model(self, model: ContentGroup) -> None:
        await self._hooks.on_before_delete(model)
        await self._repo.delete(model.id)
        await self._hooks.on_after_delete(model)

        await self._remove_from_cache()

    async def _remove_from_cache(self) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.remove(CACHE_KEY)
        except Exception as e:
            logger.warning(f"Failed to purge content groups from cache: {e}")
