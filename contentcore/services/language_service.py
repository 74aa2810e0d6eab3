# contentcore/services/language_service.py
"""
Language service.

Keeps the list of languages cached under a single key (when the cache level
is not NONE) and enforces the language invariants on save:

- the slug is generated from the title when missing and must be unique
- exactly one language is the default: saving a default demotes the
  previous one, and a language saved while no default exists becomes it

Usage:
    from contentcore.services.language_service import LanguageService

    languages = LanguageService(runtime, LanguageRepository(db))
    await languages.save(Language(title="English", culture="en-US"))
    default = await languages.get_default()
"""

import logging
import uuid
from typing import List, Optional

from ..models.content_types import Language
from ..repositories.language_repository import LanguageRepository
from ..runtime.cache import Cache, CacheLevel
from ..utils.text_utils import generate_slug
from ..utils.validators import ContentValidationError, validate_model

logger = logging.getLogger("contentcore.services.language")

CACHE_KEY = "contentcore_languages"


class LanguageService:
    """
    Language operations with a cached language list.

    Attributes:
        _repo: Language repository
        _hooks: Hook dispatcher from the runtime
        _cache: Cache, None when the cache level is NONE
    """

    def __init__(self, runtime, repository: LanguageRepository, cache: Optional[Cache] = None):
        self._repo = repository
        self._hooks = runtime.hooks
        cache = cache if cache is not None else runtime.cache
        self._cache = cache if runtime.cache_level != CacheLevel.NONE else None

    async def get_all(self) -> List[Language]:
        return await self._get_languages()

    async def get_by_id(self, language_id: uuid.UUID) -> Optional[Language]:
        if self._cache is None:
            return await self._repo.get_by_id(language_id)
        languages = await self._get_languages()
        return next((lang for lang in languages if lang.id == language_id), None)

    async def get_by_slug(self, slug: str) -> Optional[Language]:
        if self._cache is None:
            return await self._repo.get_by_slug(slug)
        languages = await self._get_languages()
        return next((lang for lang in languages if lang.slug == slug), None)

    async def get_default(self) -> Optional[Language]:
        if self._cache is None:
            return await self._repo.get_default()
        languages = await self._get_languages()
        return next((lang for lang in languages if lang.is_default), None)

    async def save(self, model: Language) -> None:
        """
        Insert or update a language.

        Raises:
            ContentValidationError: If a constraint is violated or the slug is taken
        """
        if model.id is None:
            model.id = uuid.uuid4()

        validate_model(model)

        model.slug = generate_slug(model.slug or model.title, hierarchical=False)
        if not model.slug:
            raise ContentValidationError("slug: The slug field is required", field="slug")

        existing = await self._repo.get_by_slug(model.slug)
        if existing is not None and existing.id != model.id:
            raise ContentValidationError("slug: The slug field must be unique", field="slug")

        if not model.is_default:
            # A language saved while there is no default becomes the default
            current = await self._repo.get_default()
            if current is None or current.id == model.id:
                model.is_default = True

        await self._hooks.on_before_save(model)
        await self._repo.save(model)
        await self._hooks.on_after_save(model)

        await self._remove_from_cache()
        logger.info(f"Saved language {model.slug} (default={model.is_default})")

    async def delete(self, language_id: uuid.UUID) -> bool:
        model = await self._repo.get_by_id(language_id)
        if model is None:
            return False
        await self.delete_model(model)
        return True

    async def delete_model(self, model: Language) -> None:
        await self._hooks.on_before_delete(model)
        await self._repo.delete(model.id)
        await self._hooks.on_after_delete(model)

        await self._remove_from_cache()

    async def _get_languages(self) -> List[Language]:
        languages = None
        if self._cache is not None:
            try:
                languages = await self._cache.get(CACHE_KEY)
            except Exception as e:
                logger.warning(f"Failed to read languages from cache: {e}")

        if languages is None:
            languages = await self._repo.get_all()
            if self._cache is not None:
                try:
                    await self._cache.set(CACHE_KEY, languages)
                except Exception as e:
                    logger.warning(f"Failed to cache languages: {e}")
        return languages

    async def _remove_from_cache(self) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.remove(CACHE_KEY)
        except Exception as e:
            logger.warning(f"Failed to purge languages from cache: {e}")
