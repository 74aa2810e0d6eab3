# contentcore/services/content_service.py
"""
Content service: the application facing entry point for content.

Adds policy on top of the ContentRepository:
- models are created through the ContentFactory
- reads go through the cache (cache level FULL only) and re-run field
  initializers on cache hits
- saves validate the model, generate and check slugs, run hooks, persist
  and purge the cache
- deletes run hooks, delete with cascade and purge the cache

Cache Keys:
    {id}                 static models
    DynamicContent_{id}  dynamic models
    ContentId_{slug}     slug -> id index of routed content

Only the default language is cached. Models read in other languages always
come from the database.

Usage:
    service = ContentService(runtime, repository, factory, language_service)

    article = await service.create(ArticlePage)
    article.title = "Hello"
    await service.save(article)

    article = await service.get_by_id(article.id, model_cls=ArticlePage)
"""

import logging
import uuid
from typing import Any, List, Optional, Type

from ..models.content import Content, DynamicContent, Revision, RoutedContent
from ..repositories.content_repository import ContentRepository
from ..runtime.builder import get_content_type_id
from ..runtime.cache import Cache, CacheLevel
from ..utils.text_utils import generate_slug
from ..utils.validators import ContentValidationError, validate_model
from .content_factory import ContentFactory
from .language_service import LanguageService

logger = logging.getLogger("contentcore.services.content")


class ContentService:
    """
    Content operations with caching, validation and hooks.

    Attributes:
        _runtime: ContentRuntime with registries and hooks
        _repo: Content repository
        _factory: Content factory
        _languages: Language service used to resolve the default language
        _cache: Cache, None unless the cache level is FULL
    """

    def __init__(
        self,
        runtime,
        repository: ContentRepository,
        factory: ContentFactory,
        language_service: LanguageService,
        cache: Optional[Cache] = None,
    ):
        self._runtime = runtime
        self._repo = repository
        self._factory = factory
        self._languages = language_service
        cache = cache if cache is not None else runtime.cache
        self._cache = cache if runtime.cache_level > CacheLevel.BASIC else None

    # =========================================================================
    # CREATE & READ
    # =========================================================================

    async def create(self, model_cls: Type[Content] = DynamicContent, type_id: Optional[str] = None) -> Optional[Content]:
        """
        Create a new, initialized model.

        Args:
            model_cls: Requested model class
            type_id: Content type id, defaults to the @content_type declaration of model_cls

        Returns:
            The model, or None if the content type is unknown or incompatible
        """
        if type_id is None:
            type_id = get_content_type_id(model_cls)

        content_type = self._runtime.content_types.get_by_id(type_id)
        if content_type is None:
            logger.debug(f"Cannot create {model_cls.__name__}, unknown content type '{type_id}'")
            return None
        return await self._factory.create(content_type, model_cls)

    async def get_by_id(
        self,
        content_id: uuid.UUID,
        language_id: Optional[uuid.UUID] = None,
        model_cls: Type[Content] = DynamicContent,
    ) -> Optional[Content]:
        """
        Get the content with the given id.

        Args:
            content_id: The content id
            language_id: Language to read, defaults to the default language
            model_cls: Requested model class

        Returns:
            The model, or None if not found or not an instance of model_cls
        """
        default_id = await self._default_language_id()
        if language_id is None:
            language_id = default_id
        use_cache = self._cache is not None and language_id == default_id

        model = None
        if use_cache:
            model = await self._cache_get(self._cache_key(content_id, issubclass(model_cls, DynamicContent)))

        if model is not None:
            content_type = self._runtime.content_types.get_by_id(model.type_id)
            await self._initialize(model, content_type)
        else:
            model = await self._repo.get_by_id(content_id, language_id, model_cls)
            if model is not None:
                await self._on_load(model, use_cache)

        if model is not None and isinstance(model, model_cls):
            return model
        return None

    async def get_by_slug(
        self,
        slug: str,
        language_id: Optional[uuid.UUID] = None,
        model_cls: Type[Content] = DynamicContent,
    ) -> Optional[Content]:
        """
        Get routed content by slug.

        Without a language the model is read in the language whose
        translation owns the slug.
        """
        content_id = None
        cached = False
        if self._cache is not None and language_id is None:
            content_id = await self._cache_get(f"ContentId_{slug}")
            cached = content_id is not None
        if content_id is None:
            match = await self._repo.find_by_slug(slug, language_id)
            if match is None:
                return None
            content_id, language_id = match

        model = await self.get_by_id(content_id, language_id, model_cls)
        if cached and (model is None or getattr(model, "slug", None) != slug):
            # Stale slug index entry, resolve the slug again
            await self._cache_remove(f"ContentId_{slug}")
            match = await self._repo.find_by_slug(slug)
            model = await self.get_by_id(match[0], match[1], model_cls) if match else None
        return model

    # =========================================================================
    # SAVE & DELETE
    # =========================================================================

    async def save(self, model: Content, language_id: Optional[uuid.UUID] = None) -> None:
        """
        Validate and save a model.

        Raises:
            ContentValidationError: If a constraint is violated or the slug is taken
            FieldTypeMismatchError: If a field value is not its registered class
        """
        if model.id is None:
            model.id = uuid.uuid4()

        if language_id is None:
            language_id = await self._default_language_id()
        if language_id is None:
            raise ContentValidationError("language_id: No default language available", field="language_id")

        if self._runtime.content_types.get_by_id(model.type_id) is None:
            raise ContentValidationError(f"type_id: Unknown content type '{model.type_id}'", field="type_id")

        validate_model(model)

        if isinstance(model, RoutedContent):
            if model.slug and model.slug.strip():
                model.slug = generate_slug(model.slug)
            else:
                model.slug = generate_slug(model.navigation_title or model.title)
            if not model.slug:
                raise ContentValidationError("slug: The slug field is required", field="slug")
            if await self._repo.is_slug_taken(model.slug, model.id, language_id):
                raise ContentValidationError("slug: The slug field must be unique", field="slug")

        await self._runtime.hooks.on_before_save(model)
        await self._repo.save(model, language_id)
        await self._runtime.hooks.on_after_save(model)

        await self._remove_from_cache(model)
        logger.info(f"Saved content {model.id} ({model.type_id})")

    async def delete(self, content_id: uuid.UUID) -> bool:
        """
        Delete the content with the given id.

        Returns:
            True if the content existed
        """
        model = await self.get_by_id(content_id, model_cls=Content)
        if model is None:
            return False
        await self.delete_model(model)
        return True

    async def delete_model(self, model: Content) -> None:
        await self._runtime.hooks.on_before_delete(model)
        await self._repo.delete(model.id)
        await self._runtime.hooks.on_after_delete(model)

        await self._remove_from_cache(model)
        logger.info(f"Deleted content {model.id}")

    # =========================================================================
    # REVISIONS
    # =========================================================================

    async def create_revision(self, content_id: uuid.UUID) -> Optional[uuid.UUID]:
        return await self._repo.create_revision(content_id)

    async def get_revisions(self, content_id: uuid.UUID) -> List[Revision]:
        return await self._repo.get_revisions(content_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _default_language_id(self) -> Optional[uuid.UUID]:
        language = await self._languages.get_default()
        return language.id if language else None

    async def _initialize(self, model: Content, content_type) -> None:
        if content_type is None:
            return
        if isinstance(model, DynamicContent):
            await self._factory.init_dynamic(model, content_type)
        else:
            await self._factory.init(model, content_type)

    async def _on_load(self, model: Content, use_cache: bool) -> None:
        await self._initialize(model, self._runtime.content_types.get_by_id(model.type_id))
        await self._runtime.hooks.on_load(model)

        if not use_cache:
            return
        await self._cache_set(self._cache_key(model.id, isinstance(model, DynamicContent)), model)
        if isinstance(model, RoutedContent) and model.slug:
            await self._cache_set(f"ContentId_{model.slug}", model.id)

    @staticmethod
    def _cache_key(content_id: uuid.UUID, dynamic: bool) -> str:
        return f"DynamicContent_{content_id}" if dynamic else str(content_id)

    async def _remove_from_cache(self, model: Content) -> None:
        await self._cache_remove(str(model.id))
        await self._cache_remove(f"DynamicContent_{model.id}")
        if isinstance(model, RoutedContent) and model.slug:
            await self._cache_remove(f"ContentId_{model.slug}")

    async def _cache_get(self, key: str) -> Optional[Any]:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set(key, value)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    async def _cache_remove(self, key: str) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.remove(key)
        except Exception as e:
            logger.warning(f"Cache purge failed for {key}: {e}")
