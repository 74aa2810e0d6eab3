# contentcore/runtime/app.py
"""
Content runtime: the single initialization phase of contentcore.

ContentRuntime bundles every registry, the hook dispatcher, the settings and
the optional cache. Applications build one runtime at startup, register
field types, content groups, content types and model classes, then call
``freeze()``. Services receive the runtime by reference; nothing reads
registries from module level state.

Usage:
    from contentcore.runtime.app import ContentRuntime

    runtime = ContentRuntime.from_settings()
    runtime.register_standard_fields()
    runtime.content_groups.register(ContentGroup(id="page", title="Page"))
    runtime.builder.build(ArticlePage)
    runtime.freeze()
"""

import logging
from typing import Callable, Optional, Type

from ..config import Settings, settings as default_settings
from ..models.content import DynamicContent
from ..models.content_types import ContentType
from ..models.fields import STANDARD_FIELDS, FieldContext
from .cache import Cache, CacheLevel, build_cache
from .hooks import HookDispatcher
from .registry import (
    ContentGroupRegistry,
    ContentTypeRegistry,
    FieldTypeRegistry,
    ModelTypeRegistry,
)

logger = logging.getLogger("contentcore.runtime")


class ContentRuntime:
    """
    Registries and shared collaborators of the content services.

    Attributes:
        settings: Runtime settings (cache level, timeouts, revisions)
        field_types: Field type registry
        content_types: Content type registry
        content_groups: Content group registry
        model_types: Model class bindings
        hooks: Lifecycle hook dispatcher
        cache: Optional cache shared by the services
        context_factory: Callable opening a new FieldContext for field initializers
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[Cache] = None,
        context_factory: Optional[Callable[[], FieldContext]] = None,
    ):
        self.settings = settings or default_settings
        self.field_types = FieldTypeRegistry()
        self.content_types = ContentTypeRegistry()
        self.content_groups = ContentGroupRegistry()
        self.model_types = ModelTypeRegistry()
        self.hooks = HookDispatcher()
        self.cache = cache
        self.context_factory = context_factory or FieldContext
        self._frozen = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "ContentRuntime":
        """Create a runtime with the cache configured in settings."""
        settings = settings or default_settings
        return cls(settings=settings, cache=build_cache(settings), **kwargs)

    @property
    def cache_level(self) -> CacheLevel:
        return CacheLevel(self.settings.cache_level)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def builder(self):
        from .builder import ContentTypeBuilder

        return ContentTypeBuilder(self)

    def register_standard_fields(self) -> None:
        for field_class in STANDARD_FIELDS:
            self.field_types.register(field_class)

    def freeze(self) -> None:
        """End the initialization phase. Registrations raise RegistryError afterwards."""
        self.field_types.freeze()
        self.content_types.freeze()
        self.content_groups.freeze()
        self.model_types.freeze()
        self.hooks.freeze()
        self._frozen = True
        logger.info(
            f"Content runtime frozen: {len(self.field_types)} field types, "
            f"{len(self.content_groups)} groups, {len(self.content_types)} content types"
        )

    def resolve_model_type(self, content_type: ContentType, model_cls: Type = DynamicContent) -> Optional[Type]:
        """
        Resolve the concrete model class for instances of a content type.

        A requested dynamic model is always used as is. Otherwise the class
        bound to the content type (or its group) is used, provided it is the
        requested class or a subclass of it. Types without a bound class fall
        back to DynamicContent when the requested class is one of its bases.

        Returns:
            The class to instantiate, or None when the bound class is
            incompatible with the requested one
        """
        if issubclass(model_cls, DynamicContent):
            return model_cls

        type_name = content_type.type_name
        if not type_name:
            group = self.content_groups.get_by_id(content_type.group)
            type_name = group.type_name if group else None

        binding = self.model_types.get_by_id(type_name)
        if binding is not None:
            if issubclass(binding.model_cls, model_cls):
                return binding.model_cls
            return None

        if issubclass(DynamicContent, model_cls):
            return DynamicContent
        return None
