"""
Content type declaration from model classes.

Statically typed content is declared with the ``@content_type`` decorator on
a Content subclass. The builder derives the ContentType definition from the
class annotations and registers both the definition and the model binding:

    - ``body: HtmlField``                 simple region (one field, id "Default")
    - ``links: List[StringField]``        simple collection region
    - ``hero: Hero`` (a BaseModel)        complex region, one field per FieldBase attribute
    - ``teasers: List[Teaser]``           complex collection region

Attributes inherited from the content base classes (title, slug, blocks...)
are never regions.

Usage:
    @content_type(title="Article", group="page")
    class ArticlePage(RoutedContent):
        body: HtmlField = Field(default_factory=HtmlField)
        links: List[StringField] = Field(default_factory=list)

    runtime.builder.build(ArticlePage)
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Type

from pydantic import BaseModel

from ..models.content import (
    Block,
    BlockContent,
    CategorizedContent,
    Content,
    DynamicContent,
    RoutedContent,
    TaggedContent,
    Taxonomy,
)
from ..models.content_types import ContentType, ContentTypeField, ContentTypeRegion
from ..models.fields import FieldBase
from ..utils.text_utils import generate_internal_id
from .registry import RegistryError

# Field id used for the single field of a simple region
DEFAULT_FIELD_ID = "Default"

_BASE_ATTRIBUTES = frozenset(
    name
    for base in (RoutedContent, BlockContent, CategorizedContent, TaggedContent, DynamicContent)
    for name in base.model_fields
)


@dataclass(frozen=True)
class ContentTypeInfo:
    """Declaration attached to a class by the content_type decorator."""

    id: Optional[str]
    title: Optional[str]
    group: Optional[str]
    use_blocks: bool


def content_type(
    id: Optional[str] = None,
    title: Optional[str] = None,
    group: Optional[str] = None,
    use_blocks: bool = True,
) -> Callable[[type], type]:
    """Mark a Content subclass as a content type declaration."""

    def decorator(cls: type) -> type:
        cls.__content_type__ = ContentTypeInfo(id=id, title=title, group=group, use_blocks=use_blocks)
        return cls

    return decorator


def get_content_type_info(model_cls: type) -> Optional[ContentTypeInfo]:
    """Declaration of the class itself, never one inherited from a base."""
    return model_cls.__dict__.get("__content_type__")


def get_content_type_id(model_cls: type) -> Optional[str]:
    info = get_content_type_info(model_cls)
    if info is None:
        return None
    return info.id or generate_internal_id(info.title) or model_cls.__name__


class ContentTypeBuilder:
    """Builds and registers content types from decorated model classes."""

    def __init__(self, runtime):
        self._runtime = runtime

    def build(self, model_cls: Type[Content]) -> ContentType:
        """
        Build the ContentType of a decorated class and register it.

        Raises:
            RegistryError: If the class is not decorated, has no group, or
                uses a field class that is not registered
        """
        info = get_content_type_info(model_cls)
        if info is None:
            raise RegistryError(f"{model_cls.__name__} is not decorated with @content_type")
        if not info.group:
            raise RegistryError(f"Content type {model_cls.__name__} has no group")

        binding = self._runtime.model_types.register(model_cls)
        definition = ContentType(
            id=get_content_type_id(model_cls),
            title=info.title or model_cls.__name__,
            group=info.group,
            type_name=binding.type_name,
            use_blocks=info.use_blocks,
            regions=list(self._regions(model_cls)),
        )
        return self._runtime.content_types.register(definition)

    def build_all(self, model_classes: Iterable[Type[Content]]) -> List[ContentType]:
        return [self.build(model_cls) for model_cls in model_classes]

    def _regions(self, model_cls: type) -> Iterable[ContentTypeRegion]:
        binding = self._runtime.model_types.binding_for(model_cls)

        for name, info in model_cls.model_fields.items():
            if name in _BASE_ATTRIBUTES:
                continue
            accessor = binding.get(name)
            shape = accessor.element_type if accessor.is_list else accessor.value_type
            if shape is None or not issubclass(shape, BaseModel) or issubclass(shape, (Block, Taxonomy)):
                continue

            region_id = info.alias or name
            if issubclass(shape, FieldBase):
                fields = [self._field(DEFAULT_FIELD_ID, info.title, shape)]
            else:
                shape_binding = self._runtime.model_types.binding_for(shape)
                fields = []
                for field_name, field_info in shape.model_fields.items():
                    field_class = shape_binding.get(field_name).value_type
                    if field_class is not None and issubclass(field_class, FieldBase):
                        fields.append(self._field(field_name, field_info.title, field_class))
            if not fields:
                continue

            yield ContentTypeRegion(
                id=region_id,
                title=info.title or name.replace("_", " ").title(),
                collection=accessor.is_list,
                fields=fields,
            )

    def _field(self, field_id: str, title: Optional[str], field_class: type) -> ContentTypeField:
        descriptor = self._runtime.field_types.get_by_type(field_class)
        if descriptor is None:
            raise RegistryError(f"Field class {field_class.__name__} is not registered")
        return ContentTypeField(id=field_id, title=title, type=descriptor.id)
