# contentcore/services/transformation_service.py
"""
Transformation service: maps between persisted content entities and models.

Load path (``to_model``):
    1. Resolve the model class and create an empty, shaped model
    2. Map base columns, then overlay the translation row of the language
    3. Map field rows region by region, ordered by sort order
    4. Deserialize translatable fields from the translation row of the
       language and other fields from their own Value column

Save path (``to_content``):
    1. Use the given entity or start a new one, ensure the translation row
    2. Map base properties to the entity and the translation row
    3. Map every region present on the model to field rows, matching
       existing rows by (region id, field id, sort order)
    4. Prune collection rows that were not written and rows of regions or
       fields the content type no longer declares

Field rows store exactly one value: translatable fields write their
translation row and null the Value column, other fields write Value and
keep no translation rows.

Blocks, categories and tags are mapped through BlockMapper and
TaxonomyMapper. The default null mappers accept empty data and raise
NotImplementedError instead of dropping data they cannot store.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple, Type

from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models import Content as ContentEntity
from ..database.models import ContentField, ContentFieldTranslation, ContentTranslation
from ..models.content import (
    BlockContent,
    CategorizedContent,
    Content,
    DynamicContent,
    RedirectType,
    RoutedContent,
    TaggedContent,
)
from ..models.content_types import ContentType, ContentTypeField, ContentTypeRegion
from ..models.fields import FieldBase
from .content_factory import ContentFactory

logger = logging.getLogger("contentcore.services.transformation")

ROUTED_ATTRIBUTES = (
    "route",
    "redirect_url",
    "enable_comments",
    "close_comments_after_days",
    "published",
)
TRANSLATED_ATTRIBUTES = (
    "navigation_title",
    "slug",
    "meta_title",
    "meta_keywords",
    "meta_description",
)


class FieldTypeMismatchError(TypeError):
    """Raised when a field value is not an instance of exactly its registered class."""

    def __init__(self, region_id: str, field_id: str, expected: type, actual: type):
        super().__init__(
            f"Field {region_id}.{field_id} must be {expected.__name__}, got {actual.__name__}"
        )
        self.region_id = region_id
        self.field_id = field_id


# =========================================================================
# BLOCK & TAXONOMY MAPPERS
# =========================================================================


class BlockMapper(ABC):
    """Maps the blocks of block content to and from persistence."""

    @abstractmethod
    async def to_model(self, content: ContentEntity, model: BlockContent, language_id: uuid.UUID) -> None:
        pass

    @abstractmethod
    async def to_content(
        self, session: AsyncSession, model: BlockContent, content: ContentEntity, language_id: uuid.UUID
    ) -> None:
        pass


class TaxonomyMapper(ABC):
    """Maps categories and tags to and from persistence."""

    @abstractmethod
    async def to_model(self, content: ContentEntity, model: Content, language_id: uuid.UUID) -> None:
        pass

    @abstractmethod
    async def to_content(
        self, session: AsyncSession, model: Content, content: ContentEntity, language_id: uuid.UUID
    ) -> None:
        pass


class NullBlockMapper(BlockMapper):
    """No block storage. Loads nothing, refuses to save blocks."""

    async def to_model(self, content, model, language_id) -> None:
        return None

    async def to_content(self, session, model, content, language_id) -> None:
        if model.blocks:
            raise NotImplementedError("Saving blocks requires a BlockMapper")


class NullTaxonomyMapper(TaxonomyMapper):
    """No taxonomy storage. Loads nothing, refuses to save categories or tags."""

    async def to_model(self, content, model, language_id) -> None:
        return None

    async def to_content(self, session, model, content, language_id) -> None:
        if isinstance(model, CategorizedContent) and model.category is not None and not model.category.is_empty:
            raise NotImplementedError("Saving categories requires a TaxonomyMapper")
        if isinstance(model, TaggedContent) and model.tags:
            raise NotImplementedError("Saving tags requires a TaxonomyMapper")


class TransformationService:
    """
    Bidirectional mapping between Content entities and content models.

    Attributes:
        _runtime: ContentRuntime with the registries
        _factory: ContentFactory used to create shaped models
        _blocks: Block mapper
        _taxonomies: Category and tag mapper
    """

    def __init__(
        self,
        runtime,
        factory: ContentFactory,
        block_mapper: Optional[BlockMapper] = None,
        taxonomy_mapper: Optional[TaxonomyMapper] = None,
    ):
        self._runtime = runtime
        self._factory = factory
        self._blocks = block_mapper or NullBlockMapper()
        self._taxonomies = taxonomy_mapper or NullTaxonomyMapper()

    # =========================================================================
    # LOAD
    # =========================================================================

    async def to_model(
        self,
        content: ContentEntity,
        content_type: Optional[ContentType],
        language_id: uuid.UUID,
        model_cls: Type[Content] = DynamicContent,
    ) -> Optional[Content]:
        """
        Transform a content entity into a model.

        Args:
            content: Entity with translations and fields (and field translations) loaded
            content_type: Definition of the content's type
            language_id: Language to read translated values for
            model_cls: Requested model class

        Returns:
            The model, or None if there is no content type or the model
            class is incompatible
        """
        if content_type is None:
            return None

        model = await self._factory.create(content_type, model_cls)
        if model is None:
            return None

        translation = next((t for t in content.translations if t.language_id == language_id), None)
        self._map_base_to_model(content, translation, model)

        for region_def in content_type.regions:
            rows = sorted(
                (f for f in content.fields if f.region_id == region_def.id),
                key=lambda f: f.sort_order,
            )

            if not region_def.collection:
                self._load_single_region(model, region_def, rows, language_id)
                continue

            count = max((f.sort_order for f in rows), default=-1) + 1
            for sort_order in range(count):
                items = [f for f in rows if f.sort_order == sort_order]
                if region_def.is_simple:
                    self._load_simple_item(model, region_def, items, language_id)
                else:
                    await self._load_complex_item(model, content_type, region_def, items, language_id)

        if isinstance(model, BlockContent):
            await self._blocks.to_model(content, model, language_id)
        if isinstance(model, (CategorizedContent, TaggedContent)):
            await self._taxonomies.to_model(content, model, language_id)

        return model

    def _map_base_to_model(
        self, content: ContentEntity, translation: Optional[ContentTranslation], model: Content
    ) -> None:
        model.id = content.id
        model.type_id = content.type_id
        model.created = content.created
        model.last_modified = content.last_modified

        if isinstance(model, RoutedContent):
            for name in ROUTED_ATTRIBUTES:
                setattr(model, name, getattr(content, name))
            model.redirect_type = RedirectType(content.redirect_type or RedirectType.TEMPORARY.value)

        if translation is None:
            return

        model.title = translation.title or ""
        if isinstance(model, RoutedContent):
            for name in TRANSLATED_ATTRIBUTES:
                setattr(model, name, getattr(translation, name))

    def _load_single_region(
        self, model: Content, region_def: ContentTypeRegion, rows: List[ContentField], language_id: uuid.UUID
    ) -> None:
        for field_def in region_def.fields:
            row = next((f for f in rows if f.field_id == field_def.id and f.sort_order == 0), None)
            if row is None:
                continue
            value = self._deserialize(row, field_def, language_id)
            if value is None:
                # Keep the empty field created by the factory
                continue
            if region_def.is_simple:
                self._set_region(model, region_def.id, value)
            else:
                self._set_region_field(self._get_region(model, region_def.id)[1], field_def.id, value)

    def _load_simple_item(
        self, model: Content, region_def: ContentTypeRegion, items: List[ContentField], language_id: uuid.UUID
    ) -> None:
        field_def = region_def.fields[0]
        row = next((f for f in items if f.field_id == field_def.id), None)
        if row is None:
            return
        field_type = self._runtime.field_types.get_by_id(field_def.type)
        if field_type is None or (row.type_id and row.type_id != field_type.id):
            return

        value = self._deserialize(row, field_def, language_id)
        if value is None:
            # No value in this language, keep the position with an empty field
            value = field_type.create_instance()
        self._add_region_item(model, region_def.id, value)

    async def _load_complex_item(
        self,
        model: Content,
        content_type: ContentType,
        region_def: ContentTypeRegion,
        items: List[ContentField],
        language_id: uuid.UUID,
    ) -> None:
        if not items:
            return

        if isinstance(model, DynamicContent):
            element = await self._factory.create_dynamic_region(content_type, region_def.id)
        else:
            accessor = self._runtime.model_types.binding_for(type(model)).get(region_def.id)
            if accessor is None or accessor.element_type is None:
                return
            element = await self._factory.create_static_region_item(accessor.element_type, region_def)
        if element is None:
            return

        matched = 0
        for row in items:
            field_def = next((f for f in region_def.fields if f.id == row.field_id), None)
            if field_def is None:
                continue
            matched += 1
            value = self._deserialize(row, field_def, language_id)
            if value is not None:
                self._set_region_field(element, field_def.id, value)

        if matched:
            self._add_region_item(model, region_def.id, element)

    def _deserialize(self, row: ContentField, field_def: ContentTypeField, language_id: uuid.UUID) -> Optional[FieldBase]:
        field_type = self._runtime.field_types.get_by_id(field_def.type)
        if field_type is None:
            return None
        if row.type_id and row.type_id != field_type.id:
            logger.debug(
                f"Field {row.region_id}.{row.field_id} stored as {row.type_id}, declared {field_type.id}, skipping"
            )
            return None

        if field_type.is_translatable:
            translation = next((t for t in row.translations if t.language_id == language_id), None)
            if translation is None:
                return None
            return field_type.deserialize(translation.value)
        return field_type.deserialize(row.value)

    # =========================================================================
    # SAVE
    # =========================================================================

    async def to_content(
        self,
        session: AsyncSession,
        model: Content,
        content_type: ContentType,
        language_id: uuid.UUID,
        dest: Optional[ContentEntity] = None,
    ) -> ContentEntity:
        """
        Transform a model into a content entity.

        Args:
            session: Session the entity belongs to
            model: The model to map
            content_type: Definition of the content's type
            language_id: Language translated values are written for
            dest: Existing entity (with translations and fields loaded) to update

        Returns:
            The mapped entity, added to the session

        Raises:
            FieldTypeMismatchError: If a field value is not its registered class
            NotImplementedError: If blocks or taxonomies cannot be stored
        """
        if model.id is None:
            model.id = uuid.uuid4()

        if dest is None:
            content = ContentEntity(id=model.id)
            session.add(content)
        else:
            content = dest

        translation = next((t for t in content.translations if t.language_id == language_id), None)
        if translation is None:
            translation = ContentTranslation(content_id=model.id, language_id=language_id)
            content.translations.append(translation)

        self._map_base_to_content(model, content_type, content, translation)

        for region_def in content_type.regions:
            present, region = self._get_region(model, region_def.id)

            if not region_def.collection:
                if present and region is not None:
                    self._save_region(content, region, region_def, language_id, 0)
                continue

            # An absent collection region is saved as an empty one
            items = region if present and region is not None else []
            kept = []
            for sort_order, item in enumerate(items):
                kept.extend(self._save_region(content, item, region_def, language_id, sort_order))
            self._remove_fields(
                content, [f for f in content.fields if f.region_id == region_def.id and f.id not in kept]
            )

        self._remove_fields(content, self._undeclared_fields(content, content_type))

        if isinstance(model, BlockContent):
            await self._blocks.to_content(session, model, content, language_id)
        if isinstance(model, (CategorizedContent, TaggedContent)):
            await self._taxonomies.to_content(session, model, content, language_id)

        return content

    def _map_base_to_content(
        self, model: Content, content_type: ContentType, content: ContentEntity, translation: ContentTranslation
    ) -> None:
        now = datetime.utcnow()
        content.type_id = content_type.id
        content.created = content.created or model.created or now
        content.last_modified = model.last_modified or now
        translation.title = model.title

        if isinstance(model, RoutedContent):
            for name in ROUTED_ATTRIBUTES:
                setattr(content, name, getattr(model, name))
            content.redirect_type = RedirectType(model.redirect_type).value
            for name in TRANSLATED_ATTRIBUTES:
                setattr(translation, name, getattr(model, name))

    def _save_region(
        self,
        content: ContentEntity,
        region: Any,
        region_def: ContentTypeRegion,
        language_id: uuid.UUID,
        sort_order: int,
    ) -> List[uuid.UUID]:
        written = []

        for field_def in region_def.fields:
            field_type = self._runtime.field_types.get_by_id(field_def.type)
            if field_type is None:
                logger.warning(f"Unknown field type '{field_def.type}' for {region_def.id}.{field_def.id}")
                continue

            value = region if region_def.is_simple else self._get_region_field(region, field_def.id)
            if value is None:
                continue
            if type(value) is not field_type.field_class:
                raise FieldTypeMismatchError(region_def.id, field_def.id, field_type.field_class, type(value))

            row = next(
                (
                    f
                    for f in content.fields
                    if f.region_id == region_def.id and f.field_id == field_def.id and f.sort_order == sort_order
                ),
                None,
            )
            if row is None:
                row = ContentField(
                    id=uuid.uuid4(),
                    content_id=content.id,
                    region_id=region_def.id,
                    field_id=field_def.id,
                    sort_order=sort_order,
                )
                content.fields.append(row)

            row.type_id = field_type.id
            serialized = field_type.serialize(value)

            if field_type.is_translatable:
                translation = next((t for t in row.translations if t.language_id == language_id), None)
                if translation is None:
                    translation = ContentFieldTranslation(field_id=row.id, language_id=language_id)
                    row.translations.append(translation)
                row.value = None
                translation.value = serialized
            else:
                row.value = serialized
                row.translations.clear()

            written.append(row.id)

        return written

    def _undeclared_fields(self, content: ContentEntity, content_type: ContentType) -> List[ContentField]:
        declared = {r.id: r for r in content_type.regions}
        stale = []
        for row in content.fields:
            region_def = declared.get(row.region_id)
            if (
                region_def is None
                or all(f.id != row.field_id for f in region_def.fields)
                or (not region_def.collection and row.sort_order != 0)
            ):
                stale.append(row)
        return stale

    def _remove_fields(self, content: ContentEntity, rows: Iterable[ContentField]) -> None:
        for row in list(rows):
            logger.debug(f"Removing field row {row.region_id}.{row.field_id}[{row.sort_order}]")
            content.fields.remove(row)

    # =========================================================================
    # REGION ACCESS
    # =========================================================================

    def _get_region(self, model: Content, region_id: str) -> Tuple[bool, Any]:
        if isinstance(model, DynamicContent):
            return region_id in model.regions, model.regions.get(region_id)
        accessor = self._runtime.model_types.binding_for(type(model)).get(region_id)
        if accessor is None:
            return False, None
        return True, accessor.get(model)

    def _set_region(self, model: Content, region_id: str, value: Any) -> None:
        if isinstance(model, DynamicContent):
            model.regions[region_id] = value
            return
        accessor = self._runtime.model_types.binding_for(type(model)).get(region_id)
        if accessor is not None:
            accessor.set(model, value)

    def _add_region_item(self, model: Content, region_id: str, value: Any) -> None:
        items = self._get_region(model, region_id)[1]
        if items is not None:
            items.append(value)

    def _get_region_field(self, region: Any, field_id: str) -> Any:
        if region is None:
            return None
        if isinstance(region, dict):
            return region.get(field_id)
        accessor = self._runtime.model_types.binding_for(type(region)).get(field_id)
        return accessor.get(region) if accessor else None

    def _set_region_field(self, region: Any, field_id: str, value: Any) -> None:
        if region is None:
            return
        if isinstance(region, dict):
            if field_id in region:
                region[field_id] = value
            return
        accessor = self._runtime.model_types.binding_for(type(region)).get(field_id)
        if accessor is not None:
            accessor.set(region, value)
