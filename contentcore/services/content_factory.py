# contentcore/services/content_factory.py
"""
Content factory: creates shaped content models and initializes their fields.

Creation and initialization are separate steps. ``create`` builds an empty
model with one value per declared region. ``init`` / ``init_dynamic`` walk
the values of a model that already has data (loaded from the database or
the cache) and run the field initializers again, since initializers bind
runtime state that never survives serialization.

Every operation opens its own FieldContext through the runtime's context
factory. Initializers are awaited one at a time in declaration order.

Usage:
    factory = ContentFactory(runtime)
    model = await factory.create(content_type)                  # DynamicContent
    page = await factory.create(content_type, ArticlePage)      # static model
    await factory.init(page, content_type)
"""

import logging
from typing import Any, Optional, Type

from ..models.content import (
    BlockContent,
    BlockGroup,
    CategorizedContent,
    Content,
    DynamicContent,
    RegionBag,
    RegionList,
    TaggedContent,
    Taxonomy,
)
from ..models.content_types import ContentType, ContentTypeField, ContentTypeRegion
from ..models.fields import FieldBase, FieldContext

logger = logging.getLogger("contentcore.services.factory")


class ContentFactory:
    """
    Creates and initializes content models from content type definitions.

    Attributes:
        _runtime: ContentRuntime providing registries and the field context factory
    """

    def __init__(self, runtime):
        self._runtime = runtime

    # =========================================================================
    # CREATION
    # =========================================================================

    async def create(self, content_type: ContentType, model_cls: Type[Content] = DynamicContent) -> Optional[Content]:
        """
        Create a new model shaped by the content type.

        Args:
            content_type: The content type definition
            model_cls: Requested model class, DynamicContent by default

        Returns:
            The new model, or None if the class bound to the content type is
            not compatible with ``model_cls``
        """
        resolved = self._runtime.resolve_model_type(content_type, model_cls)
        if resolved is None:
            logger.debug(f"Content type {content_type.id} is not compatible with {model_cls.__name__}")
            return None

        context = self._runtime.context_factory()

        is_dynamic = issubclass(resolved, DynamicContent)
        binding = None if is_dynamic else self._runtime.model_types.binding_for(resolved)
        model = resolved() if is_dynamic else binding.create()
        model.type_id = content_type.id

        if isinstance(model, BlockContent):
            model.blocks = []
        if isinstance(model, CategorizedContent):
            model.category = Taxonomy()
        if isinstance(model, TaggedContent):
            model.tags = []

        for region_def in content_type.regions:
            if is_dynamic:
                region = await self._create_dynamic_region_value(context, content_type, region_def)
                if region is not None:
                    model.regions[region_def.id] = region
                continue

            accessor = binding.get(region_def.id)
            if accessor is None:
                # The class no longer declares the region
                logger.debug(f"Region {region_def.id} not found on {resolved.__name__}, skipping")
                continue

            region = await self._create_static_region_value(context, accessor, region_def)
            if region is not None:
                accessor.set(model, region)

        return model

    async def create_dynamic_region(
        self, content_type: ContentType, region_id: str, init_fields: bool = True
    ) -> Optional[Any]:
        """
        Create one value of a region for dynamic content.

        Used for collection items: returns a field for single field regions
        and a RegionBag for complex regions, or None if the region is unknown.
        """
        region_def = content_type.get_region(region_id)
        if region_def is None:
            return None
        context = self._runtime.context_factory()
        return await self._create_region_item(context, region_def, init_fields)

    async def _create_dynamic_region_value(
        self, context: FieldContext, content_type: ContentType, region_def: ContentTypeRegion
    ) -> Optional[Any]:
        if not region_def.collection:
            return await self._create_region_item(context, region_def)

        # Probe the element shape without running initializers
        probe = await self._create_region_item(context, region_def, init_fields=False)
        if probe is None:
            return None
        return RegionList(type_id=content_type.id, region_id=region_def.id)

    async def _create_region_item(
        self, context: FieldContext, region_def: ContentTypeRegion, init_fields: bool = True
    ) -> Optional[Any]:
        if region_def.is_simple:
            field = self._create_field(region_def.fields[0])
            if field is not None and init_fields:
                await self.init_field(context, field)
            return field

        bag = RegionBag()
        for field_def in region_def.fields:
            field = self._create_field(field_def)
            if field is None:
                continue
            if init_fields:
                await self.init_field(context, field)
            bag[field_def.id] = field
        return bag

    async def _create_static_region_value(self, context: FieldContext, accessor, region_def: ContentTypeRegion):
        if region_def.collection:
            if accessor.element_type is None:
                logger.debug(f"Element type of region {region_def.id} cannot be resolved, skipping")
                return None
            return []

        if region_def.is_simple:
            field = self._create_field(region_def.fields[0])
            if field is not None:
                await self.init_field(context, field)
            return field

        if accessor.value_type is None:
            return None
        region = accessor.value_type()
        await self._fill_static_region(context, region, region_def)
        return region

    async def create_static_region_item(self, element_cls: type, region_def: ContentTypeRegion) -> Any:
        """Create an initialized element of a complex collection region on a static model."""
        context = self._runtime.context_factory()
        region = self._runtime.model_types.binding_for(element_cls).create()
        await self._fill_static_region(context, region, region_def)
        return region

    async def _fill_static_region(self, context: FieldContext, region: Any, region_def: ContentTypeRegion) -> None:
        region_binding = self._runtime.model_types.binding_for(type(region))
        for field_def in region_def.fields:
            field_accessor = region_binding.get(field_def.id)
            if field_accessor is None:
                continue
            field = self._create_field(field_def)
            if field is None:
                continue
            await self.init_field(context, field)
            field_accessor.set(region, field)

    def _create_field(self, field_def: ContentTypeField) -> Optional[FieldBase]:
        field_type = self._runtime.field_types.get_by_id(field_def.type)
        if field_type is None:
            logger.warning(f"Unknown field type '{field_def.type}' for field {field_def.id}")
            return None
        return field_type.create_instance()

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    async def init_dynamic(self, model: DynamicContent, content_type: ContentType) -> DynamicContent:
        """Run field initializers on every region value and block of a dynamic model."""
        context = self._runtime.context_factory()

        for region_def in content_type.regions:
            region = model.regions.get(region_def.id)
            if region is None:
                continue
            if region_def.collection:
                for item in region:
                    await self._init_dynamic_region(context, item, region_def)
            else:
                await self._init_dynamic_region(context, region, region_def)

        await self._init_blocks(context, model)
        return model

    async def init(self, model: Content, content_type: ContentType) -> Content:
        """
        Run field initializers on every region value and block of a static model.

        Raises:
            ValueError: If called with a dynamic model (use init_dynamic)
        """
        if isinstance(model, DynamicContent):
            raise ValueError("For dynamic models init_dynamic should be used")

        context = self._runtime.context_factory()
        binding = self._runtime.model_types.binding_for(type(model))

        for region_def in content_type.regions:
            accessor = binding.get(region_def.id)
            region = accessor.get(model) if accessor else None
            if region is None:
                continue
            if region_def.collection:
                for item in region:
                    await self._init_static_region(context, item, region_def)
            else:
                await self._init_static_region(context, region, region_def)

        await self._init_blocks(context, model)
        return model

    async def _init_dynamic_region(self, context: FieldContext, region: Any, region_def: ContentTypeRegion) -> None:
        if region is None:
            return
        if region_def.is_simple:
            await self.init_field(context, region)
            return
        for field_def in region_def.fields:
            field = region.get(field_def.id)
            if field is not None:
                await self.init_field(context, field)

    async def _init_static_region(self, context: FieldContext, region: Any, region_def: ContentTypeRegion) -> None:
        if region is None:
            return
        if region_def.is_simple:
            await self.init_field(context, region)
            return
        region_binding = self._runtime.model_types.binding_for(type(region))
        for field_def in region_def.fields:
            accessor = region_binding.get(field_def.id)
            field = accessor.get(region) if accessor else None
            if field is not None:
                await self.init_field(context, field)

    async def _init_blocks(self, context: FieldContext, model: Content) -> None:
        if not isinstance(model, BlockContent) or not model.blocks:
            return
        for block in model.blocks:
            await self.init_block(context, block)
            if isinstance(block, BlockGroup):
                for child in block.items:
                    await self.init_block(context, child)

    async def init_block(self, context: FieldContext, block) -> None:
        if block is None:
            return
        for field in block.get_fields():
            await self.init_field(context, field)

    async def init_field(self, context: FieldContext, field: Any) -> Any:
        """Run the initializer of a field value, if it has one."""
        if isinstance(field, FieldBase):
            await field.initialize(context)
        return field
