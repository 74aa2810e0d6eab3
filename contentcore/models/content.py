"""
Content instance models.

Content is the base model for every content instance. Optional
capabilities are explicit mixins checked with isinstance:

- RoutedContent: can be addressed by slug and carries SEO metadata
- BlockContent: has a list of blocks
- CategorizedContent: has a category
- TaggedContent: has tags

DynamicContent has no compiled shape. Its regions live in a mapping from
region id to a region value, which is one of:

- a FieldBase instance (simple region)
- a RegionBag, an ordered mapping of field id to FieldBase (complex region)
- a RegionList of either of the above (collection region)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .fields import FieldBase, HtmlField


class RedirectType(str, Enum):
    PERMANENT = "permanent"
    TEMPORARY = "temporary"


class Taxonomy(BaseModel):
    id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, max_length=64)
    slug: Optional[str] = Field(default=None, max_length=64)
    type: str = "category"

    @property
    def is_empty(self) -> bool:
        return self.id is None and not self.title and not self.slug


class Block(BaseModel):
    """Base class for blocks. Field-typed attributes are initialized by the factory."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type_id: ClassVar[Optional[str]] = None

    id: Optional[uuid.UUID] = None

    def get_fields(self) -> List[FieldBase]:
        """Field values of this block in declaration order."""
        fields = []
        for name in type(self).model_fields:
            value = getattr(self, name, None)
            if isinstance(value, FieldBase):
                fields.append(value)
        return fields


class BlockGroup(Block):
    type_id: ClassVar[Optional[str]] = "BlockGroup"

    items: List[Block] = Field(default_factory=list)


class HtmlBlock(Block):
    type_id: ClassVar[Optional[str]] = "HtmlBlock"

    body: HtmlField = Field(default_factory=HtmlField)


class Content(BaseModel):
    """Base model for all content instances."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[uuid.UUID] = None
    type_id: Optional[str] = Field(default=None, max_length=64)
    title: str = Field(default="", min_length=1, max_length=128)
    created: Optional[datetime] = None
    last_modified: Optional[datetime] = None


class RoutedContent(Content):
    """Content that can be routed to directly."""

    navigation_title: Optional[str] = Field(default=None, max_length=128)
    slug: Optional[str] = Field(default=None, max_length=128)
    meta_title: Optional[str] = Field(default=None, max_length=128)
    meta_keywords: Optional[str] = Field(default=None, max_length=128)
    meta_description: Optional[str] = Field(default=None, max_length=256)
    route: Optional[str] = Field(default=None, max_length=256)
    redirect_url: Optional[str] = Field(default=None, max_length=256)
    redirect_type: RedirectType = RedirectType.TEMPORARY
    enable_comments: bool = False
    close_comments_after_days: int = 0
    published: Optional[datetime] = None


class BlockContent(BaseModel):
    blocks: Optional[List[Block]] = None


class CategorizedContent(BaseModel):
    category: Optional[Taxonomy] = None


class TaggedContent(BaseModel):
    tags: Optional[List[Taxonomy]] = None


class RegionBag(dict):
    """Ordered mapping of field id to field value for a complex region."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


class RegionList(list):
    """Collection region value remembering which region it belongs to."""

    def __init__(self, items=(), type_id: Optional[str] = None, region_id: Optional[str] = None):
        super().__init__(items)
        self.type_id = type_id
        self.region_id = region_id


class DynamicContent(RoutedContent, BlockContent, CategorizedContent, TaggedContent):
    """Content whose shape is determined at runtime by its content type."""

    regions: Dict[str, Any] = Field(default_factory=dict)


class Revision(BaseModel):
    """Stored snapshot of a content item."""

    id: uuid.UUID
    content_id: uuid.UUID
    created: datetime
    body: Dict[str, Any] = Field(default_factory=dict)
