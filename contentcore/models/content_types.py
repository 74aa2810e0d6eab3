"""
Definition models: content types, content groups and languages.

Definitions describe the shape of content. They are validated on
construction, so a definition that exists is always well-formed.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field


class ContentTypeField(BaseModel):
    """A field declared inside a region."""

    id: str = Field(..., min_length=1, max_length=64)
    title: Optional[str] = Field(default=None, max_length=128)
    type: str = Field(..., min_length=1, max_length=255, description="Field type id")


class ContentTypeRegion(BaseModel):
    """
    A named slot on a content type.

    A region with one field is a simple region (the region is the field),
    a region with several fields is a complex region (a bag of fields).
    """

    id: str = Field(..., min_length=1, max_length=64)
    title: Optional[str] = Field(default=None, max_length=128)
    collection: bool = False
    fields: List[ContentTypeField] = Field(default_factory=list)

    @property
    def is_simple(self) -> bool:
        return len(self.fields) == 1


class ContentType(BaseModel):
    """Declarative definition of a content type."""

    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=128)
    group: str = Field(..., min_length=1, max_length=64)
    type_name: Optional[str] = Field(
        default=None, max_length=255, description="Name of the bound model class"
    )
    use_blocks: bool = True
    regions: List[ContentTypeRegion] = Field(default_factory=list)

    def get_region(self, region_id: str) -> Optional[ContentTypeRegion]:
        return next((r for r in self.regions if r.id == region_id), None)


class ContentGroup(BaseModel):
    """A named category of content types sharing structural capabilities."""

    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=128)
    type_name: Optional[str] = Field(default=None, max_length=255)
    assembly_name: Optional[str] = Field(default=None, max_length=255)
    is_routed_content: bool = False
    is_primary_content: bool = True
    child_groups: List[str] = Field(default_factory=list)


class Language(BaseModel):
    id: Optional[uuid.UUID] = None
    title: str = Field(default="", min_length=1, max_length=64)
    slug: Optional[str] = Field(default=None, max_length=64)
    culture: Optional[str] = Field(default=None, max_length=6)
    is_default: bool = False
