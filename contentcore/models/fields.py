"""
Field value models.

A field is the smallest typed unit of content data. Every field type is a
pydantic model deriving from FieldBase, registered in the FieldTypeRegistry
under a stable type id. Fields serialize themselves to a string for the
ContentField / ContentFieldTranslation value columns.

Fields may depend on services (e.g. a media lookup). Instead of resolving
arbitrary constructor parameters they implement ``initialize(context)`` and
read what they need from the FieldContext, where every service is optional.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaProvider(ABC):
    """Lookup used by media fields during initialization."""

    @abstractmethod
    async def get_by_id(self, media_id: uuid.UUID) -> Optional[Any]:
        """Return the media item or None."""


@dataclass
class FieldContext:
    """
    Services a field initializer is allowed to use.

    A new context is opened for every factory operation and never shared
    between callers. Services not configured are None and fields must fall
    back to their empty state.
    """

    media: Optional[MediaProvider] = None
    language_id: Optional[uuid.UUID] = None


class FieldBase(BaseModel):
    """
    Base class for all field values.

    Class attributes:
        type_id: Stable identifier stored in ContentField.TypeId
        translatable: Default translatability used when registering the type
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type_id: ClassVar[Optional[str]] = None
    translatable: ClassVar[bool] = False

    async def initialize(self, context: FieldContext) -> None:
        """Bind runtime state after the field enters process memory."""

    def serialize(self) -> str:
        return self.model_dump_json()

    @classmethod
    def deserialize(cls, data: Optional[str]) -> Optional["FieldBase"]:
        if data is None:
            return None
        return cls.model_validate_json(data)


class SimpleField(FieldBase):
    """Field wrapping a single primitive value."""

    value: Optional[Any] = None

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


class TextField(SimpleField):
    """Plain multi-line text, shared between languages."""

    type_id: ClassVar[Optional[str]] = "Text"
    value: Optional[str] = None


class StringField(SimpleField):
    """Short single-line string."""

    type_id: ClassVar[Optional[str]] = "String"
    translatable: ClassVar[bool] = True
    value: Optional[str] = Field(default=None, max_length=1024)


class HtmlField(SimpleField):
    """Rich text stored as HTML."""

    type_id: ClassVar[Optional[str]] = "Html"
    translatable: ClassVar[bool] = True
    value: Optional[str] = None


class MarkdownField(SimpleField):
    type_id: ClassVar[Optional[str]] = "Markdown"
    translatable: ClassVar[bool] = True
    value: Optional[str] = None


class NumberField(SimpleField):
    type_id: ClassVar[Optional[str]] = "Number"
    value: Optional[int] = None


class CheckBoxField(SimpleField):
    type_id: ClassVar[Optional[str]] = "CheckBox"
    value: Optional[bool] = None


class DateField(SimpleField):
    type_id: ClassVar[Optional[str]] = "Date"
    value: Optional[datetime] = None


class ImageField(FieldBase):
    """
    Reference to a media item.

    Only the media id is persisted. ``media`` is resolved by ``initialize``
    every time the field is loaded, from cache or from the database.
    """

    type_id: ClassVar[Optional[str]] = "Image"

    id: Optional[uuid.UUID] = None
    media: Optional[Any] = Field(default=None, exclude=True)

    @property
    def has_value(self) -> bool:
        return self.media is not None

    async def initialize(self, context: FieldContext) -> None:
        if self.id is None or context.media is None:
            self.media = None
            return
        self.media = await context.media.get_by_id(self.id)


STANDARD_FIELDS = (
    TextField,
    StringField,
    HtmlField,
    MarkdownField,
    NumberField,
    CheckBoxField,
    DateField,
    ImageField,
)
