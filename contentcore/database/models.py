# contentcore/database/models.py
"""
SQLAlchemy ORM entities for content persistence.

The table layout is fixed and shared with other consumers, so table and
column names are declared explicitly (PascalCase) while Python attributes
use snake_case.

Entities:
    - Content: One row per content instance
    - ContentTranslation: Per-language routed metadata (title, slug, meta)
    - ContentField: One row per (content, region, field, sort order)
    - ContentFieldTranslation: Per-language value of translatable fields
    - ContentRevision: Serialized snapshots of a content graph
    - ContentGroup / ContentGroupType: Content groups and allowed children
    - Language: Available languages, exactly one is the default

Content owns its fields, translations and revisions; deleting a content row
deletes all of them (ORM cascade plus ON DELETE CASCADE in the schema).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship

from .base import Base


# UUID type that works with both SQLite and PostgreSQL
class UUID(TypeDecorator):
    """Platform-independent UUID type.

    Uses PostgreSQL's UUID type when available, otherwise uses String(36).
    """
    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class Language(Base):
    """
    Language model.

    Attributes:
        id: Unique language identifier
        title: Display title
        slug: URL prefix of the language (unique)
        culture: Culture code, e.g. "en-US"
        is_default: Whether this is the default language (exactly one)
    """

    __tablename__ = "Language"

    id = Column("Id", UUID(), primary_key=True, default=uuid.uuid4)
    title = Column("Title", String(64), nullable=False)
    slug = Column("Slug", String(64), nullable=False, unique=True)
    culture = Column("Culture", String(6), nullable=True)
    is_default = Column("IsDefault", Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Language(id={self.id}, slug={self.slug}, is_default={self.is_default})>"


class ContentGroup(Base):
    """
    Content group model.

    Attributes:
        id: Unique group id (string, max 64)
        type_name: Name of the model class bound to the group
        assembly_name: Package or module providing the model class
        is_routed_content: Whether content in the group can be routed to
        is_primary_content: Whether content in the group is primary content

    Relationships:
        child_groups: Group ids allowed to nest under this group
    """

    __tablename__ = "ContentGroup"

    id = Column("Id", String(64), primary_key=True)
    type_name = Column("TypeName", String(255), nullable=True)
    assembly_name = Column("AssemblyName", String(255), nullable=True)
    title = Column("Title", String(128), nullable=False)
    is_routed_content = Column("IsRoutedContent", Boolean, nullable=False, default=False)
    is_primary_content = Column("IsPrimaryContent", Boolean, nullable=False, default=True)
    created = Column("Created", DateTime, default=datetime.utcnow, nullable=False)
    last_modified = Column(
        "LastModified", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    child_groups = relationship(
        "ContentGroupType",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="ContentGroupType.type_id",
    )

    def __repr__(self) -> str:
        return f"<ContentGroup(id={self.id}, title={self.title})>"


class ContentGroupType(Base):
    __tablename__ = "ContentGroupType"

    group_id = Column(
        "GroupId", String(64), ForeignKey("ContentGroup.Id", ondelete="CASCADE"), primary_key=True
    )
    type_id = Column("TypeId", String(64), primary_key=True)

    group = relationship("ContentGroup", back_populates="child_groups")


class Content(Base):
    """
    Content model.

    Attributes:
        id: Unique content identifier
        type_id: Content type id (references the runtime content type registry)
        route, redirect_url, redirect_type: Routing options
        enable_comments, close_comments_after_days: Comment settings
        created, last_modified, published: Audit timestamps

    Relationships:
        fields: Field rows, ordered by sort order
        translations: Per-language metadata rows
        revisions: Stored snapshots
    """

    __tablename__ = "Content"

    id = Column("Id", UUID(), primary_key=True, default=uuid.uuid4)
    type_id = Column("TypeId", String(64), nullable=False, index=True)
    enable_comments = Column("EnableComments", Boolean, nullable=False, default=False)
    close_comments_after_days = Column("CloseCommentsAfterDays", Integer, nullable=False, default=0)
    route = Column("Route", String(256), nullable=True)
    redirect_url = Column("RedirectUrl", String(256), nullable=True)
    redirect_type = Column("RedirectType", String(16), nullable=False, default="temporary")
    created = Column("Created", DateTime, default=datetime.utcnow, nullable=False)
    last_modified = Column("LastModified", DateTime, default=datetime.utcnow, nullable=False)
    published = Column("Published", DateTime, nullable=True)

    fields = relationship(
        "ContentField",
        back_populates="content",
        cascade="all, delete-orphan",
        order_by="ContentField.sort_order",
    )
    translations = relationship(
        "ContentTranslation", back_populates="content", cascade="all, delete-orphan"
    )
    # Revisions are never eager loaded, the schema cascade removes them
    revisions = relationship(
        "ContentRevision",
        back_populates="content",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Content(id={self.id}, type_id={self.type_id})>"


class ContentTranslation(Base):
    __tablename__ = "ContentTranslation"

    content_id = Column(
        "ContentId", UUID(), ForeignKey("Content.Id", ondelete="CASCADE"), primary_key=True
    )
    language_id = Column(
        "LanguageId", UUID(), ForeignKey("Language.Id", ondelete="CASCADE"), primary_key=True
    )
    title = Column("Title", String(128), nullable=True)
    navigation_title = Column("NavigationTitle", String(128), nullable=True)
    slug = Column("Slug", String(128), nullable=True, unique=True)
    meta_title = Column("MetaTitle", String(128), nullable=True)
    meta_keywords = Column("MetaKeywords", String(128), nullable=True)
    meta_description = Column("MetaDescription", String(256), nullable=True)

    content = relationship("Content", back_populates="translations")

    def __repr__(self) -> str:
        return f"<ContentTranslation(content_id={self.content_id}, language_id={self.language_id})>"


class ContentField(Base):
    """
    Field row of a content instance.

    Exactly one of ``value`` and ``translations`` carries the field value,
    depending on whether the field type is translatable.
    """

    __tablename__ = "ContentField"

    id = Column("Id", UUID(), primary_key=True, default=uuid.uuid4)
    content_id = Column(
        "ContentId", UUID(), ForeignKey("Content.Id", ondelete="CASCADE"), nullable=False
    )
    type_id = Column("TypeId", String(255), nullable=True)
    region_id = Column("RegionId", String(64), nullable=False)
    field_id = Column("FieldId", String(64), nullable=False)
    sort_order = Column("SortOrder", Integer, nullable=False, default=0)
    value = Column("Value", Text, nullable=True)

    content = relationship("Content", back_populates="fields")
    translations = relationship(
        "ContentFieldTranslation", back_populates="field", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index(
            "IX_ContentField_ContentId_RegionId_FieldId_SortOrder",
            "ContentId",
            "RegionId",
            "FieldId",
            "SortOrder",
            unique=True,
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ContentField(region_id={self.region_id}, field_id={self.field_id}, "
            f"sort_order={self.sort_order})>"
        )


class ContentFieldTranslation(Base):
    __tablename__ = "ContentFieldTranslation"

    field_id = Column(
        "FieldId", UUID(), ForeignKey("ContentField.Id", ondelete="CASCADE"), primary_key=True
    )
    language_id = Column(
        "LanguageId", UUID(), ForeignKey("Language.Id", ondelete="CASCADE"), primary_key=True
    )
    value = Column("Value", Text, nullable=True)

    field = relationship("ContentField", back_populates="translations")


class ContentRevision(Base):
    __tablename__ = "ContentRevision"

    id = Column("Id", UUID(), primary_key=True, default=uuid.uuid4)
    content_id = Column(
        "ContentId", UUID(), ForeignKey("Content.Id", ondelete="CASCADE"), nullable=False, index=True
    )
    body = Column("Body", Text, nullable=True)
    created = Column("Created", DateTime, default=datetime.utcnow, nullable=False)

    content = relationship("Content", back_populates="revisions")
