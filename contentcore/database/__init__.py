"""
Database package for contentcore.

Provides SQLAlchemy entities, the declarative base and the session dependency.
"""

from .base import Base, get_db
from .models import (
    Content,
    ContentField,
    ContentFieldTranslation,
    ContentGroup,
    ContentGroupType,
    ContentRevision,
    ContentTranslation,
    Language,
)

__all__ = [
    "Base",
    "get_db",
    "Content",
    "ContentField",
    "ContentFieldTranslation",
    "ContentGroup",
    "ContentGroupType",
    "ContentRevision",
    "ContentTranslation",
    "Language",
]
