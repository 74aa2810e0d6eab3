# contentcore/repositories/__init__.py
"""Repositories package for contentcore."""

from .content_group_repository import ContentGroupRepository
from .content_repository import ContentRepository
from .language_repository import LanguageRepository

__all__ = ["ContentRepository", "LanguageRepository", "ContentGroupRepository"]
