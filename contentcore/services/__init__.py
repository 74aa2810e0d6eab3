# contentcore/services/__init__.py
"""Services package for contentcore."""

from .database_service import database_service

__all__ = ["database_service"]
