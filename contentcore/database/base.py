# contentcore/database/base.py
"""
SQLAlchemy base class and session dependency.

Provides the declarative base for all entities and an async session
generator for frameworks that inject sessions per request.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import declarative_base

# Declarative base for all entities
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an async database session from the global database service.

    Usage:
        async for session in get_db():
            ...

    Yields:
        AsyncSession: Async database session, committed on success
    """
    from ..services.database_service import database_service

    async with database_service.get_session() as session:
        yield session
