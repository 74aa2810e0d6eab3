# contentcore/services/database_service.py
"""
Database service for async SQLAlchemy session management.

Provides a singleton service for managing database connections,
sessions, and health checks. Supports both SQLite (development, tests)
and PostgreSQL (production).

Usage:
    from contentcore.services.database_service import database_service

    # Get async session (context manager)
    async with database_service.get_session() as session:
        result = await session.execute(select(Content).where(Content.id == content_id))
        content = result.scalar_one_or_none()

    # Initialize database (create tables)
    await database_service.init_db()

    # Health check
    health = await database_service.health_check()

Repositories receive a DatabaseService instance, so tests and applications
can run against a separate database:

    db = DatabaseService("sqlite+aiosqlite:///:memory:")
    await db.init_db()
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..config import settings
from ..database.base import Base

# Tables reported by health_check()
CONTENT_TABLES = (
    "Content",
    "ContentField",
    "ContentFieldTranslation",
    "ContentTranslation",
    "ContentRevision",
    "ContentGroup",
    "Language",
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseService:
    """
    Database service for managing async SQLAlchemy sessions.

    Supports both SQLite and PostgreSQL with appropriate connection pooling
    and configuration. SQLite connections enable foreign keys so that the
    ON DELETE CASCADE rules of the schema apply.

    Attributes:
        _engine: Async SQLAlchemy engine
        _session_factory: Async session factory
        _logger: Logger instance

    Methods:
        get_session(): Get async database session (context manager)
        init_db(): Initialize database (create all tables)
        health_check(): Check database connectivity
        close(): Close database engine and connections
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize database service.

        Args:
            database_url: Async database URL, defaults to settings.database_url
        """
        self._logger = logging.getLogger("contentcore.database")
        self._database_url = database_url or settings.database_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._initialize_engine()

    @property
    def database_type(self) -> str:
        return "sqlite" if self._database_url.startswith("sqlite") else "postgresql"

    def _initialize_engine(self) -> None:
        """
        Initialize database engine based on the database URL.

        SQLite Configuration:
            - Uses aiosqlite async driver
            - check_same_thread=False for async support
            - Creates data directory if needed
            - In-memory databases share one connection (StaticPool)

        PostgreSQL Configuration:
            - Uses asyncpg async driver
            - Connection pooling from settings (db_pool_size, db_max_overflow)
            - Pool pre-ping for connection health
            - Pool recycle every db_pool_recycle seconds
        """
        database_url = self._database_url

        self._logger.info(f"Initializing database: {database_url.split('@')[-1].split('?')[0]}")

        # SQLite configuration
        if self.database_type == "sqlite":
            engine_args: Dict[str, Any] = {}
            if ":memory:" in database_url or database_url.endswith("://"):
                engine_args["poolclass"] = StaticPool
            elif ":///" in database_url:
                # Create data directory if it doesn't exist
                db_path = database_url.split("///")[1].split("?")[0]
                db_dir = os.path.dirname(db_path)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    self._logger.info(f"Created database directory: {db_dir}")

            self._engine = create_async_engine(
                database_url,
                connect_args={"check_same_thread": False},
                pool_pre_ping=True,
                echo=settings.debug,
                **engine_args,
            )
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            self._logger.info("Using SQLite database")

        # PostgreSQL configuration
        else:
            self._engine = create_async_engine(
                database_url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,
                pool_recycle=settings.db_pool_recycle,
                echo=settings.debug,
            )
            self._logger.info(
                f"Using PostgreSQL database (pool_size={settings.db_pool_size}, "
                f"max_overflow={settings.db_max_overflow})"
            )

        # Create async session factory
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get async database session as context manager.

        Commits on success. Any error, cancellation included, rolls the
        session back before it propagates.

        Usage:
            async with database_service.get_session() as session:
                session.add(entity)
                # Session automatically committed on exit

        Yields:
            AsyncSession: Async database session

        Raises:
            RuntimeError: If database is not initialized
        """
        if not self._session_factory:
            raise RuntimeError("Database not initialized")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def init_db(self) -> None:
        """
        Initialize database by creating all tables.

        Safe to call multiple times (won't recreate existing tables).
        """
        if not self._engine:
            raise RuntimeError("Database engine not initialized")

        self._logger.info("Creating database tables...")

        async with self._engine.begin() as conn:
            # Import all models to ensure they're registered with Base
            from ..database import models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

        self._logger.info("Database tables created successfully")

    async def health_check(self) -> Dict[str, Any]:
        """
        Check database connectivity and health.

        Returns:
            Dict with health status:
                {
                    "status": "healthy" | "unhealthy",
                    "connected": True | False,
                    "error": "error message" (if unhealthy),
                    "database_type": "sqlite" | "postgresql",
                    "tables": {"Content": count, "Language": count, ...},
                }
        """
        try:
            tables: Dict[str, int] = {}
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))

                for table in CONTENT_TABLES:
                    result = await session.execute(text(f'SELECT COUNT(*) FROM "{table}"'))
                    tables[table] = result.scalar() or 0

            return {
                "status": "healthy",
                "connected": True,
                "database_type": self.database_type,
                "tables": tables,
            }

        except Exception as e:
            self._logger.error(f"Database health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
            }

    async def close(self) -> None:
        """
        Close database engine and all connections.

        Usage:
            await database_service.close()
        """
        if self._engine:
            await self._engine.dispose()
            self._logger.info("Database connections closed")

    def __repr__(self) -> str:
        db_type = "SQLite" if self.database_type == "sqlite" else "PostgreSQL"
        return f"<DatabaseService(type={db_type})>"


# Global singleton instance
database_service = DatabaseService()
