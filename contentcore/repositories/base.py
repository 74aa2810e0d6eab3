# contentcore/repositories/base.py
"""
Shared plumbing for repositories.

Every repository call runs in its own session (unit of work) obtained from
the DatabaseService and may be bounded by ``operation_timeout``. A call that
times out or is cancelled rolls its session back, so saves and deletes are
applied completely or not at all.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from ..services.database_service import DatabaseService, database_service

T = TypeVar("T")


class BaseRepository:
    """
    Base class holding the database service and the call timeout.

    Attributes:
        _db: DatabaseService providing sessions
        _timeout: Seconds allowed per call, None for no limit
    """

    def __init__(self, db: Optional[DatabaseService] = None, timeout: Optional[float] = None):
        self._db = db or database_service
        self._timeout = timeout

    async def _run(self, operation: Awaitable[T]) -> T:
        if self._timeout is None:
            return await operation
        return await asyncio.wait_for(operation, self._timeout)
