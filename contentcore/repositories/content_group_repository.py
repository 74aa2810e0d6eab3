# contentcore/repositories/content_group_repository.py
"""
Content group repository.

Child groups are stored as ContentGroupType rows and are replaced with the
model's list on every save.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..database.models import ContentGroup as ContentGroupEntity
from ..database.models import ContentGroupType
from ..models.content_types import ContentGroup
from ..services.database_service import DatabaseService
from .base import BaseRepository

logger = logging.getLogger("contentcore.repositories.content_group")


def _to_model(entity: ContentGroupEntity) -> ContentGroup:
    return ContentGroup(
        id=entity.id,
        title=entity.title,
        type_name=entity.type_name,
        assembly_name=entity.assembly_name,
        is_routed_content=entity.is_routed_content,
        is_primary_content=entity.is_primary_content,
        child_groups=[c.type_id for c in entity.child_groups],
    )


class ContentGroupRepository(BaseRepository):
    def __init__(self, db: Optional[DatabaseService] = None, timeout: Optional[float] = None):
        super().__init__(db, timeout)

    async def get_all(self) -> List[ContentGroup]:
        async def _get() -> List[ContentGroup]:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(ContentGroupEntity)
                    .options(selectinload(ContentGroupEntity.child_groups))
                    .order_by(ContentGroupEntity.title)
                )
                return [_to_model(e) for e in result.scalars()]

        return await self._run(_get())

    async def get_by_id(self, group_id: str) -> Optional[ContentGroup]:
        async def _get() -> Optional[ContentGroup]:
            async with self._db.get_session() as session:
                entity = await self._load(session, group_id)
                return _to_model(entity) if entity else None

        return await self._run(_get())

    async def _load(self, session, group_id: str) -> Optional[ContentGroupEntity]:
        result = await session.execute(
            select(ContentGroupEntity)
            .where(ContentGroupEntity.id == group_id)
            .options(selectinload(ContentGroupEntity.child_groups))
        )
        return result.scalar_one_or_none()

    async def save(self, model: ContentGroup) -> None:
        async def _save() -> None:
            async with self._db.get_session() as session:
                entity = await self._load(session, model.id)
                now = datetime.utcnow()
                if entity is None:
                    entity = ContentGroupEntity(id=model.id, created=now)
                    session.add(entity)

                entity.title = model.title
                entity.type_name = model.type_name
                entity.assembly_name = model.assembly_name
                entity.is_routed_content = model.is_routed_content
                entity.is_primary_content = model.is_primary_content
                entity.last_modified = now

                # Replace child groups, keeping rows that are still listed
                wanted = list(dict.fromkeys(model.child_groups))
                for child in list(entity.child_groups):
                    if child.type_id not in wanted:
                        entity.child_groups.remove(child)
                existing = {c.type_id for c in entity.child_groups}
                for type_id in wanted:
                    if type_id not in existing:
                        entity.child_groups.append(ContentGroupType(group_id=model.id, type_id=type_id))

        await self._run(_save())
        logger.debug(f"Saved content group {model.id}")

    async def delete(self, group_id: str) -> bool:
        async def _delete() -> bool:
            async with self._db.get_session() as session:
                entity = await self._load(session, group_id)
                if entity is None:
                    return False
                await session.delete(entity)
                return True

        return await self._run(_delete())
