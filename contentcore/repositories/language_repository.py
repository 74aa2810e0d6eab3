# contentcore/repositories/language_repository.py
"""
Language repository.

Saving a default language demotes every other language in the same
transaction, so the Language table never has two defaults.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, update

from ..database.models import Language as LanguageEntity
from ..models.content_types import Language
from ..services.database_service import DatabaseService
from .base import BaseRepository

logger = logging.getLogger("contentcore.repositories.language")


def _to_model(entity: LanguageEntity) -> Language:
    return Language(
        id=entity.id,
        title=entity.title,
        slug=entity.slug,
        culture=entity.culture,
        is_default=entity.is_default,
    )


class LanguageRepository(BaseRepository):
    def __init__(self, db: Optional[DatabaseService] = None, timeout: Optional[float] = None):
        super().__init__(db, timeout)

    async def get_all(self) -> List[Language]:
        async def _get() -> List[Language]:
            async with self._db.get_session() as session:
                result = await session.execute(select(LanguageEntity).order_by(LanguageEntity.title))
                return [_to_model(e) for e in result.scalars()]

        return await self._run(_get())

    async def _get_one(self, *criteria) -> Optional[Language]:
        async with self._db.get_session() as session:
            result = await session.execute(select(LanguageEntity).where(*criteria).limit(1))
            entity = result.scalar_one_or_none()
            return _to_model(entity) if entity else None

    async def get_by_id(self, language_id: uuid.UUID) -> Optional[Language]:
        return await self._run(self._get_one(LanguageEntity.id == language_id))

    async def get_by_slug(self, slug: str) -> Optional[Language]:
        return await self._run(self._get_one(LanguageEntity.slug == slug))

    async def get_default(self) -> Optional[Language]:
        return await self._run(self._get_one(LanguageEntity.is_default.is_(True)))

    async def save(self, model: Language) -> None:
        """Insert or update the language, demoting the previous default if needed."""

        async def _save() -> None:
            async with self._db.get_session() as session:
                if model.id is None:
                    model.id = uuid.uuid4()

                if model.is_default:
                    await session.execute(
                        update(LanguageEntity)
                        .where(LanguageEntity.id != model.id)
                        .where(LanguageEntity.is_default.is_(True))
                        .values(is_default=False)
                    )

                entity = await session.get(LanguageEntity, model.id)
                if entity is None:
                    entity = LanguageEntity(id=model.id)
                    session.add(entity)

                entity.title = model.title
                entity.slug = model.slug
                entity.culture = model.culture
                entity.is_default = model.is_default

        await self._run(_save())
        logger.debug(f"Saved language {model.id} ({model.slug})")

    async def delete(self, language_id: uuid.UUID) -> bool:
        async def _delete() -> bool:
            async with self._db.get_session() as session:
                entity = await session.get(LanguageEntity, language_id)
                if entity is None:
                    return False
                await session.delete(entity)
                return True

        return await self._run(_delete())
