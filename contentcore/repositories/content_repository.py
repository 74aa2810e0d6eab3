# contentcore/repositories/content_repository.py
"""
Content repository: the relational round trip of content models.

Loading pulls a Content row with its translations, fields and field
translations in one go and hands it to the TransformationService. Saving
loads the existing row by the model's id (or starts a new one), stamps
LastModified and lets the TransformationService map the model onto it.

Concurrent saves of the same content id are not coordinated. Each save runs
in its own transaction and the last one to commit wins.

Usage:
    repo = ContentRepository(runtime, transformation, db=database_service)
    model = await repo.get_by_id(content_id, language_id)
    await repo.save(model, language_id)
    await repo.delete(content_id)
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import and_, delete, not_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.models import Content as ContentEntity
from ..database.models import ContentField, ContentRevision, ContentTranslation
from ..models.content import Content, DynamicContent, Revision
from ..services.database_service import DatabaseService
from ..services.transformation_service import TransformationService
from .base import BaseRepository

logger = logging.getLogger("contentcore.repositories.content")


class ContentRepository(BaseRepository):
    """
    Persistence boundary for content models.

    Attributes:
        _runtime: ContentRuntime providing the content type registry
        _transformation: Entity <-> model mapping
    """

    def __init__(
        self,
        runtime,
        transformation: TransformationService,
        db: Optional[DatabaseService] = None,
    ):
        super().__init__(db, runtime.settings.operation_timeout)
        self._runtime = runtime
        self._transformation = transformation

    async def _load_entity(self, session: AsyncSession, content_id: uuid.UUID) -> Optional[ContentEntity]:
        result = await session.execute(
            select(ContentEntity)
            .where(ContentEntity.id == content_id)
            .options(
                selectinload(ContentEntity.translations),
                selectinload(ContentEntity.fields).selectinload(ContentField.translations),
            )
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # CONTENT
    # =========================================================================

    async def get_by_id(
        self,
        content_id: uuid.UUID,
        language_id: uuid.UUID,
        model_cls: Type[Content] = DynamicContent,
    ) -> Optional[Content]:
        """
        Load the content with the given id as a model.

        Returns:
            The model, or None if the content doesn't exist or its type is
            not compatible with ``model_cls``
        """

        async def _get() -> Optional[Content]:
            async with self._db.get_session() as session:
                content = await self._load_entity(session, content_id)
                if content is None:
                    return None

                content_type = self._runtime.content_types.get_by_id(content.type_id)
                if content_type is None:
                    logger.warning(f"Content {content_id} has unknown type '{content.type_id}'")
                    return None
                return await self._transformation.to_model(content, content_type, language_id, model_cls)

        return await self._run(_get())

    async def get_id_by_slug(self, slug: str, language_id: Optional[uuid.UUID] = None) -> Optional[uuid.UUID]:
        """Get the id of the content with the given slug, optionally in one language."""
        match = await self.find_by_slug(slug, language_id)
        return match[0] if match else None

    async def find_by_slug(
        self, slug: str, language_id: Optional[uuid.UUID] = None
    ) -> Optional[Tuple[uuid.UUID, uuid.UUID]]:
        """Get the (content id, language id) of the translation using the slug."""

        async def _get() -> Optional[Tuple[uuid.UUID, uuid.UUID]]:
            query = select(ContentTranslation.content_id, ContentTranslation.language_id).where(
                ContentTranslation.slug == slug
            )
            if language_id is not None:
                query = query.where(ContentTranslation.language_id == language_id)
            async with self._db.get_session() as session:
                result = await session.execute(query.limit(1))
                row = result.first()
                return (row[0], row[1]) if row else None

        return await self._run(_get())

    async def is_slug_taken(self, slug: str, content_id: uuid.UUID, language_id: uuid.UUID) -> bool:
        """Whether any translation row other than (content_id, language_id) uses the slug."""

        async def _check() -> bool:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(ContentTranslation.content_id)
                    .where(ContentTranslation.slug == slug)
                    .where(
                        not_(
                            and_(
                                ContentTranslation.content_id == content_id,
                                ContentTranslation.language_id == language_id,
                            )
                        )
                    )
                    .limit(1)
                )
                return result.scalar_one_or_none() is not None

        return await self._run(_check())

    async def save(self, model: Content, language_id: uuid.UUID) -> None:
        """
        Insert or update the given model.

        Raises:
            ValueError: If the model's content type is not registered
            FieldTypeMismatchError: If a field value is not its registered class
        """
        content_type = self._runtime.content_types.get_by_id(model.type_id)
        if content_type is None:
            raise ValueError(f"Unknown content type '{model.type_id}'")

        async def _save() -> None:
            async with self._db.get_session() as session:
                content = await self._load_entity(session, model.id) if model.id else None

                now = datetime.utcnow()
                if content is None and model.created is None:
                    model.created = now
                model.last_modified = now

                await self._transformation.to_content(session, model, content_type, language_id, content)

        await self._run(_save())
        logger.debug(f"Saved content {model.id} ({model.type_id})")

    async def delete(self, content_id: uuid.UUID) -> bool:
        """
        Delete the content and everything it owns.

        Field rows, field translations, translations and revisions are
        removed with the content row.

        Returns:
            True if the content existed
        """

        async def _delete() -> bool:
            async with self._db.get_session() as session:
                content = await self._load_entity(session, content_id)
                if content is None:
                    return False
                await session.delete(content)
                return True

        deleted = await self._run(_delete())
        if deleted:
            logger.debug(f"Deleted content {content_id}")
        return deleted

    # =========================================================================
    # REVISIONS
    # =========================================================================

    async def create_revision(self, content_id: uuid.UUID, revisions_to_keep: Optional[int] = None) -> Optional[uuid.UUID]:
        """
        Store a snapshot of the persisted content graph.

        Args:
            content_id: Content to snapshot
            revisions_to_keep: Revisions kept after this one is added,
                defaults to settings.revisions_to_keep (0 keeps all)

        Returns:
            The revision id, or None if the content doesn't exist
        """
        keep = self._runtime.settings.revisions_to_keep if revisions_to_keep is None else revisions_to_keep

        async def _create() -> Optional[uuid.UUID]:
            async with self._db.get_session() as session:
                content = await self._load_entity(session, content_id)
                if content is None:
                    return None

                revision = ContentRevision(
                    id=uuid.uuid4(),
                    content_id=content_id,
                    body=json.dumps(self._snapshot(content)),
                    created=datetime.utcnow(),
                )
                session.add(revision)
                await session.flush()

                if keep > 0:
                    result = await session.execute(
                        select(ContentRevision.id)
                        .where(ContentRevision.content_id == content_id)
                        .order_by(ContentRevision.created.desc())
                        .offset(keep)
                    )
                    expired = list(result.scalars())
                    if expired:
                        await session.execute(delete(ContentRevision).where(ContentRevision.id.in_(expired)))
                        logger.debug(f"Pruned {len(expired)} revisions of content {content_id}")
                return revision.id

        return await self._run(_create())

    async def get_revisions(self, content_id: uuid.UUID) -> List[Revision]:
        """Revisions of the content, newest first."""

        async def _get() -> List[Revision]:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(ContentRevision)
                    .where(ContentRevision.content_id == content_id)
                    .order_by(ContentRevision.created.desc())
                )
                return [
                    Revision(
                        id=r.id,
                        content_id=r.content_id,
                        created=r.created,
                        body=json.loads(r.body) if r.body else {},
                    )
                    for r in result.scalars()
                ]

        return await self._run(_get())

    async def delete_revision(self, revision_id: uuid.UUID) -> bool:
        async def _delete() -> bool:
            async with self._db.get_session() as session:
                result = await session.execute(delete(ContentRevision).where(ContentRevision.id == revision_id))
                return result.rowcount > 0

        return await self._run(_delete())

    def _snapshot(self, content: ContentEntity) -> Dict[str, Any]:
        def _dt(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": str(content.id),
            "type_id": content.type_id,
            "route": content.route,
            "redirect_url": content.redirect_url,
            "redirect_type": content.redirect_type,
            "enable_comments": content.enable_comments,
            "close_comments_after_days": content.close_comments_after_days,
            "created": _dt(content.created),
            "last_modified": _dt(content.last_modified),
            "published": _dt(content.published),
            "translations": [
                {
                    "language_id": str(t.language_id),
                    "title": t.title,
                    "navigation_title": t.navigation_title,
                    "slug": t.slug,
                    "meta_title": t.meta_title,
                    "meta_keywords": t.meta_keywords,
                    "meta_description": t.meta_description,
                }
                for t in content.translations
            ],
            "fields": [
                {
                    "region_id": f.region_id,
                    "field_id": f.field_id,
                    "sort_order": f.sort_order,
                    "type_id": f.type_id,
                    "value": f.value,
                    "translations": {str(t.language_id): t.value for t in f.translations},
                }
                for f in content.fields
            ],
        }
