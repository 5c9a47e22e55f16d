"""
YourTales Backend - Chapter Service
====================================

What:  List, create, update and delete the chapters of a manuscript.
Who:   Called by routes/chapters.py.

Permissions:
    create, update  author or ACCEPTED EDITOR collaborator of the manuscript
    delete          author of the manuscript only
    list            public
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from yourtales.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    YourTalesError,
)
from yourtales.models.chapter import Chapter
from yourtales.models.manuscript import Manuscript
from yourtales.models.user import User
from yourtales.schemas.chapter import (
    ChapterCreate,
    ChapterEnvelope,
    ChapterListResponse,
    ChapterResponse,
    ChapterUpdate,
)
from yourtales.schemas.common import MessageResponse
from yourtales.services.manuscript_service import manuscript_service
from yourtales.services.permissions import can_edit, is_author

logger = logging.getLogger(__name__)


class ChapterService:

    async def list_chapters(self, db: AsyncSession, manuscript_id: int) -> ChapterListResponse:
        """Chapters of a manuscript by ascending order; ties keep creation order."""
        try:
            if await db.get(Manuscript, manuscript_id) is None:
                raise NotFoundError(resource="manuscript", resource_id=str(manuscript_id))
            result = await db.execute(
                select(Chapter)
                .where(Chapter.manuscript_id == manuscript_id)
                .order_by(Chapter.position.asc(), Chapter.id.asc())
            )
            return ChapterListResponse(
                chapters=[ChapterResponse.model_validate(c) for c in result.scalars().all()]
            )
        except YourTalesError:
            raise
        except Exception as e:
            logger.error("Database error listing chapters of %s: %s", manuscript_id, str(e))
            raise DatabaseError(message="Could not retrieve chapters. Please try again.")

    async def create_chapter(
        self, db: AsyncSession, user: User, payload: ChapterCreate
    ) -> ChapterEnvelope:
        manuscript = await manuscript_service.load_with_collaborations(db, payload.manuscript_id)
        if not can_edit(manuscript, user.id):
            raise PermissionDeniedError("Only authors or editors can create chapters")

        try:
            chapter = Chapter(
                manuscript_id=manuscript.id,
                title=payload.title,
                content=payload.content,
                position=payload.position,
            )
            db.add(chapter)
            await db.flush()
        except Exception as e:
            logger.error("Database error creating chapter: %s", str(e), exc_info=True)
            raise DatabaseError(context={"manuscript_id": manuscript.id})

        logger.info("User %s added chapter %s to manuscript %s", user.id, chapter.id, manuscript.id)
        return ChapterEnvelope(
            message="Chapter created successfully",
            chapter=ChapterResponse.model_validate(chapter),
        )

    async def update_chapter(
        self, db: AsyncSession, user: User, chapter_id: int, payload: ChapterUpdate
    ) -> ChapterEnvelope:
        chapter = await self._load(db, chapter_id)
        if not can_edit(chapter.manuscript, user.id):
            raise PermissionDeniedError("Permission denied")

        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        try:
            for field, value in changes.items():
                setattr(chapter, field, value)
            await db.flush()
        except Exception as e:
            logger.error("Database error updating chapter %s: %s", chapter_id, str(e))
            raise DatabaseError(context={"chapter_id": chapter_id})

        logger.info("User %s updated chapter %s fields: %s", user.id, chapter_id, sorted(changes))
        return ChapterEnvelope(
            message="Chapter updated successfully",
            chapter=ChapterResponse.model_validate(chapter),
        )

    async def delete_chapter(
        self, db: AsyncSession, user: User, chapter_id: int
    ) -> MessageResponse:
        chapter = await self._load(db, chapter_id)
        if not is_author(chapter.manuscript, user.id):
            raise PermissionDeniedError("Only the author can delete chapters")

        try:
            await db.execute(delete(Chapter).where(Chapter.id == chapter_id))
        except Exception as e:
            logger.error("Database error deleting chapter %s: %s", chapter_id, str(e))
            raise DatabaseError(context={"chapter_id": chapter_id})
        logger.info("User %s deleted chapter %s", user.id, chapter_id)
        return MessageResponse(message="Chapter deleted successfully")

    async def _load(self, db: AsyncSession, chapter_id: int) -> Chapter:
        # Parent manuscript and its collaborations are needed by can_edit()
        result = await db.execute(
            select(Chapter)
            .where(Chapter.id == chapter_id)
            .options(
                selectinload(Chapter.manuscript).selectinload(Manuscript.collaborations)
            )
        )
        chapter = result.scalar_one_or_none()
        if chapter is None:
            raise NotFoundError(resource="chapter", resource_id=str(chapter_id))
        return chapter


# ── Singleton Instance ────────────────────────────────────────────────────
chapter_service = ChapterService()
