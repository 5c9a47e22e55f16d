"""
YourTales Backend - Feedback Service (Comments & Reviews)
==========================================================

What:  Reader feedback on chapters.
Who:   Called by routes/comments.py.

Ordering:
    comments  oldest first (a conversation reads top to bottom)
    reviews   newest first

Notifications:
    Feedback from anyone but the manuscript's author notifies the author:
    COMMENT "New Comment" for comments, SYSTEM "New Review" for reviews.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from yourtales.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
)
from yourtales.models.chapter import Chapter
from yourtales.models.enums import NotificationType
from yourtales.models.feedback import Comment, Review
from yourtales.models.user import User
from yourtales.schemas.common import MessageResponse
from yourtales.schemas.feedback import (
    CommentCreate,
    CommentEnvelope,
    CommentListResponse,
    CommentResponse,
    ReviewCreate,
    ReviewEnvelope,
    ReviewListResponse,
    ReviewResponse,
)
from yourtales.schemas.user import UserSummary
from yourtales.services.notification_service import notification_service

logger = logging.getLogger(__name__)

# Characters of the comment quoted in the author's notification
COMMENT_PREVIEW_LENGTH = 30


class FeedbackService:

    # ── Comments ──────────────────────────────────────────────────────────
    async def list_comments(self, db: AsyncSession, chapter_id: int) -> CommentListResponse:
        try:
            result = await db.execute(
                select(Comment)
                .where(Comment.chapter_id == chapter_id)
                .options(selectinload(Comment.author))
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
            return CommentListResponse(
                comments=[CommentResponse.model_validate(c) for c in result.scalars().all()]
            )
        except Exception as e:
            logger.error("Database error listing comments of chapter %s: %s", chapter_id, str(e))
            raise DatabaseError(message="Could not retrieve comments. Please try again.")

    async def add_comment(
        self, db: AsyncSession, user: User, payload: CommentCreate
    ) -> CommentEnvelope:
        chapter = await self._load_chapter(db, payload.chapter_id)

        try:
            comment = Comment(chapter_id=chapter.id, author_id=user.id, content=payload.content)
            db.add(comment)
            await db.flush()
        except Exception as e:
            logger.error("Database error adding comment: %s", str(e), exc_info=True)
            raise DatabaseError(context={"chapter_id": chapter.id})

        logger.info("User %s commented on chapter %s", user.id, chapter.id)

        author_id = chapter.manuscript.author_id
        if author_id != user.id:
            preview = payload.content[:COMMENT_PREVIEW_LENGTH]
            await notification_service.notify(
                db,
                recipient_id=author_id,
                type=NotificationType.COMMENT,
                title="New Comment",
                message=(
                    f'{user.full_name or "Someone"} commented on Chapter '
                    f'"{chapter.title}": "{preview}..."'
                ),
                data={
                    "manuscriptId": chapter.manuscript_id,
                    "chapterId": chapter.id,
                    "commentId": comment.id,
                },
            )

        return CommentEnvelope(
            message="Comment added",
            comment=CommentResponse(
                id=comment.id,
                chapter_id=comment.chapter_id,
                author_id=comment.author_id,
                content=comment.content,
                created_at=comment.created_at,
                author=UserSummary.model_validate(user),
            ),
        )

    async def delete_comment(self, db: AsyncSession, user: User, comment_id: int) -> MessageResponse:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))
        if comment.author_id != user.id:
            raise PermissionDeniedError("Permission denied")

        try:
            await db.execute(delete(Comment).where(Comment.id == comment_id))
        except Exception as e:
            logger.error("Database error deleting comment %s: %s", comment_id, str(e))
            raise DatabaseError(context={"comment_id": comment_id})
        logger.info("User %s deleted comment %s", user.id, comment_id)
        return MessageResponse(message="Comment deleted")

    # ── Reviews ───────────────────────────────────────────────────────────
    async def list_reviews(self, db: AsyncSession, chapter_id: int) -> ReviewListResponse:
        try:
            result = await db.execute(
                select(Review)
                .where(Review.chapter_id == chapter_id)
                .options(selectinload(Review.author))
                .order_by(Review.created_at.desc(), Review.id.desc())
            )
            return ReviewListResponse(
                reviews=[ReviewResponse.model_validate(r) for r in result.scalars().all()]
            )
        except Exception as e:
            logger.error("Database error listing reviews of chapter %s: %s", chapter_id, str(e))
            raise DatabaseError(message="Could not retrieve reviews. Please try again.")

    async def add_review(
        self, db: AsyncSession, user: User, payload: ReviewCreate
    ) -> ReviewEnvelope:
        chapter = await self._load_chapter(db, payload.chapter_id)

        try:
            review = Review(
                chapter_id=chapter.id,
                author_id=user.id,
                rating=payload.rating,
                content=payload.content,
            )
            db.add(review)
            await db.flush()
        except Exception as e:
            logger.error("Database error adding review: %s", str(e), exc_info=True)
            raise DatabaseError(context={"chapter_id": chapter.id})

        logger.info("User %s reviewed chapter %s (%s stars)", user.id, chapter.id, review.rating)

        author_id = chapter.manuscript.author_id
        if author_id != user.id:
            await notification_service.notify(
                db,
                recipient_id=author_id,
                type=NotificationType.SYSTEM,
                title="New Review",
                message=(
                    f'{user.full_name or "Someone"} gave a {review.rating}-star review '
                    f'on Chapter "{chapter.title}".'
                ),
                data={
                    "manuscriptId": chapter.manuscript_id,
                    "chapterId": chapter.id,
                    "reviewId": review.id,
                },
            )

        return ReviewEnvelope(
            message="Review submitted",
            review=ReviewResponse(
                id=review.id,
                chapter_id=review.chapter_id,
                author_id=review.author_id,
                rating=review.rating,
                content=review.content,
                created_at=review.created_at,
                author=UserSummary.model_validate(user),
            ),
        )

    async def _load_chapter(self, db: AsyncSession, chapter_id: int) -> Chapter:
        result = await db.execute(
            select(Chapter)
            .where(Chapter.id == chapter_id)
            .options(selectinload(Chapter.manuscript))
        )
        chapter = result.scalar_one_or_none()
        if chapter is None:
            raise NotFoundError(resource="chapter", resource_id=str(chapter_id))
        return chapter


# ── Singleton Instance ────────────────────────────────────────────────────
feedback_service = FeedbackService()
