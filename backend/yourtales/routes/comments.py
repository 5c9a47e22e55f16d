"""
YourTales Backend - Comment & Review Routes
============================================

    GET    /api/comments/comment/chapter/{chapter_id}   public   comments, oldest first
    GET    /api/comments/review/chapter/{chapter_id}    public   reviews, newest first
    POST   /api/comments/comment                        bearer   add a comment     201
    DELETE /api/comments/comment/{comment_id}           bearer   delete own comment
    POST   /api/comments/review                         bearer   add a review      201
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.dependencies import get_current_user
from yourtales.models.user import User
from yourtales.schemas.common import ErrorResponse, MessageResponse
from yourtales.schemas.feedback import (
    CommentCreate,
    CommentEnvelope,
    CommentListResponse,
    ReviewCreate,
    ReviewEnvelope,
    ReviewListResponse,
)
from yourtales.services.feedback_service import feedback_service

router = APIRouter(prefix="/api/comments", tags=["Comments & Reviews"])

UNAUTHORIZED = {"description": "Missing or invalid token", "model": ErrorResponse}
CHAPTER_NOT_FOUND = {"description": "Chapter not found", "model": ErrorResponse}


@router.get(
    "/comment/chapter/{chapter_id}",
    response_model=CommentListResponse,
    summary="List the comments on a chapter",
)
async def list_comments(
    chapter_id: int, db: AsyncSession = Depends(get_db_session)
) -> CommentListResponse:
    return await feedback_service.list_comments(db, chapter_id)


@router.get(
    "/review/chapter/{chapter_id}",
    response_model=ReviewListResponse,
    summary="List the reviews of a chapter",
)
async def list_reviews(
    chapter_id: int, db: AsyncSession = Depends(get_db_session)
) -> ReviewListResponse:
    return await feedback_service.list_reviews(db, chapter_id)


@router.post(
    "/comment",
    status_code=201,
    response_model=CommentEnvelope,
    responses={401: UNAUTHORIZED, 404: CHAPTER_NOT_FOUND},
    summary="Comment on a chapter",
)
async def add_comment(
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentEnvelope:
    return await feedback_service.add_comment(db, current_user, payload)


@router.delete(
    "/comment/{comment_id}",
    response_model=MessageResponse,
    responses={
        401: UNAUTHORIZED,
        403: {"description": "Not the comment's author", "model": ErrorResponse},
        404: {"description": "Comment not found", "model": ErrorResponse},
    },
    summary="Delete one of your comments",
)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await feedback_service.delete_comment(db, current_user, comment_id)


@router.post(
    "/review",
    status_code=201,
    response_model=ReviewEnvelope,
    responses={401: UNAUTHORIZED, 404: CHAPTER_NOT_FOUND},
    summary="Review a chapter (1-5 stars)",
)
async def add_review(
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewEnvelope:
    return await feedback_service.add_review(db, current_user, payload)
