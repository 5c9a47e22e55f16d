"""
YourTales Backend - Chapter Routes
===================================

    GET    /api/chapters/manuscript/{manuscript_id}   public   chapters in order
    POST   /api/chapters                              bearer   create          201
    PATCH  /api/chapters/{chapter_id}                 bearer   partial update
    DELETE /api/chapters/{chapter_id}                 bearer   delete
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.dependencies import get_current_user
from yourtales.models.user import User
from yourtales.schemas.chapter import (
    ChapterCreate,
    ChapterEnvelope,
    ChapterListResponse,
    ChapterUpdate,
)
from yourtales.schemas.common import ErrorResponse, MessageResponse
from yourtales.services.chapter_service import chapter_service

router = APIRouter(prefix="/api/chapters", tags=["Chapters"])

WRITE_RESPONSES = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Caller may not change this manuscript", "model": ErrorResponse},
    404: {"description": "Manuscript or chapter not found", "model": ErrorResponse},
}


@router.get(
    "/manuscript/{manuscript_id}",
    response_model=ChapterListResponse,
    responses={404: {"description": "Manuscript not found", "model": ErrorResponse}},
    summary="List the chapters of a manuscript",
)
async def list_chapters(
    manuscript_id: int, db: AsyncSession = Depends(get_db_session)
) -> ChapterListResponse:
    return await chapter_service.list_chapters(db, manuscript_id)


@router.post(
    "",
    status_code=201,
    response_model=ChapterEnvelope,
    responses=WRITE_RESPONSES,
    summary="Add a chapter",
)
@router.post("/", status_code=201, response_model=ChapterEnvelope, include_in_schema=False)
async def create_chapter(
    payload: ChapterCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ChapterEnvelope:
    return await chapter_service.create_chapter(db, current_user, payload)


@router.patch(
    "/{chapter_id}",
    response_model=ChapterEnvelope,
    responses=WRITE_RESPONSES,
    summary="Update a chapter",
)
async def update_chapter(
    chapter_id: int,
    payload: ChapterUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ChapterEnvelope:
    return await chapter_service.update_chapter(db, current_user, chapter_id, payload)


@router.delete(
    "/{chapter_id}",
    response_model=MessageResponse,
    responses=WRITE_RESPONSES,
    summary="Delete a chapter",
)
async def delete_chapter(
    chapter_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await chapter_service.delete_chapter(db, current_user, chapter_id)
