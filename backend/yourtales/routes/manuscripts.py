"""
YourTales Backend - Manuscript Routes
======================================

What:  Manuscript and collaboration endpoints under /api/manuscripts.

Route Inventory:
    GET    /                 public   published manuscripts
    GET    /my-manuscripts   bearer   authored + collaborating manuscripts
    GET    /stats            bearer   dashboard totals
    POST   /invite           bearer   invite a collaborator by email       201
    POST   /respond          bearer   accept or decline an invitation
    GET    /{id}             public   one manuscript with collaborators
    POST   /                 bearer   create                              201
    PATCH  /{id}             bearer   partial update
    DELETE /{id}             bearer   delete (author only)

Fixed paths are declared before /{manuscript_id} so they are not captured
by the path parameter.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.dependencies import get_current_user
from yourtales.models.user import User
from yourtales.schemas.common import ErrorResponse, MessageResponse
from yourtales.schemas.manuscript import (
    CollaborationEnvelope,
    InviteRequest,
    ManuscriptCreate,
    ManuscriptDetailResponse,
    ManuscriptEnvelope,
    ManuscriptUpdate,
    MyManuscriptList,
    PublishedManuscriptList,
    RespondRequest,
    StatsResponse,
)
from yourtales.services.manuscript_service import manuscript_service

router = APIRouter(prefix="/api/manuscripts", tags=["Manuscripts"])

UNAUTHORIZED = {"description": "Missing or invalid token", "model": ErrorResponse}
FORBIDDEN = {"description": "Caller may not perform this action", "model": ErrorResponse}
NOT_FOUND = {"description": "Manuscript not found", "model": ErrorResponse}


# ── Collections & fixed paths ─────────────────────────────────────────────
@router.get(
    "",
    response_model=PublishedManuscriptList,
    summary="List published manuscripts",
)
@router.get("/", response_model=PublishedManuscriptList, include_in_schema=False)
async def list_published(db: AsyncSession = Depends(get_db_session)) -> PublishedManuscriptList:
    return await manuscript_service.list_published(db)


@router.get(
    "/my-manuscripts",
    response_model=MyManuscriptList,
    responses={401: UNAUTHORIZED},
    summary="Manuscripts the caller writes or collaborates on",
)
async def my_manuscripts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MyManuscriptList:
    return await manuscript_service.list_for_user(db, current_user)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={401: UNAUTHORIZED},
    summary="Dashboard totals for the caller",
)
async def dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    return await manuscript_service.get_stats(db, current_user)


@router.post(
    "/invite",
    status_code=201,
    response_model=CollaborationEnvelope,
    responses={
        400: {"description": "Email already invited", "model": ErrorResponse},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: NOT_FOUND,
    },
    summary="Invite a collaborator",
)
async def invite_collaborator(
    payload: InviteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CollaborationEnvelope:
    return await manuscript_service.invite(db, current_user, payload)


@router.post(
    "/respond",
    response_model=CollaborationEnvelope,
    responses={
        400: {"description": "Invitation already processed", "model": ErrorResponse},
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: {"description": "Invitation not found", "model": ErrorResponse},
    },
    summary="Accept or decline an invitation",
)
async def respond_to_invitation(
    payload: RespondRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CollaborationEnvelope:
    return await manuscript_service.respond(
        db, current_user, payload.collaboration_id, payload.status
    )


@router.post(
    "",
    status_code=201,
    response_model=ManuscriptEnvelope,
    responses={401: UNAUTHORIZED},
    summary="Create a manuscript",
)
@router.post("/", status_code=201, response_model=ManuscriptEnvelope, include_in_schema=False)
async def create_manuscript(
    payload: ManuscriptCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ManuscriptEnvelope:
    return await manuscript_service.create_manuscript(db, current_user, payload)


# ── Single manuscript ─────────────────────────────────────────────────────
@router.get(
    "/{manuscript_id}",
    response_model=ManuscriptDetailResponse,
    responses={404: NOT_FOUND},
    summary="Get a manuscript with its collaborators",
)
async def get_manuscript(
    manuscript_id: int, db: AsyncSession = Depends(get_db_session)
) -> ManuscriptDetailResponse:
    return await manuscript_service.get_manuscript(db, manuscript_id)


@router.patch(
    "/{manuscript_id}",
    response_model=ManuscriptEnvelope,
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Update a manuscript",
)
async def update_manuscript(
    manuscript_id: int,
    payload: ManuscriptUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ManuscriptEnvelope:
    return await manuscript_service.update_manuscript(db, current_user, manuscript_id, payload)


@router.delete(
    "/{manuscript_id}",
    response_model=MessageResponse,
    responses={401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND},
    summary="Delete a manuscript",
)
async def delete_manuscript(
    manuscript_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await manuscript_service.delete_manuscript(db, current_user, manuscript_id)
