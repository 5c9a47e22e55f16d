"""
YourTales Backend - Notification Routes
========================================

    GET    /api/notifications                       caller's feed (?type=&isRead=)
    PATCH  /api/notifications/mark-all-read         mark every unread as read
    PATCH  /api/notifications/{notification_id}/read
    DELETE /api/notifications/{notification_id}

All routes require a bearer token and only ever touch the caller's rows.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.dependencies import get_current_user
from yourtales.models.enums import NotificationType
from yourtales.models.user import User
from yourtales.schemas.common import ErrorResponse, MessageResponse
from yourtales.schemas.notification import NotificationEnvelope, NotificationListResponse
from yourtales.services.notification_service import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

UNAUTHORIZED = {"description": "Missing or invalid token", "model": ErrorResponse}
NOT_FOUND = {"description": "Notification not found", "model": ErrorResponse}


@router.get(
    "",
    response_model=NotificationListResponse,
    responses={401: UNAUTHORIZED},
    summary="List the caller's notifications",
)
@router.get("/", response_model=NotificationListResponse, include_in_schema=False)
async def list_notifications(
    type: Optional[NotificationType] = Query(default=None, description="Only this type"),
    is_read: Optional[bool] = Query(default=None, alias="isRead", description="Read state filter"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationListResponse:
    return await notification_service.list_for_user(
        db, current_user.id, notification_type=type, is_read=is_read
    )


@router.patch(
    "/mark-all-read",
    response_model=MessageResponse,
    responses={401: UNAUTHORIZED},
    summary="Mark all notifications as read",
)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await notification_service.mark_all_read(db, current_user.id)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationEnvelope,
    responses={401: UNAUTHORIZED, 404: NOT_FOUND},
    summary="Mark one notification as read",
)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationEnvelope:
    return await notification_service.mark_read(db, current_user.id, notification_id)


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    responses={401: UNAUTHORIZED, 404: NOT_FOUND},
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await notification_service.delete(db, current_user.id, notification_id)
