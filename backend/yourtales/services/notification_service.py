"""
YourTales Backend - Notification Service
=========================================

What:  Writes activity notifications and serves the recipient's feed.
Who:   notify() is called by ManuscriptService and FeedbackService after a
       primary mutation; the remaining methods back /api/notifications.

Delivery contract:
    notify() performs one INSERT inside a SAVEPOINT. When the insert fails
    the savepoint is rolled back, the failure is logged, and the caller's
    transaction carries on as if nothing happened. There is no retry and no
    ordering guarantee between notifications.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.exceptions import DatabaseError, NotFoundError, YourTalesError
from yourtales.models.enums import NotificationType
from yourtales.models.notification import Notification
from yourtales.schemas.common import MessageResponse
from yourtales.schemas.notification import (
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Best-effort writer and per-user reader of notifications."""

    async def notify(
        self,
        db: AsyncSession,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        """
        Insert one notification for recipient_id.

        Returns the new row, or None when the insert failed. Never raises
        for database errors.
        """
        notification = Notification(
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
        )
        try:
            async with db.begin_nested():
                db.add(notification)
            logger.info(
                "Notification %s sent to user %s: %s", notification.id, recipient_id, title
            )
            return notification
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create notification for user %s (%s): %s",
                recipient_id,
                title,
                str(e),
            )
            return None

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: int,
        notification_type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
    ) -> NotificationListResponse:
        """
        The caller's notifications, newest first.

        unread_count always covers every unread notification of the caller,
        regardless of the type/is_read filters.
        """
        try:
            query = select(Notification).where(Notification.recipient_id == user_id)
            if notification_type is not None:
                query = query.where(Notification.type == notification_type)
            if is_read is not None:
                query = query.where(Notification.is_read == is_read)
            query = query.order_by(Notification.created_at.desc(), Notification.id.desc())

            result = await db.execute(query)
            notifications = result.scalars().all()

            unread_result = await db.execute(
                select(func.count(Notification.id)).where(
                    Notification.recipient_id == user_id,
                    Notification.is_read.is_(False),
                )
            )
            unread_count = unread_result.scalar() or 0

            return NotificationListResponse(
                notifications=[NotificationResponse.model_validate(n) for n in notifications],
                unread_count=unread_count,
            )
        except Exception as e:
            logger.error("Database error listing notifications: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notifications. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

    async def mark_all_read(self, db: AsyncSession, user_id: int) -> MessageResponse:
        try:
            result = await db.execute(
                update(Notification)
                .where(
                    Notification.recipient_id == user_id,
                    Notification.is_read.is_(False),
                )
                .values(is_read=True)
            )
            logger.info("Marked %s notifications read for user %s", result.rowcount, user_id)
            return MessageResponse(message="All notifications marked as read")
        except Exception as e:
            logger.error("Database error marking notifications read: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def mark_read(
        self, db: AsyncSession, user_id: int, notification_id: int
    ) -> NotificationEnvelope:
        try:
            notification = await self._get_own(db, user_id, notification_id)
            notification.is_read = True
            await db.flush()
            return NotificationEnvelope(
                message="Notification marked as read",
                notification=NotificationResponse.model_validate(notification),
            )
        except YourTalesError:
            raise
        except Exception as e:
            logger.error("Database error marking notification %s: %s", notification_id, str(e))
            raise DatabaseError(context={"notification_id": notification_id})

    async def delete(
        self, db: AsyncSession, user_id: int, notification_id: int
    ) -> MessageResponse:
        try:
            await self._get_own(db, user_id, notification_id)
            await db.execute(delete(Notification).where(Notification.id == notification_id))
            return MessageResponse(message="Notification deleted")
        except YourTalesError:
            raise
        except Exception as e:
            logger.error("Database error deleting notification %s: %s", notification_id, str(e))
            raise DatabaseError(context={"notification_id": notification_id})

    async def _get_own(
        self, db: AsyncSession, user_id: int, notification_id: int
    ) -> Notification:
        # Someone else's notification is reported as missing
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.recipient_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))
        return notification


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
