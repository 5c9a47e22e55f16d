"""
YourTales Backend - Notification SQLAlchemy Model
==================================================

What:  ORM model for the `notifications` table (per-user activity feed).
How:   Rows are written by NotificationService.notify() as a side effect of
       other mutations and are only ever read, marked read, or deleted by
       their recipient.

    data: JSON object with ids of the related rows, e.g.
          {"manuscriptId": 3, "chapterId": 9, "commentId": 41}
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from yourtales.database import Base
from yourtales.models.enums import NotificationType
from yourtales.models.user import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    recipient_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, native_enum=False, length=20),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        # Inbox query: WHERE recipient_id = ? ORDER BY created_at DESC
        Index("idx_notifications_recipient_created_at", "recipient_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, recipient_id={self.recipient_id}, "
            f"type='{self.type}', is_read={self.is_read})>"
        )
