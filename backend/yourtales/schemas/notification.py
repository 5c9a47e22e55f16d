"""
Notification response schemas.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import Field

from yourtales.models.enums import NotificationType
from yourtales.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime


class NotificationListResponse(CamelModel):
    notifications: List[NotificationResponse]
    unread_count: int = Field(description="Unread notifications of the caller, ignoring filters")


class NotificationEnvelope(CamelModel):
    message: str
    notification: NotificationResponse
