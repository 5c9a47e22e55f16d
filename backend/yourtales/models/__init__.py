# Models package init
"""
Importing this package registers every table on Base.metadata
(used by Alembic autogenerate and by the test suite's create_all).
"""

from yourtales.models.enums import (
    CollaborationRole,
    CollaborationStatus,
    ManuscriptStatus,
    NotificationType,
    UserRole,
)
from yourtales.models.user import User
from yourtales.models.manuscript import Collaboration, Manuscript
from yourtales.models.chapter import Chapter
from yourtales.models.feedback import Comment, Review
from yourtales.models.notification import Notification

__all__ = [
    "Chapter",
    "Collaboration",
    "CollaborationRole",
    "CollaborationStatus",
    "Comment",
    "Manuscript",
    "ManuscriptStatus",
    "Notification",
    "NotificationType",
    "Review",
    "User",
    "UserRole",
]
