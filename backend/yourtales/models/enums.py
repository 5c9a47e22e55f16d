"""
Enumerated column values shared by the ORM models and the API schemas.

Members subclass ``str`` so they compare equal to their stored text and
serialize to plain strings in JSON.
"""

import enum


class UserRole(str, enum.Enum):
    READER = "READER"
    AUTHOR = "AUTHOR"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class ManuscriptStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class CollaborationRole(str, enum.Enum):
    VIEWER = "VIEWER"
    EDITOR = "EDITOR"
    REVIEWER = "REVIEWER"


class CollaborationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class NotificationType(str, enum.Enum):
    SYSTEM = "SYSTEM"
    COLLABORATION = "COLLABORATION"
    COMMENT = "COMMENT"
    MENTION = "MENTION"
