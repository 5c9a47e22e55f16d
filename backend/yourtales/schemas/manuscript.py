"""
YourTales Backend - Manuscript & Collaboration Schemas
=======================================================

What:  API contracts for manuscript CRUD, invitations and dashboard stats.

Response shapes by endpoint:
    POST/PATCH /api/manuscripts         → ManuscriptEnvelope (flat manuscript)
    GET /api/manuscripts                → PublishedManuscriptList (author + chapter count)
    GET /api/manuscripts/my-manuscripts → MyManuscriptList (author + collaborations)
    GET /api/manuscripts/{id}           → ManuscriptDetailResponse (author + collaborators)
    GET /api/manuscripts/stats          → StatsResponse
"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from yourtales.models.enums import (
    CollaborationRole,
    CollaborationStatus,
    ManuscriptStatus,
)
from yourtales.schemas.common import CamelModel
from yourtales.schemas.user import UserContact, UserSummary


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ManuscriptCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    genre: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    cover_url: Optional[str] = Field(default=None, max_length=1024)


class ManuscriptUpdate(CamelModel):
    """PATCH body; only the keys actually sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    genre: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_url: Optional[str] = Field(default=None, max_length=1024)
    status: Optional[ManuscriptStatus] = None
    price: Optional[float] = Field(default=None, ge=0)


class InviteRequest(CamelModel):
    manuscript_id: int
    email: EmailStr
    role: CollaborationRole = CollaborationRole.VIEWER


class RespondRequest(CamelModel):
    collaboration_id: int
    status: CollaborationStatus = Field(description="ACCEPTED or DECLINED")

    @field_validator("status")
    @classmethod
    def validate_answer(cls, v: CollaborationStatus) -> CollaborationStatus:
        """An invitation can only be answered with ACCEPTED or DECLINED."""
        if v == CollaborationStatus.PENDING:
            raise ValueError("status must be ACCEPTED or DECLINED")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ManuscriptResponse(CamelModel):
    id: int
    title: str
    subtitle: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    cover_url: Optional[str] = None
    status: ManuscriptStatus
    reads: int = 0
    price: float = 0.0
    author_id: int
    created_at: datetime
    updated_at: datetime


class CollaborationResponse(CamelModel):
    id: int
    manuscript_id: int
    email: str
    user_id: Optional[int] = None
    role: CollaborationRole
    status: CollaborationStatus
    created_at: datetime


class CollaboratorResponse(CollaborationResponse):
    user: Optional[UserContact] = None


class PublishedManuscriptItem(ManuscriptResponse):
    author: UserSummary
    chapter_count: int = 0


class MyManuscriptItem(ManuscriptResponse):
    author: UserContact
    collaborations: List[CollaborationResponse] = Field(default_factory=list)


class ManuscriptDetail(ManuscriptResponse):
    author: UserContact
    collaborations: List[CollaboratorResponse] = Field(default_factory=list)


class ManuscriptEnvelope(CamelModel):
    message: str
    manuscript: ManuscriptResponse


class PublishedManuscriptList(CamelModel):
    manuscripts: List[PublishedManuscriptItem]


class MyManuscriptList(CamelModel):
    manuscripts: List[MyManuscriptItem]


class ManuscriptDetailResponse(CamelModel):
    manuscript: ManuscriptDetail


class CollaborationEnvelope(CamelModel):
    message: str
    collaboration: CollaborationResponse


class DashboardStats(CamelModel):
    total_manuscripts: int
    published_books: int
    total_reads: int
    total_earnings: float


class StatsResponse(CamelModel):
    stats: DashboardStats
