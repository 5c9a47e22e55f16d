"""
Comment and review request/response schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from yourtales.schemas.common import CamelModel
from yourtales.schemas.user import UserSummary


class CommentCreate(CamelModel):
    chapter_id: int
    content: str = Field(min_length=1, max_length=10_000)


class ReviewCreate(CamelModel):
    chapter_id: int
    rating: int = Field(ge=1, le=5, description="Star rating from 1 to 5")
    content: Optional[str] = Field(default=None, max_length=10_000)


class CommentResponse(CamelModel):
    id: int
    chapter_id: int
    author_id: int
    content: str
    created_at: datetime
    author: UserSummary


class ReviewResponse(CamelModel):
    id: int
    chapter_id: int
    author_id: int
    rating: int
    content: Optional[str] = None
    created_at: datetime
    author: UserSummary


class CommentEnvelope(CamelModel):
    message: str
    comment: CommentResponse


class ReviewEnvelope(CamelModel):
    message: str
    review: ReviewResponse


class CommentListResponse(CamelModel):
    comments: List[CommentResponse]


class ReviewListResponse(CamelModel):
    reviews: List[ReviewResponse]
