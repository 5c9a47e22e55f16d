"""
Chapter request/response schemas.

The ORM column is `position`; the API calls it "order".
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from yourtales.schemas.common import CamelModel


class ChapterCreate(CamelModel):
    manuscript_id: int
    title: str = Field(min_length=1, max_length=255)
    content: str = ""
    position: int = Field(default=0, alias="order", ge=0)


class ChapterUpdate(CamelModel):
    """PATCH body; only the keys actually sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    position: Optional[int] = Field(default=None, alias="order", ge=0)


class ChapterResponse(CamelModel):
    id: int
    manuscript_id: int
    title: str
    content: str
    position: int = Field(alias="order")
    created_at: datetime
    updated_at: datetime


class ChapterEnvelope(CamelModel):
    message: str
    chapter: ChapterResponse


class ChapterListResponse(CamelModel):
    chapters: List[ChapterResponse]
