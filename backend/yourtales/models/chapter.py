"""
YourTales Backend - Chapter SQLAlchemy Model
=============================================

What:  ORM model for the `chapters` table.
How:   A chapter belongs to exactly one manuscript and is ordered inside it
       by `position` (exposed as "order" in the API). Positions are not
       required to be unique or contiguous; ties keep insertion order.
"""

from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yourtales.database import Base
from yourtales.models.manuscript import Manuscript
from yourtales.models.user import utcnow


class Chapter(Base):
    __tablename__ = "chapters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    manuscript_id: Mapped[int] = mapped_column(
        ForeignKey("manuscripts.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # "order" is a reserved word in SQL
    position: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    manuscript: Mapped[Manuscript] = relationship(back_populates="chapters", lazy="raise")
    comments: Mapped[List["Comment"]] = relationship(  # noqa: F821
        back_populates="chapter", passive_deletes=True, lazy="raise"
    )
    reviews: Mapped[List["Review"]] = relationship(  # noqa: F821
        back_populates="chapter", passive_deletes=True, lazy="raise"
    )

    __table_args__ = (
        Index("idx_chapters_manuscript_position", "manuscript_id", "position"),
    )

    def __repr__(self) -> str:
        return (
            f"<Chapter(id={self.id}, manuscript_id={self.manuscript_id}, "
            f"position={self.position})>"
        )
