"""
YourTales Backend - Manuscript & Collaboration SQLAlchemy Models
================================================================

What:  ORM models for the `manuscripts` and `collaborations` tables.
Who:   Used by ManuscriptService (CRUD, invitations) and by ChapterService /
       FeedbackService, which load the parent manuscript to check permissions.

Relationships are declared with lazy="raise": every query that needs the
author, collaborators or chapters must ask for them with selectinload().
Async sessions cannot lazy-load, so an implicit load is a bug we want to see.

Collaboration lifecycle:
    PENDING ──respond(ACCEPTED)──▶ ACCEPTED
       │
       └──────respond(DECLINED)──▶ DECLINED

    An invitation is keyed by (manuscript_id, email). user_id is filled in at
    invite time when the email already belongs to an account, and at accept
    time otherwise.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yourtales.database import Base
from yourtales.models.enums import (
    CollaborationRole,
    CollaborationStatus,
    ManuscriptStatus,
)
from yourtales.models.user import User, utcnow


class Manuscript(Base):
    """A book or story owned by one author and edited by collaborators."""

    __tablename__ = "manuscripts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # List of free-form tag strings
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    cover_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    status: Mapped[ManuscriptStatus] = mapped_column(
        Enum(ManuscriptStatus, native_enum=False, length=20),
        nullable=False,
        default=ManuscriptStatus.DRAFT,
        server_default=text("'DRAFT'"),
    )

    reads: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    price: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )

    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
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

    author: Mapped[User] = relationship(back_populates="manuscripts", lazy="raise")
    collaborations: Mapped[List["Collaboration"]] = relationship(
        back_populates="manuscript",
        passive_deletes=True,
        lazy="raise",
    )
    chapters: Mapped[List["Chapter"]] = relationship(  # noqa: F821
        back_populates="manuscript",
        passive_deletes=True,
        order_by="Chapter.position",
        lazy="raise",
    )

    __table_args__ = (
        # Listing pages sort by most recently updated
        Index("idx_manuscripts_status_updated_at", "status", updated_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Manuscript(id={self.id}, title='{self.title}', status='{self.status}')>"


class Collaboration(Base):
    """An invitation for a person (by email) to work on a manuscript."""

    __tablename__ = "collaborations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    manuscript_id: Mapped[int] = mapped_column(
        ForeignKey("manuscripts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False)

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    role: Mapped[CollaborationRole] = mapped_column(
        Enum(CollaborationRole, native_enum=False, length=20),
        nullable=False,
        default=CollaborationRole.VIEWER,
        server_default=text("'VIEWER'"),
    )

    status: Mapped[CollaborationStatus] = mapped_column(
        Enum(CollaborationStatus, native_enum=False, length=20),
        nullable=False,
        default=CollaborationStatus.PENDING,
        server_default=text("'PENDING'"),
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

    manuscript: Mapped[Manuscript] = relationship(
        back_populates="collaborations", lazy="raise"
    )
    user: Mapped[Optional[User]] = relationship(lazy="raise")

    __table_args__ = (
        UniqueConstraint("manuscript_id", "email", name="uq_collaborations_manuscript_email"),
    )

    def __repr__(self) -> str:
        return (
            f"<Collaboration(id={self.id}, manuscript_id={self.manuscript_id}, "
            f"email='{self.email}', role='{self.role}', status='{self.status}')>"
        )
