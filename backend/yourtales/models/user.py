"""
YourTales Backend - User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for registration, OTP verification and login,
       and by the auth dependency to resolve the caller of every protected route.

Table Design:
    - email is unique: it is the login identifier and the invitation key
    - password_hash stores an argon2id PHC string, never the plaintext
    - otp_code / otp_expires_at hold the single outstanding one-time code;
      both are cleared once the code is consumed
    - role is the global role; READER is promoted to EDITOR when the user
      accepts a collaboration invitation
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yourtales.database import Base
from yourtales.models.enums import UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier; also matched against collaboration invitations",
    )

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.READER,
        server_default=text("'READER'"),
    )

    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # ── One-time codes ────────────────────────────────────────────────────
    otp_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    otp_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
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

    # ── Relationships ─────────────────────────────────────────────────────
    # Deletion cascades happen in the database (ON DELETE CASCADE)
    manuscripts: Mapped[List["Manuscript"]] = relationship(  # noqa: F821
        back_populates="author",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
