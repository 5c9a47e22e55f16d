"""Initial YourTales schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, manuscripts, collaborations, chapters, comments,
       reviews and notifications.
How:   Enum columns are plain VARCHAR (native_enum=False in the models), so
       adding a new role or status never needs an ALTER TYPE.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("CURRENT_TIMESTAMP"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column(
            "email",
            sa.String(320),
            nullable=False,
            comment="Login identifier; also matched against collaboration invitations",
        ),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), server_default=sa.text("'READER'"), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("otp_code", sa.String(10), nullable=True),
        sa.Column("otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("otp_verified", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "manuscripts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("genre", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("cover_url", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), server_default=sa.text("'DRAFT'"), nullable=False),
        sa.Column("reads", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("price", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_manuscripts_author_id", "manuscripts", ["author_id"])
    op.create_index(
        "idx_manuscripts_status_updated_at",
        "manuscripts",
        ["status", sa.text("updated_at DESC")],
    )

    op.create_table(
        "collaborations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("manuscript_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("role", sa.String(20), server_default=sa.text("'VIEWER'"), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["manuscript_id"], ["manuscripts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("manuscript_id", "email", name="uq_collaborations_manuscript_email"),
    )
    op.create_index("ix_collaborations_manuscript_id", "collaborations", ["manuscript_id"])
    op.create_index("ix_collaborations_user_id", "collaborations", ["user_id"])

    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("manuscript_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["manuscript_id"], ["manuscripts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_chapters_manuscript_position", "chapters", ["manuscript_id", "position"]
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chapter_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_chapter_id", "comments", ["chapter_id"])
    op.create_index("ix_comments_author_id", "comments", ["author_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chapter_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_chapter_id", "reviews", ["chapter_id"])
    op.create_index("ix_reviews_author_id", "reviews", ["author_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    # Feed query: one recipient, newest first
    op.create_index(
        "idx_notifications_recipient_created_at",
        "notifications",
        ["recipient_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop every table, children before parents."""
    op.drop_index("idx_notifications_recipient_created_at", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_reviews_author_id", table_name="reviews")
    op.drop_index("ix_reviews_chapter_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("ix_comments_author_id", table_name="comments")
    op.drop_index("ix_comments_chapter_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_chapters_manuscript_position", table_name="chapters")
    op.drop_table("chapters")
    op.drop_index("ix_collaborations_user_id", table_name="collaborations")
    op.drop_index("ix_collaborations_manuscript_id", table_name="collaborations")
    op.drop_table("collaborations")
    op.drop_index("idx_manuscripts_status_updated_at", table_name="manuscripts")
    op.drop_index("ix_manuscripts_author_id", table_name="manuscripts")
    op.drop_table("manuscripts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
