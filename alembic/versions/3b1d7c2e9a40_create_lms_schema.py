"""create lms schema

Revision ID: 3b1d7c2e9a40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1d7c2e9a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("thumbnail_ref", sa.Text(), nullable=False, server_default=""),
        sa.Column("access_code", sa.String(length=128), nullable=False),
        sa.Column("educator_id", sa.String(length=255), nullable=False),
        sa.Column(
            "is_published", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_courses_educator_id", "courses", ["educator_id"])

    op.create_table(
        "chapters",
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("chapter_order", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
    )

    op.create_table(
        "lectures",
        sa.Column("course_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("chapter_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("lecture_order", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "is_preview_free", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.ForeignKeyConstraint(
            ["course_id", "chapter_id"],
            ["chapters.course_id", "chapters.id"],
            ondelete="CASCADE",
        ),
    )

    op.create_table(
        "enrollments",
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.String(length=255), primary_key=True),
        sa.Column("enrolled_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])

    op.create_table(
        "course_progress",
        sa.Column("user_id", sa.String(length=255), primary_key=True),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            primary_key=True,
        ),
        sa.Column("last_lecture_id", sa.String(length=64), nullable=True),
        sa.Column(
            "last_chapter_index", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "last_lecture_index", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "completed_lectures",
        sa.Column("user_id", sa.String(length=255), primary_key=True),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("lecture_id", sa.String(length=64), primary_key=True),
        sa.Column("completed_at", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id", "course_id"],
            ["course_progress.user_id", "course_progress.course_id"],
        ),
    )


def downgrade() -> None:
    op.drop_table("completed_lectures")
    op.drop_table("course_progress")
    op.drop_index("ix_enrollments_user_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("lectures")
    op.drop_table("chapters")
    op.drop_index("ix_courses_educator_id", table_name="courses")
    op.drop_table("courses")
