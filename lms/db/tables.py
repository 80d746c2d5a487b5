"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in lms/models/; the
Pg* repos convert between rows and dataclasses.

Membership and completion are stored one row per fact with composite
primary keys, so "add to set" is an ``INSERT ... ON CONFLICT DO NOTHING``
and concurrent writers can never create duplicates.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.db.engine import Base


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_ref: Mapped[str] = mapped_column(Text, nullable=False, default="")
    access_code: Mapped[str] = mapped_column(String(128), nullable=False)
    educator_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    chapters: Mapped[list[ChapterRow]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="ChapterRow.position",
        lazy="selectin",
    )


class ChapterRow(Base):
    __tablename__ = "chapters"

    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    order: Mapped[int] = mapped_column("chapter_order", Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # index in tree

    course: Mapped[CourseRow] = relationship(back_populates="chapters")
    lectures: Mapped[list[LectureRow]] = relationship(
        back_populates="chapter",
        cascade="all, delete-orphan",
        order_by="LectureRow.position",
        lazy="selectin",
    )


class LectureRow(Base):
    __tablename__ = "lectures"
    __table_args__ = (
        ForeignKeyConstraint(
            ["course_id", "chapter_id"],
            ["chapters.course_id", "chapters.id"],
            ondelete="CASCADE",
        ),
    )

    # Lecture ids are unique course-wide, not just per chapter
    course_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    chapter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)  # video|pdf
    url: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[int] = mapped_column("lecture_order", Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_preview_free: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    chapter: Mapped[ChapterRow] = relationship(back_populates="lectures")


class EnrollmentRow(Base):
    __tablename__ = "enrollments"

    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True, index=True)
    enrolled_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class CourseProgressRow(Base):
    __tablename__ = "course_progress"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), primary_key=True
    )
    last_lecture_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_chapter_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_lecture_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class CompletedLectureRow(Base):
    __tablename__ = "completed_lectures"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "course_id"],
            ["course_progress.user_id", "course_progress.course_id"],
        ),
    )

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    course_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    # No FK to lectures: completed ids may outlive a deleted lecture and are
    # filtered against the live tree on read
    lecture_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    completed_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
