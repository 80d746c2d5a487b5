"""Course lifecycle: authoring, reading, deletion and educator views.

Ownership is the only authorization rule: the educator who created a
course is the only one who may edit it, delete it, or see its access
code and roster.  Every other caller goes through the visibility filter.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from uuid import UUID

from lms.core.metrics import COURSE_DELETIONS
from lms.models.course import Chapter, Course, CourseView, Lecture
from lms.models.enrollment import Enrollment
from lms.repos.course_repo import CourseRepo
from lms.repos.enrollment_repo import EnrollmentRepo
from lms.repos.progress_repo import ProgressRepo
from lms.services import content
from lms.services.cache import CacheService, course_progress_pattern
from lms.services.content import ChapterDraft, LectureDraft
from lms.services.errors import (
    ForbiddenError,
    NotFoundError,
    StoreUnavailableError,
)
from lms.services.visibility import render_catalog_entry, render_course_view

logger = logging.getLogger(__name__)

RECENT_ENROLLMENTS_LIMIT = 10


@dataclass(frozen=True, slots=True)
class CourseChanges:
    """Partial update; a None field is left unchanged.

    ``content`` replaces the whole chapter tree when given.
    """

    title: str | None = None
    description: str | None = None
    thumbnail_ref: str | None = None
    access_code: str | None = None
    is_published: bool | None = None
    content: tuple[ChapterDraft, ...] | None = None


@dataclass(frozen=True, slots=True)
class Dashboard:
    total_courses: int
    total_enrollments: int
    recent_enrollments: tuple[Enrollment, ...]


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


async def create_course(
    courses: CourseRepo,
    *,
    educator_id: str,
    title: str,
    description: str,
    access_code: str,
    thumbnail_ref: str = "",
    chapters: Sequence[ChapterDraft] = (),
    is_published: bool = True,
) -> Course:
    course = Course.new(
        title=content.require_text("title", title),
        description=content.require_text("description", description),
        access_code=content.require_code(access_code),
        educator_id=educator_id,
        thumbnail_ref=(thumbnail_ref or "").strip(),
        chapters=content.build_content(chapters),
        is_published=is_published,
    )
    await courses.add(course)
    logger.info(
        "Course created id=%s educator=%s chapters=%d",
        course.id,
        educator_id,
        len(course.chapters),
        extra={"user_id": educator_id, "course_id": str(course.id)},
    )
    return course


async def _owned_course(courses: CourseRepo, course_id: UUID, caller_id: str) -> Course:
    course = await courses.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    if not course.is_owned_by(caller_id):
        logger.warning(
            "Ownership check failed user=%s course=%s",
            caller_id,
            course_id,
            extra={"user_id": caller_id, "course_id": str(course_id)},
        )
        raise ForbiddenError("Only the course educator may do this")
    return course


async def _save(courses: CourseRepo, course: Course) -> Course:
    saved = await courses.save(replace(course, updated_at=int(time.time())))
    if saved is None:
        # Deleted between the read and the write
        raise NotFoundError("Course not found")
    return saved


async def update_course(
    courses: CourseRepo,
    cache: CacheService,
    *,
    course_id: UUID,
    caller_id: str,
    changes: CourseChanges,
) -> Course:
    """Apply a partial update.  Existing enrollments survive a code change."""
    course = await _owned_course(courses, course_id, caller_id)

    fields: dict = {}
    if changes.title is not None:
        fields["title"] = content.require_text("title", changes.title)
    if changes.description is not None:
        fields["description"] = content.require_text(
            "description", changes.description
        )
    if changes.access_code is not None:
        fields["access_code"] = content.require_code(changes.access_code)
    if changes.thumbnail_ref is not None:
        fields["thumbnail_ref"] = changes.thumbnail_ref.strip()
    if changes.is_published is not None:
        fields["is_published"] = changes.is_published
    if changes.content is not None:
        fields["chapters"] = content.build_content(changes.content)

    updated = await _save(courses, replace(course, **fields))
    if changes.content is not None:
        # Lecture set changed; cached percentages are stale
        await cache.delete_pattern(course_progress_pattern(course_id))
    logger.info(
        "Course updated id=%s fields=%s",
        course_id,
        ",".join(sorted(fields)),
        extra={"user_id": caller_id, "course_id": str(course_id)},
    )
    return updated


async def add_chapter(
    courses: CourseRepo,
    cache: CacheService,
    *,
    course_id: UUID,
    caller_id: str,
    draft: ChapterDraft,
) -> tuple[Course, Chapter]:
    course = await _owned_course(courses, course_id, caller_id)
    chapters, chapter = content.append_chapter(course.chapters, draft)
    updated = await _save(courses, replace(course, chapters=chapters))
    if chapter.lectures:
        await cache.delete_pattern(course_progress_pattern(course_id))
    return updated, chapter


async def add_lecture(
    courses: CourseRepo,
    cache: CacheService,
    *,
    course_id: UUID,
    caller_id: str,
    chapter_id: str,
    draft: LectureDraft,
) -> tuple[Course, Lecture]:
    course = await _owned_course(courses, course_id, caller_id)
    chapters, lecture = content.append_lecture(course.chapters, chapter_id, draft)
    updated = await _save(courses, replace(course, chapters=chapters))
    await cache.delete_pattern(course_progress_pattern(course_id))
    return updated, lecture


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


async def get_course(courses: CourseRepo, course_id: UUID) -> Course:
    course = await courses.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


async def view_course(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    course_id: UUID,
    caller_id: str | None,
) -> CourseView:
    """Course detail as the caller is allowed to see it.

    Unpublished courses are only visible to their educator and to
    students who enrolled before the course was unpublished.
    """
    course = await get_course(courses, course_id)
    is_enrolled = caller_id is not None and await enrollments.is_enrolled(
        course_id, caller_id
    )
    if not course.is_published and not (is_enrolled or course.is_owned_by(caller_id)):
        raise NotFoundError("Course not found")
    return render_course_view(course, caller_id, is_enrolled)


async def list_catalog(courses: CourseRepo) -> list[CourseView]:
    return [render_catalog_entry(c) for c in await courses.list_published()]


async def list_enrolled_courses(
    courses: CourseRepo, enrollments: EnrollmentRepo, *, user_id: str
) -> list[CourseView]:
    """Published courses the user is enrolled in, URLs revealed."""
    course_ids = await enrollments.list_enrolled(user_id)
    found = await courses.list_by_ids(course_ids)
    found.sort(key=lambda c: c.created_at, reverse=True)
    return [
        render_course_view(c, user_id, is_enrolled=True)
        for c in found
        if c.is_published
    ]


async def get_enrolled_course(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    course_id: UUID,
    user_id: str,
) -> CourseView:
    if not await enrollments.is_enrolled(course_id, user_id):
        raise NotFoundError("Not enrolled in this course")
    course = await get_course(courses, course_id)
    return render_course_view(course, user_id, is_enrolled=True)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


async def delete_course(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    progress: ProgressRepo,
    cache: CacheService,
    *,
    course_id: UUID,
    caller_id: str,
) -> None:
    """Delete a course and everything that hangs off it.

    Steps run in order: progress records, enrollments, the course, then
    the cached snapshots.  A failing step is logged with its name and
    surfaces as StoreUnavailableError; earlier steps are not undone by
    the in-memory repos.  With PostgreSQL the whole request shares one
    session, so a failure rolls every step back.
    """
    await _owned_course(courses, course_id, caller_id)

    steps = (
        ("progress", lambda: progress.delete_for_course(course_id)),
        ("enrollments", lambda: enrollments.delete_for_course(course_id)),
        ("course", lambda: courses.delete(course_id)),
        ("cache", lambda: cache.delete_pattern(course_progress_pattern(course_id))),
    )
    removed: dict[str, object] = {}
    for name, step in steps:
        try:
            removed[name] = await step()
        except Exception as e:
            COURSE_DELETIONS.labels(result="failed").inc()
            logger.exception(
                "Course deletion failed at step=%s course=%s",
                name,
                course_id,
                extra={"user_id": caller_id, "course_id": str(course_id)},
            )
            raise StoreUnavailableError(
                f"course deletion failed at step {name}"
            ) from e

    COURSE_DELETIONS.labels(result="ok").inc()
    logger.info(
        "Course deleted id=%s progress_records=%s enrollments=%s",
        course_id,
        removed["progress"],
        removed["enrollments"],
        extra={"user_id": caller_id, "course_id": str(course_id)},
    )


# ---------------------------------------------------------------------------
# Educator views
# ---------------------------------------------------------------------------


async def list_educator_courses(
    courses: CourseRepo, *, educator_id: str
) -> list[CourseView]:
    return [
        render_course_view(c, educator_id, is_enrolled=False)
        for c in await courses.list_by_educator(educator_id)
    ]


async def list_students(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    course_id: UUID,
    caller_id: str,
) -> list[Enrollment]:
    await _owned_course(courses, course_id, caller_id)
    return await enrollments.list_enrollments(course_id)


async def dashboard(
    courses: CourseRepo, enrollments: EnrollmentRepo, *, educator_id: str
) -> Dashboard:
    owned = await courses.list_by_educator(educator_id)
    all_enrollments: list[Enrollment] = []
    for course in owned:
        all_enrollments.extend(await enrollments.list_enrollments(course.id))
    all_enrollments.sort(key=lambda e: e.enrolled_at, reverse=True)
    return Dashboard(
        total_courses=len(owned),
        total_enrollments=len(all_enrollments),
        recent_enrollments=tuple(all_enrollments[:RECENT_ENROLLMENTS_LIMIT]),
    )
