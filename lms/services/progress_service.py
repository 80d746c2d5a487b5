"""Progress reporting and the cached progress read.

Write path (ReportProgress):
  course exists? -> caller enrolled or owner? -> lecture in current tree?
  -> set-add completion / move resume pointer -> commit -> drop cached snapshot

Read path (GetProgress), read-through:
  cache hit -> return
  cache miss -> load course + record -> summarize -> populate -> return

Reads never fail on missing data: no record, or a course that has been
deleted, yields the empty snapshot (0 completed, position (0, 0), 0%).
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from uuid import UUID

from lms.core.config import SETTINGS
from lms.core.metrics import CACHE_OPERATIONS, LECTURE_COMPLETIONS
from lms.models.progress import Position, ProgressSnapshot
from lms.repos.course_repo import CourseRepo
from lms.repos.enrollment_repo import EnrollmentRepo
from lms.repos.progress_repo import ProgressRepo
from lms.services import progress_aggregator
from lms.services.cache import CacheService, progress_key
from lms.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def dump_snapshot(snapshot: ProgressSnapshot) -> str:
    data = asdict(snapshot)
    data["course_id"] = str(snapshot.course_id)
    data["completed_lecture_ids"] = list(snapshot.completed_lecture_ids)
    return json.dumps(data)


def load_snapshot(raw: str) -> ProgressSnapshot:
    data = json.loads(raw)
    return ProgressSnapshot(
        user_id=data["user_id"],
        course_id=UUID(data["course_id"]),
        completed_lecture_ids=tuple(data["completed_lecture_ids"]),
        last_lecture_id=data["last_lecture_id"],
        last_position=Position(**data["last_position"]),
        total_lectures=data["total_lectures"],
        completed_count=data["completed_count"],
        percent_complete=data["percent_complete"],
        is_complete=data["is_complete"],
        updated_at=data["updated_at"],
    )


async def report_progress(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    progress: ProgressRepo,
    cache: CacheService,
    *,
    caller_id: str,
    course_id: UUID,
    lecture_id: str,
    position: Position | None = None,
    completed: bool = True,
) -> ProgressSnapshot:
    """Record a lecture interaction and return the fresh snapshot.

    ``completed=False`` only moves the resume pointer.  Repeating a
    completion is a no-op for the completed set.  ``position`` is the
    client's view of where the lecture sits; when omitted it is resolved
    from the current tree.
    """
    course = await courses.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")

    if not course.is_owned_by(caller_id) and not await enrollments.is_enrolled(
        course_id, caller_id
    ):
        logger.warning(
            "Progress report rejected: user=%s not enrolled in course=%s",
            caller_id,
            course_id,
            extra={"user_id": caller_id, "course_id": str(course_id)},
        )
        raise ForbiddenError("Not enrolled in this course")

    if lecture_id not in progress_aggregator.lecture_ids(course):
        raise NotFoundError(f"Lecture {lecture_id!r} not found in course")

    if position is None:
        position = progress_aggregator.resolve_position(course, lecture_id)

    if completed:
        record, added = await progress.mark_lecture_complete(
            caller_id, course_id, lecture_id, position
        )
        if added:
            LECTURE_COMPLETIONS.inc()
            logger.info(
                "Lecture completed user=%s course=%s lecture=%s",
                caller_id,
                course_id,
                lecture_id,
                extra={
                    "user_id": caller_id,
                    "course_id": str(course_id),
                    "lecture_id": lecture_id,
                },
            )
    else:
        record = await progress.record_position(
            caller_id, course_id, lecture_id, position
        )

    # Drop the cached snapshot only after the write is visible to readers
    await progress.commit()
    await cache.delete(progress_key(course_id, caller_id))

    return progress_aggregator.summarize(
        course, record, user_id=caller_id, course_id=course_id
    )


async def get_progress(
    courses: CourseRepo,
    progress: ProgressRepo,
    cache: CacheService,
    *,
    caller_id: str,
    course_id: UUID,
) -> ProgressSnapshot:
    key = progress_key(course_id, caller_id)

    cached = await cache.get(key)
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return load_snapshot(cached)
    CACHE_OPERATIONS.labels(operation="miss").inc()

    course = await courses.get(course_id)
    if course is None:
        # Deleted or never existed; not cached so a recreated id starts clean
        return ProgressSnapshot.empty(user_id=caller_id, course_id=course_id)

    record = await progress.get(caller_id, course_id)
    snapshot = progress_aggregator.summarize(
        course, record, user_id=caller_id, course_id=course_id
    )
    await cache.set(key, dump_snapshot(snapshot), SETTINGS.progress_cache_ttl)
    return snapshot
