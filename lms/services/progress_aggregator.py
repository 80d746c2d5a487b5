"""Progress aggregation: pure functions over a course tree and a record.

Nothing here touches storage.  Percent complete and completion status are
always derived from the *current* content tree, so completed ids for
lectures that were later deleted never inflate the numerator, and a
reordered tree never sends a student back to the wrong lecture.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from lms.models.course import Course
from lms.models.progress import Position, ProgressRecord, ProgressSnapshot


def lecture_ids(course: Course) -> frozenset[str]:
    return frozenset(lecture.id for _, _, lecture in course.iter_lectures())


def total_lectures(course: Course) -> int:
    """Every lecture counts, regardless of type or preview flag."""
    return sum(len(chapter.lectures) for chapter in course.chapters)


def live_completed(course: Course, completed: Iterable[str]) -> frozenset[str]:
    return lecture_ids(course) & frozenset(completed)


def percent_complete(course: Course, completed: Iterable[str]) -> int:
    """Integer percentage in [0, 100], rounded half up."""
    total = total_lectures(course)
    if total == 0:
        return 0
    done = len(live_completed(course, completed))
    # integer round half up of 100 * done / total
    return (200 * done + total) // (2 * total)


def is_complete(course: Course, completed: Iterable[str]) -> bool:
    return percent_complete(course, completed) == 100


def resolve_position(course: Course, lecture_id: str | None) -> Position:
    """Locate a lecture in the current tree; (0, 0) when it is gone."""
    if lecture_id is not None:
        for ci, li, lecture in course.iter_lectures():
            if lecture.id == lecture_id:
                return Position(chapter=ci, lecture=li)
    return Position()


def summarize(
    course: Course | None,
    record: ProgressRecord | None,
    *,
    user_id: str,
    course_id: UUID,
) -> ProgressSnapshot:
    """Build the read model.  A missing course or record gives the empty default."""
    if course is None:
        return ProgressSnapshot.empty(user_id=user_id, course_id=course_id)

    total = total_lectures(course)
    if record is None:
        return ProgressSnapshot(
            user_id=user_id, course_id=course_id, total_lectures=total
        )

    live_ids = lecture_ids(course)
    done = live_ids & record.completed_lecture_ids
    percent = percent_complete(course, done)
    return ProgressSnapshot(
        user_id=user_id,
        course_id=course_id,
        # tree order, so clients can render the list directly
        completed_lecture_ids=tuple(
            lec.id for _, _, lec in course.iter_lectures() if lec.id in done
        ),
        last_lecture_id=(
            record.last_lecture_id if record.last_lecture_id in live_ids else None
        ),
        last_position=resolve_position(course, record.last_lecture_id),
        total_lectures=total,
        completed_count=len(done),
        percent_complete=percent,
        is_complete=percent == 100,
        updated_at=record.updated_at,
    )
