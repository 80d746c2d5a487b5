from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Position:
    """(chapter index, lecture index) into a course's content tree."""

    chapter: int = 0
    lecture: int = 0


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """Stored per (user, course).

    The resume pointer is ``last_lecture_id``; ``last_position`` is what the
    client reported at write time and goes stale if chapters are reordered.
    There is no stored "completed" flag: completion is always derived from
    the live content tree on read.
    """

    user_id: str
    course_id: UUID
    completed_lecture_ids: frozenset[str] = frozenset()
    last_lecture_id: str | None = None
    last_position: Position = Position()
    updated_at: int = 0


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Read model returned by GetProgress / ReportProgress."""

    user_id: str
    course_id: UUID
    completed_lecture_ids: tuple[str, ...] = ()
    last_lecture_id: str | None = None
    last_position: Position = Position()
    total_lectures: int = 0
    completed_count: int = 0
    percent_complete: int = 0
    is_complete: bool = False
    updated_at: int | None = None

    @staticmethod
    def empty(*, user_id: str, course_id: UUID) -> ProgressSnapshot:
        return ProgressSnapshot(user_id=user_id, course_id=course_id)
