from __future__ import annotations

from typing import Protocol
from uuid import UUID

from lms.models.enrollment import Enrollment


class EnrollmentRepo(Protocol):
    """Membership ledger between students and courses.

    ``enroll`` is an idempotent insert: it reports whether a new membership
    was created and never produces a duplicate.  There is no unenroll; rows
    only disappear through ``delete_for_course`` when a course is deleted.
    """

    async def enroll(self, course_id: UUID, user_id: str) -> bool: ...
    async def is_enrolled(self, course_id: UUID, user_id: str) -> bool: ...
    async def list_enrolled(self, user_id: str) -> set[UUID]: ...
    async def list_members(self, course_id: UUID) -> set[str]: ...
    async def list_enrollments(self, course_id: UUID) -> list[Enrollment]: ...
    async def delete_for_course(self, course_id: UUID) -> int: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, str], Enrollment] = {}

    async def enroll(self, course_id: UUID, user_id: str) -> bool:
        key = (course_id, user_id)
        if key in self._store:
            return False
        self._store[key] = Enrollment.new(course_id=course_id, user_id=user_id)
        return True

    async def is_enrolled(self, course_id: UUID, user_id: str) -> bool:
        return (course_id, user_id) in self._store

    async def list_enrolled(self, user_id: str) -> set[UUID]:
        return {cid for cid, uid in self._store if uid == user_id}

    async def list_members(self, course_id: UUID) -> set[str]:
        return {uid for cid, uid in self._store if cid == course_id}

    async def list_enrollments(self, course_id: UUID) -> list[Enrollment]:
        return sorted(
            (e for e in self._store.values() if e.course_id == course_id),
            key=lambda e: e.enrolled_at,
            reverse=True,
        )

    async def delete_for_course(self, course_id: UUID) -> int:
        keys = [key for key in self._store if key[0] == course_id]
        for key in keys:
            del self._store[key]
        return len(keys)
