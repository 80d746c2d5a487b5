from __future__ import annotations

from typing import Protocol
from uuid import UUID

from lms.models.course import Course


class CourseRepo(Protocol):
    async def get(self, course_id: UUID) -> Course | None: ...
    async def add(self, course: Course) -> None: ...
    async def save(self, course: Course) -> Course | None: ...
    async def delete(self, course_id: UUID) -> bool: ...
    async def list_published(self) -> list[Course]: ...
    async def list_by_educator(self, educator_id: str) -> list[Course]: ...
    async def list_by_ids(self, course_ids: set[UUID]) -> list[Course]: ...


class InMemoryCourseRepo:
    """Whole-document store: a save replaces the course, tree included."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Course] = {}

    async def get(self, course_id: UUID) -> Course | None:
        return self._by_id.get(course_id)

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise ValueError("course already exists")
        self._by_id[course.id] = course

    async def save(self, course: Course) -> Course | None:
        if course.id not in self._by_id:
            return None
        self._by_id[course.id] = course
        return course

    async def delete(self, course_id: UUID) -> bool:
        return self._by_id.pop(course_id, None) is not None

    async def list_published(self) -> list[Course]:
        return sorted(
            (c for c in self._by_id.values() if c.is_published),
            key=lambda c: c.created_at,
            reverse=True,
        )

    async def list_by_educator(self, educator_id: str) -> list[Course]:
        return sorted(
            (c for c in self._by_id.values() if c.educator_id == educator_id),
            key=lambda c: c.created_at,
            reverse=True,
        )

    async def list_by_ids(self, course_ids: set[UUID]) -> list[Course]:
        return [self._by_id[cid] for cid in course_ids if cid in self._by_id]
