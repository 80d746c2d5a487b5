from __future__ import annotations

import time
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from lms.models.progress import Position, ProgressRecord


class ProgressRepo(Protocol):
    """One record per (user, course), created lazily on the first write.

    Both writes overwrite the resume pointer (last writer wins).
    ``mark_lecture_complete`` set-adds the lecture id and returns whether
    it was newly added.
    ``commit`` makes the writes so far visible to other readers.
    """

    async def get(self, user_id: str, course_id: UUID) -> ProgressRecord | None: ...
    async def record_position(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> ProgressRecord: ...
    async def mark_lecture_complete(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> tuple[ProgressRecord, bool]: ...
    async def delete_for_course(self, course_id: UUID) -> int: ...
    async def commit(self) -> None: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[str, UUID], ProgressRecord] = {}

    async def get(self, user_id: str, course_id: UUID) -> ProgressRecord | None:
        return self._store.get((user_id, course_id))

    def _current(self, user_id: str, course_id: UUID) -> ProgressRecord:
        return self._store.get((user_id, course_id)) or ProgressRecord(
            user_id=user_id, course_id=course_id
        )

    async def record_position(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> ProgressRecord:
        updated = replace(
            self._current(user_id, course_id),
            last_lecture_id=lecture_id,
            last_position=position,
            updated_at=int(time.time()),
        )
        self._store[(user_id, course_id)] = updated
        return updated

    async def mark_lecture_complete(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> tuple[ProgressRecord, bool]:
        current = self._current(user_id, course_id)
        added = lecture_id not in current.completed_lecture_ids
        updated = replace(
            current,
            completed_lecture_ids=current.completed_lecture_ids | {lecture_id},
            last_lecture_id=lecture_id,
            last_position=position,
            updated_at=int(time.time()),
        )
        self._store[(user_id, course_id)] = updated
        return updated, added

    async def delete_for_course(self, course_id: UUID) -> int:
        keys = [key for key in self._store if key[1] == course_id]
        for key in keys:
            del self._store[key]
        return len(keys)

    async def commit(self) -> None:
        pass
