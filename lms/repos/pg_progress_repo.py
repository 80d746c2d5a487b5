"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

import time
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import CompletedLectureRow, CourseProgressRow
from lms.models.progress import Position, ProgressRecord


class PgProgressRepo:
    """Satisfies the ProgressRepo Protocol using PostgreSQL.

    The resume pointer lives on ``course_progress`` and is upserted (last
    writer wins); completions are rows in ``completed_lectures`` inserted
    with ON CONFLICT DO NOTHING, so repeats are no-ops.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, course_id: UUID) -> ProgressRecord | None:
        stmt = select(CourseProgressRow).where(
            CourseProgressRow.user_id == user_id,
            CourseProgressRow.course_id == course_id,
        ).execution_options(populate_existing=True)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None

        completed_stmt = select(CompletedLectureRow.lecture_id).where(
            CompletedLectureRow.user_id == user_id,
            CompletedLectureRow.course_id == course_id,
        )
        completed = (await self._session.execute(completed_stmt)).scalars().all()
        return ProgressRecord(
            user_id=row.user_id,
            course_id=row.course_id,
            completed_lecture_ids=frozenset(completed),
            last_lecture_id=row.last_lecture_id,
            last_position=Position(
                chapter=row.last_chapter_index, lecture=row.last_lecture_index
            ),
            updated_at=row.updated_at,
        )

    async def _upsert_pointer(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> int:
        now = int(time.time())
        pointer = {
            "last_lecture_id": lecture_id,
            "last_chapter_index": position.chapter,
            "last_lecture_index": position.lecture,
            "updated_at": now,
        }
        stmt = (
            pg_insert(CourseProgressRow)
            .values(user_id=user_id, course_id=course_id, **pointer)
            .on_conflict_do_update(
                index_elements=["user_id", "course_id"], set_=pointer
            )
        )
        await self._session.execute(stmt)
        return now

    async def record_position(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> ProgressRecord:
        await self._upsert_pointer(user_id, course_id, lecture_id, position)
        record = await self.get(user_id, course_id)
        if record is None:
            raise RuntimeError("progress row missing right after upsert")
        return record

    async def mark_lecture_complete(
        self, user_id: str, course_id: UUID, lecture_id: str, position: Position
    ) -> tuple[ProgressRecord, bool]:
        now = await self._upsert_pointer(user_id, course_id, lecture_id, position)
        stmt = (
            pg_insert(CompletedLectureRow)
            .values(
                user_id=user_id,
                course_id=course_id,
                lecture_id=lecture_id,
                completed_at=now,
            )
            .on_conflict_do_nothing(
                index_elements=["user_id", "course_id", "lecture_id"]
            )
        )
        added = (await self._session.execute(stmt)).rowcount == 1
        record = await self.get(user_id, course_id)
        if record is None:
            raise RuntimeError("progress row missing right after upsert")
        return record, added

    async def delete_for_course(self, course_id: UUID) -> int:
        await self._session.execute(
            delete(CompletedLectureRow).where(CompletedLectureRow.course_id == course_id)
        )
        result = await self._session.execute(
            delete(CourseProgressRow).where(CourseProgressRow.course_id == course_id)
        )
        return result.rowcount

    async def commit(self) -> None:
        await self._session.commit()
