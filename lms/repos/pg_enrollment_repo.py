"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

import time
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import EnrollmentRow
from lms.models.enrollment import Enrollment


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def enroll(self, course_id: UUID, user_id: str) -> bool:
        """Insert-or-ignore on the (course_id, user_id) primary key.

        Two concurrent calls both succeed and exactly one row exists
        afterwards; only the winner sees rowcount == 1.
        """
        stmt = (
            pg_insert(EnrollmentRow)
            .values(course_id=course_id, user_id=user_id, enrolled_at=int(time.time()))
            .on_conflict_do_nothing(index_elements=["course_id", "user_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def is_enrolled(self, course_id: UUID, user_id: str) -> bool:
        stmt = select(EnrollmentRow.user_id).where(
            EnrollmentRow.course_id == course_id, EnrollmentRow.user_id == user_id
        )
        return (await self._session.execute(stmt)).first() is not None

    async def list_enrolled(self, user_id: str) -> set[UUID]:
        stmt = select(EnrollmentRow.course_id).where(EnrollmentRow.user_id == user_id)
        return set((await self._session.execute(stmt)).scalars().all())

    async def list_members(self, course_id: UUID) -> set[str]:
        stmt = select(EnrollmentRow.user_id).where(EnrollmentRow.course_id == course_id)
        return set((await self._session.execute(stmt)).scalars().all())

    async def list_enrollments(self, course_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.course_id == course_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Enrollment(course_id=r.course_id, user_id=r.user_id, enrolled_at=r.enrolled_at)
            for r in rows
        ]

    async def delete_for_course(self, course_id: UUID) -> int:
        result = await self._session.execute(
            delete(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        )
        return result.rowcount
