"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import ChapterRow, CourseRow, LectureRow
from lms.models.course import Chapter, Course, Lecture


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol.

    The content tree is written as a whole: ``save`` replaces every chapter
    and lecture row of the course inside the request's transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: UUID) -> Course | None:
        stmt = (
            select(CourseRow)
            .where(CourseRow.id == course_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)

    async def add(self, course: Course) -> None:
        await self._session.execute(insert(CourseRow).values(**_course_values(course)))
        await self._insert_tree(course)

    async def save(self, course: Course) -> Course | None:
        values = _course_values(course)
        del values["id"]
        result = await self._session.execute(
            update(CourseRow).where(CourseRow.id == course.id).values(**values)
        )
        if result.rowcount == 0:
            return None

        await self._session.execute(
            delete(LectureRow).where(LectureRow.course_id == course.id)
        )
        await self._session.execute(
            delete(ChapterRow).where(ChapterRow.course_id == course.id)
        )
        await self._insert_tree(course)
        return course

    async def delete(self, course_id: UUID) -> bool:
        # chapters and lectures go with it through ON DELETE CASCADE
        result = await self._session.execute(
            delete(CourseRow).where(CourseRow.id == course_id)
        )
        return result.rowcount > 0

    async def list_published(self) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.is_published.is_(True))
            .order_by(CourseRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_educator(self, educator_id: str) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.educator_id == educator_id)
            .order_by(CourseRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_ids(self, course_ids: set[UUID]) -> list[Course]:
        if not course_ids:
            return []
        stmt = select(CourseRow).where(CourseRow.id.in_(course_ids))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def _insert_tree(self, course: Course) -> None:
        chapter_rows = [
            {
                "course_id": course.id,
                "id": chapter.id,
                "title": chapter.title,
                "order": chapter.order,
                "position": ci,
            }
            for ci, chapter in enumerate(course.chapters)
        ]
        lecture_rows = [
            {
                "course_id": course.id,
                "id": lecture.id,
                "chapter_id": course.chapters[ci].id,
                "title": lecture.title,
                "type": lecture.type,
                "url": lecture.url,
                "duration": lecture.duration,
                "order": lecture.order,
                "position": li,
                "is_preview_free": lecture.is_preview_free,
            }
            for ci, li, lecture in course.iter_lectures()
        ]
        if chapter_rows:
            await self._session.execute(insert(ChapterRow), chapter_rows)
        if lecture_rows:
            await self._session.execute(insert(LectureRow), lecture_rows)


def _course_values(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "thumbnail_ref": course.thumbnail_ref,
        "access_code": course.access_code,
        "educator_id": course.educator_id,
        "is_published": course.is_published,
        "created_at": course.created_at,
        "updated_at": course.updated_at,
    }


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description,
        access_code=row.access_code,
        educator_id=row.educator_id,
        thumbnail_ref=row.thumbnail_ref or "",
        chapters=tuple(
            Chapter(
                id=ch.id,
                title=ch.title,
                order=ch.order,
                lectures=tuple(
                    Lecture(
                        id=lec.id,
                        title=lec.title,
                        type=lec.type,  # type: ignore[arg-type]
                        url=lec.url,
                        duration=lec.duration,
                        order=lec.order,
                        is_preview_free=lec.is_preview_free,
                    )
                    for lec in ch.lectures
                ),
            )
            for ch in row.chapters
        ),
        is_published=row.is_published,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
