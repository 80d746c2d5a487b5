from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

LectureType = Literal["video", "pdf"]
LECTURE_TYPES: tuple[str, ...] = ("video", "pdf")


@dataclass(frozen=True, slots=True)
class Lecture:
    id: str
    title: str
    type: LectureType
    url: str
    duration: int  # minutes
    order: int
    is_preview_free: bool = False


@dataclass(frozen=True, slots=True)
class Chapter:
    id: str
    title: str
    order: int
    lectures: tuple[Lecture, ...] = ()


@dataclass(frozen=True, slots=True)
class Course:
    """Course aggregate: metadata plus the ordered content tree.

    Enrollment is not stored here; the enrollment ledger owns membership
    so that the course document never has to be rewritten to add a student.
    """

    id: UUID
    title: str
    description: str
    access_code: str
    educator_id: str
    thumbnail_ref: str = ""
    chapters: tuple[Chapter, ...] = ()
    is_published: bool = True
    created_at: int = 0
    updated_at: int = 0

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        access_code: str,
        educator_id: str,
        thumbnail_ref: str = "",
        chapters: tuple[Chapter, ...] = (),
        is_published: bool = True,
    ) -> Course:
        now = int(time.time())
        return Course(
            id=uuid4(),
            title=title,
            description=description,
            access_code=access_code,
            educator_id=educator_id,
            thumbnail_ref=thumbnail_ref,
            chapters=chapters,
            is_published=is_published,
            created_at=now,
            updated_at=now,
        )

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and user_id == self.educator_id

    def iter_lectures(self) -> Iterator[tuple[int, int, Lecture]]:
        """Yield (chapter_index, lecture_index, lecture) in presentation order."""
        for ci, chapter in enumerate(self.chapters):
            for li, lecture in enumerate(chapter.lectures):
                yield ci, li, lecture

    def find_chapter(self, chapter_id: str) -> Chapter | None:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None


# --- Read-only views produced by the visibility filter ---


@dataclass(frozen=True, slots=True)
class LectureView:
    id: str
    title: str
    type: str
    url: str
    duration: int
    order: int
    is_preview_free: bool


@dataclass(frozen=True, slots=True)
class ChapterView:
    id: str
    title: str
    order: int
    lectures: tuple[LectureView, ...]


@dataclass(frozen=True, slots=True)
class CourseView:
    id: UUID
    title: str
    description: str
    thumbnail_ref: str
    educator_id: str
    is_published: bool
    chapters: tuple[ChapterView, ...] = ()
    lecture_count: int = 0
    total_duration: int = 0
    access_code: str | None = None  # only present for the owning educator
    is_enrolled: bool = False
    created_at: int = 0
    updated_at: int = 0
