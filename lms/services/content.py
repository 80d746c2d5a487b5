"""Content tree construction and validation.

Turns caller-supplied chapter/lecture drafts into the immutable
Course -> Chapter -> Lecture tree and enforces its shape:

- chapter ids unique within the course
- lecture ids unique within the whole course (progress keys on them alone)
- chapter and lecture ``order`` strictly increasing in presentation order;
  a missing order is assigned as previous + 1 (first = 1)
- video URLs must point at YouTube and are stored in embed form;
  pdf URLs must be absolute http(s) links
- duration is a positive number of minutes
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from urllib.parse import urlparse
from uuid import uuid4

from lms.models.course import LECTURE_TYPES, Chapter, Lecture
from lms.services.errors import NotFoundError, ValidationFailedError

_YOUTUBE_ID = re.compile(
    r"^(?:https?://)?(?:www\.|m\.)?"
    r"(?:youtube\.com/(?:watch\?(?:[^#]*&)?v=|embed/)|youtu\.be/)"
    r"([A-Za-z0-9_-]+)"
)

YOUTUBE_EMBED_PREFIX = "https://www.youtube.com/embed/"
MAX_ID_LENGTH = 64


@dataclass(frozen=True, slots=True)
class LectureDraft:
    title: str
    type: str
    url: str
    duration: int
    is_preview_free: bool = False
    id: str | None = None
    order: int | None = None


@dataclass(frozen=True, slots=True)
class ChapterDraft:
    title: str
    lectures: tuple[LectureDraft, ...] = ()
    id: str | None = None
    order: int | None = None


def require_text(field_name: str, value: str | None) -> str:
    """Return ``value`` stripped, or raise if it is missing/blank."""
    text = (value or "").strip()
    if not text:
        raise ValidationFailedError(f"{field_name} is required")
    return text


def require_code(value: str | None) -> str:
    """Reject a blank access code but keep it exactly as given."""
    if not (value or "").strip():
        raise ValidationFailedError("access_code is required")
    return value


def youtube_video_id(url: str) -> str | None:
    match = _YOUTUBE_ID.match(url.strip())
    return match.group(1) if match else None


def normalize_lecture_url(lecture_type: str, url: str) -> str:
    url = require_text("lecture url", url)
    if lecture_type == "video":
        video_id = youtube_video_id(url)
        if video_id is None:
            raise ValidationFailedError(f"not a YouTube video URL: {url!r}")
        return f"{YOUTUBE_EMBED_PREFIX}{video_id}"

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationFailedError(f"pdf lecture needs an http(s) link: {url!r}")
    return url


def _new_id() -> str:
    return uuid4().hex


def build_lecture(draft: LectureDraft, *, default_order: int) -> Lecture:
    if draft.type not in LECTURE_TYPES:
        raise ValidationFailedError(
            f"lecture type must be one of {'|'.join(LECTURE_TYPES)} "
            f"(got {draft.type!r})"
        )
    if draft.duration <= 0:
        raise ValidationFailedError(
            "lecture duration must be a positive number of minutes "
            f"(got {draft.duration})"
        )
    return Lecture(
        id=(draft.id or "").strip() or _new_id(),
        title=require_text("lecture title", draft.title),
        type=draft.type,  # type: ignore[arg-type]
        url=normalize_lecture_url(draft.type, draft.url),
        duration=draft.duration,
        order=draft.order if draft.order is not None else default_order,
        is_preview_free=draft.is_preview_free,
    )


def build_chapter(draft: ChapterDraft, *, default_order: int) -> Chapter:
    lectures: list[Lecture] = []
    for lecture_draft in draft.lectures:
        next_order = lectures[-1].order + 1 if lectures else 1
        lectures.append(build_lecture(lecture_draft, default_order=next_order))
    return Chapter(
        id=(draft.id or "").strip() or _new_id(),
        title=require_text("chapter title", draft.title),
        order=draft.order if draft.order is not None else default_order,
        lectures=tuple(lectures),
    )


def build_content(drafts: Sequence[ChapterDraft]) -> tuple[Chapter, ...]:
    chapters: list[Chapter] = []
    for draft in drafts:
        next_order = chapters[-1].order + 1 if chapters else 1
        chapters.append(build_chapter(draft, default_order=next_order))
    content = tuple(chapters)
    validate_content(content)
    return content


def _check_strictly_increasing(what: str, orders: list[int]) -> None:
    for prev, cur in zip(orders, orders[1:]):
        if cur <= prev:
            raise ValidationFailedError(
                f"{what} order must be strictly increasing (got {prev} then {cur})"
            )


def _check_id(what: str, value: str) -> None:
    if len(value) > MAX_ID_LENGTH:
        raise ValidationFailedError(
            f"{what} id longer than {MAX_ID_LENGTH} characters: {value[:16]!r}..."
        )


def validate_content(chapters: tuple[Chapter, ...]) -> None:
    chapter_ids: set[str] = set()
    lecture_ids: set[str] = set()

    _check_strictly_increasing("chapter", [c.order for c in chapters])
    for chapter in chapters:
        _check_id("chapter", chapter.id)
        if chapter.id in chapter_ids:
            raise ValidationFailedError(f"duplicate chapter id {chapter.id!r}")
        chapter_ids.add(chapter.id)

        _check_strictly_increasing(
            f"lecture (chapter {chapter.id!r})", [lec.order for lec in chapter.lectures]
        )
        for lecture in chapter.lectures:
            _check_id("lecture", lecture.id)
            if lecture.id in lecture_ids:
                raise ValidationFailedError(f"duplicate lecture id {lecture.id!r}")
            lecture_ids.add(lecture.id)


def append_chapter(
    chapters: tuple[Chapter, ...], draft: ChapterDraft
) -> tuple[tuple[Chapter, ...], Chapter]:
    """Return the new chapter tuple and the chapter that was added."""
    next_order = chapters[-1].order + 1 if chapters else 1
    chapter = build_chapter(draft, default_order=next_order)
    content = (*chapters, chapter)
    validate_content(content)
    return content, chapter


def append_lecture(
    chapters: tuple[Chapter, ...], chapter_id: str, draft: LectureDraft
) -> tuple[tuple[Chapter, ...], Lecture]:
    """Return the new chapter tuple and the lecture that was added."""
    for index, chapter in enumerate(chapters):
        if chapter.id == chapter_id:
            break
    else:
        raise NotFoundError(f"chapter {chapter_id!r} not found")

    next_order = chapter.lectures[-1].order + 1 if chapter.lectures else 1
    lecture = build_lecture(draft, default_order=next_order)
    updated = replace(chapter, lectures=(*chapter.lectures, lecture))
    content = (*chapters[:index], updated, *chapters[index + 1 :])
    validate_content(content)
    return content, lecture
