from __future__ import annotations

import pytest

from lms.models.course import Chapter, Lecture
from lms.services.content import (
    ChapterDraft,
    LectureDraft,
    append_chapter,
    append_lecture,
    build_content,
    normalize_lecture_url,
    youtube_video_id,
)
from lms.services.errors import NotFoundError, ValidationFailedError


def _video(**overrides) -> LectureDraft:
    fields = {
        "title": "Clip",
        "type": "video",
        "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "duration": 4,
    }
    fields.update(overrides)
    return LectureDraft(**fields)


# ---- URLs ----


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "youtu.be/dQw4w9WgXcQ",
    ],
)
def test_youtube_forms_normalize_to_embed(url: str) -> None:
    assert normalize_lecture_url("video", url) == (
        "https://www.youtube.com/embed/dQw4w9WgXcQ"
    )


def test_non_youtube_video_rejected() -> None:
    assert youtube_video_id("https://vimeo.com/1234") is None
    with pytest.raises(ValidationFailedError, match="not a YouTube video URL"):
        normalize_lecture_url("video", "https://vimeo.com/1234")


def test_pdf_url_kept_as_is() -> None:
    url = "https://files.example.com/notes.pdf?v=2"
    assert normalize_lecture_url("pdf", url) == url


@pytest.mark.parametrize("url", ["ftp://files.example.com/a.pdf", "notes.pdf", ""])
def test_pdf_url_must_be_http(url: str) -> None:
    with pytest.raises(ValidationFailedError):
        normalize_lecture_url("pdf", url)


# ---- building ----


def test_build_content_assigns_ids_and_orders() -> None:
    content = build_content(
        [
            ChapterDraft(title="One", lectures=(_video(), _video())),
            ChapterDraft(title="Two", order=10),
            ChapterDraft(title="Three"),
        ]
    )
    assert [c.order for c in content] == [1, 10, 11]
    assert [lec.order for lec in content[0].lectures] == [1, 2]
    assert all(len(c.id) == 32 for c in content)
    assert content[0].lectures[0].id != content[0].lectures[1].id


def test_build_content_rejects_decreasing_lecture_order() -> None:
    with pytest.raises(ValidationFailedError, match="strictly increasing"):
        build_content(
            [ChapterDraft(title="One", lectures=(_video(order=3), _video(order=2)))]
        )


def test_build_content_rejects_duplicate_chapter_ids() -> None:
    with pytest.raises(ValidationFailedError, match="duplicate chapter id"):
        build_content([ChapterDraft(title="A", id="x"), ChapterDraft(title="B", id="x")])


def test_build_content_rejects_overlong_id() -> None:
    with pytest.raises(ValidationFailedError, match="longer than 64"):
        build_content([ChapterDraft(title="A", id="x" * 65)])


@pytest.mark.parametrize(
    "overrides,match",
    [
        ({"type": "audio"}, "lecture type"),
        ({"duration": 0}, "duration"),
        ({"title": " "}, "lecture title is required"),
    ],
)
def test_build_content_rejects_bad_lecture(overrides: dict, match: str) -> None:
    with pytest.raises(ValidationFailedError, match=match):
        build_content([ChapterDraft(title="A", lectures=(_video(**overrides),))])


# ---- appending ----


def _tree() -> tuple[Chapter, ...]:
    lecture = Lecture(
        id="L1", title="x", type="pdf", url="https://e.x/a.pdf", duration=1, order=4
    )
    return (Chapter(id="ch1", title="One", order=2, lectures=(lecture,)),)


def test_append_chapter_continues_order() -> None:
    content, chapter = append_chapter(_tree(), ChapterDraft(title="Two"))
    assert chapter.order == 3
    assert content[-1] is chapter
    assert len(content) == 2


def test_append_lecture_continues_order_in_chapter() -> None:
    content, lecture = append_lecture(_tree(), "ch1", _video(id="L2"))
    assert lecture.order == 5
    assert [lec.id for lec in content[0].lectures] == ["L1", "L2"]


def test_append_lecture_keeps_ids_unique() -> None:
    with pytest.raises(ValidationFailedError, match="duplicate lecture id"):
        append_lecture(_tree(), "ch1", _video(id="L1"))


def test_append_lecture_unknown_chapter() -> None:
    with pytest.raises(NotFoundError):
        append_lecture(_tree(), "nope", _video())
