from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

import pytest

from lms.models.course import Chapter, Course, Lecture
from lms.services.visibility import render_catalog_entry, render_course_view

PREVIEW_URL = "https://www.youtube.com/embed/free0001"
LOCKED_URL = "https://files.example.com/locked.pdf"


@pytest.fixture
def course() -> Course:
    return Course(
        id=uuid4(),
        title="Visible",
        description="d",
        access_code="S3CRET",
        educator_id="edu",
        chapters=(
            Chapter(
                id="ch1",
                title="One",
                order=1,
                lectures=(
                    Lecture(
                        id="free",
                        title="Free",
                        type="video",
                        url=PREVIEW_URL,
                        duration=3,
                        order=1,
                        is_preview_free=True,
                    ),
                    Lecture(
                        id="locked",
                        title="Locked",
                        type="pdf",
                        url=LOCKED_URL,
                        duration=9,
                        order=2,
                    ),
                ),
            ),
        ),
    )


def _urls(view) -> list[str]:
    return [lec.url for ch in view.chapters for lec in ch.lectures]


def test_anonymous_sees_preview_only(course: Course) -> None:
    view = render_course_view(course, None, is_enrolled=False)
    assert _urls(view) == [PREVIEW_URL, ""]
    assert view.access_code is None
    assert view.is_enrolled is False


def test_enrollment_flag_ignored_without_caller(course: Course) -> None:
    view = render_course_view(course, None, is_enrolled=True)
    assert _urls(view) == [PREVIEW_URL, ""]


def test_member_sees_everything_but_code(course: Course) -> None:
    view = render_course_view(course, "stu", is_enrolled=True)
    assert _urls(view) == [PREVIEW_URL, LOCKED_URL]
    assert view.access_code is None


def test_owner_sees_everything_and_code(course: Course) -> None:
    view = render_course_view(course, "edu", is_enrolled=False)
    assert _urls(view) == [PREVIEW_URL, LOCKED_URL]
    assert view.access_code == "S3CRET"


def test_stored_course_is_not_mutated(course: Course) -> None:
    before = replace(course)
    render_course_view(course, None, is_enrolled=False)
    assert course == before


def test_summary_counts(course: Course) -> None:
    view = render_course_view(course, None, is_enrolled=False)
    assert view.lecture_count == 2
    assert view.total_duration == 12


def test_catalog_entry_has_no_tree_or_code(course: Course) -> None:
    entry = render_catalog_entry(course)
    assert entry.chapters == ()
    assert entry.access_code is None
    assert entry.lecture_count == 2
