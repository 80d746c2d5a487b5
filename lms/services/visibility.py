"""Visibility filter: derive what a caller may see of a course.

Rules, in order:
  1. The access code is only included for the owning educator.
  2. Callers who are neither enrolled nor the owner (including anonymous
     callers) get an empty URL for every lecture that is not a free preview.
  3. Enrolled members and the owner see every URL unchanged.

The stored Course is never modified; a fresh CourseView is built.
"""

from __future__ import annotations

from lms.models.course import ChapterView, Course, CourseView, Lecture, LectureView


def _lecture_view(lecture: Lecture, *, reveal: bool) -> LectureView:
    return LectureView(
        id=lecture.id,
        title=lecture.title,
        type=lecture.type,
        url=lecture.url if reveal or lecture.is_preview_free else "",
        duration=lecture.duration,
        order=lecture.order,
        is_preview_free=lecture.is_preview_free,
    )


def render_course_view(
    course: Course, caller_id: str | None, is_enrolled: bool
) -> CourseView:
    is_owner = course.is_owned_by(caller_id)
    reveal = caller_id is not None and (is_enrolled or is_owner)

    chapters = tuple(
        ChapterView(
            id=chapter.id,
            title=chapter.title,
            order=chapter.order,
            lectures=tuple(
                _lecture_view(lecture, reveal=reveal) for lecture in chapter.lectures
            ),
        )
        for chapter in course.chapters
    )
    return CourseView(
        id=course.id,
        title=course.title,
        description=course.description,
        thumbnail_ref=course.thumbnail_ref,
        educator_id=course.educator_id,
        is_published=course.is_published,
        chapters=chapters,
        lecture_count=sum(len(c.lectures) for c in course.chapters),
        total_duration=sum(lec.duration for _, _, lec in course.iter_lectures()),
        access_code=course.access_code if is_owner else None,
        is_enrolled=caller_id is not None and is_enrolled,
        created_at=course.created_at,
        updated_at=course.updated_at,
    )


def render_catalog_entry(course: Course) -> CourseView:
    """Listing form: summary counts only, no content tree, no access code."""
    return CourseView(
        id=course.id,
        title=course.title,
        description=course.description,
        thumbnail_ref=course.thumbnail_ref,
        educator_id=course.educator_id,
        is_published=course.is_published,
        lecture_count=sum(len(c.lectures) for c in course.chapters),
        total_duration=sum(lec.duration for _, _, lec in course.iter_lectures()),
        created_at=course.created_at,
        updated_at=course.updated_at,
    )
