"""The caller's own memberships.

Enrolled courses come back with every lecture URL revealed; the catalog
form stays on /v1/courses.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from lms.api.courses import CourseOut
from lms.api.dependencies import Courses, CurrentUser, Enrollments
from lms.services import course_service

router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


@router.get("", response_model=list[CourseOut], response_model_exclude_none=True)
async def list_enrolled_courses(
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
) -> list[CourseOut]:
    views = await course_service.list_enrolled_courses(
        courses, enrollments, user_id=principal.user_id
    )
    return [CourseOut.from_view(v) for v in views]


@router.get(
    "/{course_id}", response_model=CourseOut, response_model_exclude_none=True
)
async def get_enrolled_course(
    course_id: UUID,
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
) -> CourseOut:
    """404 unless the caller is enrolled in the course."""
    view = await course_service.get_enrolled_course(
        courses, enrollments, course_id=course_id, user_id=principal.user_id
    )
    return CourseOut.from_view(view)
