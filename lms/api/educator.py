"""Educator views: own courses, per-course roster, dashboard."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from lms.api.courses import CourseOut
from lms.api.dependencies import Courses, CurrentUser, Enrollments
from lms.services import course_service

router = APIRouter(prefix="/v1/educator", tags=["educator"])


class EnrollmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    user_id: str
    enrolled_at: int


class DashboardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_courses: int
    total_enrollments: int
    recent_enrollments: list[EnrollmentOut]


@router.get(
    "/courses", response_model=list[CourseOut], response_model_exclude_none=True
)
async def list_my_courses(principal: CurrentUser, courses: Courses) -> list[CourseOut]:
    """Every course the caller created, published or not, access codes included."""
    views = await course_service.list_educator_courses(
        courses, educator_id=principal.user_id
    )
    return [CourseOut.from_view(v) for v in views]


@router.get("/courses/{course_id}/students", response_model=list[EnrollmentOut])
async def list_students(
    course_id: UUID,
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
) -> list[EnrollmentOut]:
    roster = await course_service.list_students(
        courses, enrollments, course_id=course_id, caller_id=principal.user_id
    )
    return [EnrollmentOut.model_validate(e) for e in roster]


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
) -> DashboardOut:
    summary = await course_service.dashboard(
        courses, enrollments, educator_id=principal.user_id
    )
    return DashboardOut.model_validate(summary)
