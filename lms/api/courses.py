"""Course catalog, authoring and enrollment endpoints.

  GET    /v1/courses                                  public catalog
  GET    /v1/courses/{id}                             detail, filtered per caller
  POST   /v1/courses                                  create (caller becomes educator)
  PATCH  /v1/courses/{id}                             partial update, owner only
  POST   /v1/courses/{id}/chapters                    append chapter, owner only
  POST   /v1/courses/{id}/chapters/{cid}/lectures     append lecture, owner only
  DELETE /v1/courses/{id}                             cascade delete, owner only
  POST   /v1/courses/{id}/enroll                      exchange access code for membership

Course responses drop None fields, so ``access_code`` is simply absent
unless the caller owns the course.
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict

from lms.api.dependencies import (
    Cache,
    Courses,
    CurrentUser,
    Enrollments,
    OptionalUser,
    ProgressRecords,
)
from lms.api.ratelimit import require_rate_limit
from lms.models.course import CourseView
from lms.services import access_gate, course_service
from lms.services.content import ChapterDraft, LectureDraft
from lms.services.course_service import CourseChanges
from lms.services.rate_limiter import ENROLLMENT_LIMIT
from lms.services.visibility import render_course_view

router = APIRouter(prefix="/v1/courses", tags=["courses"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class LectureIn(BaseModel):
    id: str | None = None
    title: str
    type: str  # video|pdf
    url: str
    duration: int  # minutes
    order: int | None = None
    is_preview_free: bool = False

    def to_draft(self) -> LectureDraft:
        return LectureDraft(
            title=self.title,
            type=self.type,
            url=self.url,
            duration=self.duration,
            is_preview_free=self.is_preview_free,
            id=self.id,
            order=self.order,
        )


class ChapterIn(BaseModel):
    id: str | None = None
    title: str
    order: int | None = None
    lectures: list[LectureIn] = []

    def to_draft(self) -> ChapterDraft:
        return ChapterDraft(
            title=self.title,
            lectures=tuple(lec.to_draft() for lec in self.lectures),
            id=self.id,
            order=self.order,
        )


class CourseCreateIn(BaseModel):
    title: str
    description: str
    access_code: str
    thumbnail_ref: str = ""
    is_published: bool = True
    chapters: list[ChapterIn] = []


class CourseUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    thumbnail_ref: str | None = None
    access_code: str | None = None
    is_published: bool | None = None
    chapters: list[ChapterIn] | None = None  # replaces the whole tree

    def to_changes(self) -> CourseChanges:
        return CourseChanges(
            title=self.title,
            description=self.description,
            thumbnail_ref=self.thumbnail_ref,
            access_code=self.access_code,
            is_published=self.is_published,
            content=(
                tuple(c.to_draft() for c in self.chapters)
                if self.chapters is not None
                else None
            ),
        )


class EnrollIn(BaseModel):
    access_code: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class LectureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    type: str
    url: str  # "" when locked for this caller
    duration: int
    order: int
    is_preview_free: bool


class ChapterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    order: int
    lectures: list[LectureOut]


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    thumbnail_ref: str
    educator_id: str
    is_published: bool
    chapters: list[ChapterOut]
    lecture_count: int
    total_duration: int
    access_code: str | None = None
    is_enrolled: bool
    created_at: int
    updated_at: int

    @classmethod
    def from_view(cls, view: CourseView) -> CourseOut:
        return cls.model_validate(view)


class CourseCreatedOut(BaseModel):
    course_id: UUID


class EnrollOut(BaseModel):
    course_id: UUID
    user_id: str
    status: Literal["enrolled", "already_enrolled"]


# ---------------------------------------------------------------------------
# Catalog and detail
# ---------------------------------------------------------------------------


@router.get("", response_model=list[CourseOut], response_model_exclude_none=True)
async def list_catalog(courses: Courses) -> list[CourseOut]:
    return [CourseOut.from_view(v) for v in await course_service.list_catalog(courses)]


@router.get(
    "/{course_id}", response_model=CourseOut, response_model_exclude_none=True
)
async def get_course(
    course_id: UUID,
    principal: OptionalUser,
    courses: Courses,
    enrollments: Enrollments,
) -> CourseOut:
    view = await course_service.view_course(
        courses,
        enrollments,
        course_id=course_id,
        caller_id=principal.user_id if principal else None,
    )
    return CourseOut.from_view(view)


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=CourseCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_course(
    body: CourseCreateIn,
    principal: CurrentUser,
    courses: Courses,
) -> CourseCreatedOut:
    course = await course_service.create_course(
        courses,
        educator_id=principal.user_id,
        title=body.title,
        description=body.description,
        access_code=body.access_code,
        thumbnail_ref=body.thumbnail_ref,
        chapters=[c.to_draft() for c in body.chapters],
        is_published=body.is_published,
    )
    return CourseCreatedOut(course_id=course.id)


@router.patch(
    "/{course_id}", response_model=CourseOut, response_model_exclude_none=True
)
async def update_course(
    course_id: UUID,
    body: CourseUpdateIn,
    principal: CurrentUser,
    courses: Courses,
    cache: Cache,
) -> CourseOut:
    course = await course_service.update_course(
        courses,
        cache,
        course_id=course_id,
        caller_id=principal.user_id,
        changes=body.to_changes(),
    )
    return CourseOut.from_view(
        render_course_view(course, principal.user_id, is_enrolled=False)
    )


@router.post(
    "/{course_id}/chapters",
    response_model=ChapterOut,
    status_code=status.HTTP_201_CREATED,
)
async def append_chapter(
    course_id: UUID,
    body: ChapterIn,
    principal: CurrentUser,
    courses: Courses,
    cache: Cache,
) -> ChapterOut:
    _course, chapter = await course_service.add_chapter(
        courses,
        cache,
        course_id=course_id,
        caller_id=principal.user_id,
        draft=body.to_draft(),
    )
    return ChapterOut.model_validate(chapter)


@router.post(
    "/{course_id}/chapters/{chapter_id}/lectures",
    response_model=LectureOut,
    status_code=status.HTTP_201_CREATED,
)
async def append_lecture(
    course_id: UUID,
    chapter_id: str,
    body: LectureIn,
    principal: CurrentUser,
    courses: Courses,
    cache: Cache,
) -> LectureOut:
    _course, lecture = await course_service.add_lecture(
        courses,
        cache,
        course_id=course_id,
        caller_id=principal.user_id,
        chapter_id=chapter_id,
        draft=body.to_draft(),
    )
    return LectureOut.model_validate(lecture)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: UUID,
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
    progress: ProgressRecords,
    cache: Cache,
) -> Response:
    await course_service.delete_course(
        courses,
        enrollments,
        progress,
        cache,
        course_id=course_id,
        caller_id=principal.user_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Enrollment
# ---------------------------------------------------------------------------


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(ENROLLMENT_LIMIT, scope="enroll"))],
)
async def enroll(
    course_id: UUID,
    body: EnrollIn,
    response: Response,
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
) -> EnrollOut:
    """201 for a new membership, 200 when the caller was already a member."""
    result = await access_gate.request_enrollment(
        courses,
        enrollments,
        course_id=course_id,
        caller_id=principal.user_id,
        supplied_code=body.access_code,
    )
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return EnrollOut(
        course_id=result.course_id, user_id=result.user_id, status=result.status
    )
