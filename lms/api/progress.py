"""Progress reporting and the cached progress read.

  POST /v1/progress/{course_id}  {lecture_id, position?, completed?}
    -> enrolled or owner? lecture in course? -> record -> invalidate cache
  GET  /v1/progress/{course_id}
    -> read-through cache; empty snapshot when nothing is recorded
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from lms.api.dependencies import (
    Cache,
    Courses,
    CurrentUser,
    Enrollments,
    ProgressRecords,
)
from lms.api.ratelimit import require_rate_limit
from lms.models.progress import Position, ProgressSnapshot
from lms.services import progress_service

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class PositionIO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    chapter: int = Field(default=0, ge=0)
    lecture: int = Field(default=0, ge=0)


class ProgressIn(BaseModel):
    lecture_id: str
    position: PositionIO | None = None  # resolved from the course when omitted
    completed: bool = True


class ProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    course_id: UUID
    completed_lecture_ids: list[str]
    last_lecture_id: str | None
    last_position: PositionIO
    total_lectures: int
    completed_count: int
    percent_complete: int
    is_complete: bool
    updated_at: int | None

    @classmethod
    def from_snapshot(cls, snapshot: ProgressSnapshot) -> ProgressOut:
        return cls.model_validate(snapshot)


@router.post(
    "/{course_id}",
    response_model=ProgressOut,
    dependencies=[Depends(require_rate_limit())],
)
async def report_progress(
    course_id: UUID,
    body: ProgressIn,
    principal: CurrentUser,
    courses: Courses,
    enrollments: Enrollments,
    progress: ProgressRecords,
    cache: Cache,
) -> ProgressOut:
    position = (
        Position(chapter=body.position.chapter, lecture=body.position.lecture)
        if body.position is not None
        else None
    )
    snapshot = await progress_service.report_progress(
        courses,
        enrollments,
        progress,
        cache,
        caller_id=principal.user_id,
        course_id=course_id,
        lecture_id=body.lecture_id,
        position=position,
        completed=body.completed,
    )
    return ProgressOut.from_snapshot(snapshot)


@router.get(
    "/{course_id}",
    response_model=ProgressOut,
    dependencies=[Depends(require_rate_limit())],
)
async def get_progress(
    course_id: UUID,
    principal: CurrentUser,
    courses: Courses,
    progress: ProgressRecords,
    cache: Cache,
) -> ProgressOut:
    snapshot = await progress_service.get_progress(
        courses,
        progress,
        cache,
        caller_id=principal.user_id,
        course_id=course_id,
    )
    return ProgressOut.from_snapshot(snapshot)
