from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

EnrollStatus = Literal["enrolled", "already_enrolled"]


@dataclass(frozen=True, slots=True)
class Enrollment:
    course_id: UUID
    user_id: str
    enrolled_at: int

    @staticmethod
    def new(*, course_id: UUID, user_id: str) -> Enrollment:
        return Enrollment(
            course_id=course_id, user_id=user_id, enrolled_at=int(time.time())
        )


@dataclass(frozen=True, slots=True)
class EnrollResult:
    course_id: UUID
    user_id: str
    status: EnrollStatus

    @property
    def created(self) -> bool:
        return self.status == "enrolled"
