"""Access gate: exchange a course access code for a membership.

The only way into a course is presenting its access code.  The check is
an exact, case-sensitive comparison against the stored code; there is no
expiry and no per-student code.  A successful check hands off to the
enrollment ledger's idempotent insert, so two concurrent attempts by the
same student produce exactly one membership and both succeed.
"""

from __future__ import annotations

import hmac
import logging
from uuid import UUID

from lms.core.metrics import ENROLLMENT_ATTEMPTS
from lms.models.enrollment import EnrollResult
from lms.repos.course_repo import CourseRepo
from lms.repos.enrollment_repo import EnrollmentRepo
from lms.services.errors import InvalidAccessCodeError, NotFoundError

logger = logging.getLogger(__name__)


def access_code_matches(stored: str, supplied: str) -> bool:
    return hmac.compare_digest(stored.encode(), supplied.encode())


async def request_enrollment(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    course_id: UUID,
    caller_id: str,
    supplied_code: str,
) -> EnrollResult:
    """Enroll ``caller_id`` in the course if ``supplied_code`` matches.

    Returns status ``enrolled`` for a new membership and
    ``already_enrolled`` when the caller was a member already; both are
    successes.  Changing a course's code later never revokes anyone.
    """
    course = await courses.get(course_id)
    if course is None:
        ENROLLMENT_ATTEMPTS.labels(result="not_found").inc()
        raise NotFoundError("Course not found")

    if not access_code_matches(course.access_code, supplied_code):
        ENROLLMENT_ATTEMPTS.labels(result="invalid_code").inc()
        logger.warning(
            "Invalid access code user=%s course=%s",
            caller_id,
            course_id,
            extra={"user_id": caller_id, "course_id": str(course_id)},
        )
        raise InvalidAccessCodeError()

    created = await enrollments.enroll(course_id, caller_id)
    status = "enrolled" if created else "already_enrolled"
    ENROLLMENT_ATTEMPTS.labels(result=status).inc()
    logger.info(
        "Enrollment %s user=%s course=%s",
        status,
        caller_id,
        course_id,
        extra={"user_id": caller_id, "course_id": str(course_id)},
    )
    return EnrollResult(course_id=course_id, user_id=caller_id, status=status)
