"""FastAPI dependencies: caller identity and repository wiring.

Identity
  ``optional_user`` returns None for anonymous calls (course detail and
  the catalog are public) and a Principal for a valid bearer token.
  ``require_user`` additionally rejects anonymous calls.  A token that is
  present but expired or invalid is always a 401, even on public routes.

Repositories
  With DATABASE_URL set, each request gets Pg repositories bound to one
  request-scoped session (FastAPI caches the session dependency within a
  request, so all three repos share it and commit together).  Without
  it, module-level in-memory repositories are shared by every request.
"""

from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.engine import async_session_factory, get_async_session
from lms.models.principal import Principal
from lms.repos.course_repo import CourseRepo, InMemoryCourseRepo
from lms.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from lms.repos.pg_course_repo import PgCourseRepo
from lms.repos.pg_enrollment_repo import PgEnrollmentRepo
from lms.repos.pg_progress_repo import PgProgressRepo
from lms.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from lms.services import token_service
from lms.services.cache import CacheService, cache_service
from lms.services.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

# Tokens are issued by the external identity provider; tokenUrl only feeds the docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token", auto_error=False)


def optional_user(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal | None:
    """Validate the bearer token if one was sent.  Returns None when absent."""
    if raw_token is None:
        return None
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug("Token validated for user=%s", principal.user_id)
    return principal


def require_user(
    principal: Annotated[Principal | None, Depends(optional_user)],
) -> Principal:
    """Like optional_user, but anonymous callers get a 401."""
    if principal is None:
        raise UnauthenticatedError()
    return principal


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------

memory_courses = InMemoryCourseRepo()
memory_enrollments = InMemoryEnrollmentRepo()
memory_progress = InMemoryProgressRepo()


if async_session_factory is not None:

    def get_course_repo(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> CourseRepo:
        return PgCourseRepo(session)

    def get_enrollment_repo(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> EnrollmentRepo:
        return PgEnrollmentRepo(session)

    def get_progress_repo(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> ProgressRepo:
        return PgProgressRepo(session)

else:

    def get_course_repo() -> CourseRepo:
        return memory_courses

    def get_enrollment_repo() -> EnrollmentRepo:
        return memory_enrollments

    def get_progress_repo() -> ProgressRepo:
        return memory_progress


def get_cache() -> CacheService:
    return cache_service


OptionalUser = Annotated[Principal | None, Depends(optional_user)]
CurrentUser = Annotated[Principal, Depends(require_user)]
Courses = Annotated[CourseRepo, Depends(get_course_repo)]
Enrollments = Annotated[EnrollmentRepo, Depends(get_enrollment_repo)]
ProgressRecords = Annotated[ProgressRepo, Depends(get_progress_repo)]
Cache = Annotated[CacheService, Depends(get_cache)]
