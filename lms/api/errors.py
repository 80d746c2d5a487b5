"""Exception handlers: domain errors to HTTP responses.

Every error body has the same shape, ``{"detail": ..., "code": ...}``.
Store faults (SQLAlchemy, Redis) and anything unexpected are logged with
their traceback here and answered with a generic message, so connection
strings and SQL never reach a client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from lms.services.errors import (
    ForbiddenError,
    InvalidAccessCodeError,
    LmsError,
    NotFoundError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_DETAIL = "Service temporarily unavailable"

_STATUS_BY_ERROR: dict[type[LmsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    InvalidAccessCodeError: status.HTTP_403_FORBIDDEN,
    ValidationFailedError: 422,
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_body(detail: str, code: str) -> dict[str, str]:
    return {"detail": detail, "code": code}


def status_for(exc: LmsError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST


async def _handle_lms_error(_request: Request, exc: LmsError) -> JSONResponse:
    if isinstance(exc, StoreUnavailableError):
        # Already logged where it was raised
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=_error_body(STORE_UNAVAILABLE_DETAIL, exc.code),
        )
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if isinstance(exc, UnauthenticatedError)
        else None
    )
    return JSONResponse(
        status_code=status_for(exc),
        content=_error_body(exc.message, exc.code),
        headers=headers,
    )


async def _handle_store_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Store error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(STORE_UNAVAILABLE_DETAIL, StoreUnavailableError.code),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "internal_error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LmsError, _handle_lms_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_store_error)
    app.add_exception_handler(RedisError, _handle_store_error)
    app.add_exception_handler(Exception, _handle_unexpected)
