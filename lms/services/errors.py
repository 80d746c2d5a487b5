"""Domain errors raised by the service layer.

Each kind carries a stable machine-readable ``code``; api/errors.py maps
the kinds to HTTP responses.  None of them is fatal to the process.
"""

from __future__ import annotations


class LmsError(Exception):
    """Base for every recoverable domain error."""

    code = "lms_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(LmsError):
    """Course, chapter or lecture reference does not resolve."""

    code = "not_found"


class ForbiddenError(LmsError):
    """Caller lacks ownership or membership for the operation."""

    code = "forbidden"


class InvalidAccessCodeError(LmsError):
    code = "invalid_access_code"

    def __init__(self, message: str = "Invalid access code") -> None:
        super().__init__(message)


class ValidationFailedError(LmsError):
    """Missing or malformed input on create/update."""

    code = "validation_failed"


class UnauthenticatedError(LmsError):
    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class StoreUnavailableError(LmsError):
    """The backing store failed; the message is logged, never returned."""

    code = "store_unavailable"
