"""Request context middleware: one ID per request, one summary line per request.

The ID comes from the client's X-Request-ID header or is generated, is
stored in ``request_id_var`` (core/logging.py) so every log line of the
request carries it, and is echoed back on the response.  The summary
line carries method, path, status, duration and, when a bearer token
was sent, the caller's ``sub``.
"""

from __future__ import annotations

import logging
import time
import uuid

import jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from lms.core.logging import request_id_var

logger = logging.getLogger(__name__)


def _caller_hint(request: Request) -> str | None:
    """Unverified ``sub`` for log correlation only; never used for access."""
    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    try:
        claims = jwt.decode(auth_header[7:], options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    sub = claims.get("sub")
    return sub if isinstance(sub, str) else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            extra = {
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
            user_id = _caller_hint(request)
            if user_id is not None:
                extra["user_id"] = user_id
            logger.info(
                "%s %s -> %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra=extra,
            )

            response.headers["X-Request-ID"] = req_id
            return response
        finally:
            request_id_var.reset(token)
