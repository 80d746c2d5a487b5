"""Prometheus metrics middleware: instruments every HTTP request.

For each request, this middleware:
  1. Raises the ACTIVE_REQUESTS gauge, lowering it again on the way out
  2. Times the request
  3. Counts it in REQUEST_COUNT by method, endpoint and status, and
     records the duration in the REQUEST_DURATION histogram

Requests for /metrics itself are not counted, so scraping does not
show up as traffic.

WHICH ENDPOINT LABEL?
----------------------
The obvious label is the URL path, but nearly every route here carries a
course id:

  /v1/courses/3f2c.../enroll
  /v1/progress/9a41...

Labelled by raw path, every course would mint its own time series and
the metrics store would grow with the catalog.  Starlette records the
matched route on the request scope after routing, so the label is the
route template instead:

  /v1/courses/{course_id}/enroll
  /v1/progress/{course_id}

One series per route, however many courses exist.  Paths that match no
route (typos, scanners) share the single label ``unmatched``.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from lms.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Scrapes would otherwise count themselves
        if request.url.path == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            endpoint = _endpoint_label(request)
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)

        return response
