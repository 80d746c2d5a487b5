"""Prometheus metric inventory for lms-service.

Every metric the service exports is declared here; the modules that own
the behavior import the one they need and increment or observe it at
the point of action.  /metrics (api/metrics_endpoint.py) serves the
default registry in text exposition format.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

ENROLLMENT_ATTEMPTS = Counter(
    "enrollment_attempts_total",
    "Access-code enrollment attempts by outcome",
    ["result"],  # enrolled|already_enrolled|invalid_code|not_found
)

LECTURE_COMPLETIONS = Counter(
    "lecture_completions_total",
    "Lectures newly marked complete (repeat reports are not counted)",
)

COURSE_DELETIONS = Counter(
    "course_deletions_total",
    "Course deletion cascades by outcome",
    ["result"],  # ok|failed
)

# ---------------------------------------------------------------------------
# Infrastructure metrics
# ---------------------------------------------------------------------------

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)
