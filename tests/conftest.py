from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lms.api.dependencies import memory_courses, memory_enrollments, memory_progress
from lms.api.ratelimit import rate_limiter
from lms.main import app
from lms.services import token_service
from lms.services.cache import cache_service

# Ensure repo root is on sys.path so `import lms` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

EDUCATOR = "edu-1"
STUDENT = "stu-1"
ACCESS_CODE = "ABC123"


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Clear the in-memory course, enrollment and progress stores."""
    memory_courses._by_id.clear()
    memory_enrollments._store.clear()
    memory_progress._store.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(rate_limiter, "_buckets"):
        rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(username=user_id)}"}


@pytest.fixture
def token() -> str:
    return mint_token()


# ---------------------------------------------------------------------------
# Course helpers
# ---------------------------------------------------------------------------


def course_payload(access_code: str = ACCESS_CODE, **overrides) -> dict:
    """Two chapters, one lecture each; the first lecture is a free preview."""
    payload = {
        "title": "Intro to Testing",
        "description": "From assertions to fixtures",
        "access_code": access_code,
        "thumbnail_ref": "https://cdn.example.com/thumbs/testing.png",
        "chapters": [
            {
                "id": "ch1",
                "title": "Basics",
                "lectures": [
                    {
                        "id": "L1",
                        "title": "Why test",
                        "type": "video",
                        "url": "https://www.youtube.com/watch?v=abc123XYZ",
                        "duration": 10,
                        "is_preview_free": True,
                    }
                ],
            },
            {
                "id": "ch2",
                "title": "Fixtures",
                "lectures": [
                    {
                        "id": "L2",
                        "title": "Fixture scopes",
                        "type": "pdf",
                        "url": "https://files.example.com/scopes.pdf",
                        "duration": 15,
                    }
                ],
            },
        ],
    }
    payload.update(overrides)
    return payload


def create_course(
    client: TestClient, educator_id: str = EDUCATOR, **overrides
) -> str:
    resp = client.post(
        "/v1/courses", json=course_payload(**overrides), headers=auth(educator_id)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["course_id"]


def enroll(
    client: TestClient,
    course_id: str,
    user_id: str = STUDENT,
    access_code: str = ACCESS_CODE,
):
    return client.post(
        f"/v1/courses/{course_id}/enroll",
        json={"access_code": access_code},
        headers=auth(user_id),
    )
