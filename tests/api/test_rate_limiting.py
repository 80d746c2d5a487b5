"""Rate limiting on the enrollment and progress routes.

1. The enrollment bucket is small (10) so access codes can't be guessed
2. The progress bucket is the default (60)
3. Buckets are separate per route scope and per caller
4. 429 responses carry Retry-After and count in rate_limit_hits_total
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import STUDENT, auth, create_course, enroll


def test_enroll_limit_includes_retry_after(client: TestClient) -> None:
    course_id = create_course(client)
    before = REGISTRY.get_sample_value("rate_limit_hits_total", {"key_type": "user"}) or 0.0

    last = None
    for _ in range(12):
        last = enroll(client, course_id, access_code="nope")
    assert last is not None
    assert last.status_code == 429
    assert int(last.headers["retry-after"]) > 0
    assert last.headers["x-ratelimit-remaining"] == "0"
    assert REGISTRY.get_sample_value(
        "rate_limit_hits_total", {"key_type": "user"}
    ) >= before + 1


def test_enroll_limit_is_per_caller(client: TestClient) -> None:
    course_id = create_course(client)
    for _ in range(12):
        enroll(client, course_id, access_code="nope")
    assert enroll(client, course_id, user_id="someone-else").status_code == 201


def test_exhausted_enroll_bucket_leaves_progress_alone(client: TestClient) -> None:
    course_id = create_course(client)
    assert enroll(client, course_id).status_code == 201
    for _ in range(12):
        enroll(client, course_id, access_code="nope")

    resp = client.get(f"/v1/progress/{course_id}", headers=auth(STUDENT))
    assert resp.status_code == 200


def test_progress_reports_over_limit_get_429(client: TestClient) -> None:
    course_id = create_course(client)
    enroll(client, course_id)
    headers = auth(STUDENT)

    statuses = [
        client.post(
            f"/v1/progress/{course_id}", json={"lecture_id": "L1"}, headers=headers
        ).status_code
        for _ in range(65)
    ]
    assert 200 in statuses
    assert 429 in statuses
