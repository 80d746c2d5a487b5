"""Access-code enrollment and the caller's membership listing."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import EDUCATOR, STUDENT, auth, create_course, enroll


def _attempts(result: str) -> float:
    return (
        REGISTRY.get_sample_value(
            "enrollment_attempts_total", {"result": result}
        )
        or 0.0
    )


def test_enroll_with_valid_code_is_201(client: TestClient) -> None:
    course_id = create_course(client)
    resp = enroll(client, course_id)
    assert resp.status_code == 201
    assert resp.json() == {
        "course_id": course_id,
        "user_id": STUDENT,
        "status": "enrolled",
    }


def test_enroll_twice_is_200_already_enrolled(client: TestClient) -> None:
    course_id = create_course(client)
    enroll(client, course_id)
    resp = enroll(client, course_id)
    assert resp.status_code == 200
    assert resp.json()["status"] == "already_enrolled"

    roster = client.get(
        f"/v1/educator/courses/{course_id}/students", headers=auth(EDUCATOR)
    ).json()
    assert [e["user_id"] for e in roster] == [STUDENT]


def test_enroll_with_wrong_code_is_403(client: TestClient) -> None:
    course_id = create_course(client)
    before = _attempts("invalid_code")
    resp = enroll(client, course_id, access_code="XYZ000")
    assert resp.status_code == 403
    assert resp.json() == {"detail": "Invalid access code", "code": "invalid_access_code"}
    assert _attempts("invalid_code") == before + 1


def test_access_code_is_case_sensitive(client: TestClient) -> None:
    course_id = create_course(client)
    assert enroll(client, course_id, access_code="abc123").status_code == 403


def test_access_code_is_stored_exactly_as_set(client: TestClient) -> None:
    course_id = create_course(client, access_code=" ABC123 ")

    owner_view = client.get(f"/v1/courses/{course_id}", headers=auth(EDUCATOR))
    assert owner_view.json()["access_code"] == " ABC123 "
    assert enroll(client, course_id, access_code="ABC123").status_code == 403
    assert enroll(client, course_id, access_code=" ABC123 ").status_code == 201


def test_enroll_unknown_course_is_404(client: TestClient) -> None:
    resp = enroll(client, str(uuid4()))
    assert resp.status_code == 404


def test_enroll_requires_auth(client: TestClient) -> None:
    course_id = create_course(client)
    resp = client.post(
        f"/v1/courses/{course_id}/enroll", json={"access_code": "ABC123"}
    )
    assert resp.status_code == 401


def test_enroll_brute_force_is_rate_limited(client: TestClient) -> None:
    course_id = create_course(client)
    statuses = [
        enroll(client, course_id, access_code=f"GUESS{i}").status_code
        for i in range(11)
    ]
    assert statuses[:10] == [403] * 10
    assert statuses[10] == 429


def test_list_enrollments_returns_member_view(client: TestClient) -> None:
    course_id = create_course(client)
    create_course(client, title="Other")
    enroll(client, course_id)

    resp = client.get("/v1/enrollments", headers=auth(STUDENT))
    assert resp.status_code == 200
    courses = resp.json()
    assert [c["id"] for c in courses] == [course_id]
    assert courses[0]["is_enrolled"] is True
    assert courses[0]["chapters"][1]["lectures"][0]["url"] != ""
    assert "access_code" not in courses[0]


def test_list_enrollments_skips_unpublished(client: TestClient) -> None:
    course_id = create_course(client)
    enroll(client, course_id)
    client.patch(
        f"/v1/courses/{course_id}", json={"is_published": False}, headers=auth(EDUCATOR)
    )
    assert client.get("/v1/enrollments", headers=auth(STUDENT)).json() == []


def test_get_enrolled_course_404_when_not_member(client: TestClient) -> None:
    course_id = create_course(client)
    resp = client.get(f"/v1/enrollments/{course_id}", headers=auth(STUDENT))
    assert resp.status_code == 404

    enroll(client, course_id)
    resp = client.get(f"/v1/enrollments/{course_id}", headers=auth(STUDENT))
    assert resp.status_code == 200
    assert resp.json()["id"] == course_id
