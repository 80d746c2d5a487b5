"""Educator views: own courses, roster, dashboard."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import ACCESS_CODE, EDUCATOR, auth, create_course, enroll


def test_my_courses_include_unpublished_and_codes(client: TestClient) -> None:
    create_course(client)
    create_course(client, title="Draft", is_published=False)
    create_course(client, educator_id="edu-2", title="Someone else's")

    resp = client.get("/v1/educator/courses", headers=auth(EDUCATOR))
    assert resp.status_code == 200
    courses = resp.json()
    assert sorted(c["title"] for c in courses) == ["Draft", "Intro to Testing"]
    assert all(c["access_code"] == ACCESS_CODE for c in courses)


def test_roster_lists_members(client: TestClient) -> None:
    course_id = create_course(client)
    enroll(client, course_id, user_id="stu-a")
    enroll(client, course_id, user_id="stu-b")

    resp = client.get(
        f"/v1/educator/courses/{course_id}/students", headers=auth(EDUCATOR)
    )
    assert resp.status_code == 200
    assert sorted(e["user_id"] for e in resp.json()) == ["stu-a", "stu-b"]
    assert all(e["course_id"] == course_id for e in resp.json())


def test_roster_is_owner_only(client: TestClient) -> None:
    course_id = create_course(client)
    enroll(client, course_id, user_id="stu-a")
    resp = client.get(
        f"/v1/educator/courses/{course_id}/students", headers=auth("stu-a")
    )
    assert resp.status_code == 403


def test_dashboard_counts(client: TestClient) -> None:
    first = create_course(client)
    second = create_course(client, title="Second")
    create_course(client, educator_id="edu-2")
    for i in range(7):
        enroll(client, first, user_id=f"stu-{i}")
        enroll(client, second, user_id=f"stu-{i}")

    resp = client.get("/v1/educator/dashboard", headers=auth(EDUCATOR))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_courses"] == 2
    assert body["total_enrollments"] == 14
    assert len(body["recent_enrollments"]) == 10


def test_dashboard_for_new_educator_is_empty(client: TestClient) -> None:
    resp = client.get("/v1/educator/dashboard", headers=auth("edu-new"))
    assert resp.json() == {
        "total_courses": 0,
        "total_enrollments": 0,
        "recent_enrollments": [],
    }
