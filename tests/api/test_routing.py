from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import create_course

# ---- 404: undefined routes ----


def test_undefined_route_returns_404(client: TestClient) -> None:
    resp = client.get("/nonexistent")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not Found"}


def test_undefined_nested_route_returns_404(client: TestClient) -> None:
    resp = client.get("/v2/courses")
    assert resp.status_code == 404


# ---- 405: wrong HTTP method on existing routes ----


def test_put_course_returns_405(client: TestClient, token: str) -> None:
    course_id = create_course(client)
    resp = client.put(
        f"/v1/courses/{course_id}",
        json={"title": "x"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 405


def test_put_health_returns_405(client: TestClient) -> None:
    resp = client.put("/health", json={"status": "bad"})
    assert resp.status_code == 405


def test_delete_enrollments_returns_405(client: TestClient, token: str) -> None:
    # There is no unenroll
    resp = client.delete("/v1/enrollments", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 405
