"""Demo: educator publishes a course, a student enrolls and works through it.

Run with:
    python scripts/demo_enrollment_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from lms.main import app
from lms.services import token_service

EDUCATOR = "demo-educator"
STUDENT = "demo-student"
ACCESS_CODE = "DEMO-42"


def bearer(sub: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=sub)}"}


def main() -> None:
    client = TestClient(app)

    # ── Step 1: educator creates a course ───────────────────────────
    r = client.post(
        "/v1/courses",
        json={
            "title": "Demo Course",
            "description": "Two short chapters",
            "access_code": ACCESS_CODE,
            "chapters": [
                {
                    "title": "Getting started",
                    "lectures": [
                        {
                            "title": "Welcome",
                            "type": "video",
                            "url": "https://youtu.be/dQw4w9WgXcQ",
                            "duration": 3,
                            "is_preview_free": True,
                        },
                        {
                            "title": "Setup notes",
                            "type": "pdf",
                            "url": "https://files.example.com/setup.pdf",
                            "duration": 5,
                        },
                    ],
                },
                {
                    "title": "Wrapping up",
                    "lectures": [
                        {
                            "title": "Summary",
                            "type": "pdf",
                            "url": "https://files.example.com/summary.pdf",
                            "duration": 4,
                        }
                    ],
                },
            ],
        },
        headers=bearer(EDUCATOR),
    )
    course_id = r.json()["course_id"]
    print(f"1. POST /v1/courses              → {r.status_code}  id={course_id}")

    # ── Step 2: anonymous catalog view ──────────────────────────────
    r = client.get(f"/v1/courses/{course_id}")
    urls = [
        lec.get("url", "<hidden>")
        for ch in r.json()["chapters"]
        for lec in ch["lectures"]
    ]
    print(f"2. GET  /v1/courses/{{id}} (anon)   → {r.status_code}  urls={urls}")

    # ── Step 3: wrong access code ───────────────────────────────────
    r = client.post(
        f"/v1/courses/{course_id}/enroll",
        json={"access_code": "nope"},
        headers=bearer(STUDENT),
    )
    print(f"3. POST enroll (bad code)        → {r.status_code}  {r.json()['code']}")

    # ── Step 4: right access code ───────────────────────────────────
    r = client.post(
        f"/v1/courses/{course_id}/enroll",
        json={"access_code": ACCESS_CODE},
        headers=bearer(STUDENT),
    )
    print(f"4. POST enroll (good code)       → {r.status_code}  {r.json()['status']}")

    # ── Step 5: complete every lecture ──────────────────────────────
    r = client.get(f"/v1/courses/{course_id}", headers=bearer(STUDENT))
    lecture_ids = [
        lec["id"] for ch in r.json()["chapters"] for lec in ch["lectures"]
    ]
    for lecture_id in lecture_ids:
        r = client.post(
            f"/v1/progress/{course_id}",
            json={"lecture_id": lecture_id},
            headers=bearer(STUDENT),
        )
        body = r.json()
        print(
            f"5. POST progress {lecture_id[:8]}…       → {r.status_code}  "
            f"{body['percent_complete']}%  complete={body['is_complete']}"
        )

    # ── Step 6: educator dashboard ──────────────────────────────────
    r = client.get("/v1/educator/dashboard", headers=bearer(EDUCATOR))
    print(f"6. GET  /v1/educator/dashboard   → {r.status_code}  {r.json()}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
