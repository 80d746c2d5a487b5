#!/usr/bin/env python3
"""Load test script: shows the per-user enrollment rate limit in action.

RUN:  python scripts/load_test_rate_limit.py

Creates a course, then fires TOTAL_REQUESTS enrollment attempts with a
wrong access code and prints how many were evaluated (403) vs.
throttled (429). Guessing codes is exactly what the enroll limit is for.

Prerequisites:
  - The API must be running: uvicorn lms.main:app --port 8000
  - IDP_PUBLIC_KEY must be unset so the service accepts locally minted
    tokens (the script imports token_service to sign them)

This script is educational, not a production load testing tool.
"""

from __future__ import annotations

import sys
import time

import httpx

from lms.services import token_service
from lms.services.rate_limiter import ENROLLMENT_LIMIT

BASE_URL = "http://localhost:8000"
TOTAL_REQUESTS = 30


def main() -> None:
    print("Enrollment Rate Limit Load Test")
    print("=" * 50)

    educator = token_service.create_access_token(sub="load-test-educator")
    student = token_service.create_access_token(sub="load-test-student")

    with httpx.Client(base_url=BASE_URL, timeout=10) as client:
        resp = client.post(
            "/v1/courses",
            json={
                "title": "Load test",
                "description": "Throwaway",
                "access_code": "real-code",
            },
            headers={"Authorization": f"Bearer {educator}"},
        )
        if resp.status_code != 201:
            print(f"Course creation failed: {resp.status_code} {resp.text}")
            sys.exit(1)
        course_id = resp.json()["course_id"]
        print(f"Target: {BASE_URL}/v1/courses/{course_id}/enroll")
        print(f"Total requests: {TOTAL_REQUESTS}")
        print()

        results: dict[int, int] = {}
        start = time.monotonic()

        for i in range(TOTAL_REQUESTS):
            resp = client.post(
                f"/v1/courses/{course_id}/enroll",
                json={"access_code": f"guess-{i}"},
                headers={"Authorization": f"Bearer {student}"},
            )
            results[resp.status_code] = results.get(resp.status_code, 0) + 1

        elapsed = time.monotonic() - start

    print(f"Results after {TOTAL_REQUESTS} requests ({elapsed:.2f}s):")
    print("─" * 40)
    rejected = results.get(403, 0)
    throttled = results.get(429, 0)
    other = sum(v for k, v in results.items() if k not in (403, 429))
    print(f"  Wrong code (403): {rejected:>4}")
    print(f"  Throttled  (429): {throttled:>4}")
    if other:
        print(f"  Other:            {other:>4}")
    print()
    print(f"Bucket capacity: {ENROLLMENT_LIMIT.capacity}")
    print(f"Refill rate: {ENROLLMENT_LIMIT.refill_rate:.3f} tokens/second")


if __name__ == "__main__":
    main()
