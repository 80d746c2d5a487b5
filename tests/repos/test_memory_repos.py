from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from lms.models.course import Course
from lms.models.progress import Position
from lms.repos.course_repo import InMemoryCourseRepo
from lms.repos.enrollment_repo import InMemoryEnrollmentRepo
from lms.repos.progress_repo import InMemoryProgressRepo


def test_enroll_is_idempotent() -> None:
    repo = InMemoryEnrollmentRepo()
    cid = uuid4()

    async def _run():
        return [await repo.enroll(cid, "u") for _ in range(3)]

    assert asyncio.run(_run()) == [True, False, False]
    assert asyncio.run(repo.list_members(cid)) == {"u"}
    assert asyncio.run(repo.list_enrolled("u")) == {cid}


def test_enrollment_delete_is_scoped_to_course() -> None:
    repo = InMemoryEnrollmentRepo()
    keep, drop = uuid4(), uuid4()

    async def _run():
        for cid in (keep, drop):
            await repo.enroll(cid, "a")
            await repo.enroll(cid, "b")
        return await repo.delete_for_course(drop)

    assert asyncio.run(_run()) == 2
    assert asyncio.run(repo.list_enrolled("a")) == {keep}
    assert asyncio.run(repo.is_enrolled(drop, "b")) is False


def test_progress_record_created_lazily() -> None:
    repo = InMemoryProgressRepo()
    cid = uuid4()
    assert asyncio.run(repo.get("u", cid)) is None

    record = asyncio.run(repo.record_position("u", cid, "x", Position(1, 2)))
    assert record.completed_lecture_ids == frozenset()
    assert record.last_lecture_id == "x"
    assert record.last_position == Position(chapter=1, lecture=2)


def test_completion_set_add_and_pointer_overwrite() -> None:
    repo = InMemoryProgressRepo()
    cid = uuid4()

    async def _run():
        _, first = await repo.mark_lecture_complete("u", cid, "a", Position(0, 0))
        _, again = await repo.mark_lecture_complete("u", cid, "a", Position(0, 0))
        await repo.record_position("u", cid, "b", Position(0, 1))
        return first, again, await repo.get("u", cid)

    first, again, record = asyncio.run(_run())
    assert (first, again) == (True, False)
    assert record.completed_lecture_ids == frozenset({"a"})
    # Position-only report moves the pointer without touching completions
    assert record.last_lecture_id == "b"


def test_course_add_rejects_duplicate_and_save_requires_existing() -> None:
    repo = InMemoryCourseRepo()
    course = Course.new(title="t", description="d", access_code="c", educator_id="e")
    asyncio.run(repo.add(course))
    with pytest.raises(ValueError):
        asyncio.run(repo.add(course))

    stranger = Course.new(title="t", description="d", access_code="c", educator_id="e")
    assert asyncio.run(repo.save(stranger)) is None


def test_catalog_lists_only_published() -> None:
    repo = InMemoryCourseRepo()
    live = Course.new(title="a", description="d", access_code="c", educator_id="e")
    draft = Course.new(
        title="b", description="d", access_code="c", educator_id="e", is_published=False
    )

    async def _run():
        await repo.add(live)
        await repo.add(draft)
        return await repo.list_published(), await repo.list_by_educator("e")

    published, mine = asyncio.run(_run())
    assert [c.id for c in published] == [live.id]
    assert {c.id for c in mine} == {live.id, draft.id}
