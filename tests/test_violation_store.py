"""Tests for the SQLite violation store."""

from datetime import timedelta
from pathlib import Path

import pytest

from warncord.database.violation_store import ViolationStore
from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    NewViolation,
    ReviewOutcome,
    RuleSection,
    ViolationSeverity,
    ViolationType,
)


class MutableClock:
    """Clock whose current instant can be moved between calls."""

    def __init__(self, instant):
        self.instant = instant

    def __call__(self):
        return self.instant


def new_violation(policy="101", **overrides) -> NewViolation:
    fields = {
        "user_id": 42,
        "guild_id": 1,
        "type": ViolationType.TOXICITY,
        "severity": ViolationSeverity.LOW,
        "policy_violated": policy,
        "reason": "AI Detection: rude",
        "context": "AI-detected | Channel: 7 | Offense #1",
        "restrictions": (FeatureRestriction.RATE_LIMIT,),
    }
    fields.update(overrides)
    return NewViolation(**fields)


@pytest.mark.asyncio
async def test_create_round_trips_fields(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        created = await store.create(new_violation(expires_at=now + timedelta(days=3), content_snapshot="hi"))
        fetched = await store.get(created.id)

    assert fetched == created
    assert created.issued_at == now
    assert created.expires_at == now + timedelta(days=3)
    assert created.restrictions == (FeatureRestriction.RATE_LIMIT,)
    assert created.issued_by == 0
    assert created.content_snapshot == "hi"
    assert created.review_outcome is None


@pytest.mark.asyncio
async def test_list_excludes_expired_unless_requested(tmp_path: Path, now):
    clock = MutableClock(now - timedelta(days=10))
    async with ViolationStore(tmp_path / "violations.db", clock=clock) as store:
        short = await store.create(new_violation(expires_at=now - timedelta(days=5)))
        long = await store.create(new_violation(expires_at=now + timedelta(days=5)))
        permanent = await store.create(new_violation(expires_at=None))
        clock.instant = now

        active = await store.list(42, 1)
        everything = await store.list(42, 1, include_expired=True)

    assert {v.id for v in active} == {long.id, permanent.id}
    assert {v.id for v in everything} == {short.id, long.id, permanent.id}


@pytest.mark.asyncio
async def test_list_is_scoped_to_user_and_guild(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        await store.create(new_violation())
        await store.create(new_violation(user_id=43))
        await store.create(new_violation(guild_id=2))

        assert len(await store.list(42, 1)) == 1
        assert await store.list(44, 1) == []


@pytest.mark.asyncio
async def test_list_active_in_section_filters_section_and_window(tmp_path: Path, now):
    clock = MutableClock(now - timedelta(days=3))
    async with ViolationStore(tmp_path / "violations.db", clock=clock) as store:
        await store.create(new_violation(policy="102"))  # outside the window
        clock.instant = now - timedelta(hours=2)
        in_section = await store.create(new_violation(policy="301,105"))
        await store.create(new_violation(policy="201"))
        await store.create(new_violation(policy=None))
        expired = await store.create(new_violation(policy="101"))
        await store.expire(expired.id)
        clock.instant = now

        found = await store.list_active_in_section(42, 1, RuleSection.BASIC_BEHAVIOR, now - timedelta(days=1))

    assert [v.id for v in found] == [in_section.id]


@pytest.mark.asyncio
async def test_expire_is_idempotent(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        created = await store.create(new_violation())

        assert await store.expire(created.id) is True
        assert await store.expire(created.id) is False
        assert await store.expire(12345) is False
        assert (await store.get(created.id)).expired_at == now


@pytest.mark.asyncio
async def test_review_removal_expires_violation(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        created = await store.create(new_violation())
        await store.request_review(created.id)

        assert await store.record_review(created.id, 77, ReviewOutcome.VIOLATION_REMOVED, "false positive")
        reviewed = await store.get(created.id)

    assert reviewed.review_requested is True
    assert reviewed.reviewed_by == 77
    assert reviewed.reviewed_at == now
    assert reviewed.review_outcome == ReviewOutcome.VIOLATION_REMOVED
    assert reviewed.review_notes == "false positive"
    assert reviewed.expired_at == now


@pytest.mark.asyncio
async def test_upheld_review_keeps_violation_active(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        created = await store.create(new_violation())
        await store.record_review(created.id, 77, ReviewOutcome.VIOLATION_UPHELD)

        assert [v.id for v in await store.list(42, 1)] == [created.id]


@pytest.mark.asyncio
async def test_use_before_initialize_raises(tmp_path: Path):
    store = ViolationStore(tmp_path / "violations.db")

    with pytest.raises(RuntimeError):
        await store.list(42, 1)


@pytest.mark.asyncio
async def test_initialize_twice_and_close(tmp_path: Path):
    store = ViolationStore(tmp_path / "nested" / "violations.db")

    assert await store.initialize() is True
    assert await store.initialize() is True
    await store.close()
    await store.close()

    assert (tmp_path / "nested" / "violations.db").exists()
    assert store.db_perf_mon.get_statistics() == {}


@pytest.mark.asyncio
async def test_queries_are_tracked(tmp_path: Path, now):
    async with ViolationStore(tmp_path / "violations.db", clock=MutableClock(now)) as store:
        await store.create(new_violation())
        await store.list(42, 1)

        stats = store.db_perf_mon.get_statistics()

    assert stats["create"]["count"] == 1
    assert stats["list"]["count"] == 1
