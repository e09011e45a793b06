"""Tests for violation enums, records and the rule catalog tables."""

from datetime import datetime, timedelta, timezone

import pytest

from warncord.datatypes.punishment_datatypes import DryRunLogEntry
from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    ViolationSeverity,
    ViolationType,
)
from warncord.escalation import rule_catalog
from warncord.util.clock import ensure_utc, fixed_clock


def test_severity_ordering():
    assert ViolationSeverity.LOW < ViolationSeverity.MEDIUM < ViolationSeverity.HIGH < ViolationSeverity.CRITICAL
    assert ViolationSeverity.HIGH >= ViolationSeverity.HIGH
    assert max(ViolationSeverity.MEDIUM, ViolationSeverity.LOW) == ViolationSeverity.MEDIUM
    assert str(ViolationSeverity.HIGH) == "HIGH"


def test_rule_ids_parsed_from_policy(make_violation):
    assert make_violation(policy_violated="101, 102,").rule_ids == ["101", "102"]
    assert make_violation(policy_violated=None).rule_ids == []


def test_violation_is_immutable(make_violation):
    violation = make_violation()
    with pytest.raises(AttributeError):
        violation.severity = ViolationSeverity.HIGH  # type: ignore[misc]


def test_tables_cover_every_member():
    assert set(rule_catalog.VIOLATION_TYPE_TO_RESTRICTIONS) == set(ViolationType)
    assert set(rule_catalog.VIOLATION_TYPE_PRIORITY) == set(ViolationType)
    assert set(rule_catalog.SEVERITY_SCORES) == set(ViolationSeverity)
    assert rule_catalog.VIOLATION_TYPE_PRIORITY[0] == ViolationType.ILLEGAL


def test_check_exhaustive_reports_missing_members():
    with pytest.raises(RuntimeError, match="CRITICAL"):
        rule_catalog._check_exhaustive(
            "partial",
            [ViolationSeverity.LOW, ViolationSeverity.MEDIUM, ViolationSeverity.HIGH],
            ViolationSeverity,
        )


def test_dry_run_entry_to_dict_is_json_ready(now):
    entry = DryRunLogEntry(
        timestamp=now,
        user_id=42,
        user_tag="someone#0001",
        guild_id=1,
        channel_id=7,
        message_content="hi",
        ai_categories=["101"],
        ai_reason=None,
        mapped_violation_type=ViolationType.TOXICITY,
        mapped_rule_ids=["101"],
        is_severe=False,
        offense_count=0,
        calculated_severity=ViolationSeverity.LOW,
        would_flag_for_review=False,
        would_delete_message=False,
        restrictions=[FeatureRestriction.RATE_LIMIT],
        reason="AI Detection: rule violation",
        expires_at=now + timedelta(days=3),
    )

    data = entry.to_dict()

    assert data["timestamp"] == now.isoformat()
    assert data["mapped_violation_type"] == "TOXICITY"
    assert data["calculated_severity"] == "LOW"
    assert data["restrictions"] == ["RATE_LIMIT"]
    assert data["expires_at"] == (now + timedelta(days=3)).isoformat()


def test_clock_helpers():
    naive = datetime(2024, 1, 1, 12, 0)
    clock = fixed_clock(naive)

    assert clock() == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ensure_utc(naive).tzinfo is timezone.utc
    assert ensure_utc(datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))) == clock()
