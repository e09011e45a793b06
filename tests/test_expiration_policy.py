"""Tests for violation lifetimes and restriction finalisation."""

from datetime import timedelta

import pytest

from warncord.datatypes.violation_datatypes import FeatureRestriction, ViolationSeverity, ViolationType
from warncord.escalation.expiration_policy import (
    expiration_for,
    finalize_restrictions,
    is_repeat_offense,
    platform_timeout_for,
    uses_platform_timeout,
)
from warncord.escalation.restriction_resolver import restriction_resolver


class TestRepeatOffense:
    def test_same_type_within_lookback(self, make_violation, now):
        history = [make_violation(type=ViolationType.SPAM, issued_at=now - timedelta(days=10))]
        assert is_repeat_offense(history, ViolationType.SPAM, now) is True

    def test_other_type_does_not_count(self, make_violation, now):
        history = [make_violation(type=ViolationType.NSFW, issued_at=now - timedelta(days=10))]
        assert is_repeat_offense(history, ViolationType.SPAM, now) is False

    def test_outside_lookback(self, make_violation, now):
        history = [make_violation(type=ViolationType.SPAM, issued_at=now - timedelta(days=91))]
        assert is_repeat_offense(history, ViolationType.SPAM, now) is False

    def test_expired_violation_does_not_count(self, make_violation, now):
        history = [make_violation(type=ViolationType.SPAM, expired_at=now - timedelta(days=1))]
        assert is_repeat_offense(history, ViolationType.SPAM, now) is False


class TestExpirationFor:
    def test_first_offense_duration(self, now):
        assert expiration_for(ViolationType.TOXICITY, ViolationSeverity.LOW, False, now) == now + timedelta(days=3)

    def test_repeat_offense_duration(self, now):
        assert expiration_for(ViolationType.TOXICITY, ViolationSeverity.LOW, True, now) == now + timedelta(days=7)

    def test_zero_days_is_permanent(self, now):
        assert expiration_for(ViolationType.ILLEGAL, ViolationSeverity.CRITICAL, False, now) is None
        assert expiration_for(ViolationType.TOXICITY, ViolationSeverity.CRITICAL, True, now) is None


def test_uses_platform_timeout():
    assert uses_platform_timeout(ViolationType.TOXICITY, ViolationSeverity.HIGH) is True
    assert uses_platform_timeout(ViolationType.SPAM, ViolationSeverity.HIGH) is False


class TestPlatformTimeoutFor:
    def test_not_timeout_enforced(self):
        assert platform_timeout_for(ViolationType.SPAM, ViolationSeverity.HIGH, False) is None

    def test_first_and_repeat_lengths(self):
        assert platform_timeout_for(ViolationType.TOXICITY, ViolationSeverity.HIGH, False) == timedelta(days=7)
        assert platform_timeout_for(ViolationType.TOXICITY, ViolationSeverity.HIGH, True) == timedelta(days=14)

    def test_clamped_to_platform_maximum(self):
        assert platform_timeout_for(ViolationType.EVASION, ViolationSeverity.HIGH, False) == timedelta(days=28)
        assert platform_timeout_for(ViolationType.ILLEGAL, ViolationSeverity.CRITICAL, False) == timedelta(days=28)


class TestFinalizeRestrictions:
    def test_platform_timeout_keeps_rate_limit(self):
        restrictions = finalize_restrictions(
            ViolationType.NSFW,
            ViolationSeverity.HIGH,
            [FeatureRestriction.MESSAGE_ATTACH, FeatureRestriction.MESSAGE_LINK, FeatureRestriction.RATE_LIMIT],
        )
        assert restrictions == [
            FeatureRestriction.MESSAGE_ATTACH,
            FeatureRestriction.MESSAGE_LINK,
            FeatureRestriction.RATE_LIMIT,
        ]

    @pytest.mark.parametrize("violation_type", [ViolationType.TOXICITY, ViolationType.EVASION])
    @pytest.mark.parametrize("severity", [ViolationSeverity.HIGH, ViolationSeverity.CRITICAL])
    def test_high_severity_resolver_output_is_kept(self, violation_type, severity):
        resolved = restriction_resolver.get_restrictions(violation_type, severity)

        restrictions = finalize_restrictions(violation_type, severity, resolved)

        assert FeatureRestriction.RATE_LIMIT in restrictions
        assert restrictions == resolved

    def test_spam_high_keeps_rate_limit(self):
        restrictions = finalize_restrictions(
            ViolationType.SPAM,
            ViolationSeverity.HIGH,
            [FeatureRestriction.MESSAGE_EMBED, FeatureRestriction.RATE_LIMIT],
        )
        assert restrictions == [FeatureRestriction.MESSAGE_EMBED, FeatureRestriction.RATE_LIMIT]

    def test_toxicity_always_rate_limited(self):
        assert finalize_restrictions(ViolationType.TOXICITY, ViolationSeverity.MEDIUM, []) == [
            FeatureRestriction.RATE_LIMIT
        ]

    def test_input_is_not_mutated(self):
        original = [FeatureRestriction.MESSAGE_LINK]
        finalize_restrictions(ViolationType.EVASION, ViolationSeverity.LOW, original)
        assert original == [FeatureRestriction.MESSAGE_LINK]
