"""Tests for restriction derivation."""

import pytest

from warncord.datatypes.violation_datatypes import FeatureRestriction, ViolationSeverity, ViolationType
from warncord.escalation.restriction_resolver import RestrictionResolver, restriction_resolver


def test_low_collapses_to_rate_limit():
    restrictions = restriction_resolver.get_restrictions(ViolationType.NSFW, ViolationSeverity.LOW)
    assert restrictions == [FeatureRestriction.RATE_LIMIT]


def test_low_without_base_restrictions_is_empty():
    assert restriction_resolver.get_restrictions(ViolationType.OTHER, ViolationSeverity.LOW) == []


def test_medium_returns_full_base_set():
    restrictions = restriction_resolver.get_restrictions(ViolationType.ADVERTISING, ViolationSeverity.MEDIUM)
    assert restrictions == [FeatureRestriction.MESSAGE_LINK, FeatureRestriction.MESSAGE_EMBED]


@pytest.mark.parametrize("severity", [ViolationSeverity.HIGH, ViolationSeverity.CRITICAL])
def test_high_adds_rate_limit(severity):
    restrictions = restriction_resolver.get_restrictions(ViolationType.SPAM, severity)
    assert restrictions == [FeatureRestriction.MESSAGE_EMBED, FeatureRestriction.RATE_LIMIT]


def test_rate_limit_is_not_duplicated():
    restrictions = restriction_resolver.get_restrictions(ViolationType.TOXICITY, ViolationSeverity.HIGH)
    assert restrictions.count(FeatureRestriction.RATE_LIMIT) == 1


def test_string_inputs_are_accepted():
    restrictions = RestrictionResolver().get_restrictions("PRIVACY", "MEDIUM")
    assert restrictions == [FeatureRestriction.MESSAGE_LINK]


@pytest.mark.parametrize(
    "violation_type, severity",
    [("NOT_A_TYPE", ViolationSeverity.LOW), (ViolationType.SPAM, "EXTREME"), (None, None)],
)
def test_unknown_inputs_return_empty(violation_type, severity):
    assert restriction_resolver.get_restrictions(violation_type, severity) == []


def test_result_is_a_fresh_list():
    first = restriction_resolver.get_restrictions(ViolationType.NSFW, ViolationSeverity.MEDIUM)
    first.append(FeatureRestriction.TIMEOUT)
    second = restriction_resolver.get_restrictions(ViolationType.NSFW, ViolationSeverity.MEDIUM)
    assert FeatureRestriction.TIMEOUT not in second
