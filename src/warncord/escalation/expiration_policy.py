"""
Violation lifetimes and enforcement adjustments applied when issuing.

A violation's lifetime depends on its type, its severity, and whether the
user already has an active violation of the same type from the last 90 days.
A duration of 0 days means the violation never expires passively.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    Violation,
    ViolationSeverity,
    ViolationType,
)
from warncord.escalation.account_standing import is_expired
from warncord.escalation.rule_catalog import DEFAULT_EXPIRATION_DAYS, VIOLATION_TYPE_DURATIONS
from warncord.util.clock import ensure_utc

REPEAT_OFFENSE_LOOKBACK = timedelta(days=90)
MAX_PLATFORM_TIMEOUT = timedelta(days=28)


def is_repeat_offense(violations: Iterable[Violation], violation_type: ViolationType, now: datetime) -> bool:
    """True if any active violation of ``violation_type`` was issued in the last 90 days."""
    cutoff = now - REPEAT_OFFENSE_LOOKBACK
    return any(
        v.type == violation_type and ensure_utc(v.issued_at) > cutoff and not is_expired(v, now)
        for v in violations
    )


def expiration_for(
    violation_type: ViolationType,
    severity: ViolationSeverity,
    repeat: bool,
    issued_at: datetime,
) -> Optional[datetime]:
    """Return when a new violation should expire, or None if it is permanent."""
    duration = VIOLATION_TYPE_DURATIONS.get(violation_type, {}).get(severity)
    if duration is None:
        days = DEFAULT_EXPIRATION_DAYS[severity]
    else:
        days = duration.repeat_offense if repeat else duration.first_offense

    if days == 0:
        return None
    return issued_at + timedelta(days=days)


def uses_platform_timeout(violation_type: ViolationType, severity: ViolationSeverity) -> bool:
    duration = VIOLATION_TYPE_DURATIONS.get(violation_type, {}).get(severity)
    return bool(duration and duration.use_platform_timeout)


def platform_timeout_for(
    violation_type: ViolationType,
    severity: ViolationSeverity,
    repeat: bool,
) -> Optional[timedelta]:
    """Length of the platform timeout that accompanies a new violation.

    None when the type and severity are not enforced by timeout. Permanent
    durations and anything longer than 28 days are clamped to the 28 day
    platform maximum; bans are left to human moderators.
    """
    duration = VIOLATION_TYPE_DURATIONS.get(violation_type, {}).get(severity)
    if duration is None or not duration.use_platform_timeout:
        return None
    days = duration.repeat_offense if repeat else duration.first_offense
    if days == 0:
        return MAX_PLATFORM_TIMEOUT
    return min(timedelta(days=days), MAX_PLATFORM_TIMEOUT)


def finalize_restrictions(
    violation_type: ViolationType,
    severity: ViolationSeverity,
    restrictions: Sequence[FeatureRestriction],
) -> List[FeatureRestriction]:
    """Adjust restrictions for how the penalty is enforced.

    TOXICITY and EVASION always carry a rate limit. Penalties that are also
    enforced by a platform timeout keep their restrictions; the timeout is an
    extra step taken by the restriction applier, not a replacement.
    """
    result = list(restrictions)
    if violation_type in (ViolationType.TOXICITY, ViolationType.EVASION) and FeatureRestriction.RATE_LIMIT not in result:
        result.append(FeatureRestriction.RATE_LIMIT)
    return result
