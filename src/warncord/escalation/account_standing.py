"""
Account standing aggregation.

A user's standing is derived from the weighted severity score of their active
(non-expired) violations. Violations issued in the last 30 days weigh 50%
more than older ones.

Score thresholds (inclusive lower bounds, evaluated highest first):

    >= 100  SUSPENDED
    >= 75   AT_RISK
    >= 50   VERY_LIMITED
    >= 25   LIMITED
    else    ALL_GOOD
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from warncord.datatypes.violation_datatypes import (
    AccountStanding,
    AccountStandingData,
    FeatureRestriction,
    Violation,
    ViolationSeverity,
    ViolationType,
)
from warncord.escalation.rule_catalog import SEVERITY_SCORES
from warncord.util.clock import Clock, ensure_utc, utc_now

RECENT_WINDOW = timedelta(days=30)
RECENT_MULTIPLIER = 1.5
AI_DETECTED_MARKER = "AI-detected"

STANDING_THRESHOLDS: Tuple[Tuple[float, AccountStanding], ...] = (
    (100, AccountStanding.SUSPENDED),
    (75, AccountStanding.AT_RISK),
    (50, AccountStanding.VERY_LIMITED),
    (25, AccountStanding.LIMITED),
)

VIOLATION_TYPE_LABELS: Dict[ViolationType, str] = {
    ViolationType.SPAM: "Spam / flooding",
    ViolationType.TOXICITY: "Toxic behaviour",
    ViolationType.NSFW: "Inappropriate content (NSFW)",
    ViolationType.PRIVACY: "Privacy violation",
    ViolationType.IMPERSONATION: "Impersonation",
    ViolationType.ILLEGAL: "Illegal content",
    ViolationType.ADVERTISING: "Unsolicited advertising",
    ViolationType.SELF_HARM: "Self-harm",
    ViolationType.EVASION: "Punishment evasion",
    ViolationType.OTHER: "Other violation",
}

SEVERITY_LABELS: Dict[ViolationSeverity, str] = {
    ViolationSeverity.LOW: "Low",
    ViolationSeverity.MEDIUM: "Medium",
    ViolationSeverity.HIGH: "High",
    ViolationSeverity.CRITICAL: "Critical",
}

RESTRICTION_LABELS: Dict[FeatureRestriction, str] = {
    FeatureRestriction.MESSAGE_EMBED: "Sending embeds",
    FeatureRestriction.MESSAGE_ATTACH: "Sending attachments",
    FeatureRestriction.MESSAGE_LINK: "Sending links",
    FeatureRestriction.VOICE_SPEAK: "Speaking in voice",
    FeatureRestriction.VOICE_VIDEO: "Video in voice",
    FeatureRestriction.VOICE_STREAM: "Streaming",
    FeatureRestriction.REACTION_ADD: "Adding reactions",
    FeatureRestriction.THREAD_CREATE: "Creating threads",
    FeatureRestriction.NICKNAME_CHANGE: "Changing nickname",
    FeatureRestriction.RATE_LIMIT: "Message rate limit",
    FeatureRestriction.TIMEOUT: "Timeout",
}

STANDING_LABELS: Dict[AccountStanding, str] = {
    AccountStanding.ALL_GOOD: "All good",
    AccountStanding.LIMITED: "Limited",
    AccountStanding.VERY_LIMITED: "Very limited",
    AccountStanding.AT_RISK: "At risk",
    AccountStanding.SUSPENDED: "Suspended",
}

STANDING_DESCRIPTIONS: Dict[AccountStanding, str] = {
    AccountStanding.ALL_GOOD: "No active violations; all features are available.",
    AccountStanding.LIMITED: (
        "An active violation has temporarily limited access to some features. "
        "Further violations lead to stricter limits."
    ),
    AccountStanding.VERY_LIMITED: (
        "One or more active violations have limited access to several features for longer. "
        "Further violations may put the account at risk."
    ),
    AccountStanding.AT_RISK: (
        "One or more active violations are on record. Any further violation may lead to suspension."
    ),
    AccountStanding.SUSPENDED: "Access to the server is suspended because of severe or repeated violations.",
}


# --------------------------
# Pure predicates
# --------------------------
def is_expired(violation: Violation, now: datetime) -> bool:
    """True if a moderator expired the violation or its ``expires_at`` has passed."""
    if violation.expired_at is not None:
        return True
    if violation.expires_at is None:
        return False
    return ensure_utc(now) > ensure_utc(violation.expires_at)


def is_recent(violation: Violation, now: datetime) -> bool:
    """True if the violation was issued within the last 30 days."""
    return ensure_utc(violation.issued_at) > ensure_utc(now) - RECENT_WINDOW


def severity_score(violations: Iterable[Violation], now: datetime) -> float:
    """Sum of base severity scores, recent violations weighted by 1.5."""
    score = 0.0
    for violation in violations:
        multiplier = RECENT_MULTIPLIER if is_recent(violation, now) else 1
        score += SEVERITY_SCORES[violation.severity] * multiplier
    return score


def standing_for_score(score: float) -> AccountStanding:
    for threshold, standing in STANDING_THRESHOLDS:
        if score >= threshold:
            return standing
    return AccountStanding.ALL_GOOD


def is_ai_detected_violation(violation: Violation) -> bool:
    """True for violations issued by the system (issuer 0 or None) or marked "AI-detected".

    The marker match is case-sensitive.
    """
    if violation.issued_by is None or violation.issued_by == 0:
        return True
    return bool(violation.context) and AI_DETECTED_MARKER in violation.context


def describe_standing(standing: AccountStanding) -> str:
    """Return "<label>: <description>" for a standing."""
    return f"{STANDING_LABELS[standing]}: {STANDING_DESCRIPTIONS[standing]}"


class AccountStandingCalculator:
    """Standing computations bound to a time source."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self.clock = clock

    def is_expired(self, violation: Violation) -> bool:
        return is_expired(violation, self.clock())

    def is_recent(self, violation: Violation) -> bool:
        return is_recent(violation, self.clock())

    def active(self, violations: Iterable[Violation]) -> List[Violation]:
        now = self.clock()
        return [v for v in violations if not is_expired(v, now)]

    def calculate_severity_score(self, violations: Iterable[Violation]) -> float:
        return severity_score(violations, self.clock())

    def calculate_account_standing(self, violations: Iterable[Violation]) -> AccountStanding:
        """Classify the user from their non-expired violations."""
        active = self.active(violations)
        if not active:
            return AccountStanding.ALL_GOOD
        return standing_for_score(self.calculate_severity_score(active))

    def build_standing_data(self, violations: Sequence[Violation]) -> AccountStandingData:
        """Aggregate all of a user's violations into an :class:`AccountStandingData`.

        Restrictions are the union of the active violations' restrictions in
        first-seen order. ``last_violation`` is the newest issue time over all
        violations; ``next_expiration`` the soonest ``expires_at`` among active ones.
        """
        active = self.active(violations)

        restrictions: List[FeatureRestriction] = []
        for violation in active:
            for restriction in violation.restrictions:
                if restriction not in restrictions:
                    restrictions.append(restriction)

        last_violation: Optional[datetime] = max(
            (ensure_utc(v.issued_at) for v in violations), default=None
        )
        next_expiration: Optional[datetime] = min(
            (ensure_utc(v.expires_at) for v in active if v.expires_at is not None), default=None
        )

        return AccountStandingData(
            standing=self.calculate_account_standing(active),
            active_violations=len(active),
            total_violations=len(violations),
            restrictions=restrictions,
            severity_score=self.calculate_severity_score(active),
            last_violation=last_violation,
            next_expiration=next_expiration,
        )

    @staticmethod
    def describe(data: AccountStandingData) -> str:
        """Multi-line, human-readable summary of a standing."""
        lines = [
            f"**Standing:** {describe_standing(data.standing)}",
            f"**Active violations:** {data.active_violations}/{data.total_violations} total",
            f"**Severity score:** {data.severity_score:g}",
        ]
        if data.restrictions:
            lines.append("**Restrictions:** " + ", ".join(RESTRICTION_LABELS[r] for r in data.restrictions))
        else:
            lines.append("**Restrictions:** none")
        if data.next_expiration is not None:
            lines.append(f"**Next expiration:** {data.next_expiration:%Y-%m-%d %H:%M} UTC")
        return "\n".join(lines)
