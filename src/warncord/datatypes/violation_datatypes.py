"""
Violation types and records for the warning system.

This module defines the closed enumerations the escalation engine reasons
about and the immutable records it reads from and writes to the violation store.

Key Features:
- `ViolationType`, `ViolationSeverity`, `RuleSection`, `FeatureRestriction`,
  `AccountStanding`, `ReviewOutcome`: closed enums; severity is ordered.
- `Violation`: a stored violation, immutable once created.
- `NewViolation`: the caller-supplied fields of a violation before the store
  assigns its id and issue time.
- `AccountStandingData`: aggregate view of a user's active violations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional, Tuple


class ViolationType(str, Enum):
    """Categorical nature of an offense."""

    SPAM = "SPAM"
    TOXICITY = "TOXICITY"
    NSFW = "NSFW"
    PRIVACY = "PRIVACY"
    IMPERSONATION = "IMPERSONATION"
    ILLEGAL = "ILLEGAL"
    ADVERTISING = "ADVERTISING"
    SELF_HARM = "SELF_HARM"
    EVASION = "EVASION"
    OTHER = "OTHER"

    def __str__(self) -> str:
        return self.value


class ViolationSeverity(str, Enum):
    """Punishment weight of a violation, ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = (
    ViolationSeverity.LOW,
    ViolationSeverity.MEDIUM,
    ViolationSeverity.HIGH,
    ViolationSeverity.CRITICAL,
)


class RuleSection(IntEnum):
    """Coarse policy category; each rule id belongs to the band containing it."""

    BASIC_BEHAVIOR = 100
    TEXT_VOICE = 200
    SPAM_MENTIONS = 300
    CONTENT_CHANNELS = 400
    ADVERTISING = 500
    IDENTITY_PRIVACY = 600
    LANGUAGE = 700
    TECHNICAL = 800
    AGE_LAW = 900
    MODERATION = 1000


class FeatureRestriction(str, Enum):
    """A platform capability that can be revoked from a user."""

    MESSAGE_EMBED = "MESSAGE_EMBED"
    MESSAGE_ATTACH = "MESSAGE_ATTACH"
    MESSAGE_LINK = "MESSAGE_LINK"
    VOICE_SPEAK = "VOICE_SPEAK"
    VOICE_VIDEO = "VOICE_VIDEO"
    VOICE_STREAM = "VOICE_STREAM"
    REACTION_ADD = "REACTION_ADD"
    THREAD_CREATE = "THREAD_CREATE"
    NICKNAME_CHANGE = "NICKNAME_CHANGE"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"  # legacy

    def __str__(self) -> str:
        return self.value


class AccountStanding(str, Enum):
    """Aggregate classification of a user's current restriction level."""

    ALL_GOOD = "ALL_GOOD"
    LIMITED = "LIMITED"
    VERY_LIMITED = "VERY_LIMITED"
    AT_RISK = "AT_RISK"
    SUSPENDED = "SUSPENDED"

    def __str__(self) -> str:
        return self.value


class ReviewOutcome(str, Enum):
    """Result of a human review of a violation."""

    VIOLATION_REMOVED = "VIOLATION_REMOVED"
    VIOLATION_REDUCED = "VIOLATION_REDUCED"
    VIOLATION_UPHELD = "VIOLATION_UPHELD"
    PARTIAL_ADJUSTMENT = "PARTIAL_ADJUSTMENT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class NewViolation:
    """Fields supplied when issuing a violation.

    Attributes:
        user_id: Internal id of the user the violation is issued to.
        guild_id: Guild the violation belongs to.
        type: Violation type.
        severity: Violation severity.
        policy_violated: Comma-joined rule ids, or None for manual violations.
        reason: Human readable reason.
        content_snapshot: Excerpt of the offending content.
        context: Free-text context; automated violations carry "AI-detected".
        restrictions: Feature restrictions applied with the violation.
        issued_by: Issuing moderator id; 0 or None for the automated system.
        expires_at: When the violation passively expires, None for permanent.
    """

    user_id: int
    guild_id: int
    type: ViolationType
    severity: ViolationSeverity
    policy_violated: Optional[str]
    reason: str
    content_snapshot: Optional[str] = None
    context: Optional[str] = None
    restrictions: Tuple[FeatureRestriction, ...] = ()
    issued_by: Optional[int] = 0
    expires_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Violation:
    """A stored violation.

    Only the review process mutates a stored violation (review fields and
    ``expired_at``); the store returns a new ``Violation`` for every read.
    """

    id: int
    user_id: int
    guild_id: int
    type: ViolationType
    severity: ViolationSeverity
    policy_violated: Optional[str]
    reason: str
    issued_at: datetime
    content_snapshot: Optional[str] = None
    context: Optional[str] = None
    restrictions: Tuple[FeatureRestriction, ...] = ()
    issued_by: Optional[int] = 0
    expires_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    review_requested: bool = False
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_outcome: Optional[ReviewOutcome] = None
    review_notes: Optional[str] = None

    @property
    def rule_ids(self) -> list[str]:
        """Rule ids recorded in ``policy_violated`` ("101,102" -> ["101", "102"])."""
        if not self.policy_violated:
            return []
        return [rule.strip() for rule in self.policy_violated.split(",") if rule.strip()]


@dataclass(slots=True)
class AccountStandingData:
    """Aggregate standing of one user in one guild."""

    standing: AccountStanding
    active_violations: int
    total_violations: int
    restrictions: list[FeatureRestriction] = field(default_factory=list)
    severity_score: float = 0.0
    last_violation: Optional[datetime] = None
    next_expiration: Optional[datetime] = None
