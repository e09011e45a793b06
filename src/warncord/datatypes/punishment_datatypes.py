"""
Inputs, intermediate decisions and results of the auto-punishment pipeline.

Key Features:
- `ModerationVerdict`: categorical output of the AI classifier.
- `MappedViolation`: rule ids of one verdict merged into a single decision.
- `PunishmentInput`: one flagged message handed to the orchestrator.
- `PunishmentResult`: what was (or, in dry-run, would have been) done.
- `DryRunLogEntry`: structured record logged by the dry-run path.
- `ViolationRepository`: interface of the violation store the orchestrator uses.
- `RestrictionApplier`: enforces a freshly issued violation on the platform.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Sequence

from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    NewViolation,
    RuleSection,
    Violation,
    ViolationSeverity,
    ViolationType,
)

if TYPE_CHECKING:
    import discord


@dataclass(frozen=True, slots=True)
class ModerationVerdict:
    """Classifier output for one message.

    Attributes:
        categories: Rule ids the classifier matched (e.g. ["101", "201"]).
        reason: Optional free-text explanation from the classifier.
        is_flagged: Whether the classifier flagged the message at all.
    """

    categories: Sequence[str]
    reason: Optional[str] = None
    is_flagged: bool = True


@dataclass(frozen=True, slots=True)
class MappedViolation:
    """A batch of rule ids resolved into one violation decision. Never persisted."""

    rule_ids: List[str]
    sections: List[RuleSection]
    primary_section: RuleSection
    violation_type: ViolationType
    is_severe: bool


@dataclass(slots=True)
class PunishmentInput:
    """A flagged message to evaluate.

    Attributes:
        user_id: Internal id of the author (identity resolution happens upstream).
        guild_id: Guild the message was posted in.
        channel_id: Channel the message was posted in.
        content: Message text.
        verdict: Classifier output for the message.
        author_tag: Display tag of the author, used in logs only.
        message: Originating discord message; deleted in live mode when required.
    """

    user_id: int
    guild_id: int
    channel_id: int
    content: str
    verdict: ModerationVerdict
    author_tag: str = ""
    message: Optional["discord.Message"] = None


@dataclass(slots=True)
class PunishmentResult:
    """Outcome of one orchestrator evaluation."""

    punished: bool = False
    flagged_for_review: bool = False
    violation: Optional[Violation] = None
    offense_count: int = 0
    severity: Optional[ViolationSeverity] = None
    message_deleted: bool = False
    dry_run: bool = False
    error: Optional[str] = None


@dataclass(slots=True)
class DryRunLogEntry:
    """Everything the dry-run path would have done for one message."""

    timestamp: datetime
    user_id: int
    user_tag: str
    guild_id: int
    channel_id: int
    message_content: str
    ai_categories: List[str]
    ai_reason: Optional[str]
    mapped_violation_type: ViolationType
    mapped_rule_ids: List[str]
    is_severe: bool
    offense_count: int
    calculated_severity: ViolationSeverity
    would_flag_for_review: bool
    would_delete_message: bool
    restrictions: List[FeatureRestriction] = field(default_factory=list)
    reason: str = ""
    expires_at: Optional[datetime] = None
    platform_timeout: Optional[timedelta] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable mapping of the entry."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["expires_at"] = self.expires_at.isoformat() if self.expires_at else None
        data["platform_timeout"] = self.platform_timeout.total_seconds() if self.platform_timeout else None
        data["mapped_violation_type"] = self.mapped_violation_type.value
        data["calculated_severity"] = self.calculated_severity.value
        data["restrictions"] = [restriction.value for restriction in self.restrictions]
        return data


class ViolationRepository(Protocol):
    """Violation store as seen by the orchestrator.

    ``list_active_in_section`` followed by ``create`` is not atomic: two
    messages from the same user evaluated concurrently can both observe the
    same offense count.
    """

    async def list(self, user_id: int, guild_id: int, include_expired: bool = False) -> List[Violation]:
        ...

    async def list_active_in_section(
        self,
        user_id: int,
        guild_id: int,
        section: RuleSection,
        since: datetime,
    ) -> List[Violation]:
        ...

    async def create(self, violation: NewViolation) -> Violation:
        ...


class RestrictionApplier(Protocol):
    """Enforces a violation that was just written to the store.

    Called in live mode only, after the violation exists. ``timeout`` is the
    platform timeout that accompanies the violation, or None. ``message`` is
    the flagged message when one is available, so the author can be resolved.
    Implementations may raise; the orchestrator logs and carries on.
    """

    async def apply(
        self,
        violation: Violation,
        timeout: Optional[timedelta],
        message: Optional["discord.Message"],
    ) -> None:
        ...
