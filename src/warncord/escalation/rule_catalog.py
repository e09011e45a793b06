"""
Static policy tables for the auto-punishment system.

Rule ids are 3-4 digit strings grouped into 100-wide sections:

- 100s: BASIC_BEHAVIOR
- 200s: TEXT_VOICE
- 300s: SPAM_MENTIONS
- 400s: CONTENT_CHANNELS
- 500s: ADVERTISING
- 600s: IDENTITY_PRIVACY
- 700s: LANGUAGE
- 800s: TECHNICAL
- 900s: AGE_LAW
- 1000s: MODERATION

Every table keyed by an enum must cover all of its members; ``_check_exhaustive``
enforces that when the module is imported.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple, Type

from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    RuleSection,
    ViolationSeverity,
    ViolationType,
)


SECTION_TO_VIOLATION_TYPE: Dict[RuleSection, ViolationType] = {
    RuleSection.BASIC_BEHAVIOR: ViolationType.TOXICITY,
    RuleSection.TEXT_VOICE: ViolationType.NSFW,
    RuleSection.SPAM_MENTIONS: ViolationType.SPAM,
    RuleSection.CONTENT_CHANNELS: ViolationType.OTHER,
    RuleSection.ADVERTISING: ViolationType.ADVERTISING,
    RuleSection.IDENTITY_PRIVACY: ViolationType.PRIVACY,
    RuleSection.LANGUAGE: ViolationType.OTHER,
    RuleSection.TECHNICAL: ViolationType.EVASION,
    RuleSection.AGE_LAW: ViolationType.ILLEGAL,
    RuleSection.MODERATION: ViolationType.EVASION,
}

# Specific rules whose type differs from their section default
RULE_TO_VIOLATION_TYPE: Dict[str, ViolationType] = {
    "103": ViolationType.SELF_HARM,
    "104": ViolationType.ILLEGAL,
    "601": ViolationType.IMPERSONATION,
    "602": ViolationType.PRIVACY,
    "802": ViolationType.EVASION,
}

# Always HIGH, never dampened on a first offense
SEVERE_RULES: FrozenSet[str] = frozenset({
    "103",  # self-harm content
    "104",  # illegal content, malware, phishing
    "801",  # self-bots and raids
    "802",  # alt accounts for ban evasion
})

# offense count in section/window -> severity
ESCALATION_MATRIX: Tuple[ViolationSeverity, ...] = (
    ViolationSeverity.LOW,
    ViolationSeverity.MEDIUM,
    ViolationSeverity.HIGH,
)

# Most dangerous first
VIOLATION_TYPE_PRIORITY: Tuple[ViolationType, ...] = (
    ViolationType.ILLEGAL,
    ViolationType.SELF_HARM,
    ViolationType.EVASION,
    ViolationType.PRIVACY,
    ViolationType.IMPERSONATION,
    ViolationType.NSFW,
    ViolationType.TOXICITY,
    ViolationType.ADVERTISING,
    ViolationType.SPAM,
    ViolationType.OTHER,
)

VIOLATION_TYPE_TO_RESTRICTIONS: Dict[ViolationType, Tuple[FeatureRestriction, ...]] = {
    ViolationType.SPAM: (FeatureRestriction.MESSAGE_EMBED,),
    ViolationType.TOXICITY: (FeatureRestriction.RATE_LIMIT,),
    ViolationType.NSFW: (FeatureRestriction.MESSAGE_ATTACH, FeatureRestriction.MESSAGE_LINK),
    ViolationType.PRIVACY: (FeatureRestriction.MESSAGE_LINK,),
    ViolationType.IMPERSONATION: (FeatureRestriction.NICKNAME_CHANGE,),
    ViolationType.ILLEGAL: (FeatureRestriction.MESSAGE_LINK, FeatureRestriction.MESSAGE_ATTACH),
    ViolationType.ADVERTISING: (FeatureRestriction.MESSAGE_LINK, FeatureRestriction.MESSAGE_EMBED),
    ViolationType.SELF_HARM: (FeatureRestriction.MESSAGE_ATTACH,),
    ViolationType.EVASION: (FeatureRestriction.RATE_LIMIT,),
    ViolationType.OTHER: (),
}

SEVERITY_SCORES: Dict[ViolationSeverity, int] = {
    ViolationSeverity.LOW: 10,
    ViolationSeverity.MEDIUM: 25,
    ViolationSeverity.HIGH: 50,
    ViolationSeverity.CRITICAL: 100,
}

DEFAULT_EXPIRATION_DAYS: Dict[ViolationSeverity, int] = {
    ViolationSeverity.LOW: 30,
    ViolationSeverity.MEDIUM: 60,
    ViolationSeverity.HIGH: 90,
    ViolationSeverity.CRITICAL: 180,
}


@dataclass(frozen=True, slots=True)
class PenaltyDuration:
    """How long a violation of one type and severity stays active.

    Attributes:
        first_offense: Days for a first offense of this type; 0 is permanent.
        repeat_offense: Days for a repeat offense of this type; 0 is permanent.
        use_platform_timeout: Also time the member out on the platform for
            the violation's duration.
    """

    first_offense: int
    repeat_offense: int
    use_platform_timeout: bool = False


def _durations(
    low: Tuple[int, int, bool],
    medium: Tuple[int, int, bool],
    high: Tuple[int, int, bool],
    critical: Tuple[int, int, bool],
) -> Dict[ViolationSeverity, PenaltyDuration]:
    return {
        ViolationSeverity.LOW: PenaltyDuration(*low),
        ViolationSeverity.MEDIUM: PenaltyDuration(*medium),
        ViolationSeverity.HIGH: PenaltyDuration(*high),
        ViolationSeverity.CRITICAL: PenaltyDuration(*critical),
    }


VIOLATION_TYPE_DURATIONS: Dict[ViolationType, Dict[ViolationSeverity, PenaltyDuration]] = {
    ViolationType.TOXICITY: _durations((3, 7, False), (7, 30, False), (7, 14, True), (28, 0, True)),
    ViolationType.SPAM: _durations((1, 3, False), (3, 14, False), (7, 30, False), (30, 90, False)),
    ViolationType.NSFW: _durations((7, 14, False), (14, 30, False), (30, 60, True), (90, 0, True)),
    ViolationType.PRIVACY: _durations((7, 14, False), (30, 60, False), (60, 90, True), (180, 0, True)),
    ViolationType.IMPERSONATION: _durations((14, 30, False), (30, 60, False), (60, 90, True), (0, 0, True)),
    ViolationType.ILLEGAL: _durations((30, 60, True), (60, 90, True), (90, 180, True), (0, 0, True)),
    ViolationType.ADVERTISING: _durations((3, 7, False), (7, 30, False), (30, 60, False), (60, 180, False)),
    ViolationType.SELF_HARM: _durations((1, 7, False), (7, 14, True), (14, 28, True), (28, 0, True)),
    ViolationType.EVASION: _durations((30, 60, True), (60, 90, True), (90, 180, True), (0, 0, True)),
    ViolationType.OTHER: _durations((7, 14, False), (14, 30, False), (30, 60, True), (90, 180, True)),
}


def _check_exhaustive(name: str, keys: Iterable[Enum], enum_type: Type[Enum]) -> None:
    missing = set(enum_type) - set(keys)
    if missing:
        raise RuntimeError(f"{name} is missing entries for {sorted(m.name for m in missing)}")


_check_exhaustive("SECTION_TO_VIOLATION_TYPE", SECTION_TO_VIOLATION_TYPE, RuleSection)
_check_exhaustive("VIOLATION_TYPE_PRIORITY", VIOLATION_TYPE_PRIORITY, ViolationType)
_check_exhaustive("VIOLATION_TYPE_TO_RESTRICTIONS", VIOLATION_TYPE_TO_RESTRICTIONS, ViolationType)
_check_exhaustive("SEVERITY_SCORES", SEVERITY_SCORES, ViolationSeverity)
_check_exhaustive("DEFAULT_EXPIRATION_DAYS", DEFAULT_EXPIRATION_DAYS, ViolationSeverity)
_check_exhaustive("VIOLATION_TYPE_DURATIONS", VIOLATION_TYPE_DURATIONS, ViolationType)
for _type, _table in VIOLATION_TYPE_DURATIONS.items():
    _check_exhaustive(f"VIOLATION_TYPE_DURATIONS[{_type.value}]", _table, ViolationSeverity)


class RuleCatalog:
    """Read-only access to the policy tables.

    The orchestrator and mapper go through this class rather than the module
    constants so a guild with different rule ids can be modelled by passing
    another catalog.
    """

    def __init__(
        self,
        section_types: Mapping[RuleSection, ViolationType] = SECTION_TO_VIOLATION_TYPE,
        rule_overrides: Mapping[str, ViolationType] = RULE_TO_VIOLATION_TYPE,
        severe_rules: Iterable[str] = SEVERE_RULES,
    ) -> None:
        self.section_types = dict(section_types)
        self.rule_overrides = dict(rule_overrides)
        self.severe_rules = frozenset(severe_rules)

    def section_default(self, section: RuleSection) -> ViolationType:
        return self.section_types.get(section, ViolationType.OTHER)

    def override_for(self, rule_id: str) -> ViolationType | None:
        return self.rule_overrides.get(rule_id)

    def is_severe(self, rule_id: str) -> bool:
        return rule_id in self.severe_rules

    @staticmethod
    def base_restrictions(violation_type: ViolationType) -> List[FeatureRestriction]:
        return list(VIOLATION_TYPE_TO_RESTRICTIONS.get(violation_type, ()))


default_catalog = RuleCatalog()
