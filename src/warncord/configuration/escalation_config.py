"""
Immutable configuration of the auto-punishment system.

An ``EscalationConfig`` is built once (from YAML, or directly in tests) and
passed to the orchestrator; nothing reads it from global state at evaluation
time.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, FrozenSet, Mapping

from warncord.datatypes.violation_datatypes import ViolationSeverity

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def _parse_flag(name: str, value: Any) -> bool:
    """Read a boolean setting, accepting quoted YAML booleans like "false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True, slots=True)
class EscalationConfig:
    """Auto-punishment settings.

    Attributes:
        repeat_offense_window_days: Lookback window for counting repeat
            offenses in the same rule section.
        max_auto_offenses_before_review: Offense count at which a case is
            routed to a human moderator.
        ai_first_offense_max_severity: Highest severity an automated first
            offense may receive (severe rules excepted).
        enabled: Global kill switch.
        dry_run: Compute and log decisions without issuing violations,
            deleting messages or applying restrictions.
        delete_message_for_high_severity: Delete the flagged message for
            HIGH and CRITICAL severities.
        excluded_channel_ids: Channels the system ignores (e.g. bot testing).
    """

    repeat_offense_window_days: float = 1
    max_auto_offenses_before_review: int = 3
    ai_first_offense_max_severity: ViolationSeverity = ViolationSeverity.LOW
    enabled: bool = True
    dry_run: bool = True
    delete_message_for_high_severity: bool = True
    excluded_channel_ids: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.repeat_offense_window_days < 0:
            raise ValueError("repeat_offense_window_days must not be negative")
        if self.max_auto_offenses_before_review < 1:
            raise ValueError("max_auto_offenses_before_review must be at least 1")
        if not isinstance(self.ai_first_offense_max_severity, ViolationSeverity):
            object.__setattr__(
                self,
                "ai_first_offense_max_severity",
                ViolationSeverity(str(self.ai_first_offense_max_severity).upper()),
            )
        object.__setattr__(
            self,
            "excluded_channel_ids",
            frozenset(int(channel_id) for channel_id in self.excluded_channel_ids),
        )

    def is_channel_excluded(self, channel_id: int) -> bool:
        return int(channel_id) in self.excluded_channel_ids

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "EscalationConfig":
        """Build a config from a mapping such as the ``escalation`` YAML section.

        Unknown keys are ignored and missing keys take their defaults.

        Raises:
            ValueError: If a value cannot be converted or is out of range.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {key: value for key, value in data.items() if key in known}

        try:
            if "repeat_offense_window_days" in kwargs:
                kwargs["repeat_offense_window_days"] = float(kwargs["repeat_offense_window_days"])
            if "max_auto_offenses_before_review" in kwargs:
                kwargs["max_auto_offenses_before_review"] = int(kwargs["max_auto_offenses_before_review"])
            for flag in ("enabled", "dry_run", "delete_message_for_high_severity"):
                if flag in kwargs:
                    kwargs[flag] = _parse_flag(flag, kwargs[flag])
            if "excluded_channel_ids" in kwargs:
                kwargs["excluded_channel_ids"] = frozenset(kwargs["excluded_channel_ids"] or ())
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid escalation configuration: {exc}") from exc
