"""
First-offense dampening and manual-review routing.
"""

from __future__ import annotations

from warncord.configuration.escalation_config import EscalationConfig
from warncord.datatypes.violation_datatypes import ViolationSeverity


class EscalationPolicy:
    """Applies the configured safety valves on top of the computed severity."""

    def __init__(self, config: EscalationConfig) -> None:
        self.config = config

    def apply_first_offense_cap(
        self,
        severity: ViolationSeverity,
        offense_count: int,
        is_severe: bool,
    ) -> ViolationSeverity:
        """Clamp HIGH/CRITICAL first offenses down to the configured maximum.

        Severe rules and repeat offenses pass through unchanged, as do LOW and
        MEDIUM severities.
        """
        if is_severe:
            return severity
        if offense_count != 0:
            return severity
        if severity in (ViolationSeverity.HIGH, ViolationSeverity.CRITICAL):
            return self.config.ai_first_offense_max_severity
        return severity

    def should_flag_for_manual_review(self, offense_count: int, severity: ViolationSeverity) -> bool:
        """True when the user hit the auto-offense limit or the severity is CRITICAL."""
        if offense_count >= self.config.max_auto_offenses_before_review:
            return True
        return severity == ViolationSeverity.CRITICAL

    @staticmethod
    def cap_for_review(severity: ViolationSeverity) -> ViolationSeverity:
        """Only a human may confirm a CRITICAL action; flagged cases persist at HIGH."""
        if severity == ViolationSeverity.CRITICAL:
            return ViolationSeverity.HIGH
        return severity
