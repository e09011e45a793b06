"""
Offense count to severity conversion.

Repetition alone escalates a user to HIGH at most. CRITICAL is only reached
through explicit paths (a moderator, or the review process), never through
the escalation matrix.
"""

from __future__ import annotations

import math
from typing import Any

from warncord.datatypes.violation_datatypes import ViolationSeverity
from warncord.escalation.rule_catalog import ESCALATION_MATRIX
from warncord.util.logger import get_logger

logger = get_logger("severity_calculator")


def sanitize_offense_count(offense_count: Any) -> int:
    """Coerce an offense count to a non-negative int.

    Non-numeric values, NaN and negatives become 0; fractions are floored;
    +inf saturates at the last matrix slot.
    """
    if isinstance(offense_count, bool) or not isinstance(offense_count, (int, float)):
        logger.warning("[SEVERITY] Invalid offense count %r, defaulting to 0", offense_count)
        return 0
    if isinstance(offense_count, float):
        if math.isnan(offense_count):
            logger.warning("[SEVERITY] Offense count is NaN, defaulting to 0")
            return 0
        if math.isinf(offense_count):
            return 0 if offense_count < 0 else len(ESCALATION_MATRIX) - 1
        offense_count = math.floor(offense_count)
    return max(int(offense_count), 0)


def calculate_severity(offense_count: Any, is_severe: bool) -> ViolationSeverity:
    """Return the severity for the given number of prior offenses.

    Severe rules are always HIGH regardless of the count. Otherwise the
    escalation matrix is indexed at ``min(count, 2)``: LOW, MEDIUM, HIGH.
    """
    count = sanitize_offense_count(offense_count)

    if is_severe:
        return ViolationSeverity.HIGH

    return ESCALATION_MATRIX[min(count, len(ESCALATION_MATRIX) - 1)]
