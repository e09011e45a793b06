"""
Violation type and severity to feature restrictions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from warncord.datatypes.violation_datatypes import FeatureRestriction, ViolationSeverity, ViolationType
from warncord.escalation.rule_catalog import RuleCatalog, default_catalog
from warncord.util.logger import get_logger

logger = get_logger("restriction_resolver")

E = TypeVar("E", bound=Enum)


def _coerce(enum_type: Type[E], value: Any) -> Optional[E]:
    """Return ``value`` as a member of ``enum_type``, or None when it is not one."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except (ValueError, TypeError):
        return None


class RestrictionResolver:
    """Derives the restrictions that accompany a violation."""

    def __init__(self, catalog: RuleCatalog = default_catalog) -> None:
        self.catalog = catalog

    def get_restrictions(self, violation_type: Any, severity: Any) -> List[FeatureRestriction]:
        """Return the restrictions for ``violation_type`` at ``severity``.

        LOW collapses to a single RATE_LIMIT when the type has any base
        restrictions at all. MEDIUM and above return the full base set, and
        HIGH/CRITICAL additionally guarantee one RATE_LIMIT. Unknown inputs
        yield an empty list.
        """
        resolved_type = _coerce(ViolationType, violation_type)
        if resolved_type is None:
            logger.warning("[RESTRICTIONS] Unknown violation type %r", violation_type)
            return []
        resolved_severity = _coerce(ViolationSeverity, severity)
        if resolved_severity is None:
            logger.warning("[RESTRICTIONS] Unknown severity %r", severity)
            return []

        base_restrictions = self.catalog.base_restrictions(resolved_type)

        if resolved_severity == ViolationSeverity.LOW:
            return [FeatureRestriction.RATE_LIMIT] if base_restrictions else []

        restrictions = list(base_restrictions)
        if resolved_severity >= ViolationSeverity.HIGH and FeatureRestriction.RATE_LIMIT not in restrictions:
            restrictions.append(FeatureRestriction.RATE_LIMIT)
        return restrictions


restriction_resolver = RestrictionResolver()
