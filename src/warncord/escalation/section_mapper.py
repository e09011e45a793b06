"""
Rule id parsing and batch mapping.

Turns the rule ids reported by the classifier into sections, violation
types and a single ``MappedViolation`` decision per message.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from warncord.datatypes.punishment_datatypes import MappedViolation
from warncord.datatypes.violation_datatypes import RuleSection, ViolationType
from warncord.escalation.rule_catalog import RuleCatalog, VIOLATION_TYPE_PRIORITY, default_catalog
from warncord.util.logger import get_logger

logger = get_logger("section_mapper")

RULE_ID_PATTERN = re.compile(r"[0-9]{3,4}")
_INTEGER_PATTERN = re.compile(r"[0-9]+")

MIN_RULE_NUMBER = 100
MAX_RULE_NUMBER = 1999


class SectionMapper:
    """Maps rule ids onto the rule catalog."""

    def __init__(self, catalog: RuleCatalog = default_catalog) -> None:
        self.catalog = catalog

    def extract_section(self, rule_id: str) -> Optional[RuleSection]:
        """Return the section containing ``rule_id``.

        Surrounding whitespace and leading zeros are accepted ("0101" is in
        section 100). Anything else that is not a base-10 integer in
        100-1999 yields None; 1000-1999 all belong to MODERATION.
        """
        if not isinstance(rule_id, str):
            return None
        text = rule_id.strip()
        if not _INTEGER_PATTERN.fullmatch(text):
            return None

        number = int(text, 10)
        if number < MIN_RULE_NUMBER or number > MAX_RULE_NUMBER:
            return None
        if number >= RuleSection.MODERATION:
            return RuleSection.MODERATION

        band = (number // 100) * 100
        try:
            return RuleSection(band)
        except ValueError:
            return None

    def violation_type_for_rule(self, rule_id: str) -> ViolationType:
        """Resolve a rule's type: override table, then section default, else OTHER."""
        override = self.catalog.override_for(rule_id)
        if override is not None:
            return override

        section = self.extract_section(rule_id)
        if section is not None:
            return self.catalog.section_default(section)

        return ViolationType.OTHER

    def is_severe_rule(self, rule_id: str) -> bool:
        return self.catalog.is_severe(rule_id)

    def extract_sections(self, categories: Iterable[str]) -> List[RuleSection]:
        """Return the distinct sections of the valid rule ids, in first-seen order."""
        sections: List[RuleSection] = []
        for category in categories:
            if not isinstance(category, str) or not RULE_ID_PATTERN.fullmatch(category):
                continue
            section = self.extract_section(category)
            if section is not None and section not in sections:
                sections.append(section)
        return sections

    def map_batch(self, categories: Sequence[str]) -> Optional[MappedViolation]:
        """Merge a batch of rule ids into one violation decision.

        The violation type is the highest-priority type among the individually
        resolved rule types, so the result does not depend on input order.
        Returns None when no valid rule id remains.
        """
        rule_ids = [c for c in categories if isinstance(c, str) and RULE_ID_PATTERN.fullmatch(c)]
        if not rule_ids:
            return None

        sections = self.extract_sections(rule_ids)
        if not sections:
            return None

        resolved_types = {self.violation_type_for_rule(rule_id) for rule_id in rule_ids}
        violation_type = next(
            (candidate for candidate in VIOLATION_TYPE_PRIORITY if candidate in resolved_types),
            ViolationType.OTHER,
        )

        mapped = MappedViolation(
            rule_ids=rule_ids,
            sections=sections,
            primary_section=sections[0],
            violation_type=violation_type,
            is_severe=any(self.is_severe_rule(rule_id) for rule_id in rule_ids),
        )
        logger.debug(
            "[SECTION MAPPER] %s -> %s (section %d, severe=%s)",
            rule_ids, mapped.violation_type.value, mapped.primary_section, mapped.is_severe,
        )
        return mapped

    @staticmethod
    def format_policy(rule_ids: Sequence[str]) -> str:
        """Join rule ids for storage in ``policy_violated``."""
        return ",".join(rule_ids)


section_mapper = SectionMapper()
