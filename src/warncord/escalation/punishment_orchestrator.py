"""
Auto-punishment orchestration.

Entry point for messages flagged by the AI classifier. The orchestrator maps
the reported rule ids to a violation, counts the user's recent offenses in the
same rule section, decides severity, restrictions and whether a human has to
look at the case, and then either:

- dry-run: logs the full decision and reports what would have happened, or
- live: creates the violation in the store, hands it to the restriction
  applier (if one is configured) and deletes the message when the severity
  calls for it.

Both modes share every step up to persistence, so a dry-run is a faithful
preview of live behaviour.

The offense count read and the violation write are two separate store calls.
Two messages from the same user processed at the same time may both see the
same count and escalate one step less than they would sequentially.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from warncord.configuration.escalation_config import EscalationConfig
from warncord.datatypes.punishment_datatypes import (
    DryRunLogEntry,
    MappedViolation,
    PunishmentInput,
    PunishmentResult,
    RestrictionApplier,
    ViolationRepository,
)
from warncord.datatypes.violation_datatypes import NewViolation, Violation, ViolationSeverity
from warncord.escalation import expiration_policy
from warncord.escalation.escalation_policy import EscalationPolicy
from warncord.escalation.restriction_resolver import RestrictionResolver, restriction_resolver
from warncord.escalation.section_mapper import SectionMapper, section_mapper
from warncord.escalation.severity_calculator import calculate_severity
from warncord.util.clock import Clock, utc_now
from warncord.util.discord_utils import safe_delete_message
from warncord.util.logger import get_logger

logger = get_logger("punishment_orchestrator")

SYSTEM_ISSUER_ID = 0
CONTENT_SNAPSHOT_LIMIT = 1000
DRY_RUN_EXCERPT_LIMIT = 500

MAPPING_ERROR = "could not map categories"


def build_violation_reason(ai_reason: Optional[str], rule_ids: Sequence[str]) -> str:
    """Reason stored on an AI-issued violation.

    Prefers the classifier's own explanation, then the list of rules.
    """
    if ai_reason and ai_reason.strip():
        return f"AI Detection: {ai_reason}"
    if rule_ids:
        return f"AI Detection: violation of rules {', '.join(rule_ids)}"
    return "AI Detection: rule violation"


def build_violation_context(channel_id: int, offense_count: int) -> str:
    return f"AI-detected | Channel: {channel_id} | Offense #{offense_count + 1}"


class PunishmentOrchestrator:
    """Evaluates flagged messages against a user's violation history."""

    def __init__(
        self,
        repository: ViolationRepository,
        config: EscalationConfig,
        clock: Clock = utc_now,
        mapper: SectionMapper = section_mapper,
        resolver: RestrictionResolver = restriction_resolver,
        applier: Optional[RestrictionApplier] = None,
    ) -> None:
        self.repository = repository
        self.config = config
        self.clock = clock
        self.mapper = mapper
        self.resolver = resolver
        self.applier = applier
        self.policy = EscalationPolicy(config)

    # --------------------------
    # Store reads
    # --------------------------
    async def count_recent_offenses(self, user_id: int, guild_id: int, mapped: MappedViolation) -> int:
        """Active violations in the primary section issued within the offense window.

        A failing store is treated as a clean history.
        """
        since = self.clock() - timedelta(days=self.config.repeat_offense_window_days)
        try:
            violations = await self.repository.list_active_in_section(
                user_id, guild_id, mapped.primary_section, since
            )
        except Exception as exc:
            logger.error(
                "[AUTO PUNISHMENT] Could not count offenses for user %s in guild %s, assuming 0: %s",
                user_id, guild_id, exc,
            )
            return 0
        return len(violations)

    async def _is_repeat_offense(self, user_id: int, guild_id: int, mapped: MappedViolation, now: datetime) -> bool:
        try:
            history = await self.repository.list(user_id, guild_id, include_expired=False)
        except Exception as exc:
            logger.warning(
                "[AUTO PUNISHMENT] Could not load history for user %s, using first-offense duration: %s",
                user_id, exc,
            )
            return False
        return expiration_policy.is_repeat_offense(history, mapped.violation_type, now)

    # --------------------------
    # Evaluation
    # --------------------------
    async def process(self, data: PunishmentInput) -> PunishmentResult:
        """Evaluate one flagged message and return what was (or would be) done."""
        result = PunishmentResult(dry_run=self.config.dry_run)

        if not self.config.enabled:
            return result
        if self.config.is_channel_excluded(data.channel_id):
            logger.debug("[AUTO PUNISHMENT] Channel %s is excluded, skipping", data.channel_id)
            return result
        if not data.verdict.is_flagged:
            return result

        mapped = self.mapper.map_batch(list(data.verdict.categories))
        if mapped is None:
            logger.warning("[AUTO PUNISHMENT] Could not map categories %s", list(data.verdict.categories))
            result.error = MAPPING_ERROR
            return result

        offense_count = await self.count_recent_offenses(data.user_id, data.guild_id, mapped)
        result.offense_count = offense_count

        severity = calculate_severity(offense_count, mapped.is_severe)
        severity = self.policy.apply_first_offense_cap(severity, offense_count, mapped.is_severe)

        if self.policy.should_flag_for_manual_review(offense_count, severity):
            result.flagged_for_review = True
            severity = self.policy.cap_for_review(severity)
        result.severity = severity

        now = self.clock()
        repeat = await self._is_repeat_offense(data.user_id, data.guild_id, mapped, now)
        expires_at = expiration_policy.expiration_for(mapped.violation_type, severity, repeat, now)
        timeout = expiration_policy.platform_timeout_for(mapped.violation_type, severity, repeat)
        restrictions = expiration_policy.finalize_restrictions(
            mapped.violation_type,
            severity,
            self.resolver.get_restrictions(mapped.violation_type, severity),
        )

        reason = build_violation_reason(data.verdict.reason, mapped.rule_ids)
        would_delete = self.config.delete_message_for_high_severity and severity >= ViolationSeverity.HIGH
        author = data.author_tag or str(data.user_id)

        if self.config.dry_run:
            entry = DryRunLogEntry(
                timestamp=now,
                user_id=data.user_id,
                user_tag=author,
                guild_id=data.guild_id,
                channel_id=data.channel_id,
                message_content=data.content[:DRY_RUN_EXCERPT_LIMIT],
                ai_categories=list(data.verdict.categories),
                ai_reason=data.verdict.reason,
                mapped_violation_type=mapped.violation_type,
                mapped_rule_ids=list(mapped.rule_ids),
                is_severe=mapped.is_severe,
                offense_count=offense_count,
                calculated_severity=severity,
                would_flag_for_review=result.flagged_for_review,
                would_delete_message=would_delete,
                restrictions=restrictions,
                reason=reason,
                expires_at=expires_at,
                platform_timeout=timeout,
            )
            logger.info(
                "[AUTO PUNISHMENT] [DRY-RUN] Would punish %s: %s (%s) - Offense #%d",
                author, mapped.violation_type.value, severity.value, offense_count + 1,
            )
            logger.info("[AUTO PUNISHMENT] [DRY-RUN] Full details: %s", json.dumps(entry.to_dict(), indent=2))

            result.punished = True
            result.message_deleted = would_delete
            return result

        try:
            violation = await self.repository.create(
                NewViolation(
                    user_id=data.user_id,
                    guild_id=data.guild_id,
                    type=mapped.violation_type,
                    severity=severity,
                    policy_violated=self.mapper.format_policy(mapped.rule_ids),
                    reason=reason,
                    content_snapshot=data.content[:CONTENT_SNAPSHOT_LIMIT],
                    context=build_violation_context(data.channel_id, offense_count),
                    restrictions=tuple(restrictions),
                    issued_by=SYSTEM_ISSUER_ID,
                    expires_at=expires_at,
                )
            )
        except Exception as exc:
            logger.error("[AUTO PUNISHMENT] Failed to issue violation to %s: %s", author, exc)
            result.error = f"failed to issue violation: {exc}"
            return result

        result.punished = True
        result.violation = violation
        logger.info(
            "[AUTO PUNISHMENT] Issued violation %s to %s: %s (%s) - Offense #%d",
            violation.id, author, mapped.violation_type.value, severity.value, offense_count + 1,
        )

        await self._apply_restrictions(violation, timeout, data)

        if would_delete and data.message is not None:
            result.message_deleted = await safe_delete_message(data.message)
            if result.message_deleted:
                logger.info("[AUTO PUNISHMENT] Deleted flagged message from %s", author)

        return result

    async def _apply_restrictions(
        self, violation: Violation, timeout: Optional[timedelta], data: PunishmentInput
    ) -> None:
        """Best-effort enforcement; the violation is already stored either way."""
        if self.applier is None:
            return
        try:
            await self.applier.apply(violation, timeout, data.message)
        except Exception as exc:
            logger.error("[AUTO PUNISHMENT] Failed to apply restrictions for violation %s: %s", violation.id, exc)


def format_punishment_for_alert(result: PunishmentResult) -> str:
    """Moderator-facing summary of a result.

    Dry-run results are phrased as "would be", live results as "was".
    """
    if not result.punished and not result.flagged_for_review:
        return "No automatic punishment was applied."

    lines: List[str] = []

    if result.dry_run:
        lines.append("🧪 **[DRY-RUN MODE]** No punishment was actually applied")
        lines.append("---")

    if result.flagged_for_review:
        lines.append("⚠️ Would require manual review" if result.dry_run else "**Requires manual review**")

    if result.punished and result.severity is not None:
        label = "Proposed penalty" if result.dry_run else "Automatic penalty"
        lines.append(f"**{label}:** {result.severity.value}")

    lines.append(f"**Violations in this section:** {result.offense_count + 1}")

    if result.message_deleted:
        lines.append("📝 Message would be deleted" if result.dry_run else "**Message was deleted**")

    if result.violation is not None:
        lines.append(f"**Violation ID:** {result.violation.id}")
    elif result.dry_run and result.punished:
        lines.append("📋 Violation would be created (dry-run)")

    return "\n".join(lines)
