"""
Discord enforcement of freshly issued violations.

Feature restrictions live on the stored violation and are checked by whatever
reads the store. The only thing pushed to Discord directly is the platform
timeout that some violation types and severities carry.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import discord

from warncord.datatypes.violation_datatypes import Violation
from warncord.util.discord_utils import safe_timeout_member
from warncord.util.logger import get_logger

logger = get_logger("restriction_applier")


def build_timeout_reason(violation: Violation) -> str:
    return f"Warncord: {violation.type.value} violation ({violation.severity.value}): {violation.reason}"


class DiscordRestrictionApplier:
    """Applies platform timeouts to the author of the flagged message."""

    async def apply(
        self,
        violation: Violation,
        timeout: Optional[timedelta],
        message: Optional[discord.Message],
    ) -> None:
        if violation.restrictions:
            logger.info(
                "[RESTRICTIONS] Violation %s carries %s",
                violation.id, ", ".join(restriction.value for restriction in violation.restrictions),
            )

        if timeout is None:
            return
        if message is None or not isinstance(message.author, discord.Member):
            logger.warning("[RESTRICTIONS] No guild member to time out for violation %s", violation.id)
            return

        if await safe_timeout_member(message.author, timeout, build_timeout_reason(violation)):
            logger.info(
                "[RESTRICTIONS] Timed out %s for %s (violation %s)",
                message.author.id, timeout, violation.id,
            )
