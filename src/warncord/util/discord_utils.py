"""
Helpers for the Discord side effects of auto-punishment.
"""

from __future__ import annotations

from datetime import timedelta

import discord

from warncord.util.logger import get_logger

logger = get_logger("discord_utils")


async def safe_delete_message(message: discord.Message) -> bool:
    """Delete ``message``, returning True on success.

    Failures are logged and never raised: a message that is already gone or
    that the bot may not delete does not abort the caller.
    """
    try:
        await message.delete()
        return True
    except discord.NotFound:
        logger.warning("[DISCORD] Message %s was already deleted", getattr(message, "id", "?"))
    except discord.Forbidden:
        logger.warning("[DISCORD] No permission to delete message %s", getattr(message, "id", "?"))
    except Exception as exc:
        logger.error("[DISCORD] Error deleting message %s: %s", getattr(message, "id", "?"), exc)
    return False


async def safe_timeout_member(member: discord.Member, duration: timedelta, reason: str) -> bool:
    """Time ``member`` out for ``duration``, returning True on success.

    Failures are logged and never raised, like ``safe_delete_message``.
    """
    until = discord.utils.utcnow() + duration
    try:
        await member.timeout(until, reason=reason)
        return True
    except discord.Forbidden:
        logger.warning("[DISCORD] No permission to time out member %s", getattr(member, "id", "?"))
    except discord.HTTPException as exc:
        logger.error("[DISCORD] Failed to time out member %s: %s", getattr(member, "id", "?"), exc)
    return False
