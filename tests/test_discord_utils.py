"""Tests for Discord helpers."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from warncord.util.discord_utils import safe_delete_message, safe_timeout_member


@pytest.mark.asyncio
async def test_safe_delete_message_success():
    message = MagicMock()
    message.delete = AsyncMock()

    assert await safe_delete_message(message) is True
    message.delete.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        discord.NotFound(MagicMock(), "Not found"),
        discord.Forbidden(MagicMock(), "Forbidden"),
        discord.HTTPException(MagicMock(), "Server error"),
        RuntimeError("connection reset"),
    ],
)
async def test_safe_delete_message_failures_return_false(error):
    message = MagicMock()
    message.delete = AsyncMock(side_effect=error)

    assert await safe_delete_message(message) is False


@pytest.mark.asyncio
async def test_safe_timeout_member_success():
    member = MagicMock()
    member.timeout = AsyncMock()

    assert await safe_timeout_member(member, timedelta(days=7), "rude") is True
    until = member.timeout.await_args.args[0]
    assert until - discord.utils.utcnow() <= timedelta(days=7)
    assert member.timeout.await_args.kwargs == {"reason": "rude"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        discord.Forbidden(MagicMock(), "Forbidden"),
        discord.HTTPException(MagicMock(), "Server error"),
    ],
)
async def test_safe_timeout_member_failures_return_false(error):
    member = MagicMock()
    member.timeout = AsyncMock(side_effect=error)

    assert await safe_timeout_member(member, timedelta(days=1), "rude") is False
