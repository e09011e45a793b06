"""
Persistent storage for violations.

Timestamps are stored as REAL unix seconds (UTC). Reads always return fresh
immutable ``Violation`` objects built from the row.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Optional

import aiosqlite

from warncord.datatypes.violation_datatypes import (
    FeatureRestriction,
    NewViolation,
    ReviewOutcome,
    Violation,
    ViolationSeverity,
    ViolationType,
)
from warncord.util.clock import ensure_utc
from warncord.util.logger import get_logger

logger = get_logger("violation_repo")

_COLUMNS = (
    "id, user_id, guild_id, type, severity, policy_violated, reason, content_snapshot, context, "
    "restrictions, issued_by, issued_at, expires_at, expired_at, review_requested, reviewed_by, "
    "reviewed_at, review_outcome, review_notes"
)


def to_timestamp(value: Optional[datetime]) -> Optional[float]:
    if value is None:
        return None
    return ensure_utc(value).timestamp()


def from_timestamp(value: Optional[float]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def row_to_violation(row) -> Violation:
    """Build a ``Violation`` from a row selected with ``_COLUMNS``."""
    restrictions = tuple(FeatureRestriction(name) for name in json.loads(row["restrictions"] or "[]"))
    outcome = row["review_outcome"]
    return Violation(
        id=row["id"],
        user_id=row["user_id"],
        guild_id=row["guild_id"],
        type=ViolationType(row["type"]),
        severity=ViolationSeverity(row["severity"]),
        policy_violated=row["policy_violated"],
        reason=row["reason"],
        issued_at=from_timestamp(row["issued_at"]),
        content_snapshot=row["content_snapshot"],
        context=row["context"],
        restrictions=restrictions,
        issued_by=row["issued_by"],
        expires_at=from_timestamp(row["expires_at"]),
        expired_at=from_timestamp(row["expired_at"]),
        review_requested=bool(row["review_requested"]),
        reviewed_by=row["reviewed_by"],
        reviewed_at=from_timestamp(row["reviewed_at"]),
        review_outcome=ReviewOutcome(outcome) if outcome else None,
        review_notes=row["review_notes"],
    )


class ViolationRepo:
    """Low-level CRUD for the ``violations`` table."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def insert(conn: aiosqlite.Connection, violation: NewViolation, issued_at: datetime) -> int:
        """Insert a violation and return its new id."""
        cursor = await conn.execute(
            """
            INSERT INTO violations (
                user_id, guild_id, type, severity, policy_violated, reason,
                content_snapshot, context, restrictions, issued_by, issued_at, expires_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                violation.user_id,
                violation.guild_id,
                violation.type.value,
                violation.severity.value,
                violation.policy_violated,
                violation.reason,
                violation.content_snapshot,
                violation.context,
                json.dumps([restriction.value for restriction in violation.restrictions]),
                violation.issued_by,
                to_timestamp(issued_at),
                to_timestamp(violation.expires_at),
            ),
        )
        return cursor.lastrowid

    @staticmethod
    async def mark_expired(conn: aiosqlite.Connection, violation_id: int, expired_at: datetime) -> bool:
        """Set ``expired_at`` on a violation that is not already expired."""
        cursor = await conn.execute(
            "UPDATE violations SET expired_at = ? WHERE id = ? AND expired_at IS NULL",
            (to_timestamp(expired_at), violation_id),
        )
        return cursor.rowcount > 0

    @staticmethod
    async def mark_review_requested(conn: aiosqlite.Connection, violation_id: int) -> bool:
        cursor = await conn.execute(
            "UPDATE violations SET review_requested = 1 WHERE id = ?",
            (violation_id,),
        )
        return cursor.rowcount > 0

    @staticmethod
    async def record_review(
        conn: aiosqlite.Connection,
        violation_id: int,
        reviewer_id: int,
        outcome: ReviewOutcome,
        notes: Optional[str],
        reviewed_at: datetime,
    ) -> bool:
        cursor = await conn.execute(
            """
            UPDATE violations
            SET reviewed_by = ?, reviewed_at = ?, review_outcome = ?, review_notes = ?
            WHERE id = ?
            """,
            (reviewer_id, to_timestamp(reviewed_at), outcome.value, notes, violation_id),
        )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get(conn: aiosqlite.Connection, violation_id: int) -> Optional[Violation]:
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM violations WHERE id = ?",
            (violation_id,),
        ) as cursor:
            row = await cursor.fetchone()
        return row_to_violation(row) if row else None

    @staticmethod
    async def list_for_user(
        conn: aiosqlite.Connection,
        user_id: int,
        guild_id: int,
        active_at: Optional[datetime] = None,
        since: Optional[datetime] = None,
    ) -> List[Violation]:
        """Return a user's violations in one guild, newest first.

        With ``active_at`` only violations not expired at that instant are
        returned. With ``since`` only violations issued at or after it.
        """
        query = f"SELECT {_COLUMNS} FROM violations WHERE user_id = ? AND guild_id = ?"
        params: list = [user_id, guild_id]

        if active_at is not None:
            query += " AND expired_at IS NULL AND (expires_at IS NULL OR expires_at >= ?)"
            params.append(to_timestamp(active_at))
        if since is not None:
            query += " AND issued_at >= ?"
            params.append(to_timestamp(since))

        query += " ORDER BY issued_at DESC, id DESC"

        async with conn.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [row_to_violation(row) for row in rows]
