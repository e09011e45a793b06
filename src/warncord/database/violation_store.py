"""
SQLite-backed violation store.

``ViolationStore`` coordinates the connection, schema and ``ViolationRepo``
and is what the auto-punishment orchestrator and the CLI talk to.

Lifecycle:
    1. ``await store.initialize()`` at program startup
    2. ``create`` / ``list`` / ``list_active_in_section`` / review operations
    3. ``await store.close()`` at program end
"""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from warncord.database.db_connection import ConnectionManager
from warncord.database.db_perf_mon import DatabasePerformanceMonitor
from warncord.database.db_schema import SchemaManager
from warncord.datatypes.violation_datatypes import (
    NewViolation,
    ReviewOutcome,
    RuleSection,
    Violation,
)
from warncord.escalation.section_mapper import SectionMapper, section_mapper
from warncord.repositories.violation_repo import ViolationRepo
from warncord.util.clock import Clock, utc_now
from warncord.util.logger import get_logger

logger = get_logger("violation_store")

DB_PATH = Path("./data/violations.db").resolve()


class ViolationStore:
    """Violation persistence for one database file."""

    def __init__(
        self,
        db_path: Path = DB_PATH,
        clock: Clock = utc_now,
        mapper: SectionMapper = section_mapper,
    ):
        self.db_path = Path(db_path)
        self.clock = clock
        self.mapper = mapper
        self.db_perf_mon = DatabasePerformanceMonitor()
        self._manager = ConnectionManager()

    async def initialize(self) -> bool:
        """
        Open the database and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._manager.is_open:
            logger.debug("[VIOLATION STORE] Already initialized, skipping")
            return True

        try:
            await self._manager.open(self.db_path)
            await SchemaManager.initialize_schema(self._manager.connection)
        except Exception as e:
            logger.error("[VIOLATION STORE] Initialization failed for %s: %s", self.db_path, e)
            await self._manager.close()
            return False

        logger.info("[VIOLATION STORE] Database initialized at %s", self.db_path)
        return True

    async def close(self) -> None:
        await self._manager.close()

    async def __aenter__(self) -> "ViolationStore":
        if not await self.initialize():
            raise RuntimeError(f"Could not open violation store at {self.db_path}")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, violation: NewViolation) -> Violation:
        """Persist a new violation, stamping it with the current time."""
        issued_at = self.clock()
        start = time.perf_counter()
        async with self._manager.transaction() as conn:
            violation_id = await ViolationRepo.insert(conn, violation, issued_at)
        self.db_perf_mon.track("create", time.perf_counter() - start)

        created = await self.get(violation_id)
        if created is None:
            raise RuntimeError(f"Violation {violation_id} vanished after insert")

        logger.debug(
            "[VIOLATION STORE] Created violation %s (%s/%s) for user %s in guild %s",
            created.id,
            created.type,
            created.severity,
            created.user_id,
            created.guild_id,
        )
        return created

    async def expire(self, violation_id: int, at: Optional[datetime] = None) -> bool:
        """Expire a violation immediately. Returns False if it was missing or already expired."""
        async with self._manager.transaction() as conn:
            return await ViolationRepo.mark_expired(conn, violation_id, at or self.clock())

    async def request_review(self, violation_id: int) -> bool:
        async with self._manager.transaction() as conn:
            return await ViolationRepo.mark_review_requested(conn, violation_id)

    async def record_review(
        self,
        violation_id: int,
        reviewer_id: int,
        outcome: ReviewOutcome,
        notes: Optional[str] = None,
    ) -> bool:
        """Record a moderator's review. A removed violation is expired as well."""
        now = self.clock()
        async with self._manager.transaction() as conn:
            updated = await ViolationRepo.record_review(conn, violation_id, reviewer_id, outcome, notes, now)
            if updated and outcome == ReviewOutcome.VIOLATION_REMOVED:
                await ViolationRepo.mark_expired(conn, violation_id, now)
        return updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, violation_id: int) -> Optional[Violation]:
        async with self._manager.read() as conn:
            return await ViolationRepo.get(conn, violation_id)

    async def list(self, user_id: int, guild_id: int, include_expired: bool = False) -> List[Violation]:
        """Return a user's violations in a guild, newest first."""
        start = time.perf_counter()
        async with self._manager.read() as conn:
            violations = await ViolationRepo.list_for_user(
                conn,
                user_id,
                guild_id,
                active_at=None if include_expired else self.clock(),
            )
        self.db_perf_mon.track("list", time.perf_counter() - start)
        return violations

    async def list_active_in_section(
        self,
        user_id: int,
        guild_id: int,
        section: RuleSection,
        since: datetime,
    ) -> List[Violation]:
        """Return active violations issued at or after ``since`` citing a rule in ``section``."""
        start = time.perf_counter()
        async with self._manager.read() as conn:
            candidates = await ViolationRepo.list_for_user(
                conn,
                user_id,
                guild_id,
                active_at=self.clock(),
                since=since,
            )
        self.db_perf_mon.track("list_active_in_section", time.perf_counter() - start)

        return [
            violation
            for violation in candidates
            if section in self.mapper.extract_sections(violation.rule_ids)
        ]
