"""
Database schema initialization for the violation store.

Timestamps are stored as REAL unix seconds (UTC) so window comparisons are
plain numeric comparisons. Restrictions are stored as a JSON array of
restriction names.
"""

import aiosqlite
from warncord.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates the tables and indexes of the violation store."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all tables and indexes if they do not exist.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.debug("[SCHEMA] Database schema initialized")

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS violations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                guild_id INTEGER NOT NULL,
                type TEXT NOT NULL,
                severity TEXT NOT NULL,
                policy_violated TEXT,
                reason TEXT NOT NULL,
                content_snapshot TEXT,
                context TEXT,
                restrictions TEXT NOT NULL DEFAULT '[]',
                issued_by INTEGER,
                issued_at REAL NOT NULL,
                expires_at REAL,
                expired_at REAL,
                review_requested INTEGER NOT NULL DEFAULT 0,
                reviewed_by INTEGER,
                reviewed_at REAL,
                review_outcome TEXT,
                review_notes TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_violations_lookup ON violations(guild_id, user_id, issued_at DESC)"
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_violations_expiry ON violations(expires_at) WHERE expired_at IS NULL"
        )

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
