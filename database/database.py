"""
============================================================================
DATABASE HANDLER
============================================================================
Async SQLite storage for per-server bot settings (command prefix, welcome
and log channels, auto role).

Features:
- Auto-initialization of the schema
- Serialized access through one connection
- Get-or-create settings rows with defaults
- Query helpers
"""

import aiosqlite
import asyncio
import logging
from typing import Optional, List, Dict, Any, Tuple
from pathlib import Path

import config

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS guild_settings (
    guild_id TEXT PRIMARY KEY,
    prefix TEXT NOT NULL DEFAULT '!',
    welcome_channel TEXT,
    log_channel TEXT,
    auto_role TEXT,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

DEFAULT_SETTINGS = {
    'prefix': config.DEFAULT_PREFIX,
    'welcome_channel': None,
    'log_channel': None,
    'auto_role': None,
}

SETTING_KEYS = tuple(DEFAULT_SETTINGS)


class Database:
    """
    Server settings database.

    Usage:
        db = Database()
        await db.initialize()
        prefix = await db.get_prefix('123456789')
    """

    def __init__(self, db_path: str = None):
        """
        Initialize database handler.

        Args:
            db_path: Path to SQLite database file (defaults to config.DATABASE_PATH)
        """
        self.db_path = db_path or config.DATABASE_PATH
        self.db: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

        # Ensure data directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    # ========================================================================
    # CONNECTION MANAGEMENT
    # ========================================================================

    async def initialize(self):
        """
        Open the connection and create tables.
        Should be called once when bot starts.
        """
        logger.info(f"📊 Initializing database at {self.db_path}...")

        self.db = await aiosqlite.connect(self.db_path)
        self.db.row_factory = aiosqlite.Row  # Enable dict-like access

        await self.db.executescript(SCHEMA)
        await self.db.commit()

    async def close(self):
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None
            logger.info("📊 Database connection closed")

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    async def execute(self, query: str, params: Tuple = ()) -> aiosqlite.Cursor:
        """
        Execute a query with parameters and commit.

        Args:
            query: SQL query string
            params: Query parameters (tuple)

        Returns:
            Cursor object
        """
        async with self._lock:
            cursor = await self.db.execute(query, params)
            await self.db.commit()
            return cursor

    async def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Dict]:
        """
        Fetch a single row.

        Returns:
            Dict with row data or None
        """
        async with self._lock:
            cursor = await self.db.execute(query, params)
            row = await cursor.fetchone()
            return dict(row) if row else None

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Dict]:
        """
        Fetch all rows.

        Returns:
            List of dicts with row data
        """
        async with self._lock:
            cursor = await self.db.execute(query, params)
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def fetch_value(self, query: str, params: Tuple = ()) -> Any:
        """Fetch a single value from the first row."""
        row = await self.fetch_one(query, params)
        return list(row.values())[0] if row else None

    # ========================================================================
    # GUILD SETTINGS
    # ========================================================================

    async def get_guild_settings(self, guild_id: str) -> Dict:
        """
        Get settings for a guild, creating the default row on first access.

        Returns:
            Dict with prefix, welcome_channel, log_channel, auto_role
        """
        await self.execute(
            "INSERT OR IGNORE INTO guild_settings (guild_id, prefix) VALUES (?, ?)",
            (str(guild_id), DEFAULT_SETTINGS['prefix'])
        )
        row = await self.fetch_one(
            "SELECT prefix, welcome_channel, log_channel, auto_role FROM guild_settings WHERE guild_id = ?",
            (str(guild_id),)
        )
        return row

    async def get_prefix(self, guild_id: str) -> str:
        settings = await self.get_guild_settings(guild_id)
        return settings['prefix']

    async def set_guild_setting(self, guild_id: str, key: str, value: Any):
        """
        Update a single setting.

        Raises:
            ValueError: unknown setting key
        """
        await self.update_guild_settings(guild_id, **{key: value})

    async def update_guild_settings(self, guild_id: str, **settings):
        """Update several settings at once."""
        unknown = [key for key in settings if key not in SETTING_KEYS]
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
        if not settings:
            return

        await self.get_guild_settings(guild_id)

        # Column names come from SETTING_KEYS only
        fields = ", ".join(f"{key} = ?" for key in settings)
        await self.execute(
            f"UPDATE guild_settings SET {fields}, updated_at = CURRENT_TIMESTAMP WHERE guild_id = ?",
            tuple(settings.values()) + (str(guild_id),)
        )

    async def reset_guild_settings(self, guild_id: str):
        """Restore default settings for a guild."""
        await self.execute(
            "DELETE FROM guild_settings WHERE guild_id = ?",
            (str(guild_id),)
        )
        await self.get_guild_settings(guild_id)

    async def remove_guild_settings(self, guild_id: str):
        """Drop a guild's settings (e.g. when the bot leaves)."""
        await self.execute(
            "DELETE FROM guild_settings WHERE guild_id = ?",
            (str(guild_id),)
        )
