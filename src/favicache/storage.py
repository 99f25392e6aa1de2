"""SQLite key-value document store.

Each key holds one whole string-serialised document (the favicon cache, the
link groups). Callers read, modify and write back the complete document; there
is no row-level locking, so concurrent writers race and the last full write
wins.

Like the rest of the persistence layer, all operations catch
``aiosqlite.Error`` and degrade: a failed read returns ``None`` (same as a
missing key), a failed write or remove returns ``False``. Errors are logged
with ``exc_info=True`` and never cross the store boundary.
"""

from __future__ import annotations

from datetime import UTC, datetime

import aiosqlite
import structlog

log = structlog.get_logger()

FAVICON_CACHE_KEY = "favicon-cache"
LINK_GROUPS_KEY = "link-groups"

_CREATE_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteStore:
    """aiosqlite-backed document store implementing StoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create the table and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_KV_TABLE)
        await self._db.commit()

    async def get(self, key: str) -> str | None:
        """Return the document stored under ``key``, or ``None``."""
        try:
            cursor = await self._db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return None if row is None else row[0]
        except aiosqlite.Error:
            log.warning("store_read_error", key=key, exc_info=True)
            return None

    async def set(self, key: str, value: str) -> bool:
        """Replace the document under ``key``. Returns ``False`` if it did not persist."""
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now(UTC).isoformat()),
            )
            await self._db.commit()
            return True
        except aiosqlite.Error:
            log.warning("store_write_error", key=key, size=len(value), exc_info=True)
            return False

    async def remove(self, key: str) -> bool:
        try:
            await self._db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await self._db.commit()
            return True
        except aiosqlite.Error:
            log.warning("store_remove_error", key=key, exc_info=True)
            return False
