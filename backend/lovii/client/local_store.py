"""
Device-local key/value cache and outbox storage.

A small SQLite file stands in for the device's persistent storage: the
``kv`` table holds JSON documents under string keys, the ``outbox`` table
holds queued remote mutations (see ``lovii.client.outbox``).
"""

import json
from pathlib import Path
from typing import Any

import aiosqlite

from lovii.database import connect
from lovii.logging import get_logger

logger = get_logger('client.local_store')

KEYS = {
    "USER_ID": "lovii_user_id",
    "USER_DATA": "lovii_user_data_json",
    "PARTNER_ID": "lovii_partner_id",
    "LOCAL_NOTES": "lovii_local_notes",
    "LOCAL_TASKS": "lovii_local_tasks",
    "WIDGET_DATA": "latestNote",
}

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS outbox (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    method TEXT NOT NULL,
    path TEXT NOT NULL,
    params TEXT,
    body TEXT,
    attempts INTEGER NOT NULL DEFAULT 0,
    next_attempt_at REAL NOT NULL DEFAULT 0,
    last_error TEXT,
    created_at REAL NOT NULL
);
"""


class LocalStore:
    """Persistent JSON key/value storage for one device session."""

    def __init__(self, path: str):
        self.path = path

    async def initialize(self) -> None:
        parent = Path(self.path).parent
        parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(_SCHEMA)
            await db.commit()
        logger.debug(f"Local store ready at {self.path}")

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.path)

    async def get_item(self, key: str) -> str | None:
        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return row["value"] if row else None
        finally:
            await db.close()

    async def set_item(self, key: str, value: str) -> None:
        db = await self._get_db()
        try:
            await db.execute(
                """INSERT INTO kv (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value),
            )
            await db.commit()
        finally:
            await db.close()

    async def remove_item(self, key: str) -> None:
        db = await self._get_db()
        try:
            await db.execute("DELETE FROM kv WHERE key = ?", (key,))
            await db.commit()
        finally:
            await db.close()

    async def get_json(self, key: str, default: Any = None) -> Any:
        raw = await self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache entry {key!r}")
            return default

    async def set_json(self, key: str, value: Any) -> None:
        await self.set_item(key, json.dumps(value))

    async def clear(self) -> None:
        """Forget everything, queued mutations included."""
        db = await self._get_db()
        try:
            await db.execute("DELETE FROM kv")
            await db.execute("DELETE FROM outbox")
            await db.commit()
        finally:
            await db.close()
