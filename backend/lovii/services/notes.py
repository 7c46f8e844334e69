"""Note CRUD keyed by owning profile."""

import json
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from lovii.database import connect
from lovii.errors import NotFoundError, ValidationError
from lovii.logging import get_logger
from lovii.models import Note, NoteCreate, NoteUpdate, is_uuid

logger = get_logger("services.notes")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_note(row: dict) -> Note:
    images = row.get("images")
    return Note(
        id=row["id"],
        profile_id=row["profile_id"],
        type=row["type"],
        content=row["content"],
        color=row.get("color"),
        images=json.loads(images) if images else None,
        timestamp=row["timestamp"],
        pinned=bool(row["pinned"]),
        bookmarked=bool(row["bookmarked"]),
    )


def _to_column(key: str, value):
    if key == "images":
        return json.dumps(value) if value is not None else None
    if key == "type":
        return value.value if hasattr(value, "value") else value
    if key in ("pinned", "bookmarked"):
        return int(bool(value))
    return value


class NoteService:
    def __init__(self, db_path: str):
        self.db_path = db_path

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    async def _fetch(self, db: aiosqlite.Connection, note_id: str) -> Note | None:
        cursor = await db.execute("SELECT * FROM notes WHERE id = ?", (note_id,))
        row = await cursor.fetchone()
        return _row_to_note(dict(row)) if row else None

    async def get_note(self, note_id: str) -> Note | None:
        db = await self._get_db()
        try:
            return await self._fetch(db, note_id)
        finally:
            await db.close()

    async def list_notes(self, profile_id: str) -> list[Note]:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM notes WHERE profile_id = ? ORDER BY timestamp DESC",
                (profile_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_note(dict(r)) for r in rows]
        finally:
            await db.close()

    async def latest_note(self, profile_id: str) -> Note | None:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM notes WHERE profile_id = ? ORDER BY timestamp DESC LIMIT 1",
                (profile_id,),
            )
            row = await cursor.fetchone()
            return _row_to_note(dict(row)) if row else None
        finally:
            await db.close()

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Store a note under ``data.profile_id``.

        Creating an id that already exists for the same owner returns the stored
        note unchanged, so a client may resend a create whose response it lost.
        The insert is a single ``ON CONFLICT DO NOTHING`` statement; concurrent
        creates of one id all read back the same row.
        """
        note_id = data.id if is_uuid(data.id) else str(uuid4())
        note = Note(id=note_id, **data.model_dump(exclude={"id"}))

        db = await self._get_db()
        try:
            stored = await self._fetch(db, note_id)
            if stored is None:
                cursor = await db.execute("SELECT 1 FROM profiles WHERE id = ?", (data.profile_id,))
                if await cursor.fetchone() is None:
                    raise NotFoundError("Profile not found")
                cursor = await db.execute(
                    """INSERT INTO notes (id, profile_id, type, content, color, images, pinned, bookmarked, timestamp, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(id) DO NOTHING""",
                    (
                        note.id,
                        note.profile_id,
                        note.type.value,
                        note.content,
                        note.color,
                        json.dumps(note.images) if note.images is not None else None,
                        int(note.pinned),
                        int(note.bookmarked),
                        note.timestamp,
                        _now(),
                    ),
                )
                await db.commit()
                if cursor.rowcount == 1:
                    logger.debug(f"Created note {note.id[:8]} for profile {note.profile_id[:8]}")
                    return note
                stored = await self._fetch(db, note_id)
        finally:
            await db.close()

        if stored.profile_id != data.profile_id:
            raise ValidationError("Note id already in use")
        return stored

    async def update_note(self, data: NoteUpdate) -> Note | None:
        existing = await self.get_note(data.id)
        if not existing:
            return None
        fields = {key: _to_column(key, value) for key, value in data.changes().items()}
        if not fields:
            return existing
        set_clause = ", ".join(f"{k} = ?" for k in fields)
        params = list(fields.values()) + [data.id]
        db = await self._get_db()
        try:
            await db.execute(f"UPDATE notes SET {set_clause} WHERE id = ?", params)
            await db.commit()
        finally:
            await db.close()
        return await self.get_note(data.id)

    async def delete_note(self, note_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute("DELETE FROM notes WHERE id = ?", (note_id,))
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()
