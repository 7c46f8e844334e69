"""Task CRUD, including whole-list replacement for one profile."""

from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from lovii.database import connect, savepoint
from lovii.errors import NotFoundError, ValidationError
from lovii.logging import get_logger
from lovii.models import Task, TaskCreate, is_uuid

logger = get_logger("services.tasks")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_task(row: dict) -> Task:
    return Task(
        id=row["id"],
        profile_id=row["profile_id"],
        text=row["text"],
        completed=bool(row["completed"]),
        created_at=row["created_at"],
    )


class TaskService:
    def __init__(self, db_path: str):
        self.db_path = db_path

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    async def _require_profile(self, db: aiosqlite.Connection, profile_id: str) -> None:
        cursor = await db.execute("SELECT 1 FROM profiles WHERE id = ?", (profile_id,))
        if await cursor.fetchone() is None:
            raise NotFoundError("Profile not found")

    async def list_tasks(self, profile_id: str) -> list[Task]:
        # Newest first; rows written by one bulk replace keep their submitted order.
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM tasks WHERE profile_id = ? ORDER BY created_at DESC, rowid ASC",
                (profile_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_task(dict(r)) for r in rows]
        finally:
            await db.close()

    async def create_task(self, data: TaskCreate) -> Task:
        if not data.profile_id:
            raise ValidationError("Profile ID required")
        task_id = data.id if is_uuid(data.id) else str(uuid4())
        task = Task(
            id=task_id,
            profile_id=data.profile_id,
            text=data.text,
            completed=data.completed,
            created_at=_now(),
        )
        db = await self._get_db()
        try:
            row = await self._fetch_row(db, task_id)
            if row is None:
                await self._require_profile(db, data.profile_id)
                cursor = await db.execute(
                    """INSERT INTO tasks (id, profile_id, text, completed, created_at) VALUES (?, ?, ?, ?, ?)
                       ON CONFLICT(id) DO NOTHING""",
                    (task.id, task.profile_id, task.text, int(task.completed), task.created_at.isoformat()),
                )
                await db.commit()
                if cursor.rowcount == 1:
                    return task
                row = await self._fetch_row(db, task_id)
        finally:
            await db.close()

        if row["profile_id"] != data.profile_id:
            raise ValidationError("Task id already in use")
        return _row_to_task(row)

    async def _fetch_row(self, db: aiosqlite.Connection, task_id: str) -> dict | None:
        cursor = await db.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def replace_tasks(self, profile_id: str | None, items: list[TaskCreate]) -> int:
        """
        Replace every task of one profile with ``items``.

        The owner comes from ``profile_id`` or, failing that, the first item.
        Items naming a different owner are rejected.
        """
        owner = profile_id or next((t.profile_id for t in items if t.profile_id), None)
        if not owner:
            raise ValidationError("Profile ID required")
        if any(t.profile_id and t.profile_id != owner for t in items):
            raise ValidationError("All tasks must belong to the same profile")

        now = _now()
        db = await self._get_db()
        try:
            await self._require_profile(db, owner)
            async with savepoint(db, "tasks_replace"):
                await db.execute("DELETE FROM tasks WHERE profile_id = ?", (owner,))
                await db.executemany(
                    "INSERT INTO tasks (id, profile_id, text, completed, created_at) VALUES (?, ?, ?, ?, ?)",
                    [
                        (
                            t.id if is_uuid(t.id) else str(uuid4()),
                            owner,
                            t.text,
                            int(t.completed),
                            now,
                        )
                        for t in items
                    ],
                )
            await db.commit()
        finally:
            await db.close()

        logger.info(f"Replaced task list of profile {owner[:8]} with {len(items)} task(s)")
        return len(items)
