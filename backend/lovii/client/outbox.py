"""
Durable outbox for remote mutations.

Local writes happen first; the matching HTTP request is queued here and
delivered in FIFO order until the server acknowledges it. Transient failures
back off exponentially and block later entries so that a PATCH can never
overtake the POST it depends on. Permanent rejections (4xx other than 429)
are dropped and logged.
"""

import asyncio
import json
import time
from collections.abc import Callable
from typing import Any

from lovii.client.api import LoviiApiClient
from lovii.client.errors import ApiError, is_transient
from lovii.client.local_store import LocalStore
from lovii.database import connect
from lovii.logging import get_logger
from lovii.models import FlushResult, OutboxMethod

logger = get_logger('client.outbox')


class Outbox:
    """Queue of pending HTTP mutations persisted in the local store."""

    def __init__(
        self,
        store: LocalStore,
        *,
        retry_base_seconds: float = 1.0,
        retry_max_seconds: float = 300.0,
        batch_size: int = 50,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.retry_base_seconds = max(float(retry_base_seconds), 0.0)
        self.retry_max_seconds = max(float(retry_max_seconds), self.retry_base_seconds)
        self.batch_size = max(int(batch_size), 1)
        self.clock = clock
        self._flush_lock = asyncio.Lock()

    def backoff_delay(self, attempts: int) -> float:
        return min(self.retry_base_seconds * (2 ** max(attempts - 1, 0)), self.retry_max_seconds)

    async def enqueue(
        self,
        method: OutboxMethod | str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> int:
        method = OutboxMethod(method)
        db = await connect(self.store.path)
        try:
            cursor = await db.execute(
                """INSERT INTO outbox (method, path, params, body, attempts, next_attempt_at, created_at)
                   VALUES (?, ?, ?, ?, 0, 0, ?)""",
                (
                    method.value,
                    path,
                    json.dumps(params) if params is not None else None,
                    json.dumps(json_body) if json_body is not None else None,
                    self.clock(),
                ),
            )
            await db.commit()
            entry_id = cursor.lastrowid
        finally:
            await db.close()
        logger.debug(f"Queued {method.value} {path} as outbox entry {entry_id}")
        return entry_id

    async def pending(self) -> list[dict[str, Any]]:
        db = await connect(self.store.path)
        try:
            cursor = await db.execute("SELECT * FROM outbox ORDER BY id ASC")
            rows = await cursor.fetchall()
        finally:
            await db.close()
        entries = []
        for row in rows:
            entry = dict(row)
            entry["params"] = json.loads(entry["params"]) if entry["params"] else None
            entry["body"] = json.loads(entry["body"]) if entry["body"] else None
            entries.append(entry)
        return entries

    async def count(self) -> int:
        db = await connect(self.store.path)
        try:
            cursor = await db.execute("SELECT COUNT(*) FROM outbox")
            row = await cursor.fetchone()
            return int(row[0])
        finally:
            await db.close()

    async def pending_note_deletes(self) -> set[str]:
        """Ids of notes whose DELETE has not reached the server yet."""
        return {
            entry["params"]["id"]
            for entry in await self.pending()
            if entry["method"] == OutboxMethod.DELETE.value
            and entry["path"] == "/notes"
            and entry["params"]
            and entry["params"].get("id")
        }

    async def _remove(self, entry_id: int) -> None:
        db = await connect(self.store.path)
        try:
            await db.execute("DELETE FROM outbox WHERE id = ?", (entry_id,))
            await db.commit()
        finally:
            await db.close()

    async def _reschedule(self, entry: dict[str, Any], error: Exception) -> float:
        attempts = int(entry["attempts"]) + 1
        delay = self.backoff_delay(attempts)
        db = await connect(self.store.path)
        try:
            await db.execute(
                "UPDATE outbox SET attempts = ?, next_attempt_at = ?, last_error = ? WHERE id = ?",
                (attempts, self.clock() + delay, str(error), entry["id"]),
            )
            await db.commit()
        finally:
            await db.close()
        return delay

    async def flush(self, api: LoviiApiClient) -> FlushResult:
        """
        Deliver due entries in order.

        Stops at the first transient failure or at the first entry whose
        backoff has not elapsed, leaving it and everything after it queued.
        """
        result = FlushResult()
        async with self._flush_lock:
            for entry in (await self.pending())[: self.batch_size]:
                if entry["next_attempt_at"] > self.clock():
                    break
                try:
                    await api.request(
                        entry["method"],
                        entry["path"],
                        params=entry["params"],
                        json_body=entry["body"],
                    )
                except ApiError as e:
                    if is_transient(e):
                        delay = await self._reschedule(entry, e)
                        result.retried += 1
                        result.errors.append({"id": entry["id"], "error": str(e)})
                        logger.warning(
                            "Outbox %s %s failed (attempt %d): %s. Retrying in %.2fs",
                            entry["method"],
                            entry["path"],
                            int(entry["attempts"]) + 1,
                            e,
                            delay,
                        )
                        break
                    await self._remove(entry["id"])
                    result.dropped += 1
                    result.errors.append({"id": entry["id"], "error": str(e)})
                    logger.error(
                        f"Outbox dropped {entry['method']} {entry['path']} rejected by server: {e}"
                    )
                    continue
                await self._remove(entry["id"])
                result.sent += 1
            result.remaining = await self.count()
        return result


class OutboxWorker:
    """Long-lived task that flushes the outbox periodically or when kicked."""

    def __init__(self, outbox: Outbox, api: LoviiApiClient, interval_seconds: float = 2.0):
        self.outbox = outbox
        self.api = api
        self.interval_seconds = max(float(interval_seconds), 0.0)
        self._task: asyncio.Task | None = None
        self._stop = asyncio.Event()
        self._wake = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run())

    def kick(self) -> None:
        """Ask for a flush now instead of at the next interval."""
        self._wake.set()

    async def stop(self) -> None:
        self._stop.set()
        self._wake.set()
        if self._task is not None:
            try:
                await self._task
            finally:
                self._task = None

    async def _run(self) -> None:
        while not self._stop.is_set():
            self._wake.clear()
            try:
                await self.outbox.flush(self.api)
            except Exception:
                logger.exception("Outbox flush failed")
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
