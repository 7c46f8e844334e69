"""
Partner-note polling as an explicit long-lived task.

Delivery is "latest wins": each tick looks only at the partner's newest note
and hands it out when it is newer than anything seen so far. Notes that
arrived and were superseded between two ticks are never delivered.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable

from lovii.config import MIN_POLL_INTERVAL_SECONDS
from lovii.logging import get_logger
from lovii.models import Note

logger = get_logger('client.subscription')

NoteCallback = Callable[[Note], Awaitable[None] | None]


def now_ms() -> int:
    return int(time.time() * 1000)


class PartnerNoteSubscription:
    """
    Poll ``fetch`` every ``interval_seconds`` and publish newer partner notes.

    Published notes go to every registered callback and to ``updates``, a
    queue of size one where a newer note replaces an unconsumed older one.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[Note]]],
        *,
        interval_seconds: float = MIN_POLL_INTERVAL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ):
        self._fetch = fetch
        self.interval_seconds = max(float(interval_seconds), MIN_POLL_INTERVAL_SECONDS)
        self.last_seen = clock()
        self.updates: asyncio.Queue[Note] = asyncio.Queue(maxsize=1)
        self._callbacks: list[NoteCallback] = []
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_callback(self, callback: NoteCallback) -> None:
        self._callbacks.append(callback)

    def remove_callback(self, callback: NoteCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def start(self) -> "PartnerNoteSubscription":
        if not self.running:
            self._stop.clear()
            self._task = asyncio.create_task(self._run())
        return self

    async def cancel(self) -> None:
        """
        Stop the timer. A tick already fetching runs to completion first; no
        further tick starts.
        """
        self._stop.set()
        task, self._task = self._task, None
        if task is not None and not task.done():
            await task

    async def poll_once(self) -> Note | None:
        """Run one tick. Returns the note delivered on this tick, if any."""
        notes = await self._fetch()
        if not notes:
            return None
        latest = notes[0]
        if latest.timestamp <= self.last_seen:
            return None
        self.last_seen = latest.timestamp
        await self._publish(latest)
        return latest

    async def _publish(self, note: Note) -> None:
        if self.updates.full():
            self.updates.get_nowait()
        self.updates.put_nowait(note)
        for callback in list(self._callbacks):
            try:
                result = callback(note)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Partner note callback failed")

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
            if self._stop.is_set():
                break
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Partner poll tick failed")
