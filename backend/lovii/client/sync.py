"""
Local-first sync client.

``SyncClient`` is the per-session context a device builds once and passes to
whatever needs it. Reads answer from the local cache, mutations land in the
cache first and reach the server through the durable outbox, and partner
updates arrive through an explicit polling subscription.
"""

import asyncio
from collections.abc import Iterable
from typing import Any

import httpx

from lovii.client.api import LoviiApiClient
from lovii.client.errors import ApiError
from lovii.client.local_store import KEYS, LocalStore
from lovii.client.outbox import Outbox, OutboxWorker
from lovii.client.subscription import NoteCallback, PartnerNoteSubscription
from lovii.client.widget_bridge import WidgetBridge
from lovii.config import ClientSettings
from lovii.logging import get_logger
from lovii.models import (
    AuthOutcome,
    ConnectOutcome,
    Note,
    NoteUpdate,
    OutboxMethod,
    Profile,
    Task,
    WidgetSendOutcome,
    WidgetStatus,
)

logger = get_logger('client.sync')


def merge_notes(remote: Iterable[Note], local: Iterable[Note]) -> list[Note]:
    """
    Union of ``remote`` and ``local`` by id, newest first.

    Remote entries come first, so for an id present on both sides the remote
    copy is kept whole; no field-level merging happens.
    """
    merged: dict[str, Note] = {}
    for note in [*remote, *local]:
        if note.id not in merged:
            merged[note.id] = note
    return sorted(merged.values(), key=lambda n: n.timestamp, reverse=True)


def _dump_notes(notes: Iterable[Note]) -> list[dict]:
    return [n.to_wire() for n in notes]


def _load_notes(raw: list[dict] | None) -> list[Note]:
    return [Note.model_validate(item) for item in raw or []]


class SyncClient:
    """Device session: profile, notes, tasks and partner updates."""

    def __init__(
        self,
        api: LoviiApiClient,
        store: LocalStore,
        outbox: Outbox,
        *,
        settings: ClientSettings | None = None,
    ):
        self.settings = settings or ClientSettings()
        self.api = api
        self.store = store
        self.outbox = outbox
        self.widget = WidgetBridge(store)
        self.outbox_worker = OutboxWorker(
            outbox, api, interval_seconds=self.settings.OUTBOX_FLUSH_INTERVAL_SECONDS
        )
        self._notes_lock = asyncio.Lock()
        self._background: set[asyncio.Task] = set()
        self._subscriptions: list[PartnerNoteSubscription] = []

    @classmethod
    async def create(
        cls,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        start_worker: bool = True,
    ) -> "SyncClient":
        settings = settings or ClientSettings()
        store = LocalStore(settings.CACHE_PATH)
        await store.initialize()
        api = LoviiApiClient(
            base_url=settings.API_URL,
            timeout=settings.REQUEST_TIMEOUT,
            transport=transport,
        )
        outbox = Outbox(
            store,
            retry_base_seconds=settings.OUTBOX_RETRY_BASE_SECONDS,
            retry_max_seconds=settings.OUTBOX_RETRY_MAX_SECONDS,
            batch_size=settings.OUTBOX_BATCH_SIZE,
        )
        client = cls(api, store, outbox, settings=settings)
        if start_worker:
            client.outbox_worker.start()
        return client

    async def aclose(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.cancel()
        self._subscriptions.clear()
        await self.drain()
        await self.outbox_worker.stop()
        await self.api.aclose()

    async def __aenter__(self) -> "SyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── Background work ──

    def _spawn(self, coro, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain(self) -> None:
        """Wait for background refreshes started by reads to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _queue(self, method: OutboxMethod, path: str, **kwargs: Any) -> None:
        await self.outbox.enqueue(method, path, **kwargs)
        self.outbox_worker.kick()

    async def flush_outbox(self):
        return await self.outbox.flush(self.api)

    # ── Session / profile ──

    async def user_id(self) -> str | None:
        return await self.store.get_item(KEYS["USER_ID"])

    async def save_local_profile(self, profile: Profile) -> None:
        await self.store.set_json(KEYS["USER_DATA"], profile.to_wire())
        await self.store.set_item(KEYS["USER_ID"], profile.id)
        if profile.partner_id:
            await self.store.set_item(KEYS["PARTNER_ID"], profile.partner_id)

    async def set_session(self, profile: Profile) -> None:
        await self.save_local_profile(profile)

    async def get_profile(self) -> Profile | None:
        """Cached profile (refreshed in the background), else a remote fetch."""
        cached = await self.store.get_json(KEYS["USER_DATA"])
        if cached:
            profile = Profile.model_validate(cached)
            self._spawn(self.sync_profile(profile.id), "sync_profile")
            return profile
        user_id = await self.user_id()
        if user_id:
            return await self.sync_profile(user_id)
        return None

    async def sync_profile(self, profile_id: str) -> Profile | None:
        try:
            profile = await self.api.get_profile(profile_id)
        except ApiError as e:
            logger.info(f"Profile sync failed: {e}")
            return None
        await self.save_local_profile(profile)
        return profile

    async def create_profile(self, name: str | None = None) -> Profile:
        profile = await self.api.create_profile(name)
        await self.set_session(profile)
        return profile

    async def save_profile(self, profile: Profile) -> None:
        await self.save_local_profile(profile)
        body = {"id": profile.id, "name": profile.name}
        if profile.partner_name is not None:
            body["partnerName"] = profile.partner_name
        if profile.anniversary is not None:
            body["anniversary"] = profile.anniversary
        await self._queue(OutboxMethod.PUT, "/profile", json_body=body)

    async def register(self, name: str | None, password: str) -> AuthOutcome:
        try:
            profile = await self.api.register(name, password)
        except ApiError as e:
            return AuthOutcome(success=False, error=e.message)
        await self.set_session(profile)
        return AuthOutcome(success=True, user=profile)

    async def login(self, code: str, password: str) -> AuthOutcome:
        try:
            profile = await self.api.login(code, password)
        except ApiError as e:
            return AuthOutcome(success=False, error=e.message)
        await self.set_session(profile)
        return AuthOutcome(success=True, user=profile)

    async def connect_to_partner(self, partner_code: str) -> ConnectOutcome:
        my_id = await self.user_id()
        if not my_id:
            return ConnectOutcome(success=False, error="Not logged in")
        try:
            result = await self.api.connect(my_id, partner_code)
        except ApiError as e:
            return ConnectOutcome(success=False, error=e.message)

        await self.store.set_item(KEYS["PARTNER_ID"], result.partner_id)
        cached = await self.store.get_json(KEYS["USER_DATA"])
        if cached:
            profile = Profile.model_validate(cached)
            profile.partner_id = result.partner_id
            profile.partner_name = result.partner_name
            await self.save_local_profile(profile)
        return ConnectOutcome(
            success=True, partner_id=result.partner_id, partner_name=result.partner_name
        )

    async def partner_id(self) -> str | None:
        partner_id = await self.store.get_item(KEYS["PARTNER_ID"])
        if partner_id:
            return partner_id
        cached = await self.store.get_json(KEYS["USER_DATA"])
        return cached.get("partnerId") if cached else None

    # ── Notes ──

    async def _local_notes(self) -> list[Note]:
        return _load_notes(await self.store.get_json(KEYS["LOCAL_NOTES"], []))

    async def _write_local_notes(self, notes: list[Note]) -> None:
        await self.store.set_json(KEYS["LOCAL_NOTES"], _dump_notes(notes))

    async def save_my_note(self, note: Note) -> Note:
        user_id = await self.user_id()
        if user_id and not note.profile_id:
            note = note.model_copy(update={"profile_id": user_id})

        async with self._notes_lock:
            local = [n for n in await self._local_notes() if n.id != note.id]
            await self._write_local_notes([note, *local])

        if user_id:
            await self._queue(OutboxMethod.POST, "/notes", json_body=note.to_wire())
        await self.widget.update_widget_data(note)
        return note

    async def get_my_history(self) -> list[Note]:
        """
        Cached notes right away; a background refresh merges in the remote set
        for the next read.
        """
        local = await self._local_notes()
        if await self.user_id():
            self._spawn(self.refresh_my_history(), "refresh_my_history")
        return local

    async def refresh_my_history(self) -> list[Note]:
        user_id = await self.user_id()
        if not user_id:
            return await self._local_notes()
        try:
            remote = await self.api.list_notes(user_id)
        except ApiError as e:
            logger.info(f"History fetch failed: {e}")
            return await self._local_notes()

        # A delete still waiting in the outbox must not be undone by the fetch.
        deleted = await self.outbox.pending_note_deletes()
        remote = [n for n in remote if n.id not in deleted]

        async with self._notes_lock:
            merged = merge_notes(remote, await self._local_notes())
            await self._write_local_notes(merged)
        return merged

    async def get_partner_notes(self) -> list[Note]:
        partner_id = await self.partner_id()
        if not partner_id:
            return []
        try:
            return await self.api.list_notes(partner_id)
        except ApiError as e:
            logger.info(f"Partner notes fetch failed: {e}")
            return []

    async def get_latest_partner_note(self) -> Note | None:
        notes = await self.get_partner_notes()
        return notes[0] if notes else None

    async def update_note(self, note_id: str, updates: dict[str, Any]) -> None:
        patch = NoteUpdate(id=note_id, **updates)
        changes = patch.changes()
        async with self._notes_lock:
            notes = [
                n.model_copy(update=changes) if n.id == note_id else n
                for n in await self._local_notes()
            ]
            await self._write_local_notes(notes)
        await self._queue(
            OutboxMethod.PATCH, "/notes", json_body=patch.to_wire(exclude_unset=True)
        )

    async def delete_note(self, note_id: str) -> None:
        async with self._notes_lock:
            notes = [n for n in await self._local_notes() if n.id != note_id]
            await self._write_local_notes(notes)
        await self._queue(OutboxMethod.DELETE, "/notes", params={"id": note_id})

    async def toggle_pin(self, note_id: str, current_pinned: bool) -> None:
        await self.update_note(note_id, {"pinned": not current_pinned})

    async def toggle_bookmark(self, note_id: str, current_bookmarked: bool) -> None:
        await self.update_note(note_id, {"bookmarked": not current_bookmarked})

    # ── Tasks ──

    async def get_tasks(self) -> list[Task]:
        raw = await self.store.get_json(KEYS["LOCAL_TASKS"], [])
        return [Task.model_validate(item) for item in raw]

    async def save_tasks(self, tasks: list[Task]) -> None:
        """Replace the local list and queue a whole-list replace on the server."""
        await self.store.set_json(KEYS["LOCAL_TASKS"], [t.to_wire() for t in tasks])
        user_id = await self.user_id()
        if not user_id:
            return
        payload = [
            {"id": t.id, "profileId": user_id, "text": t.text, "completed": t.completed}
            for t in tasks
        ]
        await self._queue(
            OutboxMethod.POST, "/tasks", json_body=payload, params={"profileId": user_id}
        )

    async def refresh_tasks(self) -> list[Task]:
        user_id = await self.user_id()
        if not user_id:
            return await self.get_tasks()
        try:
            tasks = await self.api.list_tasks(user_id)
        except ApiError as e:
            logger.info(f"Task fetch failed: {e}")
            return await self.get_tasks()
        await self.store.set_json(KEYS["LOCAL_TASKS"], [t.to_wire() for t in tasks])
        return tasks

    # ── Partner updates ──

    def subscribe_to_partner_notes(
        self, callback: NoteCallback | None = None
    ) -> PartnerNoteSubscription:
        subscription = PartnerNoteSubscription(
            self.get_partner_notes,
            interval_seconds=self.settings.POLL_INTERVAL_SECONDS,
        )
        subscription.add_callback(self._on_partner_note)
        if callback is not None:
            subscription.add_callback(callback)
        self._subscriptions.append(subscription)
        return subscription.start()

    async def _on_partner_note(self, note: Note) -> None:
        await self.widget.update_widget_data(note)

    # ── Widget relay ──

    async def send_to_partner_widget(self, note: Note) -> WidgetSendOutcome:
        user_id = await self.user_id()
        if not user_id:
            return WidgetSendOutcome(success=False, error="Not logged in")
        note = await self.save_my_note(note)
        try:
            result = await self.api.send_widget(user_id, note)
        except ApiError as e:
            return WidgetSendOutcome(success=False, error=e.message)
        return WidgetSendOutcome(
            success=True, partner=result.partner, partner_widget=result.partner_widget
        )

    async def get_partner_widget_status(self) -> WidgetStatus:
        user_id = await self.user_id()
        if not user_id:
            return WidgetStatus(connected=False)
        try:
            return await self.api.widget_status(user_id)
        except ApiError as e:
            logger.info(f"Widget status fetch failed: {e}")
            return WidgetStatus(connected=False)

    async def clear_all(self) -> None:
        await self.store.clear()
