import asyncio

import httpx

from lovii.client import KEYS, SyncClient
from lovii.config import ClientSettings
from lovii.models import Note, Task


def _note(content, ts, **extra):
    return Note(type="text", content=content, timestamp=ts, **extra)


def test_saved_note_shows_up_once_locally_then_reaches_server(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                profile = await alice.create_profile("Alice")
                note = await alice.save_my_note(_note("hello", 1000))
                assert note.profile_id == profile.id

                history = await alice.get_my_history()
                assert [n.id for n in history] == [note.id]
                assert await alice.outbox.count() == 1

                result = await alice.flush_outbox()
                assert (result.sent, result.remaining) == (1, 0)

                remote = await alice.api.list_notes(profile.id)
                assert [n.id for n in remote] == [note.id]

                await alice.drain()
                return await alice.refresh_my_history()

    history = asyncio.run(_run())
    assert [n.content for n in history] == ["hello"]


def test_resent_create_does_not_duplicate(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                profile = await alice.create_profile("Alice")
                note = await alice.save_my_note(_note("once", 1))
                await alice.outbox.enqueue("POST", "/notes", json_body=note.to_wire())
                await alice.flush_outbox()
                return await alice.api.list_notes(profile.id)

    assert len(asyncio.run(_run())) == 1


def test_refresh_merges_notes_from_another_device(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as phone, device() as tablet:
                profile = await phone.create_profile("Alice")
                await phone.save_my_note(_note("from phone", 2000))
                await phone.flush_outbox()

                await tablet.set_session(profile)
                await tablet.save_my_note(_note("from tablet", 1000))
                return await tablet.refresh_my_history()

    history = asyncio.run(_run())
    assert [n.content for n in history] == ["from phone", "from tablet"]


def test_pending_delete_is_not_undone_by_refresh(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                await alice.create_profile("Alice")
                note = await alice.save_my_note(_note("bye", 1))
                await alice.flush_outbox()

                await alice.delete_note(note.id)
                assert await alice.refresh_my_history() == []

                await alice.flush_outbox()
                return await alice.api.list_notes(await alice.user_id())

    assert asyncio.run(_run()) == []


def test_update_is_applied_locally_and_remotely(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                profile = await alice.create_profile("Alice")
                note = await alice.save_my_note(_note("pin me", 1))
                await alice.toggle_pin(note.id, note.pinned)
                await alice.toggle_bookmark(note.id, note.bookmarked)

                local = (await alice.get_my_history())[0]
                await alice.drain()
                await alice.flush_outbox()
                remote = (await alice.api.list_notes(profile.id))[0]
                return local, remote

    local, remote = asyncio.run(_run())
    assert local.pinned and local.bookmarked
    assert remote.pinned and remote.bookmarked


def test_offline_reads_fall_back_to_cache(tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline")

    async def _run():
        settings = ClientSettings(API_URL="http://offline", CACHE_PATH=str(tmp_path / "c.db"))
        async with await SyncClient.create(
            settings, transport=httpx.MockTransport(handler), start_worker=False
        ) as sync:
            await sync.store.set_item(KEYS["USER_ID"], "me")
            await sync.store.set_item(KEYS["PARTNER_ID"], "them")
            saved = await sync.save_my_note(_note("offline", 5))
            history = await sync.refresh_my_history()
            partner = await sync.get_partner_notes()
            flushed = await sync.flush_outbox()
            return saved, history, partner, flushed

    saved, history, partner, flushed = asyncio.run(_run())
    assert [n.id for n in history] == [saved.id]
    assert partner == []
    assert (flushed.retried, flushed.remaining) == (1, 1)


def test_connect_and_partner_notes(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice, device() as bob:
                await alice.create_profile("Alice")
                bob_profile = await bob.create_profile("Bob")

                outcome = await alice.connect_to_partner(bob_profile.partner_code)
                assert outcome.success
                assert outcome.partner_id == bob_profile.id
                assert outcome.partner_name == "Bob"
                assert await alice.partner_id() == bob_profile.id
                assert (await alice.get_profile()).partner_id == bob_profile.id

                await bob.save_my_note(_note("first", 1))
                await bob.save_my_note(_note("second", 2))
                await bob.flush_outbox()

                notes = await alice.get_partner_notes()
                latest = await alice.get_latest_partner_note()
                await alice.drain()
                return notes, latest

    notes, latest = asyncio.run(_run())
    assert [n.content for n in notes] == ["second", "first"]
    assert latest.content == "second"


def test_connect_reports_server_error(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                await alice.create_profile("Alice")
                return await alice.connect_to_partner("NOPE00")

    outcome = asyncio.run(_run())
    assert outcome.success is False
    assert outcome.error == "Partner code not found"


def test_partner_notes_without_partner(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                await alice.create_profile("Alice")
                return await alice.get_partner_notes()

    assert asyncio.run(_run()) == []


def test_subscription_updates_widget(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice, device() as bob:
                await alice.create_profile("Alice")
                bob_profile = await bob.create_profile("Bob")
                await alice.connect_to_partner(bob_profile.partner_code)

                received = []
                sub = alice.subscribe_to_partner_notes(received.append)
                sub.last_seen = 0

                await bob.save_my_note(_note("ping", 10, color=None))
                await bob.flush_outbox()
                await sub.poll_once()
                await sub.cancel()
                return received, await alice.widget.read_widget_data()

    received, widget = asyncio.run(_run())
    assert [n.content for n in received] == ["ping"]
    assert widget == {"type": "text", "content": "ping", "timestamp": 10, "color": "#FFFFFF", "images": []}


def test_tasks_roundtrip(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice, device() as other:
                profile = await alice.create_profile("Alice")
                await alice.save_tasks([Task(text="A"), Task(text="B", completed=True)])
                assert [t.text for t in await alice.get_tasks()] == ["A", "B"]
                await alice.flush_outbox()

                await other.set_session(profile)
                return await other.refresh_tasks()

    tasks = asyncio.run(_run())
    assert [(t.text, t.completed) for t in tasks] == [("A", False), ("B", True)]


def test_register_and_login(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as first, device() as second:
                registered = await first.register("Alice", "pw")
                bad = await second.login(registered.user.partner_code, "nope")
                good = await second.login(registered.user.partner_code, "pw")
                return registered, bad, good, await second.user_id()

    registered, bad, good, user_id = asyncio.run(_run())
    assert registered.success
    assert bad.success is False
    assert bad.error == "Invalid credentials"
    assert good.success
    assert user_id == registered.user.id


def test_widget_send_and_status(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice, device() as bob:
                await alice.create_profile("Alice")
                bob_profile = await bob.create_profile("Bob")
                await alice.connect_to_partner(bob_profile.partner_code)

                sent = await alice.send_to_partner_widget(_note("thinking of you", 42))
                status = await alice.get_partner_widget_status()
                await alice.flush_outbox()
                mine = await alice.api.list_notes(await alice.user_id())
                return sent, status, mine

    sent, status, mine = asyncio.run(_run())
    assert sent.success
    assert sent.partner.name == "Bob"
    assert sent.partner_widget.has_note is False
    assert status.connected
    assert [n.content for n in mine] == ["thinking of you"]


def test_widget_send_requires_session(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                return await alice.send_to_partner_widget(_note("hi", 1))

    outcome = asyncio.run(_run())
    assert outcome.success is False
    assert outcome.error == "Not logged in"


def test_clear_all(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice:
                await alice.create_profile("Alice")
                await alice.save_my_note(_note("x", 1))
                await alice.clear_all()
                return await alice.user_id(), await alice.outbox.count(), await alice.get_my_history()

    assert asyncio.run(_run()) == (None, 0, [])


def test_widget_send_racing_the_outbox_flush(app, device):
    async def _run():
        async with app.router.lifespan_context(app):
            async with device() as alice, device() as bob:
                me = await alice.create_profile("Alice")
                bob_profile = await bob.create_profile("Bob")
                await alice.connect_to_partner(bob_profile.partner_code)

                note = await alice.save_my_note(_note("same id twice", 7))
                sent, flushed = await asyncio.gather(
                    alice.api.send_widget(me.id, note), alice.flush_outbox()
                )
                return note, sent, flushed, await alice.api.list_notes(me.id)

    note, sent, flushed, remote = asyncio.run(_run())
    assert sent.note.id == note.id
    assert (flushed.sent, flushed.dropped) == (1, 0)
    assert [n.id for n in remote] == [note.id]
