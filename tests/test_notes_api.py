import asyncio
import uuid

import pytest

from lovii.database import init_db
from lovii.models import NoteCreate, ProfileCreate
from lovii.services.notes import NoteService
from lovii.services.profile import ProfileService


@pytest.fixture
def alice(make_profile):
    return make_profile("Alice")


def _note(profile_id, timestamp, **extra):
    body = {"profileId": profile_id, "type": "text", "content": f"note {timestamp}", "timestamp": timestamp}
    body.update(extra)
    return body


def test_create_and_list_newest_first(client, alice):
    for ts in (1000, 3000, 2000):
        assert client.post("/notes", json=_note(alice["id"], ts)).status_code == 201

    resp = client.get("/notes", params={"profileId": alice["id"]})
    assert resp.status_code == 200
    assert [n["timestamp"] for n in resp.json()] == [3000, 2000, 1000]


def test_create_keeps_client_id_and_fields(client, alice):
    note_id = str(uuid.uuid4())
    resp = client.post(
        "/notes",
        json=_note(alice["id"], 10, id=note_id, type="collage", images=["a.jpg", "b.jpg"], color="#FFC0CB"),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == note_id
    assert body["images"] == ["a.jpg", "b.jpg"]
    assert body["color"] == "#FFC0CB"
    assert body["pinned"] is False
    assert body["bookmarked"] is False


def test_repeated_create_returns_stored_note(client, alice):
    note_id = str(uuid.uuid4())
    first = client.post("/notes", json=_note(alice["id"], 10, id=note_id))
    second = client.post("/notes", json=_note(alice["id"], 10, id=note_id, content="changed"))
    assert second.status_code == 201
    assert second.json()["content"] == first.json()["content"]
    assert len(client.get("/notes", params={"profileId": alice["id"]}).json()) == 1


def test_id_owned_by_someone_else(client, alice, make_profile):
    bob = make_profile("Bob")
    note_id = str(uuid.uuid4())
    client.post("/notes", json=_note(alice["id"], 10, id=note_id))
    resp = client.post("/notes", json=_note(bob["id"], 10, id=note_id))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Note id already in use"}


def test_create_for_unknown_profile(client):
    resp = client.post("/notes", json=_note(str(uuid.uuid4()), 10))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Profile not found"}


def test_invalid_type_rejected(client, alice):
    resp = client.post("/notes", json=_note(alice["id"], 10, type="video"))
    assert resp.status_code == 400
    assert "type" in resp.json()["error"]


def test_list_requires_profile_id(client):
    resp = client.get("/notes")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Profile ID required"}


def test_partner_id_selects_whose_notes(client, alice, make_profile):
    bob = make_profile("Bob")
    client.post("/notes", json=_note(alice["id"], 1, content="mine"))
    client.post("/notes", json=_note(bob["id"], 2, content="his"))

    resp = client.get("/notes", params={"profileId": alice["id"], "partnerId": bob["id"]})
    assert [n["content"] for n in resp.json()] == ["his"]


def test_patch_changes_only_given_fields(client, alice):
    note = client.post("/notes", json=_note(alice["id"], 10, color="#000000")).json()
    resp = client.patch("/notes", json={"id": note["id"], "pinned": True})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pinned"] is True
    assert body["color"] == "#000000"
    assert body["content"] == note["content"]


def test_patch_unknown_note(client):
    resp = client.patch("/notes", json={"id": str(uuid.uuid4()), "pinned": True})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Note not found"}


def test_delete(client, alice):
    note = client.post("/notes", json=_note(alice["id"], 10)).json()
    resp = client.delete("/notes", params={"id": note["id"]})
    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted", "id": note["id"]}
    assert client.get("/notes", params={"profileId": alice["id"]}).json() == []

    again = client.delete("/notes", params={"id": note["id"]})
    assert again.status_code == 404


def test_delete_requires_id(client):
    resp = client.delete("/notes")
    assert resp.status_code == 400
    assert resp.json() == {"error": "ID required"}


def test_concurrent_creates_with_one_id(app, asgi_client):
    note_id = str(uuid.uuid4())

    async def _run():
        async with app.router.lifespan_context(app):
            async with asgi_client() as http:
                owner = (await http.post("/profile", json={"name": "Alice"})).json()
                body = _note(owner["id"], 10, id=note_id)
                responses = await asyncio.gather(*(http.post("/notes", json=body) for _ in range(4)))
                listed = await http.get("/notes", params={"profileId": owner["id"]})
                return responses, listed.json()

    responses, listed = asyncio.run(_run())
    assert [r.status_code for r in responses] == [201] * 4
    assert {r.json()["id"] for r in responses} == {note_id}
    assert [n["id"] for n in listed] == [note_id]


def test_concurrent_creates_in_the_service(db_path):
    async def _run():
        await init_db(db_path)
        profiles = ProfileService(db_path)
        notes = NoteService(db_path)
        owner = await profiles.create_profile(ProfileCreate(name="Alice"))
        data = NoteCreate(id=str(uuid.uuid4()), profile_id=owner.id, type="text", timestamp=1)
        return data, await asyncio.gather(notes.create_note(data), notes.create_note(data))

    data, created = asyncio.run(_run())
    assert [n.id for n in created] == [data.id, data.id]


def test_patch_null_clears_color_and_images(client, alice):
    note = client.post(
        "/notes", json=_note(alice["id"], 10, type="collage", color="#123456", images=["a.jpg"])
    ).json()
    resp = client.patch("/notes", json={"id": note["id"], "color": None, "images": None})
    assert resp.status_code == 200
    body = resp.json()
    assert body["color"] is None
    assert body["images"] is None
    assert body["type"] == "collage"


def test_patch_null_on_required_field_is_ignored(client, alice):
    note = client.post("/notes", json=_note(alice["id"], 10)).json()
    resp = client.patch("/notes", json={"id": note["id"], "content": None, "pinned": None})
    assert resp.status_code == 200
    assert resp.json()["content"] == note["content"]
    assert resp.json()["pinned"] is False
