import re
import uuid


def test_create_profile_allocates_uppercase_code(client):
    resp = client.post("/profile", json={"name": "Alice"})
    assert resp.status_code == 201
    body = resp.json()
    assert re.fullmatch(r"[A-Z0-9]{6}", body["partnerCode"])
    assert body["name"] == "Alice"
    assert body["partnerId"] is None
    uuid.UUID(body["id"])


def test_create_profile_without_body(client):
    resp = client.post("/profile")
    assert resp.status_code == 201
    assert resp.json()["name"] is None


def test_get_profile(client, make_profile):
    created = make_profile("Alice")
    resp = client.get("/profile", params={"id": created["id"]})
    assert resp.status_code == 200
    assert resp.json()["partnerCode"] == created["partnerCode"]


def test_get_profile_requires_id(client):
    resp = client.get("/profile")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Profile ID required"}


def test_get_unknown_profile(client):
    resp = client.get("/profile", params={"id": str(uuid.uuid4())})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Profile not found"}


def test_upsert_updates_existing_profile(client, make_profile):
    created = make_profile("Alice")
    resp = client.put(
        "/profile",
        json={"id": created["id"], "name": "Ally", "partnerName": "Bob", "anniversary": 1700000000000},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == created["id"]
    assert body["name"] == "Ally"
    assert body["partnerName"] == "Bob"
    assert body["anniversary"] == 1700000000000
    assert body["partnerCode"] == created["partnerCode"]


def test_upsert_creates_missing_profile_with_given_uuid(client):
    profile_id = str(uuid.uuid4())
    resp = client.put("/profile", json={"id": profile_id, "name": "Carol"})
    assert resp.status_code == 200
    assert resp.json()["id"] == profile_id
    assert client.get("/profile", params={"id": profile_id}).status_code == 200


def test_upsert_replaces_malformed_id(client):
    resp = client.put("/profile", json={"id": "not-a-uuid", "name": "Dave"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] != "not-a-uuid"
    uuid.UUID(body["id"])
    assert body["name"] == "Dave"


def test_code_collision_is_retried(client, make_profile, codes):
    codes.extend(["AAAAAA", "AAAAAA", "BBBBBB"])
    first = make_profile("First")
    second = make_profile("Second")
    assert first["partnerCode"] == "AAAAAA"
    assert second["partnerCode"] == "BBBBBB"


def test_code_allocation_gives_up(client, make_profile, codes):
    codes.append("ZZZZZZ")
    make_profile("Taken")
    codes.extend(["ZZZZZZ"] * 5)
    resp = client.post("/profile", json={"name": "Unlucky"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Could not allocate a unique partner code"}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
