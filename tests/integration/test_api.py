"""Integration tests for API endpoints."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pawlink.main import app
from pawlink.dependencies import USER_ID_HEADER, get_lifecycle_sessions, get_store
from pawlink.services.lifecycle import LifecycleSessions


@pytest_asyncio.fixture
async def client(store, profiles):
    """Test client wired to the per-test in-memory store."""
    sessions = LifecycleSessions()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_lifecycle_sessions] = lambda: sessions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        ac.sessions = sessions
        yield ac

    await sessions.drain()
    app.dependency_overrides.clear()


def as_user(user_id: str) -> dict:
    return {USER_ID_HEADER: user_id}


async def _submit(client, rescuer="rescuer-1", **overrides):
    body = {
        "description": "Injured dog near the market",
        "location": "Pettah Market",
        "urgency": "high",
        "assigned_rescuer_id": rescuer,
        **overrides,
    }
    r = await client.post("/api/reports", json=body, headers=as_user("citizen-1"))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_healthz(client):
    r = await client.get("/healthz")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_requires_identity(client):
    r = await client.get("/api/reports")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_citizen_gets_restricted_access(client):
    r = await client.get("/api/reports", headers=as_user("citizen-1"))
    assert r.status_code == 403
    assert r.json()["error"] == "AuthorizationError"


@pytest.mark.asyncio
async def test_submit_report_alerts_rescuer(client):
    report = await _submit(client, urgency="critical")
    assert report["status"] == "pending"
    assert report["expected_pickup_time"] is None
    assert report["reporter_name"] == "Nimali Perera"

    r = await client.get("/api/notifications", headers=as_user("rescuer-1"))
    [note] = r.json()
    assert note["type"] == "emergency"
    assert note["is_read"] is False


@pytest.mark.asyncio
async def test_submit_by_new_user_creates_profile(client, store):
    r = await client.post(
        "/api/reports",
        json={"description": "Kitten", "location": "Kandy", "assigned_rescuer_id": "vet-1"},
        headers=as_user("first-timer"),
    )
    assert r.status_code == 201
    assert await store.select("profiles", {"id": "first-timer"})


@pytest.mark.asyncio
async def test_submit_rejects_invalid_routing_and_roles(client):
    r = await client.post(
        "/api/reports",
        json={"description": "x", "location": "y", "assigned_rescuer_id": "citizen-2"},
        headers=as_user("citizen-1"),
    )
    assert r.status_code == 422
    assert r.json()["field"] == "assigned_rescuer_id"

    r = await client.post(
        "/api/reports",
        json={"description": "x", "location": "y", "assigned_rescuer_id": "rescuer-2"},
        headers=as_user("rescuer-1"),
    )
    assert r.status_code == 403

    r = await client.post(
        "/api/reports",
        json={"description": "no location", "assigned_rescuer_id": "rescuer-1"},
        headers=as_user("citizen-1"),
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_feed_scoping_admin_vs_rescuer(client):
    await _submit(client, rescuer="rescuer-1")
    await _submit(client, rescuer="rescuer-2")
    await _submit(client, rescuer="shelter-1")

    r = await client.get("/api/reports", headers=as_user("admin-1"))
    assert r.status_code == 200
    assert len(r.json()) == 3

    r = await client.get("/api/reports", headers=as_user("rescuer-2"))
    assert [rep["assigned_rescuer_id"] for rep in r.json()] == ["rescuer-2"]


@pytest.mark.asyncio
async def test_schedule_and_accept_flow(client):
    report = await _submit(client)
    rid = report["id"]
    rescuer = as_user("rescuer-1")

    r = await client.get(f"/api/reports/{rid}/schedule", headers=rescuer)
    assert r.status_code == 200
    assert r.json()["pickup_time"] == "09:00"

    r = await client.post(f"/api/reports/{rid}/schedule", json={"pickup_date": "", "pickup_time": "09:00"}, headers=rescuer)
    assert r.status_code == 422

    r = await client.post(
        f"/api/reports/{rid}/schedule", json={"pickup_date": "2025-06-01", "pickup_time": "09:00"}, headers=rescuer,
    )
    assert r.status_code == 200
    assert r.json()["expected_pickup_time"] == "2025-06-01T09:00:00.000Z"

    r = await client.post(
        f"/api/reports/{rid}/accept", json={"pickup_date": "2025-06-01", "pickup_time": "09:00"}, headers=rescuer,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "accepted"
    assert body["expected_pickup_time"] == "2025-06-01T09:00:00.000Z"
    await client.sessions.drain()

    r = await client.get("/api/notifications", headers=as_user("citizen-1"))
    notes = r.json()
    assert len(notes) == 1
    assert "2025-06-01" in notes[0]["message"] and "09:00" in notes[0]["message"]

    r = await client.get("/api/reports?tab=accepted", headers=rescuer)
    assert [rep["id"] for rep in r.json()] == [rid]

    r = await client.post(f"/api/reports/{rid}/decline", headers=rescuer)
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_decline_then_reject_further_transitions(client):
    rid = (await _submit(client))["id"]
    rescuer = as_user("rescuer-1")

    r = await client.post(f"/api/reports/{rid}/decline", headers=rescuer)
    assert r.status_code == 200
    assert r.json()["status"] == "declined"

    r = await client.post(
        f"/api/reports/{rid}/accept", json={"pickup_date": "2025-06-01", "pickup_time": "09:00"}, headers=rescuer,
    )
    assert r.status_code == 409

    r = await client.get("/api/notifications", headers=as_user("citizen-1"))
    assert r.json() == []


@pytest.mark.asyncio
async def test_store_failure_is_503_and_rolled_back(client, store):
    rid = (await _submit(client))["id"]
    rescuer = as_user("rescuer-1")
    await client.get("/api/reports", headers=rescuer)

    store.fail_on("update", "reports")
    r = await client.post(f"/api/reports/{rid}/decline", headers=rescuer)
    assert r.status_code == 503
    assert r.json()["kind"] == "connection_failure"

    store.heal()
    r = await client.get("/api/reports?tab=pending", headers=rescuer)
    assert [rep["id"] for rep in r.json()] == [rid]


@pytest.mark.asyncio
async def test_notification_inbox_operations(client):
    await _submit(client)
    await _submit(client)
    rescuer = as_user("rescuer-1")

    notes = (await client.get("/api/notifications", headers=rescuer)).json()
    assert len(notes) == 2

    r = await client.post(f"/api/notifications/{notes[0]['id']}/read", headers=rescuer)
    assert r.json()["is_read"] is True

    r = await client.get("/api/notifications?unread=true", headers=rescuer)
    assert len(r.json()) == 1

    r = await client.post("/api/notifications/read-all", headers=rescuer)
    assert r.json()["updated"] == 1

    r = await client.delete(f"/api/notifications/{notes[1]['id']}", headers=as_user("rescuer-2"))
    assert r.status_code == 404
    r = await client.delete(f"/api/notifications/{notes[1]['id']}", headers=rescuer)
    assert r.status_code == 204


@pytest.mark.asyncio
async def test_stale_feed_accept_after_admin_decline_is_conflict(client, store):
    rid = (await _submit(client))["id"]
    rescuer = as_user("rescuer-1")
    r = await client.get("/api/reports", headers=rescuer)
    assert [rep["status"] for rep in r.json()] == ["pending"]

    r = await client.post(f"/api/reports/{rid}/decline", headers=as_user("admin-1"))
    assert r.status_code == 200

    r = await client.post(
        f"/api/reports/{rid}/accept", json={"pickup_date": "2025-06-01", "pickup_time": "09:00"}, headers=rescuer,
    )
    assert r.status_code == 409
    await client.sessions.drain()

    [row] = await store.select("reports", {"id": rid})
    assert row["status"] == "declined"
    r = await client.get("/api/notifications", headers=as_user("citizen-1"))
    assert r.json() == []


@pytest.mark.asyncio
async def test_report_submitted_after_feed_load_can_be_accepted(client):
    rescuer = as_user("rescuer-1")
    r = await client.get("/api/reports", headers=rescuer)
    assert r.json() == []

    rid = (await _submit(client))["id"]
    r = await client.post(
        f"/api/reports/{rid}/accept", json={"pickup_date": "2025-06-01", "pickup_time": "09:00"}, headers=rescuer,
    )
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"
