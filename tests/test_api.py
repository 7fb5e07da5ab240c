"""Tests for the HTTP API: role policy and error mapping."""
import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from core.config import Settings
from web.app import build_app
from web.middlewares import resolve_user
from web.policy import Role

ADMIN = {"X-Api-Key": "admin-secret"}
VIKTORIA = {"X-Api-Key": "viktoria-key"}
SVITLANA = {"X-Api-Key": "svitlana-key"}

BOOKING = {
    "client_name": "Олена",
    "client_phone": "050 111 22 33",
    "master_id": "master-1",
    "service_ids": ["svc-1", "svc-3"],
    "date": "2025-03-10",
    "start_time": "10:00",
}


@pytest.fixture
def config() -> Settings:
    return Settings(
        admin_api_key="admin-secret",
        master_api_keys="master-1:viktoria-key,master-2:svitlana-key",
    )


@pytest_asyncio.fixture
async def client(store, config):
    app = build_app(store, config)
    async with TestClient(TestServer(app)) as client:
        yield client


async def _book(client, headers=None, **overrides):
    resp = await client.post("/api/appointments", json={**BOOKING, **overrides}, headers=headers)
    assert resp.status == 201, await resp.text()
    return await resp.json()


def test_resolve_user(config):
    assert resolve_user(None, config).role == Role.GUEST
    assert resolve_user("admin-secret", config).role == Role.ADMIN
    master = resolve_user("viktoria-key", config)
    assert master.role == Role.MASTER
    assert master.master_id == "master-1"
    assert resolve_user("wrong", config) is None


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status == 200
    assert (await resp.json())["status"] == "ok"


@pytest.mark.asyncio
async def test_unknown_api_key_rejected(client):
    resp = await client.get("/api/services", headers={"X-Api-Key": "wrong"})
    assert resp.status == 401


@pytest.mark.asyncio
async def test_catalog_is_public(client):
    resp = await client.get("/api/services")
    assert resp.status == 200
    services = await resp.json()
    assert services[0] == {
        "id": "svc-1",
        "name": "Манікюр класичний",
        "category": "manicure",
        "duration": 60,
        "price": 500,
        "color": "#8b5cf6",
    }

    resp = await client.get("/api/studio/phone")
    assert (await resp.json())["phone"] == "+380 67 123 4567"


@pytest.mark.asyncio
async def test_guest_books_and_sees_occupancy_only(client):
    created = await _book(client)
    assert created["created_by"] == "guest"
    assert created["duration"] == 90
    assert created["end_time"] == "11:30"

    resp = await client.get("/api/appointments", params={"date": "2025-03-10"})
    day = await resp.json()
    assert len(day) == 1
    assert "client_phone" not in day[0]

    resp = await client.get("/api/appointments", params={"date": "2025-03-10"}, headers=ADMIN)
    assert (await resp.json())[0]["client_phone"] == "+380501112233"


@pytest.mark.asyncio
async def test_guest_cannot_change_bookings(client):
    created = await _book(client)

    resp = await client.patch(f"/api/appointments/{created['id']}", json={"notes": "x"})
    assert resp.status == 403
    resp = await client.delete(f"/api/appointments/{created['id']}")
    assert resp.status == 403
    resp = await client.get("/api/clients")
    assert resp.status == 403


@pytest.mark.asyncio
async def test_master_manages_only_own_bookings(client):
    own = await _book(client)
    other = await _book(client, master_id="master-2", client_phone="0672223344")

    resp = await client.post(
        f"/api/appointments/{own['id']}/move", json={"master_id": "master-1", "start_time": "12:00"},
        headers=VIKTORIA,
    )
    assert resp.status == 200
    assert (await resp.json())["start_time"] == "12:00"

    resp = await client.patch(f"/api/appointments/{other['id']}", json={"notes": "x"}, headers=VIKTORIA)
    assert resp.status == 403

    # Can't hand a booking over to another master's calendar either
    resp = await client.post(
        f"/api/appointments/{own['id']}/move", json={"master_id": "master-2", "start_time": "15:00"},
        headers=VIKTORIA,
    )
    assert resp.status == 403

    resp = await client.post("/api/appointments", json={**BOOKING, "master_id": "master-2"}, headers=VIKTORIA)
    assert resp.status == 403


@pytest.mark.asyncio
async def test_master_cannot_edit_catalog(client):
    resp = await client.post("/api/services", json={"name": "Х", "duration_minutes": 30, "price": 1}, headers=VIKTORIA)
    assert resp.status == 403

    resp = await client.post(
        "/api/services", json={"name": "Парафін", "duration_minutes": 20, "price": 150}, headers=ADMIN
    )
    assert resp.status == 201


@pytest.mark.asyncio
async def test_conflict_maps_to_409(client):
    await _book(client)

    resp = await client.post("/api/appointments", json={**BOOKING, "start_time": "11:00"})
    assert resp.status == 409
    body = await resp.json()
    assert body["type"] == "AppointmentConflictError"
    assert body["details"]["conflicting_id"]


@pytest.mark.asyncio
async def test_move_into_conflict_maps_to_409(client):
    first = await _book(client)
    await _book(client, start_time="14:00", client_phone="0672223344")

    resp = await client.post(
        f"/api/appointments/{first['id']}/move", json={"master_id": "master-1", "start_time": "13:30"},
        headers=ADMIN,
    )
    assert resp.status == 409

    resp = await client.get("/api/appointments", params={"date": "2025-03-10"}, headers=ADMIN)
    assert (await resp.json())[0]["start_time"] == "10:00"


@pytest.mark.asyncio
async def test_validation_errors_map_to_400(client):
    resp = await client.post("/api/appointments", json={**BOOKING, "service_ids": []})
    assert resp.status == 400
    assert (await resp.json())["errors"][0]["field"] == "service_ids"

    resp = await client.post("/api/appointments", json={**BOOKING, "service_ids": ["svc-404"]})
    assert resp.status == 400
    assert (await resp.json())["details"]["field"] == "service_ids"

    resp = await client.get("/api/appointments", params={"date": "10.03.2025"})
    assert resp.status == 400

    resp = await client.post("/api/appointments", data="not json", headers={"Content-Type": "application/json"})
    assert resp.status == 400


@pytest.mark.asyncio
async def test_not_found_maps_to_404(client):
    resp = await client.patch("/api/appointments/nope", json={"notes": "x"}, headers=ADMIN)
    assert resp.status == 404

    resp = await client.delete("/api/masters/nope", headers=ADMIN)
    assert resp.status == 404

    resp = await client.get("/api/clients/nope/analytics", headers=ADMIN)
    assert resp.status == 404


@pytest.mark.asyncio
async def test_stale_version_maps_to_409(client):
    created = await _book(client)

    resp = await client.patch(
        f"/api/appointments/{created['id']}", json={"notes": "перша"}, headers=ADMIN
    )
    assert (await resp.json())["version"] == 2

    resp = await client.patch(
        f"/api/appointments/{created['id']}", json={"notes": "друга", "expected_version": 1}, headers=ADMIN
    )
    assert resp.status == 409
    assert (await resp.json())["type"] == "StaleAppointmentError"


@pytest.mark.asyncio
async def test_complete_and_cash_summary(client):
    created = await _book(client)

    resp = await client.post(f"/api/appointments/{created['id']}/complete", headers=VIKTORIA)
    assert resp.status == 200
    assert (await resp.json())["status"] == "completed"

    resp = await client.post("/api/cash", json={"type": "expense", "amount": 100}, headers=ADMIN)
    assert resp.status == 201

    resp = await client.get("/api/cash/summary", params={"date": "2025-03-01"}, headers=ADMIN)
    assert await resp.json() == {"date": "2025-03-01", "income": 700, "expense": 100, "net": 600}


@pytest.mark.asyncio
async def test_client_analytics_endpoint(client):
    created = await _book(client)

    resp = await client.get(f"/api/clients/{created['client_id']}/analytics", headers=VIKTORIA)
    assert resp.status == 200
    data = await resp.json()
    assert data["total_spent"] == 700
    assert data["favorite_services"][0] == {"id": "svc-1", "name": "Манікюр класичний", "count": 1}

    resp = await client.get(f"/api/clients/{created['client_id']}/recommendations", headers=VIKTORIA)
    assert [s["id"] for s in await resp.json()] == ["svc-1", "svc-3"]


@pytest.mark.asyncio
async def test_notifications_feed(client):
    await _book(client)

    resp = await client.get("/api/notifications", headers=ADMIN)
    feed = await resp.json()
    assert feed["unread"] == 1

    notification_id = feed["notifications"][0]["id"]
    resp = await client.post(f"/api/notifications/{notification_id}/read", headers=ADMIN)
    assert resp.status == 200

    resp = await client.post("/api/notifications/clear", headers=ADMIN)
    assert (await resp.json())["removed"] == 1


@pytest.mark.asyncio
async def test_slots_endpoint(client):
    await _book(client)

    resp = await client.get("/api/masters/master-1/slots", params={"date": "2025-03-10", "duration": "60"})
    slots = await resp.json()
    assert "09:00" in slots
    assert "10:00" not in slots
    assert "11:30" in slots

    resp = await client.get("/api/masters/master-1/slots", params={"date": "2025-03-10", "duration": "x"})
    assert resp.status == 400


@pytest.mark.asyncio
async def test_studio_phone_admin_only(client):
    resp = await client.put("/api/studio/phone", json={"phone": "+380 44 000 0000"}, headers=VIKTORIA)
    assert resp.status == 403

    resp = await client.put("/api/studio/phone", json={"phone": "+380 44 000 0000"}, headers=ADMIN)
    assert resp.status == 200
    resp = await client.get("/api/studio/phone")
    assert (await resp.json())["phone"] == "+380 44 000 0000"


@pytest.mark.asyncio
async def test_completing_twice_is_rejected(client):
    created = await _book(client)

    resp = await client.post(f"/api/appointments/{created['id']}/complete", headers=ADMIN)
    assert resp.status == 200
    resp = await client.post(f"/api/appointments/{created['id']}/complete", headers=ADMIN)
    assert resp.status == 400

    resp = await client.get("/api/cash", headers=ADMIN)
    assert len(await resp.json()) == 1
