"""Tests for JSON export/import of studio data."""
import json

import pytest
import pytest_asyncio

from conftest import BOOKING_DAY, SequentialIds, booking
from database import close_db, create_engine, create_session_maker, init_db
from database.snapshot import export_snapshot, import_snapshot
from database.store import EntityStore
from services.booking import SchedulingEngine


@pytest_asyncio.fixture
async def empty_store(tmp_path, clock):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'restore.db'}", echo=False)
    await init_db(engine)
    yield EntityStore(create_session_maker(engine), clock=clock, id_factory=SequentialIds("restored"))
    await close_db(engine)


@pytest.mark.asyncio
async def test_export_layout(store, engine):
    await engine.create_appointment(booking("10:00", service_ids=["svc-1", "svc-3"]))
    await store.set_studio_phone("+380 44 000 0000")

    snapshot = await export_snapshot(store)

    assert set(snapshot) == {
        "masters", "services", "clients", "appointments",
        "cash_transactions", "notifications", "studio_phone",
    }
    assert len(snapshot["masters"]) == 3
    assert snapshot["appointments"][0]["start_time"] == "2025-03-10T10:00:00"
    assert snapshot["appointments"][0]["service_ids"] == ["svc-1", "svc-3"]
    assert snapshot["studio_phone"] == "+380 44 000 0000"
    # Must survive a JSON round trip
    json.dumps(snapshot)


@pytest.mark.asyncio
async def test_import_restores_everything(store, engine, empty_store):
    appointment = await engine.create_appointment(booking("10:00"))
    await engine.complete_appointment(appointment.id)
    snapshot = json.loads(json.dumps(await export_snapshot(store)))

    counts = await import_snapshot(empty_store, snapshot)

    assert counts["appointments"] == 1
    assert counts["cash_transactions"] == 1
    restored_engine = SchedulingEngine(empty_store)
    restored = await restored_engine.get_appointment(appointment.id)
    assert restored.start_time == appointment.start_time
    assert restored.status == "completed"
    assert restored.version == 2
    assert await empty_store.get_client_by_phone("+380501112233") is not None
    assert await export_snapshot(empty_store) == snapshot


@pytest.mark.asyncio
async def test_import_replaces_existing_data(store, engine):
    snapshot = await export_snapshot(store)
    await engine.create_appointment(booking("10:00"))

    await import_snapshot(store, snapshot)

    assert await engine.get_appointments_for_date(BOOKING_DAY) == []
    assert await store.list_clients() == []


@pytest.mark.asyncio
async def test_restored_store_keeps_booking_rules(store, engine, empty_store):
    await engine.create_appointment(booking("10:00"))
    await import_snapshot(empty_store, await export_snapshot(store))
    restored_engine = SchedulingEngine(empty_store)

    assert await restored_engine.is_time_slot_available("master-1", BOOKING_DAY, "10:30", 30) is False
    assert await restored_engine.is_time_slot_available("master-1", BOOKING_DAY, "11:00", 30) is True
