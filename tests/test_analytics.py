"""Tests for ClientAnalyticsService."""
from datetime import date, timedelta

import pytest

from conftest import booking
from core.dto import UpdateServiceDTO


@pytest.mark.asyncio
async def test_spend_and_average_check(engine, analytics):
    """Manicure (500) + design (200) in one visit."""
    appointment = await engine.create_appointment(
        booking("10:00", service_ids=["svc-1", "svc-3"], client_phone="0671234567")
    )

    result = await analytics.get_client_analytics(appointment.client_id)

    assert appointment.duration_minutes == 90
    assert result.total_visits == 1
    assert result.total_spent == 700
    assert result.average_check == 700
    assert result.last_visit_date == appointment.created_at


@pytest.mark.asyncio
async def test_cancelled_visits_ignored(engine, analytics):
    first = await engine.create_appointment(booking("10:00", service_ids=["svc-1"]))
    second = await engine.create_appointment(booking("12:00", service_ids=["svc-2"]))
    await engine.cancel_appointment(second.id)

    result = await analytics.get_client_analytics(first.client_id)

    assert result.total_visits == 1
    assert result.total_spent == 500


@pytest.mark.asyncio
async def test_favorites_by_frequency(engine, analytics):
    await engine.create_appointment(booking("09:00", service_ids=["svc-1", "svc-3"]))
    await engine.create_appointment(booking("09:00", service_ids=["svc-3"], day=date(2025, 3, 11)))
    await engine.create_appointment(booking("09:00", service_ids=["svc-5", "svc-3"], day=date(2025, 3, 12)))
    last = await engine.create_appointment(booking("09:00", service_ids=["svc-5"], day=date(2025, 3, 13)))

    result = await analytics.get_client_analytics(last.client_id)

    assert [(f.service_id, f.count) for f in result.favorite_services] == [
        ("svc-3", 3),
        ("svc-5", 2),
        ("svc-1", 1),
    ]
    assert result.favorite_services[0].service_name == "Дизайн"
    assert result.total_spent == 500 + 200 + 200 + 800 + 200 + 800
    assert result.average_check == result.total_spent / 4


@pytest.mark.asyncio
async def test_favorite_ties_keep_first_seen_order(engine, analytics):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-4", "svc-2"]))

    result = await analytics.get_client_analytics(appointment.client_id)

    assert [f.service_id for f in result.favorite_services] == ["svc-4", "svc-2"]


@pytest.mark.asyncio
async def test_favorite_ties_with_same_creation_time(engine, analytics, clock):
    """Bookings made in the same instant keep their booking order."""
    clock.step = timedelta(0)
    first = await engine.create_appointment(booking("10:00", service_ids=["svc-4"]))
    second = await engine.create_appointment(booking("12:00", service_ids=["svc-2"]))
    assert first.created_at == second.created_at

    result = await analytics.get_client_analytics(first.client_id)

    assert [f.service_id for f in result.favorite_services] == ["svc-4", "svc-2"]


@pytest.mark.asyncio
async def test_spend_uses_current_prices(engine, store, analytics):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-1"]))
    await store.update_service("svc-1", UpdateServiceDTO(price=650))

    result = await analytics.get_client_analytics(appointment.client_id)

    assert result.total_spent == 650


@pytest.mark.asyncio
async def test_deleted_service_counts_zero_and_unknown(engine, store, analytics):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-1", "svc-3"]))
    await store.delete_service("svc-3")

    result = await analytics.get_client_analytics(appointment.client_id)

    assert result.total_spent == 500
    names = {f.service_id: f.service_name for f in result.favorite_services}
    assert names["svc-3"] == "Unknown"


@pytest.mark.asyncio
async def test_unknown_client(analytics):
    assert await analytics.get_client_analytics("nope") is None


@pytest.mark.asyncio
async def test_recommendations(engine, analytics):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-5", "svc-6"]))

    recommended = await analytics.get_recommended_services(appointment.client_id)

    assert [s.id for s in recommended] == ["svc-5", "svc-6"]


@pytest.mark.asyncio
async def test_recommendations_fall_back_to_catalog(analytics):
    recommended = await analytics.get_recommended_services("nope")

    assert [s.id for s in recommended] == ["svc-1", "svc-2", "svc-3"]


@pytest.mark.asyncio
async def test_recommendations_skip_deleted_services(engine, store, analytics):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-6"]))
    await store.delete_service("svc-6")

    recommended = await analytics.get_recommended_services(appointment.client_id)

    assert [s.id for s in recommended] == ["svc-1", "svc-2", "svc-3"]
