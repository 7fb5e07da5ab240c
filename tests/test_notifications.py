"""Tests for NotificationDispatcher."""
import pytest

from conftest import booking


@pytest.mark.asyncio
async def test_booking_emits_notification(engine, notifications):
    appointment = await engine.create_appointment(booking("10:00", service_ids=["svc-1", "svc-3"]))

    feed = await notifications.list_notifications()

    assert len(feed) == 1
    assert feed[0].type == "new-appointment"
    assert feed[0].title == "Новий запис!"
    assert feed[0].message == "Олена записався на 10:00 до Вікторія. Послуг: 2"
    assert feed[0].appointment_id == appointment.id
    assert feed[0].read is False


@pytest.mark.asyncio
async def test_feed_newest_first(engine, notifications):
    await engine.create_appointment(booking("10:00"))
    await notifications.notify_system("Оновлення", "Нова версія розкладу")

    feed = await notifications.list_notifications()

    assert [n.type for n in feed] == ["system", "new-appointment"]


@pytest.mark.asyncio
async def test_mark_read_and_clear(engine, notifications):
    await engine.create_appointment(booking("10:00"))
    await engine.create_appointment(booking("12:00"))
    first, second = await notifications.list_notifications()

    assert await notifications.unread_count() == 2
    assert await notifications.mark_as_read(first.id) is True
    assert await notifications.mark_as_read("nope") is False
    assert await notifications.unread_count() == 1

    assert await notifications.clear_read() == 1
    remaining = await notifications.list_notifications()
    assert [n.id for n in remaining] == [second.id]


@pytest.mark.asyncio
async def test_status_change_notification(engine, notifications):
    appointment = await engine.create_appointment(booking("10:00"))
    await engine.cancel_appointment(appointment.id)

    latest = (await notifications.list_notifications())[0]

    assert latest.type == "status-change"
    assert latest.message == "Запис Олена о 10:00: новий → скасовано"
