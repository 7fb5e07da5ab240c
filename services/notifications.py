"""Notification feed: creation on booking events, read tracking and cleanup."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from core.time_utils import format_time
from database.models import Appointment, Notification, NotificationType
from database.repositories import NotificationRepository
from database.store import EntityStore

logger = logging.getLogger(__name__)

STATUS_TITLES = {
    "new": "новий",
    "confirmed": "підтверджено",
    "completed": "завершено",
    "cancelled": "скасовано",
}


class NotificationDispatcher:
    """Emits lifecycle notifications and serves the feed."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def notify_new_appointment(
        self,
        session: AsyncSession,
        appointment: Appointment,
        master_name: str,
    ) -> Notification:
        """
        Add a new-booking notification for the master.

        Runs inside the caller's transaction so the notification exists
        only if the booking itself is committed.
        """
        message = (
            f"{appointment.client_name} записався на {format_time(appointment.start_time)} "
            f"до {master_name}. Послуг: {len(appointment.service_ids)}"
        )
        notification = await NotificationRepository(session).create(
            id=self.store.new_id(),
            title="Новий запис!",
            message=message,
            type=NotificationType.NEW_APPOINTMENT,
            created_at=self.store.now(),
            appointment_id=appointment.id,
        )
        logger.debug(
            "New-appointment notification queued",
            extra={"appointment_id": appointment.id, "master_id": appointment.master_id},
        )
        return notification

    async def notify_status_change(
        self,
        session: AsyncSession,
        appointment: Appointment,
        old_status: str,
        new_status: str,
    ) -> Notification:
        message = (
            f"Запис {appointment.client_name} о {format_time(appointment.start_time)}: "
            f"{STATUS_TITLES.get(old_status, old_status)} → {STATUS_TITLES.get(new_status, new_status)}"
        )
        return await NotificationRepository(session).create(
            id=self.store.new_id(),
            title="Статус запису змінено",
            message=message,
            type=NotificationType.STATUS_CHANGE,
            created_at=self.store.now(),
            appointment_id=appointment.id,
        )

    async def notify_system(self, title: str, message: str) -> Notification:
        async with self.store.session() as session:
            return await NotificationRepository(session).create(
                id=self.store.new_id(),
                title=title,
                message=message,
                type=NotificationType.SYSTEM,
                created_at=self.store.now(),
            )

    async def list_notifications(self) -> List[Notification]:
        """Feed, newest first."""
        async with self.store.session() as session:
            return await NotificationRepository(session).get_all()

    async def mark_as_read(self, notification_id: str) -> bool:
        async with self.store.session() as session:
            return await NotificationRepository(session).mark_as_read(notification_id)

    async def clear_read(self) -> int:
        """Remove every notification that was already read."""
        async with self.store.session() as session:
            removed = await NotificationRepository(session).delete_read()
        logger.info(f"Cleared {removed} read notification(s)")
        return removed

    async def unread_count(self) -> int:
        async with self.store.session() as session:
            return await NotificationRepository(session).count_unread()
