"""Notification repository for database operations."""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, func, delete

from database.models import Notification, NotificationType
from database.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for the notification feed."""

    model_class = Notification
    order_by = (Notification.created_at.desc(), Notification.id.desc())

    async def create(
        self,
        id: str,
        title: str,
        message: str,
        type: NotificationType,
        created_at: datetime,
        appointment_id: Optional[str] = None,
    ) -> Notification:
        """Create unread notification."""
        notification = Notification(
            id=id,
            title=title,
            message=message,
            type=NotificationType(type).value,
            read=False,
            appointment_id=appointment_id,
            created_at=created_at,
        )
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def mark_as_read(self, notification_id: str) -> bool:
        notification = await self.get_by_id(notification_id)
        if notification is None:
            return False
        notification.read = True
        await self.session.flush()
        return True

    async def delete_read(self) -> int:
        """Remove every read notification. Returns number of rows removed."""
        result = await self.session.execute(
            delete(Notification).where(Notification.read.is_(True))
        )
        return result.rowcount or 0

    async def count_unread(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Notification).where(Notification.read.is_(False))
        )
        return result.scalar() or 0
