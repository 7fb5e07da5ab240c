"""Notification model - in-app feed entries for staff."""
from datetime import datetime
from enum import Enum

from sqlalchemy import String, Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class NotificationType(str, Enum):
    """Notification kind."""
    NEW_APPOINTMENT = "new-appointment"
    STATUS_CHANGE = "status-change"
    SYSTEM = "system"


class Notification(Base):
    """Notification model."""

    __tablename__ = "notifications"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, default=NotificationType.SYSTEM.value)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    appointment_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Notification(id='{self.id}', type='{self.type}', read={self.read})>"
