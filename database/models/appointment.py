"""Appointment model - represents client booking."""
from datetime import datetime
from enum import Enum

from sqlalchemy import String, Integer, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class AppointmentStatus(str, Enum):
    """Appointment status enum."""
    NEW = "new"  # Новий
    CONFIRMED = "confirmed"  # Підтверджений
    COMPLETED = "completed"  # Завершений
    CANCELLED = "cancelled"  # Скасований


class Appointment(Base):
    """Appointment model."""

    __tablename__ = "appointments"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Client link plus snapshot taken at booking time
    client_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_phone: Mapped[str] = mapped_column(String(20), nullable=False)

    master_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("masters.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Service ids, not a foreign key: deleting a service leaves them dangling
    service_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Appointment details
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=AppointmentStatus.NEW.value,
        nullable=False,
        index=True
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="guest")

    # Optimistic concurrency counter, bumped on every mutation
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED.value

    def __repr__(self) -> str:
        return (
            f"<Appointment(id='{self.id}', master_id='{self.master_id}', "
            f"client_id='{self.client_id}', start_time={self.start_time}, status='{self.status}')>"
        )
