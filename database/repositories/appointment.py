"""Appointment repository for database operations."""
from typing import Optional, List
from datetime import date, datetime

from sqlalchemy import select, update, delete

from core.time_utils import day_bounds
from database.models import Appointment, AppointmentStatus
from database.repositories.base import BaseRepository


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository for Appointment model operations."""

    model_class = Appointment
    order_by = (Appointment.start_time, Appointment.created_at, Appointment.id)

    def _active_on(self, day: date):
        day_start, day_end = day_bounds(day)
        return (
            Appointment.status != AppointmentStatus.CANCELLED.value,
            Appointment.start_time >= day_start,
            Appointment.start_time < day_end,
        )

    async def get_for_date(self, day: date) -> List[Appointment]:
        """Non-cancelled appointments starting on a calendar day."""
        result = await self.session.execute(
            select(Appointment).where(*self._active_on(day)).order_by(*self.order_by)
        )
        return list(result.scalars().all())

    async def get_for_master(self, master_id: str, day: date) -> List[Appointment]:
        """Non-cancelled appointments of one master on a calendar day."""
        result = await self.session.execute(
            select(Appointment)
            .where(Appointment.master_id == master_id, *self._active_on(day))
            .order_by(*self.order_by)
        )
        return list(result.scalars().all())

    async def get_by_client(self, client_id: str, include_cancelled: bool = True) -> List[Appointment]:
        """Client's appointments, newest first."""
        query = select(Appointment).where(Appointment.client_id == client_id)
        if not include_cancelled:
            query = query.where(Appointment.status != AppointmentStatus.CANCELLED.value)
        query = query.order_by(Appointment.start_time.desc(), Appointment.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_conflict(
        self,
        master_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[str] = None
    ) -> Optional[Appointment]:
        """
        First appointment whose [start, end) intersects the candidate interval.

        Only the master's non-cancelled appointments starting on the same
        calendar day as the candidate are considered.
        """
        query = select(Appointment).where(
            Appointment.master_id == master_id,
            *self._active_on(start_time.date()),
            Appointment.start_time < end_time,
            Appointment.end_time > start_time,
        )

        if exclude_appointment_id:
            query = query.where(Appointment.id != exclude_appointment_id)

        result = await self.session.execute(query.order_by(*self.order_by).limit(1))
        return result.scalars().first()

    async def create(
        self,
        id: str,
        client_id: Optional[str],
        client_name: str,
        client_phone: str,
        master_id: str,
        service_ids: List[str],
        start_time: datetime,
        end_time: datetime,
        created_at: datetime,
        created_by: str,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Create new appointment."""
        appointment = Appointment(
            id=id,
            client_id=client_id,
            client_name=client_name,
            client_phone=client_phone,
            master_id=master_id,
            service_ids=list(service_ids),
            start_time=start_time,
            end_time=end_time,
            status=AppointmentStatus.NEW.value,
            notes=notes,
            created_at=created_at,
            created_by=created_by,
            version=1,
        )

        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def reschedule(
        self,
        appointment: Appointment,
        master_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Appointment:
        """Move appointment in place."""
        appointment.master_id = master_id
        appointment.start_time = start_time
        appointment.end_time = end_time
        appointment.version += 1
        await self.session.flush()
        return appointment

    async def delete_by_master(self, master_id: str) -> int:
        """Remove every appointment of a master. Returns number of rows removed."""
        result = await self.session.execute(
            delete(Appointment).where(Appointment.master_id == master_id)
        )
        return result.rowcount or 0

    async def detach_client(self, client_id: str) -> int:
        """Unlink appointments from a deleted client; snapshots stay."""
        result = await self.session.execute(
            update(Appointment)
            .where(Appointment.client_id == client_id)
            .values(client_id=None)
        )
        return result.rowcount or 0
