"""
Scheduling engine: slot availability, booking, rescheduling and status changes.

Every write that depends on an availability check runs while the affected
(master, day) buckets are held and inside a single database transaction, so
the check and the write are observed together or not at all.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import CreateAppointmentDTO, CreateTransactionDTO, UpdateAppointmentDTO
from core.exceptions import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    StaleAppointmentError,
    ValidationError,
)
from core.time_utils import (
    combine,
    generate_half_hour_slots,
    intervals_overlap,
    parse_work_schedule,
    time_to_minutes,
)
from database.models import Appointment, AppointmentStatus, Client, Service, TransactionType
from database.repositories import (
    AppointmentRepository,
    ClientRepository,
    MasterRepository,
    ServiceRepository,
)
from database.store import EntityStore
from services.cash_ledger import CashLedger
from services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

CANCELLED = AppointmentStatus.CANCELLED.value
COMPLETED = AppointmentStatus.COMPLETED.value
# Fields whose change moves the appointment's interval
INTERVAL_FIELDS = {"master_id", "service_ids", "date", "start_time"}


def total_duration(services: Sequence[Service]) -> int:
    return sum(s.duration_minutes for s in services)


def total_price(services: Sequence[Service]) -> int:
    return sum(s.price for s in services)


class SchedulingEngine:
    """Booking operations over the entity store."""

    def __init__(
        self,
        store: EntityStore,
        notifications: Optional[NotificationDispatcher] = None,
        ledger: Optional[CashLedger] = None,
    ):
        self.store = store
        self.notifications = notifications or NotificationDispatcher(store)
        self.ledger = ledger or CashLedger(store)

    # ========== Availability ==========

    async def is_time_slot_available(
        self,
        master_id: str,
        day: date,
        start_time: str,
        duration_minutes: int,
        exclude_appointment_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether [start, start + duration) is free for the master on that day.

        Args:
            master_id: Master whose calendar is checked
            day: Calendar day
            start_time: HH:MM
            duration_minutes: Length of the candidate interval
            exclude_appointment_id: Appointment to ignore (the one being moved)

        Returns:
            False iff a non-cancelled appointment of the master on that day
            overlaps the candidate interval. Touching intervals are free.

        Raises:
            InvalidTimeError: If start_time is not HH:MM
            ValidationError: If duration is negative
        """
        time_to_minutes(start_time)
        if duration_minutes < 0:
            raise ValidationError("duration_minutes", "Тривалість не може бути від'ємною")

        start = combine(day, start_time)
        end = start + timedelta(minutes=duration_minutes)
        async with self.store.session() as session:
            conflict = await AppointmentRepository(session).find_conflict(
                master_id, start, end, exclude_appointment_id
            )
        return conflict is None

    async def get_available_slots(self, master_id: str, day: date, duration_minutes: int) -> List[str]:
        """Half-hour start times within the master's working hours that can take the duration."""
        async with self.store.session() as session:
            master = await MasterRepository(session).get_by_id(master_id)
            if master is None or not master.is_active:
                return []
            intervals = parse_work_schedule(master.work_schedule, day)
            if not intervals:
                return []
            busy = await AppointmentRepository(session).get_for_master(master_id, day)

        length = timedelta(minutes=duration_minutes)
        slots = []
        for work_start, work_end in intervals:
            for start in generate_half_hour_slots(work_start, work_end, day, duration_minutes):
                end = start + length
                if not any(intervals_overlap(start, end, a.start_time, a.end_time) for a in busy):
                    slots.append(start.strftime("%H:%M"))
        return slots

    # ========== Booking ==========

    async def create_appointment(self, data: CreateAppointmentDTO, created_by: str = "guest") -> Appointment:
        """
        Book an appointment and upsert the client keyed by phone.

        Args:
            data: Validated booking request
            created_by: Caller identity recorded for audit

        Returns:
            Created Appointment with status "new"

        Raises:
            ValidationError: If the master or any service is unknown
            AppointmentConflictError: If the interval overlaps another booking
            SlotBusyError: If the master's day stayed locked past the timeout
        """
        async with self.store.locks.hold((data.master_id, data.date)):
            async with self.store.session() as session:
                master = await MasterRepository(session).get_by_id(data.master_id)
                if master is None:
                    raise ValidationError("master_id", f"Невідомий майстер: {data.master_id}")

                services = await self._resolve_services(session, data.service_ids)
                start = combine(data.date, data.start_time)
                end = start + timedelta(minutes=total_duration(services))

                arepo = AppointmentRepository(session)
                conflict = await arepo.find_conflict(master.id, start, end)
                if conflict is not None:
                    raise AppointmentConflictError(conflict.id, start, end)

                now = self.store.now()
                client = await self._upsert_client(session, data, now)
                appointment = await arepo.create(
                    id=self.store.new_id(),
                    client_id=client.id,
                    client_name=data.client_name,
                    client_phone=data.client_phone,
                    master_id=master.id,
                    service_ids=data.service_ids,
                    start_time=start,
                    end_time=end,
                    created_at=now,
                    created_by=created_by,
                    notes=data.notes,
                )
                await self.notifications.notify_new_appointment(session, appointment, master.name)

        logger.info(
            f"Appointment booked {start:%Y-%m-%d %H:%M}-{end:%H:%M}",
            extra={"appointment_id": appointment.id, "master_id": master.id, "client_id": client.id},
        )
        return appointment

    async def _resolve_services(self, session: AsyncSession, service_ids: List[str]) -> List[Service]:
        services = await ServiceRepository(session).get_by_ids(service_ids)
        if len(services) != len(service_ids):
            known = {s.id for s in services}
            missing = [sid for sid in service_ids if sid not in known]
            raise ValidationError("service_ids", f"Невідомі послуги: {', '.join(missing)}")
        return services

    async def _upsert_client(self, session: AsyncSession, data: CreateAppointmentDTO, now: datetime) -> Client:
        crepo = ClientRepository(session)
        client = await crepo.get_by_phone(data.client_phone)
        if client is not None:
            return await crepo.register_visit(client, now)
        return await crepo.create(
            id=self.store.new_id(),
            name=data.client_name,
            phone=data.client_phone,
            created_at=now,
            total_visits=1,
            last_visit=now,
            favorite_services=data.service_ids,
        )

    # ========== Rescheduling ==========

    async def move_appointment(
        self,
        appointment_id: str,
        new_master_id: str,
        new_start_time: str,
        expected_version: Optional[int] = None,
    ) -> bool:
        """
        Move an appointment to another master and/or time on the same day.

        Returns:
            True if moved, False if the target interval is taken (nothing changes)

        Raises:
            AppointmentNotFoundError: If the appointment doesn't exist
            ValidationError: If the target master is unknown or the time malformed
            StaleAppointmentError: If expected_version no longer matches
        """
        time_to_minutes(new_start_time)
        current = await self._snapshot(appointment_id)
        day = current.start_time.date()

        async with self.store.locks.hold((current.master_id, day), (new_master_id, day)):
            async with self.store.session() as session:
                arepo = AppointmentRepository(session)
                appointment = await self._load_for_write(arepo, appointment_id, current, expected_version)

                if not await MasterRepository(session).exists(new_master_id):
                    raise ValidationError("master_id", f"Невідомий майстер: {new_master_id}")

                services = await ServiceRepository(session).get_by_ids(appointment.service_ids)
                start = combine(day, new_start_time)
                end = start + timedelta(minutes=total_duration(services))

                conflict = await arepo.find_conflict(new_master_id, start, end, appointment.id)
                if conflict is not None:
                    logger.info(
                        f"Move rejected, overlaps {conflict.id}",
                        extra={"appointment_id": appointment.id, "master_id": new_master_id},
                    )
                    return False

                await arepo.reschedule(appointment, new_master_id, start, end)

        logger.info(
            f"Appointment moved to {new_master_id} at {new_start_time}",
            extra={"appointment_id": appointment_id, "master_id": new_master_id},
        )
        return True

    # ========== Generic updates ==========

    async def update_appointment(self, appointment_id: str, data: UpdateAppointmentDTO) -> bool:
        """
        Patch an appointment.

        Changes to master, services, date or start time, and re-activating a
        cancelled appointment, go through the same availability check as a
        new booking. A status change adds a status-change notification.
        Setting the status to completed records the income exactly like
        complete_appointment; a completed appointment can't be reopened.

        Raises:
            AppointmentNotFoundError: If the appointment doesn't exist
            ValidationError: If a referenced master or service is unknown,
                or the appointment is already completed and the status changes
            AppointmentConflictError: If the new interval is taken
            StaleAppointmentError: If expected_version no longer matches
        """
        changes = data.changes()
        current = await self._snapshot(appointment_id)
        old_day = current.start_time.date()
        new_day = changes.get("date") or old_day
        new_master_id = changes.get("master_id") or current.master_id

        async with self.store.locks.hold((current.master_id, old_day), (new_master_id, new_day)):
            async with self.store.session() as session:
                arepo = AppointmentRepository(session)
                appointment = await self._load_for_write(arepo, appointment_id, current, data.expected_version)
                old_status = appointment.status
                new_status = changes.get("status", old_status)
                if isinstance(new_status, AppointmentStatus):
                    new_status = new_status.value
                if old_status == COMPLETED and new_status != COMPLETED:
                    raise ValidationError("status", "Завершений запис не можна повернути в роботу")

                reactivated = old_status == CANCELLED and new_status != CANCELLED
                if INTERVAL_FIELDS & changes.keys() or reactivated:
                    await self._apply_interval(
                        session, appointment, changes, new_day, new_master_id,
                        check=new_status != CANCELLED,
                    )

                for field in ("client_name", "client_phone", "notes"):
                    if field in changes:
                        setattr(appointment, field, changes[field])
                if new_status == COMPLETED and old_status != COMPLETED:
                    await self._complete(session, appointment, None)
                elif new_status != old_status:
                    appointment.status = new_status
                    await self.notifications.notify_status_change(session, appointment, old_status, new_status)
                appointment.version += 1

        logger.info(
            f"Appointment updated: {', '.join(sorted(changes)) or 'no fields'}",
            extra={"appointment_id": appointment_id},
        )
        return True

    async def _apply_interval(
        self,
        session: AsyncSession,
        appointment: Appointment,
        changes: dict,
        day: date,
        master_id: str,
        check: bool = True,
    ) -> None:
        """Recompute start/end from the patched fields; with check, reject overlaps."""
        if "master_id" in changes and not await MasterRepository(session).exists(master_id):
            raise ValidationError("master_id", f"Невідомий майстер: {master_id}")

        if "service_ids" in changes:
            service_ids = changes["service_ids"]
            services = await self._resolve_services(session, service_ids)
        else:
            service_ids = appointment.service_ids
            services = await ServiceRepository(session).get_by_ids(service_ids)

        start_time = changes.get("start_time") or appointment.start_time.strftime("%H:%M")
        start = combine(day, start_time)
        end = start + timedelta(minutes=total_duration(services))

        if check:
            conflict = await AppointmentRepository(session).find_conflict(master_id, start, end, appointment.id)
            if conflict is not None:
                raise AppointmentConflictError(conflict.id, start, end)

        appointment.master_id = master_id
        appointment.service_ids = list(service_ids)
        appointment.start_time = start
        appointment.end_time = end

    async def cancel_appointment(self, appointment_id: str, reason: Optional[str] = None) -> bool:
        """Mark cancelled; the reason is appended to the notes."""
        current = await self._snapshot(appointment_id)
        notes = current.notes
        if reason:
            notes = f"{notes}\n" if notes else ""
            notes += f"Скасовано: {reason}"
        return await self.update_appointment(
            appointment_id,
            UpdateAppointmentDTO(status=AppointmentStatus.CANCELLED, notes=notes),
        )

    async def complete_appointment(self, appointment_id: str, payment_amount: Optional[int] = None) -> Appointment:
        """
        Mark completed and record the payment as income in the cash ledger.

        The amount defaults to the current prices of the appointment's services.

        Raises:
            ValidationError: If the appointment is already completed
        """
        current = await self._snapshot(appointment_id)
        async with self.store.locks.hold((current.master_id, current.start_time.date())):
            async with self.store.session() as session:
                arepo = AppointmentRepository(session)
                appointment = await self._load_for_write(arepo, appointment_id, current, None)
                if appointment.status == COMPLETED:
                    raise ValidationError("status", "Запис вже завершено")
                amount = await self._complete(session, appointment, payment_amount)
                appointment.version += 1

        logger.info(f"Appointment completed, paid {amount}", extra={"appointment_id": appointment_id})
        return appointment

    async def _complete(
        self,
        session: AsyncSession,
        appointment: Appointment,
        payment_amount: Optional[int],
    ) -> int:
        """Set completed, record the income and notify; returns the amount charged."""
        arepo = AppointmentRepository(session)
        old_status = appointment.status
        if not appointment.is_active:
            conflict = await arepo.find_conflict(
                appointment.master_id, appointment.start_time, appointment.end_time, appointment.id
            )
            if conflict is not None:
                raise AppointmentConflictError(conflict.id, appointment.start_time, appointment.end_time)

        services = await ServiceRepository(session).get_by_ids(appointment.service_ids)
        amount = total_price(services) if payment_amount is None else payment_amount

        appointment.status = COMPLETED
        await self.ledger.record(
            session,
            CreateTransactionDTO(
                type=TransactionType.INCOME,
                amount=amount,
                category="services",
                description=f"Оплата: {appointment.client_name}, {', '.join(s.name for s in services)}",
                appointment_id=appointment.id,
            ),
        )
        await self.notifications.notify_status_change(session, appointment, old_status, COMPLETED)
        return amount

    async def delete_appointment(self, appointment_id: str) -> bool:
        async with self.store.session() as session:
            deleted = await AppointmentRepository(session).delete(appointment_id)
        if deleted:
            logger.info("Appointment deleted", extra={"appointment_id": appointment_id})
        return deleted

    async def _snapshot(self, appointment_id: str) -> Appointment:
        """Read the appointment before locking, to know which buckets it lives in."""
        async with self.store.session() as session:
            appointment = await AppointmentRepository(session).get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    async def _load_for_write(
        self,
        arepo: AppointmentRepository,
        appointment_id: str,
        snapshot: Appointment,
        expected_version: Optional[int],
    ) -> Appointment:
        """Re-read under the bucket lock and reject writes based on outdated data."""
        appointment = await arepo.get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        if expected_version is not None and appointment.version != expected_version:
            raise StaleAppointmentError(appointment_id, expected_version, appointment.version)
        moved = (appointment.master_id, appointment.start_time.date()) != (
            snapshot.master_id, snapshot.start_time.date()
        )
        if moved:
            # Left the locked buckets between the unlocked read and acquiring them
            raise StaleAppointmentError(appointment_id, snapshot.version, appointment.version)
        return appointment

    # ========== Reads ==========

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        async with self.store.session() as session:
            return await AppointmentRepository(session).get_by_id(appointment_id)

    async def get_appointments_for_date(self, day: date) -> List[Appointment]:
        """Non-cancelled appointments of all masters on a day, by start time."""
        async with self.store.session() as session:
            return await AppointmentRepository(session).get_for_date(day)

    async def get_appointments_for_master(self, master_id: str, day: date) -> List[Appointment]:
        async with self.store.session() as session:
            return await AppointmentRepository(session).get_for_master(master_id, day)

    async def get_client_visits(self, client_id: str) -> List[Appointment]:
        """All of a client's appointments, newest first."""
        async with self.store.session() as session:
            return await AppointmentRepository(session).get_by_client(client_id)
