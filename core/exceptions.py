"""
Custom application exceptions.

These exceptions represent business logic errors raised by the booking engine.
The boundary layer translates them into user-facing responses; the engine only
carries the kind of failure and a minimal context (conflicting appointment,
offending field).
"""
from datetime import datetime
from typing import Optional


class NailsStudioError(Exception):
    """Base exception for all application errors."""

    message: str = "Сталася помилка"

    def __init__(self, message: Optional[str] = None, **kwargs):
        self.message = message or self.message
        self.details = kwargs
        super().__init__(self.message)


# ============== Authorization ==============

class PermissionDeniedError(NailsStudioError):
    """Caller's role doesn't allow this action."""
    message = "Доступ заборонено"


# ============== Validation ==============

class ValidationError(NailsStudioError):
    """Data validation error."""
    message = "Помилка валідації"

    def __init__(self, field: str, error: str):
        self.field = field
        self.error = error
        super().__init__(f"Помилка в полі '{field}': {error}", field=field)


class InvalidTimeError(ValidationError):
    """Invalid time format."""
    def __init__(self, value: str, field: str = "start_time"):
        self.value = value
        super().__init__(field, f"Невірний формат часу: {value}")


# ============== Not found ==============

class NotFoundError(NailsStudioError):
    """Operation targets an identity that does not exist."""
    message = "Не знайдено"
    entity: str = "entity"

    def __init__(self, entity_id: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(
            f"{self.message}: {entity_id}" if entity_id else self.message,
            entity=self.entity,
            entity_id=entity_id,
        )


class AppointmentNotFoundError(NotFoundError):
    """Appointment not found."""
    message = "Запис не знайдено"
    entity = "appointment"


class MasterNotFoundError(NotFoundError):
    """Master not found."""
    message = "Майстра не знайдено"
    entity = "master"


class ServiceNotFoundError(NotFoundError):
    """Service not found."""
    message = "Послугу не знайдено"
    entity = "service"


class ClientNotFoundError(NotFoundError):
    """Client not found."""
    message = "Клієнта не знайдено"
    entity = "client"


# ============== Appointments ==============

class AppointmentConflictError(NailsStudioError):
    """Requested interval is already taken."""
    message = "Обраний час вже зайнятий"

    def __init__(
        self,
        conflicting_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        message: Optional[str] = None,
    ):
        self.conflicting_id = conflicting_id
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(message, conflicting_id=conflicting_id)


class SlotBusyError(AppointmentConflictError):
    """Another booking for the same master and day is still in progress."""
    message = "Розклад майстра зараз змінюється, спробуйте ще раз"

    def __init__(self, master_id: str, day):
        self.master_id = master_id
        self.day = day
        super().__init__()


class StaleAppointmentError(AppointmentConflictError):
    """Appointment changed since the caller last read it."""
    message = "Запис було змінено, оновіть дані"

    def __init__(self, appointment_id: str, expected_version: int, actual_version: int):
        self.appointment_id = appointment_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(conflicting_id=appointment_id)


# ============== Clients ==============

class DuplicateClientError(NailsStudioError):
    """Client with this phone already exists."""
    message = "Клієнт з таким телефоном вже існує"

    def __init__(self, phone: str):
        self.phone = phone
        super().__init__(phone=phone)
