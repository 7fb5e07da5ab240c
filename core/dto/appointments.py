"""Appointment DTOs for data validation."""
import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from core.dto.clients import normalize_phone
from core.exceptions import InvalidTimeError
from core.time_utils import parse_time
from database.models.appointment import AppointmentStatus


def _validate_hhmm(v: str) -> str:
    try:
        t = parse_time(v)
    except InvalidTimeError as e:
        raise ValueError(e.message)
    return f"{t.hour:02d}:{t.minute:02d}"


def _unique(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class CreateAppointmentDTO(BaseModel):
    """DTO for booking a new appointment."""

    client_name: str = Field(..., min_length=1, max_length=100, description="Client name")
    client_phone: str = Field(..., description="Client phone, natural key of the client")
    master_id: str = Field(..., description="Master ID")
    service_ids: list[str] = Field(..., min_length=1, description="Requested services")
    date: dt.date = Field(..., description="Calendar day of the visit")
    start_time: str = Field(..., description="Start time, HH:MM")
    notes: Optional[str] = Field(None, max_length=1000, description="Optional notes")

    @field_validator('client_phone')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator('client_name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _validate_hhmm(v)

    @field_validator('service_ids')
    @classmethod
    def validate_service_ids(cls, v: list[str]) -> list[str]:
        """Service ids form a set; keep first occurrence order."""
        return _unique(v)


class UpdateAppointmentDTO(BaseModel):
    """DTO for patching an appointment. Only fields that were set are applied."""

    client_name: Optional[str] = Field(None, min_length=1, max_length=100)
    client_phone: Optional[str] = Field(None)
    master_id: Optional[str] = Field(None)
    service_ids: Optional[list[str]] = Field(None, min_length=1)
    date: Optional[dt.date] = Field(None)
    start_time: Optional[str] = Field(None, description="New start time, HH:MM")
    status: Optional[AppointmentStatus] = Field(None)
    notes: Optional[str] = Field(None, max_length=1000)
    expected_version: Optional[int] = Field(None, description="Reject the patch if the appointment changed")

    @field_validator('client_phone')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v is not None else v

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, v: Optional[str]) -> Optional[str]:
        return _validate_hhmm(v) if v is not None else v

    @field_validator('service_ids')
    @classmethod
    def validate_service_ids(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _unique(v) if v is not None else v

    def changes(self) -> dict:
        """Explicitly set fields, without the concurrency token. Only notes may be cleared with None."""
        fields = self.model_dump(exclude_unset=True, exclude={"expected_version"})
        return {k: v for k, v in fields.items() if v is not None or k == "notes"}


class MoveAppointmentDTO(BaseModel):
    """DTO for drag-and-drop rescheduling within the same day."""

    master_id: str = Field(..., description="Target master")
    start_time: str = Field(..., description="New start time, HH:MM")
    expected_version: Optional[int] = Field(None)

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _validate_hhmm(v)


class CompleteAppointmentDTO(BaseModel):
    """DTO for completing an appointment."""

    payment_amount: Optional[int] = Field(None, ge=0, description="Amount charged, defaults to service prices")
