"""Master DTOs for data validation."""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from core.exceptions import InvalidTimeError
from core.time_utils import WEEKDAY_NAMES, parse_time

WorkSchedule = dict[str, list[list[str]]]


def validate_work_schedule(schedule: WorkSchedule) -> WorkSchedule:
    """Check weekday keys and [start, end) HH:MM pairs."""
    for weekday, intervals in schedule.items():
        if weekday not in WEEKDAY_NAMES:
            raise ValueError(f"Невідомий день тижня: {weekday}")
        for interval in intervals:
            if len(interval) != 2:
                raise ValueError(f"Інтервал має містити початок і кінець: {interval}")
            try:
                start, end = parse_time(interval[0]), parse_time(interval[1])
            except InvalidTimeError as e:
                raise ValueError(e.message)
            if start >= end:
                raise ValueError(f"Початок має бути раніше кінця: {interval}")
    return schedule


class CreateMasterDTO(BaseModel):
    """DTO for creating a new master."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    color: str = Field("#8b5cf6", max_length=20, description="Calendar color tag")
    is_active: bool = Field(True, description="Whether master takes bookings")
    work_schedule: WorkSchedule = Field(
        default_factory=dict,
        description='Weekly hours, e.g. {"monday": [["09:00", "18:00"]]}'
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator('work_schedule')
    @classmethod
    def validate_schedule(cls, v: WorkSchedule) -> WorkSchedule:
        return validate_work_schedule(v)


class UpdateMasterDTO(BaseModel):
    """DTO for updating a master."""

    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New name")
    color: Optional[str] = Field(None, max_length=20, description="New color tag")
    is_active: Optional[bool] = Field(None, description="Active status")
    work_schedule: Optional[WorkSchedule] = Field(None, description="New weekly hours")

    @field_validator('work_schedule')
    @classmethod
    def validate_schedule(cls, v: Optional[WorkSchedule]) -> Optional[WorkSchedule]:
        return validate_work_schedule(v) if v is not None else v
