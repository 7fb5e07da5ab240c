"""Input validation of DTOs."""
from datetime import date

import pytest
from pydantic import ValidationError

from core.dto import (
    CreateAppointmentDTO,
    CreateMasterDTO,
    CreateServiceDTO,
    UpdateAppointmentDTO,
    normalize_phone,
)
from database.models import AppointmentStatus


@pytest.mark.parametrize("raw, expected", [
    ("+380 50 111 22 33", "+380501112233"),
    ("050-111-22-33", "+380501112233"),
    ("80501112233", "+380501112233"),
    ("501112233", "+380501112233"),
    ("+48 601 234 567", "+48601234567"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", ["", "123", "1" * 16])
def test_normalize_phone_rejects(raw):
    with pytest.raises(ValueError):
        normalize_phone(raw)


def test_appointment_dto_normalizes_fields():
    dto = CreateAppointmentDTO(
        client_name="  Олена ",
        client_phone="0501112233",
        master_id="master-1",
        service_ids=["svc-1", "svc-3", "svc-1"],
        date=date(2025, 3, 10),
        start_time="9:00",
    )
    assert dto.client_name == "Олена"
    assert dto.client_phone == "+380501112233"
    assert dto.service_ids == ["svc-1", "svc-3"]
    assert dto.start_time == "09:00"


def test_appointment_dto_requires_services():
    with pytest.raises(ValidationError):
        CreateAppointmentDTO(
            client_name="Олена",
            client_phone="0501112233",
            master_id="master-1",
            service_ids=[],
            date=date(2025, 3, 10),
            start_time="10:00",
        )


def test_appointment_dto_rejects_bad_time():
    with pytest.raises(ValidationError):
        CreateAppointmentDTO(
            client_name="Олена",
            client_phone="0501112233",
            master_id="master-1",
            service_ids=["svc-1"],
            date=date(2025, 3, 10),
            start_time="10h",
        )


def test_update_dto_changes_only_set_fields():
    dto = UpdateAppointmentDTO(start_time="11:00", notes=None, expected_version=2)
    assert dto.changes() == {"start_time": "11:00", "notes": None}

    dto = UpdateAppointmentDTO(status="cancelled", master_id=None)
    assert dto.changes() == {"status": AppointmentStatus.CANCELLED}


def test_service_duration_rounded_to_five_minutes():
    dto = CreateServiceDTO(name="Дизайн", duration_minutes=32, price=200)
    assert dto.duration_minutes == 30


def test_master_schedule_validation():
    dto = CreateMasterDTO(name="Ірина", work_schedule={"monday": [["10:00", "18:00"]]})
    assert dto.work_schedule["monday"] == [["10:00", "18:00"]]

    with pytest.raises(ValidationError):
        CreateMasterDTO(name="Ірина", work_schedule={"funday": [["10:00", "18:00"]]})
    with pytest.raises(ValidationError):
        CreateMasterDTO(name="Ірина", work_schedule={"monday": [["18:00", "10:00"]]})
