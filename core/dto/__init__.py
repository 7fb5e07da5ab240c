"""
Data Transfer Objects (DTOs) for data validation.

This package contains Pydantic models for validating input data.
"""

from core.dto.appointments import (
    CreateAppointmentDTO,
    UpdateAppointmentDTO,
    MoveAppointmentDTO,
    CompleteAppointmentDTO,
)
from core.dto.clients import (
    CreateClientDTO,
    UpdateClientDTO,
    normalize_phone,
)
from core.dto.services import (
    CreateServiceDTO,
    UpdateServiceDTO,
)
from core.dto.masters import (
    CreateMasterDTO,
    UpdateMasterDTO,
)
from core.dto.cash import CreateTransactionDTO

__all__ = [
    'CreateAppointmentDTO',
    'UpdateAppointmentDTO',
    'MoveAppointmentDTO',
    'CompleteAppointmentDTO',
    'CreateClientDTO',
    'UpdateClientDTO',
    'normalize_phone',
    'CreateServiceDTO',
    'UpdateServiceDTO',
    'CreateMasterDTO',
    'UpdateMasterDTO',
    'CreateTransactionDTO',
]
