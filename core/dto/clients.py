"""Client DTOs for data validation."""
import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def normalize_phone(value: str) -> str:
    """Normalize a phone number to +380XXXXXXXXX form (other countries keep their digits)."""
    digits = re.sub(r'\D', '', value or '')

    if len(digits) < 9 or len(digits) > 15:
        raise ValueError("Невірний формат телефону")

    # Local Ukrainian formats: 0XXXXXXXXX, 80XXXXXXXXX, XXXXXXXXX
    if len(digits) == 10 and digits.startswith('0'):
        digits = '38' + digits
    elif len(digits) == 11 and digits.startswith('80'):
        digits = '3' + digits
    elif len(digits) == 9:
        digits = '380' + digits

    return '+' + digits


class CreateClientDTO(BaseModel):
    """DTO for creating a new client."""

    name: str = Field(..., min_length=1, max_length=100, description="Client name")
    phone: str = Field(..., description="Client phone number")
    notes: Optional[str] = Field(None, max_length=1000, description="Notes about client")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate and normalize phone number."""
        return normalize_phone(v)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Clean and validate name."""
        v = v.strip()
        if not v:
            raise ValueError("Ім'я не може бути порожнім")
        return v


class UpdateClientDTO(BaseModel):
    """DTO for updating a client."""

    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New name")
    phone: Optional[str] = Field(None, description="New phone number")
    notes: Optional[str] = Field(None, max_length=1000, description="Updated notes")
    favorite_services: Optional[list[str]] = Field(None, description="Favorite service ids")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        """Validate and normalize phone number if provided."""
        if v is None:
            return v
        return normalize_phone(v)
