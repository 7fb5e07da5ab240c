"""Cash ledger DTOs."""
from typing import Optional
from pydantic import BaseModel, Field

from database.models.cash_transaction import TransactionType


class CreateTransactionDTO(BaseModel):
    """DTO for appending a cash transaction."""

    type: TransactionType = Field(..., description="income or expense")
    amount: int = Field(..., description="Amount in UAH")
    category: Optional[str] = Field(None, max_length=100, description="Free-text category")
    description: Optional[str] = Field(None, max_length=500, description="Free-text description")
    appointment_id: Optional[str] = Field(None, description="Linked appointment, if any")
