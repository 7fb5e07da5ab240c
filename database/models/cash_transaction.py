"""Cash transaction model - append-only studio cash register entry."""
from datetime import datetime
from enum import Enum

from sqlalchemy import String, Integer, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class TransactionType(str, Enum):
    """Cash transaction direction."""
    INCOME = "income"
    EXPENSE = "expense"


class CashTransaction(Base):
    """Cash transaction model."""

    __tablename__ = "cash_transactions"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, comment="Amount in UAH")
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Set when the income comes from a completed appointment
    appointment_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<CashTransaction(id='{self.id}', type='{self.type}', amount={self.amount})>"
