"""Client model - represents a studio client, deduplicated by phone."""
from datetime import datetime

from sqlalchemy import String, Text, DateTime, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class Client(Base):
    """Client model."""

    __tablename__ = "clients"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Personal info
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Notes about client (allergies, preferences, etc.)"
    )

    # Statistics
    last_visit: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    total_visits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    favorite_services: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Client(id='{self.id}', name='{self.name}', phone='{self.phone}')>"
