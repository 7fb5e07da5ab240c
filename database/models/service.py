"""Service model - represents a billable catalog item."""
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class Service(Base):
    """Service model."""

    __tablename__ = "services"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Service info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Category: manicure, pedicure, design, etc."
    )
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#8b5cf6")

    # Duration and price
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False, comment="Price in UAH")

    # Catalog order
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    def __repr__(self) -> str:
        return f"<Service(id='{self.id}', name='{self.name}', duration={self.duration_minutes}min, price={self.price})>"
