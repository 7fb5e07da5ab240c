"""Master model - represents a staff member who owns a calendar."""
from sqlalchemy import String, Boolean, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base


class Master(Base):
    """Master (nail technician) model."""

    __tablename__ = "masters"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Personal info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#8b5cf6")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Working schedule (JSON format: {"monday": [["09:00", "18:00"]], "tuesday": ...})
    work_schedule: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Position in the admin list
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Master(id='{self.id}', name='{self.name}', active={self.is_active})>"
