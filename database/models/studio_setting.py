"""Studio-wide scalar settings stored as key/value rows."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from database.base import Base

STUDIO_PHONE = "studio_phone"


class StudioSetting(Base):
    """Key/value setting."""

    __tablename__ = "studio_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<StudioSetting(key='{self.key}', value='{self.value}')>"
