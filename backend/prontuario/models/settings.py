"""SQLAlchemy model for the settings collection."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from prontuario.database import Base


class SettingsRecord(Base):
    """Key/value settings row. The app uses a single well-known key."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<SettingsRecord(key={self.key})>"
