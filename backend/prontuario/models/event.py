"""SQLAlchemy model for the events collection."""

from typing import Any

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from prontuario.database import Base


class EventRecord(Base):
    """Timeline event stored as its full JSON record.

    Rows are inserted and deleted, never updated. ``patient_id`` carries no
    foreign key: imported backups may reference patients that are gone.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Secondary indexes
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    # Canonical record, camelCase as exported
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (Index("idx_events_patient_created", "patient_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<EventRecord(id={self.id}, type={self.type}, patient_id={self.patient_id})>"
