"""SQLAlchemy model for the patients collection."""

from typing import Any

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from prontuario.database import Base


class PatientRecord(Base):
    """Patient profile stored as its full JSON record.

    ``updated_at`` is lifted out of the record so the directory can be
    listed most-recently-updated first without decoding every row.
    """

    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Canonical record, camelCase as exported
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (Index("idx_patients_updated_at", "updated_at"),)

    def __repr__(self) -> str:
        return f"<PatientRecord(id={self.id}, updated_at={self.updated_at})>"
