"""Patient schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from prontuario.schemas.common import OptionalDate, RecordModel


class Patient(RecordModel):
    """Stored patient profile."""

    id: str
    name: str
    identifier: str = Field(default="", description="National ID (CPF/CNS)")
    phone: str = ""
    birth: OptionalDate = None
    notes: str = Field(default="", description="Allergies, alerts, free text")
    created_at: int
    updated_at: int


class PatientDraft(RecordModel):
    """Patient form contents. ``id`` is set when editing an existing patient."""

    id: str | None = None
    name: str = ""
    identifier: str = ""
    phone: str = ""
    birth: OptionalDate = None
    notes: str = ""


class PatientAlert(BaseModel):
    """Badge shown next to the current patient."""

    level: Literal["warn", "ok", "accent"]
    text: str


class PatientListResponse(BaseModel):
    """Patient list, most recently updated first."""

    items: list[Patient]
    total: int
