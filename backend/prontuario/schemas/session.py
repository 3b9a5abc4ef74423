"""Pydantic schemas for the application session and dashboard."""

from pydantic import Field

from prontuario.schemas.common import RecordModel
from prontuario.schemas.event import Event


class SelectionUpdate(RecordModel):
    """Move the selection cursor; ``None`` clears it."""

    patient_id: str | None = None


class SelectionResponse(RecordModel):
    patient_id: str | None = None


class GlobalSearchResponse(RecordModel):
    """Result of a search across every patient field."""

    query: str
    patient_id: str | None = None


class RecentEvent(RecordModel):
    """Dashboard row: an event with its patient's name resolved."""

    event: Event
    patient_name: str = Field(description="Patient name, or an em dash if the patient is gone")
    type_label: str


class DashboardResponse(RecordModel):
    patient_count: int
    event_count: int
    recent: list[RecentEvent]
