"""Backup snapshot schema."""

from typing import Any

from pydantic import Field, field_validator

from prontuario.schemas.common import RecordModel
from prontuario.schemas.event import Event
from prontuario.schemas.patient import Patient


class Snapshot(RecordModel):
    """Full serialization of settings, patients and events.

    ``patients`` and ``events`` are required; a payload without them is not
    a backup.
    """

    version: int = 1
    exported_at: int = 0
    settings: dict[str, Any] = Field(default_factory=dict)
    patients: list[Patient]
    events: list[Event]

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_default(cls, value: Any) -> Any:
        return {} if value is None else value
