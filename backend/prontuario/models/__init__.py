"""SQLAlchemy models."""

from prontuario.models.event import EventRecord
from prontuario.models.patient import PatientRecord
from prontuario.models.settings import SettingsRecord

__all__ = [
    "EventRecord",
    "PatientRecord",
    "SettingsRecord",
]
