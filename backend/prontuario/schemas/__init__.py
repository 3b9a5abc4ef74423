"""Pydantic schemas."""

from prontuario.schemas.backup import Snapshot
from prontuario.schemas.event import (
    BudgetCreate,
    BudgetEvent,
    BudgetPayload,
    CertificateCreate,
    CertificateEvent,
    CertificatePayload,
    ClinicalNoteCreate,
    ClinicalNoteEvent,
    DocumentCreate,
    Event,
    EventType,
    PrescriptionCreate,
    PrescriptionEvent,
    PrescriptionItem,
    PrescriptionPayload,
    ReceiptCreate,
    ReceiptEvent,
    ReceiptPayload,
    event_adapter,
)
from prontuario.schemas.patient import Patient, PatientAlert, PatientDraft, PatientListResponse
from prontuario.schemas.session import (
    DashboardResponse,
    GlobalSearchResponse,
    RecentEvent,
    SelectionResponse,
    SelectionUpdate,
)
from prontuario.schemas.settings import ClinicProfile, ClinicSettings

__all__ = [
    # Event schemas
    "BudgetCreate",
    "BudgetEvent",
    "BudgetPayload",
    "CertificateCreate",
    "CertificateEvent",
    "CertificatePayload",
    "ClinicalNoteCreate",
    "ClinicalNoteEvent",
    "DocumentCreate",
    "Event",
    "EventType",
    "PrescriptionCreate",
    "PrescriptionEvent",
    "PrescriptionItem",
    "PrescriptionPayload",
    "ReceiptCreate",
    "ReceiptEvent",
    "ReceiptPayload",
    "event_adapter",
    # Patient schemas
    "Patient",
    "PatientAlert",
    "PatientDraft",
    "PatientListResponse",
    # Session schemas
    "DashboardResponse",
    "GlobalSearchResponse",
    "RecentEvent",
    "SelectionResponse",
    "SelectionUpdate",
    # Settings and backup
    "ClinicProfile",
    "ClinicSettings",
    "Snapshot",
]
