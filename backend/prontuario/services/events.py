"""Event derivation rules.

Pure functions that turn raw event fields into summaries, validate clinical
notes, filter a patient's timeline and compute the alert badges. Nothing
here touches the store.
"""

import json
from collections.abc import Iterable

from prontuario.constants import MILLIS_PER_DAY, SUMMARY_SEPARATOR, label_type
from prontuario.exceptions import ValidationError
from prontuario.schemas import (
    BudgetPayload,
    CertificatePayload,
    Event,
    EventType,
    PatientAlert,
    PrescriptionPayload,
    ReceiptPayload,
)
from prontuario.schemas.event import DocumentPayload
from prontuario.utils.formatting import format_timestamp_date


def derive_summary(event_type: str, chief: str | None, cid: str | None) -> str:
    """Build the one-line summary of a clinical note.

    Joins the type label, the trimmed chief complaint and ``CID <code>``,
    skipping empty parts.

    >>> derive_summary("evolution", " dor de cabeça ", "R51")
    'Evolução/Anamnese • dor de cabeça • CID R51'
    """
    complaint = (chief or "").strip()
    code = (cid or "").strip()
    parts = [label_type(event_type), complaint, f"CID {code}" if code else ""]
    return SUMMARY_SEPARATOR.join(part for part in parts if part)


def derive_document_summary(event_type: str, payload: DocumentPayload | None) -> str:
    """Build the one-line summary of a generated document."""
    if event_type == EventType.RX:
        items = payload.items if isinstance(payload, PrescriptionPayload) else []
        first = items[0].drug if items and items[0].drug else "receita"
        extra = f" (+{len(items) - 1})" if len(items) > 1 else ""
        return f"Receita • {first}{extra}"

    if event_type == EventType.CERTIFICATE:
        days = payload.days if isinstance(payload, CertificatePayload) else 1
        return f"Atestado • {days} dia(s)"

    if event_type == EventType.BUDGET:
        days = payload.days if isinstance(payload, BudgetPayload) else 7
        return f"Orçamento • validade {days} dia(s)"

    if event_type == EventType.RECEIPT:
        value = payload.value if isinstance(payload, ReceiptPayload) else ""
        return f"Recibo • {value or 'valor'}"

    return label_type(event_type)


def validate_clinical_note(chief: str, text: str) -> None:
    """A clinical note needs a chief complaint or clinical text.

    Raises:
        ValidationError: If both are empty.
    """
    if not chief.strip() and not text.strip():
        raise ValidationError("Digite pelo menos a queixa ou o texto clínico.")


def _searchable(event: Event) -> str:
    return json.dumps(event.to_record(), ensure_ascii=False).lower()


def patient_timeline(
    events: Iterable[Event],
    patient_id: str,
    event_type: str | None = None,
    query: str = "",
) -> list[Event]:
    """Filter one patient's events, newest first.

    Args:
        events: Events to filter (any order).
        patient_id: Patient whose timeline is wanted.
        event_type: Only keep this type; None keeps all.
        query: Case-insensitive text searched across the whole event.
    """
    needle = (query or "").strip().lower()
    selected = [e for e in events if e.patient_id == patient_id]
    if event_type:
        selected = [e for e in selected if e.type == event_type]
    if needle:
        selected = [e for e in selected if needle in _searchable(e)]
    return sorted(selected, key=lambda e: e.created_at, reverse=True)


def build_patient_alerts(
    events: Iterable[Event],
    patient_id: str,
    now: int,
    stale_days: int = 180,
) -> list[PatientAlert]:
    """Compute the alert badges for a patient from their timeline.

    Args:
        events: Events to consider (any order, any patient).
        patient_id: Patient the badges are for.
        now: Current time in epoch milliseconds.
        stale_days: Days without records after which the last-record badge warns.
    """
    timeline = patient_timeline(events, patient_id)
    alerts: list[PatientAlert] = []

    if not timeline:
        alerts.append(PatientAlert(level="warn", text="sem histórico"))
        return alerts

    days = (now - timeline[0].created_at) // MILLIS_PER_DAY
    alerts.append(
        PatientAlert(level="warn" if days > stale_days else "ok", text=f"último registro: {days}d")
    )

    last_rx = next((e for e in timeline if e.type == EventType.RX), None)
    if last_rx is not None:
        alerts.append(
            PatientAlert(level="accent", text=f"última receita: {format_timestamp_date(last_rx.created_at)}")
        )

    return alerts
