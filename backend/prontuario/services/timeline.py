"""Timeline service.

Events are append-only: this module creates and deletes them and never
updates one. Every creation also touches the owning patient, since timeline
activity counts as an edit for ordering the directory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from prontuario.constants import EVENTS, PATIENTS, RECENT_EVENTS_LIMIT, label_type
from prontuario.exceptions import NotFoundError
from prontuario.repositories import RecordStore
from prontuario.schemas import (
    BudgetEvent,
    CertificateEvent,
    CertificatePayload,
    ClinicalNoteCreate,
    ClinicalNoteEvent,
    DocumentCreate,
    Event,
    PrescriptionEvent,
    PrescriptionPayload,
    ReceiptEvent,
    RecentEvent,
)
from prontuario.schemas.event import DocumentEvent
from prontuario.services.directory import PatientDirectory
from prontuario.services.events import derive_document_summary, derive_summary, validate_clinical_note
from prontuario.services.pin import ACTION_DELETE_EVENT, PinGate, require_confirmation
from prontuario.services.session import AppSession
from prontuario.utils.formatting import new_id, now_ms, to_local

logger = logging.getLogger(__name__)

DOCUMENT_EVENT_CLASSES: dict[str, type[DocumentEvent]] = {
    "rx": PrescriptionEvent,
    "certificate": CertificateEvent,
    "budget": BudgetEvent,
    "receipt": ReceiptEvent,
}


class Timeline:
    """Create, read and delete timeline events."""

    def __init__(
        self,
        store: RecordStore,
        directory: PatientDirectory | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.directory = directory or PatientDirectory(store, clock=clock)
        self._clock = clock

    async def get(self, event_id: str) -> Event:
        """Get an event by ID.

        Raises:
            NotFoundError: If the event does not exist.
        """
        event = await self.store.get(EVENTS, event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    async def create_clinical_note(
        self,
        session: AppSession,
        patient_id: str,
        draft: ClinicalNoteCreate,
    ) -> ClinicalNoteEvent:
        """Append an evolution, procedure, exam or observation.

        The summary is derived from type, chief complaint and CID unless the
        draft supplies one.

        Raises:
            ValidationError: If both chief complaint and text are empty.
            NotFoundError: If the patient does not exist.
        """
        chief = draft.chief.strip()
        text = draft.text.strip()
        validate_clinical_note(chief, text)
        cid = draft.cid.strip()

        event = ClinicalNoteEvent(
            id=new_id(),
            patient_id=patient_id,
            type=draft.type,
            chief=chief,
            vitals=draft.vitals.strip(),
            cid=cid,
            text=text,
            created_at=self._clock(),
            summary=draft.summary.strip() or derive_summary(draft.type, chief, cid),
        )
        await self._append(session, event)
        return event

    async def create_document(
        self,
        session: AppSession,
        patient_id: str,
        draft: DocumentCreate,
    ) -> DocumentEvent:
        """Append a prescription, certificate, budget or receipt.

        An explicit title wins over the derived summary. Prescription lines
        without a drug are dropped; a certificate without a start date starts
        today.

        Raises:
            NotFoundError: If the patient does not exist.
        """
        created_at = self._clock()
        payload = draft.payload

        if isinstance(payload, PrescriptionPayload):
            payload = payload.model_copy(
                update={"items": [item for item in payload.items if item.drug.strip()]}
            )
        elif isinstance(payload, CertificatePayload) and payload.start is None:
            payload = payload.model_copy(update={"start": to_local(created_at).date()})

        event_class = DOCUMENT_EVENT_CLASSES[draft.type]
        event = event_class(
            id=new_id(),
            patient_id=patient_id,
            type=draft.type,
            created_at=created_at,
            summary=draft.title.strip() or derive_document_summary(draft.type, payload),
            payload=payload,
        )
        await self._append(session, event)
        return event

    async def _append(self, session: AppSession, event: Event) -> None:
        async with self.store.transaction() as tx:
            if await tx.get(PATIENTS, event.patient_id) is None:
                raise NotFoundError(f"Patient {event.patient_id} not found")
            await tx.put(EVENTS, event)
            await self.directory.touch(event.patient_id, tx)

        logger.info("Appended %s event %s for patient %s", event.type, event.id, event.patient_id)
        await session.refresh(self.store)

    async def delete_event(self, session: AppSession, event_id: str, gate: PinGate) -> bool:
        """Delete one event. Deleting a missing event is a no-op.

        Returns:
            True if an event was removed.

        Raises:
            AccessDeniedError: If the PIN gate denies the action.
        """
        await require_confirmation(gate, ACTION_DELETE_EVENT)
        removed = await self.store.delete(EVENTS, event_id)
        if removed:
            logger.info("Deleted event %s", event_id)
        await session.refresh(self.store)
        return removed


def recent_events(session: AppSession, limit: int = RECENT_EVENTS_LIMIT) -> list[RecentEvent]:
    """Newest events across all patients for the dashboard."""
    rows = []
    for event in session.events[:limit]:
        patient = session.find_patient(event.patient_id)
        rows.append(
            RecentEvent(
                event=event,
                patient_name=patient.name if patient else "—",
                type_label=label_type(event.type),
            )
        )
    return rows

