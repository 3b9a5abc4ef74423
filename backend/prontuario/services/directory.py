"""Patient directory.

CRUD over patient profiles, the selection cursor, and cascading deletion of
a patient's events.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable

from prontuario.constants import EVENTS, PATIENTS
from prontuario.exceptions import NotFoundError, ValidationError
from prontuario.repositories import RecordStore, StoreTransaction
from prontuario.schemas import Patient, PatientDraft
from prontuario.services.pin import ACTION_DELETE_PATIENT, PinGate, require_confirmation
from prontuario.services.session import AppSession
from prontuario.utils.formatting import new_id, now_ms

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "identifier", "phone", "notes")


def search_patients(patients: Iterable[Patient], query: str) -> list[Patient]:
    """Case-insensitive substring search over name, identifier, phone and notes.

    An empty query matches everything. Results keep the input order.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(patients)
    return [
        p for p in patients
        if any(needle in (getattr(p, name) or "").lower() for name in SEARCH_FIELDS)
    ]


class PatientDirectory:
    """Service for patient profile operations."""

    def __init__(self, store: RecordStore, clock: Callable[[], int] = now_ms):
        """Initialize the directory.

        Args:
            store: Record store holding the collections.
            clock: Source of epoch-millisecond timestamps.
        """
        self.store = store
        self._clock = clock

    async def get(self, patient_id: str) -> Patient:
        """Get a patient by ID.

        Raises:
            NotFoundError: If the patient does not exist.
        """
        patient = await self.store.get(PATIENTS, patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    async def create_or_update(self, session: AppSession, draft: PatientDraft) -> Patient:
        """Save a patient from the form draft and select it.

        ``createdAt`` is kept from the stored profile when editing;
        ``updatedAt`` always moves forward.

        Raises:
            ValidationError: If the name is empty. Nothing is persisted.
        """
        name = draft.name.strip()
        if not name:
            raise ValidationError("Nome é obrigatório.")

        now = self._clock()
        existing = await self.store.get(PATIENTS, draft.id) if draft.id else None

        patient = Patient(
            id=draft.id or new_id(),
            name=name,
            identifier=draft.identifier.strip(),
            phone=draft.phone.strip(),
            birth=draft.birth,
            notes=draft.notes.strip(),
            created_at=existing.created_at if existing else now,
            updated_at=max(now, existing.updated_at) if existing else now,
        )
        await self.store.put(PATIENTS, patient)

        await session.refresh(self.store)
        session.selected_patient_id = patient.id
        logger.info("%s patient %s", "Updated" if existing else "Created", patient.id)
        return patient

    async def touch(self, patient_id: str, tx: StoreTransaction | None = None) -> Patient | None:
        """Mark timeline activity by refreshing ``updatedAt``.

        Best effort: a patient that no longer exists is skipped with a warning.

        Args:
            patient_id: Patient to touch.
            tx: Open transaction to join; a new one is opened when omitted.

        Returns:
            The touched patient, or None if it was skipped.
        """
        if tx is None:
            async with self.store.transaction() as own_tx:
                return await self.touch(patient_id, own_tx)

        patient = await tx.get(PATIENTS, patient_id)
        if patient is None:
            logger.warning("Skipping touch: patient %s no longer exists", patient_id)
            return None

        touched = patient.model_copy(update={"updated_at": max(self._clock(), patient.updated_at)})
        await tx.put(PATIENTS, touched)
        return touched

    async def delete(self, session: AppSession, patient_id: str, gate: PinGate) -> int:
        """Delete a patient and every event attached to it.

        Events are looked up through the ``patientId`` index and deleted one
        by one before the patient itself, all inside one store transaction.
        If the patient was selected, the cursor moves to another remaining
        patient, or to None.

        Returns:
            Number of events removed with the patient.

        Raises:
            AccessDeniedError: If the PIN gate denies the action.
        """
        await require_confirmation(gate, ACTION_DELETE_PATIENT)

        async with self.store.transaction() as tx:
            events = await tx.get_by_index(EVENTS, "patientId", patient_id)
            for event in events:
                await tx.delete(EVENTS, event.id)
            removed = await tx.delete(PATIENTS, patient_id)

        if removed:
            logger.info("Deleted patient %s with %d events", patient_id, len(events))
        else:
            logger.info("Patient %s already gone; removed %d orphan events", patient_id, len(events))

        if session.selected_patient_id == patient_id:
            session.selected_patient_id = next(
                (p.id for p in session.patients if p.id != patient_id), None
            )
        await session.refresh(self.store)
        return len(events)

    def select(self, session: AppSession, patient_id: str | None) -> Patient | None:
        """Move the selection cursor. None clears it.

        Raises:
            NotFoundError: If the patient is not in the session projection.
        """
        if patient_id is None:
            session.selected_patient_id = None
            return None

        patient = session.find_patient(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        session.selected_patient_id = patient.id
        return patient

    def global_search(self, session: AppSession, query: str) -> Patient | None:
        """Select the first patient whose record mentions ``query`` anywhere."""
        needle = (query or "").strip().lower()
        if not needle:
            return None

        for patient in session.patients:
            if needle in json.dumps(patient.to_record(), ensure_ascii=False).lower():
                session.selected_patient_id = patient.id
                return patient
        return None
