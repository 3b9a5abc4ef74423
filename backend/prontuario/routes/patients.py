"""Patient API routes.

Patient profiles plus everything hanging off one patient: alert badges, the
filtered timeline, new clinical notes and documents, and the printable
history.
"""

from typing import Union

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse

from prontuario.auth import pin_gate
from prontuario.config import settings
from prontuario.dependencies import get_app_session, get_directory, get_timeline
from prontuario.exceptions import NotFoundError
from prontuario.schemas import (
    BudgetCreate,
    CertificateCreate,
    ClinicalNoteCreate,
    EventType,
    Patient,
    PatientAlert,
    PatientDraft,
    PatientListResponse,
    PrescriptionCreate,
    ReceiptCreate,
)
from prontuario.services.directory import PatientDirectory, search_patients
from prontuario.services.documents import history_filename, render_patient_history
from prontuario.services.events import build_patient_alerts, patient_timeline
from prontuario.services.pin import PinGate
from prontuario.services.session import AppSession
from prontuario.services.timeline import Timeline
from prontuario.utils.formatting import now_ms

router = APIRouter(prefix="/patients", tags=["patients"])


def _require_patient(session: AppSession, patient_id: str) -> Patient:
    patient = session.find_patient(patient_id)
    if patient is None:
        raise NotFoundError(f"Patient {patient_id} not found")
    return patient


@router.get("", response_model=PatientListResponse)
async def list_patients(
    session: AppSession = Depends(get_app_session),
    q: str = "",
) -> PatientListResponse:
    """List patients, most recently updated first.

    Args:
        q: Case-insensitive filter over name, identifier, phone and notes.
    """
    items = search_patients(session.patients, q)
    return PatientListResponse(items=items, total=len(items))


@router.post("", response_model=Patient, status_code=status.HTTP_201_CREATED)
async def create_patient(
    draft: PatientDraft,
    session: AppSession = Depends(get_app_session),
    directory: PatientDirectory = Depends(get_directory),
) -> Patient:
    """Create a patient and select it.

    Raises:
        ValidationError: 422 if the name is empty.
    """
    return await directory.create_or_update(session, draft.model_copy(update={"id": None}))


@router.get("/{patient_id}", response_model=Patient)
async def get_patient(
    patient_id: str,
    directory: PatientDirectory = Depends(get_directory),
) -> Patient:
    return await directory.get(patient_id)


@router.put("/{patient_id}", response_model=Patient)
async def update_patient(
    patient_id: str,
    draft: PatientDraft,
    session: AppSession = Depends(get_app_session),
    directory: PatientDirectory = Depends(get_directory),
) -> Patient:
    """Replace a patient's profile, keeping its creation time.

    Raises:
        NotFoundError: 404 if the patient does not exist.
        ValidationError: 422 if the name is empty.
    """
    await directory.get(patient_id)
    return await directory.create_or_update(session, draft.model_copy(update={"id": patient_id}))


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: str,
    session: AppSession = Depends(get_app_session),
    directory: PatientDirectory = Depends(get_directory),
    gate: PinGate = Depends(pin_gate),
) -> dict:
    """Delete a patient and all of its events. Requires the access PIN.

    Returns:
        The deleted ID, the number of events removed and the new selection.
    """
    removed = await directory.delete(session, patient_id, gate)
    return {
        "id": patient_id,
        "eventsRemoved": removed,
        "selectedPatientId": session.selected_patient_id,
    }


@router.get("/{patient_id}/alerts", response_model=list[PatientAlert])
async def get_patient_alerts(
    patient_id: str,
    session: AppSession = Depends(get_app_session),
) -> list[PatientAlert]:
    _require_patient(session, patient_id)
    return build_patient_alerts(
        session.events, patient_id, now_ms(), stale_days=settings.stale_record_days
    )


@router.get("/{patient_id}/timeline")
async def get_patient_timeline(
    patient_id: str,
    session: AppSession = Depends(get_app_session),
    event_type: EventType | None = Query(None, alias="type"),
    q: str = "",
) -> dict:
    """A patient's events, newest first.

    Args:
        event_type: Only events of this type.
        q: Case-insensitive text searched across every event field.
    """
    _require_patient(session, patient_id)
    events = patient_timeline(
        session.events, patient_id, event_type.value if event_type else None, q
    )
    return {"items": [event.to_record() for event in events], "total": len(events)}


@router.post("/{patient_id}/notes", status_code=status.HTTP_201_CREATED)
async def create_clinical_note(
    patient_id: str,
    draft: ClinicalNoteCreate,
    session: AppSession = Depends(get_app_session),
    timeline: Timeline = Depends(get_timeline),
) -> dict:
    """Record an evolution, procedure, exam or observation.

    Raises:
        ValidationError: 422 if both chief complaint and text are empty.
        NotFoundError: 404 if the patient does not exist.
    """
    event = await timeline.create_clinical_note(session, patient_id, draft)
    return event.to_record()


@router.post("/{patient_id}/documents", status_code=status.HTTP_201_CREATED)
async def create_document(
    patient_id: str,
    draft: Union[PrescriptionCreate, CertificateCreate, BudgetCreate, ReceiptCreate],
    session: AppSession = Depends(get_app_session),
    timeline: Timeline = Depends(get_timeline),
) -> dict:
    """Record a prescription, certificate, budget or receipt.

    Raises:
        NotFoundError: 404 if the patient does not exist.
    """
    event = await timeline.create_document(session, patient_id, draft)
    return event.to_record()


@router.get("/{patient_id}/history-document", response_class=HTMLResponse)
async def get_history_document(
    patient_id: str,
    session: AppSession = Depends(get_app_session),
) -> HTMLResponse:
    """Printable summary of the patient's whole timeline."""
    patient = _require_patient(session, patient_id)
    return HTMLResponse(
        render_patient_history(session, patient_id),
        headers={"Content-Disposition": f'inline; filename="{history_filename(patient)}"'},
    )
