"""Event API routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from prontuario.auth import pin_gate
from prontuario.constants import PATIENTS
from prontuario.dependencies import get_app_session, get_store, get_timeline
from prontuario.repositories import RecordStore
from prontuario.services.documents import render_event_document, suggested_filename
from prontuario.services.pin import PinGate
from prontuario.services.session import AppSession
from prontuario.services.timeline import Timeline

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    timeline: Timeline = Depends(get_timeline),
) -> dict:
    """Get a single event.

    Raises:
        NotFoundError: 404 if the event does not exist.
    """
    event = await timeline.get(event_id)
    return event.to_record()


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    session: AppSession = Depends(get_app_session),
    timeline: Timeline = Depends(get_timeline),
    gate: PinGate = Depends(pin_gate),
) -> dict:
    """Delete one event. Requires the access PIN; a missing event is a no-op."""
    removed = await timeline.delete_event(session, event_id, gate)
    return {"id": event_id, "deleted": removed}


@router.get("/{event_id}/document", response_class=HTMLResponse)
async def get_event_document(
    event_id: str,
    session: AppSession = Depends(get_app_session),
    store: RecordStore = Depends(get_store),
    timeline: Timeline = Depends(get_timeline),
) -> HTMLResponse:
    """Printable document for one event.

    The patient may be gone (an imported event can reference a patient that
    is not in the store); the document then carries blank patient fields.
    """
    event = await timeline.get(event_id)
    patient = await store.get(PATIENTS, event.patient_id)
    return HTMLResponse(
        render_event_document(event, patient, session.settings),
        headers={"Content-Disposition": f'inline; filename="{suggested_filename(event, patient)}"'},
    )
