"""Session API routes: selection cursor, global search and dashboard."""

from fastapi import APIRouter, Depends

from prontuario.dependencies import get_app_session, get_directory
from prontuario.schemas import (
    DashboardResponse,
    GlobalSearchResponse,
    SelectionResponse,
    SelectionUpdate,
)
from prontuario.services.directory import PatientDirectory
from prontuario.services.session import AppSession
from prontuario.services.timeline import recent_events

router = APIRouter(tags=["session"])


@router.get("/session/selection", response_model=SelectionResponse)
async def get_selection(session: AppSession = Depends(get_app_session)) -> SelectionResponse:
    return SelectionResponse(patient_id=session.selected_patient_id)


@router.put("/session/selection", response_model=SelectionResponse)
async def update_selection(
    update: SelectionUpdate,
    session: AppSession = Depends(get_app_session),
    directory: PatientDirectory = Depends(get_directory),
) -> SelectionResponse:
    """Move the selection cursor; a null ``patientId`` clears it.

    Raises:
        NotFoundError: 404 if the patient does not exist.
    """
    directory.select(session, update.patient_id)
    return SelectionResponse(patient_id=session.selected_patient_id)


@router.post("/session/search", response_model=GlobalSearchResponse)
async def global_search(
    q: str,
    session: AppSession = Depends(get_app_session),
    directory: PatientDirectory = Depends(get_directory),
) -> GlobalSearchResponse:
    """Select the first patient whose record mentions ``q``.

    The selection is left unchanged when nothing matches.
    """
    patient = directory.global_search(session, q)
    return GlobalSearchResponse(query=q, patient_id=patient.id if patient else None)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(session: AppSession = Depends(get_app_session)) -> DashboardResponse:
    """Counts and the newest events across all patients."""
    return DashboardResponse(
        patient_count=len(session.patients),
        event_count=len(session.events),
        recent=recent_events(session),
    )
