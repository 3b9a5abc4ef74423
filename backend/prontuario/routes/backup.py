"""Backup API routes: export, import and wipe."""

import logging

from fastapi import APIRouter, Depends, Request, Response

from prontuario.auth import pin_gate
from prontuario.dependencies import get_app_session, get_backup_engine
from prontuario.services.backup import BackupEngine, backup_filename, dump_snapshot
from prontuario.services.pin import PinGate
from prontuario.services.session import AppSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("")
async def export_backup(engine: BackupEngine = Depends(get_backup_engine)) -> Response:
    """Download every record as one JSON file."""
    snapshot = await engine.export_snapshot()
    return Response(
        content=dump_snapshot(snapshot),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{backup_filename(snapshot.exported_at)}"'
        },
    )


@router.post("/import")
async def import_backup(
    request: Request,
    session: AppSession = Depends(get_app_session),
    engine: BackupEngine = Depends(get_backup_engine),
    gate: PinGate = Depends(pin_gate),
) -> dict:
    """Replace the whole store with the uploaded backup. Requires the access PIN.

    The request body is the raw backup file.

    Raises:
        InvalidBackupError: 400 if the file is not a valid backup; nothing
            is changed.
    """
    payload = await request.body()
    snapshot = await engine.import_snapshot(session, payload, gate)
    return {
        "patients": len(snapshot.patients),
        "events": len(snapshot.events),
        "selectedPatientId": session.selected_patient_id,
    }


@router.post("/wipe")
async def wipe_store(
    session: AppSession = Depends(get_app_session),
    engine: BackupEngine = Depends(get_backup_engine),
    gate: PinGate = Depends(pin_gate),
) -> dict:
    """Delete every patient and event. Requires the access PIN.

    Clinic settings are kept.
    """
    await engine.wipe_all(session, gate)
    logger.warning("Store wiped through the API")
    return {"patients": 0, "events": 0}
