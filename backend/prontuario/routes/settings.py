"""Clinic settings API routes.

The access PIN is write-only: responses carry the clinic profile without it.
"""

from fastapi import APIRouter, Depends

from prontuario.auth import pin_gate
from prontuario.dependencies import get_app_session, get_store
from prontuario.repositories import RecordStore
from prontuario.schemas import ClinicProfile, ClinicSettings
from prontuario.services.pin import PinGate
from prontuario.services.session import AppSession, save_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=ClinicProfile)
async def get_settings(session: AppSession = Depends(get_app_session)) -> ClinicProfile:
    return session.settings.profile()


@router.put("", response_model=ClinicProfile)
async def update_settings(
    new_settings: ClinicSettings,
    session: AppSession = Depends(get_app_session),
    store: RecordStore = Depends(get_store),
    gate: PinGate = Depends(pin_gate),
) -> ClinicProfile:
    """Replace the clinic settings. Last writer wins.

    An absent or blank ``accessPin`` keeps the current PIN. A new PIN needs
    the current one in the ``X-Access-PIN`` header.

    Raises:
        AccessDeniedError: 403 if the PIN changes without the current PIN.
    """
    saved = await save_settings(store, session, new_settings, gate)
    return saved.profile()
