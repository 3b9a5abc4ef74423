"""PIN gate for destructive actions and PIN changes.

Deleting a patient or an event, wiping the store and importing a backup all
ask a :class:`PinGate` first, as does replacing the PIN itself. The gate only
answers allow or deny; how the PIN is collected belongs to the UI.
"""

import hmac
import logging
from typing import Protocol

from prontuario.config import settings
from prontuario.exceptions import AccessDeniedError
from prontuario.schemas import ClinicSettings

logger = logging.getLogger(__name__)

ACTION_DELETE_PATIENT = "Excluir paciente"
ACTION_DELETE_EVENT = "Excluir evento"
ACTION_WIPE = "Apagar tudo"
ACTION_IMPORT = "Importar backup"
ACTION_CHANGE_PIN = "Alterar PIN"


class PinGate(Protocol):
    """Collaborator that confirms a destructive action."""

    async def confirm(self, action: str) -> bool: ...


class PinCheck:
    """Gate that compares a PIN supplied with the request to the expected one."""

    def __init__(self, supplied: str | None, expected: str):
        self.supplied = supplied
        self.expected = expected

    async def confirm(self, action: str) -> bool:
        if self.supplied is None:
            logger.warning("%s: no PIN supplied", action)
            return False
        ok = hmac.compare_digest(self.supplied.strip().encode(), self.expected.encode())
        if not ok:
            logger.warning("%s: wrong PIN", action)
        return ok


def effective_pin(clinic_settings: ClinicSettings) -> str:
    """The stored PIN, or the configured fallback when none was saved."""
    return clinic_settings.access_pin or settings.default_access_pin


async def require_confirmation(gate: PinGate, action: str) -> None:
    """Ask the gate and stop the workflow on deny.

    Raises:
        AccessDeniedError: If the gate denies the action.
    """
    if not await gate.confirm(action):
        raise AccessDeniedError(f"{action}: PIN incorreto")
