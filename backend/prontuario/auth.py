"""PIN confirmation for destructive routes.

Clients send the access PIN in the ``X-Access-PIN`` header. The header is
only read here; whether it matches is decided by the service through the
returned gate, so a missing or wrong PIN surfaces as ``AccessDeniedError``
(HTTP 403) before anything is touched.
"""

from fastapi import Depends, Header

from prontuario.dependencies import get_app_session
from prontuario.services.pin import PinCheck, PinGate, effective_pin
from prontuario.services.session import AppSession

PIN_HEADER = "X-Access-PIN"


async def pin_gate(
    x_access_pin: str | None = Header(default=None, alias=PIN_HEADER),
    session: AppSession = Depends(get_app_session),
) -> PinGate:
    """Build the gate for this request from the header and the PIN in effect."""
    return PinCheck(x_access_pin, effective_pin(session.settings))
