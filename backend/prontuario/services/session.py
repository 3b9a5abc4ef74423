"""Application session.

Holds what the UI needs between gestures: the selection cursor, the sorted
in-memory projections of patients and events, and the clinic settings in
effect. The projections are only trustworthy right after :meth:`refresh`,
which services call once a mutation has been committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prontuario.constants import EVENTS, PATIENTS, SETTINGS, SETTINGS_KEY
from prontuario.exceptions import AccessDeniedError
from prontuario.repositories import RecordStore
from prontuario.schemas import ClinicSettings, Event, Patient
from prontuario.services.pin import ACTION_CHANGE_PIN, PinGate, require_confirmation

logger = logging.getLogger(__name__)


@dataclass
class AppSession:
    """Explicit session context passed to and returned from core operations."""

    settings: ClinicSettings = field(default_factory=ClinicSettings)
    patients: list[Patient] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    selected_patient_id: str | None = None

    @property
    def selected_patient(self) -> Patient | None:
        return self.find_patient(self.selected_patient_id) if self.selected_patient_id else None

    def find_patient(self, patient_id: str) -> Patient | None:
        return next((p for p in self.patients if p.id == patient_id), None)

    def find_event(self, event_id: str) -> Event | None:
        return next((e for e in self.events if e.id == event_id), None)

    def patient_events(self, patient_id: str) -> list[Event]:
        """Events of one patient, newest first."""
        return [e for e in self.events if e.patient_id == patient_id]

    async def refresh(self, store: RecordStore) -> AppSession:
        """Reload both projections from the store.

        Patients are sorted by ``updatedAt`` descending, events by
        ``createdAt`` descending; ties keep store order.
        """
        patients = await store.get_all(PATIENTS)
        events = await store.get_all(EVENTS)
        self.patients = sorted(patients, key=lambda p: p.updated_at, reverse=True)
        self.events = sorted(events, key=lambda e: e.created_at, reverse=True)
        return self


async def ensure_settings(store: RecordStore) -> ClinicSettings:
    """Return the stored settings, seeding defaults on first use."""
    stored = await store.get(SETTINGS, SETTINGS_KEY)
    if stored is not None:
        return stored

    defaults = ClinicSettings()
    await store.put(SETTINGS, defaults)
    logger.info("Seeded default clinic settings")
    return defaults


async def open_session(store: RecordStore) -> AppSession:
    """Initialize the store and build the first session.

    The cursor starts on the most recently updated patient, if any.
    """
    await store.init()
    session = AppSession(settings=await ensure_settings(store))
    await session.refresh(store)
    if session.patients:
        session.selected_patient_id = session.patients[0].id
    return session


async def save_settings(
    store: RecordStore,
    session: AppSession,
    new_settings: ClinicSettings,
    gate: PinGate | None = None,
) -> ClinicSettings:
    """Replace the settings record. Last writer wins.

    A blank ``access_pin`` keeps the stored PIN, so profile edits never reset
    it. A different PIN is only saved once ``gate`` confirms it with the PIN
    currently in effect.

    Raises:
        AccessDeniedError: If the PIN changes and no gate is given or the
            gate denies it.
    """
    current_pin = session.settings.access_pin
    new_pin = new_settings.access_pin.strip()
    if new_pin and new_pin != current_pin:
        if gate is None:
            raise AccessDeniedError(f"{ACTION_CHANGE_PIN}: PIN incorreto")
        await require_confirmation(gate, ACTION_CHANGE_PIN)
    new_settings = new_settings.model_copy(update={"access_pin": new_pin or current_pin})

    await store.put(SETTINGS, new_settings)
    session.settings = new_settings
    if new_settings.access_pin != current_pin:
        logger.info("Access PIN changed")
    return new_settings
