"""Backup, restore and wipe.

A snapshot is the whole store as one JSON document::

    {"version": 1, "exportedAt": <epoch ms>, "settings": {...},
     "patients": [...], "events": [...]}

Import validates the entire payload before touching the store, then wipes
and reloads inside one store transaction. Imported events are not checked
against the imported patients; a backup may reference a patient that is not
in it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from prontuario.constants import BACKUP_VERSION, EVENTS, PATIENTS, SETTINGS, SETTINGS_KEY
from prontuario.exceptions import InvalidBackupError
from prontuario.repositories import RecordStore, StoreTransaction, all_collections
from prontuario.schemas import ClinicSettings, Snapshot
from prontuario.services.pin import ACTION_IMPORT, ACTION_WIPE, PinGate, require_confirmation
from prontuario.services.session import AppSession
from prontuario.utils.formatting import now_ms, to_local

logger = logging.getLogger(__name__)


def parse_snapshot(raw: str | bytes | dict[str, Any] | Snapshot) -> Snapshot:
    """Parse and validate a backup payload.

    Raises:
        InvalidBackupError: If the payload is not JSON, not an object, lacks
            the ``patients``/``events`` sequences, carries a malformed record
            or has an unsupported version.
    """
    if isinstance(raw, Snapshot):
        snapshot = raw
    else:
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise InvalidBackupError("JSON inválido.") from exc

        if not isinstance(raw, dict):
            raise InvalidBackupError("Backup inválido: esperado um objeto JSON.")
        for key in ("patients", "events"):
            if not isinstance(raw.get(key), list):
                raise InvalidBackupError(f"Backup inválido: '{key}' deve ser uma lista.")

        try:
            snapshot = Snapshot.model_validate(raw)
        except PydanticValidationError as exc:
            raise InvalidBackupError(f"Backup inválido: {exc.error_count()} registro(s) malformado(s).") from exc

    if snapshot.version != BACKUP_VERSION:
        raise InvalidBackupError(f"Versão de backup não suportada: {snapshot.version}")
    return snapshot


def dump_snapshot(snapshot: Snapshot) -> str:
    """Serialize a snapshot as pretty-printed JSON."""
    return json.dumps(snapshot.to_record(), indent=2, ensure_ascii=False)


def backup_filename(timestamp_ms: int) -> str:
    return f"prontuario_backup_{to_local(timestamp_ms).date().isoformat()}.json"


def merge_settings(current: ClinicSettings, incoming: dict[str, Any]) -> ClinicSettings:
    """Overlay backup settings on the settings in effect.

    Raises:
        InvalidBackupError: If a settings field has the wrong type.
    """
    try:
        return ClinicSettings.model_validate({**current.to_record(), **incoming})
    except PydanticValidationError as exc:
        raise InvalidBackupError("Backup inválido: configurações malformadas.") from exc


class BackupEngine:
    """Whole-store snapshot, restore and wipe."""

    def __init__(self, store: RecordStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self._clock = clock

    async def export_snapshot(self) -> Snapshot:
        """Serialize every record exactly once, read in one transaction."""
        async with self.store.transaction() as tx:
            settings = await tx.get(SETTINGS, SETTINGS_KEY) or ClinicSettings()
            patients = await tx.get_all(PATIENTS)
            events = await tx.get_all(EVENTS)

        logger.info("Exported %d patients and %d events", len(patients), len(events))
        return Snapshot(
            version=BACKUP_VERSION,
            exported_at=self._clock(),
            settings=settings.to_record(),
            patients=patients,
            events=events,
        )

    async def wipe(self, preserve_settings: bool = True) -> None:
        """Delete every patient and event. Safe on an empty store.

        Args:
            preserve_settings: Keep the clinic settings row. Import passes
                False because it writes merged settings right after.
        """
        async with self.store.transaction() as tx:
            await self._clear(tx, preserve_settings)
        logger.info("Wiped store (settings preserved: %s)", preserve_settings)

    async def wipe_all(self, session: AppSession, gate: PinGate) -> None:
        """User-facing wipe: PIN-gated, clears the cursor and projections.

        Raises:
            AccessDeniedError: If the PIN gate denies the action.
        """
        await require_confirmation(gate, ACTION_WIPE)
        await self.wipe()
        session.selected_patient_id = None
        await session.refresh(self.store)

    async def import_snapshot(
        self,
        session: AppSession,
        snapshot: str | bytes | dict[str, Any] | Snapshot,
        gate: PinGate,
    ) -> Snapshot:
        """Replace the whole store with a backup.

        The payload is validated first, so a malformed backup leaves existing
        data untouched. The store is then wiped, the backup settings merged
        over the settings in effect and saved, and patients then events are
        inserted in the order given. The cursor resets to the first patient of
        the refreshed projection.

        Raises:
            AccessDeniedError: If the PIN gate denies the action.
            InvalidBackupError: If the payload is malformed.
        """
        await require_confirmation(gate, ACTION_IMPORT)
        parsed = parse_snapshot(snapshot)
        merged = merge_settings(session.settings, parsed.settings)

        async with self.store.transaction() as tx:
            await self._clear(tx, preserve_settings=False)
            await tx.put(SETTINGS, merged)
            for patient in parsed.patients:
                await tx.put(PATIENTS, patient)
            for event in parsed.events:
                await tx.put(EVENTS, event)

        logger.info(
            "Imported backup with %d patients and %d events",
            len(parsed.patients),
            len(parsed.events),
        )
        session.settings = merged
        await session.refresh(self.store)
        session.selected_patient_id = session.patients[0].id if session.patients else None
        return parsed

    @staticmethod
    async def _clear(tx: StoreTransaction, preserve_settings: bool) -> None:
        for collection in all_collections():
            if preserve_settings and collection == SETTINGS:
                continue
            await tx.clear(collection)
