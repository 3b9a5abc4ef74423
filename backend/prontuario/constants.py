"""Shared constants for the record store and document rendering."""

from prontuario.schemas.event import EventType

# Single settings row
SETTINGS_KEY = "app_settings"

# Backup file format marker
BACKUP_VERSION = 1

# Collections
PATIENTS = "patients"
EVENTS = "events"
SETTINGS = "settings"

TYPE_LABELS: dict[EventType, str] = {
    EventType.RX: "Receituário",
    EventType.CERTIFICATE: "Atestado",
    EventType.BUDGET: "Orçamento",
    EventType.RECEIPT: "Recibo",
    EventType.EVOLUTION: "Evolução/Anamnese",
    EventType.PROCEDURE: "Procedimento",
    EventType.EXAM: "Exame",
    EventType.NOTE: "Observação",
}

SUMMARY_SEPARATOR = " • "

RECENT_EVENTS_LIMIT = 8

MILLIS_PER_DAY = 24 * 60 * 60 * 1000


def label_type(event_type: str) -> str:
    """Return the display label for an event type, or the raw type if unknown."""
    try:
        return TYPE_LABELS[EventType(event_type)]
    except ValueError:
        return event_type
