"""Shared formatting helpers for timestamps, filenames and HTML.

Timestamps are epoch milliseconds everywhere in the store. All functions are
pure and tolerate missing values.
"""

import html
import re
import time
import unicodedata
import uuid
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from prontuario.config import settings


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def new_id() -> str:
    """Opaque unique identifier for a new record."""
    return str(uuid.uuid4())


def display_zone() -> ZoneInfo:
    return ZoneInfo(settings.display_timezone)


def to_local(timestamp_ms: int, tz: ZoneInfo | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in the display zone."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.astimezone(tz or display_zone())


def format_date(value: date | None) -> str:
    """Format a date as DD/MM/YYYY (pt-BR). Returns an empty string for None."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_timestamp(timestamp_ms: int, tz: ZoneInfo | None = None) -> str:
    """Format epoch milliseconds as DD/MM/YYYY HH:MM in the display zone."""
    return to_local(timestamp_ms, tz).strftime("%d/%m/%Y %H:%M")


def format_timestamp_date(timestamp_ms: int, tz: ZoneInfo | None = None) -> str:
    return format_date(to_local(timestamp_ms, tz).date())


def escape(value: object) -> str:
    """HTML-escape any user-supplied value, including quotes."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def slugify(value: str | None) -> str:
    """Strip accents, lowercase, whitespace to underscores, drop anything outside [a-z0-9_-].

    >>> slugify("João da Silva")
    'joao_da_silva'
    """
    decomposed = unicodedata.normalize("NFKD", value or "")
    lowered = decomposed.encode("ascii", "ignore").decode("ascii").lower()
    lowered = re.sub(r"\s+", "_", lowered)
    return re.sub(r"[^a-z0-9_\-]", "", lowered)
