"""Base model and shared field types for stored records."""

from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    """Browser date inputs submit an empty string when nothing was picked."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]


class RecordModel(BaseModel):
    """Base for everything persisted, exported in a backup or served over HTTP.

    Attributes are snake_case in Python and camelCase on the wire, so files
    exported by earlier versions of the app load unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON-safe, camelCase form stored and exported."""
        return self.model_dump(mode="json", by_alias=True)
