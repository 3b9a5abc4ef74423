"""Collection registry.

Maps each collection name to its table, its primary key, the record fields
lifted into indexed columns, and the schema used to read records back. The
full record always lives in the row's JSON ``data`` column; the extra
columns exist only so lookups can use an index.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from prontuario.constants import EVENTS, PATIENTS, SETTINGS, SETTINGS_KEY
from prontuario.models import EventRecord, PatientRecord, SettingsRecord
from prontuario.schemas import ClinicSettings, Patient, event_adapter


@dataclass
class FieldExtractor:
    """Maps a record field to a table column.

    Args:
        target_column: Name of the column on the ORM model.
        extractor: Function that reads the value from the serialized record.
    """

    target_column: str
    extractor: Callable[[dict], Any]


@dataclass
class CollectionConfig:
    """How one collection is laid out in the database."""

    name: str
    model_class: type
    key_column: str
    key_of: Callable[[dict], str]
    parse: Callable[[dict], Any]
    extractors: list[FieldExtractor] = field(default_factory=list)
    # index name (record field) -> column name
    indexes: dict[str, str] = field(default_factory=dict)

    def to_row(self, record: Any) -> Any:
        """Build the ORM row for a record (a pydantic model or a plain dict)."""
        data = record.to_record() if hasattr(record, "to_record") else dict(record)
        columns = {e.target_column: e.extractor(data) for e in self.extractors}
        columns[self.key_column] = self.key_of(data)
        return self.model_class(data=data, **columns)

    def index_column(self, index_name: str) -> Any:
        try:
            column_name = self.indexes[index_name]
        except KeyError:
            raise ValueError(f"Collection {self.name!r} has no index {index_name!r}") from None
        return getattr(self.model_class, column_name)

    @property
    def key_attribute(self) -> Any:
        return getattr(self.model_class, self.key_column)


_registry_configs: dict[str, CollectionConfig] = {
    PATIENTS: CollectionConfig(
        name=PATIENTS,
        model_class=PatientRecord,
        key_column="id",
        key_of=lambda data: data["id"],
        parse=Patient.model_validate,
        extractors=[FieldExtractor("updated_at", lambda data: data.get("updatedAt") or 0)],
        indexes={"updatedAt": "updated_at"},
    ),
    EVENTS: CollectionConfig(
        name=EVENTS,
        model_class=EventRecord,
        key_column="id",
        key_of=lambda data: data["id"],
        parse=event_adapter.validate_python,
        extractors=[
            FieldExtractor("patient_id", lambda data: data["patientId"]),
            FieldExtractor("type", lambda data: data["type"]),
            FieldExtractor("created_at", lambda data: data["createdAt"]),
        ],
        indexes={"patientId": "patient_id", "type": "type", "createdAt": "created_at"},
    ),
    SETTINGS: CollectionConfig(
        name=SETTINGS,
        model_class=SettingsRecord,
        key_column="key",
        key_of=lambda _data: SETTINGS_KEY,
        parse=ClinicSettings.model_validate,
    ),
}


def get_collection(name: str) -> CollectionConfig:
    """Return the configuration for a collection.

    Raises:
        ValueError: If the collection does not exist.
    """
    config = _registry_configs.get(name)
    if config is None:
        raise ValueError(f"Unknown collection {name!r}")
    return config


def all_collections() -> list[str]:
    return list(_registry_configs)
