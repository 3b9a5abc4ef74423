"""Tests for the record store and the collection registry."""

import pytest

from prontuario.constants import EVENTS, PATIENTS, SETTINGS, SETTINGS_KEY
from prontuario.database import build_engine
from prontuario.exceptions import StorageUnavailableError
from prontuario.repositories import RecordStore, all_collections, get_collection
from prontuario.schemas import ClinicalNoteEvent, ClinicSettings, Patient

from conftest import FIXED_NOW


def make_patient(patient_id: str = "p1", name: str = "Ana", updated_at: int = FIXED_NOW) -> Patient:
    return Patient(id=patient_id, name=name, created_at=FIXED_NOW, updated_at=updated_at)


def make_note(event_id: str, patient_id: str = "p1", created_at: int = FIXED_NOW) -> ClinicalNoteEvent:
    return ClinicalNoteEvent(
        id=event_id,
        patient_id=patient_id,
        type="evolution",
        text="retorno",
        created_at=created_at,
    )


class TestCollectionRegistry:
    """Tests for the collection configuration lookup."""

    def test_all_collections(self):
        assert all_collections() == [PATIENTS, EVENTS, SETTINGS]

    def test_unknown_collection_raises(self):
        with pytest.raises(ValueError, match="Unknown collection"):
            get_collection("appointments")

    def test_unknown_index_raises(self):
        with pytest.raises(ValueError, match="no index"):
            get_collection(PATIENTS).index_column("name")

    def test_event_row_lifts_indexed_fields(self):
        """Indexed columns are copied out of the camelCase record."""
        row = get_collection(EVENTS).to_row(make_note("e1", created_at=123))
        assert row.id == "e1"
        assert row.patient_id == "p1"
        assert row.type == "evolution"
        assert row.created_at == 123
        assert row.data["patientId"] == "p1"

    def test_settings_row_uses_well_known_key(self):
        row = get_collection(SETTINGS).to_row(ClinicSettings(clinic_name="X"))
        assert row.key == SETTINGS_KEY


class TestRecordStore:
    """Tests for single-operation store access."""

    @pytest.mark.asyncio
    async def test_put_then_get(self, store):
        patient = make_patient()
        await store.put(PATIENTS, patient)
        assert await store.get(PATIENTS, "p1") == patient

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get(PATIENTS, "nope") is None

    @pytest.mark.asyncio
    async def test_put_replaces_whole_record(self, store):
        await store.put(PATIENTS, make_patient(name="Ana"))
        await store.put(PATIENTS, make_patient(name="Ana Paula"))

        patients = await store.get_all(PATIENTS)
        assert len(patients) == 1
        assert patients[0].name == "Ana Paula"

    @pytest.mark.asyncio
    async def test_get_all_empty(self, store):
        assert await store.get_all(EVENTS) == []

    @pytest.mark.asyncio
    async def test_get_by_index(self, store):
        await store.put(EVENTS, make_note("e1", "p1"))
        await store.put(EVENTS, make_note("e2", "p2"))
        await store.put(EVENTS, make_note("e3", "p1"))

        found = await store.get_by_index(EVENTS, "patientId", "p1")
        assert sorted(e.id for e in found) == ["e1", "e3"]

    @pytest.mark.asyncio
    async def test_get_by_unknown_index_raises(self, store):
        with pytest.raises(ValueError):
            await store.get_by_index(EVENTS, "summary", "x")

    @pytest.mark.asyncio
    async def test_delete_reports_whether_removed(self, store):
        await store.put(PATIENTS, make_patient())
        assert await store.delete(PATIENTS, "p1") is True
        assert await store.delete(PATIENTS, "p1") is False
        assert await store.get(PATIENTS, "p1") is None

    @pytest.mark.asyncio
    async def test_events_come_back_as_their_variant(self, store):
        await store.put(EVENTS, make_note("e1"))
        event = await store.get(EVENTS, "e1")
        assert isinstance(event, ClinicalNoteEvent)

    @pytest.mark.asyncio
    async def test_settings_round_trip(self, store):
        await store.put(SETTINGS, ClinicSettings(clinic_name="Sorriso", access_pin="1234"))
        stored = await store.get(SETTINGS, SETTINGS_KEY)
        assert stored.clinic_name == "Sorriso"
        assert stored.access_pin == "1234"

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, store):
        await store.put(PATIENTS, make_patient())
        await store.init()
        assert await store.get(PATIENTS, "p1") is not None


class TestStoreTransaction:
    """Tests for multi-step transactions."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, store):
        async with store.transaction() as tx:
            await tx.put(PATIENTS, make_patient())
            await tx.put(EVENTS, make_note("e1"))
            # Reads inside the transaction see its own writes
            assert await tx.get(PATIENTS, "p1") is not None

        assert await store.get(EVENTS, "e1") is not None

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, store):
        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                await tx.put(PATIENTS, make_patient())
                raise RuntimeError("boom")

        assert await store.get(PATIENTS, "p1") is None

    @pytest.mark.asyncio
    async def test_clear(self, store):
        await store.put(EVENTS, make_note("e1"))
        await store.put(EVENTS, make_note("e2"))

        async with store.transaction() as tx:
            assert await tx.clear(EVENTS) == 2

        assert await store.get_all(EVENTS) == []


class TestStorageUnavailable:
    """Tests for failures to open the database."""

    @pytest.mark.asyncio
    async def test_init_on_unreachable_path(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        try:
            with pytest.raises(StorageUnavailableError):
                await RecordStore(engine).init()
        finally:
            await engine.dispose()
