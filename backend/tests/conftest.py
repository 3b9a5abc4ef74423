"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- A record store on a throwaway SQLite file per test
- The application session and the services built on it
- A controllable clock and PIN gates
- HTTP client for API testing
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from prontuario.database import build_engine
from prontuario.dependencies import get_backup_engine, get_directory, get_timeline
from prontuario.main import app
from prontuario.repositories import RecordStore
from prontuario.schemas import ClinicSettings, PatientDraft
from prontuario.services.backup import BackupEngine
from prontuario.services.directory import PatientDirectory
from prontuario.services.session import open_session, save_settings
from prontuario.services.timeline import Timeline

# 2024-03-15 12:00:00 UTC, 09:00 in America/Sao_Paulo
FIXED_NOW = 1_710_504_000_000
ONE_DAY = 24 * 60 * 60 * 1000

TEST_PIN = "4321"


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = FIXED_NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> int:
        self.now += millis
        return self.now


class StaticGate:
    """PIN gate with a fixed answer that records what it was asked."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.actions: list[str] = []

    async def confirm(self, action: str) -> bool:
        self.actions.append(action)
        return self.answer


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Async engine on a fresh SQLite file, disposed after the test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'prontuario_test.db'}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(test_engine) -> RecordStore:
    """Initialized record store."""
    record_store = RecordStore(test_engine)
    await record_store.init()
    return record_store


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def allow_gate() -> StaticGate:
    return StaticGate(True)


@pytest.fixture
def deny_gate() -> StaticGate:
    return StaticGate(False)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def app_session(store):
    """Application session opened on the empty store."""
    return await open_session(store)


@pytest.fixture
def directory(store, clock) -> PatientDirectory:
    return PatientDirectory(store, clock=clock)


@pytest.fixture
def timeline(store, directory, clock) -> Timeline:
    return Timeline(store, directory, clock=clock)


@pytest.fixture
def backup_engine(store, clock) -> BackupEngine:
    return BackupEngine(store, clock=clock)


@pytest_asyncio.fixture
async def patient(directory, app_session):
    """A saved patient, selected in the session."""
    return await directory.create_or_update(
        app_session,
        PatientDraft(
            name="João da Silva",
            identifier="123.456.789-00",
            phone="(11) 99999-0000",
            birth="1980-05-02",
            notes="Alergia a dipirona",
        ),
    )


@pytest_asyncio.fixture
async def other_patient(directory, app_session, clock):
    """A second patient saved one minute after the first fixture runs."""
    clock.advance(60_000)
    return await directory.create_or_update(app_session, PatientDraft(name="Maria Souza"))


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(store, app_session, directory, timeline, backup_engine):
    """Async test client for the FastAPI app bound to the test store.

    The app lifespan does not run under ASGITransport, so the store and
    session are placed on ``app.state`` directly. The access PIN is set to
    :data:`TEST_PIN`.
    """
    await save_settings(
        store,
        app_session,
        ClinicSettings(clinic_name="Clínica Teste", access_pin=TEST_PIN),
        StaticGate(True),
    )
    app.state.store = store
    app.state.session = app_session

    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_timeline] = lambda: timeline
    app.dependency_overrides[get_backup_engine] = lambda: backup_engine

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def pin_headers() -> dict[str, str]:
    """Headers carrying the correct access PIN."""
    return {"X-Access-PIN": TEST_PIN}
