"""Tests for the application session and the PIN gate."""

import pytest

from prontuario.config import settings
from prontuario.constants import SETTINGS, SETTINGS_KEY
from prontuario.exceptions import AccessDeniedError
from prontuario.schemas import ClinicSettings, PatientDraft
from prontuario.services.pin import (
    ACTION_CHANGE_PIN,
    PinCheck,
    effective_pin,
    require_confirmation,
)
from prontuario.services.session import ensure_settings, open_session, save_settings


class TestOpenSession:
    """Tests for building the first session."""

    @pytest.mark.asyncio
    async def test_seeds_default_settings(self, store):
        session = await open_session(store)

        assert session.settings == ClinicSettings()
        assert await store.get(SETTINGS, SETTINGS_KEY) == ClinicSettings()
        assert session.selected_patient_id is None

    @pytest.mark.asyncio
    async def test_keeps_existing_settings(self, store):
        await store.put(SETTINGS, ClinicSettings(clinic_name="Sorriso"))
        assert (await ensure_settings(store)).clinic_name == "Sorriso"

    @pytest.mark.asyncio
    async def test_cursor_starts_on_most_recent_patient(self, store, directory, app_session, clock):
        await directory.create_or_update(app_session, PatientDraft(name="Ana"))
        clock.advance(1_000)
        bruno = await directory.create_or_update(app_session, PatientDraft(name="Bruno"))

        reopened = await open_session(store)
        assert reopened.selected_patient_id == bruno.id

    @pytest.mark.asyncio
    async def test_save_settings(self, store, app_session):
        await save_settings(store, app_session, ClinicSettings(professional_name="Dr. Rui"))

        assert app_session.settings.professional_name == "Dr. Rui"
        assert (await store.get(SETTINGS, SETTINGS_KEY)).professional_name == "Dr. Rui"

    @pytest.mark.asyncio
    async def test_blank_pin_keeps_stored_pin(self, store, app_session, allow_gate):
        await save_settings(store, app_session, ClinicSettings(access_pin="2468"), allow_gate)
        await save_settings(store, app_session, ClinicSettings(clinic_name="Sorriso", access_pin="  "))

        assert app_session.settings.access_pin == "2468"
        assert (await store.get(SETTINGS, SETTINGS_KEY)).access_pin == "2468"

    @pytest.mark.asyncio
    async def test_pin_change_asks_the_gate(self, store, app_session, allow_gate):
        await save_settings(store, app_session, ClinicSettings(access_pin=" 2468 "), allow_gate)

        assert allow_gate.actions == [ACTION_CHANGE_PIN]
        assert app_session.settings.access_pin == "2468"

    @pytest.mark.asyncio
    async def test_pin_change_denied(self, store, app_session, deny_gate):
        with pytest.raises(AccessDeniedError):
            await save_settings(store, app_session, ClinicSettings(access_pin="2468"), deny_gate)
        with pytest.raises(AccessDeniedError):
            await save_settings(store, app_session, ClinicSettings(access_pin="2468"))

        assert app_session.settings.access_pin == ""
        assert (await store.get(SETTINGS, SETTINGS_KEY)).access_pin == ""

    @pytest.mark.asyncio
    async def test_same_pin_needs_no_gate(self, store, app_session, allow_gate):
        await save_settings(store, app_session, ClinicSettings(access_pin="2468"), allow_gate)
        await save_settings(store, app_session, ClinicSettings(clinic_name="Sorriso", access_pin="2468"))

        assert app_session.settings.clinic_name == "Sorriso"

    def test_profile_excludes_pin(self):
        profile = ClinicSettings(clinic_name="Sorriso", access_pin="2468").profile()

        assert profile.clinic_name == "Sorriso"
        assert "accessPin" not in profile.to_record()


class TestPinCheck:
    """Tests for the request PIN gate."""

    @pytest.mark.asyncio
    async def test_matching_pin(self):
        assert await PinCheck("1234", "1234").confirm("Apagar tudo") is True

    @pytest.mark.asyncio
    async def test_surrounding_whitespace_ignored(self):
        assert await PinCheck(" 1234 ", "1234").confirm("Apagar tudo") is True

    @pytest.mark.asyncio
    async def test_wrong_or_missing_pin(self):
        assert await PinCheck("0000", "1234").confirm("Apagar tudo") is False
        assert await PinCheck(None, "1234").confirm("Apagar tudo") is False

    def test_stored_pin_wins(self):
        assert effective_pin(ClinicSettings(access_pin="5555")) == "5555"

    def test_falls_back_to_configured_pin(self):
        assert effective_pin(ClinicSettings()) == settings.default_access_pin

    @pytest.mark.asyncio
    async def test_require_confirmation_raises_on_deny(self, deny_gate):
        with pytest.raises(AccessDeniedError, match="Excluir evento"):
            await require_confirmation(deny_gate, "Excluir evento")
