"""Tests for event derivation rules."""

import pytest

from prontuario.exceptions import ValidationError
from prontuario.schemas import (
    BudgetPayload,
    CertificatePayload,
    ClinicalNoteEvent,
    PrescriptionEvent,
    PrescriptionItem,
    PrescriptionPayload,
    ReceiptPayload,
)
from prontuario.services.events import (
    build_patient_alerts,
    derive_document_summary,
    derive_summary,
    patient_timeline,
    validate_clinical_note,
)

from conftest import FIXED_NOW, ONE_DAY


def note(event_id, patient_id="p1", created_at=FIXED_NOW, event_type="evolution", **fields):
    return ClinicalNoteEvent(
        id=event_id, patient_id=patient_id, type=event_type, created_at=created_at, **fields
    )


def prescription(event_id, patient_id="p1", created_at=FIXED_NOW):
    return PrescriptionEvent(
        id=event_id,
        patient_id=patient_id,
        type="rx",
        created_at=created_at,
        payload=PrescriptionPayload(items=[PrescriptionItem(drug="Amoxicilina", pos="8/8h")]),
    )


class TestDeriveSummary:
    """Tests for clinical-note summaries."""

    def test_all_parts(self):
        assert derive_summary("evolution", " dor de dente ", "K02") == "Evolução/Anamnese • dor de dente • CID K02"

    def test_blank_parts_skipped(self):
        assert derive_summary("exam", "", "  ") == "Exame"

    def test_cid_without_chief(self):
        assert derive_summary("procedure", None, "Z01") == "Procedimento • CID Z01"


class TestDeriveDocumentSummary:
    """Tests for document summaries."""

    def test_prescription_counts_extra_items(self):
        payload = PrescriptionPayload(
            items=[PrescriptionItem(drug="Amoxicilina"), PrescriptionItem(drug="Ibuprofeno")]
        )
        assert derive_document_summary("rx", payload) == "Receita • Amoxicilina (+1)"

    def test_prescription_without_items(self):
        assert derive_document_summary("rx", PrescriptionPayload()) == "Receita • receita"

    def test_certificate(self):
        assert derive_document_summary("certificate", CertificatePayload(days=3)) == "Atestado • 3 dia(s)"

    def test_budget(self):
        assert derive_document_summary("budget", BudgetPayload()) == "Orçamento • validade 7 dia(s)"

    def test_receipt_value(self):
        assert derive_document_summary("receipt", ReceiptPayload(value="R$ 150,00")) == "Recibo • R$ 150,00"

    def test_receipt_without_value(self):
        assert derive_document_summary("receipt", ReceiptPayload()) == "Recibo • valor"


class TestCertificateDays:
    """Invalid day counts fall back to one day."""

    @pytest.mark.parametrize("raw", [None, "", "abc", 0, -2])
    def test_defaults_to_one(self, raw):
        assert CertificatePayload(days=raw).days == 1


class TestValidateClinicalNote:
    """Tests for the clinical-note content rule."""

    def test_requires_chief_or_text(self):
        with pytest.raises(ValidationError):
            validate_clinical_note("  ", "")

    def test_chief_alone_is_enough(self):
        validate_clinical_note("dor", "")

    def test_text_alone_is_enough(self):
        validate_clinical_note("", "paciente estável")


class TestPatientTimeline:
    """Tests for timeline filtering."""

    def test_newest_first_and_only_that_patient(self):
        events = [
            note("old", created_at=FIXED_NOW - ONE_DAY),
            note("other", patient_id="p2"),
            note("new", created_at=FIXED_NOW),
        ]
        assert [e.id for e in patient_timeline(events, "p1")] == ["new", "old"]

    def test_filter_by_type(self):
        events = [note("n1"), prescription("rx1")]
        assert [e.id for e in patient_timeline(events, "p1", event_type="rx")] == ["rx1"]

    def test_query_searches_every_field(self):
        events = [note("n1", text="Dor lombar"), note("n2", vitals="PA 12x8"), prescription("rx1")]
        assert [e.id for e in patient_timeline(events, "p1", query="amoxi")] == ["rx1"]
        assert [e.id for e in patient_timeline(events, "p1", query="LOMBAR")] == ["n1"]

    def test_blank_query_keeps_all(self):
        events = [note("n1"), note("n2")]
        assert len(patient_timeline(events, "p1", query="   ")) == 2


class TestBuildPatientAlerts:
    """Tests for the alert badges."""

    def test_no_history(self):
        alerts = build_patient_alerts([], "p1", FIXED_NOW)
        assert [(a.level, a.text) for a in alerts] == [("warn", "sem histórico")]

    def test_recent_record_is_ok(self):
        alerts = build_patient_alerts([note("n1", created_at=FIXED_NOW - 3 * ONE_DAY)], "p1", FIXED_NOW)
        assert [(a.level, a.text) for a in alerts] == [("ok", "último registro: 3d")]

    def test_stale_threshold_is_exclusive(self):
        at_limit = build_patient_alerts([note("n1", created_at=FIXED_NOW - 180 * ONE_DAY)], "p1", FIXED_NOW)
        past_limit = build_patient_alerts([note("n1", created_at=FIXED_NOW - 181 * ONE_DAY)], "p1", FIXED_NOW)
        assert at_limit[0].level == "ok"
        assert past_limit[0].level == "warn"
        assert past_limit[0].text == "último registro: 181d"

    def test_last_prescription_badge(self):
        events = [prescription("rx1", created_at=FIXED_NOW - ONE_DAY), note("n1")]
        alerts = build_patient_alerts(events, "p1", FIXED_NOW)
        assert alerts[-1].level == "accent"
        assert alerts[-1].text == "última receita: 14/03/2024"
