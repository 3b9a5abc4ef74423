"""Printable HTML documents.

Renders a single event (prescription, certificate, budget, receipt or a
clinical note) or a patient's whole history as a self-contained HTML page
carrying the clinic header and a signature block. Rendering is pure: it reads
the records it is given and never touches the store. Every user-supplied
string goes through :func:`escape`.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from prontuario.constants import label_type
from prontuario.exceptions import NotFoundError
from prontuario.schemas import (
    BudgetEvent,
    CertificateEvent,
    ClinicalNoteEvent,
    ClinicSettings,
    Event,
    Patient,
    PrescriptionEvent,
    ReceiptEvent,
)
from prontuario.services.events import patient_timeline
from prontuario.services.session import AppSession
from prontuario.utils.formatting import escape, format_date, format_timestamp, now_ms, slugify, to_local

DEFAULT_CLINIC_NAME = "Clínica"
HISTORY_TITLE = "Histórico do paciente"
EMPTY = "—"

_STYLE = """
<style>
  :root{--accent:#00b4ff}
  body{font-family: Arial, sans-serif; margin:28px; color:#111}
  .top{display:flex; justify-content:space-between; gap:16px; align-items:flex-start}
  .h1{font-size:18px; font-weight:800; margin:0}
  .sub{font-size:12px; color:#444; margin-top:4px}
  .box{border:1px solid #ddd; border-radius:12px; padding:14px; margin-top:14px}
  .line{height:1px; background:#eee; margin:14px 0}
  .row{display:flex; gap:14px; flex-wrap:wrap}
  .k{font-size:11px; color:#555}
  .v{font-size:13px; font-weight:700}
  .text{white-space:pre-wrap; font-size:13px; line-height:1.5}
  .lead{margin:0; font-size:14px; line-height:1.6}
  table{width:100%; border-collapse:collapse}
  th,td{border-bottom:1px solid #eee; text-align:left; padding:8px 6px; font-size:13px}
  th{font-size:12px; color:#444}
  .sign{margin-top:18px}
  .sign .l{height:1px; background:#111; width:280px; margin-top:40px}
  @media print{body{margin:12mm}}
</style>
"""

_SIGNATURE = '<div class="sign"><div class="l"></div><div class="k">Assinatura e carimbo</div></div>'

_LINE = '<div class="line"></div>'


def _joined(*parts: str) -> str:
    """Escape and join the non-blank parts with a bullet."""
    return " • ".join(escape(part) for part in parts if part)


def _field(key: str, value: object, fallback: str = EMPTY) -> str:
    return f'<div><div class="k">{escape(key)}</div><div class="v">{escape(value or fallback)}</div></div>'


def _header(settings: ClinicSettings, title: str, now: int) -> str:
    lines = [f'<p class="h1">{escape(settings.clinic_name or DEFAULT_CLINIC_NAME)}</p>']
    for text in (
        _joined(settings.professional_name, settings.professional_reg),
        _joined(settings.professional_contact, settings.professional_email),
        escape(settings.professional_address),
    ):
        if text:
            lines.append(f'<div class="sub">{text}</div>')

    return (
        '<div class="top">'
        f"<div>{''.join(lines)}</div>"
        '<div style="text-align:right">'
        f'<p class="h1">{escape(title)}</p>'
        f'<div class="sub">{escape(format_timestamp(now))}</div>'
        "</div></div>"
    )


def _page(settings: ClinicSettings, title: str, body: str, now: int) -> str:
    return (
        '<!doctype html><html lang="pt-BR"><head><meta charset="utf-8">'
        f"<title>{escape(title)}</title>{_STYLE}</head>"
        f"<body>{_header(settings, title, now)}{body}</body></html>"
    )


def _patient_box(patient: Patient | None, event: Event | None = None) -> str:
    fields = [
        _field("Paciente", patient.name if patient else "", fallback=""),
        _field("Identificador", patient.identifier if patient else ""),
        _field("Contato", patient.phone if patient else ""),
    ]
    if event is not None:
        fields.append(_field("Data do evento", format_timestamp(event.created_at)))
    return f'<div class="box"><div class="row">{"".join(fields)}</div></div>'


def certificate_period(days: int, start: date) -> tuple[date, date]:
    """Inclusive leave period: a one-day certificate starts and ends on ``start``."""
    return start, start + timedelta(days=max(days, 1) - 1)


def _prescription_body(event: PrescriptionEvent) -> str:
    items = [item for item in event.payload.items if item.drug]
    rows = "".join(
        f"<tr><td><b>{escape(item.drug)}</b></td><td>{escape(item.pos)}</td></tr>" for item in items
    ) or f'<tr><td colspan="2">{EMPTY}</td></tr>'

    body = (
        '<div class="box"><table>'
        "<thead><tr><th>Medicamento</th><th>Posologia</th></tr></thead>"
        f"<tbody>{rows}</tbody></table></div>"
    )
    if event.payload.obs:
        body += f'<div class="box"><div class="k">Observações</div><div class="text">{escape(event.payload.obs)}</div></div>'
    return body


def _certificate_body(event: CertificateEvent, patient_name: str) -> str:
    days = event.payload.days
    start, end = certificate_period(days, event.payload.start or to_local(event.created_at).date())

    if days > 1:
        period = (
            f"por <b>{days}</b> dias, de <b>{escape(format_date(start))}</b> "
            f"até <b>{escape(format_date(end))}</b>."
        )
    else:
        period = f"por <b>1</b> dia, em <b>{escape(format_date(start))}</b>."

    body = (
        '<div class="box"><p class="lead">'
        f"Atesto para os devidos fins que <b>{escape(patient_name)}</b> "
        f"necessita de afastamento {period}</p>"
    )
    note = event.payload.text.strip()
    if note:
        body += f'{_LINE}<div class="k">Observação</div><div class="text">{escape(note)}</div>'
    return body + "</div>"


def _budget_body(event: BudgetEvent) -> str:
    payload = event.payload
    return (
        '<div class="box">'
        f'<div class="k">Descrição</div><div class="text">{escape(payload.text)}</div>'
        f"{_LINE}"
        f'<div class="row">{_field("Validade", f"{payload.days} dia(s)")}{_field("Observações", payload.obs)}</div>'
        "</div>"
    )


def _receipt_body(event: ReceiptEvent, patient_name: str) -> str:
    payload = event.payload
    return (
        '<div class="box"><p class="lead">'
        f"Recebi de <b>{escape(patient_name)}</b> a quantia de <b>{escape(payload.value)}</b>, "
        f"referente a <b>{escape(payload.for_)}</b>.</p>"
        f"{_LINE}"
        f'<div class="row">{_field("Forma de pagamento", payload.pay)}{_field("Observações", payload.obs)}</div>'
        "</div>"
    )


def _note_body(event: ClinicalNoteEvent) -> str:
    body = (
        '<div class="box">'
        f'<div class="k">Resumo</div><div class="v">{escape(event.summary)}</div>'
        f"{_LINE}"
        f'<div class="k">Conteúdo</div><div class="text">{escape(event.text)}</div>'
    )
    if event.chief:
        body += f'{_LINE}<div class="k">Queixa principal</div><div class="v">{escape(event.chief)}</div>'
    if event.cid:
        body += f'{_LINE}<div class="k">CID</div><div class="v">{escape(event.cid)}</div>'
    if event.vitals:
        body += f'{_LINE}<div class="k">Sinais/Vitais</div><div class="v">{escape(event.vitals)}</div>'
    return body + "</div>"


def render_event_document(
    event: Event,
    patient: Patient | None,
    settings: ClinicSettings,
    now: int | None = None,
) -> str:
    """Render one event as a printable HTML page.

    Args:
        event: Event to render.
        patient: Owner of the event; None renders blank patient fields.
        settings: Clinic identity for the header.
        now: Issue time shown in the header, epoch ms. Defaults to now.
    """
    issued_at = now if now is not None else now_ms()
    patient_name = patient.name if patient else ""

    if isinstance(event, PrescriptionEvent):
        content = _prescription_body(event)
    elif isinstance(event, CertificateEvent):
        content = _certificate_body(event, patient_name)
    elif isinstance(event, BudgetEvent):
        content = _budget_body(event)
    elif isinstance(event, ReceiptEvent):
        content = _receipt_body(event, patient_name)
    else:
        content = _note_body(event)

    body = f"{_patient_box(patient, event)}{content}{_SIGNATURE}"
    return _page(settings, label_type(event.type), body, issued_at)


def render_history_document(
    patient: Patient,
    events: Iterable[Event],
    settings: ClinicSettings,
    now: int | None = None,
) -> str:
    """Render a patient's timeline as a summary table, newest first.

    Only events belonging to ``patient`` are listed.
    """
    issued_at = now if now is not None else now_ms()
    rows = "".join(
        "<tr>"
        f"<td>{escape(format_timestamp(event.created_at))}</td>"
        f"<td>{escape(label_type(event.type))}</td>"
        f"<td>{escape(event.summary)}</td>"
        "</tr>"
        for event in patient_timeline(events, patient.id)
    ) or f'<tr><td colspan="3">{EMPTY}</td></tr>'

    body = (
        f"{_patient_box(patient)}"
        '<div class="box"><div class="k">Linha do tempo (resumo)</div><table>'
        "<thead><tr><th>Data/Hora</th><th>Tipo</th><th>Resumo</th></tr></thead>"
        f"<tbody>{rows}</tbody></table></div>"
    )
    return _page(settings, HISTORY_TITLE, body, issued_at)


def suggested_filename(event: Event, patient: Patient | None) -> str:
    """``<type>_<patient>_<YYYY-MM-DD>.html``, dated by the event."""
    day = to_local(event.created_at).date().isoformat()
    name = slugify(patient.name) if patient else ""
    return f"{slugify(label_type(event.type))}_{name or 'paciente'}_{day}.html"


def history_filename(patient: Patient) -> str:
    return f"historico_{slugify(patient.name) or 'paciente'}.html"


def render_patient_history(session: AppSession, patient_id: str, now: int | None = None) -> str:
    """Render the history document of a patient in the session projection.

    Raises:
        NotFoundError: If the patient is not in the projection.
    """
    patient = session.find_patient(patient_id)
    if patient is None:
        raise NotFoundError(f"Patient {patient_id} not found")
    return render_history_document(patient, session.events, session.settings, now=now)
