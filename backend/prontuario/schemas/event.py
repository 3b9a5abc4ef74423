"""Event schemas.

An event is an immutable, timestamped entry on a patient's timeline. The
``type`` field is the discriminator: clinical-note types carry free-text
fields, document types carry a typed ``payload``.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, field_validator

from prontuario.schemas.common import OptionalDate, RecordModel


class EventType(str, Enum):
    """Closed set of event kinds."""

    EVOLUTION = "evolution"
    PROCEDURE = "procedure"
    EXAM = "exam"
    NOTE = "note"
    RX = "rx"
    CERTIFICATE = "certificate"
    BUDGET = "budget"
    RECEIPT = "receipt"


ClinicalNoteType = Literal["evolution", "procedure", "exam", "note"]


def _int_or_default(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


# === Payloads ===


class PrescriptionItem(RecordModel):
    """One drug line on a prescription."""

    drug: str = ""
    pos: str = Field(default="", description="Dosage instructions (posologia)")


class PrescriptionPayload(RecordModel):
    items: list[PrescriptionItem] = Field(default_factory=list)
    obs: str = ""


class CertificatePayload(RecordModel):
    days: int = 1
    start: OptionalDate = None
    text: str = ""

    @field_validator("days", mode="before")
    @classmethod
    def _default_days(cls, value: Any) -> int:
        return _int_or_default(value, 1)


class BudgetPayload(RecordModel):
    text: str = ""
    days: int = Field(default=7, description="Validity window in days")
    obs: str = ""

    @field_validator("days", mode="before")
    @classmethod
    def _default_days(cls, value: Any) -> int:
        return _int_or_default(value, 7)


class ReceiptPayload(RecordModel):
    value: str = ""
    for_: str = Field(default="", alias="for", description="What the payment refers to")
    pay: str = Field(default="", description="Payment method")
    obs: str = ""


DocumentPayload = PrescriptionPayload | CertificatePayload | BudgetPayload | ReceiptPayload


# === Stored events ===


class EventBase(RecordModel):
    id: str
    patient_id: str
    created_at: int
    summary: str = ""


class ClinicalNoteEvent(EventBase):
    """Evolution, procedure, exam or free observation."""

    type: ClinicalNoteType
    chief: str = ""
    vitals: str = ""
    cid: str = ""
    text: str = ""


class PrescriptionEvent(EventBase):
    type: Literal["rx"]
    payload: PrescriptionPayload = Field(default_factory=PrescriptionPayload)


class CertificateEvent(EventBase):
    type: Literal["certificate"]
    payload: CertificatePayload = Field(default_factory=CertificatePayload)


class BudgetEvent(EventBase):
    type: Literal["budget"]
    payload: BudgetPayload = Field(default_factory=BudgetPayload)


class ReceiptEvent(EventBase):
    type: Literal["receipt"]
    payload: ReceiptPayload = Field(default_factory=ReceiptPayload)


Event = Annotated[
    Union[ClinicalNoteEvent, PrescriptionEvent, CertificateEvent, BudgetEvent, ReceiptEvent],
    Field(discriminator="type"),
]

DocumentEvent = PrescriptionEvent | CertificateEvent | BudgetEvent | ReceiptEvent

event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


# === Creation drafts ===


class ClinicalNoteCreate(RecordModel):
    """Fields submitted by the encounter form."""

    type: ClinicalNoteType = "evolution"
    chief: str = ""
    vitals: str = ""
    cid: str = ""
    text: str = ""
    summary: str = Field(default="", description="Explicit summary; derived when blank")


class DocumentDraftBase(RecordModel):
    title: str = Field(default="", description="Explicit summary; derived when blank")


class PrescriptionCreate(DocumentDraftBase):
    type: Literal["rx"] = "rx"
    payload: PrescriptionPayload = Field(default_factory=PrescriptionPayload)


class CertificateCreate(DocumentDraftBase):
    type: Literal["certificate"] = "certificate"
    payload: CertificatePayload = Field(default_factory=CertificatePayload)


class BudgetCreate(DocumentDraftBase):
    type: Literal["budget"] = "budget"
    payload: BudgetPayload = Field(default_factory=BudgetPayload)


class ReceiptCreate(DocumentDraftBase):
    type: Literal["receipt"] = "receipt"
    payload: ReceiptPayload = Field(default_factory=ReceiptPayload)


DocumentCreate = Annotated[
    Union[PrescriptionCreate, CertificateCreate, BudgetCreate, ReceiptCreate],
    Field(discriminator="type"),
]
