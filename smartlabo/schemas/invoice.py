# FILE: smartlabo/schemas/invoice.py
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.aliases import AliasChoices

logger = logging.getLogger(__name__)


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    AMANA = "amana"
    CASHPLUS = "cashplus"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# older records stored French method codes
_LEGACY_METHODS = {
    "carte": PaymentMethod.CARD.value,
    "virement": PaymentMethod.BANK_TRANSFER.value,
    "especes": PaymentMethod.CASH.value,
    "espèces": PaymentMethod.CASH.value,
}


def _blank_to_none(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, str):
        s = v.strip()
        return s or None
    return v


def _text_or_none(v: Any) -> Optional[str]:
    v = _blank_to_none(v)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


INVOICE_NUMBER_KEYS = ("invoice_number", "invoiceNumber", "numeroFacture")


class BankTransferDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True,
                              extra="ignore",
                              from_attributes=True)

    bank_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("bank_name", "bankName", "banque"))
    account_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("account_id", "accountId", "rib"))
    swift: Optional[str] = None
    reference: Optional[str] = None

    @field_validator("bank_name", "account_id", "swift", "reference", mode="before")
    def _txt(cls, v):
        return _text_or_none(v)


class InvoiceIn(BaseModel):
    """
    Billing record as handed over by the invoices module.

    Accepts both current and legacy (French) field names:
      - invoice_number OR invoiceNumber OR numeroFacture
      - payment_status OR paymentStatus OR statusPaiement
      - legacy_status OR legacyStatus OR status OR statut
      - ...
    The two status fields are folded into ``canonical_status``.
    """
    model_config = ConfigDict(populate_by_name=True,
                              extra="ignore",
                              from_attributes=True)

    invoice_number: str = Field(
        min_length=1,
        validation_alias=AliasChoices(*INVOICE_NUMBER_KEYS))
    issue_date: Optional[Union[datetime, date, str]] = Field(
        default=None,
        validation_alias=AliasChoices("issue_date", "issueDate",
                                      "dateFacture", "dateEmission"))
    due_date: Optional[Union[datetime, date, str]] = Field(
        default=None,
        validation_alias=AliasChoices("due_date", "dueDate", "dateEcheance"))

    total_amount: Decimal = Field(
        ge=0,
        validation_alias=AliasChoices("total_amount", "totalAmount",
                                      "montantTotal"))
    paid_amount: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("paid_amount", "paidAmount",
                                      "montantPaye"))

    payment_method: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("payment_method", "paymentMethod",
                                      "modePaiement", "methodePaiement"))

    payment_status: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("payment_status", "paymentStatus",
                                      "statusPaiement"))
    legacy_status: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("legacy_status", "legacyStatus",
                                      "status", "statut"))
    canonical_status: str = PaymentStatus.PENDING.value

    settlement_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("settlement_code", "settlementCode"))
    code_amana: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("code_amana", "codeAmana"))
    code_cashplus: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("code_cashplus", "codeCashPlus"))

    bank_transfer_details: Optional[BankTransferDetails] = Field(
        default=None,
        validation_alias=AliasChoices("bank_transfer_details",
                                      "bankTransferDetails",
                                      "virementDetails"))

    @field_validator("invoice_number", mode="before")
    def _num(cls, v):
        return _text_or_none(v) or ""

    @field_validator("issue_date", "due_date", mode="before")
    def _dt(cls, v):
        v = _blank_to_none(v)
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                # kept as given; rendered as N/A
                logger.warning("Unparseable invoice date %r", v)
                return v
        return v

    @field_validator("paid_amount", mode="before")
    def _paid(cls, v):
        return Decimal("0") if _blank_to_none(v) is None else v

    @field_validator("payment_method", mode="before")
    def _method(cls, v):
        s = _text_or_none(getattr(v, "value", v))
        if s is None:
            return None
        low = s.lower()
        return _LEGACY_METHODS.get(low, low)

    @field_validator("payment_status", "legacy_status", mode="before")
    def _status(cls, v):
        s = _text_or_none(getattr(v, "value", v))
        return s.lower() if s else None

    @field_validator("settlement_code", "code_amana", "code_cashplus", mode="before")
    def _code(cls, v):
        return _text_or_none(v)

    @model_validator(mode="after")
    def _fold_status(self):
        primary, legacy = self.payment_status, self.legacy_status
        if primary and legacy and primary != legacy:
            logger.warning(
                "Invoice %s carries conflicting statuses payment_status=%s legacy_status=%s; using %s",
                self.invoice_number, primary, legacy, primary)
        self.canonical_status = primary or legacy or PaymentStatus.PENDING.value
        return self

    @property
    def method_settlement_code(self) -> Optional[str]:
        if self.payment_method == PaymentMethod.AMANA.value:
            return self.settlement_code or self.code_amana
        if self.payment_method == PaymentMethod.CASHPLUS.value:
            return self.settlement_code or self.code_cashplus
        return self.settlement_code


class PatientSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True,
                              extra="ignore",
                              from_attributes=True)

    last_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("last_name", "lastName", "nom"))
    first_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("first_name", "firstName", "prenom"))
    patient_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("patient_number", "patientNumber",
                                      "numeroPatient"))
    email: Optional[str] = None
    phone: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("phone", "telephone"))

    @field_validator("last_name", "first_name", "patient_number", "email",
                     "phone", mode="before")
    def _txt(cls, v):
        return _text_or_none(v)

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.last_name, self.first_name) if p]
        return " ".join(parts) or None


class LineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True,
                              extra="ignore",
                              from_attributes=True)

    name: str = Field(
        default="Analyse",
        validation_alias=AliasChoices("name", "description", "designation",
                                      "nom"))
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("price", "unitPrice", "unit_price",
                                      "prixUnitaire", "prix"))
    quantity: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("quantity", "quantite"))

    @field_validator("name", mode="before")
    def _name(cls, v):
        return _text_or_none(v) or "Analyse"

    @field_validator("price", mode="before")
    def _price(cls, v):
        return Decimal("0") if _blank_to_none(v) is None else v

    @field_validator("quantity", mode="before")
    def _qty(cls, v):
        return 1 if _blank_to_none(v) is None else v

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class InvoicePdfRequest(BaseModel):
    invoice: InvoiceIn
    patient: PatientSnapshot = Field(default_factory=PatientSnapshot)
    items: List[LineItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items", "line_items", "lineItems",
                                      "analyses"))

    model_config = ConfigDict(populate_by_name=True)


class InvoicePdfOut(BaseModel):
    filename: str
    url: str


def as_invoice(obj: Any) -> InvoiceIn:
    if isinstance(obj, InvoiceIn):
        return obj
    return InvoiceIn.model_validate(obj)


def invoice_number_of(obj: Any) -> Optional[str]:
    """Invoice number read without validating, for error reports."""
    for key in INVOICE_NUMBER_KEYS:
        v = obj.get(key) if isinstance(obj, dict) else getattr(obj, key, None)
        s = _text_or_none(v)
        if s:
            return s
    return None


def as_patient(obj: Any) -> PatientSnapshot:
    if isinstance(obj, PatientSnapshot):
        return obj
    if obj is None:
        return PatientSnapshot()
    return PatientSnapshot.model_validate(obj)


def as_line_items(objs: Any) -> List[LineItem]:
    out: List[LineItem] = []
    for it in (objs or []):
        if isinstance(it, LineItem):
            out.append(it)
        elif it is None:
            out.append(LineItem())
        else:
            out.append(LineItem.model_validate(it))
    return out
