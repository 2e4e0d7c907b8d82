import logging
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from smartlabo.schemas.invoice import (
    InvoiceIn,
    LineItem,
    PatientSnapshot,
    as_line_items,
    as_patient,
)


def test_legacy_french_fields_are_accepted():
    inv = InvoiceIn.model_validate({
        "numeroFacture": "FAC000007",
        "dateFacture": "2026-10-01T08:00:00Z",
        "montantTotal": 240.5,
        "montantPaye": 40,
        "modePaiement": "virement",
        "statusPaiement": "partially_paid",
        "virementDetails": {"banque": "CIH", "rib": "123", "reference": "VIR-1"},
    })
    assert inv.invoice_number == "FAC000007"
    assert isinstance(inv.issue_date, datetime)
    assert inv.total_amount == Decimal("240.5")
    assert inv.paid_amount == Decimal("40")
    assert inv.payment_method == "bank_transfer"
    assert inv.canonical_status == "partially_paid"
    assert inv.bank_transfer_details.bank_name == "CIH"
    assert inv.bank_transfer_details.account_id == "123"


def test_card_alias_and_unknown_method_kept():
    assert InvoiceIn(invoice_number="A", total_amount=1,
                     payment_method="carte").payment_method == "card"
    assert InvoiceIn(invoice_number="A", total_amount=1,
                     payment_method="Crypto").payment_method == "crypto"


def test_conflicting_statuses_logged(caplog):
    with caplog.at_level(logging.WARNING):
        inv = InvoiceIn.model_validate({
            "invoiceNumber": "FAC9",
            "totalAmount": 10,
            "paymentStatus": "paid",
            "status": "pending",
        })
    assert inv.canonical_status == "paid"
    assert "conflicting statuses" in caplog.text


def test_negative_total_rejected():
    with pytest.raises(ValidationError):
        InvoiceIn(invoice_number="FAC1", total_amount=-1)


def test_missing_invoice_number_rejected():
    with pytest.raises(ValidationError):
        InvoiceIn.model_validate({"totalAmount": 10})


def test_settlement_code_per_method():
    amana = InvoiceIn.model_validate({
        "invoiceNumber": "F", "totalAmount": 1,
        "paymentMethod": "amana", "codeAmana": "AMA-1",
    })
    assert amana.method_settlement_code == "AMA-1"

    cashplus = InvoiceIn.model_validate({
        "invoiceNumber": "F", "totalAmount": 1,
        "paymentMethod": "cashplus", "codeAmana": "AMA-1",
    })
    assert cashplus.method_settlement_code is None


def test_line_item_defaults():
    item = LineItem.model_validate({})
    assert item.name == "Analyse"
    assert item.price == Decimal("0")
    assert item.quantity == 1
    assert item.line_total == Decimal("0")

    item = LineItem.model_validate({"name": None, "price": None})
    assert item.name == "Analyse"
    assert item.price == Decimal("0")


def test_line_item_quantity_multiplies():
    item = LineItem.model_validate({"description": "TSH", "unitPrice": 90, "quantite": 2})
    assert item.name == "TSH"
    assert item.line_total == Decimal("180")


def test_patient_blank_fields_are_missing():
    p = PatientSnapshot.model_validate({"nom": " ", "prenom": "Ali", "telephone": 612345678})
    assert p.last_name is None
    assert p.full_name == "Ali"
    assert p.phone == "612345678"


def test_coercion_helpers():
    assert as_patient(None) == PatientSnapshot()
    obj = SimpleNamespace(name="CRP", price=30, quantity=None)
    items = as_line_items([obj, None, {"price": 5}])
    assert [i.name for i in items] == ["CRP", "Analyse", "Analyse"]
    assert items[0].quantity == 1
