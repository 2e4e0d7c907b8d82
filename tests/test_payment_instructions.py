from smartlabo.schemas.invoice import InvoiceIn
from smartlabo.services.pdfs.payment_instructions import (
    AMANA_INSTRUCTION,
    CASHPLUS_INSTRUCTION,
    build_payment_block,
)


def _invoice(**extra):
    data = {"invoiceNumber": "FAC000001", "totalAmount": 100}
    data.update(extra)
    return InvoiceIn.model_validate(data)


def test_amana_with_code():
    block = build_payment_block(_invoice(paymentMethod="amana", settlementCode="1234"))
    joined = "\n".join(block.texts)
    assert "1234" in joined
    assert AMANA_INSTRUCTION in joined
    assert block.texts[0] == "Mode de paiement: Amana"


def test_amana_without_code_is_label_only():
    block = build_payment_block(_invoice(paymentMethod="amana"))
    assert block.texts == ["Mode de paiement: Amana"]


def test_cashplus_with_legacy_code_field():
    block = build_payment_block(_invoice(paymentMethod="cashplus", codeCashPlus="CP-0000001234"))
    assert block.texts == [
        "Mode de paiement: CashPlus",
        "Code CashPlus: CP-0000001234",
        CASHPLUS_INSTRUCTION,
    ]


def test_cashplus_without_code_is_label_only():
    assert build_payment_block(_invoice(paymentMethod="cashplus")).texts == [
        "Mode de paiement: CashPlus"
    ]


def test_simple_methods_single_line():
    assert build_payment_block(_invoice(paymentMethod="cash")).texts == ["Mode de paiement: Espèces"]
    assert build_payment_block(_invoice(paymentMethod="card")).texts == ["Mode de paiement: Carte bancaire"]
    assert build_payment_block(_invoice(paymentMethod="cheque")).texts == ["Mode de paiement: Chèque"]


def test_unknown_and_missing_method():
    assert build_payment_block(_invoice(paymentMethod="paypal")).texts == ["Mode de paiement: paypal"]
    assert build_payment_block(_invoice()).texts == ["Mode de paiement: Non défini"]


def test_bank_transfer_defaults_when_details_missing():
    block = build_payment_block(_invoice(paymentMethod="bank_transfer"))
    assert block.texts == [
        "Mode de paiement: Virement bancaire",
        "Banque: Banque Populaire",
        "RIB: 230 810 0001234567890123 45",
        "Référence: N/A",
    ]


def test_bank_transfer_with_details():
    block = build_payment_block(_invoice(
        paymentMethod="bank_transfer",
        bankTransferDetails={"bankName": "Attijariwafa", "accountId": "007 780", "reference": "VIR-FAC000001-20261017"},
    ))
    assert block.texts[1:] == [
        "Banque: Attijariwafa",
        "RIB: 007 780",
        "Référence: VIR-FAC000001-20261017",
    ]


def test_block_cursor_offsets():
    # method line always advances 20, the last detail line keeps the cursor
    assert build_payment_block(_invoice(paymentMethod="cash")).height == 20
    assert build_payment_block(_invoice(paymentMethod="amana", settlementCode="1")).height == 40
    assert build_payment_block(_invoice(paymentMethod="bank_transfer")).height == 50
