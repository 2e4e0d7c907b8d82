from datetime import date
from decimal import Decimal

from smartlabo.schemas.invoice import InvoiceIn, as_line_items
from smartlabo.services.billing_math import (
    is_overdue,
    is_paid,
    items_subtotal,
    payment_percentage,
    remaining_amount,
)


def _inv(**kw):
    data = {"invoiceNumber": "FAC000010", "totalAmount": 200}
    data.update(kw)
    return InvoiceIn.model_validate(data)


def test_remaining_and_percentage():
    inv = _inv(paidAmount=50)
    assert remaining_amount(inv) == Decimal("150.00")
    assert payment_percentage(inv) == 25
    assert remaining_amount(_inv(paidAmount=300)) == Decimal("0.00")
    assert payment_percentage(_inv(totalAmount=0)) == 0


def test_is_paid_by_status_or_amount():
    assert is_paid(_inv(paymentStatus="paid"))
    assert is_paid(_inv(paidAmount=200))
    assert not is_paid(_inv(paidAmount=199.99))


def test_is_overdue_after_thirty_days():
    today = date(2026, 10, 17)
    assert is_overdue(_inv(issueDate="2026-09-01"), today=today)
    assert not is_overdue(_inv(issueDate="2026-10-01"), today=today)
    assert not is_overdue(_inv(issueDate="2026-09-01", paymentStatus="paid"), today=today)
    assert not is_overdue(_inv(), today=today)


def test_items_subtotal():
    items = as_line_items([{"price": 50}, {"price": 80, "quantity": 2}])
    assert items_subtotal(items) == Decimal("210.00")


def test_unparsed_issue_date_is_never_overdue():
    inv = _inv(issueDate="17/10/2026")
    assert inv.issue_date == "17/10/2026"
    assert not is_overdue(inv, today=date(2027, 1, 1))
