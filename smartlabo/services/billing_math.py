# smartlabo/services/billing_math.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from smartlabo.schemas.invoice import InvoiceIn, LineItem, PaymentStatus
from smartlabo.services.formatting import now_local

OVERDUE_AFTER_DAYS = 30


def D(x) -> Decimal:
    try:
        return Decimal(str(x or 0))
    except Exception:
        return Decimal("0")


def money2(x) -> Decimal:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def items_subtotal(items: Iterable[LineItem]) -> Decimal:
    """Displayed subtotal only; the invoice total stays authoritative."""
    return money2(sum((it.line_total for it in items), Decimal("0")))


def remaining_amount(invoice: InvoiceIn) -> Decimal:
    rest = D(invoice.total_amount) - D(invoice.paid_amount)
    return money2(rest if rest > 0 else 0)


def is_paid(invoice: InvoiceIn) -> bool:
    if invoice.canonical_status == PaymentStatus.PAID.value:
        return True
    return D(invoice.paid_amount) >= D(invoice.total_amount)


def payment_percentage(invoice: InvoiceIn) -> int:
    total = D(invoice.total_amount)
    if total == 0:
        return 0
    pct = D(invoice.paid_amount) / total * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_overdue(invoice: InvoiceIn, *, today: Optional[date] = None) -> bool:
    if is_paid(invoice):
        return False
    issued = invoice.issue_date
    # unparsed date strings are kept for display only
    if not isinstance(issued, date):
        return False
    if isinstance(issued, datetime):
        issued = issued.date()
    today = today or now_local().date()
    return issued < today - timedelta(days=OVERDUE_AFTER_DAYS)

