# FILE: smartlabo/services/pdfs/invoice_pdf.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from typing import Any, List, Optional, Sequence, Tuple

from smartlabo.core.config import settings
from smartlabo.schemas.invoice import (
    InvoiceIn,
    LineItem,
    PatientSnapshot,
    as_invoice,
    as_line_items,
    as_patient,
)
from smartlabo.services.billing_math import is_overdue, payment_percentage, remaining_amount
from smartlabo.services.formatting import format_date_fr, format_money, now_local, text_or_na
from smartlabo.services.invoice_errors import InvoicePdfError, LayoutError
from smartlabo.services.payment_status import StatusBadge, resolve_invoice_status
from smartlabo.services.pdfs.engine import (
    CONTENT_WIDTH,
    MARGIN,
    MUTED,
    NumberedCanvas,
    PageFlow,
    resolve_pagesize,
)
from smartlabo.services.pdfs.invoice_items_table import TABLE_TOP, draw_items_table
from smartlabo.services.pdfs.payment_instructions import (
    PaymentBlock,
    build_payment_block,
    draw_payment_block,
)

logger = logging.getLogger(__name__)

BRAND_BLUE = "#2563eb"
RULE = "#e5e7eb"
FOOTER_GREY = "#999999"

# region gaps (points)
GAP_BEFORE_TOTALS_RULE = 10
GAP_AFTER_TOTALS_RULE = 20
GAP_BEFORE_PAYMENT = 50
GAP_BEFORE_STATUS = 40
STATUS_BADGE_W = 150
STATUS_BADGE_H = 30

FOOTER_LINES = (
    "Merci de votre confiance!",
    "Cette facture est générée électroniquement",
)


@dataclass
class InvoiceRenderSummary:
    invoice_number: str
    subtotal: Decimal
    total: Decimal
    status: StatusBadge
    payment: PaymentBlock
    patient_lines: List[str]
    pages: int
    remaining: Decimal
    paid_percent: int
    overdue: bool


def patient_lines(patient: PatientSnapshot) -> List[str]:
    """Patient block rows, absent values read N/A."""
    return [
        f"Nom: {text_or_na(patient.full_name)}",
        f"N° Patient: {text_or_na(patient.patient_number)}",
        f"Email: {text_or_na(patient.email)}",
        f"Téléphone: {text_or_na(patient.phone)}",
    ]


# ----------------------------
# Regions
# ----------------------------
def _draw_header(flow: PageFlow, invoice: InvoiceIn) -> None:
    flow.text(50, 50, settings.LAB_NAME, size=20, color=BRAND_BLUE)

    for top, txt in (
        (75, settings.LAB_TAGLINE),
        (90, settings.LAB_ADDRESS),
        (105, f"Tél: {settings.LAB_PHONE}"),
        (120, f"Email: {settings.LAB_EMAIL}"),
    ):
        flow.text(50, top, txt, size=10, color=MUTED)

    flow.text(400, 50, "FACTURE", size=24)
    issued = invoice.issue_date or now_local()
    flow.text(400, 80, f"N° {invoice.invoice_number}", size=12, color=MUTED)
    flow.text(400, 100, f"Date: {format_date_fr(issued)}", size=12, color=MUTED)

    flow.hline(50, 550, 150, color=RULE)


def _draw_patient_block(flow: PageFlow, patient: PatientSnapshot) -> List[str]:
    flow.text(50, 170, "Informations Patient", size=14)
    rows = patient_lines(patient)
    for top, row in zip((195, 215, 235, 255), rows):
        flow.text(50, top, row, size=11, color=MUTED)
    return rows


def _draw_totals(flow: PageFlow, invoice: InvoiceIn, subtotal: Decimal,
                 top: float) -> float:
    paid = invoice.paid_amount or Decimal("0")
    needed = GAP_BEFORE_TOTALS_RULE + GAP_AFTER_TOTALS_RULE + 25 + 20
    if paid > 0:
        needed += 45
    y = flow.ensure(top, needed)

    y += GAP_BEFORE_TOTALS_RULE
    flow.hline(50, 550, y, color=RULE)

    y += GAP_AFTER_TOTALS_RULE
    flow.text(350, y, "Sous-total:", size=11, color=MUTED)
    flow.text(470, y, format_money(subtotal), size=11)

    y += 25
    flow.text(350, y, "TOTAL:", size=14)
    flow.text(450, y, format_money(invoice.total_amount), size=16, color=BRAND_BLUE)

    if paid > 0:
        y += 25
        flow.text(350, y, "Montant payé:", size=11, color=MUTED)
        flow.text(470, y, format_money(paid), size=11)
        y += 20
        flow.text(350, y, "Reste à payer:", size=11, color=MUTED)
        flow.text(470, y, format_money(remaining_amount(invoice)), size=11)

    return y


def _draw_status_badge(flow: PageFlow, badge: StatusBadge, top: float) -> float:
    y = flow.ensure(top, STATUS_BADGE_H)
    flow.rect(50, y, STATUS_BADGE_W, STATUS_BADGE_H, fill=badge.color)
    flow.text(55, y + 8, badge.label, size=12, color="#ffffff")
    return y + STATUS_BADGE_H


def _draw_footer(flow: PageFlow) -> None:
    # anchored near the bottom of every page
    for i, txt in enumerate(FOOTER_LINES):
        flow.text(MARGIN, flow.footer_top + 15 * i, txt, size=8, color=FOOTER_GREY,
                  align="center", width=CONTENT_WIDTH)


def _continuation_header(invoice: InvoiceIn):
    def _start(flow: PageFlow) -> float:
        flow.text(MARGIN, 50, f"FACTURE N° {invoice.invoice_number} (suite)",
                  size=10, color=MUTED)
        flow.hline(50, 550, 70, color=RULE)
        return 85.0

    return _start


# ----------------------------
# Main: render invoice
# ----------------------------
def render_invoice(
    canv: Any,
    invoice: InvoiceIn,
    patient: PatientSnapshot,
    items: Sequence[LineItem],
    *,
    pagesize: Tuple[float, float],
) -> InvoiceRenderSummary:
    """
    Header -> patient block -> items table -> totals -> payment
    instructions -> status badge -> footer, top to bottom.

    Header, patient block and table start at fixed positions; every later
    region starts from the previous region's cursor plus a fixed gap.
    """
    flow = PageFlow(canv,
                    pagesize,
                    on_page_end=_draw_footer,
                    on_page_start=_continuation_header(invoice))

    _draw_header(flow, invoice)
    rows = _draw_patient_block(flow, patient)

    table = draw_items_table(flow, items, top=TABLE_TOP)
    y = _draw_totals(flow, invoice, table.subtotal, table.cursor)

    block = build_payment_block(invoice)
    y = draw_payment_block(flow, block, y + GAP_BEFORE_PAYMENT)

    badge = resolve_invoice_status(invoice)
    _draw_status_badge(flow, badge, y + GAP_BEFORE_STATUS)

    flow.finish()

    return InvoiceRenderSummary(
        invoice_number=invoice.invoice_number,
        subtotal=table.subtotal,
        total=invoice.total_amount,
        status=badge,
        payment=block,
        patient_lines=rows,
        pages=flow.pages,
        remaining=remaining_amount(invoice),
        paid_percent=payment_percentage(invoice),
        overdue=is_overdue(invoice),
    )


def build_invoice_pdf(
    invoice: Any,
    patient: Any,
    items: Any,
    *,
    paper: Optional[str] = None,
) -> Tuple[bytes, InvoiceRenderSummary]:
    """
    Render the invoice into a fresh in-memory buffer.

    Any fault while composing surfaces as ``LayoutError``.
    """
    inv_no = getattr(invoice, "invoice_number", None)
    try:
        inv = as_invoice(invoice)
        inv_no = inv.invoice_number
        pat = as_patient(patient)
        lines = as_line_items(items)

        # new buffer per call
        buf = BytesIO()
        pagesize = resolve_pagesize(paper or settings.INVOICE_PAPER)
        canv = NumberedCanvas(buf, pagesize=pagesize)
        canv.setTitle(f"Facture {inv.invoice_number}")
        canv.setAuthor(settings.LAB_NAME)
        canv.setSubject("Facture")

        summary = render_invoice(canv, inv, pat, lines, pagesize=pagesize)
        canv.save()

        pdf_bytes = buf.getvalue()
        buf.close()
        logger.debug("Rendered invoice %s: %s page(s), subtotal=%s",
                     inv_no, summary.pages, summary.subtotal)
    except InvoicePdfError:
        raise
    except Exception as exc:
        raise LayoutError(f"Invoice layout failed: {exc}",
                          invoice_number=inv_no) from exc

    return pdf_bytes, summary
