# FILE: smartlabo/services/pdfs/invoice_items_table.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Sequence

from smartlabo.schemas.invoice import LineItem
from smartlabo.services.billing_math import items_subtotal
from smartlabo.services.formatting import format_money
from smartlabo.services.pdfs.engine import CONTENT_WIDTH, MARGIN, PageFlow, wrap_text

TABLE_TOP = 300.0
HEADER_BAND_H = 25.0
ROW_STEP = 30.0
ROW_BAND_H = 25.0
DESC_WIDTH = 240.0
ROW_FONT_SIZE = 10.0
ROW_LEADING = 12.0

HEADER_BLUE = "#2563eb"
ROW_SHADE = "#f9fafb"
ROW_RULE = "#e5e7eb"


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    header_x: float
    cell_x: float


COLUMNS: List[Column] = [
    Column("description", "Description", 60, 60),
    Column("quantity", "Quantité", 320, 330),
    Column("unit_price", "Prix Unit.", 400, 390),
    Column("line_total", "Total", 480, 470),
]


@dataclass
class ItemsTableResult:
    subtotal: Decimal
    cursor: float
    rows: int
    pages: int


def draw_table_header(flow: PageFlow, top: float) -> float:
    """Blue header band; returns the top of the first row."""
    flow.rect(MARGIN, top, CONTENT_WIDTH, HEADER_BAND_H, fill=HEADER_BLUE)
    for col in COLUMNS:
        flow.text(col.header_x, top + 7, col.label, size=11, color="#ffffff")
    return top + 35


def _row_height(lines: int) -> float:
    return ROW_STEP + ROW_LEADING * max(0, lines - 1)


def draw_items_table(flow: PageFlow,
                     items: Sequence[LineItem],
                     *,
                     top: float = TABLE_TOP) -> ItemsTableResult:
    """
    Title, header band and one row per item; even rows (0, 2, ...) get a
    shaded band. Rows flow onto a new page (header repeated) instead of
    running into the footer.
    """
    flow.text(MARGIN, top, "Analyses Prescrites", size=14)
    y = draw_table_header(flow, top + 30)

    for index, item in enumerate(items):
        desc_lines = wrap_text(item.name, "Helvetica", ROW_FONT_SIZE, DESC_WIDTH)
        height = _row_height(len(desc_lines))

        if not flow.fits(y, height):
            y = draw_table_header(flow, flow.new_page())

        if index % 2 == 0:
            flow.rect(MARGIN, y - 5, CONTENT_WIDTH,
                      ROW_BAND_H + ROW_LEADING * (len(desc_lines) - 1),
                      fill=ROW_SHADE, stroke=ROW_RULE)

        line_top = y
        for ln in desc_lines:
            flow.text(COLUMNS[0].cell_x, line_top, ln, size=ROW_FONT_SIZE)
            line_top += ROW_LEADING
        flow.text(COLUMNS[1].cell_x, y, str(item.quantity), size=ROW_FONT_SIZE)
        flow.text(COLUMNS[2].cell_x, y, format_money(item.price), size=ROW_FONT_SIZE)
        flow.text(COLUMNS[3].cell_x, y, format_money(item.line_total), size=ROW_FONT_SIZE)

        y += height

    return ItemsTableResult(subtotal=items_subtotal(items),
                            cursor=y,
                            rows=len(items),
                            pages=flow.pages)
