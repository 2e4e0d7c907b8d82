from decimal import Decimal
from io import BytesIO

from reportlab.lib.pagesizes import LETTER

from smartlabo.schemas.invoice import as_line_items
from smartlabo.services.pdfs.engine import MARGIN, NumberedCanvas, PageFlow
from smartlabo.services.pdfs.invoice_items_table import (
    HEADER_BLUE,
    ROW_RULE,
    ROW_SHADE,
    TABLE_TOP,
    draw_items_table,
)


def _flow(starts=None):
    canv = NumberedCanvas(BytesIO(), pagesize=LETTER)

    def _start(flow):
        if starts is not None:
            starts.append(flow.pages)
        return 60.0

    return PageFlow(canv, LETTER, on_page_start=_start)


def test_subtotal_is_sum_of_prices(items_data):
    result = draw_items_table(_flow(), as_line_items(items_data))
    assert result.subtotal == Decimal("130")
    assert result.rows == 2
    # header band at +30, first row at +35 from it, 30pt per row
    assert result.cursor == TABLE_TOP + 30 + 35 + 2 * 30
    assert result.pages == 1


def test_empty_table():
    result = draw_items_table(_flow(), [])
    assert result.subtotal == Decimal("0")
    assert result.cursor == TABLE_TOP + 65


def test_long_description_grows_row():
    items = as_line_items([{"name": "Bilan lipidique complet " * 8, "price": 10}])
    result = draw_items_table(_flow(), items)
    assert result.cursor > TABLE_TOP + 65 + 30


def test_rows_flow_onto_new_pages():
    starts = []
    items = as_line_items([{"name": f"Analyse {i}", "price": 10} for i in range(40)])
    flow = _flow(starts)
    result = draw_items_table(flow, items)
    assert result.pages >= 2
    assert starts == list(range(2, result.pages + 1))
    assert result.subtotal == Decimal("400")
    assert result.cursor <= flow.content_bottom


class RecordingFlow(PageFlow):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rects = []

    def rect(self, x, top, w, h, *, fill=None, stroke=None):
        self.rects.append((self.pages, top, fill, stroke))
        super().rect(x, top, w, h, fill=fill, stroke=stroke)


def _row_bands(flow):
    return [r for r in flow.rects if r[2] != HEADER_BLUE]


def test_even_rows_are_banded():
    flow = RecordingFlow(NumberedCanvas(BytesIO(), pagesize=LETTER), LETTER)
    items = as_line_items([{"name": n, "price": 10} for n in ("A", "B", "C")])
    draw_items_table(flow, items)

    first_row = TABLE_TOP + 30 + 35
    bands = _row_bands(flow)
    assert [b[1] for b in bands] == [first_row - 5, first_row + 2 * 30 - 5]
    assert all(b[2] == ROW_SHADE and b[3] == ROW_RULE for b in bands)


def test_band_follows_row_index_across_page_break():
    flow = RecordingFlow(NumberedCanvas(BytesIO(), pagesize=LETTER), LETTER,
                         on_page_start=lambda f: MARGIN)
    items = as_line_items([{"name": n, "price": 10} for n in ("A", "B", "C")])
    # only the first two rows fit before the footer zone
    top = flow.content_bottom - (30 + 35 + 2 * 30)
    draw_items_table(flow, items, top=top)

    bands = _row_bands(flow)
    assert [b[0] for b in bands] == [1, 2]
    headers = [r for r in flow.rects if r[2] == HEADER_BLUE]
    assert [h[0] for h in headers] == [1, 2]
    # third row sits right under the repeated header on page 2
    assert bands[1][1] == MARGIN + 35 - 5
