# FILE: smartlabo/services/pdfs/engine.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER, landscape, portrait
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscent
from reportlab.pdfgen import canvas as rl_canvas

logger = logging.getLogger(__name__)

# Layout works in points measured from the top-left corner of the page,
# converted to reportlab's bottom-left origin on every draw call.
MARGIN = 50.0
CONTENT_WIDTH = 500.0
# footer band measured up from the bottom edge of the page
FOOTER_HEIGHT = 42.0
FOOTER_GAP = 15.0

INK = "#000000"
MUTED = "#666666"


# -----------------------------
# Helpers
# -----------------------------
def _safe_str(v: Any) -> str:
    if v is None:
        return ""
    try:
        s = str(v)
    except Exception:
        return ""
    return s.replace("\u2011", "-")  # avoid non-breaking hyphen rendering issues


# layout is a fixed 500pt column from x=50; sheets must be wider than 550pt
_PAPER_MAP: Dict[str, Tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
}
SUPPORTED_PAPERS = tuple(_PAPER_MAP)


def resolve_pagesize(paper: str, orientation_: str = "portrait") -> Tuple[float, float]:
    p = (paper or "LETTER").strip().upper()
    base = _PAPER_MAP.get(p)
    if base is None:
        logger.warning("Unsupported invoice paper %r, using LETTER", paper)
        base = LETTER
    o = (orientation_ or "portrait").strip().lower()
    if o.startswith("land"):
        return landscape(base)
    return portrait(base)


def wrap_text(text: str, font: str, size: float, width: float) -> list:
    return simpleSplit(_safe_str(text), font, size, width) or [""]


# -----------------------------
# Page-number canvas (Page X / Y)
# -----------------------------
class NumberedCanvas(rl_canvas.Canvas):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(num_pages)
            super().showPage()
        super().save()

    def _draw_page_number(self, page_count: int):
        # single-page invoices keep the plain footer
        if page_count < 2:
            return
        page_w = self._pagesize[0]
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.HexColor("#999999"))
        self.drawRightString(page_w - MARGIN, 12,
                             f"Page {self._pageNumber} / {page_count}")
        self.restoreState()


# -----------------------------
# Top-down page flow
# -----------------------------
class PageFlow:
    """
    Thin drawing layer over a canvas using top-down coordinates.

    ``ensure()`` closes the current page (``on_page_end``) and opens the next
    one (``on_page_start``) when a block would run into the footer zone.
    """

    def __init__(
        self,
        canv: rl_canvas.Canvas,
        pagesize: Tuple[float, float],
        *,
        on_page_end: Optional[Callable[["PageFlow"], None]] = None,
        on_page_start: Optional[Callable[["PageFlow"], float]] = None,
    ):
        self.c = canv
        self.page_w, self.page_h = pagesize
        self.on_page_end = on_page_end
        self.on_page_start = on_page_start
        self.footer_top = self.page_h - FOOTER_HEIGHT
        self.content_bottom = self.footer_top - FOOTER_GAP
        self.pages = 1

    def _y(self, top: float) -> float:
        return self.page_h - top

    def text(
        self,
        x: float,
        top: float,
        txt: Any,
        *,
        font: str = "Helvetica",
        size: float = 10,
        color: str = INK,
        align: str = "left",
        width: Optional[float] = None,
    ) -> None:
        s = _safe_str(txt)
        base = self._y(top) - getAscent(font, size)
        self.c.setFont(font, size)
        self.c.setFillColor(colors.HexColor(color))
        if align == "center" and width:
            self.c.drawCentredString(x + width / 2.0, base, s)
        elif align == "right" and width:
            self.c.drawRightString(x + width, base, s)
        else:
            self.c.drawString(x, base, s)

    def rect(
        self,
        x: float,
        top: float,
        w: float,
        h: float,
        *,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
    ) -> None:
        self.c.saveState()
        if fill:
            self.c.setFillColor(colors.HexColor(fill))
        if stroke:
            self.c.setStrokeColor(colors.HexColor(stroke))
        self.c.rect(x, self._y(top) - h, w, h,
                    stroke=1 if stroke else 0,
                    fill=1 if fill else 0)
        self.c.restoreState()

    def hline(self, x1: float, x2: float, top: float, *, color: str = "#e5e7eb",
              width: float = 1.0) -> None:
        self.c.saveState()
        self.c.setStrokeColor(colors.HexColor(color))
        self.c.setLineWidth(width)
        self.c.line(x1, self._y(top), x2, self._y(top))
        self.c.restoreState()

    def fits(self, top: float, height: float) -> bool:
        return top + height <= self.content_bottom

    def ensure(self, top: float, height: float) -> float:
        if self.fits(top, height):
            return top
        return self.new_page()

    def new_page(self) -> float:
        if self.on_page_end:
            self.on_page_end(self)
        self.c.showPage()
        self.pages += 1
        logger.debug("Invoice layout continued on page %s", self.pages)
        if self.on_page_start:
            return self.on_page_start(self)
        return MARGIN

    def finish(self) -> None:
        if self.on_page_end:
            self.on_page_end(self)
        self.c.showPage()
