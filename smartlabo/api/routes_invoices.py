# FILE: smartlabo/api/routes_invoices.py
from __future__ import annotations

import logging
from io import BytesIO

from fastapi import APIRouter, HTTPException, Query, Path as FPath
from fastapi.responses import StreamingResponse

from smartlabo.api.response import ok
from smartlabo.core.config import settings
from smartlabo.schemas.invoice import InvoicePdfOut, InvoicePdfRequest
from smartlabo.services.invoice_storage import generate_invoice_pdf, invoice_pdf_path

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _public_url(filename: str) -> str:
    return f"{settings.MEDIA_URL.rstrip('/')}/{settings.INVOICES_SUBDIR}/{filename}"


@router.post("/pdf", status_code=201)
async def create_invoice_pdf(payload: InvoicePdfRequest):
    # InvoicePdfError is turned into the generic failure envelope by the app handler
    filename = await generate_invoice_pdf(payload.invoice, payload.patient,
                                          payload.items)
    logger.info("Invoice PDF created: %s", filename)
    out = InvoicePdfOut(filename=filename, url=_public_url(filename))
    return ok(out, status_code=201)


@router.get("/pdf/{filename}")
def download_invoice_pdf(
        filename: str = FPath(..., min_length=5),
        disposition: str = Query("inline", pattern="^(inline|attachment)$"),
):
    try:
        path = invoice_pdf_path(filename)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid invoice filename")

    if not path.is_file():
        raise HTTPException(status_code=404, detail="Invoice PDF not found")

    pdf_bytes = path.read_bytes()
    headers = {"Content-Disposition": f'{disposition}; filename="{path.name}"'}
    return StreamingResponse(BytesIO(pdf_bytes),
                             media_type="application/pdf",
                             headers=headers)
