# FILE: smartlabo/api/exception_handlers.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smartlabo.api.response import err
from smartlabo.services.invoice_errors import InvoicePdfError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # exc.detail can be str/dict/list
        msg = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return err(msg=msg, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return err(msg="Validation error", status_code=422)

    @app.exception_handler(InvoicePdfError)
    async def invoice_pdf_exception_handler(request: Request, exc: InvoicePdfError) -> JSONResponse:
        # clients only get the generic message, the log keeps the cause
        logger.error("Invoice generation failed invoice=%s code=%s cause=%r",
                     exc.invoice_number, exc.code, exc.__cause__)
        return err(msg="Invoice generation failed", status_code=500, code=exc.code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return err(msg="Internal server error", status_code=500)
