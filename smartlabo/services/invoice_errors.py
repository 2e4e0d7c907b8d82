# FILE: smartlabo/services/invoice_errors.py
from __future__ import annotations

from typing import Optional


class InvoicePdfError(RuntimeError):
    """Single failure channel of invoice PDF generation.

    The triggering exception is chained as ``__cause__``.
    """

    def __init__(self, msg: str, *, invoice_number: Optional[str] = None):
        super().__init__(msg)
        self.invoice_number = invoice_number

    @property
    def code(self) -> str:
        return type(self).__name__


class DirectoryCreationError(InvoicePdfError):
    pass


class StreamWriteError(InvoicePdfError):
    pass


class GenerationTimeoutError(StreamWriteError):
    pass


class LayoutError(InvoicePdfError):
    pass
