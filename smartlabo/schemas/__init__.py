# smartlabo/schemas/__init__.py
from .invoice import (
    BankTransferDetails,
    InvoiceIn,
    InvoicePdfOut,
    InvoicePdfRequest,
    LineItem,
    PatientSnapshot,
    PaymentMethod,
    PaymentStatus,
)

__all__ = [
    "BankTransferDetails",
    "InvoiceIn",
    "InvoicePdfOut",
    "InvoicePdfRequest",
    "LineItem",
    "PatientSnapshot",
    "PaymentMethod",
    "PaymentStatus",
]
