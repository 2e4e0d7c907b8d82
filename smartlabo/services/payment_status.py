# FILE: smartlabo/services/payment_status.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from smartlabo.schemas.invoice import InvoiceIn, PaymentStatus


@dataclass(frozen=True)
class StatusBadge:
    code: str
    label: str
    color: str


UNKNOWN_BADGE = StatusBadge(code="unknown", label="INCONNU", color="#6b7280")

_BADGES: Dict[str, StatusBadge] = {
    PaymentStatus.PENDING.value: StatusBadge("pending", "EN ATTENTE", "#f59e0b"),
    PaymentStatus.PAID.value: StatusBadge("paid", "PAYÉE", "#10b981"),
    PaymentStatus.PARTIALLY_PAID.value: StatusBadge("partially_paid", "PARTIELLEMENT PAYÉE", "#3b82f6"),
    PaymentStatus.CANCELLED.value: StatusBadge("cancelled", "ANNULÉE", "#ef4444"),
    PaymentStatus.REFUNDED.value: StatusBadge("refunded", "REMBOURSÉE", "#6b7280"),
}

_TITLE_LABELS: Dict[str, str] = {
    PaymentStatus.PENDING.value: "En attente",
    PaymentStatus.PAID.value: "Payée",
    PaymentStatus.PARTIALLY_PAID.value: "Partiellement payée",
    PaymentStatus.CANCELLED.value: "Annulée",
    PaymentStatus.REFUNDED.value: "Remboursée",
}


def _norm(value: Any) -> Optional[str]:
    if value is None:
        return None
    v = getattr(value, "value", value)
    s = str(v or "").strip().lower()
    return s or None


def _pick(obj: Any, *names: str) -> Any:
    for n in names:
        if isinstance(obj, dict):
            v = obj.get(n)
        else:
            v = getattr(obj, n, None)
        if _norm(v):
            return v
    return None


def status_of(invoice: Any) -> str:
    """
    Effective status of an invoice-like value.

    Validated invoices already carry ``canonical_status``. For raw dicts /
    objects the payment status field wins over the legacy one; neither set
    means pending.
    """
    if isinstance(invoice, InvoiceIn):
        return invoice.canonical_status
    v = _pick(invoice, "payment_status", "paymentStatus", "statusPaiement")
    if v is None:
        v = _pick(invoice, "legacy_status", "legacyStatus", "status", "statut")
    return _norm(v) or PaymentStatus.PENDING.value


def resolve_status(value: Any) -> StatusBadge:
    # never raises: unknown values get the grey INCONNU badge
    key = _norm(value)
    if key is None:
        return _BADGES[PaymentStatus.PENDING.value]
    return _BADGES.get(key, UNKNOWN_BADGE)


def resolve_invoice_status(invoice: Any) -> StatusBadge:
    return resolve_status(status_of(invoice))


def status_label(value: Any) -> str:
    key = _norm(value) or PaymentStatus.PENDING.value
    return _TITLE_LABELS.get(key, "Inconnu")
