# FILE: smartlabo/services/pdfs/payment_instructions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from smartlabo.core.config import settings
from smartlabo.schemas.invoice import InvoiceIn, PaymentMethod
from smartlabo.services.formatting import NA
from smartlabo.services.pdfs.engine import MARGIN, MUTED, PageFlow

CODE_GREEN = "#10b981"

AMANA_INSTRUCTION = "Composez *555# et entrez ce code pour effectuer le paiement"
CASHPLUS_INSTRUCTION = "Rendez-vous dans un point CashPlus avec ce code"

PAYMENT_LABELS: Dict[str, str] = {
    PaymentMethod.CASH.value: "Espèces",
    PaymentMethod.CARD.value: "Carte bancaire",
    PaymentMethod.AMANA.value: "Amana",
    PaymentMethod.CASHPLUS.value: "CashPlus",
    PaymentMethod.BANK_TRANSFER.value: "Virement bancaire",
    PaymentMethod.CHEQUE.value: "Chèque",
}


@dataclass(frozen=True)
class PaymentLine:
    text: str
    size: float = 10
    color: str = MUTED
    advance: float = 15


@dataclass
class PaymentBlock:
    method: str
    lines: List[PaymentLine] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [ln.text for ln in self.lines]

    def offsets(self) -> List[float]:
        """
        Top offset of every line plus the closing cursor. The method line
        always advances; the last detail line leaves the cursor on its top.
        """
        out, y = [], 0.0
        for i, ln in enumerate(self.lines):
            out.append(y)
            if i == 0 or i < len(self.lines) - 1:
                y += ln.advance
        out.append(y)
        return out

    @property
    def height(self) -> float:
        return self.offsets()[-1]


def method_label(method: Any) -> str:
    if not method:
        return "Non défini"
    return PAYMENT_LABELS.get(str(method), str(method))


def build_payment_block(invoice: InvoiceIn) -> PaymentBlock:
    """
    Method label line plus the method-specific settlement details.
    Missing codes / bank details never raise.
    """
    method = invoice.payment_method or ""
    lines = [PaymentLine(f"Mode de paiement: {method_label(method)}", advance=20)]
    code = invoice.method_settlement_code

    if method == PaymentMethod.AMANA.value and code:
        lines.append(PaymentLine(f"Code Amana: {code}", size=12,
                                 color=CODE_GREEN, advance=20))
        lines.append(PaymentLine(AMANA_INSTRUCTION, size=9))

    elif method == PaymentMethod.CASHPLUS.value and code:
        lines.append(PaymentLine(f"Code CashPlus: {code}", size=12,
                                 color=CODE_GREEN, advance=20))
        lines.append(PaymentLine(CASHPLUS_INSTRUCTION, size=9))

    elif method == PaymentMethod.BANK_TRANSFER.value:
        det = invoice.bank_transfer_details
        bank = (det.bank_name if det else None) or settings.DEFAULT_BANK_NAME
        rib = (det.account_id if det else None) or settings.DEFAULT_BANK_ACCOUNT
        ref = (det.reference if det else None) or NA
        lines.append(PaymentLine(f"Banque: {bank}"))
        lines.append(PaymentLine(f"RIB: {rib}"))
        lines.append(PaymentLine(f"Référence: {ref}"))

    return PaymentBlock(method=method, lines=lines)


def draw_payment_block(flow: PageFlow, block: PaymentBlock, top: float) -> float:
    top = flow.ensure(top, 25 + block.height + 15)
    flow.text(MARGIN, top, "Modalités de Paiement", size=14)
    offsets = block.offsets()
    for ln, off in zip(block.lines, offsets):
        flow.text(MARGIN, top + 25 + off, ln.text, size=ln.size, color=ln.color)
    return top + 25 + offsets[-1]
