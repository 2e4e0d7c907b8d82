# FILE: smartlabo/services/formatting.py
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
from zoneinfo import ZoneInfo

from smartlabo.core.config import settings

Q2 = Decimal("0.01")
NA = "N/A"


def D(x: Any) -> Decimal:
    try:
        return Decimal(str(x if x is not None else 0)).quantize(
            Q2, rounding=ROUND_HALF_UP)
    except Exception:
        return Decimal("0.00")


def format_amount(x: Any) -> str:
    return f"{D(x):.2f}"


def format_money(x: Any, unit: Optional[str] = None) -> str:
    """130 -> '130.00 MAD'"""
    unit = settings.CURRENCY_UNIT if unit is None else unit
    return f"{format_amount(x)} {unit}".rstrip()


def _local_tz() -> ZoneInfo:
    return ZoneInfo(getattr(settings, "TIMEZONE", "Africa/Casablanca"))


def now_local() -> datetime:
    return datetime.now(_local_tz())


def _as_date(v: Any) -> Optional[date]:
    if v is None or v == "":
        return None
    if isinstance(v, str):
        try:
            v = datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(v, datetime):
        if v.tzinfo is None:
            return v.date()
        return v.astimezone(_local_tz()).date()
    if isinstance(v, date):
        return v
    return None


def format_date_fr(v: Any, default: str = NA) -> str:
    """French short date (fr-FR): 17/10/2026."""
    d = _as_date(v)
    if not d:
        return default
    return d.strftime("%d/%m/%Y")


def text_or_na(v: Any) -> str:
    if v is None:
        return NA
    s = str(v).strip()
    return s if s else NA


def utc_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)
