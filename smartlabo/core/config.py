# smartlabo/core/config.py
import os
from typing import List
from pathlib import Path

from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Smart Labo Billing")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")

    # CORS (env takes priority)
    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ))

    # ---------- File storage ----------
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./uploads")
    MEDIA_URL: str = os.getenv("MEDIA_URL", "/uploads")
    INVOICES_SUBDIR: str = os.getenv("INVOICES_SUBDIR", "invoices")

    # ---------- Locale ----------
    TIMEZONE: str = os.getenv("TIMEZONE", "Africa/Casablanca")
    CURRENCY_UNIT: str = os.getenv("CURRENCY_UNIT", "MAD")

    # ---------- Invoice PDF ----------
    INVOICE_PAPER: str = os.getenv("INVOICE_PAPER", "LETTER")
    INVOICE_WRITE_TIMEOUT_SECONDS: float = float(
        os.getenv("INVOICE_WRITE_TIMEOUT_SECONDS", "0") or 0.0)

    # ---------- Lab identity (invoice header) ----------
    LAB_NAME: str = os.getenv("LAB_NAME", "SMART LABO")
    LAB_TAGLINE: str = os.getenv("LAB_TAGLINE",
                                 "Laboratoire d'Analyses Médicales")
    LAB_ADDRESS: str = os.getenv("LAB_ADDRESS",
                                 "123 Avenue Mohammed V, Casablanca")
    LAB_PHONE: str = os.getenv("LAB_PHONE", "+212 5XX-XXXXXX")
    LAB_EMAIL: str = os.getenv("LAB_EMAIL", "contact@smartlabo.ma")

    # ---------- Bank transfer defaults ----------
    DEFAULT_BANK_NAME: str = os.getenv("DEFAULT_BANK_NAME",
                                       "Banque Populaire")
    DEFAULT_BANK_ACCOUNT: str = os.getenv("DEFAULT_BANK_ACCOUNT",
                                          "230 810 0001234567890123 45")

    @property
    def invoices_dir(self) -> Path:
        return Path(self.STORAGE_DIR).resolve() / self.INVOICES_SUBDIR


settings = Settings()
