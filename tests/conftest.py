import os
import tempfile

# settings are read at import time
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="smartlabo-test-"))
os.environ.setdefault("INVOICE_WRITE_TIMEOUT_SECONDS", "0")

import pytest

from smartlabo.core.config import settings


@pytest.fixture
def storage(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    return settings.invoices_dir


@pytest.fixture
def invoice_data():
    return {
        "invoiceNumber": "FAC000123",
        "issueDate": "2026-10-17T09:30:00",
        "totalAmount": 156,
        "paidAmount": 0,
        "paymentMethod": "amana",
        "paymentStatus": "pending",
        "settlementCode": "1234",
    }


@pytest.fixture
def patient_data():
    return {
        "lastName": "Alaoui",
        "firstName": "Sara",
        "patientNumber": "PAT-0042",
        "email": "sara@example.ma",
        "phone": "+212 600000000",
    }


@pytest.fixture
def items_data():
    return [{"name": "Glycémie", "price": 50}, {"name": "NFS", "price": 80}]
