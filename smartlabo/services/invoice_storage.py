# FILE: smartlabo/services/invoice_storage.py
from __future__ import annotations

import asyncio
import logging
import os
import re
import threading
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple
from uuid import uuid4

from smartlabo.core.config import settings
from smartlabo.schemas.invoice import invoice_number_of
from smartlabo.services.formatting import utc_millis
from smartlabo.services.invoice_errors import (
    DirectoryCreationError,
    GenerationTimeoutError,
    InvoicePdfError,
    StreamWriteError,
)
from smartlabo.services.pdfs.invoice_pdf import build_invoice_pdf

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_unsafe_chars = re.compile(r"[^A-Za-z0-9_\-.]")
_safe_filename = re.compile(r"^[A-Za-z0-9_\-][A-Za-z0-9_\-.]*\.pdf$")


def invoices_dir() -> Path:
    return settings.invoices_dir


def filename_stem(invoice_number: Any) -> str:
    stem = _unsafe_chars.sub("_", str(invoice_number or "").strip()).strip(".")
    return stem or "invoice"


def invoice_pdf_path(filename: str, *, output_dir: Optional[Path] = None) -> Path:
    """Disk path of a generated file; rejects anything that is not a bare name."""
    name = (filename or "").strip()
    if not _safe_filename.match(name) or ".." in name:
        raise ValueError("Invalid invoice filename")
    return Path(output_dir or invoices_dir()) / name


def ensure_output_dir(directory: Path, *, invoice_number: Optional[str] = None) -> Path:
    # create-if-absent; concurrent callers may race here safely
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(
            f"Cannot create invoices directory {directory}: {exc}",
            invoice_number=invoice_number) from exc
    if not directory.is_dir():
        raise DirectoryCreationError(
            f"Invoices path is not a directory: {directory}",
            invoice_number=invoice_number)
    return directory


def publish_part(part: Path, directory: Path, invoice_number: str) -> Tuple[str, Path]:
    """
    Hard-link the finished part file as ``{invoiceNumber}_{epochMillis}.pdf``.
    The link refuses an existing name, so a name already taken in the same
    millisecond moves the stamp forward. The public name only ever shows a
    complete file.
    """
    stem = filename_stem(invoice_number)
    stamp = utc_millis()
    while True:
        name = f"{stem}_{stamp}.pdf"
        path = directory / name
        try:
            os.link(str(part), str(path))
        except FileExistsError:
            stamp += 1
            continue
        return name, path


def _discard(path: Optional[Path]) -> None:
    if not path:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError:
        logger.exception("Failed to remove leftover invoice file %s", path)


def _open_stream(path: Path) -> BinaryIO:
    return path.open("wb")


def _check_cancel(cancel: Optional[threading.Event], invoice_number: str) -> None:
    if cancel is not None and cancel.is_set():
        raise GenerationTimeoutError("Invoice generation abandoned",
                                     invoice_number=invoice_number)


def write_pdf_atomic(
    directory: Path,
    data: bytes,
    *,
    invoice_number: str,
    cancel: Optional[threading.Event] = None,
) -> Tuple[str, Path]:
    """
    Stream ``data`` into a hidden part file inside ``directory``, then
    publish it under its final name. On failure no file survives.
    """
    part = directory / f".{filename_stem(invoice_number)}.{uuid4().hex}.part"
    target: Optional[Path] = None
    try:
        with _open_stream(part) as out:
            for off in range(0, len(data), CHUNK_SIZE):
                _check_cancel(cancel, invoice_number)
                out.write(data[off:off + CHUNK_SIZE])
            out.flush()
            os.fsync(out.fileno())
        _check_cancel(cancel, invoice_number)
        name, target = publish_part(part, directory, invoice_number)
        # deadline hit between the last check and the link
        _check_cancel(cancel, invoice_number)
    except InvoicePdfError:
        _discard(target)
        raise
    except OSError as exc:
        _discard(target)
        raise StreamWriteError(f"Failed writing invoice PDF in {directory}: {exc}",
                               invoice_number=invoice_number) from exc
    except BaseException:
        _discard(target)
        raise
    finally:
        _discard(part)
    return name, target


def _generate_sync(
    invoice: Any,
    patient: Any,
    items: Any,
    *,
    output_dir: Optional[Path] = None,
    cancel: Optional[threading.Event] = None,
) -> str:
    directory = ensure_output_dir(Path(output_dir or invoices_dir()),
                                  invoice_number=invoice_number_of(invoice))

    pdf_bytes, summary = build_invoice_pdf(invoice, patient, items)
    inv_no = summary.invoice_number
    _check_cancel(cancel, inv_no)

    filename, _ = write_pdf_atomic(directory, pdf_bytes, invoice_number=inv_no, cancel=cancel)

    logger.info("Invoice PDF generated: %s (%s bytes, %s page(s), status=%s, remaining=%s, overdue=%s)",
                filename, len(pdf_bytes), summary.pages, summary.status.code,
                summary.remaining, summary.overdue)
    return filename


def generate_invoice_pdf_sync(
    invoice: Any,
    patient: Any,
    items: Any,
    *,
    output_dir: Optional[Path] = None,
) -> str:
    """Blocking variant for callers without an event loop (no deadline)."""
    try:
        return _generate_sync(invoice, patient, items, output_dir=output_dir)
    except InvoicePdfError:
        logger.exception("Invoice PDF generation failed")
        raise


async def _discard_late_result(work: asyncio.Future, directory: Path) -> None:
    # the worker stops at its next cancel check; a file it already published goes
    try:
        filename = await work
    except InvoicePdfError:
        return
    except Exception:
        logger.exception("Abandoned invoice worker failed")
        return
    logger.warning("Removing invoice PDF finished after the deadline: %s", filename)
    _discard(directory / filename)


async def generate_invoice_pdf(
    invoice: Any,
    patient: Any,
    items: Any,
    *,
    output_dir: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Render the invoice and persist it under the invoices directory.

    Returns the bare filename ``{invoiceNumber}_{epochMillis}.pdf``. Every
    call produces a new file. Failures raise an ``InvoicePdfError``
    subclass with the underlying error chained; no partial file is kept,
    and a timed-out call leaves no file either.
    """
    limit = settings.INVOICE_WRITE_TIMEOUT_SECONDS if timeout is None else timeout
    directory = Path(output_dir or invoices_dir())
    cancel = threading.Event()
    work = asyncio.ensure_future(
        asyncio.to_thread(_generate_sync,
                          invoice,
                          patient,
                          items,
                          output_dir=directory,
                          cancel=cancel))
    try:
        if limit and limit > 0:
            return await asyncio.wait_for(asyncio.shield(work), timeout=limit)
        return await work
    except asyncio.TimeoutError as exc:
        cancel.set()
        logger.error("Invoice PDF generation timed out after %ss", limit)
        await _discard_late_result(work, directory)
        raise GenerationTimeoutError(
            f"Invoice generation exceeded {limit}s",
            invoice_number=invoice_number_of(invoice)) from exc
    except asyncio.CancelledError:
        cancel.set()
        raise
    except InvoicePdfError:
        logger.exception("Invoice PDF generation failed")
        raise
