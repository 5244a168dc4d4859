"""
Text extraction for contract documents.

Every backend honours the same contract: given a document, return one string
that linearises all pages' visible text in page order, each page terminated
by a newline.  Anything that cannot be read as a document raises
:class:`TextExtractionError`.

The two documents of a comparison are extracted concurrently through
:func:`extract_pair_async`; pages within one document are always read
sequentially.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import pdfplumber

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md", ".text"}
PDF_SUFFIXES = {".pdf"}
SUPPORTED_SUFFIXES = TEXT_SUFFIXES | PDF_SUFFIXES

BACKENDS = ("pdfplumber", "paddleocr")
DEFAULT_BACKEND = "pdfplumber"

DEFAULT_EXTRACTION_KWARGS = {
    "x_tolerance": 3,
    "y_tolerance": 3,
}


class TextExtractionError(RuntimeError):
    """Raised when a document cannot be turned into text."""


def _coerce_path(source: str | Path) -> Path:
    path = Path(source)
    if not path.is_file():
        raise TextExtractionError(f"Input path does not exist or is not a file: {path}")
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise TextExtractionError(
            f"Unsupported document type {path.suffix!r} for {path.name}; "
            f"expected one of {sorted(SUPPORTED_SUFFIXES)}"
        )
    return path


def _read_text_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TextExtractionError(f"Could not read {path.name}: {exc}") from exc


def _extract_with_pdfplumber(path: Path, extraction_kwargs: Dict[str, object]) -> str:
    pages = []
    try:
        with pdfplumber.open(path) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text(**extraction_kwargs) or "")
    except Exception as exc:
        raise TextExtractionError(f"Could not extract text from {path.name}: {exc}") from exc
    logger.info("Extracted %d page(s) from %s", len(pages), path.name)
    return "".join(page + "\n" for page in pages)


def _extract_with_paddleocr(path: Path, pipeline_kwargs: Dict[str, object]) -> str:
    try:
        from .ocr_text import extract_text_with_ocr
    except ImportError as exc:
        raise TextExtractionError(
            "The paddleocr backend requires the 'ocr' extra (pip install payout-contract-diff[ocr])"
        ) from exc

    try:
        return extract_text_with_ocr(path, pipeline_kwargs=pipeline_kwargs)
    except Exception as exc:
        raise TextExtractionError(f"OCR failed for {path.name}: {exc}") from exc


def extract_document_text(
    source: str | Path,
    *,
    backend: str = DEFAULT_BACKEND,
    extraction_kwargs: Optional[Dict[str, object]] = None,
) -> str:
    """
    Return the linearised text of ``source``.

    Parameters
    ----------
    source:
        Path to a PDF or a plain-text export of the contract.  Text files are
        returned as-is.
    backend:
        ``"pdfplumber"`` reads the PDF text layer; ``"paddleocr"`` runs
        PaddleOCR-VL for scanned documents.
    extraction_kwargs:
        Overrides for :data:`DEFAULT_EXTRACTION_KWARGS` (``pdfplumber``) or
        for the PaddleOCR-VL pipeline switches (``paddleocr``).
    """

    path = _coerce_path(source)
    if path.suffix.lower() in TEXT_SUFFIXES:
        return _read_text_file(path)

    if backend == "pdfplumber":
        params = dict(DEFAULT_EXTRACTION_KWARGS)
        params.update(extraction_kwargs or {})
        text = _extract_with_pdfplumber(path, params)
    elif backend == "paddleocr":
        text = _extract_with_paddleocr(path, dict(extraction_kwargs or {}))
    else:
        raise ValueError(f"Unknown extraction backend {backend!r}; expected one of {BACKENDS}")

    if not text.strip():
        logger.warning("No text was extracted from %s; is it a scanned document?", path.name)
    return text


async def extract_document_text_async(
    source: str | Path,
    *,
    backend: str = DEFAULT_BACKEND,
    extraction_kwargs: Optional[Dict[str, object]] = None,
) -> str:
    return await asyncio.to_thread(
        extract_document_text,
        source,
        backend=backend,
        extraction_kwargs=extraction_kwargs,
    )


async def extract_pair_async(
    old_source: str | Path,
    new_source: str | Path,
    *,
    backend: str = DEFAULT_BACKEND,
    extraction_kwargs: Optional[Dict[str, object]] = None,
) -> Tuple[str, str]:
    """Extract both documents concurrently; a failure in either aborts both."""

    old_text, new_text = await asyncio.gather(
        extract_document_text_async(old_source, backend=backend, extraction_kwargs=extraction_kwargs),
        extract_document_text_async(new_source, backend=backend, extraction_kwargs=extraction_kwargs),
    )
    return old_text, new_text


__all__ = [
    "BACKENDS",
    "DEFAULT_BACKEND",
    "DEFAULT_EXTRACTION_KWARGS",
    "SUPPORTED_SUFFIXES",
    "TextExtractionError",
    "extract_document_text",
    "extract_document_text_async",
    "extract_pair_async",
]
