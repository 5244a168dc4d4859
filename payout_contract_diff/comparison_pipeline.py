"""
High-level helpers that compare two versions of a payout contract.

The workflow:

1. Extract text from the old and new documents concurrently.
2. Parse each text into a :class:`~.contract_parser.ContractRecord`.
3. Pair payout groups and compare scalar aspects with :mod:`contract_diff`.
4. Also compute a positional line diff for callers that want the raw view.

Extraction is the only step that can fail; parsing and diffing always
produce a result, possibly an empty one.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from .contract_diff import compare_records
from .contract_parser import DEFAULT_SECTION_LABELS, parse_contract
from .line_diff import compare_lines
from .pdf_text import DEFAULT_BACKEND, extract_pair_async

logger = logging.getLogger(__name__)


class MissingInputError(ValueError):
    """Raised when either the old or the new contract was not supplied."""


def _require_inputs(old, new) -> None:
    missing = [name for name, value in (("old", old), ("new", new)) if not value]
    if missing:
        raise MissingInputError(
            "Please supply both contracts to compare (missing: " + ", ".join(missing) + ")."
        )


def compare_texts(
    old_text: str,
    new_text: str,
    *,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> Dict[str, object]:
    """
    Parse and compare two contract texts.

    Returns a dictionary with the parsed ``records``, the structured
    ``comparison`` and the positional ``line_changes``.
    """

    _require_inputs(old_text, new_text)
    return build_comparison(old_text, new_text, section_labels)


def build_comparison(
    old_text: str,
    new_text: str,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> Dict[str, object]:
    """Parse and compare already extracted texts without checking for missing input."""

    old_record = parse_contract(old_text, section_labels=section_labels)
    new_record = parse_contract(new_text, section_labels=section_labels)

    return {
        "texts": (old_text, new_text),
        "records": (old_record, new_record),
        "comparison": compare_records(old_record, new_record),
        "line_changes": compare_lines(old_text, new_text),
    }


async def run_comparison_async(
    old_source: str | Path,
    new_source: str | Path,
    *,
    backend: str = DEFAULT_BACKEND,
    extraction_kwargs: Optional[Dict[str, object]] = None,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> Dict[str, object]:
    _require_inputs(old_source, new_source)

    logger.info("Extracting text from %s and %s with %s", old_source, new_source, backend)
    old_text, new_text = await extract_pair_async(
        old_source,
        new_source,
        backend=backend,
        extraction_kwargs=extraction_kwargs,
    )

    result = build_comparison(old_text, new_text, section_labels)
    result["inputs"] = [str(old_source), str(new_source)]
    return result


def run_comparison(
    old_source: str | Path,
    new_source: str | Path,
    *,
    backend: str = DEFAULT_BACKEND,
    extraction_kwargs: Optional[Dict[str, object]] = None,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> Dict[str, object]:
    """
    Extract, parse and compare two contract documents.

    Parameters
    ----------
    old_source, new_source:
        Paths to PDFs or plain-text exports of the two contract versions.
    backend:
        Extraction backend, see :func:`pdf_text.extract_document_text`.
    extraction_kwargs:
        Backend-specific overrides.
    section_labels:
        Section names the parser recognises by prefix.

    Raises
    ------
    MissingInputError
        When either source is empty.
    TextExtractionError
        When either document cannot be read; no partial result is returned.
    """

    return asyncio.run(
        run_comparison_async(
            old_source,
            new_source,
            backend=backend,
            extraction_kwargs=extraction_kwargs,
            section_labels=section_labels,
        )
    )


__all__ = ["MissingInputError", "build_comparison", "compare_texts", "run_comparison", "run_comparison_async"]
