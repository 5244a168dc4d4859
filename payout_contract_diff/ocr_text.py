"""
PaddleOCR-VL backend for scanned contract PDFs.

Partner dashboards sometimes hand out contracts as image-only PDFs, which
carry no text layer for :mod:`pdfplumber` to read.  This backend runs
PaddleOCR-VL over the document and flattens each page's Markdown payload to
plain text so the same line parser can consume it.

OCR may require GPU resources to run at a reasonable speed; the module is
only imported when the ``paddleocr`` backend is selected.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from paddleocr import PaddleOCRVL

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE_KWARGS = {
    "use_doc_orientation_classify": True,
    "use_doc_unwarping": True,
    "use_layout_detection": True,
    "use_chart_recognition": False,
    "format_block_content": True,
}

_MARKDOWN_DECORATION_RE = re.compile(r"^\s*(?:#{1,6}\s+|[-*]\s+)|\*\*|__")


def _extract_markdown_from_result(result) -> Optional[str | Mapping[str, str]]:
    """
    Retrieve the Markdown payload from a PaddleOCR-VL result object.

    ``Result.markdown`` can be either a dictionary (containing ``markdown_text``
    and optional image assets) or a plain string.
    """

    if hasattr(result, "markdown"):
        markdown_payload = result.markdown
        if isinstance(markdown_payload, (str, Mapping)):
            return markdown_payload
    if hasattr(result, "json"):
        json_payload = getattr(result, "json")
        if isinstance(json_payload, Mapping):
            markdown_info = json_payload.get("markdown")
            if isinstance(markdown_info, (str, Mapping)):
                return markdown_info
    return None


def markdown_payload_to_text(payload: str | Mapping[str, str]) -> str:
    """Strip Markdown decoration and table pipes, keeping one line per row."""

    if isinstance(payload, Mapping):
        text = payload.get("markdown_text") or payload.get("markdown") or ""
    elif isinstance(payload, str):
        text = payload
    else:
        raise TypeError(f"Unsupported markdown payload type: {type(payload)!r}")

    lines: List[str] = []
    for raw_line in text.splitlines():
        if set(raw_line.strip()) <= set("|-: "):
            continue
        if "|" in raw_line:
            lines.extend(cell.strip() for cell in raw_line.split("|") if cell.strip())
            continue
        lines.append(_MARKDOWN_DECORATION_RE.sub("", raw_line).strip())
    return "\n".join(line for line in lines if line)


def extract_text_with_ocr(
    path: str | Path,
    *,
    pipeline_kwargs: Optional[Dict[str, object]] = None,
) -> str:
    """
    Run PaddleOCR-VL on ``path`` and return the pages' text in order.

    Each page's text is terminated by a newline, matching the text-layer
    extractor.
    """

    pipeline_params = dict(DEFAULT_PIPELINE_KWARGS)
    if pipeline_kwargs:
        pipeline_params.update(pipeline_kwargs)

    pipeline = PaddleOCRVL(**pipeline_params)
    pages: List[str] = []
    try:
        for res in pipeline.predict(str(path)):
            markdown_payload = _extract_markdown_from_result(res)
            if markdown_payload:
                pages.append(markdown_payload_to_text(markdown_payload))
    finally:
        pipeline.close()

    if not pages:
        logger.warning("No markdown payloads were produced by PaddleOCR-VL for %s", path)
    logger.info("OCR extracted %d page(s) from %s", len(pages), path)
    return "".join(page + "\n" for page in pages)


__all__ = ["DEFAULT_PIPELINE_KWARGS", "extract_text_with_ocr", "markdown_payload_to_text"]
