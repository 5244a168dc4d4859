"""
Command line interface for comparing two payout contract versions.

Example usage:

    python -m payout_contract_diff.app \
        --old ./contracts/2023.pdf \
        --new ./contracts/2024.pdf \
        --output ./report.html

    python -m payout_contract_diff.app --old old.txt --new new.txt --format json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .comparison_pipeline import MissingInputError, run_comparison
from .contract_parser import DEFAULT_SECTION_LABELS
from .pdf_text import BACKENDS, DEFAULT_BACKEND, TextExtractionError
from .report import render_comparison_html, render_line_changes_html, wrap_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compare payout terms between two contract versions.")
    parser.add_argument("--old", required=True, type=Path, help="Old contract (PDF or text export).")
    parser.add_argument("--new", required=True, type=Path, help="New contract (PDF or text export).")
    parser.add_argument(
        "--mode",
        choices=["structured", "lines"],
        default="structured",
        help="Structured payout/aspect diff (default) or positional line-by-line diff.",
    )
    parser.add_argument(
        "--format",
        choices=["html", "json"],
        default="html",
        help="Report format written to stdout or --output.",
    )
    parser.add_argument(
        "--backend",
        choices=list(BACKENDS),
        default=DEFAULT_BACKEND,
        help="PDF text extraction backend; use paddleocr for scanned contracts.",
    )
    parser.add_argument(
        "--x-tolerance",
        type=float,
        default=None,
        help="Horizontal tolerance forwarded to pdfplumber when joining characters.",
    )
    parser.add_argument(
        "--section-label",
        action="append",
        default=None,
        help="Section label recognised by prefix (repeatable, replaces the defaults).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="File to write the report to instead of stdout.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def _collect_extraction_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.x_tolerance is not None and args.backend == "pdfplumber":
        overrides["x_tolerance"] = args.x_tolerance
    return overrides


def render_report(result: Dict[str, Any], *, mode: str, fmt: str) -> str:
    comparison = result["comparison"]
    line_changes = result["line_changes"]

    if fmt == "json":
        if mode == "lines":
            payload: Any = [change.to_dict() for change in line_changes]
        else:
            old_record, new_record = result["records"]
            payload = {
                "comparison": comparison.to_dict(),
                "old": old_record.to_dict(),
                "new": new_record.to_dict(),
            }
        return json.dumps(payload, ensure_ascii=False, indent=2)

    if mode == "lines":
        return wrap_document(render_line_changes_html(line_changes))
    return wrap_document(render_comparison_html(comparison))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = run_comparison(
            args.old,
            args.new,
            backend=args.backend,
            extraction_kwargs=_collect_extraction_overrides(args),
            section_labels=tuple(args.section_label or DEFAULT_SECTION_LABELS),
        )
    except (MissingInputError, TextExtractionError) as exc:
        logger.error("Comparison failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    report = render_report(result, mode=args.mode, fmt=args.format)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(report, encoding="utf-8")
        print(f"Report written to: {args.output.resolve()}")
    else:
        print(report)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
