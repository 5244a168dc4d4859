"""HTML rendering of contract comparison results."""

from __future__ import annotations

from html import escape
from typing import Iterable, List, Optional, Sequence

from .contract_diff import AspectComparison, ChangeRecord, ComparisonResult
from .line_diff import LineChange


def _cell(value: str, *, highlight: bool = False) -> str:
    css = ' class="highlight"' if highlight else ""
    return f"<td{css}>{escape(value)}</td>"


def _header_row(*titles: str) -> str:
    return "<tr>" + "".join(f"<th>{escape(title)}</th>" for title in titles) + "</tr>"


def render_significant_changes_table(changes: Sequence[ChangeRecord]) -> str:
    if not changes:
        return "<p>No significant changes.</p>"
    rows = [
        "<tr>"
        + _cell(change.section)
        + _cell(change.condition or "(no conditions)")
        + _cell(change.old_value)
        + _cell(change.new_value, highlight=True)
        + _cell(change.change, highlight=True)
        + "</tr>"
        for change in changes
    ]
    return (
        '<table class="comparison-table">'
        "<thead>" + _header_row("Section", "Condition", "Old Payout", "New Payout", "Change") + "</thead>"
        "<tbody>" + "".join(rows) + "</tbody>"
        "</table>"
    )


def render_minor_changes_list(changes: Iterable[AspectComparison]) -> str:
    items = [
        f'<li><span class="highlight">{escape(change.aspect)}</span>: '
        f"<span>{escape(change.old_value)}</span> &rarr; "
        f'<span class="highlight">{escape(change.new_value)}</span></li>'
        for change in changes
    ]
    return "<ul>" + "".join(items) + "</ul>"


def render_basic_information_table(rows: Sequence[AspectComparison]) -> str:
    changed = [row for row in rows if row.changed]
    header = _header_row("Aspect", "Old Contract", "New Contract")
    if not changed:
        body = (
            '<tr><td colspan="3" style="text-align:center;color:#888;">'
            "No changes detected in basic information.</td></tr>"
        )
    else:
        body = "".join(
            "<tr>" + _cell(row.aspect) + _cell(row.old_value) + _cell(row.new_value, highlight=True) + "</tr>"
            for row in changed
        )
    return f'<table class="comparison-table">{header}{body}</table>'


def render_comparison_html(result: ComparisonResult) -> str:
    sections: List[str] = [
        "<h3>Summary of Changes</h3>",
        f"<p>{escape(result.summary)}</p>",
        "<h4>Significant Changes:</h4>",
        render_significant_changes_table(result.significant_changes),
        "<h4>Minor Changes:</h4>",
        render_minor_changes_list(result.minor_changes),
        "<h3>Basic Information Changes</h3>",
        render_basic_information_table(result.basic_information),
    ]
    return "\n".join(sections)


def render_line_changes_html(changes: Sequence[LineChange]) -> str:
    if not changes:
        return "<p>No differences found!</p>"
    rows = "".join(
        "<tr>"
        + _cell(change.label)
        + _cell(change.old_value)
        + _cell(change.new_value, highlight=True)
        + _cell(change.change)
        + "</tr>"
        for change in changes
    )
    return (
        "<h3>Line-by-Line Changes</h3>"
        '<table class="comparison-table">'
        + _header_row("Aspect", "Old Contract", "New Contract", "Change")
        + rows
        + "</table>"
    )


def render_error_html(message: str, trace: Optional[str] = None) -> str:
    html = f'<p class="highlight">{escape(message)}</p>'
    if trace:
        html += f"<pre>{escape(trace)}</pre>"
    return html


def wrap_document(body: str, *, title: str = "Contract comparison") -> str:
    """Wrap a rendered fragment into a standalone HTML page for the CLI."""

    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{escape(title)}</title>"
        "<style>"
        ".comparison-table{border-collapse:collapse}"
        ".comparison-table td,.comparison-table th{border:1px solid #ccc;padding:4px 8px}"
        ".highlight{color:#b00020;font-weight:bold}"
        "</style></head>\n"
        f"<body>\n{body}\n</body></html>\n"
    )


__all__ = [
    "render_basic_information_table",
    "render_comparison_html",
    "render_error_html",
    "render_line_changes_html",
    "render_minor_changes_list",
    "render_significant_changes_table",
    "wrap_document",
]
