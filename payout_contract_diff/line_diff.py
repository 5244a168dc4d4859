"""Positional line-by-line comparison of two contract texts."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, List

from .contract_parser import split_lines

_AMOUNT_RE = re.compile(r"US\$[0-9.,]+")


@dataclass
class LineChange:
    label: str
    old_value: str
    new_value: str
    change: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _describe(old_line: str, new_line: str) -> str:
    old_amount = _AMOUNT_RE.search(old_line)
    new_amount = _AMOUNT_RE.search(new_line)
    if old_amount and new_amount and old_amount.group(0) != new_amount.group(0):
        return f"Amount changed from {old_amount.group(0)} to {new_amount.group(0)}"
    return "Line changed"


def compare_lines(old_text: str, new_text: str) -> List[LineChange]:
    """
    Compare trimmed, non-empty lines at the same position in both texts.

    Lines past the end of the shorter text compare against ``""``.  Only
    differing positions are returned, labelled ``Line <n>`` (1-based).
    """

    old_lines = split_lines(old_text)
    new_lines = split_lines(new_text)

    changes: List[LineChange] = []
    for index in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[index] if index < len(old_lines) else ""
        new_line = new_lines[index] if index < len(new_lines) else ""
        if old_line == new_line:
            continue
        changes.append(
            LineChange(
                label=f"Line {index + 1}",
                old_value=old_line,
                new_value=new_line,
                change=_describe(old_line, new_line),
            )
        )
    return changes


__all__ = ["LineChange", "compare_lines"]
