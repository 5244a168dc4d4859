"""
Line-pattern parser for affiliate payout contracts.

Contract PDFs exported from partner dashboards linearise into a fairly stable
sequence of lines: section headers (``Free Trial:``, ``Online Sale:``), a
``Payout Groups`` region holding numbered condition groups, each closed by a
payout expression, and a handful of scalar terms such as ``Credit Policy`` or
``Referral Window``.

This module turns that text into a :class:`ContractRecord`.  Recognition is
driven by the ``LINE_PATTERNS`` table and a small finite-state scanner; no
line ever causes an exception, unrecognised content is simply skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "General"

DEFAULT_SECTION_LABELS: Tuple[str, ...] = ("Free Trial", "Online Sale")

# Aspects compared between contract versions, in report order.
COMPARED_ASPECTS: Tuple[str, ...] = (
    "Registration",
    "Action Locking",
    "Invoicing",
    "Payout Scheduling",
    "Credit Policy",
    "Referral Window",
)

ASPECT_LABELS: Tuple[str, ...] = COMPARED_ASPECTS + ("Qualified Referrals",)

# Order matters: it is the order values are concatenated into a group key.
CONDITION_LABELS: Tuple[str, ...] = (
    "Customer Status",
    "Referral SharedId",
    "Item Category",
    "Currency",
    "Item SKU",
    "Item Subtotal",
    "Customer Country/Region",
)

CATCH_ALL_CONDITION = "Condition"
ALL_OTHER = "All Other"

GROUP_KEY_FIELDS: Tuple[str, ...] = CONDITION_LABELS + (CATCH_ALL_CONDITION,)


class LineKind(str, Enum):
    SECTION = "section"
    PAYOUT_GROUPS_START = "payout_groups_start"
    PAYOUT_GROUPS_END = "payout_groups_end"
    GROUP_START = "group_start"
    CONDITION = "condition"
    PAYOUT = "payout"
    ASPECT = "aspect"
    SECTION_HEURISTIC = "section_heuristic"


class ScanState(str, Enum):
    OUTSIDE = "outside"
    IN_SECTION = "in_section"
    IN_PAYOUT_GROUPS = "in_payout_groups"


def _alternation(labels: Iterable[str]) -> str:
    # Longest first so "Item Subtotal" never loses to a shorter shared prefix.
    return "|".join(re.escape(label) for label in sorted(labels, key=len, reverse=True))


_CONDITION_RE = re.compile(
    rf"^(?P<label>{_alternation(CONDITION_LABELS)})(?:\s+is\s+|\s*:\s*)(?P<value>.+)$"
)
_ASPECT_RE = re.compile(rf"^(?P<label>{_alternation(ASPECT_LABELS)})\b(?:\s*:\s*(?P<value>.*))?.*$")
_PAYOUT_RE = re.compile(r"^US\$[\d,.]+|^\d+(?:\.\d+)?%|per order|sale amount|^none$", re.IGNORECASE)
_SECTION_HEURISTIC_RE = re.compile(r"^(?P<name>[\w+\s.\-]+?)\s*:.*\$[\d.]+")

Extractor = Callable[[re.Match], Dict[str, str]]

# (kind, pattern, extraction rule).  ``classify_line`` tries the rows in the
# order given, so earlier rows shadow later ones for the same line.
LINE_PATTERNS: List[Tuple[LineKind, re.Pattern, Extractor]] = [
    (
        LineKind.PAYOUT_GROUPS_START,
        re.compile(r"^(?:Payout Groups|Default Payout)$", re.IGNORECASE),
        lambda m: {},
    ),
    (
        LineKind.PAYOUT_GROUPS_END,
        re.compile(r"^(?:Schedule|Payout Restrictions)$", re.IGNORECASE),
        lambda m: {},
    ),
    (
        LineKind.GROUP_START,
        re.compile(rf"^(?:\d+|{re.escape(ALL_OTHER)})$"),
        lambda m: {CATCH_ALL_CONDITION: ALL_OTHER} if m.group(0) == ALL_OTHER else {},
    ),
    (
        LineKind.CONDITION,
        _CONDITION_RE,
        lambda m: {m.group("label"): m.group("value").strip()},
    ),
    (
        LineKind.ASPECT,
        _ASPECT_RE,
        lambda m: {"aspect": m.group("label"), "value": (m.group("value") or "").strip()},
    ),
    (
        LineKind.PAYOUT,
        _PAYOUT_RE,
        lambda m: {"payout": m.string.strip()},
    ),
    (
        LineKind.SECTION_HEURISTIC,
        _SECTION_HEURISTIC_RE,
        lambda m: {"section": m.group("name").strip()},
    ),
]


# Line kinds that may still serve as the value of an aspect on the line above.
_VALUE_KINDS = frozenset({LineKind.GROUP_START, LineKind.PAYOUT})


def _section_pattern(section_labels: Sequence[str]) -> Optional[re.Pattern]:
    if not section_labels:
        return None
    return re.compile(rf"^(?P<name>{_alternation(section_labels)})\s*:")


def classify_line(
    line: str,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> Optional[Tuple[LineKind, Dict[str, str]]]:
    """
    Return the first matching ``(kind, fields)`` pair for ``line``.

    Known section labels are checked before the shared pattern table.  Lines
    that match nothing return ``None``.
    """

    section_re = _section_pattern(section_labels)
    if section_re is not None:
        match = section_re.match(line)
        if match:
            return LineKind.SECTION, {"section": match.group("name")}

    for kind, pattern, extract in LINE_PATTERNS:
        match = pattern.search(line) if kind is LineKind.PAYOUT else pattern.match(line)
        if match:
            return kind, extract(match)
    return None


@dataclass
class PayoutGroup:
    """One set of eligibility conditions and the payout it earns."""

    conditions: MutableMapping[str, str] = field(default_factory=dict)
    payout: Optional[str] = None

    def key(self) -> str:
        return "|".join(
            self.conditions[name] for name in GROUP_KEY_FIELDS if self.conditions.get(name)
        )

    def label(self) -> str:
        return self.key().replace("|", ", ")

    def is_empty(self) -> bool:
        return not self.conditions and self.payout is None

    def to_dict(self) -> Dict[str, Optional[str]]:
        data: Dict[str, Optional[str]] = dict(self.conditions)
        data["Payout"] = self.payout
        return data


@dataclass
class ContractRecord:
    """Scalar aspects plus payout groups keyed by section name."""

    aspects: MutableMapping[str, Optional[str]] = field(
        default_factory=lambda: {name: None for name in ASPECT_LABELS}
    )
    sections: MutableMapping[str, List[PayoutGroup]] = field(default_factory=dict)

    def aspect(self, name: str) -> str:
        return self.aspects.get(name) or ""

    def set_aspect(self, name: str, value: str) -> None:
        self.aspects[name] = value

    def is_empty(self) -> bool:
        return not self.sections and not any(self.aspects.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "aspects": dict(self.aspects),
            "sections": {
                name: [group.to_dict() for group in groups]
                for name, groups in self.sections.items()
            },
        }


class _Scanner:
    """Line-by-line state machine building a :class:`ContractRecord`."""

    def __init__(self, lines: Sequence[str], section_labels: Sequence[str]) -> None:
        self.lines = lines
        self.section_labels = section_labels
        self.record = ContractRecord()
        self.state = ScanState.OUTSIDE
        self.section: Optional[str] = None
        self.group: Optional[PayoutGroup] = None

    def run(self) -> ContractRecord:
        for index, line in enumerate(self.lines):
            classified = classify_line(line, self.section_labels)
            if classified is None:
                logger.debug("Ignoring unrecognised line %d: %r", index, line)
                continue
            kind, fields = classified
            self._handle(index, kind, fields)

        if self.state is ScanState.IN_PAYOUT_GROUPS:
            self._flush_group()
        return self.record

    def _handle(self, index: int, kind: LineKind, fields: Mapping[str, str]) -> None:
        if kind is LineKind.SECTION:
            self._enter_section(fields["section"])
        elif kind is LineKind.PAYOUT_GROUPS_START:
            self._flush_group()
            if self.section is None:
                self.section = DEFAULT_SECTION
                self.record.sections[DEFAULT_SECTION] = []
            self.state = ScanState.IN_PAYOUT_GROUPS
        elif kind is LineKind.PAYOUT_GROUPS_END:
            if self.state is ScanState.IN_PAYOUT_GROUPS:
                self._flush_group()
                self.state = ScanState.IN_SECTION
        elif kind is LineKind.ASPECT:
            self._read_aspect(index, fields["aspect"], fields["value"])
        elif kind is LineKind.SECTION_HEURISTIC:
            self._enter_section(fields["section"])
        elif self.state is ScanState.IN_PAYOUT_GROUPS:
            self._handle_group_line(kind, fields)

    def _handle_group_line(self, kind: LineKind, fields: Mapping[str, str]) -> None:
        if kind is LineKind.GROUP_START:
            self._flush_group()
            self.group = PayoutGroup(conditions=dict(fields))
        elif kind is LineKind.CONDITION:
            if self.group is None:
                self.group = PayoutGroup()
            self.group.conditions.update(fields)
        elif kind is LineKind.PAYOUT:
            if self.group is None:
                self.group = PayoutGroup()
            self.group.payout = fields["payout"]
            self._flush_group()

    def _enter_section(self, name: str) -> None:
        self._flush_group()
        self.section = name
        self.record.sections[name] = []
        self.state = ScanState.IN_SECTION

    def _flush_group(self) -> None:
        group, self.group = self.group, None
        if group is None or group.is_empty():
            return
        section = self.section or DEFAULT_SECTION
        self.record.sections.setdefault(section, []).append(group)

    def _read_aspect(self, index: int, name: str, inline_value: str) -> None:
        value = inline_value
        if not value and index + 1 < len(self.lines):
            following = self.lines[index + 1]
            classified = classify_line(following, self.section_labels)
            if classified is None or classified[0] in _VALUE_KINDS:
                value = following
        self.record.set_aspect(name, value)


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_contract(
    text: str,
    *,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> ContractRecord:
    """
    Parse linearised contract text into a :class:`ContractRecord`.

    Parameters
    ----------
    text:
        Raw text as produced by :func:`pdf_text.extract_document_text` or
        pasted by a user.
    section_labels:
        Section names recognised by prefix (``"<label>:"``).  Lines of the
        form ``<name>: ... $<amount>`` open a section even when not listed.

    Returns
    -------
    ContractRecord
        Text that matches none of the known patterns yields an empty record.
    """

    record = _Scanner(split_lines(text), section_labels).run()
    if record.is_empty():
        logger.warning("No recognised contract structure found in %d characters of text", len(text))
    else:
        logger.debug(
            "Parsed %d section(s) and %d aspect(s)",
            len(record.sections),
            sum(1 for value in record.aspects.values() if value),
        )
    return record


__all__ = [
    "ALL_OTHER",
    "ASPECT_LABELS",
    "COMPARED_ASPECTS",
    "CONDITION_LABELS",
    "ContractRecord",
    "DEFAULT_SECTION",
    "DEFAULT_SECTION_LABELS",
    "GROUP_KEY_FIELDS",
    "LINE_PATTERNS",
    "LineKind",
    "PayoutGroup",
    "ScanState",
    "classify_line",
    "parse_contract",
    "split_lines",
]
