"""
Structural comparison of two parsed contract versions.

Payout groups are paired across versions by their group key (the ordered
condition values), so a group keeps its identity even when its payout text
changes.  Scalar aspects are compared one by one.  Nothing in here raises on
content: a side that is missing data compares as an empty string.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .contract_parser import (
    COMPARED_ASPECTS,
    DEFAULT_SECTION_LABELS,
    ContractRecord,
    PayoutGroup,
    parse_contract,
)

logger = logging.getLogger(__name__)

CHANGED = "Changed"
NO_CHANGE = "No change"

_USD_AMOUNT_RE = re.compile(r"US\$((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)")


def extract_usd_amount(payout: str) -> Optional[Decimal]:
    """Return the first ``US$`` amount in ``payout``, or ``None``."""

    match = _USD_AMOUNT_RE.search(payout or "")
    if not match:
        return None
    try:
        return Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:  # pragma: no cover - the pattern only admits digits
        return None


def format_delta(delta: Decimal) -> str:
    sign = "+" if delta > 0 else "-"
    return f"{sign}${abs(delta):.2f} change"


@dataclass
class ChangeRecord:
    """A payout difference for one condition group in one section."""

    section: str
    condition: str
    old_value: str
    new_value: str
    change: str
    delta: Optional[Decimal] = None

    @property
    def delta_label(self) -> Optional[str]:
        if self.delta is None:
            return None
        return format_delta(self.delta)

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = asdict(self)
        data["delta"] = None if self.delta is None else f"{self.delta:.2f}"
        return data


@dataclass
class AspectComparison:
    aspect: str
    old_value: str
    new_value: str
    status: str

    @property
    def changed(self) -> bool:
        return self.status == CHANGED

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ComparisonResult:
    summary: str
    significant_changes: List[ChangeRecord] = field(default_factory=list)
    minor_changes: List[AspectComparison] = field(default_factory=list)
    basic_information: List[AspectComparison] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": self.summary,
            "significant_changes": [change.to_dict() for change in self.significant_changes],
            "minor_changes": [change.to_dict() for change in self.minor_changes],
            "basic_information": [row.to_dict() for row in self.basic_information],
        }


def _ordered_union(*groups: Iterable[str]) -> List[str]:
    merged: Dict[str, None] = {}
    for keys in groups:
        merged.update(dict.fromkeys(keys))
    return list(merged)


def _index_groups(groups: Sequence[PayoutGroup]) -> Dict[str, PayoutGroup]:
    # Later groups win when two share a key.
    return {group.key(): group for group in groups}


def describe_payout_change(old_payout: str, new_payout: str) -> Tuple[str, Optional[Decimal]]:
    description = f"Changed from {old_payout or 'none'} to {new_payout or 'none'}"
    old_amount = extract_usd_amount(old_payout)
    new_amount = extract_usd_amount(new_payout)
    if old_amount is None or new_amount is None or old_amount == new_amount:
        return description, None
    delta = new_amount - old_amount
    return f"{description} ({format_delta(delta)})", delta


def compare_payout_groups(
    section: str,
    old_groups: Sequence[PayoutGroup],
    new_groups: Sequence[PayoutGroup],
) -> List[ChangeRecord]:
    old_map = _index_groups(old_groups)
    new_map = _index_groups(new_groups)

    changes: List[ChangeRecord] = []
    for key in _ordered_union(old_map, new_map):
        old_group = old_map.get(key)
        new_group = new_map.get(key)
        old_payout = (old_group.payout if old_group else None) or ""
        new_payout = (new_group.payout if new_group else None) or ""
        if old_payout == new_payout:
            continue
        description, delta = describe_payout_change(old_payout, new_payout)
        changes.append(
            ChangeRecord(
                section=section,
                condition=(old_group or new_group).label(),
                old_value=old_payout,
                new_value=new_payout,
                change=description,
                delta=delta,
            )
        )
    return changes


def compare_aspects(
    old: ContractRecord,
    new: ContractRecord,
    aspects: Sequence[str] = COMPARED_ASPECTS,
) -> List[AspectComparison]:
    rows: List[AspectComparison] = []
    for aspect in aspects:
        old_value = old.aspect(aspect)
        new_value = new.aspect(aspect)
        rows.append(
            AspectComparison(
                aspect=aspect,
                old_value=old_value,
                new_value=new_value,
                status=CHANGED if old_value != new_value else NO_CHANGE,
            )
        )
    return rows


def summarise(changes: Sequence[ChangeRecord]) -> str:
    return f"Found {len(changes)} payout changes (matched by key conditions)."


def compare_records(old: ContractRecord, new: ContractRecord) -> ComparisonResult:
    """
    Compare two parsed contracts.

    Sections present in either record are compared group by group; a group
    present on one side only is reported with an empty payout on the other.
    """

    significant: List[ChangeRecord] = []
    for section in _ordered_union(old.sections, new.sections):
        significant.extend(
            compare_payout_groups(
                section,
                old.sections.get(section, []),
                new.sections.get(section, []),
            )
        )

    basic_information = compare_aspects(old, new)
    minor = [row for row in basic_information if row.changed]

    logger.info(
        "Comparison found %d payout change(s) and %d aspect change(s)",
        len(significant),
        len(minor),
    )
    return ComparisonResult(
        summary=summarise(significant),
        significant_changes=significant,
        minor_changes=minor,
        basic_information=basic_information,
    )


def compare_contracts(
    old_text: str,
    new_text: str,
    *,
    section_labels: Sequence[str] = DEFAULT_SECTION_LABELS,
) -> ComparisonResult:
    """Parse both texts and compare them."""

    return compare_records(
        parse_contract(old_text, section_labels=section_labels),
        parse_contract(new_text, section_labels=section_labels),
    )


__all__ = [
    "AspectComparison",
    "CHANGED",
    "ChangeRecord",
    "ComparisonResult",
    "NO_CHANGE",
    "compare_aspects",
    "compare_contracts",
    "compare_payout_groups",
    "compare_records",
    "describe_payout_change",
    "extract_usd_amount",
    "format_delta",
    "summarise",
]
