"""
Utilities to fabricate old/new payout contract pairs for demos and tests.

Each pair shares the same sections and condition groups; the new version
moves a few payouts and contract terms so the expected differences are known
up front.  Optionally, the text can be rendered into image-only PDFs to
exercise the OCR backend.
"""

from __future__ import annotations

import argparse
import random
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

try:
    from PIL import Image, ImageDraw, ImageFont
except ImportError:  # pragma: no cover - Pillow is optional
    Image = None
    ImageDraw = None
    ImageFont = None


COUNTRIES = ("US", "CA", "GB", "DE", "FR", "JP")
STATUSES = ("New", "Returning")

TERM_CHOICES: Dict[str, Tuple[str, ...]] = {
    "Registration": ("Required", "Not required"),
    "Action Locking": ("Actions lock 30 days after the end of the month", "Actions lock 45 days after the end of the month"),
    "Invoicing": ("Monthly", "Bi-weekly"),
    "Payout Scheduling": ("Net 30", "Net 45", "Net 60"),
    "Credit Policy": ("Reverse on returns", "Reverse on returns and cancellations"),
    "Referral Window": ("30 days", "45 days", "60 days"),
}


@dataclass
class PayoutLine:
    conditions: List[Tuple[str, str]]
    amount: Decimal

    def payout(self) -> str:
        return f"US${self.amount:,.2f} per order"

    def key(self) -> str:
        return "|".join(value for _, value in self.conditions)


@dataclass
class ContractSample:
    contract_id: str
    terms: Dict[str, str]
    sections: Dict[str, List[PayoutLine]] = field(default_factory=dict)

    def render_text(self) -> str:
        lines: List[str] = [f"Contract {self.contract_id}"]
        for section, groups in self.sections.items():
            lines.append(f"{section}:")
            lines.append("Payout Groups")
            for index, group in enumerate(groups, start=1):
                all_other = group.conditions == [("Condition", "All Other")]
                lines.append("All Other" if all_other else str(index))
                if not all_other:
                    lines.extend(f"{label} is {value}" for label, value in group.conditions)
                lines.append(group.payout())
            lines.append("Schedule")
        for name, value in self.terms.items():
            lines.append(name)
            lines.append(value)
        return "\n".join(lines) + "\n"


@dataclass
class SamplePair:
    old: ContractSample
    new: ContractSample
    # (section, group key) -> (old payout, new payout)
    expected_payout_changes: Dict[Tuple[str, str], Tuple[str, str]] = field(default_factory=dict)
    expected_term_changes: Dict[str, Tuple[str, str]] = field(default_factory=dict)


def _random_amount(rng: random.Random) -> Decimal:
    return Decimal(rng.randint(5, 40)) + Decimal(rng.choice((0, 25, 50, 75))) / 100


def _random_groups(rng: random.Random) -> List[PayoutLine]:
    groups: List[PayoutLine] = []
    for country in rng.sample(COUNTRIES, k=3):
        groups.append(
            PayoutLine(
                conditions=[("Customer Status", rng.choice(STATUSES)), ("Customer Country/Region", country)],
                amount=_random_amount(rng),
            )
        )
    groups.append(PayoutLine(conditions=[("Condition", "All Other")], amount=_random_amount(rng)))
    return groups


def build_pair(rng: random.Random, index: int) -> SamplePair:
    terms = {name: rng.choice(choices) for name, choices in TERM_CHOICES.items()}
    old = ContractSample(
        contract_id=f"PC-{index + 1:03d}-A",
        terms=terms,
        sections={"Free Trial": _random_groups(rng), "Online Sale": _random_groups(rng)},
    )

    pair = SamplePair(old=old, new=old)
    new_sections: Dict[str, List[PayoutLine]] = {}
    for section, groups in old.sections.items():
        changed_index = rng.randrange(len(groups))
        new_groups = list(groups)
        bumped = replace(groups[changed_index], amount=groups[changed_index].amount + Decimal(rng.randint(1, 9)))
        new_groups[changed_index] = bumped
        new_sections[section] = new_groups
        pair.expected_payout_changes[(section, bumped.key())] = (
            groups[changed_index].payout(),
            bumped.payout(),
        )

    new_terms = dict(terms)
    changed_term = rng.choice(sorted(TERM_CHOICES))
    alternatives = [value for value in TERM_CHOICES[changed_term] if value != terms[changed_term]]
    new_terms[changed_term] = rng.choice(alternatives)
    pair.expected_term_changes[changed_term] = (terms[changed_term], new_terms[changed_term])

    pair.new = ContractSample(contract_id=f"PC-{index + 1:03d}-B", terms=new_terms, sections=new_sections)
    return pair


def _ensure_font(size: int = 28):
    if ImageFont is None:  # pragma: no cover - optional branch
        return None
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size=size)
    except (OSError, AttributeError):
        return ImageFont.load_default()


def render_text_to_pdf(text: str, destination: Path, *, lines_per_page: int = 40) -> None:
    """Render text onto white pages and save them as an image-only PDF."""

    if Image is None or ImageDraw is None:  # pragma: no cover - Pillow optional
        raise RuntimeError("Pillow is required to render PDFs.")

    lines = text.splitlines()
    font = _ensure_font()
    line_height = font.getbbox("Ag")[3] + 10
    width, height = 1240, max(1754, line_height * lines_per_page + 100)

    pages = []
    for start in range(0, max(len(lines), 1), lines_per_page):
        image = Image.new("RGB", (width, height), color="white")
        draw = ImageDraw.Draw(image)
        y = 50
        for line in lines[start : start + lines_per_page]:
            draw.text((60, y), line, fill="black", font=font)
            y += line_height
        pages.append(image)

    destination.parent.mkdir(parents=True, exist_ok=True)
    pages[0].save(destination, "PDF", save_all=True, append_images=pages[1:])


def create_samples(output_dir: Path, *, create_pdfs: bool = False, count: int = 2) -> List[SamplePair]:
    rng = random.Random(2024)
    output_dir.mkdir(parents=True, exist_ok=True)

    pairs: List[SamplePair] = []
    for idx in range(count):
        pair = build_pair(rng, idx)
        pairs.append(pair)

        for sample in (pair.old, pair.new):
            text = sample.render_text()
            (output_dir / f"{sample.contract_id}.txt").write_text(text, encoding="utf-8")
            if create_pdfs:
                try:
                    render_text_to_pdf(text, output_dir / f"{sample.contract_id}.pdf")
                except RuntimeError as exc:  # pragma: no cover - optional branch
                    print(f"[WARN] Could not render PDF for {sample.contract_id}: {exc}")

    return pairs


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate synthetic old/new payout contract pairs.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(__file__).resolve().parent / "data" / "synthetic_contracts",
        help="Directory where text (and optional PDF) files will be written.",
    )
    parser.add_argument(
        "--pdf",
        action="store_true",
        help="Also render each contract into an image-only PDF (requires Pillow).",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=2,
        help="Number of contract pairs to create.",
    )
    args = parser.parse_args(argv)

    create_samples(args.output_dir, create_pdfs=args.pdf, count=args.count)
    print(f"Synthetic contracts written to: {args.output_dir}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
