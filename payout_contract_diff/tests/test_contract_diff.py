from decimal import Decimal

from ..contract_diff import (
    CHANGED,
    NO_CHANGE,
    compare_contracts,
    compare_payout_groups,
    extract_usd_amount,
    format_delta,
)
from ..contract_parser import PayoutGroup, parse_contract
from ..generate_synthetic_contracts import create_samples


def _by_condition(result):
    return {(change.section, change.condition): change for change in result.significant_changes}


def test_comparing_contract_with_itself_reports_nothing(old_contract_text):
    result = compare_contracts(old_contract_text, old_contract_text)

    assert result.significant_changes == []
    assert result.minor_changes == []
    assert all(row.status == NO_CHANGE for row in result.basic_information)
    assert result.summary == "Found 0 payout changes (matched by key conditions)."


def test_payout_changes_are_matched_by_group_key(old_contract_text, new_contract_text):
    result = compare_contracts(old_contract_text, new_contract_text)
    changes = _by_condition(result)

    assert set(changes) == {
        ("Free Trial", "New, US"),
        ("Free Trial", "SKU-100, US$50.00"),
        ("Free Trial", "Returning, CA"),
        ("Online Sale", "partner-a"),
    }
    assert result.summary.startswith("Found 4 payout changes")


def test_usd_delta_is_reported(old_contract_text, new_contract_text):
    change = _by_condition(compare_contracts(old_contract_text, new_contract_text))[("Free Trial", "New, US")]

    assert change.old_value == "US$10.00 per order"
    assert change.new_value == "US$18.00 per order"
    assert change.delta == Decimal("8.00")
    assert change.delta_label == "+$8.00 change"
    assert change.change == "Changed from US$10.00 per order to US$18.00 per order (+$8.00 change)"


def test_thousands_separators_are_understood(old_contract_text, new_contract_text):
    change = _by_condition(compare_contracts(old_contract_text, new_contract_text))[("Online Sale", "partner-a")]

    assert change.delta == Decimal("50.00")
    assert change.delta_label == "+$50.00 change"


def test_percentage_payouts_have_no_delta(old_contract_text, new_contract_text):
    change = _by_condition(compare_contracts(old_contract_text, new_contract_text))[
        ("Free Trial", "SKU-100, US$50.00")
    ]

    assert change.delta is None
    assert change.change == "Changed from 10% of sale amount to 15% of sale amount"


def test_added_group_has_empty_old_value(old_contract_text, new_contract_text):
    change = _by_condition(compare_contracts(old_contract_text, new_contract_text))[("Free Trial", "Returning, CA")]

    assert change.old_value == ""
    assert change.new_value == "US$4.00 per order"
    assert change.change == "Changed from none to US$4.00 per order"
    assert change.delta is None


def test_removed_group_has_empty_new_value():
    changes = compare_payout_groups(
        "Online Sale",
        [PayoutGroup(conditions={"Item SKU": "A-1"}, payout="US$5.00 per order")],
        [],
    )

    assert len(changes) == 1
    assert changes[0].old_value == "US$5.00 per order"
    assert changes[0].new_value == ""
    assert changes[0].change == "Changed from US$5.00 per order to none"


def test_same_usd_amount_with_different_wording_has_no_delta():
    changes = compare_payout_groups(
        "Free Trial",
        [PayoutGroup(conditions={"Customer Status": "New"}, payout="US$10.00 per order")],
        [PayoutGroup(conditions={"Customer Status": "New"}, payout="US$10.00 per sale")],
    )

    assert len(changes) == 1
    assert changes[0].delta is None
    assert changes[0].delta_label is None
    assert changes[0].change == "Changed from US$10.00 per order to US$10.00 per sale"


def test_change_condition_uses_group_label():
    group = PayoutGroup(
        conditions={"Customer Country/Region": "CA", "Customer Status": "Returning"},
        payout="US$4.00 per order",
    )

    changes = compare_payout_groups("Free Trial", [], [group])

    assert changes[0].condition == group.label() == "Returning, CA"


def test_swapping_inputs_swaps_values_and_negates_delta(old_contract_text, new_contract_text):
    forward = _by_condition(compare_contracts(old_contract_text, new_contract_text))
    backward = _by_condition(compare_contracts(new_contract_text, old_contract_text))

    assert set(forward) == set(backward)
    for key, change in forward.items():
        reverse = backward[key]
        assert (reverse.old_value, reverse.new_value) == (change.new_value, change.old_value)
        if change.delta is None:
            assert reverse.delta is None
        else:
            assert reverse.delta == -change.delta

    assert backward[("Free Trial", "New, US")].delta_label == "-$8.00 change"


def test_changed_aspects_become_minor_changes(old_contract_text, new_contract_text):
    result = compare_contracts(old_contract_text, new_contract_text)

    assert [row.aspect for row in result.minor_changes] == ["Registration", "Referral Window"]

    rows = {row.aspect: row for row in result.basic_information}
    assert rows["Registration"].status == CHANGED
    assert (rows["Registration"].old_value, rows["Registration"].new_value) == ("Required", "Not required")
    assert rows["Invoicing"].status == NO_CHANGE
    assert len(result.basic_information) == 6


def test_single_registration_change():
    result = compare_contracts("Registration: Required\n", "Registration: Not required\n")

    changed = [row for row in result.basic_information if row.status == CHANGED]
    assert [row.aspect for row in changed] == ["Registration"]
    assert result.significant_changes == []


def test_malformed_inputs_produce_no_changes():
    result = compare_contracts("lorem ipsum\ndolor sit amet", "nothing to see here")

    assert result.significant_changes == []
    assert result.minor_changes == []


def test_section_missing_on_one_side_reports_every_group(old_contract_text):
    result = compare_contracts(old_contract_text, "")

    assert len(result.significant_changes) == 4
    assert all(change.new_value == "" for change in result.significant_changes)


def test_extract_usd_amount():
    assert extract_usd_amount("US$10.00 per order") == Decimal("10.00")
    assert extract_usd_amount("Up to US$1,234.50 per order") == Decimal("1234.50")
    assert extract_usd_amount("US$7 bounty") == Decimal("7")
    assert extract_usd_amount("10% of sale amount") is None
    assert extract_usd_amount("none") is None
    assert extract_usd_amount("") is None


def test_format_delta():
    assert format_delta(Decimal("8")) == "+$8.00 change"
    assert format_delta(Decimal("-2.5")) == "-$2.50 change"


def test_result_to_dict_serialises_delta(old_contract_text, new_contract_text):
    data = compare_contracts(old_contract_text, new_contract_text).to_dict()

    first = data["significant_changes"][0]
    assert first["condition"] == "New, US"
    assert first["delta"] == "8.00"
    assert data["basic_information"][0]["aspect"] == "Registration"


def test_synthetic_pairs_report_expected_changes(tmp_path):
    for pair in create_samples(tmp_path, count=3):
        old_text = (tmp_path / f"{pair.old.contract_id}.txt").read_text(encoding="utf-8")
        new_text = (tmp_path / f"{pair.new.contract_id}.txt").read_text(encoding="utf-8")

        result = compare_contracts(old_text, new_text)

        reported = {
            (change.section, change.condition.replace(", ", "|")): (change.old_value, change.new_value)
            for change in result.significant_changes
        }
        assert reported == pair.expected_payout_changes
        assert {
            row.aspect: (row.old_value, row.new_value) for row in result.minor_changes
        } == pair.expected_term_changes


def test_parsed_records_are_independent_per_call(old_contract_text):
    first = parse_contract(old_contract_text)
    second = parse_contract(old_contract_text)

    first.sections["Free Trial"].clear()
    assert len(second.sections["Free Trial"]) == 3
