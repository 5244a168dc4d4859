import pytest

OLD_CONTRACT = """
    Free Trial:
    Payout Groups
    1
    Customer Status is New
    Customer Country/Region is US
    US$10.00 per order
    2
    Item SKU is SKU-100
    Item Subtotal is US$50.00
    10% of sale amount
    All Other
    none
    Schedule
    Online Sale: tiered payout up to $20.00
    Payout Groups
    1
    Referral SharedId is partner-a
    US$1,250.00 per order
    Payout Restrictions
    Registration: Required
    Action Locking
    30 days after month end
    Credit Policy: Reverse on returns
    Referral Window: 30 days
"""

NEW_CONTRACT = """
    Free Trial:
    Payout Groups
    1
    Customer Status is New
    Customer Country/Region is US
    US$18.00 per order
    2
    Item SKU is SKU-100
    Item Subtotal is US$50.00
    15% of sale amount
    3
    Customer Status is Returning
    Customer Country/Region is CA
    US$4.00 per order
    All Other
    none
    Schedule
    Online Sale: tiered payout up to $20.00
    Payout Groups
    1
    Referral SharedId is partner-a
    US$1,300.00 per order
    Payout Restrictions
    Registration: Not required
    Action Locking
    30 days after month end
    Credit Policy: Reverse on returns
    Referral Window: 45 days
"""


@pytest.fixture
def old_contract_text():
    return OLD_CONTRACT


@pytest.fixture
def new_contract_text():
    return NEW_CONTRACT


@pytest.fixture
def contract_files(tmp_path):
    old_path = tmp_path / "old.txt"
    new_path = tmp_path / "new.txt"
    old_path.write_text(OLD_CONTRACT, encoding="utf-8")
    new_path.write_text(NEW_CONTRACT, encoding="utf-8")
    return old_path, new_path
