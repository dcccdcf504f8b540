from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from components.investment.utils import expected_return, prorate_schedule, roi_percent
from components.loan.utils import compute_expected_profit
from components.transaction.utils import generate_transaction_id


def test_expected_return_is_simple_interest_prorated_by_months():
    assert expected_return(10000, 12, 6) == Decimal("10600")


def test_expected_return_over_a_full_year():
    assert expected_return(5000, 10, 12) == Decimal("5500")


def test_expected_return_with_zero_rate_is_principal():
    assert expected_return(2500, 0, 9) == Decimal("2500")


def test_roi_percent():
    assert roi_percent(1000, 1100) == Decimal("10")
    assert roi_percent(2000, 1500) == Decimal("-25")


def test_expected_profit():
    assert compute_expected_profit(10, 20, 2200, 300000) == Decimal("140000")


def test_prorate_schedule_splits_installments_by_share():
    loan = SimpleNamespace(
        amount=Decimal("50000"),
        repayment_schedule=[
            SimpleNamespace(due_date=datetime(2025, 3, 1), amount=Decimal("26500")),
            SimpleNamespace(due_date=datetime(2025, 6, 1), amount=Decimal("26500")),
        ],
    )
    installments = prorate_schedule(loan, Decimal("20000"))
    assert [item.amount for item in installments] == [Decimal("10600.00"), Decimal("10600.00")]
    assert [item.due_date for item in installments] == [datetime(2025, 3, 1), datetime(2025, 6, 1)]


def test_transaction_ids_are_unique_and_prefixed():
    ids = {generate_transaction_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(txn_id.startswith("TXN") for txn_id in ids)
