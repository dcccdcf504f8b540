"""Return calculations for investments."""

from decimal import Decimal, ROUND_HALF_UP
from typing import List

from components.investment.models import InvestmentInstallment
from components.loan.models import Loan
from components.loan.utils import to_decimal

CENT = Decimal("0.01")
MONTHS_IN_YEAR = Decimal("12")


def expected_return(amount, interest_rate, duration_months) -> Decimal:
    """
    Principal plus simple interest over the investment term.

    ``interest_rate`` is a yearly percentage; the yearly rate is prorated
    linearly by ``duration_months``. No compounding.
    """
    amount = to_decimal(amount)
    rate = to_decimal(interest_rate) / Decimal("100")
    years = to_decimal(duration_months) / MONTHS_IN_YEAR
    return amount * (1 + rate * years)


def roi_percent(amount, actual_return) -> Decimal:
    """Realized return on an investment, in percent of the amount invested."""
    amount = to_decimal(amount)
    return (to_decimal(actual_return) - amount) / amount * Decimal("100")


def prorate_schedule(loan: Loan, amount: Decimal) -> List[InvestmentInstallment]:
    """Investor's share of each scheduled loan repayment."""
    loan_amount = to_decimal(loan.amount)
    share = to_decimal(amount) / loan_amount
    return [
        InvestmentInstallment(
            due_date=item.due_date,
            amount=(to_decimal(item.amount) * share).quantize(CENT, rounding=ROUND_HALF_UP),
        )
        for item in loan.repayment_schedule
    ]
