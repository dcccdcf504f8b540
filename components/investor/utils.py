"""Rollup statistics over an investor's investments."""

from decimal import Decimal
from typing import Iterable

from components.investment.models import Investment, InvestmentStatus
from components.investment.utils import roi_percent
from components.investor import schemas
from components.loan.utils import to_decimal


def compute_investor_stats(investments: Iterable[Investment]) -> schemas.InvestorStats:
    """
    Derive rollups from the complete investment set of one investor.

    Average ROI is the unweighted mean of per-investment ROI over completed
    investments that have an actual return; it is 0 when there are none.
    """
    investments = list(investments)
    total_invested = sum((to_decimal(inv.amount) for inv in investments), Decimal("0"))
    total_returns = sum(
        (to_decimal(inv.actual_return) for inv in investments if inv.actual_return is not None),
        Decimal("0"),
    )
    active = sum(1 for inv in investments if inv.status == InvestmentStatus.ACTIVE)
    completed = sum(1 for inv in investments if inv.status == InvestmentStatus.COMPLETED)

    rois = [
        roi_percent(inv.amount, inv.actual_return)
        for inv in investments
        if inv.status == InvestmentStatus.COMPLETED and inv.actual_return is not None
    ]
    average_roi = sum(rois, Decimal("0")) / len(rois) if rois else Decimal("0")

    return schemas.InvestorStats(
        total_invested=float(total_invested),
        total_returns=float(total_returns),
        active_investments=active,
        completed_investments=completed,
        average_roi=float(average_roi),
    )
