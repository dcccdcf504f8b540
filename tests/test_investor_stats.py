from decimal import Decimal
from types import SimpleNamespace

import pytest

from components.core.exceptions import NotFoundError
from components.investment.models import InvestmentStatus
from components.investment.service import FundingService
from components.investor.repository import InvestorRepository
from components.investor.utils import compute_investor_stats


def investment(amount, status=InvestmentStatus.ACTIVE, actual_return=None):
    return SimpleNamespace(
        amount=Decimal(str(amount)),
        status=status,
        actual_return=None if actual_return is None else Decimal(str(actual_return)),
    )


def test_average_roi_is_unweighted_mean():
    stats = compute_investor_stats([
        investment(1000, InvestmentStatus.COMPLETED, 1100),
        investment(2000, InvestmentStatus.COMPLETED, 2100),
    ])
    assert stats.average_roi == pytest.approx(7.5)
    assert stats.completed_investments == 2
    assert stats.total_invested == 3000
    assert stats.total_returns == 3200


def test_only_completed_investments_with_return_count_towards_roi():
    stats = compute_investor_stats([
        investment(1000, InvestmentStatus.COMPLETED, 1200),
        investment(1000, InvestmentStatus.PARTIAL_RETURN, 500),
        investment(1000, InvestmentStatus.DEFAULTED, 0),
        investment(5000, InvestmentStatus.COMPLETED),
        investment(4000),
    ])
    assert stats.average_roi == pytest.approx(20)
    assert stats.active_investments == 1
    assert stats.completed_investments == 2
    assert stats.total_invested == 12000
    assert stats.total_returns == 1700


def test_empty_set_yields_zero_rollups():
    stats = compute_investor_stats([])
    assert stats.total_invested == 0
    assert stats.total_returns == 0
    assert stats.active_investments == 0
    assert stats.completed_investments == 0
    assert stats.average_roi == 0


async def test_recompute_is_idempotent(session, investor_user, loan_factory):
    loan = await loan_factory()
    await FundingService(session).invest(loan.id, investor_user, 20000)
    investors = InvestorRepository(session)
    investor = await investors.get_by_user_id(investor_user.id)

    first = await investors.recompute_stats(investor.id)
    second = await investors.recompute_stats(investor.id)

    assert first == second
    assert first.total_invested == 20000
    assert first.active_investments == 1


async def test_recompute_overwrites_drifted_rollups(session, investor_user, loan_factory):
    loan = await loan_factory()
    await FundingService(session).invest(loan.id, investor_user, 5000)
    investors = InvestorRepository(session)
    investor = await investors.get_by_user_id(investor_user.id)
    investor.total_invested = Decimal("999999")
    investor.average_roi = 42.0
    await session.commit()

    stats = await investors.recompute_stats(investor.id)

    assert stats.total_invested == 5000
    assert stats.average_roi == 0
    refreshed = await investors.get_by_user_id(investor_user.id)
    assert refreshed.total_invested == Decimal("5000")


async def test_recompute_unknown_investor(session):
    with pytest.raises(NotFoundError):
        await InvestorRepository(session).recompute_stats(12345)


async def test_get_or_create_is_idempotent(session, investor_user):
    investors = InvestorRepository(session)
    first = await investors.get_or_create(investor_user.id)
    second = await investors.get_or_create(investor_user.id)
    assert first.id == second.id
    assert first.total_invested == 0
