from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from components.core.exceptions import NotFoundError, StateConflictError, ValidationError
from components.investment.models import InvestmentStatus
from components.investment.repository import InvestmentRepository
from components.investment.service import FundingService
from components.investor.repository import InvestorRepository
from components.transaction.models import Transaction, TransactionType


async def returns(session):
    result = await session.execute(select(Transaction).where(Transaction.type == TransactionType.RETURN))
    return list(result.scalars().all())


async def test_completed_investments_update_rollups(session, investor_user, loan_factory):
    service = FundingService(session)
    first = await service.invest((await loan_factory(amount=10000)).id, investor_user, 1000)
    second = await service.invest((await loan_factory(amount=10000)).id, investor_user, 2000)

    await service.record_settlement(first.investment_id, 1100, InvestmentStatus.COMPLETED)
    settled = await service.record_settlement(second.investment_id, 2100, InvestmentStatus.COMPLETED)

    assert settled.status == InvestmentStatus.COMPLETED
    assert settled.actual_return == 2100
    investor = await InvestorRepository(session).get_by_user_id(investor_user.id)
    assert investor.average_roi == pytest.approx(7.5)
    assert investor.total_returns == Decimal("3200")
    assert investor.completed_investments == 2
    assert investor.active_investments == 0
    assert [t.amount for t in await returns(session)] == [Decimal("1100"), Decimal("2100")]


async def test_partial_returns_record_only_the_increment(session, investor_user, loan_factory):
    service = FundingService(session)
    created = await service.invest((await loan_factory()).id, investor_user, 10000)

    await service.record_settlement(created.investment_id, 4000, InvestmentStatus.PARTIAL_RETURN)
    await service.record_settlement(created.investment_id, 10600, InvestmentStatus.COMPLETED)

    assert [t.amount for t in await returns(session)] == [Decimal("4000"), Decimal("6600")]
    investor = await InvestorRepository(session).get_by_user_id(investor_user.id)
    assert investor.average_roi == pytest.approx(6.0)


async def test_default_without_return_writes_no_transaction(session, investor_user, loan_factory):
    service = FundingService(session)
    created = await service.invest((await loan_factory()).id, investor_user, 10000)

    settled = await service.record_settlement(created.investment_id, 0, InvestmentStatus.DEFAULTED)

    assert settled.status == InvestmentStatus.DEFAULTED
    assert await returns(session) == []
    investor = await InvestorRepository(session).get_by_user_id(investor_user.id)
    assert investor.active_investments == 0
    assert investor.average_roi == 0


async def test_settled_investment_cannot_be_settled_again(session, investor_user, loan_factory):
    service = FundingService(session)
    created = await service.invest((await loan_factory()).id, investor_user, 10000)
    await service.record_settlement(created.investment_id, 10600, InvestmentStatus.COMPLETED)

    with pytest.raises(StateConflictError):
        await service.record_settlement(created.investment_id, 11000, InvestmentStatus.COMPLETED)


async def test_settlement_rejects_active_status_and_decreasing_return(session, investor_user, loan_factory):
    service = FundingService(session)
    created = await service.invest((await loan_factory()).id, investor_user, 10000)

    with pytest.raises(ValidationError):
        await service.record_settlement(created.investment_id, 100, InvestmentStatus.ACTIVE)

    await service.record_settlement(created.investment_id, 5000, InvestmentStatus.PARTIAL_RETURN)
    with pytest.raises(ValidationError):
        await service.record_settlement(created.investment_id, 4000, InvestmentStatus.COMPLETED)


async def test_settlement_of_unknown_investment(session):
    with pytest.raises(NotFoundError):
        await FundingService(session).record_settlement(404, 100, InvestmentStatus.COMPLETED)


async def test_failed_stats_recompute_keeps_the_settlement(session, investor_user, loan_factory, monkeypatch):
    service = FundingService(session)
    created = await service.invest((await loan_factory()).id, investor_user, 10000)

    async def lock_timeout(self, investor_id):
        raise OperationalError("SELECT ... FOR UPDATE", {}, Exception("Lock wait timeout exceeded"))

    monkeypatch.setattr(InvestorRepository, "recompute_stats", lock_timeout)
    settled = await service.record_settlement(created.investment_id, 10600, InvestmentStatus.COMPLETED)

    assert settled.status == InvestmentStatus.COMPLETED
    assert settled.actual_return == 10600
    investment = await InvestmentRepository(session).get_by_id(created.investment_id)
    assert investment.status == InvestmentStatus.COMPLETED
    assert [t.amount for t in await returns(session)] == [Decimal("10600")]
