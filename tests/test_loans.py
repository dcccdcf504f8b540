from datetime import datetime
from decimal import Decimal

import pydantic
import pytest
from sqlalchemy.exc import OperationalError

from components.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    StateConflictError,
    ValidationError,
)
from components.investment.service import FundingService
from components.loan.models import InstallmentStatus, LoanStatus, RiskLevel
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate, MarketplaceFilter
from components.loan.service import LoanService
from components.loan.utils import project_marketplace_loan
from components.user.models import UserType


async def test_expected_profit_is_derived_when_missing(loan_factory):
    loan = await loan_factory(approve=False)
    assert loan.expected_profit == Decimal("140000")
    assert loan.status == LoanStatus.PENDING
    assert loan.amount_funded == 0


async def test_supplied_expected_profit_is_kept(loan_factory):
    loan = await loan_factory(approve=False, expected_profit=12345)
    assert loan.expected_profit == Decimal("12345")


async def test_defaults_and_document_filtering(loan_factory):
    loan = await loan_factory(
        approve=False,
        interest_rate=None,
        documents=[
            {"name": "Land record", "url": "https://files.agrofund.in/land.pdf", "type": "land"},
            {"name": "No url"},
            {"url": "https://files.agrofund.in/orphan.pdf"},
        ],
    )
    assert loan.interest_rate == Decimal("12")
    assert loan.risk_level == RiskLevel.MEDIUM
    assert [doc.name for doc in loan.documents] == ["Land record"]


async def test_review_transitions(session, loan_factory):
    service = LoanService(session)
    loan = await loan_factory(approve=False)

    approved = await service.review_loan(loan.id, LoanStatus.APPROVED)
    assert approved.status == LoanStatus.APPROVED
    assert approved.approved_at is not None

    with pytest.raises(StateConflictError):
        await service.review_loan(loan.id, LoanStatus.COMPLETED)

    with pytest.raises(NotFoundError):
        await service.review_loan(9999, LoanStatus.APPROVED)


async def test_funded_loan_moves_through_disbursement(session, investor_user, loan_factory):
    service = LoanService(session)
    loan = await loan_factory(amount=5000)
    await FundingService(session).invest(loan.id, investor_user, 5000)

    disbursed = await service.review_loan(loan.id, LoanStatus.DISBURSED)
    assert disbursed.disbursed_at is not None
    active = await service.review_loan(loan.id, LoanStatus.ACTIVE)
    assert active.status == LoanStatus.ACTIVE


async def test_get_loan_only_for_owner(session, farmer, user_factory, loan_factory):
    loan = await loan_factory(approve=False)
    service = LoanService(session)
    assert (await service.get_loan(farmer, loan.id)).id == loan.id

    other = await user_factory(UserType.FARMER)
    with pytest.raises(PermissionDeniedError):
        await service.get_loan(other, loan.id)


async def test_farmer_dashboard_stats(session, farmer, investor_user, loan_factory):
    first = await loan_factory(
        amount=20000,
        repayment_schedule=[
            {"due_date": datetime(2025, 3, 1), "amount": 10000},
            {"due_date": datetime(2025, 6, 1), "amount": 10000},
            {"due_date": datetime(2025, 9, 1), "amount": 10000},
        ],
    )
    await loan_factory(approve=False)
    await FundingService(session).invest(first.id, investor_user, 5000)

    loan = await LoanRepository(session).get_by_id(first.id)
    loan.repayment_schedule[0].status = InstallmentStatus.PAID
    await session.commit()

    stats = await LoanService(session).dashboard_stats(farmer)
    assert stats.total_loans == 2
    assert stats.active_loans == 1
    assert stats.amount_funded == 5000
    assert stats.repayment_rate == 33


async def test_applications_are_listed_newest_first(session, farmer, loan_factory):
    older = await loan_factory(approve=False, crop_type="Rice")
    newer = await loan_factory(approve=False, crop_type="Corn")

    listing = await LoanService(session).list_applications(farmer)
    assert listing.count == 2
    assert [loan.id for loan in listing.loans] == [newer.id, older.id]


async def test_marketplace_lists_only_approved_loans_with_capacity(session, investor_user, loan_factory):
    open_loan = await loan_factory(amount=50000)
    full = await loan_factory(amount=5000)
    await loan_factory(approve=False)
    await FundingService(session).invest(full.id, investor_user, 5000)
    await FundingService(session).invest(open_loan.id, investor_user, 20000)

    listing = await LoanService(session).marketplace(MarketplaceFilter())

    assert [item.id for item in listing] == [open_loan.id]
    item = listing[0]
    assert item.amount_remaining == 30000
    assert item.funding_progress == pytest.approx(40)
    assert item.status == "funding"
    assert item.farmer.name == "Ravi Kumar"
    assert item.minimum_investment == 1000
    assert [c.amount for c in item.investors] == [20000]


async def test_marketplace_filters_and_order(session, loan_factory):
    wheat_small = await loan_factory(amount=10000, crop_type="Wheat", duration=6)
    rice_large = await loan_factory(amount=90000, crop_type="Rice", duration=12)
    cotton = await loan_factory(amount=40000, crop_type="Cotton", duration=9, risk_level="high")
    service = LoanService(session)

    everything = await service.marketplace(MarketplaceFilter())
    assert [item.id for item in everything] == [cotton.id, rice_large.id, wheat_small.id]

    by_amount = await service.marketplace(MarketplaceFilter(min_amount=20000, max_amount=50000))
    assert [item.id for item in by_amount] == [cotton.id]

    by_crop = await service.marketplace(MarketplaceFilter(crop_types=["Wheat", "Rice"]))
    assert [item.id for item in by_crop] == [rice_large.id, wheat_small.id]

    by_duration = await service.marketplace(MarketplaceFilter(max_duration=9))
    assert [item.id for item in by_duration] == [cotton.id, wheat_small.id]

    by_risk = await service.marketplace(MarketplaceFilter(risk_levels=[RiskLevel.HIGH]))
    assert [item.id for item in by_risk] == [cotton.id]

    limited = await service.marketplace(MarketplaceFilter(limit=1))
    assert [item.id for item in limited] == [cotton.id]


async def test_projection_marks_full_loans_funded(loan_factory):
    loan = await loan_factory(amount=10000)
    loan.amount_funded = Decimal("10000")
    item = project_marketplace_loan(loan, "Ravi Kumar")
    assert item.status == "funded"
    assert item.funding_progress == 100
    assert item.amount_remaining == 0
    assert item.farmer.location == "Unknown Location"


APPLICATION = dict(
    amount=50000,
    purpose="Seeds and fertilizer",
    duration=6,
    crop_type="Wheat",
    acreage=10,
    season="Rabi",
    expected_yield=20,
    expected_market_price=2200,
    production_cost=300000,
)


@pytest.mark.parametrize("overrides", [
    {"interest_rate": 1000},
    {"amount": 10 ** 12},
    {"amount": float("inf")},
    {"production_cost": float("nan")},
    {"duration": 10000},
])
def test_out_of_range_application_is_rejected(overrides):
    with pytest.raises(pydantic.ValidationError):
        LoanCreate(**{**APPLICATION, **overrides})


async def test_derived_profit_out_of_range_is_rejected(session, farmer):
    loan_in = LoanCreate(**{
        **APPLICATION,
        "acreage": 99_999_999,
        "expected_yield": 9_999_999_999,
        "expected_market_price": 9_999_999_999,
    })
    with pytest.raises(ValidationError):
        await LoanService(session).submit_application(farmer, loan_in)


async def test_storage_failure_on_submission_is_reported(session, farmer, monkeypatch):
    async def disk_error():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", disk_error)
    with pytest.raises(PersistenceError):
        await LoanService(session).submit_application(farmer, LoanCreate(**APPLICATION))
