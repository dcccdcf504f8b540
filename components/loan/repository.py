"""Repository for loan operations."""

from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.exceptions import ValidationError
from components.loan.models import Loan, LoanStatus, LoanDocument, LoanInstallment, RiskLevel
from components.loan import schemas
from components.loan.utils import compute_expected_profit, to_decimal
from components.user.models import User

settings = get_settings()


class LoanRepository:
    """Repository for loan operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, user_id: int, loan_in: schemas.LoanCreate) -> Loan:
        """
        Create a pending loan application.

        Expected profit is derived once here when the applicant did not
        supply one; later edits never recompute it.
        """
        expected_profit = loan_in.expected_profit
        if not expected_profit:
            expected_profit = compute_expected_profit(
                loan_in.acreage,
                loan_in.expected_yield,
                loan_in.expected_market_price,
                loan_in.production_cost,
            )
        if abs(to_decimal(expected_profit)) > to_decimal(schemas.MAX_MONEY):
            raise ValidationError("Expected profit is outside the supported range")
        interest_rate = loan_in.interest_rate
        if interest_rate is None:
            interest_rate = settings.DEFAULT_INTEREST_RATE

        loan = Loan(
            user_id=user_id,
            amount=to_decimal(loan_in.amount),
            purpose=loan_in.purpose,
            custom_purpose=loan_in.custom_purpose,
            duration=loan_in.duration,
            interest_rate=to_decimal(interest_rate),
            risk_level=loan_in.risk_level or RiskLevel(settings.DEFAULT_RISK_LEVEL),
            crop_type=loan_in.crop_type,
            custom_crop_type=loan_in.custom_crop_type,
            acreage=to_decimal(loan_in.acreage),
            season=loan_in.season,
            expected_yield=to_decimal(loan_in.expected_yield),
            expected_market_price=to_decimal(loan_in.expected_market_price),
            production_cost=to_decimal(loan_in.production_cost),
            expected_profit=to_decimal(expected_profit),
            amount_funded=Decimal("0"),
            status=LoanStatus.PENDING,
            contributions=[],
            documents=[
                LoanDocument(name=doc.name, url=doc.url, type=doc.type or "other")
                for doc in loan_in.documents
                if doc.name and doc.url
            ],
            repayment_schedule=[
                LoanInstallment(due_date=item.due_date, amount=to_decimal(item.amount))
                for item in loan_in.repayment_schedule
            ],
        )
        self.session.add(loan)
        await self.session.commit()
        return await self.get_by_id(loan.id)

    async def get_by_id(self, loan_id: int) -> Optional[Loan]:
        """Get loan by ID, always reloading from the database."""
        result = await self.session.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: int, limit: Optional[int] = None) -> List[Loan]:
        """Get a user's loans, newest application first."""
        query = (
            select(Loan)
            .where(Loan.user_id == user_id)
            .order_by(Loan.applied_at.desc(), Loan.id.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_marketplace(self, filters: schemas.MarketplaceFilter) -> List[Tuple[Loan, str, Optional[str]]]:
        """
        Get approved loans that still need funding.

        Returns tuples of (loan, farmer name, farmer location), most
        recently created first.
        """
        query = (
            select(Loan, User.name, User.farm_location)
            .join(User, User.id == Loan.user_id)
            .where(Loan.status == LoanStatus.APPROVED)
            .where(Loan.amount_funded < Loan.amount)
        )
        if filters.min_amount is not None:
            query = query.where(Loan.amount >= to_decimal(filters.min_amount))
        if filters.max_amount is not None:
            query = query.where(Loan.amount <= to_decimal(filters.max_amount))
        if filters.crop_types:
            query = query.where(Loan.crop_type.in_(filters.crop_types))
        if filters.risk_levels:
            query = query.where(Loan.risk_level.in_(filters.risk_levels))
        if filters.max_duration is not None:
            query = query.where(Loan.duration <= filters.max_duration)

        query = query.order_by(Loan.created_at.desc(), Loan.id.desc())
        query = query.limit(filters.limit or settings.MARKETPLACE_LIMIT)
        result = await self.session.execute(query)
        return [tuple(row) for row in result.all()]

    async def reserve_funding(self, loan_id: int, amount: Decimal) -> bool:
        """
        Atomically add ``amount`` to the loan's funded total.

        The update only matches an approved loan with enough remaining
        capacity, so concurrent callers cannot jointly overfund it. The row
        stays locked until the caller's transaction ends. Returns False when
        nothing was updated.
        """
        result = await self.session.execute(
            update(Loan)
            .where(Loan.id == loan_id)
            .where(Loan.status == LoanStatus.APPROVED)
            .where(Loan.amount_funded + amount <= Loan.amount)
            .values(amount_funded=Loan.amount_funded + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def transition_status(self, loan_id: int, current: LoanStatus, new: LoanStatus, **values) -> bool:
        """Move a loan from ``current`` to ``new`` if nobody changed it meanwhile."""
        result = await self.session.execute(
            update(Loan)
            .where(Loan.id == loan_id)
            .where(Loan.status == current)
            .values(status=new, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
