"""Repository for investment operations."""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from components.investment.models import Investment, InvestmentStatus
from components.investment import schemas
from components.loan.models import Loan
from components.user.models import User


class InvestmentRepository:
    """Repository for investment operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, investment_id: int, for_update: bool = False) -> Optional[Investment]:
        """Get investment by ID, optionally locking the row."""
        query = (
            select(Investment)
            .where(Investment.id == investment_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_for_loan(self, loan_id: int) -> List[Investment]:
        result = await self.session.execute(
            select(Investment).where(Investment.loan_id == loan_id).order_by(Investment.id)
        )
        return list(result.scalars().all())

    async def get_portfolio(self, investor_id: int) -> List[schemas.PortfolioItem]:
        """Get an investor's investments with farmer name and loan purpose, newest first."""
        result = await self.session.execute(
            select(Investment, User.name, Loan.purpose)
            .join(Loan, Loan.id == Investment.loan_id)
            .join(User, User.id == Investment.farmer_id)
            .where(Investment.investor_id == investor_id)
            .order_by(Investment.investment_date.desc(), Investment.id.desc())
        )
        return [
            schemas.PortfolioItem(
                **schemas.Investment.model_validate(investment).model_dump(),
                farmer_name=farmer_name,
                loan_purpose=purpose,
            )
            for investment, farmer_name, purpose in result.all()
        ]

    async def count_by_status(self, investor_id: int, status: InvestmentStatus) -> int:
        result = await self.session.execute(
            select(func.count(Investment.id))
            .where(Investment.investor_id == investor_id)
            .where(Investment.status == status)
        )
        return result.scalar_one()

    async def pending_returns(self, investor_id: int) -> Decimal:
        """Interest still expected from the investor's active investments."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Investment.expected_return - Investment.amount), 0))
            .where(Investment.investor_id == investor_id)
            .where(Investment.status == InvestmentStatus.ACTIVE)
        )
        return Decimal(str(result.scalar_one()))
