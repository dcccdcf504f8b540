"""Investor dashboard, portfolio and profile operations."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.database import utcnow
from components.core.exceptions import ValidationError
from components.investment.models import InvestmentStatus
from components.investment.repository import InvestmentRepository
from components.investment import schemas as investment_schemas
from components.investor.repository import InvestorRepository
from components.investor import schemas
from components.transaction.repository import TransactionRepository
from components.transaction import schemas as transaction_schemas
from components.user.models import User

logger = logging.getLogger(__name__)
settings = get_settings()

CENT = Decimal("0.01")


class InvestorService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.investors = InvestorRepository(session)
        self.investments = InvestmentRepository(session)
        self.transactions = TransactionRepository(session)

    async def dashboard_stats(self, user: User) -> schemas.InvestorDashboardStats:
        """
        Rollups plus figures computed live for the dashboard.

        Active and completed counts are read from the investments directly;
        the remaining rollups come from the investor record.
        """
        investor = await self.investors.get_or_create(user.id)
        since = utcnow() - timedelta(days=settings.MONTHLY_RETURNS_WINDOW_DAYS)
        monthly_returns = await self.transactions.sum_returns_since(investor.id, since)
        pending_returns = await self.investments.pending_returns(investor.id)
        total_invested = float(investor.total_invested)
        total_returns = float(investor.total_returns)
        return schemas.InvestorDashboardStats(
            total_invested=total_invested,
            total_returns=total_returns,
            active_investments=await self.investments.count_by_status(investor.id, InvestmentStatus.ACTIVE),
            completed_investments=await self.investments.count_by_status(investor.id, InvestmentStatus.COMPLETED),
            average_roi=investor.average_roi,
            portfolio_value=total_invested + total_returns,
            monthly_returns=float(monthly_returns.quantize(CENT)),
            pending_returns=float(pending_returns.quantize(CENT)),
        )

    async def portfolio(self, user: User) -> List[investment_schemas.PortfolioItem]:
        investor = await self.investors.get_by_user_id(user.id)
        if investor is None:
            return []
        return await self.investments.get_portfolio(investor.id)

    async def transactions_for(self, user: User) -> List[transaction_schemas.Transaction]:
        investor = await self.investors.get_by_user_id(user.id)
        if investor is None:
            return []
        return await self.transactions.get_for_investor(investor.id, settings.TRANSACTIONS_LIMIT)

    async def get_profile(self, user: User) -> schemas.InvestorProfile:
        """Get the investor profile, creating it with default preferences."""
        investor = await self.investors.get_or_create(
            user.id,
            preferred_crops=list(settings.DEFAULT_PREFERRED_CROPS),
            preferred_regions=list(settings.DEFAULT_PREFERRED_REGIONS),
        )
        return await self.investors.to_profile(investor)

    async def update_profile(self, user: User, profile: schemas.InvestorProfileUpdate) -> schemas.InvestorProfile:
        invalid = profile.invalid_crops()
        if invalid:
            raise ValidationError(f"Unknown crop types: {', '.join(invalid)}")
        investor = await self.investors.update_profile(user.id, profile)
        logger.info(f"Investor profile {investor.id} updated by user {user.id}")
        return await self.investors.to_profile(investor)
