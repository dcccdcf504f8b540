"""Repository for investor operations."""

from decimal import Decimal
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.exceptions import NotFoundError
from components.investment.models import Investment
from components.investor.models import Investor
from components.investor import schemas
from components.investor.utils import compute_investor_stats
from components.loan.utils import to_decimal
from components.user.models import User

settings = get_settings()


class InvestorRepository:
    """Repository for investor operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_user_id(self, user_id: int) -> Optional[Investor]:
        """Get investor profile by owning user ID."""
        result = await self.session.execute(
            select(Investor).where(Investor.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: int, **defaults) -> Investor:
        """
        Get the user's investor profile, creating an empty one if absent.

        Safe to call concurrently for the same user: the loser of the
        insert race reads the winner's row.
        """
        investor = await self.get_by_user_id(user_id)
        if investor is not None:
            return investor

        investor = Investor(
            user_id=user_id,
            investment_capacity=to_decimal(settings.DEFAULT_INVESTMENT_CAPACITY),
            preferred_crops=defaults.get("preferred_crops", []),
            preferred_regions=defaults.get("preferred_regions", []),
        )
        self.session.add(investor)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            investor = await self.get_by_user_id(user_id)
            if investor is None:
                raise
            return investor
        await self.session.refresh(investor)
        return investor

    async def update_profile(self, user_id: int, profile: schemas.InvestorProfileUpdate) -> Investor:
        """Apply the fields present in ``profile`` to the user's investor profile."""
        investor = await self.get_or_create(user_id)
        if profile.investment_capacity is not None:
            investor.investment_capacity = to_decimal(profile.investment_capacity)
        if profile.risk_tolerance is not None:
            investor.risk_tolerance = profile.risk_tolerance
        if profile.preferred_crops is not None:
            investor.preferred_crops = list(profile.preferred_crops)
        if profile.preferred_regions is not None:
            investor.preferred_regions = list(profile.preferred_regions)
        await self.session.commit()
        await self.session.refresh(investor)
        return investor

    async def recompute_stats(self, investor_id: int) -> schemas.InvestorStats:
        """
        Recompute and persist the investor's rollups from scratch.

        The investor row is locked for the duration so concurrent
        recomputes for one investor run one after another and the last
        writer always saw the full investment set.
        """
        result = await self.session.execute(
            select(Investor)
            .where(Investor.id == investor_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        investor = result.scalar_one_or_none()
        if investor is None:
            await self.session.rollback()
            raise NotFoundError("Investor")

        result = await self.session.execute(
            select(Investment).where(Investment.investor_id == investor_id)
        )
        stats = compute_investor_stats(result.scalars().all())

        investor.total_invested = Decimal(str(stats.total_invested))
        investor.total_returns = Decimal(str(stats.total_returns))
        investor.active_investments = stats.active_investments
        investor.completed_investments = stats.completed_investments
        investor.average_roi = stats.average_roi
        await self.session.commit()
        return stats

    async def to_profile(self, investor: Investor) -> schemas.InvestorProfile:
        """Build the profile response, including the owning user's name and email."""
        result = await self.session.execute(
            select(User).where(User.id == investor.user_id)
        )
        user = result.scalar_one()
        return schemas.InvestorProfile(
            id=investor.id,
            user_id=user.id,
            name=user.name,
            email=user.email,
            investment_capacity=float(investor.investment_capacity),
            risk_tolerance=investor.risk_tolerance,
            preferred_crops=investor.preferred_crops or [],
            preferred_regions=investor.preferred_regions or [],
            total_invested=float(investor.total_invested),
            total_returns=float(investor.total_returns),
            active_investments=investor.active_investments,
            completed_investments=investor.completed_investments,
            average_roi=investor.average_roi,
            verification_status=investor.verification_status,
            kyc_documents=schemas.KycDocuments(
                pan_card=investor.kyc_pan_card,
                aadhaar=investor.kyc_aadhaar,
                bank_statement=investor.kyc_bank_statement,
                income_proof=investor.kyc_income_proof,
            ),
            created_at=investor.created_at,
            updated_at=investor.updated_at,
        )
