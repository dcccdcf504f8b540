"""Loan application lifecycle and marketplace listing."""

import logging
from decimal import Decimal
from typing import Dict, List, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.database import utcnow
from components.core.exceptions import (
    LedgerError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    StateConflictError,
)
from components.loan.models import Loan, LoanStatus
from components.loan.repository import LoanRepository
from components.loan import schemas
from components.loan.utils import project_marketplace_loan, repayment_rate, to_decimal
from components.user.models import User

logger = logging.getLogger(__name__)
settings = get_settings()

# Funding moves approved loans to funded; everything else is an explicit review.
ALLOWED_TRANSITIONS: Dict[LoanStatus, Set[LoanStatus]] = {
    LoanStatus.PENDING: {LoanStatus.APPROVED, LoanStatus.REJECTED},
    LoanStatus.FUNDED: {LoanStatus.DISBURSED},
    LoanStatus.DISBURSED: {LoanStatus.ACTIVE},
    LoanStatus.ACTIVE: {LoanStatus.COMPLETED},
}

ACTIVE_STATUSES = {LoanStatus.ACTIVE, LoanStatus.DISBURSED, LoanStatus.APPROVED}


class LoanService:
    """Farmer-facing loan operations and the investor marketplace."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.loans = LoanRepository(session)

    async def submit_application(self, user: User, loan_in: schemas.LoanCreate) -> Loan:
        user_id = user.id
        try:
            loan = await self.loans.create(user_id, loan_in)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Loan application by user {user_id} failed: {e}", exc_info=True)
            raise PersistenceError() from e
        logger.info(f"Loan application {loan.id} submitted by user {user_id} for {loan.amount}")
        return loan

    async def list_applications(self, user: User) -> schemas.LoanList:
        loans = await self.loans.get_for_user(user.id)
        return schemas.LoanList(
            count=len(loans),
            loans=[schemas.Loan.model_validate(loan) for loan in loans],
        )

    async def recent_applications(self, user: User) -> List[Loan]:
        return await self.loans.get_for_user(user.id, limit=settings.RECENT_APPLICATIONS_LIMIT)

    async def dashboard_stats(self, user: User) -> schemas.FarmerDashboardStats:
        """Summary of a farmer's loans for the dashboard."""
        loans = await self.loans.get_for_user(user.id)
        return schemas.FarmerDashboardStats(
            total_loans=len(loans),
            active_loans=sum(1 for loan in loans if loan.status in ACTIVE_STATUSES),
            amount_funded=float(sum((to_decimal(loan.amount_funded) for loan in loans), Decimal("0"))),
            repayment_rate=repayment_rate(loans),
        )

    async def get_loan(self, user: User, loan_id: int) -> Loan:
        """Get a loan owned by ``user``."""
        loan = await self.loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Loan")
        if loan.user_id != user.id:
            raise PermissionDeniedError()
        return loan

    async def review_loan(self, loan_id: int, new_status: LoanStatus) -> Loan:
        """
        Move a loan to ``new_status`` if the transition is allowed.

        The change only applies if the loan is still in the status it was
        read in, so a review cannot overwrite a concurrent funding update.
        """
        try:
            loan = await self.loans.get_by_id(loan_id)
            if loan is None:
                raise NotFoundError("Loan")
            current = loan.status
            if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
                raise StateConflictError(f"Cannot move loan from {current.value} to {new_status.value}")

            stamps = {}
            if new_status == LoanStatus.APPROVED:
                stamps["approved_at"] = utcnow()
            elif new_status == LoanStatus.DISBURSED:
                stamps["disbursed_at"] = utcnow()

            if not await self.loans.transition_status(loan_id, current, new_status, **stamps):
                raise StateConflictError("Loan status changed concurrently, retry the review")
            await self.session.commit()
        except LedgerError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Review of loan {loan_id} failed: {e}", exc_info=True)
            raise PersistenceError() from e

        logger.info(f"Loan {loan_id} moved from {current.value} to {new_status.value}")
        return await self.loans.get_by_id(loan_id)

    async def marketplace(self, filters: schemas.MarketplaceFilter) -> List[schemas.MarketplaceLoan]:
        """Approved loans open for investment with their funding progress."""
        rows = await self.loans.get_marketplace(filters)
        return [
            project_marketplace_loan(loan, farmer_name, farmer_location)
            for loan, farmer_name, farmer_location in rows
        ]
