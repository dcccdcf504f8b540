"""
Funding of loans by investors and recording of investment outcomes.

Every operation that changes an investment explicitly recomputes the
investor's rollup statistics after its own commit. A failed recompute is
logged and does not undo the investment; the rollups can be rebuilt from
the investment set at any time.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import NoReturn

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.exceptions import (
    InsufficientCapacity,
    InvalidAmount,
    LedgerError,
    LoanNotFundable,
    NotFoundError,
    PersistenceError,
    StateConflictError,
    ValidationError,
)
from components.investment.models import Investment, InvestmentStatus
from components.investment.repository import InvestmentRepository
from components.investment.utils import expected_return, prorate_schedule
from components.investment import schemas
from components.investor.repository import InvestorRepository
from components.loan.models import FundingContribution, Loan, LoanStatus
from components.loan.repository import LoanRepository
from components.loan.schemas import MAX_MONEY
from components.loan.utils import amount_remaining, to_decimal
from components.transaction.models import TransactionStatus, TransactionType
from components.transaction.repository import TransactionRepository
from components.user.models import User

logger = logging.getLogger(__name__)
settings = get_settings()

CENT = Decimal("0.01")

SETTLEMENT_OUTCOMES = {
    InvestmentStatus.COMPLETED,
    InvestmentStatus.DEFAULTED,
    InvestmentStatus.PARTIAL_RETURN,
}
SETTLEABLE = {InvestmentStatus.ACTIVE, InvestmentStatus.PARTIAL_RETURN}


class FundingService:
    """Applies investments against loans and settles their outcomes."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.loans = LoanRepository(session)
        self.investors = InvestorRepository(session)
        self.investments = InvestmentRepository(session)
        self.transactions = TransactionRepository(session)

    async def invest(self, loan_id: int, user: User, amount) -> schemas.InvestmentCreated:
        """
        Invest ``amount`` from ``user`` into the loan.

        The capacity check and the funded-total increment are a single
        conditional update, and the investment, contribution and
        transaction records are committed in the same database
        transaction. On any failure nothing is written.
        """
        user_id, investor_name = user.id, user.name
        amount = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
        minimum = to_decimal(settings.MIN_INVESTMENT)
        if amount < minimum:
            raise InvalidAmount(f"Minimum investment amount is {minimum:.2f}")

        try:
            investor = await self.investors.get_or_create(user_id)

            if not await self.loans.reserve_funding(loan_id, amount):
                await self._reject(loan_id, amount)

            loan = await self.loans.get_by_id(loan_id)
            if loan.amount_funded >= loan.amount:
                loan.status = LoanStatus.FUNDED

            investment = self._snapshot(loan, investor.id, amount)
            self.session.add(investment)
            loan.contributions.append(
                FundingContribution(
                    investor_id=investor.id,
                    investor_name=investor_name,
                    amount=amount,
                )
            )

            farmer = await self.session.get(User, loan.user_id)
            transaction = self.transactions.add(
                investor_id=investor.id,
                type=TransactionType.INVESTMENT,
                amount=amount,
                description=f"Investment in {farmer.name} - {loan.purpose}",
                loan_id=loan.id,
                farmer_id=loan.user_id,
                status=TransactionStatus.COMPLETED,
            )
            await self.session.commit()
        except LedgerError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Investment into loan {loan_id} by user {user_id} failed: {e}", exc_info=True)
            raise PersistenceError() from e

        logger.info(
            f"Investment {investment.id}: user {user_id} invested {amount} in loan {loan_id} "
            f"(funded {loan.amount_funded}/{loan.amount}, status {loan.status.value})"
        )
        created = schemas.InvestmentCreated(
            investment_id=investment.id,
            transaction_id=transaction.transaction_id,
        )
        await self.refresh_investor_stats(investor.id)
        return created

    async def _reject(self, loan_id: int, amount: Decimal) -> NoReturn:
        """Explain why the conditional funding update matched no row."""
        loan = await self.loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Loan")
        if loan.status != LoanStatus.APPROVED:
            logger.warning(f"Investment into loan {loan_id} refused: status is {loan.status.value}")
            raise LoanNotFundable(f"Loan is not open for investment (status: {loan.status.value})")
        remaining = amount_remaining(loan)
        logger.warning(f"Investment of {amount} into loan {loan_id} refused: {remaining} remaining")
        raise InsufficientCapacity(remaining)

    @staticmethod
    def _snapshot(loan: Loan, investor_id: int, amount: Decimal) -> Investment:
        """New investment carrying a copy of the loan's current terms."""
        projected = expected_return(amount, loan.interest_rate, loan.duration).quantize(CENT, rounding=ROUND_HALF_UP)
        if projected > to_decimal(MAX_MONEY):
            raise ValidationError("Expected return is outside the supported range")
        return Investment(
            investor_id=investor_id,
            loan_id=loan.id,
            farmer_id=loan.user_id,
            amount=amount,
            expected_return=projected,
            status=InvestmentStatus.ACTIVE,
            duration=loan.duration,
            crop_type=loan.crop_type,
            risk_level=loan.risk_level,
            repayment_schedule=prorate_schedule(loan, amount),
        )

    async def record_settlement(self, investment_id: int, actual_return, status: InvestmentStatus) -> schemas.Investment:
        """
        Record the outcome of an investment reported by the settlement process.

        ``actual_return`` is the total returned to the investor so far; the
        increase over the previously recorded value is logged as a return
        transaction.
        """
        if status not in SETTLEMENT_OUTCOMES:
            raise ValidationError(f"Settlement status must be one of: {', '.join(s.value for s in SETTLEMENT_OUTCOMES)}")
        actual_return = to_decimal(actual_return).quantize(CENT, rounding=ROUND_HALF_UP)

        try:
            investment = await self.investments.get_by_id(investment_id, for_update=True)
            if investment is None:
                raise NotFoundError("Investment")
            if investment.status not in SETTLEABLE:
                raise StateConflictError(f"Investment is already {investment.status.value}")

            previous = to_decimal(investment.actual_return)
            if actual_return < previous:
                raise ValidationError(f"Actual return cannot decrease below {previous:.2f}")
            investment.actual_return = actual_return
            investment.status = status

            increment = actual_return - previous
            if increment > 0:
                farmer = await self.session.get(User, investment.farmer_id)
                self.transactions.add(
                    investor_id=investment.investor_id,
                    type=TransactionType.RETURN,
                    amount=increment,
                    description=f"Return from {farmer.name} - {investment.crop_type}",
                    loan_id=investment.loan_id,
                    farmer_id=investment.farmer_id,
                    status=TransactionStatus.COMPLETED,
                )
            await self.session.commit()
        except LedgerError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Settlement of investment {investment_id} failed: {e}", exc_info=True)
            raise PersistenceError() from e

        logger.info(f"Investment {investment_id} settled as {status.value} with return {actual_return}")
        settled = schemas.Investment.model_validate(investment)
        await self.refresh_investor_stats(settled.investor_id)
        return settled

    async def refresh_investor_stats(self, investor_id: int) -> None:
        """Recompute rollups; failures leave them stale and are only logged."""
        try:
            await self.investors.recompute_stats(investor_id)
        except (SQLAlchemyError, LedgerError) as e:
            await self.session.rollback()
            logger.error(f"Rollup recompute for investor {investor_id} failed, statistics are stale: {e}", exc_info=True)
