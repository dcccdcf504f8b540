"""Pure calculations over loan state."""

from decimal import Decimal
from typing import Iterable, Optional

from components.core.config import get_settings
from components.loan.models import InstallmentStatus, Loan
from components.loan import schemas

settings = get_settings()

HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Convert floats and ints to Decimal without binary noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_expected_profit(acreage, expected_yield, expected_market_price, production_cost) -> Decimal:
    """Projected revenue of the harvest minus its production cost."""
    revenue = to_decimal(acreage) * to_decimal(expected_yield) * to_decimal(expected_market_price)
    return revenue - to_decimal(production_cost)


def amount_remaining(loan: Loan) -> Decimal:
    return to_decimal(loan.amount) - to_decimal(loan.amount_funded)


def funding_progress(loan: Loan) -> Decimal:
    """Share of the requested amount already funded, in percent."""
    amount = to_decimal(loan.amount)
    if amount <= 0:
        return Decimal("0")
    return to_decimal(loan.amount_funded) / amount * HUNDRED


def repayment_rate(loans: Iterable[Loan]) -> int:
    """Percentage of scheduled installments already paid, rounded."""
    installments = [item for loan in loans for item in loan.repayment_schedule]
    if not installments:
        return 0
    paid = sum(1 for item in installments if item.status == InstallmentStatus.PAID)
    return round(paid / len(installments) * 100)


def project_marketplace_loan(loan: Loan, farmer_name: str, farmer_location: Optional[str] = None) -> schemas.MarketplaceLoan:
    """Build the marketplace view of a loan. Does not touch the loan."""
    progress = funding_progress(loan)
    return schemas.MarketplaceLoan(
        id=loan.id,
        farmer_id=loan.user_id,
        farmer=schemas.MarketplaceFarmer(
            id=loan.user_id,
            name=farmer_name,
            location=farmer_location or "Unknown Location",
        ),
        amount=float(loan.amount),
        amount_funded=float(to_decimal(loan.amount_funded)),
        amount_remaining=float(amount_remaining(loan)),
        funding_progress=float(progress),
        status="funded" if progress >= HUNDRED else "funding",
        purpose=loan.purpose,
        duration=loan.duration,
        interest_rate=float(loan.interest_rate),
        crop_type=loan.crop_type,
        acreage=float(loan.acreage),
        season=loan.season,
        expected_yield=float(loan.expected_yield),
        expected_market_price=float(loan.expected_market_price),
        expected_profit=float(loan.expected_profit),
        risk_level=loan.risk_level,
        minimum_investment=settings.MIN_INVESTMENT,
        investors=[schemas.FundingContribution.model_validate(c) for c in loan.contributions],
        documents=[schemas.Document.model_validate(d) for d in loan.documents],
        created_at=loan.created_at,
        updated_at=loan.updated_at,
    )
