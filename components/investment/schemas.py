"""Pydantic schemas for investment data validation."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from components.investment.models import InvestmentStatus
from components.loan.models import RiskLevel
from components.loan.schemas import MAX_MONEY, Installment


class InvestRequest(BaseModel):
    """Schema for an investment request. The floor is checked by the service."""
    amount: float = Field(..., gt=0, le=MAX_MONEY, allow_inf_nan=False)


class InvestmentCreated(BaseModel):
    investment_id: int
    transaction_id: str
    message: str = "Investment successful!"


class SettlementRequest(BaseModel):
    """Schema for recording the outcome of an investment."""
    actual_return: float = Field(..., ge=0, le=MAX_MONEY, allow_inf_nan=False)
    status: InvestmentStatus


class Investment(BaseModel):
    """Schema for investment response."""
    id: int
    investor_id: int
    loan_id: int
    farmer_id: int
    amount: float
    expected_return: float
    actual_return: Optional[float] = None
    status: InvestmentStatus
    investment_date: datetime
    duration: int
    crop_type: str
    risk_level: RiskLevel
    repayment_schedule: List[Installment] = []

    class Config:
        from_attributes = True


class PortfolioItem(Investment):
    """Investment enriched with farmer and loan details."""
    farmer_name: str
    loan_purpose: str
