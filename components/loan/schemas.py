"""Pydantic schemas for loan data validation."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from components.loan.models import InstallmentStatus, LoanStatus, RiskLevel

# Largest values the Numeric columns hold.
MAX_MONEY = 999_999_999_999.99
MAX_RATE = 999.99
MAX_QUANTITY = 9_999_999_999.99
MAX_ACREAGE = 99_999_999.99
MAX_DURATION = 600


class DocumentIn(BaseModel):
    """Document reference submitted with an application.

    Entries without a name or url are dropped on submission.
    """
    name: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = "other"


class InstallmentIn(BaseModel):
    """Scheduled repayment submitted with an application."""
    due_date: datetime
    amount: float = Field(..., gt=0, le=MAX_MONEY, allow_inf_nan=False)


class LoanCreate(BaseModel):
    """Schema for loan application submission."""
    amount: float = Field(..., gt=0, le=MAX_MONEY, allow_inf_nan=False)
    purpose: str = Field(..., min_length=1)
    custom_purpose: Optional[str] = None
    duration: int = Field(..., gt=0, le=MAX_DURATION, description="Duration in months")
    interest_rate: Optional[float] = Field(None, ge=0, le=MAX_RATE, allow_inf_nan=False)
    risk_level: Optional[RiskLevel] = None
    crop_type: str = Field(..., min_length=1)
    custom_crop_type: Optional[str] = None
    acreage: float = Field(..., gt=0, le=MAX_ACREAGE, allow_inf_nan=False)
    season: str = Field(..., min_length=1)
    expected_yield: float = Field(..., ge=0, le=MAX_QUANTITY, allow_inf_nan=False)
    expected_market_price: float = Field(..., ge=0, le=MAX_QUANTITY, allow_inf_nan=False)
    production_cost: float = Field(..., ge=0, le=MAX_MONEY, allow_inf_nan=False)
    expected_profit: Optional[float] = Field(None, ge=-MAX_MONEY, le=MAX_MONEY, allow_inf_nan=False)
    documents: List[DocumentIn] = []
    repayment_schedule: List[InstallmentIn] = []


class FundingContribution(BaseModel):
    investor_id: int
    investor_name: str
    amount: float
    investment_date: datetime

    class Config:
        from_attributes = True


class Installment(BaseModel):
    due_date: datetime
    amount: float
    status: InstallmentStatus
    paid_date: Optional[datetime] = None
    paid_amount: Optional[float] = None

    class Config:
        from_attributes = True


class Document(BaseModel):
    name: str
    url: str
    type: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


class Loan(BaseModel):
    """Schema for loan response."""
    id: int
    user_id: int
    amount: float
    purpose: str
    custom_purpose: Optional[str] = None
    duration: int
    interest_rate: float
    risk_level: RiskLevel
    crop_type: str
    custom_crop_type: Optional[str] = None
    acreage: float
    season: str
    expected_yield: float
    expected_market_price: float
    production_cost: float
    expected_profit: float
    amount_funded: float
    status: LoanStatus
    applied_at: datetime
    approved_at: Optional[datetime] = None
    disbursed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    contributions: List[FundingContribution] = []
    repayment_schedule: List[Installment] = []
    documents: List[Document] = []

    class Config:
        from_attributes = True


class ApplicationSubmitted(BaseModel):
    application_id: int


class LoanList(BaseModel):
    count: int
    loans: List[Loan]


class LoanReview(BaseModel):
    """Schema for an administrative status change."""
    status: LoanStatus


class FarmerDashboardStats(BaseModel):
    """Schema for farmer dashboard statistics."""
    total_loans: int
    active_loans: int
    amount_funded: float
    repayment_rate: int


class MarketplaceFarmer(BaseModel):
    id: int
    name: str
    location: Optional[str] = None


class MarketplaceLoan(BaseModel):
    """Read-only projection of an approved loan open for investment."""
    id: int
    farmer_id: int
    farmer: MarketplaceFarmer
    amount: float
    amount_funded: float
    amount_remaining: float
    funding_progress: float
    status: str
    purpose: str
    duration: int
    interest_rate: float
    crop_type: str
    acreage: float
    season: str
    expected_yield: float
    expected_market_price: float
    expected_profit: float
    risk_level: RiskLevel
    minimum_investment: float
    investors: List[FundingContribution] = []
    documents: List[Document] = []
    created_at: datetime
    updated_at: datetime


class MarketplaceFilter(BaseModel):
    """Filters accepted by the marketplace listing."""
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    crop_types: Optional[List[str]] = None
    risk_levels: Optional[List[RiskLevel]] = None
    max_duration: Optional[int] = None
    limit: Optional[int] = None
