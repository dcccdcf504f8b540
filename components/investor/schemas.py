"""Pydantic schemas for investor profiles and statistics."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from components.investor.models import CROP_CHOICES, VerificationStatus
from components.loan.models import RiskLevel
from components.loan.schemas import MAX_MONEY


class InvestorStats(BaseModel):
    """Rollup fields derived from an investor's investments."""
    total_invested: float = 0
    total_returns: float = 0
    active_investments: int = 0
    completed_investments: int = 0
    average_roi: float = 0


class KycDocuments(BaseModel):
    pan_card: str = ""
    aadhaar: str = ""
    bank_statement: str = ""
    income_proof: str = ""


class InvestorProfile(InvestorStats):
    """Schema for investor profile response."""
    id: int
    user_id: int
    name: str
    email: str
    investment_capacity: float
    risk_tolerance: RiskLevel
    preferred_crops: List[str]
    preferred_regions: List[str]
    verification_status: VerificationStatus
    kyc_documents: KycDocuments
    created_at: datetime
    updated_at: datetime


class InvestorProfileUpdate(BaseModel):
    """
    Schema for investor profile update.

    Rollup fields are not accepted here; they are derived.
    """
    investment_capacity: Optional[float] = Field(None, ge=0, le=MAX_MONEY, allow_inf_nan=False)
    risk_tolerance: Optional[RiskLevel] = None
    preferred_crops: Optional[List[str]] = None
    preferred_regions: Optional[List[str]] = None

    def invalid_crops(self) -> List[str]:
        return [crop for crop in self.preferred_crops or [] if crop not in CROP_CHOICES]


class InvestorDashboardStats(InvestorStats):
    """Schema for investor dashboard statistics."""
    portfolio_value: float
    monthly_returns: float
    pending_returns: float
