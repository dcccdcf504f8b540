"""Investor model for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, JSON, Float

from components.core.database import Base, enum_column, utcnow
from components.loan.models import RiskLevel


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


CROP_CHOICES = (
    "Wheat", "Rice", "Cotton", "Sugarcane", "Corn", "Soybean",
    "Potato", "Tomato", "Vegetables", "Fruits", "Pulses",
)


class Investor(Base):
    """Investing profile of a user with derived portfolio rollups."""
    __tablename__ = "investors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    investment_capacity = Column(Numeric(14, 2), nullable=False)
    risk_tolerance = enum_column(RiskLevel, nullable=False, default=RiskLevel.MEDIUM)
    preferred_crops = Column(JSON, nullable=False, default=list)
    preferred_regions = Column(JSON, nullable=False, default=list)

    # Rollups, written only by InvestorRepository.recompute_stats
    total_invested = Column(Numeric(14, 2), nullable=False, default=0)
    total_returns = Column(Numeric(14, 2), nullable=False, default=0)
    active_investments = Column(Integer, nullable=False, default=0)
    completed_investments = Column(Integer, nullable=False, default=0)
    average_roi = Column(Float, nullable=False, default=0)

    verification_status = enum_column(VerificationStatus, nullable=False, default=VerificationStatus.PENDING)
    kyc_pan_card = Column(String(255), nullable=False, default="")
    kyc_aadhaar = Column(String(255), nullable=False, default="")
    kyc_bank_statement = Column(String(255), nullable=False, default="")
    kyc_income_proof = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
