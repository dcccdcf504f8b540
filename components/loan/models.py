"""Loan models for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship

from components.core.database import Base, enum_column, utcnow


class LoanStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FUNDED = "funded"
    ACTIVE = "active"
    DISBURSED = "disbursed"
    COMPLETED = "completed"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InstallmentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Loan(Base):
    """Farmer's funding request with its funding state."""
    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Basic details
    amount = Column(Numeric(14, 2), nullable=False)
    purpose = Column(String(255), nullable=False)
    custom_purpose = Column(String(255), nullable=True)
    duration = Column(Integer, nullable=False)  # Months
    interest_rate = Column(Numeric(5, 2), nullable=False)  # Percent per annum
    risk_level = enum_column(RiskLevel, nullable=False, default=RiskLevel.MEDIUM)

    # Farm details
    crop_type = Column(String(50), nullable=False)
    custom_crop_type = Column(String(50), nullable=True)
    acreage = Column(Numeric(10, 2), nullable=False)
    season = Column(String(50), nullable=False)
    expected_yield = Column(Numeric(12, 2), nullable=False)

    # Financial projections
    expected_market_price = Column(Numeric(12, 2), nullable=False)
    production_cost = Column(Numeric(14, 2), nullable=False)
    expected_profit = Column(Numeric(14, 2), nullable=False, default=0)

    # Funding state
    amount_funded = Column(Numeric(14, 2), nullable=False, default=0)

    status = enum_column(LoanStatus, nullable=False, default=LoanStatus.PENDING, index=True)
    applied_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    approved_at = Column(DateTime, nullable=True)
    disbursed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    contributions = relationship(
        "FundingContribution",
        back_populates="loan",
        order_by="FundingContribution.id",
        lazy="selectin",
    )
    repayment_schedule = relationship(
        "LoanInstallment",
        back_populates="loan",
        order_by="LoanInstallment.due_date",
        lazy="selectin",
    )
    documents = relationship(
        "LoanDocument",
        back_populates="loan",
        order_by="LoanDocument.id",
        lazy="selectin",
    )


class FundingContribution(Base):
    """One increment of money applied toward a loan."""
    __tablename__ = "funding_contributions"

    id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False, index=True)
    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False)
    investor_name = Column(String(100), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    investment_date = Column(DateTime, nullable=False, default=utcnow)

    loan = relationship("Loan", back_populates="contributions")


class LoanInstallment(Base):
    """Scheduled repayment of a loan."""
    __tablename__ = "loan_installments"

    id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False, index=True)
    due_date = Column(DateTime, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    status = enum_column(InstallmentStatus, nullable=False, default=InstallmentStatus.PENDING)
    paid_date = Column(DateTime, nullable=True)
    paid_amount = Column(Numeric(14, 2), nullable=True)

    loan = relationship("Loan", back_populates="repayment_schedule")


class LoanDocument(Base):
    """Reference to a document uploaded with a loan application."""
    __tablename__ = "loan_documents"

    id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    type = Column(String(50), nullable=False)
    uploaded_at = Column(DateTime, nullable=False, default=utcnow)

    loan = relationship("Loan", back_populates="documents")
