"""Investment models for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from components.core.database import Base, enum_column, utcnow
from components.loan.models import InstallmentStatus, RiskLevel


class InvestmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"
    PARTIAL_RETURN = "partial_return"


class Investment(Base):
    """
    One investor's stake in one loan.

    Duration, crop type and risk level are copied from the loan when the
    investment is made and are never refreshed from it.
    """
    __tablename__ = "investments"

    id = Column(Integer, primary_key=True, index=True)
    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False, index=True)
    farmer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    expected_return = Column(Numeric(14, 2), nullable=False)
    actual_return = Column(Numeric(14, 2), nullable=True)
    status = enum_column(InvestmentStatus, nullable=False, default=InvestmentStatus.ACTIVE, index=True)
    investment_date = Column(DateTime, nullable=False, default=utcnow)
    duration = Column(Integer, nullable=False)
    crop_type = Column(String(50), nullable=False)
    risk_level = enum_column(RiskLevel, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    repayment_schedule = relationship(
        "InvestmentInstallment",
        back_populates="investment",
        order_by="InvestmentInstallment.due_date",
        lazy="selectin",
    )


class InvestmentInstallment(Base):
    """Investor's prorated share of a scheduled loan repayment."""
    __tablename__ = "investment_installments"

    id = Column(Integer, primary_key=True, index=True)
    investment_id = Column(Integer, ForeignKey("investments.id"), nullable=False, index=True)
    due_date = Column(DateTime, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    status = enum_column(InstallmentStatus, nullable=False, default=InstallmentStatus.PENDING)
    paid_date = Column(DateTime, nullable=True)
    paid_amount = Column(Numeric(14, 2), nullable=True)

    investment = relationship("Investment", back_populates="repayment_schedule")
