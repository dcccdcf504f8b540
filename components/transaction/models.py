"""Transaction model for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric

from components.core.database import Base, enum_column, utcnow


class TransactionType(str, enum.Enum):
    INVESTMENT = "investment"
    RETURN = "return"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Transaction(Base):
    """Append-only audit record of money movement."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(40), unique=True, nullable=False)
    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False, index=True)
    type = enum_column(TransactionType, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String(255), nullable=False)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=True)
    farmer_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = enum_column(TransactionStatus, nullable=False, default=TransactionStatus.PENDING)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
