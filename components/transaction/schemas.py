"""Pydantic schemas for transaction data."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from components.transaction.models import TransactionStatus, TransactionType


class Transaction(BaseModel):
    """Schema for transaction response."""
    id: int
    transaction_id: str
    type: TransactionType
    amount: float
    description: str
    loan_id: Optional[int] = None
    farmer_id: Optional[int] = None
    farmer_name: Optional[str] = None
    status: TransactionStatus
    date: datetime
