"""Repository for transaction operations."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from components.transaction.models import Transaction, TransactionStatus, TransactionType
from components.transaction.utils import generate_transaction_id
from components.transaction import schemas
from components.user.models import User


class TransactionRepository:
    """
    Repository for transaction operations.

    Transactions are only ever added; the repository offers no update or
    delete.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    def add(
        self,
        investor_id: int,
        type: TransactionType,
        amount: Decimal,
        description: str,
        loan_id: Optional[int] = None,
        farmer_id: Optional[int] = None,
        status: TransactionStatus = TransactionStatus.PENDING,
    ) -> Transaction:
        """Stage a new transaction in the current unit of work."""
        transaction = Transaction(
            transaction_id=generate_transaction_id(),
            investor_id=investor_id,
            type=type,
            amount=amount,
            description=description,
            loan_id=loan_id,
            farmer_id=farmer_id,
            status=status,
        )
        self.session.add(transaction)
        return transaction

    async def get_for_investor(self, investor_id: int, limit: int) -> List[schemas.Transaction]:
        """Get an investor's transactions, newest first."""
        result = await self.session.execute(
            select(Transaction, User.name)
            .outerjoin(User, User.id == Transaction.farmer_id)
            .where(Transaction.investor_id == investor_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return [
            schemas.Transaction(
                id=txn.id,
                transaction_id=txn.transaction_id,
                type=txn.type,
                amount=float(txn.amount),
                description=txn.description,
                loan_id=txn.loan_id,
                farmer_id=txn.farmer_id,
                farmer_name=farmer_name,
                status=txn.status,
                date=txn.created_at,
            )
            for txn, farmer_name in result.all()
        ]

    async def sum_returns_since(self, investor_id: int, since: datetime) -> Decimal:
        """Total of completed return transactions created after ``since``."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0))
            .where(Transaction.investor_id == investor_id)
            .where(Transaction.type == TransactionType.RETURN)
            .where(Transaction.status == TransactionStatus.COMPLETED)
            .where(Transaction.created_at >= since)
        )
        return Decimal(str(result.scalar_one()))
