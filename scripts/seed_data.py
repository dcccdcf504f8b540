"""Script to seed demo data into the database."""

import asyncio
from datetime import datetime, timedelta

from components.core.init_db import db_manager, get_db
from components.investment.service import FundingService
from components.loan.models import LoanStatus
from components.loan.repository import LoanRepository
from components.loan.service import LoanService
from components.loan.schemas import InstallmentIn, LoanCreate
from components.user.models import UserType
from components.user.repository import UserRepository
from components.user.schemas import UserCreate


async def seed_data():
    """Seed demo users, loans and one investment."""
    await db_manager.create_all()
    async for db in get_db():
        users = UserRepository(db)
        farmer = await users.create(UserCreate(
            name="Gurpreet Singh",
            email="farmer@agrofund.in",
            password="password123",
            user_type=UserType.FARMER,
            farm_name="Green Acres",
            farm_location="Punjab",
        ))
        investor = await users.create(UserCreate(
            name="Asha Mehta",
            email="investor@agrofund.in",
            password="password123",
            user_type=UserType.INVESTOR,
        ))
        await users.create(UserCreate(
            name="Platform Admin",
            email="admin@agrofund.in",
            password="password123",
            user_type=UserType.ADMIN,
        ))
        print("Created users")

        loans = LoanService(db)
        start = datetime(2025, 1, 1)
        for crop, amount, duration in [("Wheat", 50000, 6), ("Rice", 80000, 9), ("Cotton", 120000, 12)]:
            loan = await LoanRepository(db).create(farmer.id, LoanCreate(
                amount=amount,
                purpose="Seeds and fertilizer",
                duration=duration,
                crop_type=crop,
                acreage=10,
                season="Rabi",
                expected_yield=20,
                expected_market_price=2200,
                production_cost=amount * 0.8,
                repayment_schedule=[
                    InstallmentIn(due_date=start + timedelta(days=30 * (i + 1)), amount=amount / 3)
                    for i in range(3)
                ],
            ))
            await loans.review_loan(loan.id, LoanStatus.APPROVED)
            print(f"Created approved loan {loan.id} for {crop}")

        await FundingService(db).invest(loan.id, investor, 20000)
        print("Seed data completed successfully!")
        break

if __name__ == "__main__":
    asyncio.run(seed_data())
