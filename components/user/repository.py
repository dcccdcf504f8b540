"""Repository for user operations."""

from datetime import date
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.user.models import User
from components.user.schemas import UserCreate
from components.core.security import get_password_hash


class UserRepository:
    """Repository for user operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, user: UserCreate) -> User:
        """Create a new user."""
        db_user = User(
            name=user.name,
            email=user.email.lower(),
            password=get_password_hash(user.password),
            user_type=user.user_type,
            phone=user.phone,
            farm_name=user.farm_name,
            farm_location=user.farm_location,
            farm_size=user.farm_size,
            crop_types=user.crop_types,
            registration_date=date.today(),
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return db_user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def exists(self, email: str) -> bool:
        """Check if user with given email exists."""
        result = await self.session.execute(
            select(User.id).where(User.email == email.lower())
        )
        return result.scalar_one_or_none() is not None
