"""Pydantic schemas for user data validation."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from components.user.models import UserType


class UserBase(BaseModel):
    """Base user schema."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    user_type: UserType
    phone: Optional[str] = None
    farm_name: Optional[str] = None
    farm_location: Optional[str] = None
    farm_size: Optional[str] = None
    crop_types: Optional[str] = None


class UserCreate(UserBase):
    """Schema for user registration."""
    password: str = Field(..., min_length=6)


class User(UserBase):
    """Schema for user response."""
    id: int
    registration_date: date

    class Config:
        from_attributes = True


class UserWithToken(User):
    """Schema for user response with an access token."""
    access_token: str
    token_type: str = "bearer"
