"""User model for the database."""

import enum

from sqlalchemy import Column, Integer, String, Date

from components.core.database import Base, enum_column


class UserType(str, enum.Enum):
    FARMER = "farmer"
    INVESTOR = "investor"
    ADMIN = "admin"


class User(Base):
    """Platform account; a farmer, an investor or an administrator."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # Hashed password
    user_type = enum_column(UserType, nullable=False)
    phone = Column(String(30), nullable=True)
    farm_name = Column(String(100), nullable=True)
    farm_location = Column(String(255), nullable=True)
    farm_size = Column(String(50), nullable=True)
    crop_types = Column(String(255), nullable=True)
    registration_date = Column(Date, nullable=False)
