"""Authentication endpoints for user login and registration."""

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import PermissionDeniedError
from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.core.security import verify_password, create_access_token, verify_token
from components.user.models import User, UserType
from components.user.repository import UserRepository
from components.user.schemas import UserCreate, User as UserSchema, UserWithToken

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """Get current user from JWT token."""
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = verify_token(token)
    if payload is None:
        raise credentials_error
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise credentials_error

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_user_type(*user_types: UserType) -> Callable:
    """Dependency that only admits users of the given types."""
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.user_type not in user_types:
            raise PermissionDeniedError()
        return current_user
    return dependency


def _with_token(user: User) -> UserWithToken:
    access_token = create_access_token(data={"sub": str(user.id), "user_type": user.user_type.value})
    return UserWithToken(
        **UserSchema.model_validate(user).model_dump(),
        access_token=access_token,
    )


@router.post("/register", response_model=ApiResponse[UserWithToken], status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse[UserWithToken]:
    """Create new user and return JWT token."""
    if user_in.user_type == UserType.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrator accounts cannot be self-registered",
        )
    repo = UserRepository(db)
    if await repo.exists(user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = await repo.create(user_in)
    logger.info(f"User {user.id} registered as {user.user_type.value}")
    return ApiResponse(data=_with_token(user), message="Registration successful")


@router.post("/login", response_model=ApiResponse[UserWithToken])
async def login(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> ApiResponse[UserWithToken]:
    """Login user and return JWT token."""
    user = await UserRepository(db).get_by_email(form_data.username)
    if not user or not verify_password(form_data.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ApiResponse(data=_with_token(user))
