"""Investor endpoints: marketplace, investing, portfolio and profile."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.investment.service import FundingService
from components.investment import schemas as investment_schemas
from components.investor.service import InvestorService
from components.investor import schemas
from components.loan.models import RiskLevel
from components.loan.service import LoanService
from components.loan import schemas as loan_schemas
from components.transaction import schemas as transaction_schemas
from components.user.models import User, UserType
from restapi.endpoints.auth import get_current_user, require_user_type

router = APIRouter(
    prefix="/api/investors",
    tags=["investors"],
    responses={404: {"description": "Not found"}},
)

investor_only = require_user_type(UserType.INVESTOR)


@router.get("/dashboard-stats", response_model=ApiResponse[schemas.InvestorDashboardStats])
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """
    Get investor dashboard statistics.

    Returns the portfolio rollups together with:
    - Portfolio value (invested plus returned)
    - Returns received in the last 30 days
    - Interest still expected from active investments
    """
    return ApiResponse(data=await InvestorService(db).dashboard_stats(current_user))


@router.get("/portfolio", response_model=ApiResponse[List[investment_schemas.PortfolioItem]])
async def portfolio(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """Get the current investor's investments, newest first."""
    return ApiResponse(data=await InvestorService(db).portfolio(current_user))


@router.get("/marketplace-loans", response_model=ApiResponse[List[loan_schemas.MarketplaceLoan]])
async def marketplace_loans(
    min_amount: Optional[float] = Query(None, ge=0, description="Minimum requested amount"),
    max_amount: Optional[float] = Query(None, ge=0, description="Maximum requested amount"),
    crop_types: Optional[List[str]] = Query(None, description="Crop types to include"),
    risk_levels: Optional[List[RiskLevel]] = Query(None, description="Risk levels to include"),
    max_duration: Optional[int] = Query(None, ge=1, description="Maximum duration in months"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of loans to return"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get approved loans that are open for investment."""
    filters = loan_schemas.MarketplaceFilter(
        min_amount=min_amount,
        max_amount=max_amount,
        crop_types=crop_types,
        risk_levels=risk_levels,
        max_duration=max_duration,
        limit=limit,
    )
    return ApiResponse(data=await LoanService(db).marketplace(filters))


@router.post("/invest/{loan_id}", response_model=ApiResponse[investment_schemas.InvestmentCreated])
async def invest(
    loan_id: int,
    request: investment_schemas.InvestRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """Invest in an approved loan."""
    created = await FundingService(db).invest(loan_id, current_user, request.amount)
    return ApiResponse(data=created, message=created.message)


@router.get("/transactions", response_model=ApiResponse[List[transaction_schemas.Transaction]])
async def transactions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """Get the current investor's most recent transactions."""
    return ApiResponse(data=await InvestorService(db).transactions_for(current_user))


@router.get("/profile", response_model=ApiResponse[schemas.InvestorProfile])
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """Get the investor profile, creating it on first access."""
    return ApiResponse(data=await InvestorService(db).get_profile(current_user))


@router.put("/profile", response_model=ApiResponse[schemas.InvestorProfile])
async def update_profile(
    profile: schemas.InvestorProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(investor_only),
):
    """Update investment preferences. Statistics are not editable."""
    return ApiResponse(data=await InvestorService(db).update_profile(current_user, profile))


@router.post(
    "/investments/{investment_id}/settle",
    response_model=ApiResponse[investment_schemas.Investment],
)
async def settle_investment(
    investment_id: int,
    settlement: investment_schemas.SettlementRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.ADMIN)),
):
    """Record the return of an investment reported by the settlement process."""
    investment = await FundingService(db).record_settlement(
        investment_id, settlement.actual_return, settlement.status
    )
    return ApiResponse(data=investment)
