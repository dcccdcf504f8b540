"""Loan application endpoints for farmers and reviewers."""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import ApiResponse
from components.loan.service import LoanService
from components.loan import schemas
from components.user.models import User, UserType
from restapi.endpoints.auth import get_current_user, require_user_type

router = APIRouter(
    prefix="/api/loans",
    tags=["loans"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/applications",
    response_model=ApiResponse[schemas.ApplicationSubmitted],
    status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    loan_in: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.FARMER)),
):
    """Submit a new loan application. It starts in the pending status."""
    loan = await LoanService(db).submit_application(current_user, loan_in)
    return ApiResponse(
        data=schemas.ApplicationSubmitted(application_id=loan.id),
        message="Loan application submitted successfully",
    )


@router.get("/my-applications", response_model=ApiResponse[schemas.LoanList])
async def my_applications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get all loans of the current user, newest first."""
    return ApiResponse(data=await LoanService(db).list_applications(current_user))


@router.get("/dashboard-stats", response_model=ApiResponse[schemas.FarmerDashboardStats])
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get dashboard statistics for the current user's loans.

    Returns:
    - Total number of loans
    - Number of approved, disbursed and active loans
    - Total amount funded by investors
    - Percentage of scheduled installments already paid
    """
    return ApiResponse(data=await LoanService(db).dashboard_stats(current_user))


@router.get("/recent-applications", response_model=ApiResponse[List[schemas.Loan]])
async def recent_applications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the most recent loan applications of the current user."""
    loans = await LoanService(db).recent_applications(current_user)
    return ApiResponse(data=[schemas.Loan.model_validate(loan) for loan in loans])


@router.put("/{loan_id}/review", response_model=ApiResponse[schemas.Loan])
async def review_loan(
    loan_id: int,
    review: schemas.LoanReview,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.ADMIN)),
):
    """Approve, reject or advance a loan through its lifecycle."""
    loan = await LoanService(db).review_loan(loan_id, review.status)
    return ApiResponse(data=schemas.Loan.model_validate(loan))


@router.get("/{loan_id}", response_model=ApiResponse[schemas.Loan])
async def get_loan(
    loan_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a single loan owned by the current user."""
    loan = await LoanService(db).get_loan(current_user, loan_id)
    return ApiResponse(data=schemas.Loan.model_validate(loan))
