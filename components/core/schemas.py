"""Core schemas for the application."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope for success and failure paths."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
