"""
Common Pydantic schemas shared by every endpoint.
"""
from datetime import datetime, timezone
from typing import Generic, TypeVar, Optional, Any, Dict
from pydantic import BaseModel, Field, TypeAdapter


T = TypeVar('T')

_datetime_adapter = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a Supabase timestamp column. Naive values are taken as UTC."""
    if not value:
        return None
    parsed = _datetime_adapter.validate_python(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """Generic API response wrapper that matches frontend expectations."""
    success: bool = Field(..., description="Whether the request was successful")
    data: Optional[T] = Field(None, description="Response data")
    error: Optional[str] = Field(None, description="Error message")
    message: Optional[str] = Field(None, description="Human readable status message")


class Pagination(BaseModel):
    """Offset pagination metadata."""
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Number of skipped rows")
    has_more: bool = Field(..., description="Whether another page may exist")


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    environment: str = Field(..., description="Environment name")


class DetailedHealthCheck(HealthCheck):
    """Detailed health check with service statuses."""
    services: Dict[str, Dict[str, Any]] = Field(..., description="Service health status")
