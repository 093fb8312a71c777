"""
User schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """User resolved from a Supabase access token."""
    id: str = Field(..., description="Supabase user ID (UUID)")
    email: Optional[str] = Field(None, description="User email")
