"""
Automation webhook schemas.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator


class ManualTriggerRequest(BaseModel):
    """Request to fetch insights for one or more posts through Make.com."""
    post_id: Optional[str] = Field(default=None, description="Single post ID")
    post_ids: Optional[List[str]] = Field(default=None, max_length=50, description="Several post IDs")
    platform: Optional[str] = Field(default=None, description="Restrict to one platform")

    @model_validator(mode="after")
    def require_post(self) -> "ManualTriggerRequest":
        if not self.post_id and not self.post_ids:
            raise ValueError("Either post_id or post_ids must be provided")
        return self


class TriggerResult(BaseModel):
    post_id: str
    platform: Optional[str] = None
    status: Literal["triggered", "failed", "error"]
    response: Optional[str] = None
    error: Optional[str] = None


class ManualTriggerResponse(BaseModel):
    results: List[TriggerResult]
    success_count: int
    failure_count: int
