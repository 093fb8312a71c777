"""
Post schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import AliasChoices, BaseModel, Field

Platform = Literal["instagram", "facebook", "twitter", "linkedin", "tiktok", "youtube", "pinterest"]
PostStatus = Literal["draft", "scheduled", "published", "failed"]
PostMediaType = Literal["image", "video", "text", "carousel"]


class PostCreate(BaseModel):
    """A post submitted from the composer. New posts start as drafts."""
    title: Optional[str] = Field(default=None, max_length=200)
    content: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("content", "description"),
        description="Post body; ``description`` is accepted as an alias",
    )
    platforms: List[Platform] = Field(..., min_length=1)
    media_type: PostMediaType = Field(default="text")
    media_urls: List[str] = Field(default_factory=list)
    scheduled_at: Optional[datetime] = Field(default=None)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PostUpdate(BaseModel):
    """Editable post fields. Status changes go through the status endpoint."""
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(
        default=None,
        min_length=1,
        validation_alias=AliasChoices("content", "description"),
    )
    platforms: Optional[List[Platform]] = Field(default=None, min_length=1)
    media_type: Optional[PostMediaType] = None
    media_urls: Optional[List[str]] = None
    scheduled_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None


class PostStatusUpdate(BaseModel):
    status: PostStatus
    scheduled_at: Optional[datetime] = Field(default=None, description="Required when scheduling a post without a date")
    error_message: Optional[str] = Field(default=None, description="Stored in metadata when a post fails")
