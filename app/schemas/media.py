"""
Stock media search schemas.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


MediaSearchType = Literal["images", "videos", "audio", "all"]
MediaOrder = Literal["popular", "latest"]


class MediaSearchParams(BaseModel):
    """Options shared by Pixabay searches."""
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=3, le=200)
    order: MediaOrder = "popular"
    category: Optional[str] = None
    min_width: Optional[int] = Field(default=None, ge=0)
    min_height: Optional[int] = Field(default=None, ge=0)
    safe_search: bool = True


class MediaSearchResult(BaseModel):
    """Raw Pixabay result page."""
    total: int = 0
    total_hits: int = Field(default=0, alias="totalHits")
    hits: List[Dict[str, Any]] = Field(default_factory=list)


class MediaSearchResponse(BaseModel):
    images: Optional[MediaSearchResult] = None
    videos: Optional[MediaSearchResult] = None
    audio: Optional[MediaSearchResult] = None
