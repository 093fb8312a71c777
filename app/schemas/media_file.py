"""
Media library schemas.
"""
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

FileType = Literal["image", "video", "audio", "document"]
ProcessingStatus = Literal["pending", "processing", "completed", "failed"]


class MediaFileCreate(BaseModel):
    """Record for a file already uploaded to storage."""
    filename: str = Field(..., min_length=1)
    original_filename: str = Field(..., min_length=1)
    file_path: str = Field(..., min_length=1)
    storage_url: str = Field(..., min_length=1)
    file_size: int = Field(..., gt=0, description="Size in bytes")
    mime_type: str = Field(..., min_length=1)
    file_type: FileType
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    duration: Optional[float] = Field(default=None, gt=0, description="Seconds, for audio and video")
    processing_status: ProcessingStatus = Field(default="pending")
    optimization_status: str = Field(default="pending")
    thumbnail_url: Optional[str] = None
    compressed_url: Optional[str] = None
    alt_text: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class MediaFileUpdate(BaseModel):
    filename: Optional[str] = Field(default=None, min_length=1)
    file_path: Optional[str] = Field(default=None, min_length=1)
    storage_url: Optional[str] = Field(default=None, min_length=1)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    duration: Optional[float] = Field(default=None, gt=0)
    optimization_status: Optional[str] = None
    thumbnail_url: Optional[str] = None
    compressed_url: Optional[str] = None
    alt_text: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class MediaFileStatusUpdate(BaseModel):
    processing_status: ProcessingStatus
