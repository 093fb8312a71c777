"""
Media library endpoints backed by the Supabase ``media_files`` table.

Rows describe files that already live in storage; deleting a row leaves the
stored file alone.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from supabase import Client

from app.api.deps import get_current_user
from app.core.exceptions import ContentStudioException, NotFoundException, ValidationException
from app.core.logging import get_logger
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse
from app.schemas.media_file import (
    FileType,
    MediaFileCreate,
    MediaFileStatusUpdate,
    MediaFileUpdate,
    ProcessingStatus,
)
from app.schemas.user import AuthenticatedUser
from app.services.lifecycle import MEDIA_TRANSITIONS, check_transition

logger = get_logger(__name__)
router = APIRouter()

TABLE = "media_files"


def update_media_file(supabase: Client, file_id: str, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    try:
        result = supabase.table(TABLE).update(changes).eq("id", file_id).eq("user_id", user_id).execute()
    except Exception as e:
        logger.error("Failed to update media file", file_id=file_id, error=str(e))
        raise ContentStudioException("Failed to update media file", error_code="database_error")

    if not result.data:
        raise NotFoundException("Media file not found")
    return result.data[0]


@router.get("", response_model=ApiResponse[List[Dict[str, Any]]])
async def list_media_files(
    file_type: Optional[FileType] = Query(None),
    processing_status: Optional[ProcessingStatus] = Query(None),
    optimization_status: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """List the user's media files, newest first."""
    try:
        query = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_id", current_user.id)
            .order("created_at", desc=True)
        )
        if file_type:
            query = query.eq("file_type", file_type)
        if processing_status:
            query = query.eq("processing_status", processing_status)
        if optimization_status:
            query = query.eq("optimization_status", optimization_status)
        if limit:
            query = query.limit(limit)
        media_files = query.execute().data or []
    except Exception as e:
        logger.error("Failed to retrieve media files", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to retrieve media files", error_code="database_error")

    return ApiResponse(success=True, data=media_files)


@router.post("", response_model=ApiResponse[Dict[str, Any]], status_code=status.HTTP_201_CREATED)
async def create_media_file(
    media_file: MediaFileCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    try:
        result = supabase.table(TABLE).insert({
            "user_id": current_user.id,
            **media_file.model_dump(),
        }).execute()
    except Exception as e:
        logger.error("Failed to create media file", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to create media file record", error_code="database_error")

    if not result.data:
        raise ContentStudioException("Failed to create media file record", error_code="database_error")

    return ApiResponse(success=True, data=result.data[0])


@router.put("/{file_id}", response_model=ApiResponse[Dict[str, Any]])
async def edit_media_file(
    media_update: MediaFileUpdate,
    file_id: str = Path(..., description="Media file ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    changes = media_update.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationException("No valid fields to update")

    return ApiResponse(success=True, data=update_media_file(supabase, file_id, current_user.id, changes))


@router.patch("/{file_id}/status", response_model=ApiResponse[Dict[str, Any]])
async def update_media_file_status(
    status_update: MediaFileStatusUpdate,
    file_id: str = Path(..., description="Media file ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Advance processing: pending, processing, then completed or failed."""
    result = (
        supabase.table(TABLE)
        .select("*")
        .eq("id", file_id)
        .eq("user_id", current_user.id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundException("Media file not found")

    existing = result.data[0]
    current = existing.get("processing_status") or "pending"
    target = status_update.processing_status
    if not check_transition(MEDIA_TRANSITIONS, current, target):
        return ApiResponse(success=True, data=existing)

    media_file = update_media_file(supabase, file_id, current_user.id, {"processing_status": target})
    logger.info("Media file status changed", file_id=file_id, from_status=current, to_status=target)
    return ApiResponse(success=True, data=media_file)


@router.delete("/{file_id}", response_model=ApiResponse[dict])
async def delete_media_file(
    file_id: str = Path(..., description="Media file ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    try:
        result = supabase.table(TABLE).delete().eq("id", file_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        logger.error("Failed to delete media file", file_id=file_id, error=str(e))
        raise ContentStudioException("Failed to delete media file", error_code="database_error")

    if not result.data:
        raise NotFoundException("Media file not found")

    return ApiResponse(success=True, message="Media file record deleted successfully")
