"""
Post endpoints backed by the Supabase ``posts`` table.
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
from app.schemas.post import Platform, PostCreate, PostStatus, PostStatusUpdate, PostUpdate
from app.schemas.user import AuthenticatedUser
from app.services.lifecycle import POST_TRANSITIONS, check_transition

logger = get_logger(__name__)
router = APIRouter()

TABLE = "posts"


def fetch_post(supabase: Client, post_id: str, user_id: str) -> Dict[str, Any]:
    result = (
        supabase.table(TABLE)
        .select("*")
        .eq("id", post_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundException("Post not found")
    return result.data[0]


def apply_update(supabase: Client, post_id: str, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    try:
        result = supabase.table(TABLE).update(changes).eq("id", post_id).eq("user_id", user_id).execute()
    except Exception as e:
        logger.error("Failed to update post", post_id=post_id, error=str(e))
        raise ContentStudioException("Failed to update post", error_code="database_error")

    if not result.data:
        raise NotFoundException("Post not found")
    return result.data[0]


@router.get("", response_model=ApiResponse[List[Dict[str, Any]]])
async def list_posts(
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    platform: Optional[Platform] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """List the user's posts, newest first."""
    try:
        query = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_id", current_user.id)
            .order("created_at", desc=True)
        )
        if post_status:
            query = query.eq("status", post_status)
        if platform:
            query = query.contains("platforms", [platform])
        posts = query.limit(limit).execute().data or []
    except Exception as e:
        logger.error("Failed to retrieve posts", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to retrieve posts", error_code="database_error")

    return ApiResponse(success=True, data=posts)


@router.post("", response_model=ApiResponse[Dict[str, Any]], status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Save a new draft post."""
    row = {
        "user_id": current_user.id,
        **post.model_dump(mode="json"),
        "status": "draft",
    }
    try:
        result = supabase.table(TABLE).insert(row).execute()
    except Exception as e:
        logger.error("Failed to create post", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to create post", error_code="database_error")

    if not result.data:
        raise ContentStudioException("Failed to create post - no data returned", error_code="database_error")

    logger.info("Post created", user_id=current_user.id, post_id=result.data[0].get("id"))
    return ApiResponse(success=True, data=result.data[0], message="Post created successfully")


@router.get("/{post_id}", response_model=ApiResponse[Dict[str, Any]])
async def get_post(
    post_id: str = Path(..., description="Post ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    return ApiResponse(success=True, data=fetch_post(supabase, post_id, current_user.id))


@router.put("/{post_id}", response_model=ApiResponse[Dict[str, Any]])
async def update_post(
    post_update: PostUpdate,
    post_id: str = Path(..., description="Post ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Edit a post's content. Published posts are read-only."""
    changes = post_update.model_dump(mode="json", exclude_unset=True)
    if not changes:
        raise ValidationException("No valid fields to update")

    existing = fetch_post(supabase, post_id, current_user.id)
    if existing.get("status") == "published":
        raise ValidationException("Published posts cannot be edited")

    post = apply_update(supabase, post_id, current_user.id, changes)
    return ApiResponse(success=True, data=post, message="Post updated successfully")


@router.patch("/{post_id}/status", response_model=ApiResponse[Dict[str, Any]])
async def update_post_status(
    status_update: PostStatusUpdate,
    post_id: str = Path(..., description="Post ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Move a post through draft, scheduled, published and failed."""
    existing = fetch_post(supabase, post_id, current_user.id)
    current = existing.get("status") or "draft"
    target = status_update.status

    if not check_transition(POST_TRANSITIONS, current, target):
        return ApiResponse(success=True, data=existing, message=f"Post is already {target}")

    changes: Dict[str, Any] = {"status": target}
    if target == "scheduled":
        scheduled_at = existing.get("scheduled_at")
        if status_update.scheduled_at:
            scheduled_at = status_update.scheduled_at.isoformat()
        if not scheduled_at:
            raise ValidationException("scheduled_at is required to schedule a post")
        changes["scheduled_at"] = scheduled_at
    elif target == "published":
        changes["published_at"] = datetime.now(timezone.utc).isoformat()
    elif target == "failed" and status_update.error_message:
        changes["metadata"] = {**(existing.get("metadata") or {}), "error_message": status_update.error_message}

    post = apply_update(supabase, post_id, current_user.id, changes)
    logger.info("Post status changed", post_id=post_id, from_status=current, to_status=target)
    return ApiResponse(success=True, data=post, message=f"Post moved to {target}")
