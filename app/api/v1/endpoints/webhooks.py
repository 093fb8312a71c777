"""
Automation webhook endpoints.
"""
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends
from supabase import Client

from app.api.deps import get_current_user, get_make_webhook_service
from app.core.exceptions import ContentStudioException, NotFoundException
from app.core.logging import get_logger
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse, parse_timestamp
from app.schemas.user import AuthenticatedUser
from app.schemas.webhook import ManualTriggerRequest, ManualTriggerResponse
from app.services.make_webhook import MakeWebhookService, is_success_status

logger = get_logger(__name__)

router = APIRouter()


@router.post("/manual-trigger", response_model=ApiResponse[ManualTriggerResponse])
async def manual_trigger(
    request: ManualTriggerRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
    make: MakeWebhookService = Depends(get_make_webhook_service),
):
    """Ask Make.com to fetch fresh insights for the given posts."""
    post_ids = [request.post_id] if request.post_id else list(request.post_ids or [])

    try:
        posts = (
            supabase.table("posts")
            .select("*")
            .in_("id", post_ids)
            .eq("user_id", current_user.id)
            .execute()
        ).data or []

        accounts = (
            supabase.table("social_accounts")
            .select("platform, username, external_account_id, platform_metadata")
            .eq("user_id", current_user.id)
            .eq("status", "connected")
            .execute()
        ).data or []
    except Exception as e:
        logger.error("Failed to load posts for webhook trigger", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to trigger webhook", error_code="database_error")

    if not posts:
        raise NotFoundException("No posts found to sync")

    result = await make.trigger_post_insights(
        supabase, current_user.id, posts, accounts, platform=request.platform
    )
    return ApiResponse(success=result.success_count > 0, data=result)


@router.get("/manual-trigger", response_model=ApiResponse[dict])
async def manual_trigger_activity(
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Recent manual triggers and their success rate over the last 24 hours."""
    try:
        logs = (
            supabase.table("ai_context_logs")
            .select("*")
            .eq("user_id", current_user.id)
            .eq("source_type", "manual_webhook")
            .order("created_at", desc=True)
            .limit(50)
            .execute()
        ).data or []
    except Exception as e:
        logger.error("Failed to load webhook activity", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to get status", error_code="database_error")

    since = datetime.now(timezone.utc) - timedelta(hours=24)
    recent = [
        log for log in logs
        if log.get("created_at")
        and parse_timestamp(log["created_at"]) > since
    ]
    successful = sum(
        1 for log in recent
        if is_success_status((log.get("metadata") or {}).get("webhook_status"))
    )

    return ApiResponse(
        success=True,
        data={
            "statistics": {
                "total_manual_triggers_24h": len(recent),
                "successful_triggers": successful,
                "failed_triggers": len(recent) - successful,
                "last_manual_trigger": logs[0].get("created_at") if logs else None,
            },
            "recent_logs": logs[:10],
        },
    )
