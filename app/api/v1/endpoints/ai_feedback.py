"""
AI feedback endpoints.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from supabase import Client

from app.api.deps import get_current_user
from app.core.exceptions import ContentStudioException
from app.core.logging import get_logger
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse
from app.schemas.feedback import AIFeedbackRequest, AIFeedbackResponse
from app.schemas.user import AuthenticatedUser
from app.services.feedback_analyzer import summarize_feedback

logger = get_logger(__name__)

router = APIRouter()

INSIGHT_WINDOW_DAYS = 30
SUGGESTION_ACTIONS = ("caption", "idea")


def recent_feedback(
    supabase: Client,
    user_id: str,
    days: int,
    action_type: Optional[str] = None,
    limit: int = 50,
):
    since = datetime.now(timezone.utc) - timedelta(days=days)
    query = (
        supabase.table("ai_feedback")
        .select("*")
        .eq("user_id", user_id)
        .gte("created_at", since.isoformat())
        .order("created_at", desc=True)
    )
    if action_type:
        query = query.eq("action_type", action_type)
    return query.limit(limit).execute().data or []


@router.post("", response_model=ApiResponse[AIFeedbackResponse])
async def submit_feedback(
    feedback: AIFeedbackRequest,
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Record feedback on an AI suggestion and return what we have learned so far."""
    try:
        result = supabase.table("ai_feedback").insert({
            "user_id": current_user.id,
            **feedback.model_dump(),
            "feedback_metadata": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "user_agent": request.headers.get("user-agent"),
            },
        }).execute()
    except Exception as e:
        logger.error("Failed to save feedback", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to save feedback", error_code="database_error")

    feedback_id = str(result.data[0]["id"]) if result.data else ""

    if feedback.action_type in SUGGESTION_ACTIONS:
        try:
            (
                supabase.table("ai_suggestions")
                .update({
                    "user_feedback": feedback.improvement_notes,
                    "rating": feedback.rating,
                    "status": "accepted" if feedback.helpful else "rejected",
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", feedback.action_id)
                .eq("user_id", current_user.id)
                .execute()
            )
        except Exception as e:
            logger.warning("Failed to update suggestion", action_id=feedback.action_id, error=str(e))

    try:
        insights = summarize_feedback(
            recent_feedback(supabase, current_user.id, INSIGHT_WINDOW_DAYS, feedback.action_type)
        )
    except Exception as e:
        logger.error("Failed to analyze feedback", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to process feedback", error_code="database_error")

    try:
        supabase.table("ai_context_logs").insert({
            "user_id": current_user.id,
            "source_type": "feedback_collection",
            "source_id": feedback.action_id,
            "context_summary": f"User provided {feedback.feedback_type} feedback for {feedback.action_type}",
            "ai_response": insights.model_dump_json(),
            "model_used": "feedback_analyzer",
            "metadata": {
                "action_type": feedback.action_type,
                "feedback_type": feedback.feedback_type,
                "rating": feedback.rating,
                "helpful": feedback.helpful,
                "patterns_detected": len(insights.common_improvements),
            },
        }).execute()
    except Exception as e:
        logger.warning("Failed to log feedback context", user_id=current_user.id, error=str(e))

    logger.info(
        "AI feedback recorded",
        user_id=current_user.id,
        action_type=feedback.action_type,
        helpful=feedback.helpful,
    )

    return ApiResponse(
        success=True,
        data=AIFeedbackResponse(
            feedback_id=feedback_id,
            message="Thank you for your feedback! This helps me learn your preferences.",
            insights=insights,
        ),
    )


@router.get("", response_model=ApiResponse[dict])
async def feedback_analytics(
    action_type: Optional[str] = Query(None),
    timeframe: int = Query(INSIGHT_WINDOW_DAYS, ge=1, le=365, description="Days to look back"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Feedback statistics for the last ``timeframe`` days."""
    try:
        feedback = recent_feedback(supabase, current_user.id, timeframe, action_type)
    except Exception as e:
        logger.error("Failed to load feedback", user_id=current_user.id, error=str(e))
        raise ContentStudioException("Failed to get feedback analytics", error_code="database_error")

    return ApiResponse(
        success=True,
        data={
            "recent_feedback": feedback,
            "statistics": summarize_feedback(feedback).model_dump(),
        },
    )
