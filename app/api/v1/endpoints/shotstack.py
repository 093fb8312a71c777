"""
Shotstack video render endpoints.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Path
from supabase import Client

from app.api.deps import get_current_user, get_shotstack_service
from app.core.exceptions import ContentStudioException, ValidationException
from app.core.logging import get_logger
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse
from app.schemas.shotstack import RenderJob, RenderRequest, RenderStatus, ShotstackWebhookPayload
from app.schemas.user import AuthenticatedUser
from app.services.shotstack_service import (
    ShotstackService,
    aspect_ratio_for_platform,
    build_merge_edit,
    estimate_duration,
    validate_edit,
)

logger = get_logger(__name__)

router = APIRouter()

JOBS_TABLE = "shotstack_jobs"


@router.post("/render", response_model=ApiResponse[RenderJob])
async def submit_render(
    request: RenderRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
    shotstack: ShotstackService = Depends(get_shotstack_service),
):
    """
    Submit a render.

    Accepts either a complete Shotstack ``edit`` or a list of ``video_urls``
    to merge behind an optional title card.
    """
    if request.edit:
        edit = validate_edit(request.edit)
        edit_type = "custom"
        duration = sum(
            clip.length for track in edit.timeline.tracks for clip in track.clips
        )
    elif request.video_urls:
        edit = validate_edit(build_merge_edit(
            request.video_urls,
            title=request.title,
            output_format=request.output_format,
            resolution=request.output_resolution,
            aspect_ratio=aspect_ratio_for_platform(request.platform) if request.platform else None,
        ))
        edit_type = "merge"
        duration = estimate_duration(request.video_urls, title=request.title)
    else:
        raise ValidationException("Either video_urls or an edit configuration must be provided")

    job_id = await shotstack.render(edit)

    metadata: Dict[str, Any] = {
        "project_name": request.project_name,
        "estimated_duration": duration,
        "edit_type": edit_type,
    }
    if request.video_urls:
        metadata["total_videos"] = len(request.video_urls)

    try:
        result = supabase.table(JOBS_TABLE).insert({
            "user_id": current_user.id,
            "shotstack_job_id": job_id,
            "status": "submitted",
            "input_video_urls": request.video_urls or [],
            "output_format": edit.output.format,
            "output_resolution": edit.output.resolution,
            "metadata": metadata,
        }).execute()
    except Exception as e:
        logger.error("Failed to save render job", job_id=job_id, error=str(e))
        raise ContentStudioException("Failed to save job to database", error_code="database_error")

    db_job_id = result.data[0].get("id") if result.data else None
    logger.info("Render job created", user_id=current_user.id, job_id=job_id, edit_type=edit_type)

    return ApiResponse(
        success=True,
        data=RenderJob(
            job_id=job_id,
            db_job_id=str(db_job_id) if db_job_id else None,
            estimated_duration=duration,
            project_name=request.project_name,
        ),
        message="Video rendering job submitted successfully",
    )


@router.get("/render/{job_id}", response_model=ApiResponse[RenderStatus])
async def get_render_status(
    job_id: str = Path(..., min_length=1, description="Shotstack render ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
    shotstack: ShotstackService = Depends(get_shotstack_service),
):
    """Fetch a render's status from Shotstack and mirror it onto the job row."""
    render_status = await shotstack.get_render_status(job_id)

    update: Dict[str, Any] = {
        "status": render_status.status,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if render_status.url:
        update["video_url"] = render_status.url
    if render_status.error:
        update["error_message"] = render_status.error

    try:
        (
            supabase.table(JOBS_TABLE)
            .update(update)
            .eq("shotstack_job_id", job_id)
            .eq("user_id", current_user.id)
            .execute()
        )
    except Exception as e:
        # The caller still gets Shotstack's answer.
        logger.warning("Failed to update render job", job_id=job_id, error=str(e))

    return ApiResponse(success=True, data=render_status)


@router.post("/webhook", response_model=ApiResponse[dict])
async def shotstack_webhook(
    payload: ShotstackWebhookPayload,
    supabase: Client = Depends(get_supabase),
):
    """Callback Shotstack posts when a render changes state."""
    logger.info("Shotstack webhook received", job_id=payload.id, status=payload.status)

    update: Dict[str, Any] = {
        "status": payload.status,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if payload.url:
        update["video_url"] = payload.url
    if payload.error:
        update["error_message"] = payload.error

    try:
        if payload.duration or payload.render_time:
            existing = (
                supabase.table(JOBS_TABLE)
                .select("metadata")
                .eq("shotstack_job_id", payload.id)
                .limit(1)
                .execute()
            )
            metadata = (existing.data[0].get("metadata") if existing.data else None) or {}
            update["metadata"] = {
                **metadata,
                "duration": payload.duration,
                "render_time": payload.render_time,
                "webhook_received": datetime.now(timezone.utc).isoformat(),
            }

        supabase.table(JOBS_TABLE).update(update).eq("shotstack_job_id", payload.id).execute()
    except Exception as e:
        logger.error("Failed to process Shotstack webhook", job_id=payload.id, error=str(e))
        raise ContentStudioException("Webhook processing failed", error_code="database_error")

    if payload.status == "failed":
        logger.warning("Render failed", job_id=payload.id, error=payload.error)

    return ApiResponse(success=True, data={}, message="Webhook processed successfully")
