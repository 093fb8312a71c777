"""
Content package endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from pydantic import ValidationError
from supabase import Client

from app.api.deps import (
    enforce_rate_limit,
    get_content_generator,
    get_context_analyzer,
    get_current_user,
    get_package_builder,
)
from app.core.config import settings
from app.core.exceptions import ContentStudioException, NotFoundException, ValidationException
from app.core.logging import get_logger
from app.core.rate_limiting import RateLimitResult
from app.core.retry import retry_with_backoff
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse, Pagination
from app.schemas.content_package import (
    ContentPackage,
    ContentPackageList,
    ContentPackageRequest,
    ContentPackageResult,
    GenerationOptions,
    UserContext,
    UserContextSummary,
)
from app.schemas.user import AuthenticatedUser
from app.services.content_generator import ContentGenerator
from app.services.context_analyzer import ChatContextAnalyzer
from app.services.package_builder import ContentPackageBuilder

logger = get_logger(__name__)

router = APIRouter()

TABLE = "content_packages"
MAX_PAGE_SIZE = 50


async def parse_package_request(request: Request) -> ContentPackageRequest:
    """Read the raw body so malformed JSON and a missing topic get their own messages."""
    try:
        body = await request.json()
    except ValueError:
        raise ValidationException("Invalid JSON in request body")

    if not isinstance(body, dict) or not isinstance(body.get("topic"), str) or not body["topic"].strip():
        raise ValidationException("Topic is required")

    try:
        return ContentPackageRequest.model_validate(body)
    except ValidationError as e:
        raise ValidationException(
            "Invalid request parameters",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        )


def load_previous_package(supabase: Client, package_id: str, user_id: str) -> Optional[ContentPackage]:
    result = (
        supabase.table(TABLE)
        .select("*")
        .eq("id", package_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    return ContentPackage.from_record(result.data[0]) if result.data else None


@router.post("", response_model=ApiResponse[ContentPackageResult])
async def create_content_package(
    request: Request,
    rate_limit: Optional[RateLimitResult] = Depends(enforce_rate_limit),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
    analyzer: ChatContextAnalyzer = Depends(get_context_analyzer),
    generator: ContentGenerator = Depends(get_content_generator),
    builder: ContentPackageBuilder = Depends(get_package_builder),
):
    """
    Generate a content package personalised with the user's chat history.

    ``platform="content-package"`` uses the template builder; otherwise the
    package is generated by OpenAI. ``regenerate`` with ``previousPackageId``
    asks for a fresh variant of an earlier package.
    """
    body = await parse_package_request(request)
    retry_options = dict(
        max_retries=settings.retry_max_retries,
        base_delay=settings.retry_base_delay,
        max_jitter=settings.retry_max_jitter,
    )

    try:
        context: UserContext = await retry_with_backoff(
            lambda: analyzer.analyze_user_context(current_user.id), **retry_options
        )

        async def generate() -> ContentPackage:
            options = GenerationOptions(
                content_type=body.content_type,
                tone=body.tone,
                length=body.length,
            )

            if body.regenerate and body.previous_package_id:
                previous = load_previous_package(supabase, body.previous_package_id, current_user.id)
                if previous is not None:
                    if body.platform != "content-package":
                        options.platform = body.platform
                    return await generator.regenerate_content(previous, context, options)

            if body.platform == "content-package":
                return builder.build_content_package(context, body.topic, options)

            options.platform = body.platform
            options.prompt = body.topic
            return await generator.generate_content_package(context, options)

        package = await retry_with_backoff(generate, **retry_options)
        package.user_id = current_user.id

        supabase.table(TABLE).insert(
            package.to_record(body.topic, body.platform, body.content_type)
        ).execute()

    except Exception as e:
        logger.error(
            "Failed to generate content package",
            user_id=current_user.id,
            topic=body.topic,
            error=str(e),
        )
        raise ContentStudioException(
            "Failed to generate content package",
            error_code="generation_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"error": str(e)} if settings.is_development else None,
        )

    logger.info(
        "Content package created",
        user_id=current_user.id,
        package_id=package.id,
        platform=body.platform,
        remaining=rate_limit.remaining if rate_limit else None,
    )

    return ApiResponse(
        success=True,
        data=ContentPackageResult(
            package_id=package.id,
            content_package=package,
            user_context=UserContextSummary(
                topics=context.topics[:5],
                user_style=context.user_style,
                message_count=context.message_count,
                confidence=package.metadata.confidence,
            ),
        ),
    )


@router.get("", response_model=ApiResponse[ContentPackageList])
async def list_content_packages(
    limit: Optional[int] = Query(None, ge=1, description="Page size (max 50)"),
    offset: Optional[int] = Query(None, ge=0, description="Rows to skip"),
    page: Optional[int] = Query(None, ge=1, description="1-based page, alternative to offset"),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
    platform: Optional[str] = Query(None),
    content_type: Optional[str] = Query(None, alias="contentType"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """List the user's content packages, newest first."""
    limit = min(limit or page_size or 10, MAX_PAGE_SIZE)
    if offset is None:
        offset = (page - 1) * limit if page else 0

    try:
        query = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_id", current_user.id)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
        )
        if platform:
            query = query.eq("platform", platform)
        if content_type:
            query = query.eq("content_type", content_type)

        packages = query.execute().data or []

    except Exception as e:
        logger.error("Failed to retrieve content packages", user_id=current_user.id, error=str(e))
        raise ContentStudioException(
            "Failed to retrieve content packages",
            error_code="database_error",
            details={"error": str(e)} if settings.is_development else None,
        )

    return ApiResponse(
        success=True,
        data=ContentPackageList(
            packages=packages,
            pagination=Pagination(limit=limit, offset=offset, has_more=len(packages) == limit),
        ),
    )


@router.get("/{package_id}", response_model=ApiResponse[Dict[str, Any]])
async def get_content_package(
    package_id: str = Path(..., description="Content package ID"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Get one of the user's content packages."""
    result = (
        supabase.table(TABLE)
        .select("*")
        .eq("id", package_id)
        .eq("user_id", current_user.id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundException("Content package not found")

    return ApiResponse(success=True, data=result.data[0])
