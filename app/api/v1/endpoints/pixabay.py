"""
Stock media search endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_pixabay_service
from app.core.logging import get_logger
from app.schemas.common import ApiResponse
from app.schemas.media import MediaOrder, MediaSearchParams, MediaSearchResponse, MediaSearchType
from app.schemas.user import AuthenticatedUser
from app.services.pixabay_service import PixabayService

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=ApiResponse[MediaSearchResponse], response_model_exclude_none=True)
async def search_media(
    q: str = Query("", max_length=100, description="Search terms"),
    media_type: MediaSearchType = Query("all", alias="type", description="images, videos, audio or all"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=3, le=200),
    order: MediaOrder = Query("popular"),
    category: Optional[str] = Query(None),
    min_width: Optional[int] = Query(None, ge=0),
    min_height: Optional[int] = Query(None, ge=0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    pixabay: PixabayService = Depends(get_pixabay_service),
):
    """Search Pixabay for images, videos and audio."""
    options = MediaSearchParams(
        page=page,
        per_page=per_page,
        order=order,
        category=category,
        min_width=min_width,
        min_height=min_height,
    )
    logger.info("Pixabay search", user_id=current_user.id, query=q, media_type=media_type)

    results = await pixabay.search_media(q, media_type=media_type, options=options)
    return ApiResponse(success=True, data=results)
