"""
Pixabay stock media search.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from fastapi import status

from app.core.config import settings
from app.core.exceptions import ExternalServiceException
from app.core.logging import get_logger
from app.schemas.media import MediaSearchParams, MediaSearchResponse, MediaSearchResult

logger = get_logger(__name__)


class PixabayError(ExternalServiceException):
    """Pixabay rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(message, service="pixabay", status_code=status_code)


class PixabayService:
    """Thin async wrapper over the Pixabay image, video and audio search APIs."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://pixabay.com/api/",
        language: str = "en",
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.language = language
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "PixabayService":
        if not settings.pixabay_api_key:
            raise PixabayError(
                "Pixabay API key not configured",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return cls(api_key=settings.pixabay_api_key, base_url=settings.pixabay_base_url)

    def _params(self, query: str, options: MediaSearchParams, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "key": self.api_key,
            "q": query,
            "order": options.order,
            "per_page": options.per_page,
            "page": options.page,
            "lang": self.language,
            "safesearch": "true" if options.safe_search else "false",
            **extra,
        }
        if options.category:
            params["category"] = options.category
        if options.min_width:
            params["min_width"] = options.min_width
        if options.min_height:
            params["min_height"] = options.min_height
        return params

    async def _search(self, path: str, params: Dict[str, Any]) -> MediaSearchResult:
        url = self.base_url + path
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise PixabayError(f"Pixabay request failed: {e}") from e

        if response.is_error:
            logger.warning(
                "Pixabay API error",
                status_code=response.status_code,
                path=path or "/",
                body=response.text[:200],
            )
            raise PixabayError(f"Pixabay API error: {response.status_code} {response.reason_phrase}")

        return MediaSearchResult.model_validate(response.json())

    async def search_images(
        self,
        query: str,
        options: Optional[MediaSearchParams] = None,
        image_type: str = "all",
    ) -> MediaSearchResult:
        options = options or MediaSearchParams()
        return await self._search("", self._params(query, options, image_type=image_type))

    async def search_videos(
        self,
        query: str,
        options: Optional[MediaSearchParams] = None,
        video_type: str = "all",
    ) -> MediaSearchResult:
        options = options or MediaSearchParams()
        return await self._search("videos/", self._params(query, options, video_type=video_type))

    async def search_audio(
        self,
        query: str,
        options: Optional[MediaSearchParams] = None,
        audio_type: str = "all",
    ) -> MediaSearchResult:
        # Audio search has no size filters.
        options = (options or MediaSearchParams()).model_copy(update={"min_width": None, "min_height": None})
        return await self._search("audio/", self._params(query, options, audio_type=audio_type))

    async def search_media(
        self,
        query: str,
        media_type: str = "all",
        options: Optional[MediaSearchParams] = None,
    ) -> MediaSearchResponse:
        """Run the searches ``media_type`` asks for concurrently."""
        searches = {
            "images": self.search_images,
            "videos": self.search_videos,
            "audio": self.search_audio,
        }
        selected = list(searches) if media_type == "all" else [media_type]

        results = await asyncio.gather(*(searches[kind](query, options) for kind in selected))
        logger.info(
            "Pixabay search completed",
            query=query,
            media_type=media_type,
            hits={kind: len(result.hits) for kind, result in zip(selected, results)},
        )
        return MediaSearchResponse(**dict(zip(selected, results)))

    async def get_image_by_id(self, image_id: int) -> Optional[Dict[str, Any]]:
        result = await self._search("", {"key": self.api_key, "id": image_id})
        return result.hits[0] if result.hits else None

    async def get_video_by_id(self, video_id: int) -> Optional[Dict[str, Any]]:
        result = await self._search("videos/", {"key": self.api_key, "id": video_id})
        return result.hits[0] if result.hits else None
