"""
Shotstack video rendering client.

Talks to the Shotstack Edit API over httpx. Edits are validated locally
before submission so obviously broken timelines never cost a render.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx
from fastapi import status

from app.core.config import settings
from app.core.exceptions import ExternalServiceException, ValidationException
from app.core.logging import get_logger
from app.core.retry import retry_with_backoff
from app.schemas.shotstack import Edit, RenderStatus

logger = get_logger(__name__)

BASE_URLS = {
    "sandbox": "https://api.shotstack.io/stage",
    "production": "https://api.shotstack.io/v1",
}

PLATFORM_ASPECT_RATIOS = {
    "instagram": "9:16",
    "tiktok": "9:16",
    "youtube": "16:9",
    "facebook": "1:1",
    "twitter": "16:9",
    "linkedin": "16:9",
}

DEFAULT_CLIP_SECONDS = 5.0
TITLE_SECONDS = 2.0


class ShotstackError(ExternalServiceException):
    """A Shotstack request failed. ``upstream_status`` is Shotstack's HTTP status, if any."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        upstream_status: Optional[int] = None,
    ):
        self.upstream_status = upstream_status
        details = {"upstream_status": upstream_status} if upstream_status else None
        super().__init__(message, service="shotstack", status_code=status_code, details=details)


class ShotstackConfigError(ShotstackError):
    """Shotstack is not configured for the selected environment."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


@dataclass
class ShotstackConfig:
    api_key: str
    environment: str
    owner_id: Optional[str] = None
    webhook_url: Optional[str] = None
    max_retries: int = 3
    retry_delay: float = 2.0


def get_shotstack_config() -> ShotstackConfig:
    """
    Resolve the API key for ``SHOTSTACK_ENVIRONMENT``.

    The environment-specific key wins over the generic ``SHOTSTACK_API_KEY``.
    A missing key, or one set to ``disabled``, raises ``ShotstackConfigError``.
    """
    environment = settings.shotstack_environment
    if environment == "production":
        api_key = settings.shotstack_production_api_key or settings.shotstack_api_key
        owner_id = settings.shotstack_production_owner_id
    else:
        api_key = settings.shotstack_sandbox_api_key or settings.shotstack_api_key
        owner_id = settings.shotstack_sandbox_owner_id

    if not api_key or api_key == "disabled":
        state = "disabled" if api_key else "missing"
        raise ShotstackConfigError(
            f"Shotstack API key is {state} for {environment} environment"
        )

    return ShotstackConfig(
        api_key=api_key,
        environment=environment,
        owner_id=owner_id,
        webhook_url=settings.shotstack_webhook_url,
        max_retries=settings.shotstack_max_retries,
        retry_delay=settings.shotstack_retry_delay,
    )


def is_retryable(exc: Exception) -> bool:
    """Retry transport failures, rate limiting and Shotstack 5xx responses."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, ShotstackError) and exc.upstream_status is not None:
        return exc.upstream_status >= 500 or exc.upstream_status == 429
    return False


def aspect_ratio_for_platform(platform: Optional[str]) -> str:
    return PLATFORM_ASPECT_RATIOS.get((platform or "").lower(), "16:9")


def validate_edit(edit: Dict[str, Any]) -> Edit:
    """
    Check an edit before it is submitted.

    Empty tracks are dropped first; the edit is rejected when nothing is left
    or when any clip lacks an asset type, starts before 0 or has no length.

    Raises:
        ValidationException: describing the first problem found
    """
    if not isinstance(edit, dict) or not edit.get("timeline"):
        raise ValidationException("Edit must have a timeline")

    output = edit.get("output")
    if not isinstance(output, dict) or not output.get("format"):
        raise ValidationException("Edit must specify output format")

    timeline = dict(edit["timeline"])
    tracks = [
        track for track in timeline.get("tracks") or []
        if isinstance(track, dict) and isinstance(track.get("clips"), list) and track["clips"]
    ]
    if not tracks:
        raise ValidationException(
            "Edit must have at least one track with clips in the timeline. "
            "All tracks were empty or invalid."
        )

    for i, track in enumerate(tracks, start=1):
        for j, clip in enumerate(track["clips"], start=1):
            asset = clip.get("asset") if isinstance(clip, dict) else None
            if not isinstance(asset, dict) or not asset.get("type"):
                raise ValidationException(f"Track {i}, Clip {j} must have a valid asset with type")
            start = clip.get("start")
            if isinstance(start, bool) or not isinstance(start, (int, float)) or start < 0:
                raise ValidationException(
                    f"Track {i}, Clip {j} must have a valid start time (number >= 0)"
                )
            length = clip.get("length")
            if isinstance(length, bool) or not isinstance(length, (int, float)) or length <= 0:
                raise ValidationException(
                    f"Track {i}, Clip {j} must have a valid length (number > 0)"
                )

    timeline["tracks"] = tracks
    try:
        return Edit.model_validate({**edit, "timeline": timeline})
    except ValueError as e:
        raise ValidationException("Invalid edit configuration", details={"error": str(e)}) from e


def estimate_duration(
    video_urls: List[str],
    durations: Optional[List[float]] = None,
    title: Optional[str] = None,
) -> float:
    clip_lengths = durations or [DEFAULT_CLIP_SECONDS] * len(video_urls)
    return sum(clip_lengths) + (TITLE_SECONDS if title else 0)


def build_merge_edit(
    video_urls: List[str],
    durations: Optional[List[float]] = None,
    title: Optional[str] = None,
    output_format: str = "mp4",
    resolution: str = "full-hd",
    aspect_ratio: Optional[str] = None,
    transition: str = "fade",
) -> Dict[str, Any]:
    """Edit that plays ``video_urls`` back to back, after an optional title card."""
    if not video_urls:
        raise ValidationException("At least one video URL is required")
    if durations is not None and len(durations) != len(video_urls):
        raise ValidationException("durations must match video_urls")

    clip_lengths = durations or [DEFAULT_CLIP_SECONDS] * len(video_urls)
    clips: List[Dict[str, Any]] = []
    start = 0.0

    if title:
        clips.append({
            "asset": {
                "type": "title",
                "text": title,
                "style": "blockbuster",
                "color": "#ffffff",
                "size": "x-large",
                "position": "center",
            },
            "start": 0,
            "length": TITLE_SECONDS,
        })
        start = TITLE_SECONDS

    for index, (url, length) in enumerate(zip(video_urls, clip_lengths)):
        clip: Dict[str, Any] = {
            "asset": {"type": "video", "src": url},
            "start": start,
            "length": length,
            "fit": "cover",
        }
        if index > 0 or title:
            clip["transition"] = {"in": transition, "out": transition}
        clips.append(clip)
        start += length

    output: Dict[str, Any] = {"format": output_format, "resolution": resolution}
    if aspect_ratio:
        output["aspectRatio"] = aspect_ratio

    return {
        "timeline": {"tracks": [{"clips": clips}], "background": "#000000"},
        "output": output,
    }


def _error_message(response: httpx.Response) -> str:
    message = f"Shotstack API error: {response.status_code} {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return f"{message} - {response.text[:200]}"
    if isinstance(body, dict) and body.get("message"):
        message += f" - {body['message']}"
    return message


class ShotstackService:
    """Async client for the Shotstack Edit API."""

    def __init__(
        self,
        api_key: str,
        environment: str = "sandbox",
        webhook_url: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.environment = environment
        self.base_url = BASE_URLS.get(environment, BASE_URLS["sandbox"])
        self.webhook_url = webhook_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "ShotstackService":
        config = get_shotstack_config()
        return cls(
            api_key=config.api_key,
            environment=config.environment,
            webhook_url=config.webhook_url,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        async def attempt() -> Dict[str, Any]:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"x-api-key": self.api_key, "Accept": "application/json"},
            ) as client:
                response = await client.request(method, path, json=json)
            if response.is_error:
                raise ShotstackError(_error_message(response), upstream_status=response.status_code)
            return response.json()

        try:
            return await retry_with_backoff(
                attempt,
                max_retries=self.max_retries,
                base_delay=self.retry_delay,
                max_jitter=settings.retry_max_jitter,
                retry_if=is_retryable,
            )
        except httpx.TransportError as e:
            raise ShotstackError(f"Shotstack request failed: {e}") from e

    async def render(self, edit: Union[Edit, Dict[str, Any]]) -> str:
        """Submit an edit and return the Shotstack render id."""
        validated = edit if isinstance(edit, Edit) else validate_edit(edit)
        payload = validated.to_payload()
        if self.webhook_url and "callback" not in payload:
            payload["callback"] = self.webhook_url

        data = await self._request("POST", "/render", json=payload)
        job_id = (data.get("response") or {}).get("id")
        if not job_id:
            raise ShotstackError("Shotstack did not return a render id")

        logger.info("Shotstack render submitted", job_id=job_id, environment=self.environment)
        return job_id

    async def get_render_status(self, job_id: str) -> RenderStatus:
        if not job_id:
            raise ValidationException("Valid render ID is required")

        data = await self._request("GET", f"/render/{job_id}")
        response = data.get("response")
        if not isinstance(response, dict):
            raise ShotstackError("Invalid response from Shotstack")
        return RenderStatus.model_validate(response)

    async def wait_for_render(
        self,
        job_id: str,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> RenderStatus:
        """Poll until the render is done. Failed renders and timeouts raise ``ShotstackError``."""
        poll_interval = poll_interval if poll_interval is not None else settings.shotstack_poll_interval
        timeout = timeout if timeout is not None else settings.shotstack_poll_timeout
        deadline = time.monotonic() + timeout

        while True:
            render_status = await self.get_render_status(job_id)
            logger.debug("Shotstack render status", job_id=job_id, status=render_status.status)

            if render_status.status == "done":
                return render_status
            if render_status.status == "failed":
                raise ShotstackError(f"Render failed: {render_status.error or 'Unknown error'}")
            if time.monotonic() + poll_interval > deadline:
                raise ShotstackError(
                    f"Render timeout after {timeout:g}s",
                    status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                )
            await asyncio.sleep(poll_interval)
