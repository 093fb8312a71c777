"""
Make.com automation webhook client.

Make.com scenarios fetch post insights from the social platforms; this service
hands them one payload per (post, connected account) pair and records every
trigger in ``ai_context_logs``.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import status
from supabase import Client

from app.core.config import settings
from app.core.exceptions import ExternalServiceException
from app.core.logging import get_logger
from app.schemas.webhook import ManualTriggerResponse, TriggerResult

logger = get_logger(__name__)


def is_success_status(status_code: Any) -> bool:
    return isinstance(status_code, int) and 200 <= status_code < 300


def build_insights_payload(user_id: str, post: Dict[str, Any], account: Dict[str, Any]) -> Dict[str, Any]:
    """Payload the Make.com scenario expects for a manual insights fetch."""
    post_metadata = post.get("metadata") or {}
    platform_metadata = account.get("platform_metadata") or {}
    return {
        "trigger_type": "manual",
        "user_id": user_id,
        "post_id": post["id"],
        "post_data": {
            "title": post.get("title"),
            "content": post.get("content"),
            "platforms": post.get("platforms") or [],
            "published_at": post.get("published_at"),
            "external_id": post_metadata.get("external_id"),
            "media_urls": post.get("media_urls") or [],
        },
        "platform_data": {
            "platform": account.get("platform"),
            "username": account.get("username"),
            "account_id": platform_metadata.get("account_id") or account.get("external_account_id"),
        },
        "fetch_insights": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class MakeWebhookService:
    """Posts JSON payloads to a Make.com custom webhook."""

    def __init__(self, webhook_url: str, delay: float = 0.5, timeout: float = 30.0):
        self.webhook_url = webhook_url
        self.delay = delay
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "MakeWebhookService":
        if not settings.make_webhook_url:
            raise ExternalServiceException(
                "Make.com webhook URL not configured",
                service="make",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return cls(settings.make_webhook_url, delay=settings.make_webhook_delay)

    async def send(self, payload: Dict[str, Any]) -> Tuple[int, str]:
        """Deliver one payload; returns Make.com's status code and body."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.webhook_url, json=payload)
        return response.status_code, response.text

    async def trigger_post_insights(
        self,
        supabase: Client,
        user_id: str,
        posts: List[Dict[str, Any]],
        accounts: List[Dict[str, Any]],
        platform: Optional[str] = None,
    ) -> ManualTriggerResponse:
        """
        Trigger an insights fetch for every post on every matching account.

        A post matches an account when the account's platform is ``platform``
        or, without one, any of the post's own platforms. Failures are
        reported per post rather than raised.
        """
        results: List[TriggerResult] = []

        for post in posts:
            platforms = [platform] if platform else (post.get("platforms") or [])
            matching = [account for account in accounts if account.get("platform") in platforms]

            try:
                for account in matching:
                    status_code, body = await self.send(build_insights_payload(user_id, post, account))
                    ok = is_success_status(status_code)
                    results.append(TriggerResult(
                        post_id=post["id"],
                        platform=account["platform"],
                        status="triggered" if ok else "failed",
                        response=body,
                    ))

                    supabase.table("ai_context_logs").insert({
                        "user_id": user_id,
                        "source_type": "manual_webhook",
                        "source_id": post["id"],
                        "context_summary": (
                            f"Manual Make.com webhook triggered for {account['platform']} post insights"
                        ),
                        "ai_response": body,
                        "model_used": "make_webhook_manual",
                        "metadata": {
                            "trigger_type": "manual",
                            "platform": account["platform"],
                            "webhook_status": status_code,
                            "post_title": post.get("title"),
                        },
                    }).execute()

                    if self.delay:
                        await asyncio.sleep(self.delay)
            except Exception as e:
                logger.error("Webhook trigger failed", post_id=post["id"], error=str(e))
                results.append(TriggerResult(post_id=post["id"], status="error", error=str(e)))

        success_count = sum(1 for result in results if result.status == "triggered")
        logger.info(
            "Manual webhook triggers sent",
            user_id=user_id,
            post_count=len(posts),
            success_count=success_count,
            failure_count=len(results) - success_count,
        )
        return ManualTriggerResponse(
            results=results,
            success_count=success_count,
            failure_count=len(results) - success_count,
        )
