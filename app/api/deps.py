"""
Shared FastAPI dependencies.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from app.core.config import settings
from app.core.exceptions import AuthenticationException, RateLimitException
from app.core.logging import get_logger
from app.core.rate_limiting import RateLimitResult, UserRateLimiter, get_rate_limiter
from app.core.supabase import get_supabase
from app.schemas.user import AuthenticatedUser
from app.services.content_generator import ContentGenerator
from app.services.context_analyzer import ChatContextAnalyzer
from app.services.make_webhook import MakeWebhookService
from app.services.package_builder import ContentPackageBuilder
from app.services.pixabay_service import PixabayService
from app.services.shotstack_service import ShotstackService

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    supabase: Client = Depends(get_supabase),
) -> AuthenticatedUser:
    """Resolve the Supabase user behind the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException()

    try:
        response = supabase.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.warning("Token verification failed", error=str(e))
        raise AuthenticationException() from e

    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        raise AuthenticationException()

    return AuthenticatedUser(id=str(user.id), email=getattr(user, "email", None))


async def enforce_rate_limit(
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    limiter: UserRateLimiter = Depends(get_rate_limiter),
) -> Optional[RateLimitResult]:
    """Count the request against the user's window and expose the X-RateLimit headers."""
    if not settings.rate_limit_enabled:
        return None

    result = await limiter.check(current_user.id)
    if not result.allowed:
        logger.warning("Rate limit exceeded", user_id=current_user.id, reset_time=result.reset_time)
        raise RateLimitException(reset_time=result.reset_time, headers=result.headers())

    response.headers.update(result.headers())
    return result


def get_context_analyzer(supabase: Client = Depends(get_supabase)) -> ChatContextAnalyzer:
    return ChatContextAnalyzer(supabase)


@lru_cache()
def get_content_generator() -> ContentGenerator:
    return ContentGenerator()


def get_package_builder() -> ContentPackageBuilder:
    return ContentPackageBuilder()


def get_shotstack_service() -> ShotstackService:
    return ShotstackService.from_settings()


def get_pixabay_service() -> PixabayService:
    return PixabayService.from_settings()


def get_make_webhook_service() -> MakeWebhookService:
    return MakeWebhookService.from_settings()
