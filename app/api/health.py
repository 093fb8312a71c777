"""
Health check endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from supabase import Client

from app.core.config import settings
from app.core.exceptions import ContentStudioException
from app.core.logging import get_logger
from app.core.rate_limiting import UserRateLimiter, get_rate_limiter
from app.core.supabase import get_supabase
from app.schemas.common import ApiResponse, DetailedHealthCheck, HealthCheck

logger = get_logger(__name__)
health_router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@health_router.get("/", response_model=ApiResponse[HealthCheck])
async def health_check():
    """Basic health check endpoint."""
    return ApiResponse(
        success=True,
        data=HealthCheck(
            status="healthy",
            timestamp=_timestamp(),
            version="1.0.0",
            environment=settings.environment,
        )
    )


@health_router.get("/detailed", response_model=ApiResponse[DetailedHealthCheck])
async def detailed_health_check(
    supabase: Client = Depends(get_supabase),
    limiter: UserRateLimiter = Depends(get_rate_limiter),
):
    """Detailed health check with service statuses."""
    services = {}
    overall_status = "healthy"

    try:
        supabase.table("content_packages").select("id").limit(1).execute()
        services["database"] = {
            "status": "healthy",
            "message": "Supabase connection successful"
        }
    except Exception as e:
        services["database"] = {
            "status": "unhealthy",
            "message": f"Supabase connection failed: {str(e)}"
        }
        overall_status = "unhealthy"
        logger.error("Supabase health check failed", error=str(e))

    try:
        if not await limiter.healthy():
            raise ConnectionError("storage check failed")
        services["rate_limiter"] = {"status": "healthy", "backend": limiter.backend}
    except Exception as e:
        services["rate_limiter"] = {
            "status": "unhealthy",
            "backend": limiter.backend,
            "message": f"Rate limit storage unavailable: {str(e)}"
        }
        overall_status = "unhealthy"
        logger.error("Rate limiter health check failed", backend=limiter.backend, error=str(e))

    services["external_apis"] = {
        "status": "healthy",
        "message": "External API keys configured",
        "openai": bool(settings.openai_api_key),
        "shotstack": bool(
            settings.shotstack_api_key
            or settings.shotstack_sandbox_api_key
            or settings.shotstack_production_api_key
        ),
        "pixabay": bool(settings.pixabay_api_key),
        "make": bool(settings.make_webhook_url),
    }

    if overall_status == "unhealthy":
        raise ContentStudioException(
            "Service unhealthy",
            error_code="service_unavailable",
            status_code=503,
            details={"services": services},
        )

    return ApiResponse(
        success=True,
        data=DetailedHealthCheck(
            status=overall_status,
            timestamp=_timestamp(),
            version="1.0.0",
            environment=settings.environment,
            services=services,
        )
    )


@health_router.get("/readiness")
async def readiness_check(supabase: Client = Depends(get_supabase)):
    """Kubernetes readiness probe endpoint."""
    try:
        supabase.table("content_packages").select("id").limit(1).execute()
    except Exception as e:
        logger.error("Readiness check failed", error=str(e))
        raise ContentStudioException(
            "Critical services are not available",
            error_code="service_unavailable",
            status_code=503,
        )

    return {
        "status": "ready",
        "message": "Application is ready to serve requests"
    }


@health_router.get("/liveness")
async def liveness_check():
    """Kubernetes liveness probe endpoint."""
    return {
        "status": "alive",
        "message": "Application process is alive"
    }
