"""
Content Studio API application.

``create_app()`` wires settings, middleware, error handlers and routers;
``app`` is the instance uvicorn serves.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.health import health_router
from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import (
    ContentStudioException,
    content_studio_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.logging import configure_logging, get_logger
from app.core.middleware import LoggingMiddleware
from app.core.rate_limiting import close_rate_limiter, init_rate_limiter

API_VERSION = "1.0.0"
RATE_LIMIT_HEADERS = ["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"]

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Content Studio API starting", environment=settings.environment)
    await init_rate_limiter()
    try:
        yield
    finally:
        await close_rate_limiter()
        logger.info("Content Studio API stopped")


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error in the ``{"success": false, ...}`` envelope."""
    app.add_exception_handler(ContentStudioException, content_studio_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def create_app() -> FastAPI:
    application = FastAPI(
        title="Content Studio API",
        description="Content package generation, video rendering and media search for creators",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Browsers only see the rate limit headers when they are exposed.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=RATE_LIMIT_HEADERS,
    )
    application.add_middleware(LoggingMiddleware)

    register_exception_handlers(application)

    application.include_router(health_router, prefix="/health", tags=["health"])
    application.include_router(api_router, prefix="/v1")

    @application.get("/")
    async def root():
        return {
            "message": "Content Studio API",
            "version": API_VERSION,
            "docs": "/docs" if settings.debug else "Documentation not available in production",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
