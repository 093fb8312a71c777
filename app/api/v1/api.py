"""
API v1 router configuration.
"""
from fastapi import APIRouter

# Import endpoint routers
from .endpoints import ai_feedback, content_package, media_files, pixabay, posts, shotstack, webhooks

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(content_package.router, prefix="/content-package", tags=["content-package"])
api_router.include_router(shotstack.router, prefix="/shotstack", tags=["video-rendering"])
api_router.include_router(pixabay.router, prefix="/pixabay", tags=["media-search"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(ai_feedback.router, prefix="/ai-feedback", tags=["feedback"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(media_files.router, prefix="/media-files", tags=["media-library"])


@api_router.get("/")
async def api_info():
    """API v1 information endpoint."""
    return {
        "message": "Content Studio API v1",
        "version": "1.0.0",
        "endpoints": {
            "content_package": "/v1/content-package",
            "shotstack": "/v1/shotstack",
            "pixabay": "/v1/pixabay",
            "webhooks": "/v1/webhooks",
            "ai_feedback": "/v1/ai-feedback",
            "posts": "/v1/posts",
            "media_files": "/v1/media-files",
        }
    }
