"""
Pydantic schemas package.
"""
from .user import AuthenticatedUser
from .content_package import (
    UserContext,
    UserStyle,
    ContentPackage,
    ContentPackageRequest,
    ContentPackageResult,
    ContentPackageList,
    GenerationOptions,
)
from .shotstack import Edit, RenderRequest, RenderStatus, RenderJob, ShotstackWebhookPayload
from .media import MediaSearchParams, MediaSearchResult, MediaSearchResponse
from .webhook import ManualTriggerRequest, ManualTriggerResponse, TriggerResult
from .feedback import AIFeedbackRequest, AIFeedbackResponse, FeedbackInsights
from .post import PostCreate, PostUpdate, PostStatusUpdate
from .media_file import MediaFileCreate, MediaFileUpdate, MediaFileStatusUpdate
from .common import ApiResponse, Pagination, HealthCheck, DetailedHealthCheck

__all__ = [
    # User
    "AuthenticatedUser",

    # Content packages
    "UserContext",
    "UserStyle",
    "ContentPackage",
    "ContentPackageRequest",
    "ContentPackageResult",
    "ContentPackageList",
    "GenerationOptions",

    # Shotstack
    "Edit",
    "RenderRequest",
    "RenderStatus",
    "RenderJob",
    "ShotstackWebhookPayload",

    # Media
    "MediaSearchParams",
    "MediaSearchResult",
    "MediaSearchResponse",

    # Webhooks
    "ManualTriggerRequest",
    "ManualTriggerResponse",
    "TriggerResult",

    # Feedback
    "AIFeedbackRequest",
    "AIFeedbackResponse",
    "FeedbackInsights",

    # Posts
    "PostCreate",
    "PostUpdate",
    "PostStatusUpdate",

    # Media library
    "MediaFileCreate",
    "MediaFileUpdate",
    "MediaFileStatusUpdate",

    # Common
    "ApiResponse",
    "Pagination",
    "HealthCheck",
    "DetailedHealthCheck",
]
