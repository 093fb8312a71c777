"""
Content package and user context schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .common import Pagination


SocialPlatform = Literal["instagram", "facebook", "twitter", "linkedin", "tiktok", "youtube", "pinterest"]
RequestPlatform = Literal[
    "instagram", "facebook", "twitter", "linkedin", "tiktok", "youtube", "pinterest", "content-package"
]
ContentType = Literal["video", "image", "text", "reel", "story", "carousel"]
Tone = Literal["professional", "casual", "friendly", "authoritative"]
Length = Literal["short", "medium", "long"]


# User context

class UserStyle(BaseModel):
    """Communication style detected from a user's chat history."""
    tone: Literal["professional", "casual", "friendly", "authoritative", "mixed"] = "mixed"
    vocabulary: Literal["simple", "technical", "mixed"] = "mixed"
    length: Literal["concise", "detailed", "varied"] = "varied"
    formality: Literal["formal", "informal", "mixed"] = "mixed"


class CommunicationPatterns(BaseModel):
    question_types: List[str] = Field(default_factory=list)
    response_preferences: List[str] = Field(default_factory=list)
    engagement_style: str = "neutral"
    topic_transitions: List[str] = Field(default_factory=list)


class UserContext(BaseModel):
    """Summary of a user's recent chat history used to personalise generation."""
    user_id: str
    topics: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)
    user_style: UserStyle = Field(default_factory=UserStyle)
    recent_interests: List[str] = Field(default_factory=list)
    communication_patterns: CommunicationPatterns = Field(default_factory=CommunicationPatterns)
    context_summary: str = ""
    analyzed_at: datetime = Field(default_factory=datetime.utcnow)
    message_count: int = 0
    time_range_from: Optional[datetime] = None
    time_range_to: Optional[datetime] = None


# Content package

class ContentScript(BaseModel):
    title: str = "Untitled Content"
    hook: str = ""
    main_content: str = ""
    call_to_action: str = ""
    duration: str = "30 seconds"


class ContentHashtags(BaseModel):
    primary: List[str] = Field(default_factory=list)
    secondary: List[str] = Field(default_factory=list)
    trending: List[str] = Field(default_factory=list)
    niche: List[str] = Field(default_factory=list)

    def flatten(self) -> List[str]:
        return self.primary + self.secondary + self.trending + self.niche


class ContentCaptions(BaseModel):
    short: str = ""
    medium: str = ""
    long: str = ""
    story: str = ""


class ImplementationGuide(BaseModel):
    steps: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    best_practices: List[str] = Field(default_factory=list)
    timing: str = "Optimal posting time varies by audience"


class VisualGuidance(BaseModel):
    composition: List[str] = Field(default_factory=list)
    lighting: List[str] = Field(default_factory=list)
    editing: List[str] = Field(default_factory=list)
    style: str = "Clean and professional"


class ContentPackageMetadata(BaseModel):
    generated_at: datetime = Field(default_factory=datetime.utcnow)
    context_summary: Optional[str] = None
    user_style: str = "mixed"
    topics: List[str] = Field(default_factory=list)
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    regeneration_count: int = Field(default=0, ge=0)


class ContentPackage(BaseModel):
    """A bundle of generated social-media assets for one topic."""
    id: str
    user_id: str
    script: ContentScript = Field(default_factory=ContentScript)
    hashtags: ContentHashtags = Field(default_factory=ContentHashtags)
    captions: ContentCaptions = Field(default_factory=ContentCaptions)
    implementation_guide: ImplementationGuide = Field(default_factory=ImplementationGuide)
    visual_guidance: VisualGuidance = Field(default_factory=VisualGuidance)
    metadata: ContentPackageMetadata = Field(default_factory=ContentPackageMetadata)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ContentPackage":
        """Rebuild a package from a ``content_packages`` row."""
        return cls(
            id=str(record["id"]),
            user_id=str(record["user_id"]),
            script=record.get("script") or {},
            hashtags=record.get("hashtags") or {},
            captions=record.get("captions") or {},
            implementation_guide=record.get("implementation_guide") or {},
            visual_guidance=record.get("visual_guidance") or {},
            metadata=record.get("metadata") or {},
        )

    def to_record(self, topic: str, platform: str, content_type: str) -> Dict[str, Any]:
        """Row stored in the ``content_packages`` table."""
        data = self.model_dump(mode="json")
        return {
            "id": self.id,
            "user_id": self.user_id,
            "topic": topic,
            "platform": platform,
            "content_type": content_type,
            "script": data["script"],
            "hashtags": data["hashtags"],
            "captions": data["captions"],
            "implementation_guide": data["implementation_guide"],
            "visual_guidance": data["visual_guidance"],
            "metadata": data["metadata"],
            "created_at": datetime.utcnow().isoformat(),
        }


class GenerationOptions(BaseModel):
    """Options passed to the generators."""
    prompt: Optional[str] = None
    platform: SocialPlatform = "instagram"
    content_type: ContentType = "video"
    tone: Optional[Tone] = None
    length: Length = "medium"


# API

class ContentPackageRequest(BaseModel):
    """Body of ``POST /content-package``. Accepts camelCase keys from the web client."""
    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(..., min_length=1, max_length=500, description="Topic to create content about")
    platform: RequestPlatform = Field(default="instagram")
    content_type: ContentType = Field(default="video", alias="contentType")
    tone: Optional[Tone] = None
    length: Length = "medium"
    regenerate: bool = False
    previous_package_id: Optional[str] = Field(default=None, alias="previousPackageId")


class UserContextSummary(BaseModel):
    topics: List[str]
    user_style: UserStyle
    message_count: int
    confidence: float


class ContentPackageResult(BaseModel):
    package_id: str
    content_package: ContentPackage
    user_context: UserContextSummary


class ContentPackageList(BaseModel):
    packages: List[Dict[str, Any]]
    pagination: Pagination
