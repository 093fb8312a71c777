"""
Shotstack edit, render and webhook schemas.

Only the parts of the Shotstack Edit API this service produces or inspects
are modelled; unknown keys are kept so client-built edits pass through intact.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


RenderStatusValue = Literal[
    "submitted", "queued", "fetching", "preprocessing", "rendering", "saving", "done", "failed"
]
OutputFormat = Literal["mp4", "gif", "jpg", "png", "bmp", "mp3"]
OutputResolution = Literal["preview", "mobile", "sd", "hd", "full-hd"]


class Asset(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["video", "image", "title", "html", "audio", "luma"]


class Transition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    in_: Optional[str] = Field(default=None, alias="in")
    out: Optional[str] = None


class Clip(BaseModel):
    model_config = ConfigDict(extra="allow")

    asset: Asset
    start: float = Field(..., ge=0)
    length: float = Field(..., gt=0)
    fit: Optional[Literal["cover", "contain", "fill", "none"]] = None
    transition: Optional[Transition] = None
    filter: Optional[Literal["boost", "contrast", "darken", "greyscale", "lighten", "muted", "negative"]] = None
    opacity: Optional[float] = Field(default=None, ge=0, le=1)


class Track(BaseModel):
    clips: List[Clip] = Field(default_factory=list)


class Soundtrack(BaseModel):
    src: str
    effect: Optional[Literal["fadeIn", "fadeOut", "fadeInFadeOut"]] = None
    volume: Optional[float] = None


class Timeline(BaseModel):
    model_config = ConfigDict(extra="allow")

    tracks: List[Track] = Field(default_factory=list)
    soundtrack: Optional[Soundtrack] = None
    background: Optional[str] = None


class Output(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    format: OutputFormat = "mp4"
    resolution: Optional[OutputResolution] = None
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    fps: Optional[float] = None


class Edit(BaseModel):
    """A Shotstack render request."""
    model_config = ConfigDict(extra="allow")

    timeline: Timeline
    output: Output
    callback: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RenderRequest(BaseModel):
    """Body of ``POST /shotstack/render``: a full edit or a list of clips to merge."""
    edit: Optional[Dict[str, Any]] = None
    video_urls: Optional[List[str]] = Field(default=None, max_length=10)
    title: Optional[str] = Field(default=None, max_length=200)
    platform: Optional[str] = None
    output_format: OutputFormat = "mp4"
    output_resolution: OutputResolution = "full-hd"
    project_name: str = "Untitled Project"

    @field_validator("video_urls")
    @classmethod
    def validate_urls(cls, urls: Optional[List[str]]) -> Optional[List[str]]:
        if urls is None:
            return urls
        for url in urls:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"Invalid URL: {url}")
        return urls


class RenderStatus(BaseModel):
    """Status of a render job as reported by Shotstack."""
    model_config = ConfigDict(extra="allow")

    id: str
    status: RenderStatusValue
    url: Optional[str] = None
    error: Optional[str] = None
    poster: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    render_time: Optional[float] = Field(default=None, alias="renderTime")

    @property
    def finished(self) -> bool:
        return self.status in ("done", "failed")


class RenderJob(BaseModel):
    job_id: str
    db_job_id: Optional[str] = None
    status: RenderStatusValue = "submitted"
    estimated_duration: float
    project_name: str


class ShotstackWebhookPayload(BaseModel):
    """Callback body Shotstack posts when a render changes state."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    owner: Optional[str] = None
    status: RenderStatusValue
    url: Optional[str] = None
    error: Optional[str] = None
    duration: Optional[float] = None
    render_time: Optional[float] = Field(default=None, alias="renderTime")
