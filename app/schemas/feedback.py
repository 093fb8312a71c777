"""
AI feedback schemas.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


ActionType = Literal["caption", "idea", "sentence", "insight", "search_result", "content_package"]
FeedbackType = Literal["thumbs_up", "thumbs_down", "thumbs_up_down", "rating", "detailed"]


class AIFeedbackRequest(BaseModel):
    """Feedback a user leaves on an AI suggestion."""
    action_type: ActionType = Field(..., description="Kind of suggestion being rated")
    action_id: str = Field(..., min_length=1, description="ID of the suggestion")
    feedback_type: FeedbackType = Field(default="thumbs_up_down")
    rating: Optional[int] = Field(default=None, ge=1, le=5, description="1-5 rating")
    helpful: Optional[bool] = None
    improvement_notes: Optional[str] = Field(default=None, max_length=2000)
    context: Optional[Dict[str, Any]] = None
    suggestion_data: Optional[Dict[str, Any]] = None


class FeedbackInsights(BaseModel):
    """Aggregate view over a user's recent feedback."""
    total_feedback: int = 0
    helpful_count: int = 0
    not_helpful_count: int = 0
    helpful_ratio: Optional[float] = None
    average_rating: Optional[float] = None
    by_action_type: Dict[str, int] = Field(default_factory=dict)
    common_improvements: List[str] = Field(default_factory=list)


class AIFeedbackResponse(BaseModel):
    feedback_id: str
    message: str
    insights: FeedbackInsights
