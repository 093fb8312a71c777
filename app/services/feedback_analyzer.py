"""
Aggregation over AI feedback rows.
"""
from collections import Counter
from typing import Any, Dict, List

from app.schemas.feedback import FeedbackInsights

IMPROVEMENT_THEMES = {
    "make_shorter": ("too long", "shorter"),
    "make_longer": ("too short", "longer"),
    "more_personal": ("more personal", "personality"),
    "more_professional": ("more professional", "formal"),
    "emoji_preference": ("emoji",),
    "hashtag_preference": ("hashtag", "#"),
}


def extract_improvement_themes(feedback: List[Dict[str, Any]]) -> List[str]:
    """Improvement themes mentioned in the notes, most frequent first."""
    counts: Counter = Counter()
    for row in feedback:
        notes = (row.get("improvement_notes") or "").lower()
        if not notes:
            continue
        for theme, phrases in IMPROVEMENT_THEMES.items():
            if any(phrase in notes for phrase in phrases):
                counts[theme] += 1
    return [theme for theme, _ in counts.most_common()]


def summarize_feedback(feedback: List[Dict[str, Any]]) -> FeedbackInsights:
    helpful = sum(1 for row in feedback if row.get("helpful") is True)
    not_helpful = sum(1 for row in feedback if row.get("helpful") is False)
    ratings = [row["rating"] for row in feedback if row.get("rating")]

    return FeedbackInsights(
        total_feedback=len(feedback),
        helpful_count=helpful,
        not_helpful_count=not_helpful,
        helpful_ratio=round(helpful / (helpful + not_helpful), 2) if helpful + not_helpful else None,
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else None,
        by_action_type=dict(Counter(row.get("action_type") or "unknown" for row in feedback)),
        common_improvements=extract_improvement_themes(feedback),
    )
