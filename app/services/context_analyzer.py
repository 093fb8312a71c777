"""
Chat context analysis.

Builds a ``UserContext`` from a user's recent assistant conversations so the
generators can match the user's interests and way of writing. The analysis
is keyword based and runs entirely in process; only the message lookup goes
to Supabase.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from app.core.logging import get_logger
from app.schemas.common import parse_timestamp
from app.schemas.content_package import CommunicationPatterns, UserContext, UserStyle

logger = get_logger(__name__)

MAX_MESSAGES = 50
MAX_DAYS = 30
RECENT_INTEREST_DAYS = 7
MAX_TOPICS = 20
MAX_INTERESTS = 10

EMPTY_CONTEXT_SUMMARY = (
    "No recent chat history available. Using neutral, professional tone for content generation."
)

TOPIC_PATTERNS = [
    # Business / marketing
    r"\b(marketing|business|strategy|brand|audience|engagement|growth|sales|revenue|roi|conversion)\b",
    # Content creation
    r"\b(content|post|video|photo|reel|story|caption|hashtag|viral|trending|creative|design)\b",
    # Platforms
    r"\b(instagram|facebook|twitter|linkedin|tiktok|youtube|pinterest|snapchat|social media)\b",
    # Technology
    r"\b(ai|artificial intelligence|automation|tool|software|app|platform|analytics|data|algorithm)\b",
    # Personal development
    r"\b(learning|skill|course|education|training|development|improvement|goal|productivity)\b",
    # Health & lifestyle
    r"\b(health|fitness|wellness|lifestyle|nutrition|exercise|mental health|work-life balance)\b",
    # Finance
    r"\b(money|finance|investment|budget|income|expense|profit|cost|pricing|financial)\b",
    # Leisure
    r"\b(travel|vacation|entertainment|movie|music|book|hobby|leisure|adventure)\b",
]

THEME_INDICATORS = {
    "content-creation": ["create", "make", "design", "write", "produce", "generate"],
    "business-growth": ["grow", "scale", "expand", "increase", "improve", "optimize"],
    "learning": ["learn", "understand", "know", "explain", "teach", "study"],
    "problem-solving": ["fix", "solve", "help", "issue", "problem", "trouble"],
    "planning": ["plan", "schedule", "organize", "prepare", "strategy", "goal"],
    "analysis": ["analyze", "compare", "evaluate", "assess", "review", "measure"],
    "creativity": ["creative", "innovative", "unique", "original", "artistic", "inspiration"],
    "productivity": ["efficient", "productive", "optimize", "streamline", "automate", "workflow"],
}

TONE_INDICATORS = {
    "professional": ["please", "thank you", "appreciate", "regarding", "furthermore", "however"],
    "casual": ["hey", "yeah", "cool", "awesome", "lol", "btw", "gonna", "wanna"],
    "friendly": ["thanks", "great", "wonderful", "amazing", "love", "excited"],
    "authoritative": ["must", "should", "need to", "important", "critical", "essential"],
}

TECHNICAL_PATTERNS = [
    r"\b(algorithm|api|database|framework|implementation|optimization|analytics|metrics)\b",
    r"\b(roi|kpi|ctr|cpm|engagement rate|conversion|funnel|attribution)\b",
    r"\b(seo|sem|ppc|cpc|impressions|reach|organic|paid)\b",
]

FORMAL_INDICATORS = ["please", "thank you", "would you", "could you", "i would appreciate"]
INFORMAL_INDICATORS = ["hey", "hi", "yeah", "ok", "cool", "awesome", "gonna", "wanna"]

QUESTION_PATTERNS = {
    "how-to": r"\bhow (to|do|can|should)\b",
    "what-is": r"\bwhat (is|are|does|do)\b",
    "why": r"\bwhy\b",
    "when": r"\bwhen\b",
    "where": r"\bwhere\b",
    "which": r"\bwhich\b",
    "can-you": r"\bcan you\b",
    "should-i": r"\bshould i\b",
    "help-with": r"\bhelp (me )?with\b",
}

ENGAGEMENT_INDICATORS = {
    "highly-engaged": ["thanks", "great", "perfect", "exactly", "awesome", "love it"],
    "moderately-engaged": ["ok", "good", "fine", "sure", "alright"],
    "task-focused": ["next", "continue", "what about", "also", "and then"],
}

TRANSITION_PATTERNS = [
    r"\b(also|additionally|furthermore|moreover|besides)\b",
    r"\b(but|however|although|though|nevertheless)\b",
    r"\b(speaking of|regarding|about|concerning)\b",
    r"\b(by the way|btw|oh|actually)\b",
]

INTEREST_PATTERNS = [
    r"\b(?:interested in|curious about|want to learn|looking into|exploring|researching)\s+([^.!?]+)",
    r"\b(?:love|enjoy|passionate about|excited about|fascinated by)\s+([^.!?]+)",
    r"\b(?:working on|focusing on|trying to|planning to)\s+([^.!?]+)",
]


def _content(message: Dict[str, Any]) -> str:
    return message.get("content") or ""


def _user_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [m for m in messages if m.get("role") == "user"]


def _dominant(scores: Dict[str, int], default: str) -> str:
    """Highest scoring key; ties go to the first key in insertion order."""
    best = max(scores.values(), default=0)
    if best == 0:
        return default
    return next(key for key, score in scores.items() if score == best)


def extract_topics(messages: List[Dict[str, Any]]) -> List[str]:
    """Keyword topics from user messages, in first-seen order."""
    topics: List[str] = []
    for message in _user_messages(messages):
        content = _content(message).lower()
        for pattern in TOPIC_PATTERNS:
            for match in re.finditer(pattern, content):
                topic = match.group(0).strip()
                if len(topic) > 1 and topic not in topics:
                    topics.append(topic)
    return topics[:MAX_TOPICS]


def extract_themes(messages: List[Dict[str, Any]]) -> List[str]:
    themes: List[str] = []
    for message in _user_messages(messages):
        content = _content(message).lower()
        for theme, indicators in THEME_INDICATORS.items():
            if theme in themes:
                continue
            if any(re.search(rf"\b{indicator}\w*\b", content) for indicator in indicators):
                themes.append(theme)
    return themes


def analyze_tone(messages: List[Dict[str, Any]]) -> str:
    scores = {tone: 0 for tone in TONE_INDICATORS}
    for message in messages:
        content = _content(message).lower()
        for tone, indicators in TONE_INDICATORS.items():
            scores[tone] += sum(1 for indicator in indicators if indicator in content)
    return _dominant(scores, "mixed")


def analyze_vocabulary(messages: List[Dict[str, Any]]) -> str:
    technical_terms = 0
    simple_words = 0
    total_words = 0

    for message in messages:
        content = _content(message)
        words = content.split()
        total_words += len(words)
        for pattern in TECHNICAL_PATTERNS:
            technical_terms += len(re.findall(pattern, content, flags=re.IGNORECASE))
        simple_words += sum(1 for word in words if len(word) <= 4 and word.isalpha())

    if total_words == 0:
        return "mixed"
    if technical_terms / total_words > 0.05:
        return "technical"
    if simple_words / total_words > 0.4:
        return "simple"
    return "mixed"


def analyze_message_length(messages: List[Dict[str, Any]]) -> str:
    if not messages:
        return "varied"
    average = sum(len(_content(m)) for m in messages) / len(messages)
    if average < 50:
        return "concise"
    if average > 200:
        return "detailed"
    return "varied"


def analyze_formality(messages: List[Dict[str, Any]]) -> str:
    formal = 0
    informal = 0
    for message in messages:
        content = _content(message).lower()
        formal += sum(1 for indicator in FORMAL_INDICATORS if indicator in content)
        informal += sum(1 for indicator in INFORMAL_INDICATORS if re.search(rf"\b{indicator}\b", content))

    if formal > informal * 1.5:
        return "formal"
    if informal > formal * 1.5:
        return "informal"
    return "mixed"


def identify_user_style(messages: List[Dict[str, Any]]) -> UserStyle:
    user_messages = _user_messages(messages)
    if not user_messages:
        return UserStyle()

    return UserStyle(
        tone=analyze_tone(user_messages),
        vocabulary=analyze_vocabulary(user_messages),
        length=analyze_message_length(user_messages),
        formality=analyze_formality(user_messages),
    )


def analyze_communication_patterns(messages: List[Dict[str, Any]]) -> CommunicationPatterns:
    user_messages = _user_messages(messages)

    question_types = [
        kind for kind, pattern in QUESTION_PATTERNS.items()
        if any(re.search(pattern, _content(m), flags=re.IGNORECASE) for m in user_messages)
    ]

    preferences: List[str] = []
    for message in messages:
        if message.get("role") != "assistant":
            continue
        content = _content(message)
        found = []
        if "step-by-step" in content or "1." in content or "2." in content:
            found.append("step-by-step")
        if "example" in content or "for instance" in content:
            found.append("examples")
        if len(content) > 500:
            found.append("detailed")
        elif len(content) < 200:
            found.append("concise")
        preferences.extend(p for p in found if p not in preferences)

    engagement_scores = {style: 0 for style in ENGAGEMENT_INDICATORS}
    for message in user_messages:
        content = _content(message).lower()
        for style, indicators in ENGAGEMENT_INDICATORS.items():
            engagement_scores[style] += sum(1 for indicator in indicators if indicator in content)

    transitions: List[str] = []
    for message in user_messages:
        for pattern in TRANSITION_PATTERNS:
            for match in re.finditer(pattern, _content(message), flags=re.IGNORECASE):
                word = match.group(0).lower()
                if word not in transitions:
                    transitions.append(word)

    return CommunicationPatterns(
        question_types=question_types,
        response_preferences=preferences,
        engagement_style=_dominant(engagement_scores, "neutral"),
        topic_transitions=transitions,
    )


def extract_recent_interests(
    messages: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> List[str]:
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=RECENT_INTEREST_DAYS)
    interests: List[str] = []

    for message in _user_messages(messages):
        created_at = parse_timestamp(message.get("created_at"))
        if created_at is None or created_at < cutoff:
            continue
        for pattern in INTEREST_PATTERNS:
            for match in re.finditer(pattern, _content(message), flags=re.IGNORECASE):
                interest = match.group(1).strip().lower()
                if 3 < len(interest) < 50 and interest not in interests:
                    interests.append(interest)

    return interests[:MAX_INTERESTS]


def generate_context_summary(
    topics: List[str],
    themes: List[str],
    user_style: UserStyle,
    recent_interests: List[str],
    message_count: int,
) -> str:
    """Plain-text summary injected into generation prompts."""
    parts = [
        f"Based on analysis of {message_count} recent messages:",
        (
            f"Communication Style: {user_style.tone} tone, {user_style.vocabulary} vocabulary, "
            f"{user_style.length} responses, {user_style.formality} formality."
        ),
    ]
    if topics:
        parts.append(f"Main Topics: {', '.join(topics[:10])}.")
    if themes:
        parts.append(f"Key Themes: {', '.join(themes)}.")
    if recent_interests:
        parts.append(f"Recent Interests: {', '.join(recent_interests[:5])}.")
    parts.append("Generate content that matches this user's communication style and interests.")
    return "\n\n".join(parts)


class ChatContextAnalyzer:
    """Analyzes a user's recent chat messages stored in Supabase."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def retrieve_recent_messages(self, user_id: str) -> List[Dict[str, Any]]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=MAX_DAYS)
        response = (
            self.supabase.table("chat_messages")
            .select("*")
            .eq("user_id", user_id)
            .gte("created_at", cutoff.isoformat())
            .order("created_at", desc=True)
            .limit(MAX_MESSAGES)
            .execute()
        )
        return response.data or []

    async def analyze_user_context(self, user_id: str) -> UserContext:
        """Analyze the last ``MAX_DAYS`` days of a user's chat history."""
        messages = self.retrieve_recent_messages(user_id)

        if not messages:
            logger.info("No chat history found, using empty context", user_id=user_id)
            return UserContext(user_id=user_id, context_summary=EMPTY_CONTEXT_SUMMARY)

        topics = extract_topics(messages)
        themes = extract_themes(messages)
        user_style = identify_user_style(messages)
        recent_interests = extract_recent_interests(messages)

        timestamps = [t for t in (parse_timestamp(m.get("created_at")) for m in messages) if t]

        context = UserContext(
            user_id=user_id,
            topics=topics,
            themes=themes,
            user_style=user_style,
            recent_interests=recent_interests,
            communication_patterns=analyze_communication_patterns(messages),
            context_summary=generate_context_summary(
                topics, themes, user_style, recent_interests, len(messages)
            ),
            message_count=len(messages),
            time_range_from=min(timestamps) if timestamps else None,
            time_range_to=max(timestamps) if timestamps else None,
        )

        logger.info(
            "User context analyzed",
            user_id=user_id,
            message_count=context.message_count,
            topic_count=len(topics),
            tone=user_style.tone,
        )
        return context

