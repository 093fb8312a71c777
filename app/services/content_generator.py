"""
AI content package generation.

Turns a ``UserContext`` and generation options into a ``ContentPackage`` by
asking OpenAI for a JSON document and mapping it onto the schema, filling in
defaults for anything the model leaves out.
"""

import json
import uuid
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.content_package import (
    ContentCaptions,
    ContentHashtags,
    ContentPackage,
    ContentPackageMetadata,
    ContentScript,
    GenerationOptions,
    ImplementationGuide,
    UserContext,
    VisualGuidance,
)

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert content creator. Always respond with valid JSON only, "
    "no additional text or formatting."
)

REQUIRED_SECTIONS = ("script", "hashtags", "captions", "implementationGuide", "visualGuidance")

PACKAGE_FORMAT = """{
  "script": {
    "title": "Compelling title that hooks the audience",
    "hook": "Opening line that grabs attention (first 3 seconds)",
    "mainContent": "Main content body with key points and value",
    "callToAction": "Clear call to action for engagement",
    "duration": "Estimated duration for the content"
  },
  "hashtags": {
    "primary": ["5-10 most relevant hashtags"],
    "secondary": ["5-10 supporting hashtags"],
    "trending": ["3-5 trending hashtags if applicable"],
    "niche": ["3-5 niche-specific hashtags"]
  },
  "captions": {
    "short": "Brief caption (under 150 characters)",
    "medium": "Medium caption (150-500 characters)",
    "long": "Detailed caption (500+ characters with storytelling)",
    "story": "Story-style caption for Instagram stories or similar"
  },
  "implementationGuide": {
    "steps": ["Step-by-step creation instructions"],
    "tips": ["Pro tips for better execution"],
    "bestPractices": ["Best practices for the platform"],
    "timing": "Best time to post for maximum engagement"
  },
  "visualGuidance": {
    "composition": ["Visual composition suggestions"],
    "lighting": ["Lighting recommendations"],
    "editing": ["Editing tips and style suggestions"],
    "style": "Overall visual style description"
  }
}"""


class ContentGenerationError(Exception):
    """Raised when OpenAI cannot produce a usable content package."""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _style_block(context: UserContext, tone: Optional[str]) -> str:
    style = context.user_style
    return (
        "USER COMMUNICATION STYLE:\n"
        f"- Tone: {tone or style.tone}\n"
        f"- Vocabulary: {style.vocabulary}\n"
        f"- Length preference: {style.length}\n"
        f"- Formality: {style.formality}"
    )


def build_generation_prompt(context: UserContext, options: GenerationOptions) -> str:
    """Prompt for a brand new content package."""
    topics = ", ".join(context.topics[:5]) or "General content creation"
    interests = ", ".join(context.recent_interests[:3]) or "Not specified"
    user_prompt = options.prompt or "Create engaging content based on my interests and style"

    return f"""You are an expert content creator and social media strategist. Create a comprehensive content package based on the following user context and requirements.

USER CONTEXT:
{context.context_summary or "No specific context available."}

{_style_block(context, options.tone)}

KEY TOPICS: {topics}
RECENT INTERESTS: {interests}

CONTENT REQUIREMENTS:
- Platform: {options.platform}
- Content Type: {options.content_type}
- Length: {options.length}
- User Prompt: {user_prompt}

Please generate a complete content package in the following JSON format:

{PACKAGE_FORMAT}

IMPORTANT:
- Match the user's communication style and tone
- Incorporate their topics and interests naturally
- Make content actionable and valuable
- Ensure platform-specific optimization
- Keep content authentic to the user's voice
- Provide only valid JSON response without additional text"""


def build_regeneration_prompt(
    previous: ContentPackage,
    context: UserContext,
    options: GenerationOptions,
    regeneration_count: int,
) -> str:
    """Prompt asking for a fresh take that keeps the user's voice."""
    return f"""You are an expert content creator regenerating content while maintaining consistency with the user's style and context.

PREVIOUS CONTENT ANALYSIS:
Original Title: {previous.script.title}
Original Hook: {previous.script.hook}
User Style Tone: {previous.metadata.user_style}
Topics Covered: {", ".join(previous.metadata.topics)}
Regeneration Attempt: {regeneration_count}

USER CONTEXT (MAINTAIN CONSISTENCY):
{context.context_summary or "No specific context available."}

{_style_block(context, options.tone)}

REGENERATION REQUIREMENTS:
- Platform: {options.platform}
- Content Type: {options.content_type}
- Length: {options.length}
- Maintain core theme but provide fresh perspective
- Do not reuse the original title or hook
- Generate alternative approaches while staying true to context

Please regenerate the complete content package with fresh ideas but consistent style:

{PACKAGE_FORMAT}

Provide ONLY the JSON response without additional text."""


def calculate_confidence(context: UserContext, content: Dict[str, Any]) -> float:
    """Heuristic confidence from context richness and answer completeness."""
    confidence = 0.5
    if context.message_count > 10:
        confidence += 0.2
    if len(context.topics) > 5:
        confidence += 0.1
    if context.recent_interests:
        confidence += 0.1

    script = content["script"]
    if script.get("hook") and script.get("callToAction"):
        confidence += 0.1
    if len(_string_list(content["hashtags"].get("primary"))) >= 5:
        confidence += 0.05
    if len(_string_list(content["implementationGuide"].get("steps"))) >= 3:
        confidence += 0.05

    return round(min(confidence, 1.0), 2)


def parse_content_response(raw: str, context: UserContext) -> ContentPackage:
    """
    Map a model answer onto a ``ContentPackage``.

    Raises:
        ContentGenerationError: when the answer is not JSON or lacks a section
    """
    try:
        content = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ContentGenerationError(f"Failed to parse content response: {e}") from e

    if not isinstance(content, dict):
        raise ContentGenerationError("Failed to parse content response: expected a JSON object")

    for section in REQUIRED_SECTIONS:
        if not isinstance(content.get(section), dict):
            raise ContentGenerationError(f"Missing required field: {section}")

    script = content["script"]
    if not script.get("title") or not script.get("mainContent"):
        raise ContentGenerationError("Script must have title and mainContent")

    hashtags = content["hashtags"]
    captions = content["captions"]
    guide = content["implementationGuide"]
    visuals = content["visualGuidance"]

    return ContentPackage(
        id=str(uuid.uuid4()),
        user_id=context.user_id,
        script=ContentScript(
            title=script.get("title") or "Untitled Content",
            hook=script.get("hook") or "",
            main_content=script.get("mainContent") or "",
            call_to_action=script.get("callToAction") or "",
            duration=script.get("duration") or "30 seconds",
        ),
        hashtags=ContentHashtags(
            primary=_string_list(hashtags.get("primary")),
            secondary=_string_list(hashtags.get("secondary")),
            trending=_string_list(hashtags.get("trending")),
            niche=_string_list(hashtags.get("niche")),
        ),
        captions=ContentCaptions(
            short=captions.get("short") or "",
            medium=captions.get("medium") or "",
            long=captions.get("long") or "",
            story=captions.get("story") or "",
        ),
        implementation_guide=ImplementationGuide(
            steps=_string_list(guide.get("steps")),
            tips=_string_list(guide.get("tips")),
            best_practices=_string_list(guide.get("bestPractices")),
            timing=guide.get("timing") or "Optimal posting time varies by audience",
        ),
        visual_guidance=VisualGuidance(
            composition=_string_list(visuals.get("composition")),
            lighting=_string_list(visuals.get("lighting")),
            editing=_string_list(visuals.get("editing")),
            style=visuals.get("style") or "Clean and professional",
        ),
        metadata=ContentPackageMetadata(
            context_summary=context.context_summary,
            user_style=context.user_style.tone,
            topics=context.topics[:10],
            confidence=calculate_confidence(context, content),
        ),
    )


class ContentGenerator:
    """Generates content packages with the OpenAI chat completions API."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        if client is None and settings.openai_api_key:
            client = AsyncOpenAI(api_key=settings.openai_api_key)
        self.client = client
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature
        self.max_tokens = settings.openai_max_tokens

    async def _complete(self, prompt: str) -> str:
        if self.client is None:
            raise ContentGenerationError("OpenAI API key not configured")

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise ContentGenerationError(f"OpenAI request failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise ContentGenerationError("No content generated from OpenAI")
        return content

    async def generate_content_package(
        self,
        context: UserContext,
        options: GenerationOptions,
    ) -> ContentPackage:
        """Generate a new package for the user."""
        raw = await self._complete(build_generation_prompt(context, options))
        package = parse_content_response(raw, context)

        logger.info(
            "Content package generated",
            user_id=context.user_id,
            package_id=package.id,
            platform=options.platform,
            confidence=package.metadata.confidence,
        )
        return package

    async def regenerate_content(
        self,
        previous: ContentPackage,
        context: UserContext,
        options: GenerationOptions,
    ) -> ContentPackage:
        """Generate a fresh variant of ``previous`` under a new id."""
        regeneration_count = previous.metadata.regeneration_count + 1
        raw = await self._complete(
            build_regeneration_prompt(previous, context, options, regeneration_count)
        )
        package = parse_content_response(raw, context)
        package.metadata.regeneration_count = regeneration_count

        logger.info(
            "Content package regenerated",
            user_id=context.user_id,
            previous_package_id=previous.id,
            package_id=package.id,
            regeneration_count=regeneration_count,
        )
        return package
