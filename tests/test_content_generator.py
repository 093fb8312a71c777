"""
Test AI content generation with a mocked OpenAI client.
"""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from app.schemas.content_package import (
    ContentPackage,
    ContentPackageMetadata,
    ContentScript,
    GenerationOptions,
    UserContext,
)
from app.services.content_generator import (
    ContentGenerationError,
    ContentGenerator,
    build_generation_prompt,
    calculate_confidence,
    parse_content_response,
)


@pytest.fixture
def answer():
    return {
        "script": {
            "title": "Batch Your Content",
            "hook": "One afternoon, a month of posts.",
            "mainContent": "Plan themes, film in batches, schedule ahead.",
            "callToAction": "Follow for part two.",
            "duration": "45 seconds",
        },
        "hashtags": {
            "primary": ["#batching", "#contentplan", "#creator", "#productivity", "#tips"],
            "secondary": ["#workflow"],
            "trending": [],
            "niche": ["#creatorlife"],
        },
        "captions": {"short": "Batch it.", "medium": "", "long": "", "story": "Swipe"},
        "implementationGuide": {
            "steps": ["Plan", "Film", "Schedule"],
            "tips": ["Use a checklist"],
            "bestPractices": ["Stay consistent"],
            "timing": "Weekday mornings",
        },
        "visualGuidance": {
            "composition": ["Rule of thirds"],
            "lighting": ["Window light"],
            "editing": ["Quick cuts"],
            "style": "Bright",
        },
    }


@pytest.fixture
def context():
    return UserContext(
        user_id="user-1",
        topics=["content", "productivity"],
        context_summary="Based on analysis of 3 recent messages:",
    )


def fake_openai(content):
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion)
    return client


class TestParseContentResponse:
    def test_maps_sections(self, answer, context):
        package = parse_content_response(json.dumps(answer), context)

        assert package.id
        assert package.user_id == "user-1"
        assert package.script.main_content == "Plan themes, film in batches, schedule ahead."
        assert package.script.call_to_action == "Follow for part two."
        assert package.implementation_guide.best_practices == ["Stay consistent"]
        assert package.visual_guidance.style == "Bright"
        assert package.metadata.topics == ["content", "productivity"]
        assert package.metadata.context_summary == context.context_summary

    def test_defaults_for_missing_fields(self, answer, context):
        answer["captions"] = {}
        answer["visualGuidance"] = {}
        package = parse_content_response(json.dumps(answer), context)
        assert package.captions.short == ""
        assert package.visual_guidance.style == "Clean and professional"

    def test_invalid_json(self, context):
        with pytest.raises(ContentGenerationError, match="Failed to parse content response"):
            parse_content_response("Sure! Here is your package:", context)

    def test_missing_section(self, answer, context):
        del answer["captions"]
        with pytest.raises(ContentGenerationError, match="Missing required field: captions"):
            parse_content_response(json.dumps(answer), context)

    def test_script_needs_title_and_body(self, answer, context):
        answer["script"]["mainContent"] = ""
        with pytest.raises(ContentGenerationError, match="Script must have title and mainContent"):
            parse_content_response(json.dumps(answer), context)


class TestConfidence:
    def test_complete_answer_without_history(self, answer, context):
        assert calculate_confidence(context, answer) == 0.7

    def test_rich_history(self, answer):
        context = UserContext(
            user_id="user-1",
            message_count=30,
            topics=["a", "b", "c", "d", "e", "f"],
            recent_interests=["video editing"],
        )
        assert calculate_confidence(context, answer) == 1.0

    def test_sparse_answer(self, context):
        sparse = {"script": {}, "hashtags": {}, "implementationGuide": {}}
        assert calculate_confidence(context, sparse) == 0.5


def test_generation_prompt(context):
    prompt = build_generation_prompt(
        context, GenerationOptions(platform="linkedin", content_type="text", tone="professional", prompt="Batching")
    )
    assert "Platform: linkedin" in prompt
    assert "Tone: professional" in prompt
    assert "KEY TOPICS: content, productivity" in prompt
    assert "User Prompt: Batching" in prompt


class TestContentGenerator:
    async def test_generate(self, answer, context):
        client = fake_openai(json.dumps(answer))
        package = await ContentGenerator(client=client).generate_content_package(context, GenerationOptions())

        assert package.script.title == "Batch Your Content"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"

    async def test_regenerate_increments_count(self, answer, context):
        previous = ContentPackage(
            id="pkg-1",
            user_id="user-1",
            script=ContentScript(title="Old", hook="Old hook", main_content="Old body"),
            metadata=ContentPackageMetadata(regeneration_count=2),
        )
        client = fake_openai(json.dumps(answer))

        package = await ContentGenerator(client=client).regenerate_content(previous, context, GenerationOptions())
        assert package.id != "pkg-1"
        assert package.metadata.regeneration_count == 3
        assert "Regeneration Attempt: 3" in client.chat.completions.create.call_args.kwargs["messages"][1]["content"]

    async def test_without_client(self, context):
        with pytest.raises(ContentGenerationError, match="OpenAI API key not configured"):
            await ContentGenerator(client=None).generate_content_package(context, GenerationOptions())

    async def test_empty_completion(self, context):
        with pytest.raises(ContentGenerationError, match="No content generated from OpenAI"):
            await ContentGenerator(client=fake_openai("")).generate_content_package(context, GenerationOptions())

    async def test_openai_error_is_wrapped(self, context):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=OpenAIError("quota exceeded"))

        with pytest.raises(ContentGenerationError, match="quota exceeded"):
            await ContentGenerator(client=client).generate_content_package(context, GenerationOptions())
