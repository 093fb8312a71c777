"""
Test the template content package builder.
"""
import pytest

from app.schemas.content_package import GenerationOptions, UserContext, UserStyle
from app.services.package_builder import (
    BASE_STEPS,
    LIGHTING,
    TIKTOK_HOOKS,
    TITLE_TEMPLATES,
    ContentPackageBuilder,
    format_hashtag,
    topic_emoji,
    truncate,
)

TOPIC = "Social Media Marketing"


@pytest.fixture
def builder():
    return ContentPackageBuilder()


@pytest.fixture
def context():
    return UserContext(user_id="user-1")


class TestBuildContentPackage:
    def test_complete_package(self, builder, context):
        package = builder.build_content_package(context, TOPIC)

        assert package.id
        assert package.user_id == "user-1"
        assert TOPIC in package.script.title
        assert package.script.duration == "30-60 seconds"
        assert package.metadata.confidence == 0.5
        assert package.hashtags.primary[0] == "#socialmediamarketing"
        assert len(package.hashtags.primary) <= 10
        assert len(package.hashtags.trending) <= 5
        assert package.captions.short.startswith("📈 ")
        assert len(package.implementation_guide.steps) == 8

    def test_deterministic_templates(self, builder, context):
        first = builder.build_content_package(context, TOPIC)
        second = builder.build_content_package(context, TOPIC)
        assert first.id != second.id
        assert first.script.title == second.script.title
        assert first.script.hook == second.script.hook

    def test_confidence_with_history(self, builder):
        context = UserContext(user_id="user-1", message_count=4)
        assert builder.build_content_package(context, TOPIC).metadata.confidence == 0.7

    def test_tone_falls_back_to_user_style(self, builder):
        context = UserContext(user_id="user-1", user_style=UserStyle(tone="casual"))
        package = builder.build_content_package(context, TOPIC)

        assert package.script.title in [t.format(topic=TOPIC) for t in TITLE_TEMPLATES["casual"]]
        assert LIGHTING["creative"][0] in package.visual_guidance.lighting

    def test_explicit_tone_wins(self, builder):
        context = UserContext(user_id="user-1", user_style=UserStyle(tone="casual"))
        package = builder.build_content_package(context, TOPIC, GenerationOptions(tone="professional"))
        assert package.script.title in [t.format(topic=TOPIC) for t in TITLE_TEMPLATES["professional"]]


class TestPlatforms:
    def test_tiktok_hook(self, builder, context):
        package = builder.build_content_package(context, TOPIC, GenerationOptions(platform="tiktok"))
        assert package.script.hook in [h.format(topic=TOPIC) for h in TIKTOK_HOOKS]
        assert "#fyp" in package.hashtags.trending

    def test_linkedin_captions_have_no_emoji(self, builder, context):
        package = builder.build_content_package(context, TOPIC, GenerationOptions(platform="linkedin"))
        assert package.captions.short.startswith(package.script.hook)

    def test_caption_limits(self, builder, context):
        package = builder.build_content_package(context, TOPIC, GenerationOptions(platform="twitter"))
        assert len(package.captions.short) <= 100
        assert len(package.captions.medium) <= 200
        assert len(package.captions.long) <= 280


class TestGuide:
    def test_short_length(self, builder, context):
        package = builder.build_content_package(context, TOPIC, GenerationOptions(length="short"))
        assert package.implementation_guide.steps == BASE_STEPS[:5]
        assert package.script.duration == "15-30 seconds"

    def test_long_length(self, builder, context):
        package = builder.build_content_package(context, TOPIC, GenerationOptions(length="long"))
        assert len(package.implementation_guide.steps) == 9

    def test_business_timing(self, builder):
        context = UserContext(user_id="user-1", topics=["business"])
        package = builder.build_content_package(context, TOPIC)
        assert "business hours" in package.implementation_guide.timing


class TestHelpers:
    def test_format_hashtag(self):
        assert format_hashtag("Social Media!") == "socialmedia"

    def test_truncate(self):
        assert truncate("short", 100) == "short"
        result = truncate("a" * 300, 100)
        assert len(result) == 100
        assert result.endswith("...")

    def test_truncate_prefers_sentence_boundary(self):
        text = "x" * 80 + ". " + "y" * 50
        assert truncate(text, 100) == "x" * 80 + "."

    def test_topic_emoji(self):
        assert topic_emoji("AI tools") == "🤖"
        assert topic_emoji("Gardening") == "✨"
