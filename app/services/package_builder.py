"""
Template-based content package builder.

Produces a complete ``ContentPackage`` from a topic and the user's context
without calling any model. Template choice is keyed on the topic so the same
request always yields the same package.
"""

import re
import uuid
import zlib
from typing import Dict, List, Optional, Sequence

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


TITLE_TEMPLATES = {
    "professional": [
        "How to Master {topic}: A Complete Guide",
        "5 Essential {topic} Tips Every Professional Should Know",
        "Transform Your {topic} Approach with These Proven Methods",
    ],
    "casual": [
        "{topic} Made Simple (You'll Love This!)",
        "Why Everyone's Talking About {topic}",
        "{topic}: What Nobody Tells You",
    ],
    "friendly": [
        "Let's Talk About {topic} - My Personal Experience",
        "{topic}: What I Wish I Knew Earlier",
        "Sharing My {topic} Journey with You",
    ],
    "authoritative": [
        "The Definitive Guide to {topic}",
        "{topic}: Industry Expert Insights",
        "Master {topic} with These Advanced Strategies",
    ],
}

HOOK_TEMPLATES = {
    "question": [
        "Did you know that 90% of people struggle with {topic}?",
        "What if I told you {topic} could be 10x easier?",
        "Ever wondered why {topic} feels so complicated?",
    ],
    "statement": [
        "This {topic} tip will blow your mind.",
        "I've been doing {topic} wrong for years.",
        "The {topic} secret nobody talks about.",
    ],
    "story": [
        "Last week, I discovered something about {topic}...",
        "My {topic} journey started with a simple mistake...",
        "Here's what happened when I tried {topic}...",
    ],
    "urgency": [
        "Stop doing {topic} the hard way.",
        "You're missing out on {topic} opportunities.",
        "Don't make these {topic} mistakes.",
    ],
}

TIKTOK_HOOKS = [
    "POV: You finally understand {topic}",
    "Wait... this {topic} hack is genius",
    "This {topic} trend is everywhere for a reason",
]

HOOK_STRATEGY = {"casual": "statement", "friendly": "story", "authoritative": "urgency"}

CALL_TO_ACTIONS = {
    "professional": "What's your experience with this? Share in the comments!",
    "casual": "Follow for more tips like this!",
    "authoritative": "Try this today and let me know how it goes!",
}
PLATFORM_CALL_TO_ACTIONS = {
    "linkedin": "What are your thoughts on this approach? I'd love to hear your perspective in the comments.",
    "tiktok": "Follow for more tips! 🔥 #ContentTips",
    "youtube": "Subscribe and hit the bell for more content like this! What should I cover next?",
}

DURATIONS = {"short": "15-30 seconds", "medium": "30-60 seconds", "long": "60-180 seconds"}

TRENDING_HASHTAGS = {
    "instagram": ["#viral", "#trending", "#explore", "#reels", "#instagood"],
    "tiktok": ["#fyp", "#foryou", "#viral", "#trending", "#foryoupage"],
    "twitter": ["#trending", "#viral", "#twitter", "#socialmedia"],
    "linkedin": ["#professional", "#business", "#networking", "#career"],
    "youtube": ["#youtube", "#subscribe", "#viral", "#trending"],
    "facebook": ["#facebook", "#social", "#community", "#share"],
    "pinterest": ["#pinterest", "#inspiration", "#ideas", "#creative"],
}

PLATFORM_HASHTAGS = {
    "instagram": ["#insta", "#ig", "#content", "#creator"],
    "tiktok": ["#tiktok", "#content", "#creator", "#tips"],
    "linkedin": ["#professional", "#business", "#career", "#industry"],
    "youtube": ["#youtube", "#video", "#tutorial", "#howto"],
    "twitter": ["#thread", "#tips", "#advice", "#community"],
    "facebook": ["#community", "#discussion", "#tips", "#advice"],
    "pinterest": ["#ideas", "#inspiration", "#creative", "#diy"],
}

ENGAGEMENT_HASHTAGS = {
    "instagram": ["#like", "#follow", "#share", "#save"],
    "tiktok": ["#duet", "#stitch", "#share", "#follow"],
    "linkedin": ["#connect", "#network", "#share", "#discuss"],
    "youtube": ["#subscribe", "#like", "#comment", "#share"],
    "twitter": ["#retweet", "#like", "#reply", "#share"],
    "facebook": ["#like", "#share", "#comment", "#tag"],
    "pinterest": ["#pin", "#save", "#share", "#inspire"],
}

THEME_HASHTAGS = {
    "content-creation": ["#contentcreator", "#content", "#creative"],
    "business-growth": ["#business", "#growth", "#entrepreneur"],
    "learning": ["#learning", "#education", "#skills"],
    "problem-solving": ["#solutions", "#problemsolving", "#tips"],
    "planning": ["#planning", "#strategy", "#goals"],
    "analysis": ["#analysis", "#data", "#insights"],
    "creativity": ["#creative", "#innovation", "#design"],
    "productivity": ["#productivity", "#efficiency", "#workflow"],
}

STYLE_HASHTAGS = {
    "professional": ["#professional", "#expert", "#industry"],
    "casual": ["#casual", "#everyday", "#simple"],
    "friendly": ["#friendly", "#community", "#helpful"],
}

CAPTION_LIMITS = {
    "instagram": {"short": 125, "medium": 500, "long": 2200},
    "twitter": {"short": 100, "medium": 200, "long": 280},
    "linkedin": {"short": 200, "medium": 600, "long": 3000},
    "tiktok": {"short": 100, "medium": 300, "long": 2200},
    "youtube": {"short": 150, "medium": 400, "long": 5000},
    "facebook": {"short": 150, "medium": 400, "long": 8000},
    "pinterest": {"short": 100, "medium": 300, "long": 500},
}

TOPIC_EMOJIS = {
    "business": "💼",
    "marketing": "📈",
    "content": "📝",
    "social media": "📱",
    "technology": "💻",
    "ai": "🤖",
    "learning": "📚",
    "strategy": "🎯",
    "growth": "🚀",
    "productivity": "⚡",
    "creativity": "🎨",
    "finance": "💰",
    "health": "🏥",
    "fitness": "💪",
    "travel": "✈️",
    "food": "🍽️",
}

POSTING_TIMES = {
    "instagram": "Post between 11 AM - 1 PM or 7 PM - 9 PM on weekdays for maximum engagement.",
    "tiktok": "Best times are 6 AM - 10 AM and 7 PM - 9 PM, especially on Tuesday through Thursday.",
    "linkedin": "Post during business hours: 8 AM - 10 AM and 12 PM - 2 PM on weekdays.",
    "youtube": "Upload between 2 PM - 4 PM on weekdays when people are looking for content.",
    "twitter": "Tweet between 9 AM - 10 AM and 7 PM - 9 PM for highest engagement rates.",
    "facebook": "Post between 1 PM - 3 PM on weekdays when users are most active.",
    "pinterest": "Pin between 8 PM - 11 PM when users are planning and browsing for ideas.",
}

PLATFORM_TIPS = {
    "instagram": [
        "Use Instagram Stories to tease your main post and drive traffic to it.",
        "Save high-performing posts to Highlights for extended visibility.",
    ],
    "tiktok": [
        "Jump on trending sounds and adapt them to your topic for better reach.",
        "Use text overlays to reinforce key points for viewers watching without sound.",
    ],
    "linkedin": [
        "Share personal insights and experiences to build professional credibility.",
        "Tag relevant industry professionals to expand your reach authentically.",
    ],
}

PLATFORM_PRACTICES = {
    "instagram": [
        "Use all available features (Stories, Reels) to maximize reach and engagement.",
        "Maintain a cohesive visual aesthetic that reflects your brand and topic expertise.",
    ],
    "tiktok": [
        "Post consistently during peak hours for your audience demographic.",
        "Participate in trends while staying true to your niche and expertise.",
    ],
    "linkedin": [
        "Share industry insights and professional experiences to establish thought leadership.",
        "Engage meaningfully with others' content to build professional relationships.",
    ],
    "youtube": [
        "Optimize video titles and descriptions for search discovery.",
        "Create compelling thumbnails that accurately represent your content.",
    ],
    "twitter": [
        "Use threads to share detailed insights about complex topics.",
        "Engage in real-time conversations and trending discussions when relevant.",
    ],
}

BASE_STEPS = [
    "Plan your content approach and key message",
    "Create your content following the script structure",
    "Optimize for your chosen platform",
    "Add engaging visuals or formatting",
    "Include relevant hashtags and captions",
    "Post at optimal timing for your audience",
    "Engage with comments and responses",
    "Monitor performance and adjust strategy",
]

COMPOSITION = {
    "base": [
        "Use the rule of thirds to create visually balanced compositions",
        "Ensure your main subject or text is clearly visible and prominent",
        "Leave adequate white space to avoid cluttered visuals",
        "Consider your audience's viewing context (mobile vs desktop)",
    ],
    "video": [
        "Keep important elements in the center third of the frame for mobile viewing",
        "Use dynamic camera movements sparingly to maintain focus on your message",
    ],
    "image": [
        "Create a clear focal point that draws the eye to your main message",
        "Balance text and visual elements for optimal readability",
    ],
    "carousel": [
        "Maintain consistent visual style across all slides",
        "End with a strong call-to-action slide",
    ],
    "story": [
        "Design for vertical viewing with key elements in the safe zone",
        "Keep each story frame focused on one key point",
    ],
    "instagram": ["Optimize for square (1:1) or vertical (4:5) aspect ratios"],
    "tiktok": ["Design for vertical (9:16) format exclusively"],
    "linkedin": ["Use professional, clean compositions that reflect business context"],
    "youtube": ["Design for horizontal (16:9) format with mobile-friendly elements"],
}

LIGHTING = {
    "base": [
        "Use natural light whenever possible for the most flattering results",
        "Avoid harsh shadows by using diffused lighting sources",
        "Ensure consistent lighting throughout your content piece",
    ],
    "professional": [
        "Use even, well-balanced lighting to convey credibility and trust",
        "Ensure your face (if on camera) is well-lit and clearly visible",
    ],
    "creative": [
        "Experiment with colored lighting to create mood and atmosphere",
        "Consider backlighting for silhouette effects or rim lighting",
    ],
    "minimal": [
        "Use soft, even lighting to maintain clean, uncluttered aesthetics",
        "Focus on clarity and simplicity in your lighting approach",
    ],
}

EDITING = {
    "base": [
        "Keep editing consistent with your brand and message tone",
        "Use transitions and effects sparingly to maintain focus on content",
        "Ensure audio quality is clear and professional",
    ],
    "instagram": ["Add captions or text overlays for accessibility"],
    "tiktok": [
        "Keep cuts quick and engaging to maintain viewer attention",
        "Add text overlays for key points since many watch without sound",
    ],
    "youtube": ["Use jump cuts to maintain pacing and remove dead air"],
    "linkedin": ["Add subtitles for professional accessibility"],
    "professional": ["Use clean cuts and minimal effects for a polished look"],
    "creative": ["Use color grading to enhance mood and atmosphere"],
    "minimal": ["Use simple cuts and avoid complex transitions"],
}

VISUAL_STYLES = {
    "professional": (
        "Clean, polished, and credible visual style that establishes authority on {topic}. "
        "Use consistent branding, professional color schemes, and clear typography."
    ),
    "creative": (
        "Bold, artistic visual style that captures attention while discussing {topic}. "
        "Incorporate unique visual elements and expressive color palettes."
    ),
    "minimal": (
        "Simple, uncluttered aesthetic that lets your {topic} content shine. "
        "Focus on white space, simple typography, and subtle visual elements."
    ),
}


def _pick(templates: Sequence[str], topic: str) -> str:
    return templates[zlib.crc32(topic.lower().encode("utf-8")) % len(templates)]


def _unique(items: List[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        if item and len(item) > 1:
            seen.setdefault(item, None)
    return list(seen)


def format_hashtag(text: str) -> str:
    """Lowercase alphanumerics only: ``"Social Media!"`` -> ``"socialmedia"``."""
    return re.sub(r"[^a-z0-9]", "", text.lower())


def truncate(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length``, preferring a sentence boundary."""
    if len(text) <= max_length:
        return text
    cut = text[: max_length - 3]
    last_sentence = cut.rfind(". ")
    if last_sentence > max_length * 0.7:
        return cut[: last_sentence + 1]
    return cut + "..."


def topic_emoji(topic: str) -> str:
    lowered = topic.lower()
    for key, emoji in TOPIC_EMOJIS.items():
        if re.search(rf"\b{re.escape(key)}\b", lowered):
            return emoji
    return "✨"


class ContentPackageBuilder:
    """Builds content packages from templates tuned by platform, content type and tone."""

    def build_content_package(
        self,
        context: UserContext,
        topic: str,
        options: Optional[GenerationOptions] = None,
    ) -> ContentPackage:
        options = options or GenerationOptions()
        tone = options.tone or context.user_style.tone
        visual_style = {"professional": "professional", "casual": "creative"}.get(tone, "minimal")

        script = self.build_script(context, topic, options, tone)
        package = ContentPackage(
            id=str(uuid.uuid4()),
            user_id=context.user_id,
            script=script,
            hashtags=self.build_hashtags(context, topic, options.platform),
            captions=self.build_captions(context, topic, script, options.platform),
            implementation_guide=self.build_guide(context, topic, options),
            visual_guidance=self.build_visual_guidance(context, topic, options, visual_style),
            metadata=ContentPackageMetadata(
                context_summary=context.context_summary,
                user_style=context.user_style.tone,
                topics=context.topics[:10],
                confidence=0.7 if context.message_count else 0.5,
            ),
        )

        logger.info(
            "Content package built from templates",
            user_id=context.user_id,
            package_id=package.id,
            platform=options.platform,
            content_type=options.content_type,
            tone=tone,
        )
        return package

    # Script

    def build_script(
        self,
        context: UserContext,
        topic: str,
        options: GenerationOptions,
        tone: str,
    ) -> ContentScript:
        title = _pick(TITLE_TEMPLATES.get(tone, TITLE_TEMPLATES["professional"]), topic)

        if options.platform == "tiktok":
            hook = _pick(TIKTOK_HOOKS, topic)
        else:
            hook = _pick(HOOK_TEMPLATES[HOOK_STRATEGY.get(tone, "question")], topic)

        call_to_action = PLATFORM_CALL_TO_ACTIONS.get(
            options.platform,
            CALL_TO_ACTIONS.get(tone, "Share this with someone who needs it!"),
        )

        return ContentScript(
            title=title.format(topic=topic),
            hook=hook.format(topic=topic),
            main_content=self._main_content(context, topic, options),
            call_to_action=call_to_action,
            duration=DURATIONS[options.length],
        )

    def _main_content(self, context: UserContext, topic: str, options: GenerationOptions) -> str:
        interests = context.recent_interests[:3]
        topics = context.topics[:5]
        preferred_length = context.user_style.length

        if preferred_length == "concise":
            content = (
                f"Here's the key to {topic}:\n\n"
                "1. Start with the basics\n"
                "2. Focus on what matters most\n"
                "3. Take action immediately"
            )
            if interests:
                content += f"\n\nPerfect for anyone interested in {interests[0]}."
        elif preferred_length == "detailed":
            application = (
                f"This is especially relevant if you're working with {', '.join(interests)}."
                if interests else "Apply these concepts to your specific situation."
            )
            considerations = (
                f"Consider how this integrates with {' and '.join(topics[:2])}."
                if topics else "Think about long-term implications and scalability."
            )
            content = (
                f"Let me break down {topic} for you:\n\n"
                f"**The Foundation:**\nUnderstanding {topic} starts with recognizing its core principles.\n\n"
                "**Key Components:**\n"
                "1. **Planning Phase** - Map out your approach\n"
                "2. **Execution Phase** - Implement with consistency\n"
                "3. **Optimization Phase** - Refine based on results\n\n"
                f"**Real-World Application:**\n{application}\n\n"
                f"**Advanced Considerations:**\n{considerations}\n\n"
                "The key is consistent application and continuous improvement."
            )
        else:
            audience = f"Especially for {interests[0]} enthusiasts," if interests else "For anyone serious about results,"
            content = (
                f"Here's what you need to know about {topic}:\n\n"
                f"**The Problem:** Most approaches to {topic} are overcomplicated.\n\n"
                "**The Solution:** Focus on these three core elements:\n"
                "• Clear understanding of fundamentals\n"
                "• Practical implementation steps\n"
                "• Consistent measurement and adjustment\n\n"
                f"**Why This Matters:** {audience} getting {topic} right can be a game-changer."
            )

        if options.platform == "linkedin" and topics:
            content += f"\n\nThis connects to broader trends in {' and '.join(topics[:2])}."
        elif options.platform == "instagram" and options.content_type == "reel":
            content = ". ".join(content.split(". ")[:3]).rstrip(".") + "."
        return content

    # Hashtags

    def build_hashtags(self, context: UserContext, topic: str, platform: str) -> ContentHashtags:
        topic_tag = format_hashtag(topic)
        words = [w for w in topic.lower().split() if w]

        primary = [f"#{topic_tag}"]
        if len(words) > 1:
            primary.append(f"#{format_hashtag(words[0])}")
        for user_topic in context.topics[:5]:
            formatted = format_hashtag(user_topic)
            if len(formatted) > 2:
                primary.append(f"#{formatted}")
        primary.extend(PLATFORM_HASHTAGS.get(platform, []))

        secondary = [
            f"#{format_hashtag(interest)}"
            for interest in context.recent_interests
            if len(format_hashtag(interest)) > 2
        ]
        for theme in context.themes:
            secondary.extend(THEME_HASHTAGS.get(theme, []))
        secondary.extend(ENGAGEMENT_HASHTAGS.get(platform, []))

        topic_trending = []
        for word in words:
            word = format_hashtag(word)
            if len(word) > 3:
                topic_trending.extend([f"#{word}tips", f"#{word}hack"])
        trending = (TRENDING_HASHTAGS.get(platform, [])[:3] + topic_trending[:3])[:5]

        niche = []
        for user_topic in context.topics[:3]:
            combination = format_hashtag(f"{topic}{user_topic}")
            if len(combination) < 30:
                niche.append(f"#{combination}")
        niche.extend(STYLE_HASHTAGS.get(context.user_style.tone, []))
        niche.extend([f"#{topic_tag}community", f"#{topic_tag}tribe"])

        return ContentHashtags(
            primary=_unique(primary)[:10],
            secondary=_unique(secondary)[:10],
            trending=_unique(trending),
            niche=_unique(niche)[:5],
        )

    # Captions

    def build_captions(
        self,
        context: UserContext,
        topic: str,
        script: ContentScript,
        platform: str,
    ) -> ContentCaptions:
        limits = CAPTION_LIMITS.get(platform, {"short": 150, "medium": 500, "long": 2200})
        emoji = "" if platform == "linkedin" else f"{topic_emoji(topic)} "

        short = script.hook
        if len(short) + len(script.call_to_action) + 5 < limits["short"]:
            short += f"\n\n{script.call_to_action}"

        medium = f"{script.hook}\n\n{truncate(script.main_content, 200)}"
        if context.recent_interests:
            medium += f"\n\nPerfect for {context.recent_interests[0]} enthusiasts!"
        medium += f"\n\n{script.call_to_action}"

        long = f"{script.hook}\n\n{script.main_content}"
        if context.themes:
            long += f"\n\nThis ties into broader themes of {' and '.join(context.themes[:2])}."
        if context.recent_interests:
            long += (
                "\n\nEspecially relevant if you're interested in "
                f"{' or '.join(context.recent_interests[:2])}."
            )
        long += f"\n\nWhat's your experience with {topic}? Share your thoughts below!"
        long += f"\n\n{script.call_to_action}"

        story_prompt = "Swipe up for more! 👆" if platform == "instagram" else "Tap for more details!"
        story = f"{script.hook}\n\nQuick tip: Focus on the fundamentals first!\n\n{story_prompt}"

        return ContentCaptions(
            short=truncate(emoji + short, limits["short"]),
            medium=truncate(emoji + medium, limits["medium"]),
            long=truncate(emoji + long, limits["long"]),
            story=emoji + story,
        )

    # Implementation guide

    def build_guide(
        self,
        context: UserContext,
        topic: str,
        options: GenerationOptions,
    ) -> ImplementationGuide:
        platform = options.platform
        tone = options.tone or context.user_style.tone

        if options.length == "short":
            steps = BASE_STEPS[:5]
        else:
            focus = " and ".join(context.topics[:2]) or "their current needs"
            steps = [
                f"**Planning Phase**: Define your core message about {topic}. "
                f"Research your audience's interests, especially around {focus}.",
                "**Content Creation**: Write a hook that grabs attention in the first 3 seconds, "
                "then end with a specific call-to-action.",
                f"**Platform Optimization**: Format your content for {platform} specifications.",
                "**Visual Enhancement**: Add visuals that support your message with consistent branding.",
                "**Hashtag Strategy**: Include 5-10 relevant hashtags, mixing popular and niche tags.",
                "**Publishing**: Post during your audience's peak activity hours.",
                "**Community Engagement**: Respond to comments within the first hour.",
                "**Performance Analysis**: Track engagement and reach to plan future content.",
            ]
            if options.length == "long":
                steps.append(
                    "**Scaling & Automation**: Identify opportunities to repurpose this content "
                    "across platforms."
                )

        tips = [
            f"Hook viewers in the first 3 seconds - your opening line about {topic} "
            "needs to create immediate curiosity or value.",
            f"Match your audience's energy level - since your communication style is {tone}, "
            "maintain that consistency throughout.",
            f"Use the 80/20 rule: 80% value, 20% promotion. Focus on helping your audience with {topic}.",
            f"Engage authentically in comments - your {context.user_style.formality} style "
            "should carry through to all interactions.",
        ] + PLATFORM_TIPS.get(platform, [])

        practices = [
            f"Consistency is key - maintain your {tone} voice across all content about {topic}.",
            "Quality over quantity - post less frequently with high-value content.",
            "Engage genuinely with your community - respond with thoughtful replies.",
            f"Build relationships, not just followers - connect with people interested in {topic}.",
        ] + PLATFORM_PRACTICES.get(platform, [])

        timing = POSTING_TIMES.get(
            platform, "Post when your audience is most active based on your analytics."
        )
        if "business" in context.topics:
            timing += (
                " Since your content focuses on professional topics, "
                "consider posting during business hours for better reach."
            )

        return ImplementationGuide(
            steps=steps,
            tips=tips[:6],
            best_practices=practices[:8],
            timing=timing,
        )

    # Visual guidance

    def build_visual_guidance(
        self,
        context: UserContext,
        topic: str,
        options: GenerationOptions,
        style: str,
    ) -> VisualGuidance:
        platform = options.platform
        content_type = "video" if options.content_type == "reel" else options.content_type

        composition = (
            COMPOSITION["base"] + COMPOSITION.get(content_type, []) + COMPOSITION.get(platform, [])
        )
        lighting = LIGHTING["base"] + LIGHTING.get(style, [])
        editing = EDITING["base"] + EDITING.get(platform, []) + EDITING.get(style, [])
        if context.user_style.tone == "casual":
            editing.append("Keep editing relaxed and natural - avoid overly polished effects")

        description = VISUAL_STYLES[style].format(topic=topic)
        if context.user_style.tone == "friendly":
            description += " Maintain a warm, approachable feel that reflects your friendly style."
        elif context.user_style.tone == "authoritative":
            description += " Emphasize expertise through polished, professional visual choices."
        if platform == "linkedin":
            description += " Ensure all visual choices align with professional networking expectations."
        elif platform == "tiktok":
            description += " Adapt style to be mobile-first and attention-grabbing for short-form content."

        return VisualGuidance(
            composition=composition[:8],
            lighting=lighting[:6],
            editing=editing[:8],
            style=description,
        )
