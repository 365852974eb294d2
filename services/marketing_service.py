"""
Marketing content generation.

Product descriptions and social posts come from Gemini. When Gemini is
not configured or fails, a fallback text built only from the product's
name and category is returned instead, so the same product always gets
the same fallback.
"""

import re
from typing import Optional

import structlog

from config import settings
from integrations.gemini import GeminiError, generate_text
from models.marketing import (
    AutoDescribeRequest,
    ContentGenerationRequest,
    ContentSource,
    ContentType,
    GeneratedContent,
    Platform,
)

logger = structlog.get_logger(__name__)


HASHTAG_PATTERN = re.compile(r"(?<![\w#])#(\w+)", re.UNICODE)

BASE_TAGS = ["Handmade", "Traditional", "Indian Craft", "Artisan Made", "Authentic"]
CATEGORY_TAGS = {
    "pottery": ["Ceramic", "Clay Work", "Pottery Art", "Earthenware"],
    "textiles": ["Handwoven", "Traditional Fabric", "Textile Art", "Handloom"],
    "jewelry": ["Traditional Jewelry", "Handcrafted Ornament", "Indian Jewelry"],
    "woodwork": ["Wood Carving", "Wooden Craft", "Traditional Woodwork"],
    "metalwork": ["Brass Work", "Metal Craft", "Traditional Metalwork"],
}

CATEGORY_DESCRIPTIONS = {
    "pottery": (
        "Exquisite handcrafted pottery piece showcasing traditional Indian ceramic artistry. "
        "Each piece is meticulously shaped and fired using time-honored techniques passed down "
        "through generations. The unique texture and earthy tones reflect the authentic "
        "craftsmanship of skilled artisans.\n\n"
        "This beautiful {name} represents the rich cultural heritage of Indian pottery making. "
        "Perfect for both decorative and functional use, it brings warmth and authenticity to any space."
    ),
    "textiles": (
        "Stunning handwoven textile crafted with traditional Indian weaving techniques. "
        "This {name} showcases intricate patterns and vibrant colors that tell the story of "
        "our rich textile heritage.\n\n"
        "Made with premium quality materials and attention to detail, this piece represents hours "
        "of skilled craftsmanship. The traditional motifs and contemporary appeal make it perfect "
        "for modern homes while preserving cultural authenticity."
    ),
    "jewelry": (
        "Elegant handcrafted jewelry piece that embodies the timeless beauty of Indian ornamental "
        "art. This {name} features intricate detailing and traditional design elements that have "
        "been cherished for centuries.\n\n"
        "Crafted with precision and artistic flair, each piece tells a unique story of cultural "
        "heritage and skilled craftsmanship. Perfect for special occasions or as a treasured "
        "addition to your jewelry collection."
    ),
    "woodwork": (
        "Masterfully carved wooden artifact showcasing the exceptional skill of traditional Indian "
        "woodworkers. This {name} demonstrates the perfect harmony between functionality and "
        "artistic expression.\n\n"
        "Crafted from premium quality wood using traditional tools and techniques, this piece "
        "reflects the deep-rooted woodworking traditions of India. The intricate details and "
        "smooth finish make it a perfect addition to any home or office space."
    ),
}
DEFAULT_DESCRIPTION = (
    "Beautiful handcrafted {name} that represents the finest traditions of Indian craftsmanship. "
    "This unique {category} piece showcases the skill and dedication of talented artisans who have "
    "preserved ancient techniques through generations.\n\n"
    "Each detail has been carefully crafted to ensure both beauty and quality. This authentic "
    "piece brings the warmth of traditional Indian artistry to your collection."
)

PLATFORM_HASHTAGS = {
    Platform.INSTAGRAM: [
        "#HandmadeIndia", "#ArtisanMade", "#IndianHandicrafts", "#TraditionalCrafts",
        "#AuthenticArt", "#HandcraftedWithLove", "#CulturalHeritage", "#SupportLocalArtisans",
    ],
    Platform.FACEBOOK: [
        "#HandmadeInIndia", "#TraditionalCrafts", "#ArtisanMade", "#AuthenticCrafts",
        "#IndianHandicrafts",
    ],
    Platform.TWITTER: ["#HandmadeIndia", "#ArtisanCrafts", "#TraditionalArt"],
    Platform.GENERAL: ["#HandmadeIndia", "#ArtisanCrafts", "#TraditionalArt"],
}

PLATFORM_FORMATS = {
    Platform.INSTAGRAM: "1-2 engaging paragraphs followed by 5-8 relevant hashtags",
    Platform.FACEBOOK: "2-3 storytelling paragraphs followed by 3-5 relevant hashtags",
    Platform.TWITTER: "a single post under 280 characters with 2-3 hashtags",
    Platform.GENERAL: "2 short paragraphs followed by 3-5 relevant hashtags",
}


def extract_hashtags(text: str) -> list[str]:
    """Return the `#word` tokens of a text, first occurrence order, no duplicates."""
    seen: set[str] = set()
    hashtags = []
    for match in HASHTAG_PATTERN.finditer(text or ""):
        tag = f"#{match.group(1)}"
        if tag.lower() not in seen:
            seen.add(tag.lower())
            hashtags.append(tag)
    return hashtags


def suggest_tags(category: Optional[str]) -> list[str]:
    """Listing tags for a craft category, at most eight."""
    return (BASE_TAGS + CATEGORY_TAGS.get(category or "", []))[:8]


def fallback_description(name: str, category: str) -> str:
    template = CATEGORY_DESCRIPTIONS.get(category, DEFAULT_DESCRIPTION)
    return template.format(name=name or "artisan creation", category=category or "handcrafted")


def fallback_content(request: ContentGenerationRequest) -> GeneratedContent:
    """Static content derived only from the product's name and category."""
    if request.type == ContentType.DESCRIPTION:
        text = fallback_description(request.product_name, request.category)
    else:
        hashtags = " ".join(PLATFORM_HASHTAGS[request.platform])
        text = (
            f"Discover the beauty of authentic Indian craftsmanship with our {request.product_name}!\n\n"
            f"This stunning {request.category} piece showcases traditional artisan skills passed down "
            "through generations. Every detail tells a story of cultural heritage and meticulous "
            "craftsmanship.\n\n"
            f"{hashtags}"
        )

    return GeneratedContent(
        text=text,
        hashtags=extract_hashtags(text),
        source=ContentSource.FALLBACK,
        platform=request.platform,
        tone=request.tone,
    )


def build_prompt(request: ContentGenerationRequest) -> str:
    materials = ", ".join(request.materials) or "Not specified"
    features = ", ".join(request.features) or "Not specified"
    lines = [
        "You write for an Indian artisan marketplace.",
        "",
        f"Product: {request.product_name}",
        f"Category: {request.category}",
        f"Materials: {materials}",
        f"Features: {features}",
    ]
    if request.price:
        lines.append(f"Price: ₹{request.price:g}")
    lines.append(f"Target audience: {request.target_audience or 'People who value authentic handmade products'}")
    lines.append(f"Tone: {request.tone.value}")
    if request.keywords:
        lines.append(f"Keywords: {', '.join(request.keywords)}")
    lines.append("")

    if request.type == ContentType.DESCRIPTION:
        lines += [
            "Write a product description of 150-300 words in plain text without markdown.",
            "Highlight the craftsmanship, traditional techniques and materials, and the cultural significance.",
            "If a price is given, mention it exactly.",
        ]
    elif request.type == ContentType.AD:
        lines += [
            f"Write advertisement copy for {request.platform.value}: a strong headline, the unique selling",
            "points and a clear call to action. End with 3-5 hashtags specific to this product.",
        ]
    else:
        lines += [
            f"Write a {request.platform.value} post as {PLATFORM_FORMATS[request.platform]}.",
            "Tell the story of the artisan and the craft, and end with a call to action.",
            "Hashtags must be specific to this product, its materials and its craft.",
        ]
    return "\n".join(lines)


class MarketingService:
    """Generates listing descriptions and social media copy."""

    def generate(self, request: ContentGenerationRequest) -> GeneratedContent:
        """
        Generate content, falling back to static text when Gemini is unavailable.

        Returns:
            GeneratedContent with hashtags extracted from the text
        """
        logger.info(
            "generating_content",
            type=request.type.value,
            platform=request.platform.value,
            product=request.product_name
        )

        if not settings.gemini_configured:
            logger.warning("gemini_not_configured_using_fallback")
            return fallback_content(request)

        try:
            text = generate_text(build_prompt(request))
        except GeminiError as e:
            logger.warning("content_generation_failed_using_fallback", error=str(e))
            return fallback_content(request)

        return GeneratedContent(
            text=text,
            hashtags=extract_hashtags(text),
            source=ContentSource.GEMINI,
            platform=request.platform,
            tone=request.tone,
        )

    def describe_product(self, request: AutoDescribeRequest) -> GeneratedContent:
        """Generate a listing description for the wizard's description step."""
        return self.generate(ContentGenerationRequest(
            type=ContentType.DESCRIPTION,
            product_name=request.product_name,
            category=request.category,
            materials=request.materials,
            features=request.features,
            price=request.price,
        ))


# Singleton instance
_service: Optional[MarketingService] = None


def get_marketing_service() -> MarketingService:
    """Get or create MarketingService instance."""
    global _service
    if _service is None:
        _service = MarketingService()
    return _service
