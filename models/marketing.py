"""
Marketing content generation schemas.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import CamelSchema


class ContentType(str, Enum):
    SOCIAL = "social"
    AD = "ad"
    DESCRIPTION = "description"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"
    ELEGANT = "elegant"


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    GENERAL = "general"


class ContentSource(str, Enum):
    GEMINI = "gemini"
    FALLBACK = "fallback"


class ContentGenerationRequest(CamelSchema):
    """Product descriptors plus the desired voice and channel."""

    type: ContentType = ContentType.SOCIAL
    product_name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1)
    materials: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    target_audience: Optional[str] = None
    tone: Tone = Tone.PROFESSIONAL
    platform: Platform = Platform.GENERAL
    keywords: list[str] = Field(default_factory=list)
    price: Optional[float] = Field(None, gt=0)


class AutoDescribeRequest(CamelSchema):
    product_name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1)
    materials: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    price: Optional[float] = Field(None, gt=0)


class GeneratedContent(CamelSchema):
    """Generated text with the hashtags found in it."""

    text: str
    hashtags: list[str] = Field(default_factory=list)
    source: ContentSource
    platform: Platform = Platform.GENERAL
    tone: Tone = Tone.PROFESSIONAL
