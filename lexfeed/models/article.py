"""Article model for deduplicated content units."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel
from .feed_type import FeedType


class Article(DBModel):
    """Article model."""

    title: str = Field(..., description="Article title")
    link: str = Field(..., description="Canonical link, globally unique")
    description: str = Field("", description="Short description or snippet")
    content: str = Field("", description="Full content/body")
    image_url: Optional[str] = Field(None, description="Lead image URL")
    source_name: str = Field("", description="Publishing source name")
    source_url: str = Field("", description="Source homepage or feed URL")
    published_at: datetime = Field(..., description="Publication timestamp")
    feed_type: FeedType = Field(..., description="Source kind, immutable once set")
    jurisdiction: Optional[str] = Field(None, description="Primary jurisdiction, set by classification")
    language: Optional[str] = Field(None, description="ISO 639-1 language code")
    relevance_score: float = Field(1.0, ge=0.0, le=1.0, description="Time-decayed relevance")
    ai_classified: bool = Field(False, description="Whether classification has been applied")
