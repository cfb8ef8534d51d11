"""Data models for ingestion."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.feed_type import FeedType


class ArticleDraft(BaseModel):
    """Normalized article ready for deduplicated insert."""

    title: str = Field(..., description="Article title")
    link: str = Field(..., description="Canonical link (identity key)")
    description: str = Field("", description="Short description or snippet")
    content: str = Field("", description="Full content/body")
    image_url: Optional[str] = Field(None, description="Lead image URL")
    source_name: str = Field("", description="Publishing source name")
    source_url: str = Field("", description="Source homepage or feed URL")
    published_at: datetime = Field(..., description="Publication timestamp (UTC)")
    feed_type: FeedType = Field(..., description="Source kind")
    jurisdiction: Optional[str] = Field(None, description="Known jurisdiction, if any")
    language: Optional[str] = Field(None, description="Known language code, if any")


class JudgmentDraft(BaseModel):
    """One CJEU judgment normalized from SPARQL bindings."""

    ecli: str = Field(..., description="European Case Law Identifier")
    celex: Optional[str] = Field(None, description="CELEX number")
    title: Optional[str] = Field(None, description="English expression title")
    decision_date: Optional[date] = Field(None, description="Date of the document")
    court: Optional[str] = Field(None, description="Court name")
    document_type: Optional[str] = Field(None, description="Document type label")
    subject_matter: Optional[str] = Field(None, description="Semicolon-separated subjects")
    procedure_type: Optional[str] = Field(None, description="Procedure type label")
    judge_rapporteur: Optional[str] = Field(None, description="Judge-rapporteur")
    advocate_general: Optional[str] = Field(None, description="Advocate-General")
    formation: Optional[str] = Field(None, description="Court formation / chamber")
    case_language: Optional[str] = Field(None, description="Original case language")
    cellar_uri: Optional[str] = Field(None, description="CELLAR work URI")
    full_text: Optional[str] = Field(None, description="Scraped full text")

    @property
    def subjects(self) -> List[str]:
        """Individual subject-matter entries."""
        if not self.subject_matter:
            return []
        return [s.strip() for s in self.subject_matter.split(";") if s.strip()]


class EcliParts(BaseModel):
    """Parsed components of an ECLI."""

    court: str = Field(..., description="Court name, or the raw court code")
    year: str = Field(..., description="Year segment")
    sequence: str = Field(..., description="Sequence number segment")


class FeedResult(BaseModel):
    """Result of fetching and normalizing an RSS feed."""

    source_name: str = Field(..., description="Source name")
    source_url: str = Field(..., description="RSS feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    drafts: List[ArticleDraft] = Field(default_factory=list, description="Normalized items")
    item_count: int = Field(0, description="Number of raw items in the feed")
    skipped: int = Field(0, description="Items dropped for missing identity key")
    error: Optional[str] = Field(None, description="Error message if failed")


class SourceStats(BaseModel):
    """Per-source ingestion counts."""

    source: str = Field(..., description="Source name")
    feed_type: FeedType = Field(..., description="Source kind")
    fetched: int = Field(0, description="Items fetched")
    new: int = Field(0, description="Items newly inserted")
    skipped: int = Field(0, description="Items skipped (no link or failed insert)")
    error: Optional[str] = Field(None, description="Fetch error, if the source failed")


class JudgmentScrapeStats(BaseModel):
    """Counts for one judgment scrape."""

    fetched: int = Field(0, description="Unique judgments after merging rows")
    new: int = Field(0, description="Judgments newly stored")
    skipped: int = Field(0, description="Judgments already known or rejected")
    error: Optional[str] = Field(None, description="SPARQL error, if the query failed")
