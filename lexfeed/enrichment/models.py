"""Data models for enrichment results."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


def _as_label_list(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    if isinstance(v, list):
        return [str(item).strip() for item in v if isinstance(item, str) and item.strip()]
    raise ValueError("expected a list of strings")


def _blank_to_none(v: Any) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


class ClassificationResult(BaseModel):
    """Parsed classifier output for one article."""

    legal_areas: List[str] = Field(default_factory=list, description="Category labels")
    jurisdiction: Optional[str] = Field(None, description="Primary jurisdiction")
    language: Optional[str] = Field(None, description="ISO 639-1 language code")

    @field_validator("legal_areas", mode="before")
    @classmethod
    def validate_legal_areas(cls, v: Any) -> List[str]:
        """Accept a bare string as a one-element list."""
        return _as_label_list(v)

    @field_validator("jurisdiction", "language", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Optional[str]:
        """Blank strings mean 'not provided'."""
        return _blank_to_none(v)


class JudgmentSummaryResult(BaseModel):
    """Parsed summarizer output for one judgment."""

    summary: str = Field(..., min_length=1, description="Multi-paragraph summary")
    legal_areas: List[str] = Field(default_factory=list, description="Category labels")
    jurisdiction: Optional[str] = Field("EU", description="Jurisdiction, EU for CJEU cases")
    key_provisions: List[str] = Field(default_factory=list, description="Provisions cited")
    significance: Optional[str] = Field(None, description="One-sentence significance")

    @field_validator("legal_areas", "key_provisions", mode="before")
    @classmethod
    def validate_lists(cls, v: Any) -> List[str]:
        """Accept a bare string as a one-element list."""
        return _as_label_list(v)

    @field_validator("jurisdiction", "significance", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Optional[str]:
        """Blank strings mean 'not provided'."""
        return _blank_to_none(v)
