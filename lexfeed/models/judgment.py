"""Judgment metadata, a 1:1 extension of an article."""

from datetime import date
from typing import Optional

from pydantic import Field

from .base import DBModel


class JudgmentMetadata(DBModel):
    """CJEU judgment metadata model."""

    article_id: int = Field(..., description="Foreign key to articles table")
    ecli: str = Field(..., description="European Case Law Identifier, unique")
    celex_number: Optional[str] = Field(None, description="CELEX document number")
    case_number: Optional[str] = Field(None, description="Case number")
    court: Optional[str] = Field(None, description="Court name")
    chamber: Optional[str] = Field(None, description="Chamber or formation")
    judge_rapporteur: Optional[str] = Field(None, description="Judge-rapporteur")
    advocate_general: Optional[str] = Field(None, description="Advocate-General")
    procedure_type: Optional[str] = Field(None, description="Procedure type")
    subject_matter: Optional[str] = Field(None, description="Semicolon-separated subject matters")
    document_type: Optional[str] = Field(None, description="Document type")
    decision_date: Optional[date] = Field(None, description="Date of the decision")
    case_language: Optional[str] = Field(None, description="Language of the case")
    parties: Optional[str] = Field(None, description="Parties, usually taken from the title")
    cellar_uri: Optional[str] = Field(None, description="CELLAR work URI")
    full_text: Optional[str] = Field(None, description="Scraped full text, size-capped")
    ai_summary: Optional[str] = Field(None, description="Generated summary")
    ai_summarized: bool = Field(False, description="Whether summarization has been applied")


class JudgmentWithArticle(JudgmentMetadata):
    """Judgment metadata joined with its article's title and description."""

    title: str = Field("", description="Article title")
    description: str = Field("", description="Article description")
