"""Configuration models."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.feed_type import FeedType


# Same limit as the judgment_metadata.full_text CHECK constraint
MAX_FULL_TEXT_CHARS = 50000

DEFAULT_HALF_LIFE_HOURS: Dict[str, float] = {
    FeedType.NEWS.value: 10.0,
    FeedType.BLOGPOST.value: 48.0,
    FeedType.JUDGMENT.value: 120.0,
    FeedType.REGULATORY.value: 168.0,
}


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("lexfeed", description="Database name")
    user: str = Field("lexfeed_user", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    min_pool_size: int = Field(1, ge=1, description="Minimum pooled connections")
    max_pool_size: int = Field(10, ge=1, description="Maximum pooled connections")


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field("openai", description="LLM provider (openai, mock)")
    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for an OpenAI-compatible API")
    classification_max_tokens: int = Field(256, ge=16, le=4000)
    summary_max_tokens: int = Field(1500, ge=64, le=8000)


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by all fetchers."""

    timeout_seconds: float = Field(30.0, gt=0, description="Timeout for every external call")
    user_agent: str = Field(
        "LexFeed/1.0 (legal news aggregator)",
        description="User-Agent header for feed and scrape requests",
    )


class JudgmentsConfig(BaseModel):
    """CJEU judgment scraping settings."""

    sparql_endpoint: str = Field(
        "https://publications.europa.eu/webapi/rdf/sparql",
        description="CELLAR SPARQL endpoint",
    )
    days_back: int = Field(30, ge=1, le=365, description="Default look-back window")
    query_limit: int = Field(100, ge=1, le=1000, description="SPARQL LIMIT")
    polite_delay_seconds: float = Field(0.5, ge=0.0, description="Pause between EUR-Lex fetches")
    max_full_text_chars: int = Field(
        MAX_FULL_TEXT_CHARS,
        ge=1000,
        le=MAX_FULL_TEXT_CHARS,
        description="Cap on stored full text",
    )


class EnrichmentConfig(BaseModel):
    """Classification and summarization batch settings."""

    classify_batch_size: int = Field(10, ge=1, le=500)
    summarize_batch_size: int = Field(5, ge=1, le=100)
    classification_excerpt_chars: int = Field(1500, ge=100)
    judgment_excerpt_chars: int = Field(12000, ge=500)


class RelevanceConfig(BaseModel):
    """Relevance decay settings."""

    half_life_hours: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_HALF_LIFE_HOURS),
        description="Half-life in hours per feed type",
    )
    default_half_life_hours: float = Field(24.0, gt=0)

    @field_validator("half_life_hours")
    @classmethod
    def validate_half_lives(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Half-lives must be positive."""
        for feed_type, hours in v.items():
            if hours <= 0:
                raise ValueError(f"Half-life for {feed_type} must be positive, got {hours}")
        return v


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    judgments: JudgmentsConfig = Field(default_factory=JudgmentsConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    relevance: RelevanceConfig = Field(default_factory=RelevanceConfig)


class SourceConfig(BaseModel):
    """Feed source from sources.yaml."""

    name: str = Field(..., description="Source name")
    url: str = Field(..., description="RSS feed URL")
    feed_type: FeedType = Field(..., description="Source kind (news, blogpost, regulatory)")
    enabled: bool = Field(True, description="Whether source is enabled")

    @field_validator("feed_type")
    @classmethod
    def validate_feed_type(cls, v: FeedType) -> FeedType:
        """Judgments come from SPARQL, never from a feed."""
        if v == FeedType.JUDGMENT:
            raise ValueError("judgment sources are configured under 'judgments', not as feeds")
        return v
