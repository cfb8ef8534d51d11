"""Feed and judgment ingestion."""

from .cjeu_scraper import JudgmentFetcher, build_recent_judgments_query
from .models import (
    ArticleDraft,
    EcliParts,
    FeedResult,
    JudgmentDraft,
    JudgmentScrapeStats,
    SourceStats,
)
from .normalizer import (
    build_judgment_link,
    extract_image_url,
    extract_judgment_text,
    judgment_to_article,
    merge_judgment_rows,
    normalize_binding,
    normalize_feed_entry,
    parse_ecli,
)
from .rss_fetcher import RSSFetcher

__all__ = [
    "ArticleDraft",
    "EcliParts",
    "FeedResult",
    "JudgmentDraft",
    "JudgmentFetcher",
    "JudgmentScrapeStats",
    "RSSFetcher",
    "SourceStats",
    "build_judgment_link",
    "build_recent_judgments_query",
    "extract_image_url",
    "extract_judgment_text",
    "judgment_to_article",
    "merge_judgment_rows",
    "normalize_binding",
    "normalize_feed_entry",
    "parse_ecli",
]
