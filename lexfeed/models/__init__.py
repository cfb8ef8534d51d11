"""Data models for the legal feed pipeline."""

from .article import Article
from .category import LegalCategory
from .feed_type import FeedType
from .judgment import JudgmentMetadata, JudgmentWithArticle

__all__ = [
    "Article",
    "FeedType",
    "JudgmentMetadata",
    "JudgmentWithArticle",
    "LegalCategory",
]
