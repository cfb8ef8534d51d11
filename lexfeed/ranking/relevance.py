"""Time-decayed relevance scoring."""

import math
from datetime import datetime
from typing import Dict, Optional, Union

import pendulum
from rich.console import Console

from ..config import RelevanceConfig
from ..config.models import DEFAULT_HALF_LIFE_HOURS
from ..db.articles import ArticleRepository
from ..models import FeedType

console = Console()

HALF_LIFE_HOURS: Dict[str, float] = dict(DEFAULT_HALF_LIFE_HOURS)
DEFAULT_HALF_LIFE = 24.0
SCORE_PRECISION = 4


def _as_utc(value: Union[datetime, str]) -> datetime:
    if isinstance(value, str):
        return pendulum.parse(value)
    if value.tzinfo is None:
        return pendulum.instance(value, tz="UTC")
    return value


class RelevanceScorer:
    """Exponential decay with a per-feed-type half-life."""

    def __init__(
        self,
        half_life_hours: Optional[Dict[str, float]] = None,
        default_half_life_hours: float = DEFAULT_HALF_LIFE,
    ) -> None:
        """
        Initialize relevance scorer.

        Args:
            half_life_hours: Hours for score to decay by 50%, per feed type
            default_half_life_hours: Half-life for unrecognized feed types
        """
        self.half_life_hours = dict(HALF_LIFE_HOURS if half_life_hours is None else half_life_hours)
        self.default_half_life_hours = default_half_life_hours

    @classmethod
    def from_config(cls, config: RelevanceConfig) -> "RelevanceScorer":
        """Build a scorer from the relevance config section."""
        return cls(config.half_life_hours, config.default_half_life_hours)

    def half_life(self, feed_type: Union[FeedType, str]) -> float:
        """Half-life in hours for a feed type."""
        key = feed_type.value if isinstance(feed_type, FeedType) else feed_type
        return self.half_life_hours.get(key, self.default_half_life_hours)

    def score(
        self,
        feed_type: Union[FeedType, str],
        published_at: Union[datetime, str],
        now: Optional[datetime] = None,
    ) -> float:
        """
        Score = 2 ** (-age_hours / half_life), clamped to [0, 1] and rounded.

        Naive datetimes are taken as UTC. A publication date in the future
        scores 1.0.
        """
        if now is None:
            now = pendulum.now("UTC")

        age_hours = (_as_utc(now) - _as_utc(published_at)).total_seconds() / 3600
        score = math.pow(2.0, -age_hours / self.half_life(feed_type))

        return round(max(0.0, min(1.0, score)), SCORE_PRECISION)


_default_scorer = RelevanceScorer()


def compute_relevance_score(
    feed_type: Union[FeedType, str],
    published_at: Union[datetime, str],
    now: Optional[datetime] = None,
) -> float:
    """Relevance score with the default half-lives."""
    return _default_scorer.score(feed_type, published_at, now)


class RelevanceUpdater:
    """Recompute and persist relevance for every stored article."""

    def __init__(self, repository: ArticleRepository, scorer: Optional[RelevanceScorer] = None) -> None:
        """Initialize updater."""
        self.repository = repository
        self.scorer = scorer or RelevanceScorer()

    async def update_relevance_scores(self, now: Optional[datetime] = None) -> int:
        """
        Refresh every article's score against a single reference time.

        Returns:
            Number of articles updated
        """
        if now is None:
            now = pendulum.now("UTC")

        rows = await self.repository.get_scoring_rows()
        scores = [
            (article_id, self.scorer.score(feed_type, published_at, now))
            for article_id, feed_type, published_at in rows
        ]
        updated = await self.repository.update_relevance_scores(scores)

        console.print(f"Updated relevance scores for {updated} articles.")
        return updated
