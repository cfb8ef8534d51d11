"""Relevance decay scoring."""

from .relevance import (
    HALF_LIFE_HOURS,
    RelevanceScorer,
    RelevanceUpdater,
    compute_relevance_score,
)

__all__ = [
    "HALF_LIFE_HOURS",
    "RelevanceScorer",
    "RelevanceUpdater",
    "compute_relevance_score",
]
