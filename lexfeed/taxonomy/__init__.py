"""Legal category taxonomy and tag mapping."""

from .categories import CATEGORY_NAMES, LEGAL_CATEGORIES, NAME_TO_SLUG
from .tag_mapper import MATCH_STRATEGIES, map_tag_to_slug, map_tags_to_slugs

__all__ = [
    "CATEGORY_NAMES",
    "LEGAL_CATEGORIES",
    "MATCH_STRATEGIES",
    "NAME_TO_SLUG",
    "map_tag_to_slug",
    "map_tags_to_slugs",
]
