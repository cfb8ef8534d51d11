"""Map identity-provider user tags to legal category slugs."""

import re
from typing import Callable, Iterable, List, Optional, Tuple

from rich.console import Console

from .categories import NAME_TO_SLUG

console = Console()

# Ordered: earlier keywords win the substring strategy.
KEYWORD_TO_SLUG: List[Tuple[str, str]] = [
    ("ai", "ai-platforms-data-protection"),
    ("data protection", "ai-platforms-data-protection"),
    ("gdpr", "ai-platforms-data-protection"),
    ("administrative", "administrative"),
    ("banking", "banking-finance"),
    ("finance", "banking-finance"),
    ("capital markets", "capital-markets-securities"),
    ("securities", "capital-markets-securities"),
    ("competition", "competition-antitrust"),
    ("antitrust", "competition-antitrust"),
    ("construction", "construction-real-estate"),
    ("real estate", "construction-real-estate"),
    ("consumer protection", "consumer-protection"),
    ("consumer", "consumer-protection"),
    ("corporate", "corporate-company"),
    ("company law", "corporate-company"),
    ("criminal", "criminal"),
    ("employment", "employment-labour"),
    ("labour", "employment-labour"),
    ("labor", "employment-labour"),
    ("energy", "energy"),
    ("environmental", "environmental"),
    ("family", "family"),
    ("life sciences", "life-sciences"),
    ("pharma", "life-sciences"),
    ("immigration", "immigration"),
    ("infrastructure", "infrastructure-procurement"),
    ("public procurement", "infrastructure-procurement"),
    ("procurement", "infrastructure-procurement"),
    ("media", "media-telecom"),
    ("telecommunications", "media-telecom"),
    ("telecom", "media-telecom"),
    ("insolvency", "insolvency-restructuring"),
    ("restructuring", "insolvency-restructuring"),
    ("insurance", "insurance"),
    ("intellectual property", "intellectual-property"),
    ("ip", "intellectual-property"),
    ("patents", "intellectual-property"),
    ("trademarks", "intellectual-property"),
    ("copyright", "intellectual-property"),
    ("international law", "international-trade-customs"),
    ("trade", "international-trade-customs"),
    ("customs", "international-trade-customs"),
    ("litigation", "litigation-dispute-resolution"),
    ("dispute resolution", "litigation-dispute-resolution"),
    ("arbitration", "litigation-dispute-resolution"),
    ("mergers", "mergers-acquisitions"),
    ("acquisitions", "mergers-acquisitions"),
    ("m&a", "mergers-acquisitions"),
    ("private equity", "private-equity-vc"),
    ("venture capital", "private-equity-vc"),
    ("constitutional", "constitutional"),
    ("sports", "sports-entertainment"),
    ("entertainment", "sports-entertainment"),
    ("tax", "tax"),
    ("taxation", "tax"),
    ("transport", "transport-logistics"),
    ("logistics", "transport-logistics"),
    ("shipping", "transport-logistics"),
]

_KEYWORDS = dict(KEYWORD_TO_SLUG)
_LAW_SUFFIX = re.compile(r"\s+law$")


def match_exact_name(tag: str) -> Optional[str]:
    """Full category name, case-insensitive."""
    return NAME_TO_SLUG.get(tag)


def match_without_law_suffix(tag: str) -> Optional[str]:
    """Keyword match after dropping a trailing ' law'."""
    stripped = _LAW_SUFFIX.sub("", tag).strip()
    if stripped == tag:
        return None
    return _KEYWORDS.get(stripped)


def match_keyword(tag: str) -> Optional[str]:
    """Direct keyword match."""
    return _KEYWORDS.get(tag)


def match_substring(tag: str) -> Optional[str]:
    """First keyword contained in the tag, or containing it."""
    for keyword, slug in KEYWORD_TO_SLUG:
        if keyword in tag or tag in keyword:
            return slug
    return None


MATCH_STRATEGIES: List[Callable[[str], Optional[str]]] = [
    match_exact_name,
    match_without_law_suffix,
    match_keyword,
    match_substring,
]


def map_tag_to_slug(tag: str) -> Optional[str]:
    """Resolve a single tag by trying each strategy in order."""
    normalized = tag.lower().strip()
    if not normalized:
        return None

    for strategy in MATCH_STRATEGIES:
        slug = strategy(normalized)
        if slug:
            return slug
    return None


def map_tags_to_slugs(tags: Optional[Iterable[str]]) -> List[str]:
    """
    Map identity-provider tags to category slugs.

    Returns slugs in first-match order without duplicates. Unmatched tags are
    logged and dropped.
    """
    if tags is None or isinstance(tags, str):
        return []

    slugs: List[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        slug = map_tag_to_slug(tag)
        if slug is None:
            console.print(f"[yellow]Unmatched user tag: {tag!r}[/yellow]")
            continue
        if slug not in slugs:
            slugs.append(slug)

    return slugs
