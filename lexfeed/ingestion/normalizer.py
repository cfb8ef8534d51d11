"""Normalize feed entries, SPARQL bindings and scraped pages into drafts."""

import calendar
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pendulum
import trafilatura
from bs4 import BeautifulSoup

from ..config import SourceConfig
from ..models.feed_type import FeedType
from .models import ArticleDraft, EcliParts, JudgmentDraft

COURT_CODES = {
    "C": "Court of Justice",
    "T": "General Court",
}

EURLEX_BASE = "https://eur-lex.europa.eu/legal-content/EN/TXT"
CURIA_URL = "https://curia.europa.eu"

_WHITESPACE = re.compile(r"\s+")


def _first(value: Any) -> Any:
    """feedparser exposes repeated elements as lists."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _html_to_text(html: str) -> str:
    if not html:
        return ""
    if "<" not in html:
        return html.strip()
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


def _struct_to_datetime(value: Any) -> Optional[datetime]:
    """feedparser's *_parsed fields are UTC struct_time values."""
    if not value:
        return None
    try:
        return pendulum.from_timestamp(calendar.timegm(value), tz="UTC")
    except (TypeError, ValueError, OverflowError):
        return None


def _first_img_src(html: str) -> Optional[str]:
    if not html or "<img" not in html:
        return None
    img = BeautifulSoup(html, "html.parser").find("img", src=True)
    if img is None:
        return None
    src = img["src"].strip()
    if src.startswith("http"):
        return src
    return None


def extract_image_url(entry: Mapping[str, Any]) -> Optional[str]:
    """
    Find a lead image for a feed entry.

    Tries, in order: image enclosure, media:content, media:thumbnail, the
    first <img> in embedded HTML, then a direct image field. Returns None when
    nothing usable is found.
    """
    for enclosure in entry.get("enclosures") or []:
        mime = enclosure.get("type") or ""
        url = enclosure.get("href") or enclosure.get("url")
        if url and mime.startswith("image/"):
            return url

    media = _first(entry.get("media_content"))
    if media and media.get("url"):
        return media["url"]

    thumbnail = _first(entry.get("media_thumbnail"))
    if thumbnail and thumbnail.get("url"):
        return thumbnail["url"]

    for html in _html_candidates(entry):
        src = _first_img_src(html)
        if src:
            return src

    image = entry.get("image")
    if isinstance(image, str) and image:
        return image
    if isinstance(image, Mapping):
        return image.get("href") or image.get("url")

    return None


def _html_candidates(entry: Mapping[str, Any]) -> List[str]:
    candidates = []
    for block in entry.get("content") or []:
        value = block.get("value") if isinstance(block, Mapping) else None
        if value:
            candidates.append(value)
    summary = entry.get("summary")
    if summary:
        candidates.append(summary)
    return candidates


def normalize_feed_entry(
    entry: Mapping[str, Any],
    feed_meta: Mapping[str, Any],
    source: SourceConfig,
    now: Optional[datetime] = None,
) -> Optional[ArticleDraft]:
    """
    Convert one feedparser entry to an ArticleDraft.

    Returns None when the entry has no link, so the caller can count it as
    skipped. Missing optional fields never raise.
    """
    link = (entry.get("link") or "").strip()
    if not link:
        return None

    raw_content = next(iter(_html_candidates(entry)), "")
    snippet = _html_to_text(entry.get("summary") or "") or _html_to_text(raw_content)

    published = (
        _struct_to_datetime(entry.get("published_parsed"))
        or _struct_to_datetime(entry.get("updated_parsed"))
        or now
        or pendulum.now("UTC")
    )

    return ArticleDraft(
        title=(entry.get("title") or "").strip() or "Untitled",
        link=link,
        description=snippet or raw_content or "",
        content=raw_content or snippet or "",
        image_url=extract_image_url(entry),
        source_name=entry.get("author") or feed_meta.get("title") or source.name,
        source_url=feed_meta.get("link") or source.url,
        published_at=published,
        feed_type=source.feed_type,
    )


def parse_ecli(ecli: Optional[str]) -> Optional[EcliParts]:
    """
    Split `ECLI:EU:<COURT>:<YEAR>:<SEQ>` into its parts.

    Malformed identifiers give None rather than raising.
    """
    if not ecli:
        return None

    parts = ecli.split(":")
    if len(parts) < 5:
        return None

    code = parts[2]
    return EcliParts(court=COURT_CODES.get(code, code), year=parts[3], sequence=parts[4])


def _binding_value(row: Mapping[str, Any], key: str) -> Optional[str]:
    cell = row.get(key)
    if not cell:
        return None
    value = cell.get("value")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return pendulum.parse(value[:10]).date()
    except ValueError:
        return None


def normalize_binding(row: Mapping[str, Any]) -> Optional[JudgmentDraft]:
    """Convert one SPARQL JSON result row; rows without an ECLI give None."""
    ecli = _binding_value(row, "ecli")
    if not ecli:
        return None

    parsed = parse_ecli(ecli)
    return JudgmentDraft(
        ecli=ecli,
        celex=_binding_value(row, "celex"),
        title=_binding_value(row, "title"),
        decision_date=_parse_date(_binding_value(row, "date")),
        court=_binding_value(row, "courtLabel") or (parsed.court if parsed else None),
        document_type=_binding_value(row, "docTypeLabel"),
        subject_matter=_binding_value(row, "subjectLabel"),
        procedure_type=_binding_value(row, "procedureTypeLabel"),
        judge_rapporteur=_binding_value(row, "judgeRapporteur"),
        advocate_general=_binding_value(row, "advocateGeneral"),
        formation=_binding_value(row, "formation"),
        case_language=_binding_value(row, "origLanguage"),
        cellar_uri=_binding_value(row, "work"),
    )


def merge_judgment_rows(rows: Iterable[Mapping[str, Any]]) -> List[JudgmentDraft]:
    """
    Collapse SPARQL rows into one draft per ECLI.

    Subject matters are joined with "; " without repeats. Every other field
    keeps the value from the first row seen for that ECLI.
    """
    merged: Dict[str, JudgmentDraft] = {}
    subjects: Dict[str, List[str]] = {}

    for row in rows:
        draft = normalize_binding(row)
        if draft is None:
            continue

        if draft.ecli not in merged:
            merged[draft.ecli] = draft
            subjects[draft.ecli] = []

        seen = subjects[draft.ecli]
        for subject in draft.subjects:
            if subject not in seen:
                seen.append(subject)

    for ecli, draft in merged.items():
        draft.subject_matter = "; ".join(subjects[ecli]) or None

    return list(merged.values())


def build_judgment_link(draft: JudgmentDraft) -> str:
    """Canonical EUR-Lex link, by CELEX when known, else by ECLI."""
    if draft.celex:
        return f"{EURLEX_BASE}/?uri=CELEX:{draft.celex}"
    return f"{EURLEX_BASE}/?uri=ecli:{draft.ecli}"


def build_full_text_url(celex: str) -> str:
    """EUR-Lex HTML rendition of a document."""
    return f"{EURLEX_BASE}/HTML/?uri=CELEX:{celex}"


def judgment_to_article(draft: JudgmentDraft, now: Optional[datetime] = None) -> ArticleDraft:
    """Build the article half of a judgment record."""
    title = draft.title or (
        f"{draft.court or 'CJEU'} - {draft.document_type or 'Decision'} - {draft.ecli}"
    )
    description = " | ".join(
        part
        for part in [draft.court, draft.document_type, draft.procedure_type, draft.subject_matter]
        if part
    )

    if draft.decision_date:
        published = pendulum.datetime(
            draft.decision_date.year, draft.decision_date.month, draft.decision_date.day, tz="UTC"
        )
    else:
        published = now or pendulum.now("UTC")

    return ArticleDraft(
        title=title,
        link=build_judgment_link(draft),
        description=description,
        content=draft.full_text or description,
        image_url=None,
        source_name=draft.court or "CJEU",
        source_url=CURIA_URL,
        published_at=published,
        feed_type=FeedType.JUDGMENT,
        jurisdiction="EU",
        language="en",
    )


def extract_judgment_text(html: str, max_chars: int) -> Optional[str]:
    """
    Pull the judgment body out of a EUR-Lex page.

    EUR-Lex wraps the text in #document1 or .EurlexContent; trafilatura and
    then the whole body are the fallbacks. Output is whitespace-collapsed and
    capped at max_chars.
    """
    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    text = ""
    for selector in ("#document1", ".EurlexContent"):
        node = soup.select_one(selector)
        if node is not None:
            text = node.get_text(" ")
            if text.strip():
                break

    if not text.strip():
        text = trafilatura.extract(html, include_comments=False, include_tables=True) or ""

    if not text.strip() and soup.body is not None:
        text = soup.body.get_text(" ")

    text = _WHITESPACE.sub(" ", text).strip()
    if not text:
        return None
    return text[:max_chars]
