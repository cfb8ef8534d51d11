"""Tests for feed entry, SPARQL row and judgment page normalization."""

from datetime import date

import pendulum
import pytest

from lexfeed.config import SourceConfig
from lexfeed.ingestion import (
    JudgmentDraft,
    build_judgment_link,
    extract_image_url,
    extract_judgment_text,
    judgment_to_article,
    merge_judgment_rows,
    normalize_binding,
    normalize_feed_entry,
    parse_ecli,
)
from lexfeed.models import FeedType

MARCH_1_NOON = (2024, 3, 1, 12, 0, 0, 4, 61, 0)


@pytest.fixture
def blog_source():
    return SourceConfig(name="Fallback Blog", url="https://blogs.example/feed", feed_type=FeedType.BLOGPOST)


def binding(**values):
    return {key: {"type": "literal", "value": value} for key, value in values.items()}


def test_image_prefers_image_enclosure():
    entry = {
        "enclosures": [{"type": "image/jpeg", "href": "https://img.example/enclosure.jpg"}],
        "media_content": [{"url": "https://img.example/media.jpg"}],
    }
    assert extract_image_url(entry) == "https://img.example/enclosure.jpg"


def test_image_skips_non_image_enclosure():
    entry = {
        "enclosures": [{"type": "audio/mpeg", "href": "https://cdn.example/episode.mp3"}],
        "media_thumbnail": [{"url": "https://img.example/thumb.jpg"}],
    }
    assert extract_image_url(entry) == "https://img.example/thumb.jpg"


def test_image_from_embedded_html():
    entry = {"summary": '<p>Ruling today <img src="https://img.example/inline.png" alt=""></p>'}
    assert extract_image_url(entry) == "https://img.example/inline.png"


def test_image_ignores_relative_src_and_falls_back_to_image_field():
    entry = {
        "summary": '<img src="/static/logo.png">',
        "image": {"href": "https://img.example/channel.png"},
    }
    assert extract_image_url(entry) == "https://img.example/channel.png"


def test_image_absent():
    assert extract_image_url({"summary": "No pictures here"}) is None


def test_normalize_entry_maps_fields(news_source):
    entry = {
        "title": "  Court fines platform  ",
        "link": "https://news.example/fine",
        "summary": "<p>The <b>court</b> imposed a fine.</p>",
        "author": "Jane Reporter",
        "published_parsed": MARCH_1_NOON,
    }
    feed_meta = {"title": "Legal Wire", "link": "https://legalwire.example"}

    draft = normalize_feed_entry(entry, feed_meta, news_source)

    assert draft.title == "Court fines platform"
    assert draft.link == "https://news.example/fine"
    assert draft.description == "The court imposed a fine."
    assert draft.content == "<p>The <b>court</b> imposed a fine.</p>"
    assert draft.source_name == "Jane Reporter"
    assert draft.source_url == "https://legalwire.example"
    assert draft.published_at == pendulum.datetime(2024, 3, 1, 12, tz="UTC")
    assert draft.feed_type == FeedType.NEWS


def test_normalize_entry_without_link_is_skipped(news_source):
    assert normalize_feed_entry({"title": "Orphan"}, {}, news_source) is None
    assert normalize_feed_entry({"title": "Blank", "link": "   "}, {}, news_source) is None


def test_normalize_entry_defaults(blog_source):
    now = pendulum.datetime(2024, 5, 5, 8, tz="UTC")

    draft = normalize_feed_entry({"link": "https://blogs.example/post"}, {}, blog_source, now=now)

    assert draft.title == "Untitled"
    assert draft.description == ""
    assert draft.content == ""
    assert draft.image_url is None
    assert draft.source_name == "Fallback Blog"
    assert draft.source_url == "https://blogs.example/feed"
    assert draft.published_at == now


def test_normalize_entry_uses_updated_date_when_published_missing(blog_source):
    entry = {"link": "https://blogs.example/post", "updated_parsed": MARCH_1_NOON}
    draft = normalize_feed_entry(entry, {"title": "Blog"}, blog_source)

    assert draft.published_at == pendulum.datetime(2024, 3, 1, 12, tz="UTC")
    assert draft.source_name == "Blog"


def test_parse_ecli_courts():
    parts = parse_ecli("ECLI:EU:C:2024:123")
    assert (parts.court, parts.year, parts.sequence) == ("Court of Justice", "2024", "123")

    assert parse_ecli("ECLI:EU:T:2023:9").court == "General Court"
    assert parse_ecli("ECLI:EU:F:2015:1").court == "F"


@pytest.mark.parametrize("ecli", [None, "", "ECLI:EU:C", "not-an-ecli"])
def test_parse_ecli_malformed(ecli):
    assert parse_ecli(ecli) is None


def test_normalize_binding():
    row = binding(
        ecli="ECLI:EU:C:2024:500",
        celex="62022CJ0100",
        date="2024-06-13",
        docTypeLabel="Judgment",
        subjectLabel="Taxation",
        work="http://publications.europa.eu/resource/cellar/abc",
    )

    draft = normalize_binding(row)

    assert draft.ecli == "ECLI:EU:C:2024:500"
    assert draft.celex == "62022CJ0100"
    assert draft.decision_date == date(2024, 6, 13)
    assert draft.court == "Court of Justice"
    assert draft.cellar_uri.endswith("/abc")


def test_normalize_binding_without_ecli():
    assert normalize_binding(binding(celex="62022CJ0100")) is None


def test_normalize_binding_bad_date():
    draft = normalize_binding(binding(ecli="ECLI:EU:C:2024:1", date="someday"))
    assert draft.decision_date is None


def test_merge_joins_subjects_and_keeps_first_values():
    rows = [
        binding(ecli="ECLI:EU:C:2024:7", title="First title", subjectLabel="Tax"),
        binding(ecli="ECLI:EU:C:2024:7", title="Second title", subjectLabel="Competition"),
        binding(ecli="ECLI:EU:C:2024:7", title="Third title", subjectLabel="Tax"),
        binding(ecli="ECLI:EU:T:2024:8"),
        binding(celex="no-ecli"),
    ]

    merged = merge_judgment_rows(rows)

    assert [j.ecli for j in merged] == ["ECLI:EU:C:2024:7", "ECLI:EU:T:2024:8"]
    assert merged[0].subject_matter == "Tax; Competition"
    assert merged[0].title == "First title"
    assert merged[1].subject_matter is None


def test_judgment_links():
    with_celex = JudgmentDraft(ecli="ECLI:EU:C:2024:7", celex="62023CJ0007")
    without_celex = JudgmentDraft(ecli="ECLI:EU:C:2024:7")

    assert build_judgment_link(with_celex) == (
        "https://eur-lex.europa.eu/legal-content/EN/TXT/?uri=CELEX:62023CJ0007"
    )
    assert build_judgment_link(without_celex) == (
        "https://eur-lex.europa.eu/legal-content/EN/TXT/?uri=ecli:ECLI:EU:C:2024:7"
    )


def test_judgment_to_article():
    draft = JudgmentDraft(
        ecli="ECLI:EU:C:2024:7",
        celex="62023CJ0007",
        decision_date=date(2024, 2, 29),
        court="Court of Justice",
        document_type="Judgment",
        subject_matter="Tax; Competition",
    )

    article = judgment_to_article(draft)

    assert article.title == "Court of Justice - Judgment - ECLI:EU:C:2024:7"
    assert article.description == "Court of Justice | Judgment | Tax; Competition"
    assert article.published_at == pendulum.datetime(2024, 2, 29, tz="UTC")
    assert article.feed_type == FeedType.JUDGMENT
    assert article.jurisdiction == "EU"
    assert article.language == "en"
    assert article.source_url == "https://curia.europa.eu"


def test_judgment_to_article_minimal():
    now = pendulum.datetime(2024, 7, 1, tz="UTC")
    article = judgment_to_article(JudgmentDraft(ecli="ECLI:EU:T:2024:9"), now=now)

    assert article.title == "CJEU - Decision - ECLI:EU:T:2024:9"
    assert article.description == ""
    assert article.source_name == "CJEU"
    assert article.published_at == now


def test_extract_judgment_text_prefers_document_container():
    html = """
    <html><body>
      <nav>Menu</nav>
      <div id="document1"><p>JUDGMENT OF THE COURT</p>
      <p>1   This request concerns   Article 101 TFEU.</p></div>
    </body></html>
    """
    assert extract_judgment_text(html, 10_000) == (
        "JUDGMENT OF THE COURT 1 This request concerns Article 101 TFEU."
    )


def test_extract_judgment_text_is_capped():
    html = '<div class="EurlexContent">' + "word " * 100 + "</div>"
    assert len(extract_judgment_text(html, 50)) == 50


def test_extract_judgment_text_empty():
    assert extract_judgment_text("", 100) is None
