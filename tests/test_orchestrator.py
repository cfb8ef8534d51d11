"""End-to-end ingestion runs against mocked HTTP and an in-memory store."""

import json

import httpx
import pendulum
import pytest

from conftest import hours_ago, rss_document
from lexfeed.config import SourceConfig
from lexfeed.enrichment import MockLLMProvider
from lexfeed.models import FeedType
from lexfeed.pipeline import total_stats

SPARQL_HOST = "publications.europa.eu"
EURLEX_HOST = "eur-lex.europa.eu"


def recent_date(days: int) -> str:
    return pendulum.now("UTC").subtract(days=days).to_date_string()


def sparql_rows():
    def row(**values):
        return {key: {"type": "literal", "value": value} for key, value in values.items()}

    return [
        row(ecli="ECLI:EU:C:2024:300", celex="62023CJ0300", date=recent_date(2), subjectLabel="Tax", docTypeLabel="Judgment"),
        row(ecli="ECLI:EU:C:2024:300", celex="62023CJ0300", date=recent_date(2), subjectLabel="Competition"),
        row(ecli="ECLI:EU:T:2024:301", date=recent_date(3), docTypeLabel="Order"),
    ]


class FakeWeb:
    """Routes requests to canned feed, SPARQL and EUR-Lex responses."""

    def __init__(self, feeds=None, sparql_status=200):
        self.feeds = feeds or {}
        self.sparql_status = sparql_status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == SPARQL_HOST:
            if self.sparql_status != 200:
                return httpx.Response(self.sparql_status, text="Service Unavailable")
            return httpx.Response(200, json={"results": {"bindings": sparql_rows()}})
        if request.url.host == EURLEX_HOST:
            return httpx.Response(200, text='<div id="document1"><p>JUDGMENT OF THE COURT</p></div>')
        body = self.feeds.get(str(request.url))
        if body is None:
            return httpx.Response(500, text="boom")
        return httpx.Response(200, content=body, headers={"Content-Type": "application/rss+xml"})

    def count(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)


async def test_fetch_scores_new_articles_and_skips_linkless_items(make_orchestrator, repository, news_source):
    feed = rss_document(
        [
            {"title": "Court fines platform", "link": "https://news.example/fine", "pubDate": hours_ago(5)},
            {"title": "No link here", "pubDate": hours_ago(1)},
        ]
    )
    orchestrator = make_orchestrator(FakeWeb({news_source.url: feed}), sources=[news_source])

    results = await orchestrator.fetch_all_feeds()

    assert len(results) == 1
    assert (results[0].fetched, results[0].new, results[0].skipped) == (2, 1, 1)
    article = repository.article_by_link("https://news.example/fine")
    assert article.feed_type == FeedType.NEWS
    assert article.relevance_score == pytest.approx(0.7071, abs=1e-4)


async def test_refetch_inserts_nothing_new(make_orchestrator, repository, news_source):
    feed = rss_document([{"title": "Same story", "link": "https://news.example/same", "pubDate": hours_ago(2)}])
    orchestrator = make_orchestrator(FakeWeb({news_source.url: feed}), sources=[news_source])

    first = await orchestrator.fetch_all_feeds()
    second = await orchestrator.fetch_all_feeds()

    assert first[0].new == 1
    assert second[0].new == 0
    assert second[0].fetched == 1
    assert len(repository.articles) == 1


async def test_refetch_only_backfills_missing_image(make_orchestrator, repository, news_source):
    web = FakeWeb(
        {news_source.url: rss_document([{"title": "Original", "link": "https://news.example/img", "pubDate": hours_ago(2)}])}
    )
    orchestrator = make_orchestrator(web, sources=[news_source])
    await orchestrator.fetch_all_feeds()

    web.feeds[news_source.url] = rss_document(
        [
            {
                "title": "Edited headline",
                "link": "https://news.example/img",
                "pubDate": hours_ago(1),
                "enclosure": "",
            }
        ]
    ).replace(b"<enclosure></enclosure>", b'<enclosure url="https://img.example/lead.jpg" type="image/jpeg" length="0"/>')
    await orchestrator.fetch_all_feeds()

    article = repository.article_by_link("https://news.example/img")
    assert article.image_url == "https://img.example/lead.jpg"
    assert article.title == "Original"


async def test_failing_source_does_not_stop_the_others(make_orchestrator, repository, news_source):
    broken = SourceConfig(name="Broken", url="https://broken.example/rss", feed_type=FeedType.REGULATORY)
    disabled = SourceConfig(name="Off", url="https://off.example/rss", feed_type=FeedType.BLOGPOST, enabled=False)
    feed = rss_document([{"title": "Still here", "link": "https://news.example/ok", "pubDate": hours_ago(1)}])
    web = FakeWeb({news_source.url: feed})
    orchestrator = make_orchestrator(web, sources=[broken, disabled, news_source])

    results = await orchestrator.fetch_all_feeds()

    assert [r.source for r in results] == ["Broken", "Legal Wire"]
    assert results[0].error is not None
    assert (results[0].fetched, results[0].new) == (0, 0)
    assert results[1].new == 1
    assert total_stats(results) == {"fetched": 1, "new": 1, "skipped": 0, "failed_sources": 1}
    assert all(r.url.host != "off.example" for r in web.requests)


async def test_unparseable_feed_is_a_source_failure(make_orchestrator, news_source):
    orchestrator = make_orchestrator(FakeWeb({news_source.url: b"this is not a feed"}), sources=[news_source])

    results = await orchestrator.fetch_all_feeds()

    assert results[0].error is not None
    assert results[0].new == 0


async def test_scrape_merges_rows_and_stores_each_case_once(make_orchestrator, repository):
    web = FakeWeb()
    orchestrator = make_orchestrator(web)

    stats = await orchestrator.scrape_recent_judgments(days_back=7)

    assert (stats.fetched, stats.new, stats.skipped) == (2, 2, 0)
    by_ecli = {j.ecli: j for j in repository.judgments.values()}
    assert by_ecli["ECLI:EU:C:2024:300"].subject_matter == "Tax; Competition"
    assert by_ecli["ECLI:EU:C:2024:300"].full_text == "JUDGMENT OF THE COURT"
    assert by_ecli["ECLI:EU:T:2024:301"].full_text is None
    assert web.count(EURLEX_HOST) == 1

    article = repository.articles[by_ecli["ECLI:EU:C:2024:300"].article_id]
    assert article.feed_type == FeedType.JUDGMENT
    assert article.link.endswith("CELEX:62023CJ0300")
    assert 0.0 < article.relevance_score < 1.0


async def test_rescrape_skips_known_cases_without_fetching_text(make_orchestrator, repository):
    web = FakeWeb()
    orchestrator = make_orchestrator(web)
    await orchestrator.scrape_recent_judgments(days_back=7)

    again = await orchestrator.scrape_recent_judgments(days_back=7)

    assert (again.fetched, again.new, again.skipped) == (2, 0, 2)
    assert web.count(EURLEX_HOST) == 1
    assert len(repository.judgments) == 2


async def test_scrape_failure_reports_zero_counts(make_orchestrator, repository):
    orchestrator = make_orchestrator(FakeWeb(sparql_status=503))

    stats = await orchestrator.scrape_recent_judgments()

    assert stats.error is not None
    assert (stats.fetched, stats.new) == (0, 0)
    assert repository.articles == {}


async def test_sparql_request_is_a_form_post(make_orchestrator):
    web = FakeWeb()
    await make_orchestrator(web).scrape_recent_judgments(days_back=3)

    sparql = next(r for r in web.requests if r.url.host == SPARQL_HOST)
    assert sparql.method == "POST"
    assert sparql.headers["content-type"].startswith("application/x-www-form-urlencoded")
    assert b"query=" in sparql.content


async def test_polite_delay_between_full_text_fetches(make_orchestrator, config):
    config.config.judgments.polite_delay_seconds = 0.5
    delays = []

    async def record_sleep(seconds):
        delays.append(seconds)

    class TwoCelexWeb(FakeWeb):
        def __call__(self, request):
            if request.url.host == SPARQL_HOST:
                self.requests.append(request)
                rows = sparql_rows()
                rows[2]["celex"] = {"type": "literal", "value": "62023TO0301"}
                return httpx.Response(200, json={"results": {"bindings": rows}})
            return super().__call__(request)

    web = TwoCelexWeb()
    stats = await make_orchestrator(web, sleep=record_sleep).scrape_recent_judgments(days_back=7)

    assert stats.new == 2
    assert web.count(EURLEX_HOST) == 2
    assert delays == [0.5]


async def test_refresh_feeds_runs_fetch_classify_relevance(make_orchestrator, repository, news_source):
    feed = rss_document([{"title": "Tax news", "link": "https://news.example/tax", "pubDate": hours_ago(10)}])
    provider = MockLLMProvider(responses=[json.dumps({"legal_areas": ["Tax Law"], "jurisdiction": "PT", "language": "pt"})])
    orchestrator = make_orchestrator(FakeWeb({news_source.url: feed}), sources=[news_source], llm_provider=provider)

    results = await orchestrator.refresh_feeds()

    assert results["stages"] == {"feeds": True, "classify": True, "relevance": True}
    assert results["new"] == 1
    assert results["classified"] == 1
    assert results["relevance_updated"] == 1
    article = repository.article_by_link("https://news.example/tax")
    assert article.ai_classified is True
    assert article.jurisdiction == "PT"
    assert article.relevance_score == pytest.approx(0.5, abs=1e-3)


async def test_refresh_judgments_runs_scrape_summarize_relevance(make_orchestrator, repository):
    orchestrator = make_orchestrator(FakeWeb())

    results = await orchestrator.refresh_judgments(days_back=7, batch_size=5)

    assert results["stages"] == {"scrape": True, "summarize": True, "relevance": True}
    assert results["scrape"]["new"] == 2
    assert results["summarized"] == 2
    assert all(j.ai_summarized for j in repository.judgments.values())
    assert all(a.ai_classified for a in repository.articles.values())
