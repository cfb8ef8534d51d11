"""Shared fixtures: an in-memory article store and offline collaborators."""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set, Tuple

import httpx
import pendulum
import pytest

from lexfeed.config import Config, ConfigModel, SourceConfig
from lexfeed.enrichment import MockLLMProvider
from lexfeed.ingestion import ArticleDraft, JudgmentDraft, JudgmentFetcher, RSSFetcher
from lexfeed.models import Article, FeedType, JudgmentWithArticle
from lexfeed.pipeline import IngestionOrchestrator
from lexfeed.taxonomy import LEGAL_CATEGORIES


class InMemoryArticleRepository:
    """Same contract as ArticleRepository, backed by dicts."""

    def __init__(self) -> None:
        self.articles: Dict[int, Article] = {}
        self.judgments: Dict[int, JudgmentWithArticle] = {}
        self.links: Set[Tuple[int, int]] = set()
        self.categories: Dict[str, int] = {name: i + 1 for i, (name, _) in enumerate(LEGAL_CATEGORIES)}
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def article_by_link(self, link: str) -> Optional[Article]:
        return next((a for a in self.articles.values() if a.link == link), None)

    def categories_for(self, article_id: int) -> List[str]:
        names = {v: k for k, v in self.categories.items()}
        return sorted(names[c] for a, c in self.links if a == article_id)

    def _insert_article(self, draft: ArticleDraft, relevance_score: float) -> Article:
        article = Article(id=self._new_id(), relevance_score=relevance_score, **draft.model_dump())
        self.articles[article.id] = article
        return article

    async def upsert_feed_article(self, draft: ArticleDraft, relevance_score: float = 1.0) -> bool:
        existing = self.article_by_link(draft.link)
        if existing is not None:
            if existing.image_url is None and draft.image_url is not None:
                existing.image_url = draft.image_url
            return False
        self._insert_article(draft, relevance_score)
        return True

    async def judgment_exists(self, ecli: str, link: str) -> bool:
        return any(j.ecli == ecli for j in self.judgments.values()) or self.article_by_link(link) is not None

    async def insert_judgment(
        self, article: ArticleDraft, judgment: JudgmentDraft, relevance_score: float = 1.0
    ) -> bool:
        if await self.judgment_exists(judgment.ecli, article.link):
            return False
        stored = self._insert_article(article, relevance_score)
        record = JudgmentWithArticle(
            id=self._new_id(),
            article_id=stored.id,
            ecli=judgment.ecli,
            celex_number=judgment.celex,
            case_number=judgment.celex,
            court=judgment.court,
            chamber=judgment.formation,
            procedure_type=judgment.procedure_type,
            subject_matter=judgment.subject_matter,
            document_type=judgment.document_type,
            decision_date=judgment.decision_date,
            parties=judgment.title,
            cellar_uri=judgment.cellar_uri,
            full_text=judgment.full_text,
            title=stored.title,
            description=stored.description,
        )
        self.judgments[record.id] = record
        return True

    async def get_unclassified_articles(self, limit: int) -> List[Article]:
        pending = [a for a in self.articles.values() if not a.ai_classified and a.feed_type != FeedType.JUDGMENT]
        pending.sort(key=lambda a: a.published_at, reverse=True)
        return [a.model_copy() for a in pending[:limit]]

    async def get_unsummarized_judgments(self, limit: int) -> List[JudgmentWithArticle]:
        pending = [j for j in self.judgments.values() if not j.ai_summarized]
        pending.sort(key=lambda j: j.decision_date or datetime.min.date(), reverse=True)
        return [j.model_copy() for j in pending[:limit]]

    async def get_category_map(self) -> Dict[str, int]:
        return dict(self.categories)

    async def apply_classification(
        self,
        article_id: int,
        jurisdiction: Optional[str],
        language: Optional[str],
        category_ids: Sequence[int],
    ) -> bool:
        article = self.articles[article_id]
        if article.ai_classified:
            return False
        article.jurisdiction = jurisdiction or article.jurisdiction
        article.language = language or article.language or "en"
        article.ai_classified = True
        self.links.update((article_id, c) for c in category_ids)
        return True

    async def apply_judgment_summary(
        self,
        judgment_id: int,
        article_id: int,
        summary: str,
        jurisdiction: Optional[str],
        significance: Optional[str],
        category_ids: Sequence[int],
    ) -> bool:
        judgment = self.judgments[judgment_id]
        if judgment.ai_summarized:
            return False
        judgment.ai_summary = summary
        judgment.ai_summarized = True
        article = self.articles[article_id]
        article.ai_classified = True
        article.jurisdiction = jurisdiction or article.jurisdiction
        if not article.description:
            article.description = significance or ""
        self.links.update((article_id, c) for c in category_ids)
        return True

    async def get_scoring_rows(self) -> List[Tuple[int, str, datetime]]:
        return [(a.id, a.feed_type.value, a.published_at) for a in self.articles.values()]

    async def update_relevance_scores(self, scores: Sequence[Tuple[int, float]]) -> int:
        for article_id, score in scores:
            self.articles[article_id].relevance_score = score
        return len(scores)


def rss_document(items: List[Dict[str, str]], title: str = "Legal Wire") -> bytes:
    """Minimal RSS 2.0 document."""
    parts = []
    for item in items:
        fields = "".join(f"<{key}>{value}</{key}>" for key, value in item.items())
        parts.append(f"<item>{fields}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://legalwire.example</link>"
        f"{''.join(parts)}"
        "</channel></rss>"
    ).encode("utf-8")


def hours_ago(hours: float) -> str:
    return pendulum.now("UTC").subtract(hours=hours).to_rfc2822_string()


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def repository() -> InMemoryArticleRepository:
    return InMemoryArticleRepository()


@pytest.fixture
def config(tmp_path) -> Config:
    model = ConfigModel(llm={"provider": "mock"}, judgments={"polite_delay_seconds": 0.0})
    return Config.from_model(model, tmp_path / "config.yaml")


@pytest.fixture
def news_source() -> SourceConfig:
    return SourceConfig(name="Legal Wire", url="https://feeds.example/news.xml", feed_type=FeedType.NEWS)


@pytest.fixture
def make_orchestrator(config, repository):
    """Build an orchestrator whose HTTP calls go to a handler function."""

    def _make(
        handler,
        sources: Optional[List[SourceConfig]] = None,
        llm_provider: Optional[MockLLMProvider] = None,
        sleep=no_sleep,
    ) -> IngestionOrchestrator:
        transport = httpx.MockTransport(handler)
        settings = config.config
        return IngestionOrchestrator(
            config,
            repository,
            sources=sources or [],
            rss_fetcher=RSSFetcher(settings.http, transport=transport),
            judgment_fetcher=JudgmentFetcher(settings.judgments, settings.http, transport=transport),
            llm_provider=llm_provider or MockLLMProvider(),
            sleep=sleep,
        )

    return _make
