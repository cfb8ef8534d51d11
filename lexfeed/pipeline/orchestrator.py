"""Ingestion orchestrator: sources in, deduplicated and scored records out."""

import asyncio
import time
from typing import Awaitable, Callable, Dict, List, Optional

import psycopg
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import Config, SourceConfig, load_sources
from ..db.articles import ArticleRepository
from ..enrichment import ArticleClassifier, JudgmentSummarizer, LLMProvider, create_llm_provider
from ..exceptions import SourceFetchError
from ..ingestion import (
    JudgmentFetcher,
    JudgmentScrapeStats,
    RSSFetcher,
    SourceStats,
    build_judgment_link,
    judgment_to_article,
)
from ..ranking import RelevanceScorer, RelevanceUpdater

console = Console()


class PipelineStage:
    """Represents a pipeline stage."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.success = False
        self.error: Optional[str] = None
        self.stats: Dict = {}

    def start(self):
        """Mark stage as started."""
        self.start_time = time.time()

    def complete(self, stats: Optional[Dict] = None):
        """Mark stage as completed successfully."""
        self.end_time = time.time()
        self.success = True
        if stats:
            self.stats.update(stats)

    def fail(self, error: str):
        """Mark stage as failed."""
        self.end_time = time.time()
        self.success = False
        self.error = error

    @property
    def duration(self) -> float:
        """Get stage duration in seconds."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


class IngestionOrchestrator:
    """
    Runs ingestion, enrichment and relevance refresh against one store.

    Sources and items are processed one after another. A failure in one
    source or item is logged and counted, never raised. Only store
    unavailability propagates to the caller.
    """

    def __init__(
        self,
        config: Config,
        repository: ArticleRepository,
        sources: Optional[List[SourceConfig]] = None,
        rss_fetcher: Optional[RSSFetcher] = None,
        judgment_fetcher: Optional[JudgmentFetcher] = None,
        llm_provider: Optional[LLMProvider] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            config: Loaded configuration
            repository: Article store
            sources: Feed sources; read from sources.yaml when omitted
            rss_fetcher: Feed fetcher override (for testing)
            judgment_fetcher: Judgment fetcher override (for testing)
            llm_provider: Provider override; built from config when omitted
            sleep: Coroutine used for the polite delay between scrapes
        """
        self.config = config
        self.repository = repository
        self._sources = sources
        settings = config.config

        self.rss_fetcher = rss_fetcher or RSSFetcher(settings.http)
        self.judgment_fetcher = judgment_fetcher or JudgmentFetcher(settings.judgments, settings.http)
        self.llm_provider = llm_provider or create_llm_provider(
            config.get_llm_config(), timeout=settings.http.timeout_seconds
        )
        self.scorer = RelevanceScorer.from_config(settings.relevance)
        self.classifier = ArticleClassifier(repository, self.llm_provider, settings.enrichment, settings.llm)
        self.summarizer = JudgmentSummarizer(repository, self.llm_provider, settings.enrichment, settings.llm)
        self.relevance_updater = RelevanceUpdater(repository, self.scorer)
        self._sleep = sleep

        # Overlapping triggers in this process wait for the in-flight run
        self._feeds_lock = asyncio.Lock()
        self._judgments_lock = asyncio.Lock()

    @property
    def sources(self) -> List[SourceConfig]:
        """Configured feed sources."""
        if self._sources is None:
            self._sources = load_sources(self.config.sources_path)
        return self._sources

    async def fetch_feed(self, source: SourceConfig) -> SourceStats:
        """Fetch one feed and upsert its items."""
        stats = SourceStats(source=source.name, feed_type=source.feed_type)
        console.print(f"[dim]Fetching {source.feed_type.value} feed: {source.url}[/dim]")

        result = await self.rss_fetcher.fetch_feed(source)
        if not result.success:
            console.print(f"[red]Failed to fetch feed {source.name}: {result.error}[/red]")
            stats.error = result.error
            return stats

        stats.fetched = result.item_count
        stats.skipped = result.skipped

        for draft in result.drafts:
            score = self.scorer.score(draft.feed_type, draft.published_at)
            try:
                is_new = await self.repository.upsert_feed_article(draft, score)
            except psycopg.OperationalError:
                raise
            except psycopg.Error as e:
                console.print(f"[red]Failed to insert article {draft.title!r}: {e}[/red]")
                stats.skipped += 1
                continue
            if is_new:
                stats.new += 1

        console.print(f"{source.name}: fetched {stats.fetched} items, {stats.new} new")
        return stats

    async def fetch_all_feeds(self) -> List[SourceStats]:
        """
        Fetch every enabled feed source in configuration order.

        Returns:
            Per-source counts; failed sources report zero fetched and new
        """
        async with self._feeds_lock:
            console.print("Starting feed fetch cycle...")
            results = []
            for source in self.sources:
                if not source.enabled:
                    continue
                results.append(await self.fetch_feed(source))

            console.print("Feed fetch cycle complete.")
            return results

    async def scrape_recent_judgments(self, days_back: Optional[int] = None) -> JudgmentScrapeStats:
        """
        Pull recent CJEU judgments and store the ones not seen before.

        Full text is scraped only for unknown cases, with a polite delay
        between EUR-Lex requests.
        """
        if days_back is None:
            days_back = self.config.config.judgments.days_back

        async with self._judgments_lock:
            console.print(f"Querying SPARQL for judgments from the last {days_back} days...")
            try:
                judgments = await self.judgment_fetcher.fetch_recent_judgments(days_back)
            except SourceFetchError as e:
                console.print(f"[red]SPARQL query failed: {e}[/red]")
                return JudgmentScrapeStats(error=str(e))

            stats = JudgmentScrapeStats(fetched=len(judgments))
            delay = self.config.config.judgments.polite_delay_seconds
            scraped_any = False

            for judgment in judgments:
                link = build_judgment_link(judgment)
                if await self.repository.judgment_exists(judgment.ecli, link):
                    stats.skipped += 1
                    continue

                if judgment.celex:
                    if scraped_any and delay > 0:
                        await self._sleep(delay)
                    judgment.full_text = await self.judgment_fetcher.fetch_full_text(judgment.celex)
                    scraped_any = True

                article = judgment_to_article(judgment)
                score = self.scorer.score(article.feed_type, article.published_at)

                try:
                    inserted = await self.repository.insert_judgment(article, judgment, score)
                except psycopg.OperationalError:
                    raise
                except psycopg.Error as e:
                    console.print(f"[red]Failed to store {judgment.ecli}: {e}[/red]")
                    stats.skipped += 1
                    continue

                if inserted:
                    stats.new += 1
                    console.print(f"[green]New:[/green] {judgment.ecli} - {article.title[:60]}")
                else:
                    stats.skipped += 1

            console.print(f"Judgment scrape complete. {stats.new} new judgments stored.")
            return stats

    async def classify_unclassified_articles(self, batch_size: Optional[int] = None) -> int:
        """Classify a batch of unclassified feed articles."""
        return await self.classifier.classify_unclassified_articles(batch_size)

    async def summarize_unsummarized_judgments(self, batch_size: Optional[int] = None) -> int:
        """Summarize a batch of unsummarized judgments."""
        return await self.summarizer.summarize_unsummarized_judgments(batch_size)

    async def update_relevance_scores(self) -> int:
        """Refresh the relevance score of every article."""
        return await self.relevance_updater.update_relevance_scores()

    async def refresh_feeds(self, batch_size: Optional[int] = None) -> Dict:
        """Feeds, then classification, then relevance."""
        stages = [
            PipelineStage("feeds", "Fetching RSS feeds"),
            PipelineStage("classify", "Classifying articles"),
            PipelineStage("relevance", "Updating relevance scores"),
        ]

        async def feeds() -> Dict:
            results = await self.fetch_all_feeds()
            return {"feeds": [r.model_dump(mode="json") for r in results], **total_stats(results)}

        async def classify() -> Dict:
            return {"classified": await self.classify_unclassified_articles(batch_size)}

        async def relevance() -> Dict:
            return {"relevance_updated": await self.update_relevance_scores()}

        return await self._run_stages(stages, [feeds, classify, relevance])

    async def refresh_judgments(self, days_back: Optional[int] = None, batch_size: Optional[int] = None) -> Dict:
        """Judgment scrape, then summarization, then relevance."""
        stages = [
            PipelineStage("scrape", "Scraping CJEU judgments"),
            PipelineStage("summarize", "Summarizing judgments"),
            PipelineStage("relevance", "Updating relevance scores"),
        ]

        async def scrape() -> Dict:
            return {"scrape": (await self.scrape_recent_judgments(days_back)).model_dump()}

        async def summarize() -> Dict:
            return {"summarized": await self.summarize_unsummarized_judgments(batch_size)}

        async def relevance() -> Dict:
            return {"relevance_updated": await self.update_relevance_scores()}

        return await self._run_stages(stages, [scrape, summarize, relevance])

    async def _run_stages(
        self,
        stages: List[PipelineStage],
        steps: List[Callable[[], Awaitable[Dict]]],
    ) -> Dict:
        """Run steps in order; each stage still runs if an earlier one failed."""
        results: Dict = {}
        for stage, step in zip(stages, steps):
            stage.start()
            try:
                stats = await step()
            except psycopg.OperationalError:
                stage.fail("store unavailable")
                self._print_summary(stages)
                raise
            except Exception as e:
                console.print(f"[red]Stage {stage.name} failed: {e}[/red]")
                stage.fail(str(e))
                continue
            stage.complete(stats)
            results.update(stats)

        self._print_summary(stages)
        results["stages"] = {s.name: s.success for s in stages}
        return results

    def _print_summary(self, stages: List[PipelineStage]) -> None:
        """Print pipeline execution summary."""
        table = Table(title="Pipeline Summary")
        table.add_column("Stage", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Duration", style="yellow")
        table.add_column("Details", style="dim")

        for stage in stages:
            status = "[green]ok[/green]" if stage.success else "[red]failed[/red]"
            duration = f"{stage.duration:.1f}s" if stage.duration > 0 else "-"
            if stage.success:
                details = ", ".join(
                    f"{key}={value}" for key, value in stage.stats.items() if not isinstance(value, (list, dict))
                )
            else:
                details = stage.error or "Failed"
            table.add_row(stage.name.title(), status, duration, details)

        console.print(table)

        failed = [s.name for s in stages if not s.success]
        if failed:
            console.print(Panel(f"[red]Failed stages: {', '.join(failed)}[/red]", style="red"))


def total_stats(results: List[SourceStats]) -> Dict[str, int]:
    """Grand totals across sources."""
    return {
        "fetched": sum(r.fetched for r in results),
        "new": sum(r.new for r in results),
        "skipped": sum(r.skipped for r in results),
        "failed_sources": sum(1 for r in results if r.error),
    }
