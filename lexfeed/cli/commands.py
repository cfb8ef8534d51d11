"""Pipeline commands: fetch, scrape, enrich and rescore."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, List, Optional, TypeVar

import psycopg
import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..db import ArticleRepository, close_connection_pool, get_connection_pool
from ..exceptions import ConfigurationError
from ..ingestion import SourceStats
from ..pipeline import IngestionOrchestrator, total_stats

console = Console()

T = TypeVar("T")


@asynccontextmanager
async def open_orchestrator(config: Config) -> AsyncIterator[IngestionOrchestrator]:
    """Orchestrator bound to the shared pool; the pool is closed on exit."""
    pool = await get_connection_pool(config.get_db_config())
    try:
        yield IngestionOrchestrator(config, ArticleRepository(pool))
    finally:
        await close_connection_pool()


def run_with_orchestrator(action: Callable[[IngestionOrchestrator], Awaitable[T]]) -> T:
    """Load config, run one orchestrator action, map failures to exit codes."""
    try:
        config = Config()
        config.config  # fail fast on a missing or invalid config file
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Run 'lexfeed init' first.")
        raise typer.Exit(1)

    async def _run() -> T:
        async with open_orchestrator(config) as orchestrator:
            return await action(orchestrator)

    try:
        return asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(1)
    except psycopg.OperationalError as e:
        console.print(f"[red]Database unavailable: {e}[/red]")
        raise typer.Exit(1)


def print_source_stats(results: List[SourceStats]) -> None:
    """Per-source table followed by grand totals."""
    table = Table(title="Feed Fetch")
    table.add_column("Source", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Fetched", justify="right")
    table.add_column("New", justify="right", style="green")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Error", style="red")

    for result in results:
        table.add_row(
            result.source,
            result.feed_type.value,
            str(result.fetched),
            str(result.new),
            str(result.skipped),
            result.error or "",
        )

    console.print(table)
    totals = total_stats(results)
    console.print(
        f"Total: {totals['fetched']} fetched, {totals['new']} new, "
        f"{totals['skipped']} skipped, {totals['failed_sources']} failed sources"
    )


def fetch_command() -> None:
    """Fetch all enabled RSS feeds and store new articles."""
    results = run_with_orchestrator(lambda o: o.fetch_all_feeds())
    print_source_stats(results)


def scrape_judgments_command(
    days_back: Optional[int] = typer.Option(
        None,
        "--days-back",
        "-d",
        min=1,
        max=365,
        help="Look-back window in days. Default: judgments.days_back",
    ),
) -> None:
    """Fetch recent CJEU judgments via SPARQL and store new ones."""
    stats = run_with_orchestrator(lambda o: o.scrape_recent_judgments(days_back))
    if stats.error:
        console.print(f"[red]Judgment scrape failed: {stats.error}[/red]")
        raise typer.Exit(1)
    console.print(f"Judgments: {stats.fetched} fetched, {stats.new} new, {stats.skipped} skipped")


def classify_command(
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Articles per run. Default: enrichment.classify_batch_size"
    ),
) -> None:
    """Classify unclassified feed articles."""
    count = run_with_orchestrator(lambda o: o.classify_unclassified_articles(batch_size))
    console.print(f"[green]Classified {count} articles[/green]")


def summarize_command(
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Judgments per run. Default: enrichment.summarize_batch_size"
    ),
) -> None:
    """Summarize unsummarized judgments."""
    count = run_with_orchestrator(lambda o: o.summarize_unsummarized_judgments(batch_size))
    console.print(f"[green]Summarized {count} judgments[/green]")


def relevance_command() -> None:
    """Recompute relevance scores for every article."""
    count = run_with_orchestrator(lambda o: o.update_relevance_scores())
    console.print(f"[green]Updated {count} relevance scores[/green]")


def refresh_command(
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", min=1, help="Classification batch size"),
) -> None:
    """Fetch feeds, classify new articles, then rescore."""
    results = run_with_orchestrator(lambda o: o.refresh_feeds(batch_size))
    if not all(results["stages"].values()):
        raise typer.Exit(1)


def refresh_judgments_command(
    days_back: Optional[int] = typer.Option(None, "--days-back", "-d", min=1, max=365, help="Look-back window in days"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", min=1, help="Summarization batch size"),
) -> None:
    """Scrape judgments, summarize them, then rescore."""
    results = run_with_orchestrator(lambda o: o.refresh_judgments(days_back, batch_size))
    if not all(results["stages"].values()):
        raise typer.Exit(1)
