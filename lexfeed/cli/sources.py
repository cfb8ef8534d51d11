"""Source and taxonomy listing commands."""

import asyncio
from typing import List

import psycopg
import typer
from rich.console import Console
from rich.table import Table

from ..config import Config, load_sources
from ..db import close_connection_pool, get_connection
from ..db.categories import list_categories
from ..exceptions import ConfigurationError
from ..models import LegalCategory

console = Console()
sources_app = typer.Typer(help="Inspect RSS sources")


@sources_app.command("list")
def sources_list() -> None:
    """List all configured sources."""
    config = Config()

    try:
        sources = load_sources(config.sources_path)
    except ConfigurationError as e:
        console.print(f"[red]{e}. Run 'lexfeed init' first.[/red]")
        raise typer.Exit(1)

    if not sources:
        console.print("[yellow]No sources configured.[/yellow]")
        return

    # Create table
    table = Table(title="Configured Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Enabled", style="yellow")
    table.add_column("URL", style="blue")

    for source in sources:
        table.add_row(
            source.name,
            source.feed_type.value,
            "✓" if source.enabled else "✗",
            source.url,
        )

    console.print(table)


async def _stored_categories(config: Config) -> List[LegalCategory]:
    try:
        async with get_connection(config.get_db_config()) as conn:
            return await list_categories(conn)
    finally:
        await close_connection_pool()


def categories_command() -> None:
    """List the legal category taxonomy stored in the database."""
    try:
        categories = asyncio.run(_stored_categories(Config()))
    except ConfigurationError as e:
        console.print(f"[red]{e}. Run 'lexfeed init' first.[/red]")
        raise typer.Exit(1)
    except psycopg.OperationalError as e:
        console.print(f"[red]Database unavailable: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Legal Categories")
    table.add_column("Name", style="cyan")
    table.add_column("Slug", style="magenta")

    for category in categories:
        table.add_row(category.name, category.slug)

    console.print(table)
