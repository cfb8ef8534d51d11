"""Init command implementation."""

import asyncio
from pathlib import Path
from typing import List

import psycopg
import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, SourceConfig, save_config, save_sources
from ..db import close_connection_pool, init_database, validate_connection
from ..models import FeedType

console = Console()


def create_default_sources() -> List[SourceConfig]:
    """Create default legal news sources."""
    return [
        SourceConfig(
            name="Legal News",
            url="https://rss.app/feeds/_wFzzGEbWrnRHQnox.xml",
            feed_type=FeedType.NEWS,
            enabled=True,
        ),
        SourceConfig(
            name="Legal Blogs",
            url="https://rss.app/feeds/_1zigjyGFzmQ40NLk.xml",
            feed_type=FeedType.BLOGPOST,
            enabled=True,
        ),
        SourceConfig(
            name="Regulatory Updates",
            url="https://rss.app/feeds/_UuzpzghFv55Ljedv.xml",
            feed_type=FeedType.REGULATORY,
            enabled=True,
        ),
    ]


async def _setup_database(db_config: dict) -> int:
    try:
        if not await validate_connection(db_config):
            return -1
        return await init_database(db_config)
    finally:
        await close_connection_pool()


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "lexfeed",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("lexfeed", "--db-name", help="Database name"),
    db_user: str = typer.Option("lexfeed_user", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed default legal news sources",
    ),
) -> None:
    """Initialize configuration, database schema and category taxonomy."""
    console.print(Panel.fit("⚖️ LexFeed - Initialization", style="bold blue"))

    # Create configuration directory
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    # Create default configuration
    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "LEXFEED_DB_PASSWORD",
        },
    )

    # Save configuration
    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    # Create sources file
    if seed_sources:
        sources = create_default_sources()
        save_sources(sources, sources_path)
        console.print(f"✅ Created sources: {sources_path} (seeded with {len(sources)} sources)")
    else:
        save_sources([], sources_path)
        console.print(f"✅ Created sources: {sources_path} (empty)")

    # Validate connection, then create schema and seed categories
    console.print("\n[bold]Initializing database...[/bold]")
    try:
        seeded = asyncio.run(_setup_database(config.postgres.model_dump()))
    except psycopg.Error as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    if seeded < 0:
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export LEXFEED_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print(f"✅ Database schema initialized ({seeded} categories seeded)")

    # Success message
    console.print(
        Panel(
            f"[green]✅ LexFeed initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sources: {sources_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export LEXFEED_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]\n"
            f"3. Run: [bold]lexfeed refresh[/bold]",
            style="green",
        )
    )
