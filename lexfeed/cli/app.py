"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .commands import (
    classify_command,
    fetch_command,
    refresh_command,
    refresh_judgments_command,
    relevance_command,
    scrape_judgments_command,
    summarize_command,
)
from .init import init_command
from .sources import categories_command, sources_app

app = typer.Typer(
    name="lexfeed",
    help="Legal news and CJEU judgment ingestion",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("fetch")(fetch_command)
app.command("scrape-judgments")(scrape_judgments_command)
app.command("classify")(classify_command)
app.command("summarize")(summarize_command)
app.command("relevance")(relevance_command)
app.command("refresh")(refresh_command)
app.command("refresh-judgments")(refresh_judgments_command)
app.command("categories")(categories_command)
app.add_typer(sources_app, name="sources", help="Inspect RSS sources")


if __name__ == "__main__":
    app()
