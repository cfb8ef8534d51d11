"""RSS feed fetcher."""

from typing import Optional

import feedparser
import httpx
from rich.console import Console

from ..config import HttpConfig, SourceConfig
from .models import FeedResult
from .normalizer import normalize_feed_entry

console = Console()


class RSSFetcher:
    """Fetch RSS/Atom feeds and normalize their entries."""

    def __init__(
        self,
        http_config: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize RSS fetcher.

        Args:
            http_config: Timeout and User-Agent settings
            transport: Custom httpx transport (for testing)
        """
        self.http_config = http_config or HttpConfig()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.http_config.timeout_seconds,
            follow_redirects=True,
            headers={
                "User-Agent": self.http_config.user_agent,
                "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
            },
            transport=self.transport,
        )

    async def fetch_feed(self, source: SourceConfig) -> FeedResult:
        """Fetch and normalize a single feed. Never raises."""
        try:
            async with self._client() as client:
                response = await client.get(source.url)
                response.raise_for_status()
        except httpx.TimeoutException:
            return FeedResult(
                source_name=source.name,
                source_url=source.url,
                success=False,
                error="Request timed out",
            )
        except httpx.HTTPError as e:
            return FeedResult(
                source_name=source.name,
                source_url=source.url,
                success=False,
                error=f"HTTP error: {e}",
            )

        feed = feedparser.parse(response.content)

        # feedparser flags recoverable quirks as bozo too; only reject feeds it could not read
        if feed.bozo and not feed.entries:
            return FeedResult(
                source_name=source.name,
                source_url=source.url,
                success=False,
                error=f"Invalid RSS feed: {feed.get('bozo_exception')}",
            )

        drafts = []
        skipped = 0
        for entry in feed.entries:
            try:
                draft = normalize_feed_entry(entry, feed.feed, source)
            except Exception as e:
                console.print(f"[yellow]Skipping malformed entry in {source.name}: {e}[/yellow]")
                skipped += 1
                continue
            if draft is None:
                skipped += 1
                continue
            drafts.append(draft)

        return FeedResult(
            source_name=source.name,
            source_url=source.url,
            success=True,
            drafts=drafts,
            item_count=len(feed.entries),
            skipped=skipped,
        )

