"""CJEU judgment summarization."""

from typing import Optional

import psycopg
from rich.console import Console

from ..exceptions import EnrichmentError
from ..models import JudgmentWithArticle
from .base import BaseEnricher
from .models import JudgmentSummaryResult
from .prompts import build_judgment_prompt

console = Console()


class JudgmentSummarizer(BaseEnricher):
    """Summarize stored judgments that have no summary yet."""

    async def summarize_judgment(self, judgment: JudgmentWithArticle) -> JudgmentSummaryResult:
        """Summarize one judgment; raises EnrichmentError on call or parse failure."""
        prompt = build_judgment_prompt(judgment, self.config.judgment_excerpt_chars)
        return await self._call_for_json(
            prompt, self.llm_config.summary_max_tokens, JudgmentSummaryResult
        )

    async def summarize_unsummarized_judgments(self, batch_size: Optional[int] = None) -> int:
        """
        Summarize the most recent unsummarized judgments.

        Each stored summary also marks the judgment's article as classified
        and links its legal areas.

        Returns:
            Number of judgments whose summary was stored
        """
        if batch_size is None:
            batch_size = self.config.summarize_batch_size

        judgments = await self.repository.get_unsummarized_judgments(batch_size)
        if not judgments:
            console.print("[dim]No unsummarized judgments found.[/dim]")
            return 0

        console.print(f"Summarizing {len(judgments)} judgments...")
        category_map = await self.repository.get_category_map()

        summarized = 0
        for judgment in judgments:
            try:
                result = await self.summarize_judgment(judgment)
            except EnrichmentError as e:
                console.print(f"[red]Summarization failed for {judgment.ecli}: {e}[/red]")
                continue

            category_ids = self.resolve_category_ids(result.legal_areas, category_map)

            try:
                applied = await self.repository.apply_judgment_summary(
                    judgment.id,
                    judgment.article_id,
                    result.summary,
                    result.jurisdiction,
                    result.significance,
                    category_ids,
                )
            except psycopg.OperationalError:
                raise
            except psycopg.Error as e:
                console.print(f"[red]Failed to save summary for {judgment.ecli}: {e}[/red]")
                continue

            if applied:
                summarized += 1
                console.print(f"[green]Summarized:[/green] {judgment.ecli}")
            else:
                console.print(f"[dim]{judgment.ecli} was summarized by another run[/dim]")

        console.print(f"Summarized {summarized}/{len(judgments)} judgments.")
        return summarized
