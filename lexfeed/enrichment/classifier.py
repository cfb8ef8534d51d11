"""Article classification: legal areas, jurisdiction and language."""

from typing import Optional

import psycopg
from rich.console import Console

from ..exceptions import EnrichmentError
from ..models import Article
from .base import BaseEnricher
from .models import ClassificationResult
from .prompts import build_classification_prompt

console = Console()


class ArticleClassifier(BaseEnricher):
    """Classify feed articles that have not been classified yet."""

    async def classify_article(self, article: Article) -> ClassificationResult:
        """Classify one article; raises EnrichmentError on call or parse failure."""
        prompt = build_classification_prompt(article, self.config.classification_excerpt_chars)
        return await self._call_for_json(
            prompt, self.llm_config.classification_max_tokens, ClassificationResult
        )

    async def classify_unclassified_articles(self, batch_size: Optional[int] = None) -> int:
        """
        Classify the newest unclassified articles.

        Returns:
            Number of articles whose classification was stored
        """
        if batch_size is None:
            batch_size = self.config.classify_batch_size

        articles = await self.repository.get_unclassified_articles(batch_size)
        if not articles:
            console.print("[dim]No unclassified articles found.[/dim]")
            return 0

        console.print(f"Classifying {len(articles)} articles...")
        category_map = await self.repository.get_category_map()

        classified = 0
        for article in articles:
            try:
                result = await self.classify_article(article)
            except EnrichmentError as e:
                console.print(f"[red]Classification failed for article {article.id}: {e}[/red]")
                continue

            category_ids = self.resolve_category_ids(result.legal_areas, category_map)

            try:
                applied = await self.repository.apply_classification(
                    article.id,
                    result.jurisdiction,
                    result.language,
                    category_ids,
                )
            except psycopg.OperationalError:
                raise
            except psycopg.Error as e:
                console.print(
                    f"[red]Failed to save classification for article {article.id}: {e}[/red]"
                )
                continue

            if applied:
                classified += 1
            else:
                console.print(f"[dim]Article {article.id} was classified by another run[/dim]")

        console.print(f"Classified {classified}/{len(articles)} articles.")
        return classified
