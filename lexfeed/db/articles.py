"""Article storage: deduplicated upserts and atomic enrichment writes."""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from psycopg import AsyncConnection, Rollback
from psycopg_pool import AsyncConnectionPool

from ..ingestion.models import ArticleDraft, JudgmentDraft
from ..models import Article, FeedType, JudgmentWithArticle
from .categories import get_category_map

INSERT_ARTICLE_SQL = """
    INSERT INTO articles (
        title, link, description, content, image_url, source_name,
        source_url, published_at, feed_type, jurisdiction, language,
        relevance_score
    ) VALUES (
        %(title)s, %(link)s, %(description)s, %(content)s, %(image_url)s,
        %(source_name)s, %(source_url)s, %(published_at)s, %(feed_type)s,
        %(jurisdiction)s, %(language)s, %(relevance_score)s
    )
"""


def _article_params(draft: ArticleDraft, relevance_score: float) -> Dict:
    params = draft.model_dump()
    params["feed_type"] = draft.feed_type.value
    params["relevance_score"] = relevance_score
    return params


class ArticleRepository:
    """
    Persistence for articles, judgment metadata and category links.

    Every method checks a connection out of the shared pool and returns it on
    all exit paths. Multi-statement writes run in a single transaction.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """Initialize repository with a shared connection pool."""
        self.pool = pool

    async def upsert_feed_article(self, draft: ArticleDraft, relevance_score: float = 1.0) -> bool:
        """
        Insert a feed article, or fill in its image if the stored one is null.

        No other column of an existing row is touched. Returns True only when
        a new row was created.
        """
        async with self.pool.connection() as conn:
            cur = await conn.execute(
                INSERT_ARTICLE_SQL
                + """
                ON CONFLICT (link) DO UPDATE SET image_url = EXCLUDED.image_url
                WHERE articles.image_url IS NULL AND EXCLUDED.image_url IS NOT NULL
                RETURNING (xmax = 0) AS inserted
                """,
                _article_params(draft, relevance_score),
            )
            row = await cur.fetchone()
            return bool(row and row["inserted"])

    async def judgment_exists(self, ecli: str, link: str) -> bool:
        """Whether a judgment is already stored under this ECLI or link."""
        async with self.pool.connection() as conn:
            cur = await conn.execute(
                """
                SELECT
                    EXISTS (SELECT 1 FROM judgment_metadata WHERE ecli = %s)
                    OR EXISTS (SELECT 1 FROM articles WHERE link = %s) AS found
                """,
                (ecli, link),
            )
            row = await cur.fetchone()
            return bool(row["found"])

    async def insert_judgment(
        self,
        article: ArticleDraft,
        judgment: JudgmentDraft,
        relevance_score: float = 1.0,
    ) -> bool:
        """
        Store a judgment article and its metadata together, first write wins.

        If either the link or the ECLI is already present, nothing is written
        and False is returned.
        """
        inserted = False
        async with self.pool.connection() as conn:
            async with conn.transaction() as tx:
                cur = await conn.execute(
                    INSERT_ARTICLE_SQL + " ON CONFLICT (link) DO NOTHING RETURNING id",
                    _article_params(article, relevance_score),
                )
                row = await cur.fetchone()
                if row is None:
                    raise Rollback(tx)

                cur = await conn.execute(
                    """
                    INSERT INTO judgment_metadata (
                        article_id, case_number, ecli, court, chamber,
                        judge_rapporteur, advocate_general, procedure_type,
                        subject_matter, document_type, decision_date,
                        celex_number, case_language, full_text, parties,
                        cellar_uri
                    ) VALUES (
                        %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                    )
                    ON CONFLICT (ecli) DO NOTHING
                    RETURNING id
                    """,
                    (
                        row["id"],
                        judgment.celex,
                        judgment.ecli,
                        judgment.court,
                        judgment.formation,
                        judgment.judge_rapporteur,
                        judgment.advocate_general,
                        judgment.procedure_type,
                        judgment.subject_matter,
                        judgment.document_type,
                        judgment.decision_date,
                        judgment.celex,
                        judgment.case_language,
                        judgment.full_text,
                        judgment.title,
                        judgment.cellar_uri,
                    ),
                )
                if await cur.fetchone() is None:
                    # Same case already stored under a different link
                    raise Rollback(tx)

                inserted = True
        return inserted

    async def get_unclassified_articles(self, limit: int) -> List[Article]:
        """Newest non-judgment articles still awaiting classification."""
        async with self.pool.connection() as conn:
            cur = await conn.execute(
                """
                SELECT * FROM articles
                WHERE ai_classified = FALSE AND feed_type <> %s
                ORDER BY published_at DESC
                LIMIT %s
                """,
                (FeedType.JUDGMENT.value, limit),
            )
            rows = await cur.fetchall()
            return [Article.model_validate(row) for row in rows]

    async def get_unsummarized_judgments(self, limit: int) -> List[JudgmentWithArticle]:
        """Newest judgments still awaiting summarization."""
        async with self.pool.connection() as conn:
            cur = await conn.execute(
                """
                SELECT jm.*, a.title, a.description
                FROM judgment_metadata jm
                JOIN articles a ON a.id = jm.article_id
                WHERE jm.ai_summarized = FALSE
                ORDER BY jm.decision_date DESC NULLS LAST
                LIMIT %s
                """,
                (limit,),
            )
            rows = await cur.fetchall()
            return [JudgmentWithArticle.model_validate(row) for row in rows]

    async def get_category_map(self) -> Dict[str, int]:
        """Category name to id."""
        async with self.pool.connection() as conn:
            return await get_category_map(conn)

    async def _link_categories(
        self, conn: AsyncConnection, article_id: int, category_ids: Iterable[int]
    ) -> None:
        params = [(article_id, category_id) for category_id in category_ids]
        if not params:
            return
        async with conn.cursor() as cur:
            await cur.executemany(
                """
                INSERT INTO article_categories (article_id, category_id)
                VALUES (%s, %s)
                ON CONFLICT DO NOTHING
                """,
                params,
            )

    async def apply_classification(
        self,
        article_id: int,
        jurisdiction: Optional[str],
        language: Optional[str],
        category_ids: Sequence[int],
    ) -> bool:
        """
        Mark an article classified and attach its categories, atomically.

        Jurisdiction and language are only replaced when a value is given.
        Returns False, writing nothing, if the article was already classified.
        """
        applied = False
        async with self.pool.connection() as conn:
            async with conn.transaction() as tx:
                cur = await conn.execute(
                    """
                    UPDATE articles
                    SET
                        jurisdiction = COALESCE(%s, jurisdiction),
                        language = COALESCE(%s, language, 'en'),
                        ai_classified = TRUE
                    WHERE id = %s AND ai_classified = FALSE
                    """,
                    (jurisdiction, language, article_id),
                )
                if cur.rowcount == 0:
                    raise Rollback(tx)

                await self._link_categories(conn, article_id, category_ids)
                applied = True
        return applied

    async def apply_judgment_summary(
        self,
        judgment_id: int,
        article_id: int,
        summary: str,
        jurisdiction: Optional[str],
        significance: Optional[str],
        category_ids: Sequence[int],
    ) -> bool:
        """
        Store a judgment summary and classify its article, atomically.

        An empty article description is filled with the significance line.
        Returns False, writing nothing, if the judgment was already summarized.
        """
        applied = False
        async with self.pool.connection() as conn:
            async with conn.transaction() as tx:
                cur = await conn.execute(
                    """
                    UPDATE judgment_metadata
                    SET ai_summary = %s, ai_summarized = TRUE
                    WHERE id = %s AND ai_summarized = FALSE
                    """,
                    (summary, judgment_id),
                )
                if cur.rowcount == 0:
                    raise Rollback(tx)

                await conn.execute(
                    """
                    UPDATE articles
                    SET
                        ai_classified = TRUE,
                        jurisdiction = COALESCE(%s, jurisdiction),
                        description = CASE
                            WHEN description = '' THEN COALESCE(%s, '')
                            ELSE description
                        END
                    WHERE id = %s
                    """,
                    (jurisdiction, significance, article_id),
                )

                await self._link_categories(conn, article_id, category_ids)
                applied = True
        return applied

    async def get_scoring_rows(self) -> List[Tuple[int, str, datetime]]:
        """(id, feed_type, published_at) for every article."""
        async with self.pool.connection() as conn:
            cur = await conn.execute("SELECT id, feed_type, published_at FROM articles")
            rows = await cur.fetchall()
            return [(row["id"], row["feed_type"], row["published_at"]) for row in rows]

    async def update_relevance_scores(self, scores: Sequence[Tuple[int, float]]) -> int:
        """Persist (article_id, score) pairs in one transaction."""
        if not scores:
            return 0
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.executemany(
                        "UPDATE articles SET relevance_score = %s WHERE id = %s",
                        [(score, article_id) for article_id, score in scores],
                    )
        return len(scores)
