"""Legal category storage."""

from typing import Dict, List, Sequence, Tuple

from psycopg import AsyncConnection

from ..models import LegalCategory
from ..taxonomy import LEGAL_CATEGORIES


async def seed_categories(
    conn: AsyncConnection,
    categories: Sequence[Tuple[str, str]] = LEGAL_CATEGORIES,
) -> int:
    """Insert the fixed taxonomy; existing entries are left alone."""
    seeded = 0
    async with conn.cursor() as cur:
        for name, slug in categories:
            await cur.execute(
                """
                INSERT INTO legal_categories (name, slug)
                VALUES (%s, %s)
                ON CONFLICT DO NOTHING
                """,
                (name, slug),
            )
            seeded += cur.rowcount
    return seeded


async def get_category_map(conn: AsyncConnection) -> Dict[str, int]:
    """Category name to id, for exact-name resolution of classifier labels."""
    cur = await conn.execute("SELECT id, name FROM legal_categories")
    rows = await cur.fetchall()
    return {row["name"]: row["id"] for row in rows}


async def list_categories(conn: AsyncConnection) -> List[LegalCategory]:
    """All taxonomy entries ordered by name."""
    cur = await conn.execute("SELECT * FROM legal_categories ORDER BY name")
    rows = await cur.fetchall()
    return [LegalCategory.model_validate(row) for row in rows]
