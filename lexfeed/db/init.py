"""Database initialization and schema management."""

from typing import Any, Dict

import psycopg
from psycopg.errors import DatabaseError
from rich.console import Console

from .categories import seed_categories
from .connection import get_connection

console = Console()


SCHEMA_SQL = """
-- Articles table
CREATE TABLE IF NOT EXISTS articles (
    id SERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    link TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    image_url TEXT,
    source_name TEXT NOT NULL DEFAULT '',
    source_url TEXT NOT NULL DEFAULT '',
    published_at TIMESTAMPTZ NOT NULL,
    feed_type TEXT NOT NULL CHECK (feed_type IN ('news', 'blogpost', 'regulatory', 'judgment')),
    jurisdiction TEXT,
    language TEXT,
    relevance_score DOUBLE PRECISION NOT NULL DEFAULT 1.0
        CHECK (relevance_score >= 0 AND relevance_score <= 1),
    ai_classified BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(link)
);

-- Judgment metadata, one row per judgment article
CREATE TABLE IF NOT EXISTS judgment_metadata (
    id SERIAL PRIMARY KEY,
    article_id INTEGER NOT NULL UNIQUE REFERENCES articles(id) ON DELETE CASCADE,
    ecli TEXT NOT NULL UNIQUE,
    celex_number TEXT,
    case_number TEXT,
    court TEXT,
    chamber TEXT,
    judge_rapporteur TEXT,
    advocate_general TEXT,
    procedure_type TEXT,
    subject_matter TEXT,
    document_type TEXT,
    decision_date DATE,
    case_language TEXT,
    parties TEXT,
    cellar_uri TEXT,
    full_text TEXT CHECK (full_text IS NULL OR length(full_text) <= 50000),
    ai_summary TEXT,
    ai_summarized BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Legal category taxonomy
CREATE TABLE IF NOT EXISTS legal_categories (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    slug TEXT NOT NULL UNIQUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Article categories link table
CREATE TABLE IF NOT EXISTS article_categories (
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    category_id INTEGER NOT NULL REFERENCES legal_categories(id) ON DELETE CASCADE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (article_id, category_id)
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles(published_at DESC);
CREATE INDEX IF NOT EXISTS idx_articles_relevance ON articles(relevance_score DESC);
CREATE INDEX IF NOT EXISTS idx_articles_feed_type ON articles(feed_type);
CREATE INDEX IF NOT EXISTS idx_articles_jurisdiction ON articles(jurisdiction);
CREATE INDEX IF NOT EXISTS idx_articles_unclassified ON articles(published_at DESC)
    WHERE ai_classified = FALSE;
CREATE INDEX IF NOT EXISTS idx_judgments_unsummarized ON judgment_metadata(decision_date DESC)
    WHERE ai_summarized = FALSE;
CREATE INDEX IF NOT EXISTS idx_article_categories_category ON article_categories(category_id);

-- Update trigger function
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ language 'plpgsql';

-- Feed type is fixed at insert; status flags only move false -> true
CREATE OR REPLACE FUNCTION guard_article_invariants()
RETURNS TRIGGER AS $$
BEGIN
    IF NEW.feed_type <> OLD.feed_type THEN
        RAISE EXCEPTION 'feed_type of article % is immutable', OLD.id;
    END IF;
    IF OLD.ai_classified AND NOT NEW.ai_classified THEN
        RAISE EXCEPTION 'ai_classified of article % cannot be reset', OLD.id;
    END IF;
    RETURN NEW;
END;
$$ language 'plpgsql';

CREATE OR REPLACE FUNCTION guard_judgment_invariants()
RETURNS TRIGGER AS $$
BEGIN
    IF OLD.ai_summarized AND NOT NEW.ai_summarized THEN
        RAISE EXCEPTION 'ai_summarized of judgment % cannot be reset', OLD.ecli;
    END IF;
    RETURN NEW;
END;
$$ language 'plpgsql';

-- Create triggers
CREATE OR REPLACE TRIGGER update_articles_updated_at BEFORE UPDATE ON articles
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER guard_articles BEFORE UPDATE ON articles
    FOR EACH ROW EXECUTE FUNCTION guard_article_invariants();

CREATE OR REPLACE TRIGGER update_judgment_metadata_updated_at BEFORE UPDATE ON judgment_metadata
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER guard_judgment_metadata BEFORE UPDATE ON judgment_metadata
    FOR EACH ROW EXECUTE FUNCTION guard_judgment_invariants();

CREATE OR REPLACE TRIGGER update_legal_categories_updated_at BEFORE UPDATE ON legal_categories
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""


async def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        async with get_connection(config) as conn:
            cur = await conn.execute("SELECT 1 AS ok")
            result = await cur.fetchone()
            return result is not None and result["ok"] == 1
    except (psycopg.Error, OSError) as e:
        console.print(f"[red]Database connection failed: {e}[/red]")
        return False


async def init_database(config: Dict[str, Any]) -> int:
    """
    Create the schema and seed the category taxonomy.

    Safe to run repeatedly. Returns the number of categories newly seeded.
    """
    try:
        async with get_connection(config) as conn:
            async with conn.transaction():
                await conn.execute(SCHEMA_SQL)
                seeded = await seed_categories(conn)
            console.print("Database schema initialized successfully")
            return seeded
    except DatabaseError as e:
        console.print(f"[red]Failed to initialize database schema: {e}[/red]")
        raise
