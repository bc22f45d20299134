"""Database schema management."""

import logging
import sqlite3

logger = logging.getLogger(__name__)

CONTENT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    content_type TEXT NOT NULL DEFAULT 'text',
    tags TEXT NOT NULL DEFAULT '',
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_content_title ON content(title);
CREATE INDEX IF NOT EXISTS idx_content_type ON content(content_type);
CREATE INDEX IF NOT EXISTS idx_content_created_at ON content(created_at);
CREATE INDEX IF NOT EXISTS idx_content_updated_at ON content(updated_at);
"""

# Rows are keyed by rowid = content.id and kept in step by the repository.
FTS_TABLE_SQL = """
CREATE VIRTUAL TABLE IF NOT EXISTS content_fts USING fts5(title, content, tags);
"""


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure the content tables and indexes exist.

    This function is idempotent - safe to call on every startup.
    """
    logger.info("Ensuring content schema exists")
    conn.executescript(CONTENT_TABLE_SQL)
    try:
        conn.executescript(FTS_TABLE_SQL)
    except sqlite3.OperationalError as e:
        # No silent LIKE fallback: search semantics depend on FTS5
        raise RuntimeError(f"SQLite build lacks FTS5 support: {e}") from e
    conn.commit()


def get_content_stats(conn: sqlite3.Connection) -> dict:
    """Row counts for the primary table and the full-text index."""
    content_count = conn.execute("SELECT COUNT(*) FROM content").fetchone()[0]
    indexed_count = conn.execute("SELECT COUNT(*) FROM content_fts").fetchone()[0]
    return {"content_count": content_count, "indexed_count": indexed_count}
