"""Content repository for database operations."""

from __future__ import annotations

import logging
import sqlite3

from quire.infrastructure.database import Database
from quire.metrics import database_operation_duration, track_operation
from quire.utils.time_service import TimeService

from .content import ContentItem
from .tag import collect_tags, like_pattern

logger = logging.getLogger(__name__)

# Driver failures, including ints too wide for SQLite INTEGER
STORE_ERRORS = (sqlite3.Error, OverflowError)

_COLUMNS = "id, title, content, content_type, tags, metadata, created_at, updated_at"


def build_match_query(query: str) -> str:
    """Turn free text into a safe FTS5 expression.

    Every whitespace-separated term is quoted so punctuation such as the dot
    in "Node.js" is matched literally instead of parsed as syntax. A trailing
    `*` on a term is kept as a prefix search. Terms are ANDed.
    """
    parts = []
    for term in query.split():
        prefix = term.endswith("*")
        if prefix:
            term = term.rstrip("*")
        if not term:
            continue
        quoted = '"' + term.replace('"', '""') + '"'
        parts.append(quoted + "*" if prefix else quoted)
    return " ".join(parts)


class ContentRepository:
    """Repository for storing and retrieving content items.

    Every method holds the database lock for its whole duration. SQLite
    failures are logged and reported through the return value.
    """

    def __init__(self, database: Database, clock: TimeService | None = None):
        self.database = database
        self.clock = clock or TimeService(timezone="UTC")

    @track_operation(database_operation_duration, "create")
    def create(self, item: ContentItem) -> int | None:
        """Insert an item and its index row. Returns the new id or None."""
        now = self.clock.timestamp()
        try:
            with self.database.transaction() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO content
                        (title, content, content_type, tags, metadata, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.title,
                        item.content,
                        item.content_type,
                        item.tags,
                        item.metadata_json(),
                        now,
                        now,
                    ),
                )
                content_id = cursor.lastrowid
                conn.execute(
                    "INSERT INTO content_fts (rowid, title, content, tags) VALUES (?, ?, ?, ?)",
                    (content_id, item.title, item.content, item.tags),
                )
        except STORE_ERRORS as e:
            logger.error(f"Failed to create content: {e}")
            return None

        item.id = content_id
        item.created_at = now
        item.updated_at = now
        logger.debug(f"Created content {content_id}")
        return content_id

    @track_operation(database_operation_duration, "get")
    def get(self, content_id: int) -> ContentItem | None:
        try:
            with self.database.acquire() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM content WHERE id = ?", (content_id,)
                ).fetchone()
        except STORE_ERRORS as e:
            logger.error(f"Failed to get content {content_id}: {e}")
            return None
        return ContentItem.from_row(row) if row else None

    @track_operation(database_operation_duration, "update")
    def update(self, item: ContentItem) -> bool:
        """Overwrite an item's fields, keeping its id and created_at."""
        if item.id is None:
            return False

        now = self.clock.timestamp()
        try:
            with self.database.transaction() as conn:
                cursor = conn.execute(
                    """
                    UPDATE content
                    SET title = ?, content = ?, content_type = ?, tags = ?,
                        metadata = ?, updated_at = MAX(created_at, ?)
                    WHERE id = ?
                    """,
                    (
                        item.title,
                        item.content,
                        item.content_type,
                        item.tags,
                        item.metadata_json(),
                        now,
                        item.id,
                    ),
                )
                if cursor.rowcount == 0:
                    return False
                conn.execute("DELETE FROM content_fts WHERE rowid = ?", (item.id,))
                conn.execute(
                    "INSERT INTO content_fts (rowid, title, content, tags) VALUES (?, ?, ?, ?)",
                    (item.id, item.title, item.content, item.tags),
                )
        except STORE_ERRORS as e:
            logger.error(f"Failed to update content {item.id}: {e}")
            return False

        logger.debug(f"Updated content {item.id}")
        return True

    @track_operation(database_operation_duration, "delete")
    def delete(self, content_id: int) -> bool:
        """Remove an item and its index row. Returns whether a row went away."""
        try:
            with self.database.transaction() as conn:
                conn.execute("DELETE FROM content_fts WHERE rowid = ?", (content_id,))
                cursor = conn.execute("DELETE FROM content WHERE id = ?", (content_id,))
                deleted = cursor.rowcount > 0
        except STORE_ERRORS as e:
            logger.error(f"Failed to delete content {content_id}: {e}")
            return False

        if deleted:
            logger.debug(f"Deleted content {content_id}")
        return deleted

    @track_operation(database_operation_duration, "search")
    def search(self, query: str, limit: int, offset: int = 0) -> list[ContentItem]:
        """Full-text search over title, content and tags, best match first."""
        match = build_match_query(query)
        if not match:
            return []
        try:
            with self.database.acquire() as conn:
                rows = conn.execute(
                    """
                    SELECT c.* FROM content c
                    JOIN content_fts fts ON c.id = fts.rowid
                    WHERE content_fts MATCH ?
                    ORDER BY fts.rank
                    LIMIT ? OFFSET ?
                    """,
                    (match, limit, offset),
                ).fetchall()
        except STORE_ERRORS as e:
            logger.error(f"Search failed for {query!r}: {e}")
            return []
        return [ContentItem.from_row(row) for row in rows]

    def count_matches(self, query: str) -> int:
        match = build_match_query(query)
        if not match:
            return 0
        try:
            with self.database.acquire() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM content_fts WHERE content_fts MATCH ?", (match,)
                ).fetchone()
        except STORE_ERRORS as e:
            logger.error(f"Match count failed for {query!r}: {e}")
            return 0
        return row[0]

    @track_operation(database_operation_duration, "get_by_tag")
    def get_by_tag(self, tag: str, limit: int, offset: int = 0) -> list[ContentItem]:
        """Items whose tags string contains `tag`, newest first."""
        try:
            with self.database.acquire() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM content
                    WHERE tags LIKE ? ESCAPE '\\'
                    ORDER BY updated_at DESC, id DESC
                    LIMIT ? OFFSET ?
                    """,
                    (like_pattern(tag), limit, offset),
                ).fetchall()
        except STORE_ERRORS as e:
            logger.error(f"Tag lookup failed for {tag!r}: {e}")
            return []
        return [ContentItem.from_row(row) for row in rows]

    def count_by_tag(self, tag: str) -> int:
        try:
            with self.database.acquire() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM content WHERE tags LIKE ? ESCAPE '\\'",
                    (like_pattern(tag),),
                ).fetchone()
        except STORE_ERRORS as e:
            logger.error(f"Tag count failed for {tag!r}: {e}")
            return 0
        return row[0]

    @track_operation(database_operation_duration, "list")
    def list_all(self, offset: int, limit: int) -> list[ContentItem]:
        """One page of items, most recently updated first."""
        try:
            with self.database.acquire() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM content
                    ORDER BY updated_at DESC, id DESC
                    LIMIT ? OFFSET ?
                    """,
                    (limit, offset),
                ).fetchall()
        except STORE_ERRORS as e:
            logger.error(f"Failed to list content: {e}")
            return []
        return [ContentItem.from_row(row) for row in rows]

    def get_recent(self, limit: int) -> list[ContentItem]:
        return self.list_all(0, limit)

    def count(self) -> int:
        try:
            with self.database.acquire() as conn:
                row = conn.execute("SELECT COUNT(*) FROM content").fetchone()
        except STORE_ERRORS as e:
            logger.error(f"Failed to count content: {e}")
            return 0
        return row[0]

    @track_operation(database_operation_duration, "all_tags")
    def all_tags(self) -> list[str]:
        """Every distinct tag in the store, sorted."""
        try:
            with self.database.acquire() as conn:
                rows = conn.execute(
                    "SELECT tags FROM content WHERE tags != ''"
                ).fetchall()
        except STORE_ERRORS as e:
            logger.error(f"Failed to collect tags: {e}")
            return []
        return collect_tags(row["tags"] for row in rows)
