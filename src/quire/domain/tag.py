"""Tag helpers.

Tags are stored as one comma-separated string per item. Everything that
splits, joins or matches that string goes through this module.
"""

from collections.abc import Iterable

TAG_SEPARATOR = ","


def parse_tags(raw: str | None) -> list[str]:
    """Split a tags string into trimmed, non-empty tokens (order kept)."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(TAG_SEPARATOR) if token.strip()]


def join_tags(tags: Iterable[str]) -> str:
    """Join tokens back into the stored form."""
    return ", ".join(tag.strip() for tag in tags if tag and tag.strip())


def collect_tags(raw_values: Iterable[str | None]) -> list[str]:
    """Every distinct tag across many tags strings, sorted."""
    seen: set[str] = set()
    for raw in raw_values:
        seen.update(parse_tags(raw))
    return sorted(seen)


def like_pattern(tag: str) -> str:
    """LIKE pattern for substring containment, for use with ESCAPE '\\'."""
    escaped = tag.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
