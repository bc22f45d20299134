"""Content item domain model."""
from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from quire.config import Settings

from .base import CONTENT_TYPE_ALIASES, CONTENT_TYPES, DEFAULT_CONTENT_TYPE, ValidationError
from .tag import parse_tags


@dataclass
class ContentItem:
    """A single stored piece of content."""

    title: str
    content: str
    content_type: str = DEFAULT_CONTENT_TYPE
    tags: str = ""
    metadata: dict = field(default_factory=dict)

    # Assigned by the store
    id: int | None = None
    created_at: int = 0
    updated_at: int = 0

    def __post_init__(self):
        self.content_type = normalize_content_type(self.content_type)

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> ContentItem:
        """Build an unsaved item from request fields that passed validation."""
        return cls(
            title=fields["title"],
            content=fields["content"],
            content_type=fields.get("content_type") or DEFAULT_CONTENT_TYPE,
            tags=fields.get("tags") or "",
            metadata=fields.get("metadata") or {},
        )

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> ContentItem:
        """Hydrate from a `content` table row."""
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            content_type=row["content_type"],
            tags=row["tags"] or "",
            metadata=_parse_metadata(row["metadata"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def metadata_json(self) -> str:
        return json.dumps(self.metadata, ensure_ascii=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "content_type": self.content_type,
            "tags": self.tags,
            "metadata": self.metadata,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def normalize_content_type(content_type: str) -> str:
    return CONTENT_TYPE_ALIASES.get(content_type, content_type)


def validate_fields(fields: Any, settings: Settings) -> None:
    """Validate create/update request fields.

    Checks run in a fixed order and the first failure is raised as a
    ValidationError. Optional fields given as None count as absent.
    """
    if not isinstance(fields, dict):
        raise ValidationError("Content item must be an object")

    title = fields.get("title")
    content = fields.get("content")
    if not isinstance(title, str):
        raise ValidationError("Title is required and must be a string")
    if not isinstance(content, str):
        raise ValidationError("Content is required and must be a string")
    if not title:
        raise ValidationError("Title cannot be empty")
    if not content:
        raise ValidationError("Content cannot be empty")
    if len(title) > settings.max_title_length:
        raise ValidationError(
            f"Title is too long (max {settings.max_title_length} characters)"
        )
    if len(content.encode("utf-8")) > settings.max_content_size:
        raise ValidationError(
            f"Content is too long (max {_format_size(settings.max_content_size)})"
        )

    content_type = fields.get("content_type")
    if content_type is not None:
        if not isinstance(content_type, str):
            raise ValidationError("Content type must be a string")
        if normalize_content_type(content_type) not in CONTENT_TYPES:
            raise ValidationError("Invalid content type")

    tags = fields.get("tags")
    if tags is not None:
        if not isinstance(tags, str):
            raise ValidationError("Tags must be a string")
        if len(parse_tags(tags)) > settings.max_tags:
            raise ValidationError(f"Too many tags (max {settings.max_tags})")

    metadata = fields.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("Metadata must be an object")


def _parse_metadata(raw: str | None) -> dict:
    """Stored metadata back to a dict; anything unreadable becomes {}."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return value if isinstance(value, dict) else {}


def _format_size(size: int) -> str:
    mib = 1024 * 1024
    if size % mib == 0:
        return f"{size // mib}MB"
    if size % 1024 == 0:
        return f"{size // 1024}KB"
    return f"{size} bytes"
