"""Content operations shared by the MCP and REST front ends.

Each public method returns an `Envelope`. Inside a method, failures are
raised as `ContentError` subclasses; the `enveloped` decorator turns them
into error envelopes so nothing escapes to the protocol adapters.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from quire.config import Settings
from quire.metrics import operation_duration, track_operation

from .base import ContentError, ContentNotFound, StoreError, ValidationError
from .content import ContentItem, validate_fields
from .envelope import Envelope
from .paging import PagedResult, clamp_pagination, coerce_int, in_sqlite_range
from .repository import ContentRepository

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


def enveloped(operation: str):
    """Wrap a method's return value in a success envelope.

    ContentError becomes an error envelope with its own code; anything else
    is logged and reported as a 500.
    """

    def decorator(func):
        tracked = track_operation(operation_duration, operation)(func)

        @wraps(func)
        def wrapper(*args, **kwargs) -> Envelope:
            try:
                return Envelope.ok(tracked(*args, **kwargs))
            except ContentError as e:
                if e.code >= 500:
                    logger.error(f"{operation} failed: {e.message}")
                return Envelope.fail(e.code, e.message)
            except Exception:
                logger.exception(f"Unexpected error in {operation}")
                return Envelope.fail(500, "Internal server error")

        return wrapper

    return decorator


def require_id(value: Any) -> int:
    """Read an item id from caller input."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("ID parameter is required and must be an integer")
    if not in_sqlite_range(value):
        raise ValidationError("Invalid content ID")
    return value


class ContentManager:
    """Validates requests and runs them against the repository."""

    def __init__(self, repository: ContentRepository, settings: Settings):
        self.repository = repository
        self.settings = settings

    # -- single items ------------------------------------------------------

    @enveloped("create_content")
    def create_content(self, fields: Any) -> dict:
        return self._create(fields).to_dict()

    @enveloped("get_content")
    def get_content(self, content_id: Any) -> dict:
        return self._get_existing(require_id(content_id)).to_dict()

    @enveloped("update_content")
    def update_content(self, content_id: Any, fields: Any) -> dict:
        existing = self._get_existing(require_id(content_id))
        validate_fields(fields, self.settings)

        item = ContentItem.from_fields(fields)
        item.id = existing.id
        item.created_at = existing.created_at
        if not self.repository.update(item):
            raise StoreError("Failed to update content")

        updated = self.repository.get(existing.id)
        if updated is None:
            raise StoreError("Failed to update content")
        logger.info(f"Updated content {existing.id}")
        return updated.to_dict()

    @enveloped("delete_content")
    def delete_content(self, content_id: Any) -> dict:
        existing = self._get_existing(require_id(content_id))
        if not self.repository.delete(existing.id):
            raise StoreError("Failed to delete content")
        logger.info(f"Deleted content {existing.id}")
        return {}

    # -- queries -----------------------------------------------------------

    @enveloped("search_content")
    def search_content(self, query: Any, page: Any = 1, page_size: Any = None) -> dict:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query cannot be empty")
        page, page_size = self._paging(page, page_size)

        if self.settings.exact_search_counts:
            offset = (page - 1) * page_size
            items = self.repository.search(query, page_size, offset)
            total = self.repository.count_matches(query)
        else:
            items = self.repository.search(query, page_size)
            total = len(items)

        return PagedResult(items, total, page, page_size).to_dict()

    @enveloped("get_content_by_tag")
    def get_content_by_tag(self, tag: Any, page: Any = 1, page_size: Any = None) -> dict:
        if not isinstance(tag, str) or not tag.strip():
            raise ValidationError("Tag cannot be empty")
        tag = tag.strip()
        page, page_size = self._paging(page, page_size)

        if self.settings.exact_search_counts:
            offset = (page - 1) * page_size
            items = self.repository.get_by_tag(tag, page_size, offset)
            total = self.repository.count_by_tag(tag)
        else:
            items = self.repository.get_by_tag(tag, page_size)
            total = len(items)

        return PagedResult(items, total, page, page_size).to_dict()

    @enveloped("list_content")
    def list_content(self, page: Any = 1, page_size: Any = None) -> dict:
        page, page_size = self._paging(page, page_size)
        result = PagedResult(
            items=[],
            total_count=self.repository.count(),
            page=page,
            page_size=page_size,
        )
        result.items = self.repository.list_all(result.offset, page_size)
        return result.to_dict()

    @enveloped("get_recent_content")
    def get_recent_content(self, limit: Any = None) -> list[dict]:
        limit = coerce_int(limit, self.settings.default_page_size)
        if limit is None or limit < 1 or limit > self.settings.max_page_size:
            limit = self.settings.default_page_size
        return [item.to_dict() for item in self.repository.get_recent(limit)]

    @enveloped("get_tags")
    def get_tags(self) -> list[str]:
        return self.repository.all_tags()

    @enveloped("get_statistics")
    def get_statistics(self) -> dict:
        tags = self.repository.all_tags()
        return {
            "total_content": self.repository.count(),
            "total_tags": len(tags),
            "tags": tags,
        }

    # -- batches -----------------------------------------------------------

    @enveloped("bulk_create")
    def bulk_create(self, items: Any) -> dict:
        """Create each item independently; failures are reported per item."""
        if not isinstance(items, list):
            raise ValidationError("Items must be an array")

        created_ids: list[int] = []
        errors: list[str] = []
        for index, fields in enumerate(items):
            try:
                created_ids.append(self._create(fields).id)
            except ContentError as e:
                errors.append(f"Item {index}: {e.message}")

        result: dict[str, Any] = {
            "created_ids": created_ids,
            "created_count": len(created_ids),
            "total_count": len(items),
        }
        if errors:
            result["errors"] = errors
        logger.info(f"Bulk create: {len(created_ids)}/{len(items)} created")
        return result

    @enveloped("bulk_delete")
    def bulk_delete(self, ids: Any) -> dict:
        if not isinstance(ids, list) or not ids:
            raise ValidationError("IDs list cannot be empty")

        deleted = 0
        errors: list[str] = []
        for raw_id in ids:
            content_id = coerce_int(raw_id)
            if content_id is not None and self.repository.delete(content_id):
                deleted += 1
            else:
                errors.append(f"Failed to delete ID: {raw_id}")

        result: dict[str, Any] = {"deleted_count": deleted, "total_count": len(ids)}
        if errors:
            result["errors"] = errors
        logger.info(f"Bulk delete: {deleted}/{len(ids)} deleted")
        return result

    @enveloped("export_content")
    def export_content(self, export_format: Any = "json") -> dict:
        if export_format != "json":
            raise ValidationError("Only JSON format is supported")
        items = self.repository.list_all(0, self.settings.export_limit)
        return {
            "version": EXPORT_VERSION,
            "exported_at": self.repository.clock.timestamp(),
            "content": [item.to_dict() for item in items],
        }

    def import_content(self, data: Any) -> Envelope:
        """Create every item in an export document. Ids are reassigned."""
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            return Envelope.fail(400, "Invalid import data format")
        return self.bulk_create(data["content"])

    # -- helpers -----------------------------------------------------------

    def _create(self, fields: Any) -> ContentItem:
        validate_fields(fields, self.settings)
        item = ContentItem.from_fields(fields)

        content_id = self.repository.create(item)
        if content_id is None:
            raise StoreError("Failed to create content")

        created = self.repository.get(content_id)
        if created is None:
            raise StoreError("Failed to create content")
        logger.info(f"Created content {content_id}")
        return created

    def _get_existing(self, content_id: int) -> ContentItem:
        item = self.repository.get(content_id)
        if item is None:
            raise ContentNotFound()
        return item

    def _paging(self, page: Any, page_size: Any) -> tuple[int, int]:
        return clamp_pagination(
            page,
            page_size,
            self.settings.default_page_size,
            self.settings.max_page_size,
        )
