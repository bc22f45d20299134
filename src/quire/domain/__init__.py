"""Domain models for Quire."""

from .base import (
    CONTENT_TYPES,
    ContentError,
    ContentNotFound,
    StoreError,
    ValidationError,
)
from .content import ContentItem, validate_fields
from .envelope import Envelope
from .manager import ContentManager
from .paging import PagedResult
from .repository import ContentRepository

__all__ = [
    "CONTENT_TYPES",
    "ContentError",
    "ContentItem",
    "ContentManager",
    "ContentNotFound",
    "ContentRepository",
    "Envelope",
    "PagedResult",
    "StoreError",
    "ValidationError",
    "validate_fields",
]
