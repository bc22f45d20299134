"""Base exceptions and constants for domain models."""


class ContentError(Exception):
    """Base for failures that become an error envelope.

    Each subclass carries the numeric code callers see.
    """

    code = 500

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(ContentError):
    """Raised when request data fails validation."""

    code = 400


class ContentNotFound(ContentError):
    """Raised when no item has the requested id."""

    code = 404

    def __init__(self, message: str = "Content not found"):
        super().__init__(message)


class StoreError(ContentError):
    """Raised when the store reports a failed write."""

    code = 500


# Constants
CONTENT_TYPES = frozenset({"text", "markdown", "html", "code", "json", "xml", "yaml"})
CONTENT_TYPE_ALIASES = {"document": "text"}
DEFAULT_CONTENT_TYPE = "text"
