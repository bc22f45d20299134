"""Uniform result envelope returned by every content operation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Envelope:
    """Either `{success: true, data}` or `{success: false, error: {code, message}}`."""

    success: bool
    data: Any = None
    error_code: int | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> Envelope:
        return cls(success=True, data={} if data is None else data)

    @classmethod
    def fail(cls, code: int, message: str) -> Envelope:
        return cls(success=False, error_code=code, error_message=message)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "error": {"code": self.error_code, "message": self.error_message},
        }
