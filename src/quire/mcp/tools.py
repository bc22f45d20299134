"""MCP tool catalog.

Each tool pairs a JSON Schema for its arguments with a handler bound to a
ContentManager. The registry is built once at startup and never changes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from quire.domain import ContentManager, Envelope

ToolHandler = Callable[[dict[str, Any]], Envelope]

_ID_ERROR = "ID parameter is required and must be an integer"
_QUERY_ERROR = "Query parameter is required and must be a string"


@dataclass(frozen=True)
class Tool:
    """A named operation callable through `tools/call`."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry(Mapping[str, Tool]):
    """Read-only name → Tool mapping that keeps catalog order."""

    def __init__(self, tools: list[Tool]):
        self._tools = MappingProxyType({tool.name: tool for tool in tools})

    def __getitem__(self, name: str) -> Tool:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def describe(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_ID = {"type": "integer", "description": "Content ID"}
_TITLE = {"type": "string", "description": "Content title"}
_BODY = {"type": "string", "description": "Content body"}
_TAGS = {"type": "string", "description": "Comma-separated tags"}
_METADATA = {"type": "object", "description": "Additional metadata"}
_PAGE = {"type": "integer", "description": "Page number", "default": 1}
_PAGE_SIZE = {"type": "integer", "description": "Items per page", "default": 20}


def build_tool_registry(manager: ContentManager) -> ToolRegistry:
    """Bind the content tools to `manager`."""

    def create_content(args: dict[str, Any]) -> Envelope:
        return manager.create_content(args)

    def get_content(args: dict[str, Any]) -> Envelope:
        if not _is_int(args.get("id")):
            return Envelope.fail(400, _ID_ERROR)
        return manager.get_content(args["id"])

    def update_content(args: dict[str, Any]) -> Envelope:
        if not _is_int(args.get("id")):
            return Envelope.fail(400, _ID_ERROR)
        fields = {key: value for key, value in args.items() if key != "id"}
        return manager.update_content(args["id"], fields)

    def delete_content(args: dict[str, Any]) -> Envelope:
        if not _is_int(args.get("id")):
            return Envelope.fail(400, _ID_ERROR)
        return manager.delete_content(args["id"])

    def search_content(args: dict[str, Any]) -> Envelope:
        if not isinstance(args.get("query"), str):
            return Envelope.fail(400, _QUERY_ERROR)
        return manager.search_content(
            args["query"], args.get("page", 1), args.get("page_size")
        )

    def list_content(args: dict[str, Any]) -> Envelope:
        return manager.list_content(args.get("page", 1), args.get("page_size"))

    def get_tags(args: dict[str, Any]) -> Envelope:
        return manager.get_tags()

    def get_statistics(args: dict[str, Any]) -> Envelope:
        return manager.get_statistics()

    return ToolRegistry(
        [
            Tool(
                "create_content",
                "Create a new content item",
                _schema(
                    {
                        "title": _TITLE,
                        "content": _BODY,
                        "content_type": {
                            "type": "string",
                            "description": "Content type (text, markdown, code, etc.)",
                            "default": "text",
                        },
                        "tags": _TAGS,
                        "metadata": _METADATA,
                    },
                    ["title", "content"],
                ),
                create_content,
            ),
            Tool("get_content", "Get content by ID", _schema({"id": _ID}, ["id"]), get_content),
            Tool(
                "update_content",
                "Update existing content",
                _schema(
                    {
                        "id": _ID,
                        "title": _TITLE,
                        "content": _BODY,
                        "content_type": {"type": "string", "description": "Content type"},
                        "tags": _TAGS,
                        "metadata": _METADATA,
                    },
                    ["id", "title", "content"],
                ),
                update_content,
            ),
            Tool(
                "delete_content",
                "Delete content by ID",
                _schema({"id": _ID}, ["id"]),
                delete_content,
            ),
            Tool(
                "search_content",
                "Search content using full-text search",
                _schema(
                    {
                        "query": {"type": "string", "description": "Search query"},
                        "page": _PAGE,
                        "page_size": _PAGE_SIZE,
                    },
                    ["query"],
                ),
                search_content,
            ),
            Tool(
                "list_content",
                "List all content with pagination",
                _schema({"page": _PAGE, "page_size": _PAGE_SIZE}),
                list_content,
            ),
            Tool("get_tags", "Get all available tags", _schema({}), get_tags),
            Tool("get_statistics", "Get content statistics", _schema({}), get_statistics),
        ]
    )
