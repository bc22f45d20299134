"""MCP request dispatch.

Requests are JSON objects with a `method` and optional `params`. Replies
are either a method-specific result object or `{"error": {code, message}}`
where -1 means the request could not be routed and -2 means a handler
failed while running.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

import structlog

from quire import __version__
from quire.domain import ContentManager, Envelope
from quire.metrics import mcp_requests, tool_calls

from .tools import ToolRegistry

logger = structlog.get_logger()

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "Quire Content Server"
SERVER_DESCRIPTION = "A local content management server implementing the MCP protocol"

UNROUTABLE = -1
HANDLER_FAULT = -2

RESOURCES = (
    {
        "uri": "content://all",
        "name": "All Content",
        "description": "All content items in the database",
        "mimeType": "application/json",
    },
    {
        "uri": "stats://summary",
        "name": "Content Statistics",
        "description": "Summary statistics of the content database",
        "mimeType": "application/json",
    },
)


def mcp_error(code: int, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


def dump_envelope(envelope: Envelope) -> str:
    return json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False)


class MCPDispatcher:
    """Routes MCP methods to the tool registry and content resources."""

    def __init__(self, manager: ContentManager, registry: ToolRegistry):
        self.manager = manager
        self.registry = registry
        self._methods: MappingProxyType[str, Callable[[dict[str, Any]], dict[str, Any]]] = (
            MappingProxyType(
                {
                    "initialize": self.initialize,
                    "tools/list": self.list_tools,
                    "tools/call": self.call_tool,
                    "resources/list": self.list_resources,
                    "resources/read": self.read_resource,
                }
            )
        )

    def handle_request(self, request: Any) -> dict[str, Any]:
        """Answer one MCP request. Never raises."""
        if not isinstance(request, dict):
            return mcp_error(UNROUTABLE, "Request must be a JSON object")

        method = request.get("method")
        if not isinstance(method, str):
            return mcp_error(UNROUTABLE, "Method field is required and must be a string")

        params = request.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return mcp_error(UNROUTABLE, "Params must be an object")

        handler = self._methods.get(method)
        if handler is None:
            mcp_requests.labels(method="unknown").inc()
            logger.warning("mcp_unknown_method", method=method)
            return mcp_error(UNROUTABLE, f"Unknown method: {method}")

        mcp_requests.labels(method=method).inc()
        try:
            return handler(params)
        except Exception as e:
            logger.exception("mcp_request_failed", method=method, error=str(e))
            return mcp_error(HANDLER_FAULT, "Internal server error")

    def initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        client_info = params.get("clientInfo")
        client = client_info.get("name", "unknown") if isinstance(client_info, dict) else "unknown"
        logger.info("mcp_initialized", client=client)
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": self.registry.describe()}

    def call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run a tool and wrap its envelope as MCP text content."""
        name = params.get("name")
        if not isinstance(name, str):
            return mcp_error(UNROUTABLE, "Tool name is required and must be a string")

        tool = self.registry.get(name)
        if tool is None:
            tool_calls.labels(tool="unknown", outcome="unroutable").inc()
            logger.warning("mcp_unknown_tool", tool=name)
            return mcp_error(UNROUTABLE, f"Unknown tool: {name}")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return mcp_error(UNROUTABLE, "Arguments must be an object")

        try:
            envelope = tool.handler(arguments)
        except Exception as e:
            tool_calls.labels(tool=name, outcome="fault").inc()
            logger.exception("mcp_tool_failed", tool=name, error=str(e))
            return mcp_error(HANDLER_FAULT, f"Tool execution error: {e}")

        tool_calls.labels(tool=name, outcome="success" if envelope.success else "error").inc()
        logger.info("mcp_tool_called", tool=name, success=envelope.success)
        return {"content": [{"type": "text", "text": dump_envelope(envelope)}]}

    def list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": [dict(resource) for resource in RESOURCES]}

    def read_resource(self, params: dict[str, Any]) -> dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str):
            return mcp_error(UNROUTABLE, "Resource URI is required and must be a string")

        if uri == "content://all":
            envelope = self.manager.list_content(1, 100)
        elif uri == "stats://summary":
            envelope = self.manager.get_statistics()
        else:
            return mcp_error(UNROUTABLE, f"Unknown resource: {uri}")

        return {
            "contents": [
                {"uri": uri, "mimeType": "application/json", "text": dump_envelope(envelope)}
            ]
        }

    def server_info(self) -> dict[str, Any]:
        return {
            "name": SERVER_NAME,
            "version": __version__,
            "description": SERVER_DESCRIPTION,
            "protocol_version": PROTOCOL_VERSION,
            "tools_count": len(self.registry),
            "available_tools": list(self.registry),
        }
