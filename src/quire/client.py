"""HTTP client for a running Quire server.

Speaks either protocol. Every call returns the domain envelope as a dict,
`{"success": true, "data": ...}` or `{"success": false, "error": {...}}`;
MCP routing errors are folded into the same shape.
"""

from __future__ import annotations

import itertools
import json
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

DEFAULT_SERVER_URL = "http://localhost:8080"


class ClientError(Exception):
    """The server could not be reached or sent something unreadable."""


class ContentClient:
    """Talks to Quire over MCP (`POST /mcp`) or the REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER_URL,
        use_rest: bool = False,
        http: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.use_rest = use_rest
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=self.base_url, timeout=timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> ContentClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- transport ---------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        logger.debug("client_request", method=method, path=path)
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ClientError(f"Cannot reach {self.base_url}: {e}") from e
        logger.debug(
            "client_response",
            status_code=response.status_code,
            request_id=response.headers.get("X-Request-ID"),
        )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(
                f"Server returned non-JSON response (HTTP {response.status_code})"
            ) from e

    def rest(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        return self._json(self._send(method, path, **kwargs))

    def mcp(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one raw MCP request and return the raw reply."""
        request = {"jsonrpc": "2.0", "id": next(self._ids), "method": method}
        if params is not None:
            request["params"] = params
        return self._json(self._send("POST", "/mcp", json=request))

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        reply = self.mcp("tools/call", {"name": name, "arguments": arguments or {}})
        if "error" in reply:
            return {"success": False, "error": reply["error"]}
        try:
            return json.loads(reply["content"][0]["text"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ClientError(f"Malformed MCP reply: {reply!r}") from e

    # -- operations --------------------------------------------------------

    def create(
        self,
        title: str,
        content: str,
        content_type: str | None = None,
        tags: str | None = None,
        metadata: dict | None = None,
    ) -> dict[str, Any]:
        fields = _compact(
            title=title,
            content=content,
            content_type=content_type,
            tags=tags,
            metadata=metadata,
        )
        if self.use_rest:
            return self.rest("POST", "/api/content", json=fields)
        return self.call_tool("create_content", fields)

    def get(self, content_id: int) -> dict[str, Any]:
        if self.use_rest:
            return self.rest("GET", f"/api/content/{content_id}")
        return self.call_tool("get_content", {"id": content_id})

    def update(self, content_id: int, **fields: Any) -> dict[str, Any]:
        """Replace an item's fields. Title and content are required."""
        fields = _compact(**fields)
        if self.use_rest:
            return self.rest("PUT", f"/api/content/{content_id}", json=fields)
        return self.call_tool("update_content", {"id": content_id, **fields})

    def delete(self, content_id: int) -> dict[str, Any]:
        if self.use_rest:
            return self.rest("DELETE", f"/api/content/{content_id}")
        return self.call_tool("delete_content", {"id": content_id})

    def search(self, query: str, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        if self.use_rest:
            return self.rest(
                "GET",
                "/api/content/search",
                params={"q": query, "page": page, "page_size": page_size},
            )
        return self.call_tool(
            "search_content", {"query": query, "page": page, "page_size": page_size}
        )

    def list_content(self, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        if self.use_rest:
            return self.rest(
                "GET", "/api/content", params={"page": page, "page_size": page_size}
            )
        return self.call_tool("list_content", {"page": page, "page_size": page_size})

    def by_tag(self, tag: str, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        # REST only: no tool covers tag lookup
        return self.rest(
            "GET", "/api/content", params={"tags": tag, "page": page, "page_size": page_size}
        )

    def tags(self) -> dict[str, Any]:
        if self.use_rest:
            return self.rest("GET", "/api/tags")
        return self.call_tool("get_tags")

    def stats(self) -> dict[str, Any]:
        if self.use_rest:
            return self.rest("GET", "/api/statistics")
        return self.call_tool("get_statistics")

    def health(self) -> dict[str, Any]:
        return self.rest("GET", "/health")

    def export(self) -> dict[str, Any]:
        return self.rest("GET", "/api/export", params={"format": "json"})

    def import_(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.rest("POST", "/api/import", json=data)


def _compact(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}
