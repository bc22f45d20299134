"""
Quire MCP stdio bridge - FastMCP 2.0 implementation.

Exposes the content tools of a running Quire server to MCP clients that
only speak stdio. Every tool call is forwarded to the server's POST /mcp
endpoint and the server's JSON envelope is returned as the tool result.
"""

import uuid
from typing import Any

import httpx
import structlog
import yaml
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from quire.mcp.config import get_bridge_settings

logger = structlog.get_logger()

mcp = FastMCP(
    name="Quire Content Server",
    instructions="""
    This server stores and retrieves local content items.

    Each item has a title, a body, a content type, comma-separated tags and
    free-form metadata. Use search_content for full-text lookups and
    list_content to page through everything, newest first.
    """,
)


async def call_remote_tool(
    name: str,
    arguments: dict[str, Any],
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Forward one tool call and return the server's envelope text."""
    settings = get_bridge_settings()
    request_id = str(uuid.uuid4())
    payload = {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }

    logger.info(
        "bridge_request_start",
        bridge_request_id=request_id,
        tool=name,
        argument_keys=sorted(arguments),
    )

    try:
        async with httpx.AsyncClient(
            base_url=settings.quire_url,
            timeout=settings.quire_timeout,
            transport=transport,
        ) as client:
            response = await client.post(
                "/mcp", json=payload, headers={"X-Request-ID": request_id}
            )
        response.raise_for_status()
        reply = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(
            "bridge_http_error",
            bridge_request_id=request_id,
            status_code=e.response.status_code,
            response_text=e.response.text[:500],
        )
        raise ToolError(f"Quire server returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error("bridge_unreachable", bridge_request_id=request_id, error=str(e))
        raise ToolError(f"Cannot reach Quire server at {settings.quire_url}") from e

    if "error" in reply:
        error = reply["error"]
        logger.warning("bridge_tool_rejected", bridge_request_id=request_id, error=error)
        raise ToolError(f"{error.get('message')} (code {error.get('code')})")

    logger.info("bridge_request_complete", bridge_request_id=request_id, tool=name)
    return reply["content"][0]["text"]


async def fetch_health(transport: httpx.AsyncBaseTransport | None = None) -> dict:
    settings = get_bridge_settings()
    async with httpx.AsyncClient(
        base_url=settings.quire_url, timeout=settings.quire_timeout, transport=transport
    ) as client:
        response = await client.get("/health")
    return response.json()


def _fields(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@mcp.tool(name="create_content")
async def create_content(
    title: str,
    content: str,
    content_type: str = "text",
    tags: str | None = None,
    metadata: dict | None = None,
) -> str:
    """Create a new content item. Tags are one comma-separated string."""
    return await call_remote_tool(
        "create_content",
        _fields(
            title=title, content=content, content_type=content_type, tags=tags, metadata=metadata
        ),
    )


@mcp.tool(name="get_content")
async def get_content(content_id: int) -> str:
    """Get content by ID."""
    return await call_remote_tool("get_content", {"id": content_id})


@mcp.tool(name="update_content")
async def update_content(
    content_id: int,
    title: str,
    content: str,
    content_type: str | None = None,
    tags: str | None = None,
    metadata: dict | None = None,
) -> str:
    """Replace an existing item's fields."""
    return await call_remote_tool(
        "update_content",
        _fields(
            id=content_id,
            title=title,
            content=content,
            content_type=content_type,
            tags=tags,
            metadata=metadata,
        ),
    )


@mcp.tool(name="delete_content")
async def delete_content(content_id: int) -> str:
    """Delete content by ID."""
    return await call_remote_tool("delete_content", {"id": content_id})


@mcp.tool(name="search_content")
async def search_content(query: str, page: int = 1, page_size: int = 20) -> str:
    """Search content using full-text search over titles, bodies and tags."""
    return await call_remote_tool(
        "search_content", {"query": query, "page": page, "page_size": page_size}
    )


@mcp.tool(name="list_content")
async def list_content(page: int = 1, page_size: int = 20) -> str:
    """List all content with pagination, newest first."""
    return await call_remote_tool("list_content", {"page": page, "page_size": page_size})


@mcp.tool(name="get_tags")
async def get_tags() -> str:
    """Get all available tags."""
    return await call_remote_tool("get_tags", {})


@mcp.tool(name="get_statistics")
async def get_statistics() -> str:
    """Get content statistics."""
    return await call_remote_tool("get_statistics", {})


@mcp.tool(name="health")
async def health() -> str:
    """Check the health of the Quire server."""
    health_data = await fetch_health()

    # YAML reads better than JSON for a status summary
    return yaml.dump(health_data, default_flow_style=False, sort_keys=False)


if __name__ == "__main__":
    mcp.run()
