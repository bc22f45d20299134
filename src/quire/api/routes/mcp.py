"""MCP over HTTP."""

import json

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from quire.api.dependencies import get_dispatcher
from quire.api.responses import error_response
from quire.mcp.dispatcher import MCPDispatcher

logger = structlog.get_logger()
router = APIRouter(tags=["mcp"])


@router.post("/mcp")
async def handle_mcp(
    request: Request,
    dispatcher: MCPDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> JSONResponse:
    """Dispatch one MCP request.

    The reply is always HTTP 200 with the MCP result or MCP error object,
    except for a body that is not JSON at all.
    """
    body = await request.body()
    try:
        payload = json.loads(body)
    except ValueError as e:
        logger.warning("mcp_invalid_json", error=str(e))
        return error_response(
            status.HTTP_400_BAD_REQUEST, f"Invalid JSON: {e}", status.HTTP_400_BAD_REQUEST
        )

    result = await run_in_threadpool(dispatcher.handle_request, payload)
    return JSONResponse(content=result)
