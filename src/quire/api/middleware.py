"""Request context, access logging and last-resort error handling."""

import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from quire.api.responses import error_response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Polled by monitoring; logging them would drown everything else
QUIET_PATHS = frozenset({"/health", "/metrics"})


def _incoming_request_id(request: Request) -> str | None:
    """A caller-supplied id, if it is short and printable."""
    value = request.headers.get(REQUEST_ID_HEADER)
    if value and len(value) <= MAX_REQUEST_ID_LENGTH and value.isprintable():
        return value
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echo it back and bind it for logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = _incoming_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request; failures are logged louder."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
            client=request.client.host if request.client else None,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Anything that escaped the handlers becomes a 500 envelope."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("unhandled_exception", exc_type=type(exc).__name__)
            response = error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal error occurred"
            )
            response.headers[REQUEST_ID_HEADER] = getattr(
                request.state, "request_id", "unknown"
            )
            return response
