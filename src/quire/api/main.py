"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import REGISTRY, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from quire import __version__
from quire.config import Settings, get_settings
from quire.domain import ContentManager, ContentRepository
from quire.infrastructure.database import Database
from quire.mcp.dispatcher import MCPDispatcher
from quire.mcp.tools import build_tool_registry
from quire.utils.time_service import TimeService

from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, RequestIDMiddleware
from .responses import error_response
from .routes import content, health, mcp

logger = structlog.get_logger()

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE = 86400


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the app and stdlib logging for the library layers."""
    level = getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if settings.log_format == "json":
        renderer_chain = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer_chain = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *renderer_chain,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info(
        "quire_started",
        database=app.state.settings.database_path,
        tools=len(app.state.registry),
    )

    yield

    logger.info("closing_database")
    app.state.database.close()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Unknown routes and disallowed methods still answer with an envelope.

    OPTIONS is answered with an empty 200 on every path; CORS preflights
    never get this far.
    """
    if request.method == "OPTIONS" and exc.status_code in (404, 405):
        return Response(status_code=200)
    response = error_response(exc.status_code, str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are client errors."""
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        message = "Invalid JSON"
    else:
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    logger.info("request_rejected", path=request.url.path, reason=message)
    return error_response(400, message, 400)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and everything it depends on.

    The database is opened here rather than in the lifespan so the app is
    usable from transports that do not run lifespan events.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    clock = TimeService(timezone=settings.timezone)
    database = Database(settings)
    database.initialize()
    repository = ContentRepository(database, clock)
    manager = ContentManager(repository, settings)
    registry = build_tool_registry(manager)
    dispatcher = MCPDispatcher(manager, registry)

    app = FastAPI(
        title="Quire",
        description="Local content management over MCP and REST",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.database = database
    app.state.repository = repository
    app.state.manager = manager
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    app.include_router(health.router)
    app.include_router(content.router)
    app.include_router(mcp.router)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.cors_origin],
            allow_methods=CORS_METHODS,
            allow_headers=CORS_HEADERS,
            max_age=CORS_MAX_AGE,
        )

    # Automatic HTTP metrics, only when ENABLE_METRICS=true
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics"],
        env_var_name="ENABLE_METRICS",
        inprogress_name="quire_http_requests_inprogress",
        inprogress_labels=True,
    ).instrument(app)

    @app.get("/metrics", include_in_schema=False)
    async def get_metrics() -> Response:
        """Prometheus metrics endpoint."""
        metrics = generate_latest(REGISTRY)
        return Response(content=metrics, media_type="text/plain; version=0.0.4")

    return app
