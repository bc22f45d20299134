"""Health, server info and configuration endpoints."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from quire.api.dependencies import (
    get_app_settings,
    get_clock,
    get_database,
    get_dispatcher,
)
from quire.api.models import ConfigView, HealthStatus, ServerInfo
from quire.api.responses import envelope_response
from quire.config import Settings
from quire.domain import Envelope
from quire.infrastructure.database import Database
from quire.mcp.dispatcher import SERVER_NAME, MCPDispatcher
from quire.utils.time_service import TimeService

logger = structlog.get_logger()
router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    database: Database = Depends(get_database),  # noqa: B008
    clock: TimeService = Depends(get_clock),  # noqa: B008
) -> JSONResponse:
    """Basic liveness plus a database round trip."""
    db_ok = database.ping()
    if not db_ok:
        logger.warning("health_check_degraded", database="unreachable")

    health = HealthStatus(
        status="healthy" if db_ok else "degraded",
        timestamp=clock.timestamp(),
        server=SERVER_NAME,
        database="healthy" if db_ok else "unhealthy",
    )
    return envelope_response(Envelope.ok(health.model_dump()))


@router.get("/info")
def server_info(
    dispatcher: MCPDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> JSONResponse:
    """Server identity and the tool catalog names."""
    info = ServerInfo(**dispatcher.server_info())
    return envelope_response(Envelope.ok(info.model_dump()))


@router.get("/api/config")
def get_config(
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> JSONResponse:
    """Current configuration, read-only."""
    view = ConfigView(**settings.public_dict())
    return envelope_response(Envelope.ok(view.model_dump()))
