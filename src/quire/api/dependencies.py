"""Dependency injection for API endpoints."""

from fastapi import Request

from quire.config import Settings
from quire.domain import ContentManager
from quire.infrastructure.database import Database
from quire.mcp.dispatcher import MCPDispatcher
from quire.utils.time_service import TimeService


def get_database(request: Request) -> Database:
    """Get the database from app state."""
    return request.app.state.database


def get_manager(request: Request) -> ContentManager:
    """Get the content manager from app state."""
    return request.app.state.manager


def get_dispatcher(request: Request) -> MCPDispatcher:
    return request.app.state.dispatcher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> TimeService:
    return request.app.state.clock
