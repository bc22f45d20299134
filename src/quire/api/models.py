"""Pydantic models for API responses that are not content envelopes."""

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """Payload of GET /health."""

    status: str = Field(..., description="healthy or degraded")
    timestamp: int = Field(..., description="Unix time of the check")
    server: str
    database: str


class ServerInfo(BaseModel):
    """Payload of GET /info."""

    name: str
    version: str
    description: str
    protocol_version: str
    tools_count: int
    available_tools: list[str]


class ConfigView(BaseModel):
    """Read-only view of the running configuration."""

    host: str
    port: int
    database_path: str
    log_level: str
    max_title_length: int
    max_content_size: int
    default_page_size: int
    max_page_size: int
    enable_cors: bool
    cors_origin: str
