"""
Settings for the stdio bridge.

The MCP client launches the bridge and passes everything through the
environment, so no .env file is read here.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeSettings(BaseSettings):
    """Where the Quire server lives and how long to wait for it."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    quire_url: str = Field(default="http://localhost:8080", description="Quire server URL")
    quire_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    @field_validator("quire_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_bridge_settings() -> BridgeSettings:
    return BridgeSettings()
