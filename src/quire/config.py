"""Configuration management for Quire."""

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to every component that needs it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = Field(
        default=8080,
        validation_alias=AliasChoices("port", "quire_port"),
        description="API port (checks PORT, then QUIRE_PORT, defaults to 8080)",
    )
    debug: bool = False

    # Storage
    database_path: str = "./data/content.db"

    # Content limits
    max_title_length: int = 500
    max_content_size: int = 1024 * 1024
    max_tags: int = 100
    default_page_size: int = 20
    max_page_size: int = 100
    export_limit: int = 10000
    exact_search_counts: bool = False

    # CORS
    enable_cors: bool = True
    cors_origin: str = "*"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # Time handling
    timezone: str | None = None

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Port must be a usable TCP port."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port: {v}. Must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL: '{v}'. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"Invalid LOG_FORMAT: '{v}'. Must be json or console")
        return v.lower()

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "Settings":
        """Validate that paging limits are consistent."""
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ValueError("Page sizes must be positive")
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"DEFAULT_PAGE_SIZE ({self.default_page_size}) cannot exceed "
                f"MAX_PAGE_SIZE ({self.max_page_size})"
            )
        return self

    def public_dict(self) -> dict:
        """Settings safe to show to clients."""
        return {
            "host": self.host,
            "port": self.port,
            "database_path": self.database_path,
            "log_level": self.log_level,
            "max_title_length": self.max_title_length,
            "max_content_size": self.max_content_size,
            "default_page_size": self.default_page_size,
            "max_page_size": self.max_page_size,
            "enable_cors": self.enable_cors,
            "cors_origin": self.cors_origin,
        }


def load_settings(config_file: str | Path | None = None, **overrides) -> Settings:
    """Build settings from an optional JSON config file plus overrides.

    File values win over environment variables; the environment still
    fills anything the file leaves out. A missing file means defaults.
    """
    data: dict = {}
    if config_file is not None:
        path = Path(config_file)
        if path.exists():
            with path.open(encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {path} must contain a JSON object")
            data.update(loaded)
    data.update(overrides)
    return Settings(**data)


@lru_cache
def get_settings() -> Settings:
    """Get settings for process entrypoints - lazy loaded when first accessed.

    QUIRE_CONFIG may name a JSON config file.
    """
    return load_settings(os.environ.get("QUIRE_CONFIG"))
