"""Application configuration.

Centralizes constants and environment-driven settings.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Title enrichment
TITLE_MAX_LENGTH = 40  # Characters kept from the first user message
TITLE_ELLIPSIS = "..."

# Task scope naming
SCREEN_SCOPE_NAME = "chat-screen"

# Repository backends
BACKEND_MEMORY = "memory"

# Analytics sinks
ANALYTICS_LOG = "log"
ANALYTICS_NONE = "none"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""

    log_level: str = Field(default="INFO", description="Minimum level for structlog output")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")
    repository_backend: str = Field(default=BACKEND_MEMORY, description="Repository implementation")
    analytics: str = Field(default=ANALYTICS_LOG, description="Analytics sink: log or none")


def load_settings(env_file: str | None = None) -> Settings:
    """Create settings from environment variables.

    Args:
        env_file: Optional dotenv file loaded before reading the environment

    Returns:
        Settings instance

    Environment variables:
        APPGPT_LOG_LEVEL: Log level (default: INFO)
        APPGPT_LOG_JSON: Emit JSON logs (default: false)
        APPGPT_REPOSITORY_BACKEND: Repository backend (default: memory)
        APPGPT_ANALYTICS: Analytics sink, log or none (default: log)
    """
    load_dotenv(env_file)
    return Settings(
        log_level=os.getenv("APPGPT_LOG_LEVEL", "INFO").upper(),
        log_json=os.getenv("APPGPT_LOG_JSON", "false").lower() in _TRUTHY,
        repository_backend=os.getenv("APPGPT_REPOSITORY_BACKEND", BACKEND_MEMORY).lower(),
        analytics=os.getenv("APPGPT_ANALYTICS", ANALYTICS_LOG).lower(),
    )
