"""
Base configuration for gemini-cli-mcp.

Shared settings and helper functions for the MCP server and the operator CLI.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='BaseGeminiSettings')

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class BaseGeminiSettings(pydantic_settings.BaseSettings):
    """Shared configuration across the MCP server and CLI."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='GEMINI_MCP_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown GEMINI_MCP_* entries in .env
    )

    # Application metadata
    APP_NAME: str = 'gemini-cli-mcp-server'
    VERSION: str = '0.3.0'

    # Gemini CLI invocation
    DEFAULT_MODEL: str = 'gemini-3-pro-preview'
    CLI_TIMEOUT_SECONDS: float | None = None  # None = wait indefinitely
    ALLOW_NPX: bool = False  # Fall back to `npx <gemini-cli repo>` when not on PATH

    LOG_LEVEL: str = 'WARNING'

    @pydantic.field_validator('CLI_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError('CLI_TIMEOUT_SECONDS must be positive')
        return v

    @pydantic.field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f'LOG_LEVEL must be one of {", ".join(LOG_LEVELS)}')
        return level


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Instantiate a settings class, optionally reading an explicit .env file.

    The file comes from env_file, else from the LOAD_ENV_FILE environment
    variable. With neither, only process environment (and a .env in the
    working directory, if present) is consulted.

    Raises:
        FileNotFoundError: If an explicit .env file does not exist
        pydantic.ValidationError: If a value fails validation
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.is_file():
        raise FileNotFoundError(f'.env file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """Settings proxy, instantiated on first attribute access."""
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))
