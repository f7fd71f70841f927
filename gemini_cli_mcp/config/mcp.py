"""
MCP server configuration.

Extends base configuration with MCP-specific settings.
"""

from __future__ import annotations

from gemini_cli_mcp.config.base import BaseGeminiSettings, lazy_settings


class McpServerSettings(BaseGeminiSettings):
    """MCP server-specific configuration."""

    SERVER_NAME: str = 'gemini-cli-mcp-server'


# Module-level singleton (lazy-loaded)
settings = lazy_settings(McpServerSettings)
