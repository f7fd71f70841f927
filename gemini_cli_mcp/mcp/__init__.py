"""MCP server entry point for gemini-cli-mcp."""

from __future__ import annotations

from gemini_cli_mcp.mcp.server import build_server, main

__all__ = ['build_server', 'main']
