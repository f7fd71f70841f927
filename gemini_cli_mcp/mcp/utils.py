"""Helpers for FastMCP tool handlers."""

from __future__ import annotations

# Standard Library
import sys
from datetime import UTC, datetime
from typing import Any

# Third-Party Libraries
from mcp.server.fastmcp import Context


class DualLogger:
    """
    LoggerProtocol that mirrors each message to stderr and to the MCP client.

    stdout carries the stdio transport and must stay clean.
    """

    def __init__(self, ctx: Context[Any, Any, Any]) -> None:
        self.ctx = ctx

    def _echo(self, level: str, message: str) -> None:
        stamp = datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')
        print(f'[{stamp}] [{level}] {message}', file=sys.stderr)

    async def info(self, message: str) -> None:
        self._echo('INFO', message)
        await self.ctx.info(message)

    async def warning(self, message: str) -> None:
        self._echo('WARNING', message)
        await self.ctx.warning(message)

    async def error(self, message: str) -> None:
        self._echo('ERROR', message)
        await self.ctx.error(message)
