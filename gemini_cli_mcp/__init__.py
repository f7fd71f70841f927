"""gemini-cli-mcp: expose gemini-cli as Model Context Protocol tools."""

from __future__ import annotations

__version__ = '0.3.0'
