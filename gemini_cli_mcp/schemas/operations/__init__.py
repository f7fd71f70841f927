"""
Operation schemas for tool parameters and results.

This package contains Pydantic models exchanged with MCP clients.
"""

from __future__ import annotations

from gemini_cli_mcp.schemas.operations.sessions import ListSessionsOutput, ListSessionsResult, SessionInfo
from gemini_cli_mcp.schemas.operations.tools import (
    AnalyzeFileParameters,
    ChatParameters,
    ExecuteTaskParameters,
    GoogleSearchParameters,
)

__all__ = [
    # Sessions
    'ListSessionsOutput',
    'ListSessionsResult',
    'SessionInfo',
    # Tool parameters
    'AnalyzeFileParameters',
    'ChatParameters',
    'ExecuteTaskParameters',
    'GoogleSearchParameters',
]
