"""
Tool parameter schemas.

Validated arguments for each MCP tool. Wire names are camelCase
(`sessionId`, `filePath`); Python attributes are snake_case. User-facing
descriptions are localized and attached by mcp/server.py.
"""

from __future__ import annotations

from collections.abc import Sequence

import pydantic

from gemini_cli_mcp.schemas.base import StrictModel


class GoogleSearchParameters(StrictModel):
    """Arguments for googleSearch."""

    query: str
    limit: int | None = None
    raw: bool | None = None
    sandbox: bool | None = None
    yolo: bool | None = None
    model: str | None = None
    session_id: str | None = None

    @pydantic.field_validator('limit')
    @classmethod
    def validate_limit(cls, v: int | None) -> int | None:
        """Reject non-positive result limits."""
        if v is not None and v < 1:
            raise ValueError('limit must be a positive integer')
        return v


class ChatParameters(StrictModel):
    """Arguments for chat. Sandbox mode is on unless explicitly disabled."""

    prompt: str
    session_id: str | None = None
    sandbox: bool | None = None
    yolo: bool | None = None
    model: str | None = None


class AnalyzeFileParameters(StrictModel):
    """Arguments for analyzeFile. file_path should be absolute."""

    file_path: str
    prompt: str | None = None
    sandbox: bool | None = None
    yolo: bool | None = None
    model: str | None = None
    session_id: str | None = None


class ExecuteTaskParameters(StrictModel):
    """
    Arguments for executeTask.

    Unlike chat, edits are allowed by default (sandbox off) and YOLO mode is on
    unless explicitly disabled. stream switches the CLI to stream-json output
    and the tool returns an aggregated result.
    """

    task: str
    files: Sequence[str] | None = None
    session_id: str | None = None
    model: str | None = None
    sandbox: bool | None = None
    yolo: bool | None = None
    cwd: str | None = None
    stream: bool | None = None
