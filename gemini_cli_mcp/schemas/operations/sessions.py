"""
Session listing schemas.

Models for `gemini --list-sessions` output and the listSessions tool result.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from gemini_cli_mcp.schemas.base import StrictModel


class SessionInfo(StrictModel):
    """
    One session as printed by `gemini --list-sessions`.

    Example source line:
        9. hello test (14 minutes ago) [9ec64691-53cb-4fa3-b7df-a121b6dcef54]
    """

    title: str
    age: str  # Human-readable, e.g. '14 minutes ago'
    session_id: str
    client_id: str | None = None  # Client token mapped to this session, if any


class ListSessionsOutput(StrictModel):
    """Raw CLI output together with the sessions parsed from it."""

    raw: str
    sessions: Sequence[SessionInfo]


class ListSessionsResult(StrictModel):
    """Result of the listSessions tool."""

    raw: str
    sessions: Sequence[SessionInfo]
    mappings: Mapping[str, str] | None = None  # client token -> session id, None when empty
