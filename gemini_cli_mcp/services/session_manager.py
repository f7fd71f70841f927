"""
Session manager - maps client tokens to Gemini CLI session IDs.

The CLI assigns its own session ID to every new conversation and never prints
it for a one-shot `gemini -p` run. The only way to learn it is to list sessions
before and after starting a conversation and diff the two snapshots.

Lifecycle:
    One SessionManager is created at server startup and held in ServerState.
    Mappings live in memory only and are lost when the process exits.

Concurrency:
    The before/after diff is only correct when no other session is created
    during the window. SessionManager does not lock; callers must serialize
    resolve_session calls and keep other session-creating runs out of the
    window (GeminiToolService holds a SessionCreationGate for this).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from gemini_cli_mcp.exceptions import SessionMappingConflictError, SessionMappingError
from gemini_cli_mcp.protocols import ListSessionsFn, StartSessionFn

logger = logging.getLogger(__name__)


class SessionManager:
    """In-memory, append-only mapping of client tokens to CLI session IDs."""

    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    def get_session_id(self, client_id: str) -> str | None:
        """Get the CLI session ID for a client token, if mapped."""
        return self._sessions.get(client_id)

    def set_session_id(self, client_id: str, real_id: str) -> None:
        """
        Record a mapping directly.

        Raises:
            SessionMappingConflictError: If client_id is already mapped to a different session
        """
        existing = self._sessions.get(client_id)
        if existing is not None and existing != real_id:
            raise SessionMappingConflictError(client_id, existing, real_id)
        self._sessions[client_id] = real_id

    def get_all_mappings(self) -> Mapping[str, str]:
        """Snapshot of all current mappings (client token -> session ID)."""
        return dict(self._sessions)

    async def resolve_session(
        self,
        client_id: str,
        list_sessions_fn: ListSessionsFn,
        start_session_fn: StartSessionFn,
    ) -> str:
        """
        Resolve a client token to a CLI session ID, creating the mapping on first use.

        If the token is already mapped, returns immediately without calling
        either function. Otherwise snapshots the session list, runs
        start_session_fn (which must start a new conversation, i.e. run the CLI
        without a resume flag), snapshots again and maps the token to the
        session that appeared.

        Args:
            client_id: Caller-chosen session token
            list_sessions_fn: Returns all CLI session IDs currently known
            start_session_fn: Starts one new conversation; its return value is ignored

        Returns:
            The CLI session ID mapped to client_id

        Raises:
            SessionMappingError: If no new session appeared after start_session_fn
            Exception: Anything raised by list_sessions_fn or start_session_fn, unchanged
        """
        existing_id = self._sessions.get(client_id)
        if existing_id is not None:
            return existing_id

        before = set(await list_sessions_fn())

        await start_session_fn()

        after = await list_sessions_fn()

        # Preserve the listing order of 'after'
        new_ids = [session_id for session_id in after if session_id not in before]

        if not new_ids:
            raise SessionMappingError(client_id)

        if len(new_ids) > 1:
            logger.warning(
                'Session %r: %d new sessions appeared (%s); mapping the first',
                client_id,
                len(new_ids),
                ', '.join(new_ids),
            )

        new_id = new_ids[0]
        self._sessions[client_id] = new_id
        logger.info('Mapped session %r -> %s', client_id, new_id)
        return new_id
