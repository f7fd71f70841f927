"""
Tests for SessionManager.

Validates the client token -> CLI session mapping:
- Mapped tokens resolve without touching the CLI
- First resolution diffs session listings taken before and after starting a conversation
- No new session is a hard failure naming the token, with no retry
- Collaborator failures propagate unchanged
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from gemini_cli_mcp.exceptions import SessionMappingConflictError, SessionMappingError
from gemini_cli_mcp.services.session_manager import SessionManager

# =============================================================================
# Helper Fakes
# =============================================================================


class FakeListSessions:
    """Returns successive snapshots, repeating the last one when exhausted."""

    def __init__(self, *snapshots: Sequence[str]) -> None:
        self.snapshots = list(snapshots)
        self.calls = 0

    async def __call__(self) -> Sequence[str]:
        index = min(self.calls, len(self.snapshots) - 1)
        self.calls += 1
        return self.snapshots[index]


class FakeStartSession:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


# =============================================================================
# Mapping table
# =============================================================================


def test_store_and_retrieve() -> None:
    manager = SessionManager()
    manager.set_session_id('client-1', 'real-1')

    assert manager.get_session_id('client-1') == 'real-1'
    assert manager.get_session_id('client-2') is None


def test_all_mappings_is_a_snapshot() -> None:
    manager = SessionManager()
    manager.set_session_id('c1', 'r1')
    manager.set_session_id('c2', 'r2')

    mappings = manager.get_all_mappings()
    manager.set_session_id('c3', 'r3')

    assert mappings == {'c1': 'r1', 'c2': 'r2'}


def test_set_same_mapping_twice_is_allowed() -> None:
    manager = SessionManager()
    manager.set_session_id('c1', 'r1')
    manager.set_session_id('c1', 'r1')

    assert manager.get_session_id('c1') == 'r1'


def test_remapping_is_rejected() -> None:
    manager = SessionManager()
    manager.set_session_id('c1', 'r1')

    with pytest.raises(SessionMappingConflictError) as exc_info:
        manager.set_session_id('c1', 'r2')

    assert exc_info.value.client_id == 'c1'
    assert manager.get_session_id('c1') == 'r1'


# =============================================================================
# resolve_session
# =============================================================================


@pytest.mark.asyncio
async def test_existing_mapping_skips_collaborators() -> None:
    manager = SessionManager()
    manager.set_session_id('c1', 'r1')
    list_fn = FakeListSessions(['r1', 'r2'])
    start_fn = FakeStartSession()

    result = await manager.resolve_session('c1', list_fn, start_fn)

    assert result == 'r1'
    assert list_fn.calls == 0
    assert start_fn.calls == 0


@pytest.mark.asyncio
async def test_new_session_is_detected_and_remembered() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions(['a'], ['a', 'new-id'])
    start_fn = FakeStartSession()

    first = await manager.resolve_session('Z', list_fn, start_fn)
    second = await manager.resolve_session('Z', list_fn, start_fn)

    assert first == 'new-id'
    assert second == 'new-id'
    assert list_fn.calls == 2
    assert start_fn.calls == 1
    assert manager.get_session_id('Z') == 'new-id'


@pytest.mark.asyncio
async def test_no_new_session_raises_naming_the_token() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions(['a', 'b'], ['a', 'b'])
    start_fn = FakeStartSession()

    with pytest.raises(SessionMappingError, match="'Y'") as exc_info:
        await manager.resolve_session('Y', list_fn, start_fn)

    assert exc_info.value.client_id == 'Y'
    assert str(exc_info.value) == "Failed to map session 'Y': No new session created by Gemini CLI."
    assert start_fn.calls == 1
    assert manager.get_session_id('Y') is None


@pytest.mark.asyncio
async def test_failure_is_not_cached() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions(['a'], ['a'], ['a'], ['a', 'b'])
    start_fn = FakeStartSession()

    with pytest.raises(SessionMappingError):
        await manager.resolve_session('retry', list_fn, start_fn)

    assert await manager.resolve_session('retry', list_fn, start_fn) == 'b'
    assert start_fn.calls == 2


@pytest.mark.asyncio
async def test_start_failure_propagates_unchanged() -> None:
    manager = SessionManager()
    error = RuntimeError('gemini exited with code 1: boom')
    list_fn = FakeListSessions(['a'])
    start_fn = FakeStartSession(error=error)

    with pytest.raises(RuntimeError) as exc_info:
        await manager.resolve_session('c1', list_fn, start_fn)

    assert exc_info.value is error
    assert list_fn.calls == 1  # 'after' snapshot never taken
    assert manager.get_all_mappings() == {}


@pytest.mark.asyncio
async def test_list_failure_propagates_unchanged() -> None:
    manager = SessionManager()
    start_fn = FakeStartSession()

    async def failing_list() -> Sequence[str]:
        raise OSError('gemini not executable')

    with pytest.raises(OSError, match='not executable'):
        await manager.resolve_session('c1', failing_list, start_fn)

    assert start_fn.calls == 0


@pytest.mark.asyncio
async def test_multiple_new_sessions_maps_first_in_listing_order() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions(['old'], ['old', 'first-new', 'second-new'])

    result = await manager.resolve_session('c1', list_fn, FakeStartSession())

    assert result == 'first-new'


@pytest.mark.asyncio
async def test_disappearing_sessions_are_ignored() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions(['gone', 'kept'], ['kept', 'fresh'])

    assert await manager.resolve_session('c1', list_fn, FakeStartSession()) == 'fresh'


@pytest.mark.asyncio
async def test_tokens_map_independently() -> None:
    manager = SessionManager()
    list_fn = FakeListSessions([], ['s1'], ['s1'], ['s1', 's2'])
    start_fn = FakeStartSession()

    assert await manager.resolve_session('alpha', list_fn, start_fn) == 's1'
    assert await manager.resolve_session('beta', list_fn, start_fn) == 's2'
    assert manager.get_all_mappings() == {'alpha': 's1', 'beta': 's2'}
