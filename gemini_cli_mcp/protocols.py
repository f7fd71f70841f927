"""
Structural types shared by the service layer.

The tool service reports progress through an async logger supplied by its
caller, and the session resolver drives gemini-cli through two callbacks.
Both are declared here so services, the MCP server and the CLI agree on them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeAlias

# Returns every session ID gemini-cli currently lists
ListSessionsFn: TypeAlias = Callable[[], Awaitable[Sequence[str]]]

# Starts exactly one new conversation; the result is ignored
StartSessionFn: TypeAlias = Callable[[], Awaitable[object]]


class LoggerProtocol(Protocol):
    """
    Progress sink for tool runs.

    Implemented by DualLogger (stderr + MCP client), CLILogger (terminal)
    and NullLogger.
    """

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...


class NullLogger:
    """Discards all messages. Default for callers without a progress sink."""

    async def info(self, message: str) -> None:
        pass

    async def warning(self, message: str) -> None:
        pass

    async def error(self, message: str) -> None:
        pass
