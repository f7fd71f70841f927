"""
Gemini CLI runner - locate and invoke the `gemini` executable.

Provides executable discovery (PATH, then optional npx fallback), subprocess
execution with captured output, and parsing of `gemini --list-sessions`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import shutil
from collections.abc import Sequence

import attrs

from gemini_cli_mcp.exceptions import GeminiCliExecutionError, GeminiCliNotFoundError, GeminiCliTimeoutError
from gemini_cli_mcp.i18n import t
from gemini_cli_mcp.schemas.operations.sessions import ListSessionsOutput, SessionInfo

logger = logging.getLogger(__name__)

GEMINI_EXECUTABLE = 'gemini'
NPX_PACKAGE = 'https://github.com/google-gemini/gemini-cli'

# Format example:
#   1. Empty conversation (13 days ago) [54e41765-c1b4-43ef-a66b-b707e519]
#   9. hello test (14 minutes ago) [9ec64691-53cb-4fa3-b7df-a121b6dcef54]
SESSION_LINE_PATTERN = re.compile(r'^\s*\d+\.\s+(?P<title>.+?)\s+\((?P<age>[^)]+)\)\s+\[(?P<session_id>[^\]]+)\]')


@attrs.define(frozen=True)
class GeminiCliCommand:
    """Executable plus the arguments that precede every invocation."""

    command: str
    initial_args: tuple[str, ...] = ()

    def argv(self, args: Sequence[str]) -> list[str]:
        """Full argument vector for one invocation."""
        return [self.command, *self.initial_args, *args]


def find_executable(name: str, path: str | None = None) -> str | None:
    """
    Find an executable in PATH.

    Respects PATHEXT on Windows and the execute bit elsewhere.

    Args:
        name: Executable name without extension
        path: Search path (default: the PATH environment variable)

    Returns:
        Full path to the executable, or None if not found
    """
    return shutil.which(name, path=path)


def decide_gemini_cli_command(allow_npx: bool, path: str | None = None) -> GeminiCliCommand:
    """
    Determine how to invoke gemini-cli.

    Args:
        allow_npx: Fall back to running gemini-cli through npx when not on PATH
        path: Search path override (default: PATH)

    Returns:
        GeminiCliCommand for the local executable or the npx fallback

    Raises:
        GeminiCliNotFoundError: If gemini is not on PATH and npx is not allowed
    """
    gemini_path = find_executable(GEMINI_EXECUTABLE, path=path)
    if gemini_path:
        return GeminiCliCommand(command=gemini_path)

    if allow_npx:
        return GeminiCliCommand(command='npx', initial_args=(NPX_PACKAGE,))

    raise GeminiCliNotFoundError(t('errors.geminiNotFound'))


async def execute_gemini_cli(
    gemini_cli: GeminiCliCommand,
    args: Sequence[str],
    cwd: str | None = None,
    timeout: float | None = None,
) -> str:
    """
    Run gemini-cli and return its stdout.

    stdin is closed immediately; the CLI runs non-interactively.

    Args:
        gemini_cli: Command to run
        args: Arguments appended after the command's initial arguments
        cwd: Working directory (default: current directory)
        timeout: Seconds to wait before killing the process (default: no limit)

    Returns:
        Decoded stdout

    Raises:
        GeminiCliExecutionError: If the process exits non-zero
        GeminiCliTimeoutError: If the process exceeds the timeout
        asyncio.CancelledError: If the caller is cancelled; the process is killed first
        OSError: If the process cannot be spawned
    """
    argv = gemini_cli.argv(args)
    logger.debug('Running %s (cwd=%s)', argv[:2], cwd)

    process = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        raise GeminiCliTimeoutError(timeout) from None
    finally:
        # Timed out or cancelled: never leave a run behind that can still create a session
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    if process.returncode != 0:
        raise GeminiCliExecutionError(process.returncode, stderr.decode('utf-8', errors='replace'))

    return stdout.decode('utf-8', errors='replace')


def parse_sessions_output(output: str) -> list[SessionInfo]:
    """
    Parse `gemini --list-sessions` output.

    Lines that do not match the numbered session format are ignored.
    """
    sessions = []
    for line in output.split('\n'):
        match = SESSION_LINE_PATTERN.match(line)
        if match:
            sessions.append(
                SessionInfo(
                    title=match['title'].strip(),
                    age=match['age'].strip(),
                    session_id=match['session_id'].strip(),
                )
            )
    return sessions


async def list_sessions(
    gemini_cli: GeminiCliCommand,
    cwd: str | None = None,
    timeout: float | None = None,
) -> ListSessionsOutput:
    """
    Run `gemini --list-sessions` and parse the result.

    Sessions are scoped to the project directory, so cwd must match the
    directory the conversations run in.
    """
    raw = await execute_gemini_cli(gemini_cli, ['--list-sessions'], cwd=cwd, timeout=timeout)
    return ListSessionsOutput(raw=raw, sessions=parse_sessions_output(raw))
