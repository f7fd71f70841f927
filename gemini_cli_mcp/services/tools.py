"""
Gemini tool service - the orchestration layer behind the MCP tools.

Turns validated tool parameters into gemini-cli invocations: builds the prompt
and flags, maps client session tokens to CLI sessions, and post-processes
stream-json output when requested.

Framework-agnostic: used by the MCP server and the operator CLI.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Sequence
from pathlib import PurePath

from gemini_cli_mcp.exceptions import UnsupportedFileTypeError
from gemini_cli_mcp.i18n import get_locale, t
from gemini_cli_mcp.protocols import LoggerProtocol, NullLogger
from gemini_cli_mcp.schemas.operations.sessions import ListSessionsResult
from gemini_cli_mcp.schemas.operations.tools import (
    AnalyzeFileParameters,
    ChatParameters,
    ExecuteTaskParameters,
    GoogleSearchParameters,
)
from gemini_cli_mcp.services.aggregator import aggregate_stream_events
from gemini_cli_mcp.services.gemini_cli import GeminiCliCommand, execute_gemini_cli
from gemini_cli_mcp.services.gemini_cli import list_sessions as list_cli_sessions
from gemini_cli_mcp.services.session_manager import SessionManager
from gemini_cli_mcp.services.stream_parser import parse_stream_output

SUPPORTED_IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.webp', '.svg', '.bmp')
SUPPORTED_TEXT_EXTENSIONS = ('.txt', '.md', '.text')
SUPPORTED_DOCUMENT_EXTENSIONS = ('.pdf',)
SUPPORTED_EXTENSIONS = SUPPORTED_IMAGE_EXTENSIONS + SUPPORTED_TEXT_EXTENSIONS + SUPPORTED_DOCUMENT_EXTENSIONS

RAW_SEARCH_TEMPLATE = """Search for: "{query}" and return the results in the following JSON format:
{{
  "{query}": {{
    "summary": "Brief summary of findings",
    "groundingMetadata": {{
      "searchQueries": ["list of search queries used"],
      "sources": [
        {{
          "url": "source URL",
          "title": "source domain/title",
          "relevantExcerpts": ["key excerpts from this source"]
        }}
      ]
    }}
  }}
}}{limit_text}"""


def build_search_prompt(params: GoogleSearchParameters) -> str:
    """Prompt for googleSearch: natural language, or a JSON grounding template when raw."""
    if params.raw:
        limit_text = f'\nLimit to {params.limit} sources.' if params.limit else ''
        return RAW_SEARCH_TEMPLATE.format(query=params.query, limit_text=limit_text)

    prompt = f'Search for: {params.query}'
    if params.limit:
        prompt += f' (return up to {params.limit} results)'
    return prompt


def build_task_prompt(params: ExecuteTaskParameters) -> str:
    """Prompt for executeTask: the task plus an optional target file list."""
    prompt = params.task
    if params.files:
        prompt += '\n\nTarget files:\n' + '\n'.join(params.files)
    return prompt


class SessionCreationGate:
    """
    Reader/writer gate over gemini-cli session creation.

    Every run without -r creates a CLI session. Session resolution (exclusive)
    needs a window in which no other run can create one; plain runs (shared)
    may overlap each other. A waiting resolution blocks new plain runs.
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._shared = 0
        self._exclusive = False
        self._exclusive_waiting = 0

    @contextlib.asynccontextmanager
    async def shared(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._exclusive and not self._exclusive_waiting)
            self._shared += 1
        try:
            yield
        finally:
            async with self._condition:
                self._shared -= 1
                self._condition.notify_all()

    @contextlib.asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        async with self._condition:
            self._exclusive_waiting += 1
            try:
                await self._condition.wait_for(lambda: not self._exclusive and self._shared == 0)
            finally:
                self._exclusive_waiting -= 1
                self._condition.notify_all()
            self._exclusive = True
        try:
            yield
        finally:
            async with self._condition:
                self._exclusive = False
                self._condition.notify_all()


def unsupported_file_type_message(extension: str) -> str:
    """Localized error listing every supported extension by category."""
    errors = get_locale().errors
    return '\n'.join(
        [
            t('errors.unsupportedFileType', extension=extension),
            f'{errors.images}: {", ".join(SUPPORTED_IMAGE_EXTENSIONS)}',
            f'{errors.text}: {", ".join(SUPPORTED_TEXT_EXTENSIONS)}',
            f'{errors.documents}: {", ".join(SUPPORTED_DOCUMENT_EXTENSIONS)}',
        ]
    )


class GeminiToolService:
    """
    Service implementing each MCP tool on top of gemini-cli.

    Holds the process-wide SessionManager and the gate that isolates session
    resolution: the before/after session diff in SessionManager is only sound
    when no other new conversation starts inside the window.
    """

    def __init__(
        self,
        gemini_cli: GeminiCliCommand,
        default_model: str,
        session_manager: SessionManager | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize tool service.

        Args:
            gemini_cli: How to invoke gemini-cli
            default_model: Model passed with -m when the caller gives none
            session_manager: Client token mappings (default: a fresh, empty manager)
            timeout: Per-invocation timeout in seconds (default: no limit)
        """
        self.gemini_cli = gemini_cli
        self.default_model = default_model
        self.session_manager = session_manager or SessionManager()
        self.timeout = timeout
        self._session_gate = SessionCreationGate()

    # ==========================================================================
    # Tools
    # ==========================================================================

    async def google_search(self, params: GoogleSearchParameters, logger: LoggerProtocol = NullLogger()) -> str:
        """Search the web through Gemini. Returns the CLI output unparsed."""
        args = ['-p', build_search_prompt(params)]
        if params.sandbox:
            args.append('-s')
        if params.yolo:
            args.append('-y')
        args.extend(self._model_args(params.model))

        return await self._run_tool(args, params.session_id, logger=logger)

    async def chat(self, params: ChatParameters, logger: LoggerProtocol = NullLogger()) -> str:
        """Chat with Gemini. Sandbox mode unless sandbox is explicitly False."""
        args = ['-p', params.prompt]
        if params.sandbox is not False:
            args.append('-s')
        if params.yolo:
            args.append('-y')
        args.extend(self._model_args(params.model))

        return await self._run_tool(args, params.session_id, logger=logger)

    async def analyze_file(self, params: AnalyzeFileParameters, logger: LoggerProtocol = NullLogger()) -> str:
        """
        Analyze an image, text or PDF file.

        Raises:
            UnsupportedFileTypeError: If the file extension is not supported
        """
        extension = PurePath(params.file_path).suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileTypeError(extension, unsupported_file_type_message(extension))

        prompt = f'Analyze this file: {params.file_path}'
        if params.prompt:
            prompt += f'\n\n{params.prompt}'

        args = ['-p', prompt]
        if params.sandbox:
            args.append('-s')
        if params.yolo:
            args.append('-y')
        args.extend(self._model_args(params.model))

        return await self._run_tool(args, params.session_id, logger=logger)

    async def execute_task(self, params: ExecuteTaskParameters, logger: LoggerProtocol = NullLogger()) -> str:
        """
        Execute a task with edit permissions.

        Sandbox is off unless explicitly True; YOLO is on unless explicitly
        False. With stream=True the CLI emits stream-json and the aggregated
        StreamingTaskResult is returned as JSON.
        """
        args = ['-p', build_task_prompt(params)]
        if params.sandbox is True:
            args.append('-s')
        if params.yolo is not False:
            args.append('-y')
        args.extend(self._model_args(params.model))
        if params.stream:
            args.extend(['--output-format', 'stream-json'])

        output = await self._run_tool(args, params.session_id, cwd=params.cwd, logger=logger)

        if not params.stream:
            return output

        result = aggregate_stream_events(parse_stream_output(output))
        await logger.info(f'Task finished with status {result.status} ({len(result.tool_calls)} tool calls)')
        for error in result.errors:
            await logger.warning(f'Gemini reported: {error}')
        return result.to_wire_json()

    async def list_sessions(self, cwd: str | None = None) -> ListSessionsResult:
        """List CLI sessions, annotating each with the client token mapped to it."""
        output = await list_cli_sessions(self.gemini_cli, cwd=cwd, timeout=self.timeout)
        mappings = self.session_manager.get_all_mappings()

        # session id -> client token
        reverse_mappings = {real_id: client_id for client_id, real_id in mappings.items()}

        sessions = [
            session.model_copy(update={'client_id': reverse_mappings.get(session.session_id)})
            for session in output.sessions
        ]

        return ListSessionsResult(raw=output.raw, sessions=sessions, mappings=mappings or None)

    # ==========================================================================
    # Session handling
    # ==========================================================================

    async def run_with_session(
        self,
        session_id: str,
        args: Sequence[str],
        cwd: str | None = None,
        logger: LoggerProtocol = NullLogger(),
    ) -> str:
        """
        Run gemini-cli inside the conversation identified by a client token.

        On first use of the token, the run itself starts the conversation and
        the new CLI session is mapped to the token. Afterwards the run resumes
        the mapped session with -r.

        Raises:
            SessionMappingError: If the first run created no observable session
        """
        run_result: str | None = None

        async def list_session_ids() -> list[str]:
            output = await list_cli_sessions(self.gemini_cli, cwd=cwd, timeout=self.timeout)
            return [session.session_id for session in output.sessions]

        async def start_session() -> None:
            nonlocal run_result
            run_result = await execute_gemini_cli(self.gemini_cli, args, cwd=cwd, timeout=self.timeout)

        async with self._session_gate.exclusive():
            real_id = await self.session_manager.resolve_session(session_id, list_session_ids, start_session)

        if run_result is not None:
            await logger.info(f'Started session {real_id} for {session_id!r}')
            return run_result

        # Mapping already existed, so start_session never ran
        await logger.info(f'Resuming session {real_id} for {session_id!r}')
        return await execute_gemini_cli(self.gemini_cli, [*args, '-r', real_id], cwd=cwd, timeout=self.timeout)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _model_args(self, model: str | None) -> list[str]:
        return ['-m', model or self.default_model]

    async def _run_tool(
        self,
        args: Sequence[str],
        session_id: str | None,
        cwd: str | None = None,
        logger: LoggerProtocol = NullLogger(),
    ) -> str:
        if session_id:
            return await self.run_with_session(session_id, args, cwd=cwd, logger=logger)
        async with self._session_gate.shared():
            return await execute_gemini_cli(self.gemini_cli, args, cwd=cwd, timeout=self.timeout)
