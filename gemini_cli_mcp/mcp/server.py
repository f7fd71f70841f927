"""
Gemini CLI MCP Server.

Exposes gemini-cli as MCP tools: googleSearch, chat, listSessions,
analyzeFile and executeTask.

Setup:
    claude mcp add --scope user gemini-cli -- uvx --from git+<repo-url> mcp-server

    # Fall back to npx when gemini is not installed
    claude mcp add --scope user gemini-cli -- uvx --from git+<repo-url> mcp-server --allow-npx

Example:
    # Continue a conversation across calls with a caller-chosen session ID
    chat(prompt='Remember the number 7', sessionId='task-1')
    chat(prompt='What number did I ask you to remember?', sessionId='task-1')
"""

# No `from __future__ import annotations`: tool signatures carry localized
# Field descriptions built inside build_server(), which FastMCP must see as
# evaluated annotations.

import contextlib
import logging
import sys
from collections.abc import AsyncIterator, Sequence
from typing import Annotated, Any

import attrs
import pydantic
from mcp.server.fastmcp import Context, FastMCP

from gemini_cli_mcp.config.mcp import settings
from gemini_cli_mcp.exceptions import GeminiCliNotFoundError
from gemini_cli_mcp.i18n import LocaleData, get_locale, t
from gemini_cli_mcp.mcp.utils import DualLogger
from gemini_cli_mcp.schemas.operations.tools import (
    AnalyzeFileParameters,
    ChatParameters,
    ExecuteTaskParameters,
    GoogleSearchParameters,
)
from gemini_cli_mcp.services.gemini_cli import GeminiCliCommand, decide_gemini_cli_command
from gemini_cli_mcp.services.session_manager import SessionManager
from gemini_cli_mcp.services.tools import GeminiToolService

logger = logging.getLogger(__name__)

# ==============================================================================
# Server State (immutable)
# ==============================================================================


@attrs.define(frozen=True)
class ServerState:
    """
    Immutable server state initialized at startup.

    The SessionManager inside tool_service is the process-wide client token
    table: created here, never persisted, discarded at shutdown.
    """

    gemini_cli: GeminiCliCommand
    tool_service: GeminiToolService


# ==============================================================================
# Server Setup
# ==============================================================================


def build_server(allow_npx: bool) -> FastMCP:
    """
    Create the FastMCP server.

    Args:
        allow_npx: Fall back to running gemini-cli through npx when not on PATH

    Returns:
        Configured server; tools are registered when the lifespan starts
    """

    @contextlib.asynccontextmanager
    async def lifespan(mcp_server: FastMCP) -> AsyncIterator[None]:
        """
        Manage server lifecycle and state initialization.

        Creates ServerState with all services at startup.
        """
        gemini_cli = decide_gemini_cli_command(allow_npx)

        tool_service = GeminiToolService(
            gemini_cli=gemini_cli,
            default_model=settings.DEFAULT_MODEL,
            session_manager=SessionManager(),
            timeout=settings.CLI_TIMEOUT_SECONDS,
        )
        state = ServerState(gemini_cli=gemini_cli, tool_service=tool_service)

        # Register tools with closure over state
        register_tools(mcp_server, state, get_locale())

        print(f'[MCP Server] gemini-cli: {" ".join(gemini_cli.argv([]))}', file=sys.stderr)
        print(f'[MCP Server] Default model: {settings.DEFAULT_MODEL}', file=sys.stderr)

        yield  # Setup successful; application active

        mappings = tool_service.session_manager.get_all_mappings()
        print(f'[MCP Server] Shutting down, discarding {len(mappings)} session mappings', file=sys.stderr)

    return FastMCP(settings.SERVER_NAME, lifespan=lifespan)


def require_context(ctx: Context[Any, Any, Any] | None) -> Context[Any, Any, Any]:
    """Context FastMCP injects into every tool call. None means the tool was called directly."""
    if ctx is None:
        raise RuntimeError('Context is required - must be called via FastMCP')
    return ctx


# ==============================================================================
# Tool Registration (Closure Pattern)
# ==============================================================================


def register_tools(server: FastMCP, state: ServerState, locale: LocaleData) -> None:
    """
    Register MCP tools with closure over server state.

    Argument names are the camelCase wire names MCP clients send.

    Args:
        server: Server to register on
        state: Server state containing services
        locale: Strings for tool and parameter descriptions
    """
    service = state.tool_service

    def describe(tool: str, param: str) -> str:
        text = locale.tools[tool].params.get(param, param)
        return text.replace('{defaultModel}', settings.DEFAULT_MODEL)

    search = 'googleSearch'

    @server.tool(name=search, description=locale.tools[search].description)
    async def google_search(
        query: Annotated[str, pydantic.Field(description=describe(search, 'query'))],
        limit: Annotated[int | None, pydantic.Field(description=describe(search, 'limit'))] = None,
        raw: Annotated[bool | None, pydantic.Field(description=describe(search, 'raw'))] = None,
        sandbox: Annotated[bool | None, pydantic.Field(description=describe(search, 'sandbox'))] = None,
        yolo: Annotated[bool | None, pydantic.Field(description=describe(search, 'yolo'))] = None,
        model: Annotated[str | None, pydantic.Field(description=describe(search, 'model'))] = None,
        sessionId: Annotated[str | None, pydantic.Field(description=describe(search, 'sessionId'))] = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> str:
        params = GoogleSearchParameters(
            query=query, limit=limit, raw=raw, sandbox=sandbox, yolo=yolo, model=model, session_id=sessionId
        )
        return await service.google_search(params, logger=DualLogger(require_context(ctx)))

    chat_tool = 'chat'

    @server.tool(name=chat_tool, description=locale.tools[chat_tool].description)
    async def chat(
        prompt: Annotated[str, pydantic.Field(description=describe(chat_tool, 'prompt'))],
        sessionId: Annotated[str | None, pydantic.Field(description=describe(chat_tool, 'sessionId'))] = None,
        sandbox: Annotated[bool | None, pydantic.Field(description=describe(chat_tool, 'sandbox'))] = None,
        yolo: Annotated[bool | None, pydantic.Field(description=describe(chat_tool, 'yolo'))] = None,
        model: Annotated[str | None, pydantic.Field(description=describe(chat_tool, 'model'))] = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> str:
        params = ChatParameters(prompt=prompt, session_id=sessionId, sandbox=sandbox, yolo=yolo, model=model)
        return await service.chat(params, logger=DualLogger(require_context(ctx)))

    @server.tool(name='listSessions', description=locale.tools['listSessions'].description)
    async def list_sessions(ctx: Context[Any, Any, Any] | None = None) -> str:
        tool_logger = DualLogger(require_context(ctx))
        result = await service.list_sessions()
        await tool_logger.info(f'Found {len(result.sessions)} sessions')
        return result.to_wire_json()

    analyze = 'analyzeFile'

    @server.tool(name=analyze, description=locale.tools[analyze].description)
    async def analyze_file(
        filePath: Annotated[str, pydantic.Field(description=describe(analyze, 'filePath'))],
        prompt: Annotated[str | None, pydantic.Field(description=describe(analyze, 'prompt'))] = None,
        sandbox: Annotated[bool | None, pydantic.Field(description=describe(analyze, 'sandbox'))] = None,
        yolo: Annotated[bool | None, pydantic.Field(description=describe(analyze, 'yolo'))] = None,
        model: Annotated[str | None, pydantic.Field(description=describe(analyze, 'model'))] = None,
        sessionId: Annotated[str | None, pydantic.Field(description=describe(analyze, 'sessionId'))] = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> str:
        params = AnalyzeFileParameters(
            file_path=filePath, prompt=prompt, sandbox=sandbox, yolo=yolo, model=model, session_id=sessionId
        )
        return await service.analyze_file(params, logger=DualLogger(require_context(ctx)))

    task_tool = 'executeTask'

    @server.tool(name=task_tool, description=locale.tools[task_tool].description)
    async def execute_task(
        task: Annotated[str, pydantic.Field(description=describe(task_tool, 'task'))],
        files: Annotated[Sequence[str] | None, pydantic.Field(description=describe(task_tool, 'files'))] = None,
        sessionId: Annotated[str | None, pydantic.Field(description=describe(task_tool, 'sessionId'))] = None,
        model: Annotated[str | None, pydantic.Field(description=describe(task_tool, 'model'))] = None,
        sandbox: Annotated[bool | None, pydantic.Field(description=describe(task_tool, 'sandbox'))] = None,
        yolo: Annotated[bool | None, pydantic.Field(description=describe(task_tool, 'yolo'))] = None,
        cwd: Annotated[str | None, pydantic.Field(description=describe(task_tool, 'cwd'))] = None,
        stream: Annotated[bool | None, pydantic.Field(description=describe(task_tool, 'stream'))] = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> str:
        params = ExecuteTaskParameters(
            task=task,
            files=list(files) if files is not None else None,
            session_id=sessionId,
            model=model,
            sandbox=sandbox,
            yolo=yolo,
            cwd=cwd,
            stream=stream,
        )
        return await service.execute_task(params, logger=DualLogger(require_context(ctx)))


# ==============================================================================
# Server Entry Point
# ==============================================================================


def run(allow_npx: bool) -> None:
    """
    Verify gemini-cli is available, then serve over stdio.

    Exits with status 1 and an install hint when gemini-cli cannot be found.
    """
    logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stderr)

    try:
        decide_gemini_cli_command(allow_npx)
    except GeminiCliNotFoundError as e:
        print(f'Error: {e}', file=sys.stderr)
        print(t('errors.installGemini'), file=sys.stderr)
        sys.exit(1)

    build_server(allow_npx).run()


def main() -> None:
    """Run the MCP server."""
    run(allow_npx=settings.ALLOW_NPX or '--allow-npx' in sys.argv[1:])


if __name__ == '__main__':
    main()
