"""Service layer for gemini-cli operations."""

from gemini_cli_mcp.services.aggregator import aggregate_stream_events
from gemini_cli_mcp.services.gemini_cli import GeminiCliCommand, decide_gemini_cli_command, execute_gemini_cli
from gemini_cli_mcp.services.session_manager import SessionManager
from gemini_cli_mcp.services.stream_parser import parse_stream_line, parse_stream_output
from gemini_cli_mcp.services.tools import GeminiToolService

__all__ = [
    'GeminiCliCommand',
    'GeminiToolService',
    'SessionManager',
    'aggregate_stream_events',
    'decide_gemini_cli_command',
    'execute_gemini_cli',
    'parse_stream_line',
    'parse_stream_output',
]
