#!/usr/bin/env python3
"""
Command-line interface for gemini-cli-mcp.

Runs the MCP server and offers offline helpers for inspecting gemini-cli
sessions and stream-json transcripts.
"""

from __future__ import annotations

import asyncio
import sys
import traceback
from pathlib import Path

import typer

from gemini_cli_mcp.cli.logger import CLILogger
from gemini_cli_mcp.config.mcp import settings
from gemini_cli_mcp.exceptions import GeminiMcpError
from gemini_cli_mcp.mcp.server import run
from gemini_cli_mcp.services.aggregator import aggregate_stream_events
from gemini_cli_mcp.services.gemini_cli import decide_gemini_cli_command, list_sessions
from gemini_cli_mcp.services.stream_parser import parse_stream_output

app = typer.Typer(
    name='gemini-cli-mcp',
    help='Expose gemini-cli as MCP tools',
    add_completion=False,
)


@app.command()
def serve(
    allow_npx: bool = typer.Option(False, '--allow-npx', help='Run gemini-cli via npx when it is not on PATH'),
) -> None:
    """Run the MCP server over stdio."""
    run(allow_npx=allow_npx or settings.ALLOW_NPX)


@app.command()
def sessions(
    allow_npx: bool = typer.Option(False, '--allow-npx', help='Run gemini-cli via npx when it is not on PATH'),
    cwd: Path | None = typer.Option(None, '--cwd', help='Project directory to list sessions for (default: current)'),
    json_output: bool = typer.Option(False, '--json', help='Print JSON instead of a table'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """List gemini-cli sessions for a project directory."""
    asyncio.run(_sessions_async(allow_npx or settings.ALLOW_NPX, cwd, json_output, verbose))


@app.command()
def aggregate(
    transcript: str = typer.Argument(..., help="stream-json transcript file, or '-' for stdin"),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Aggregate a saved `gemini --output-format stream-json` transcript."""
    asyncio.run(_aggregate_async(transcript, verbose))


async def _sessions_async(allow_npx: bool, cwd: Path | None, json_output: bool, verbose: bool) -> None:
    """Async implementation of sessions command."""
    logger = CLILogger(verbose=verbose)

    try:
        gemini_cli = decide_gemini_cli_command(allow_npx)
        await logger.info(f'Using gemini-cli: {" ".join(gemini_cli.argv([]))}')

        output = await list_sessions(
            gemini_cli,
            cwd=str(cwd) if cwd else None,
            timeout=settings.CLI_TIMEOUT_SECONDS,
        )

        if json_output:
            typer.echo(output.to_wire_json())
            return

        if not output.sessions:
            typer.echo('No sessions found.')
            return

        for session in output.sessions:
            typer.secho(session.session_id, fg=typer.colors.CYAN, nl=False)
            typer.echo(f'  {session.title} ({session.age})')

    except GeminiMcpError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except Exception as e:
        await logger.error(f'Failed to list sessions: {e}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)


async def _aggregate_async(transcript: str, verbose: bool) -> None:
    """Async implementation of aggregate command."""
    logger = CLILogger(verbose=verbose)

    try:
        if transcript == '-':
            text = sys.stdin.read()
        else:
            text = Path(transcript).read_text(encoding='utf-8')

        events = parse_stream_output(text)
        await logger.info(f'Parsed {len(events)} events')

        result = aggregate_stream_events(events)
        for error in result.errors:
            await logger.warning(f'Gemini reported: {error}')

        typer.echo(result.to_wire_json())

    except (OSError, UnicodeDecodeError) as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
