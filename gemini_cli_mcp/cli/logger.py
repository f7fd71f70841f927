"""Terminal progress output for the operator CLI."""

from __future__ import annotations

import typer


class CLILogger:
    """
    LoggerProtocol for typer commands.

    stdout is reserved for command results (tables, JSON), so progress goes to
    stderr: info only with --verbose, warnings and errors always.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    async def info(self, message: str) -> None:
        if self.verbose:
            typer.secho(f'[INFO] {message}', fg=typer.colors.BRIGHT_BLACK, err=True)

    async def warning(self, message: str) -> None:
        typer.secho(f'[WARNING] {message}', fg=typer.colors.YELLOW, err=True)

    async def error(self, message: str) -> None:
        typer.secho(f'[ERROR] {message}', fg=typer.colors.RED, err=True)
