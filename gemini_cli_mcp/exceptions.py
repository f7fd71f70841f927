"""
Shared exceptions for gemini-cli-mcp.

Domain-specific exceptions used across services.

Exception Hierarchy:
    GeminiMcpError (base)
    ├── SessionResolutionError (client token -> CLI session failures)
    │   ├── SessionMappingError (no new session observed after starting one)
    │   └── SessionMappingConflictError (attempt to remap an existing token)
    ├── GeminiCliError (invoking the gemini executable)
    │   ├── GeminiCliNotFoundError (no executable and npx fallback disabled)
    │   ├── GeminiCliExecutionError (non-zero exit code)
    │   └── GeminiCliTimeoutError (process exceeded the configured timeout)
    └── UnsupportedFileTypeError (analyzeFile extension not supported)
"""

from __future__ import annotations


class GeminiMcpError(Exception):
    """Base exception for all gemini-cli-mcp errors."""


class SessionResolutionError(GeminiMcpError):
    """Base exception for session mapping failures."""


class SessionMappingError(SessionResolutionError):
    """Raised when starting a conversation produced no observable new session."""

    def __init__(self, client_id: str) -> None:
        self.client_id = client_id
        super().__init__(f"Failed to map session '{client_id}': No new session created by Gemini CLI.")


class SessionMappingConflictError(SessionResolutionError):
    """Raised when a client token is already mapped to a different session."""

    def __init__(self, client_id: str, existing_id: str, requested_id: str) -> None:
        self.client_id = client_id
        self.existing_id = existing_id
        self.requested_id = requested_id
        super().__init__(
            f"Session '{client_id}' is already mapped to {existing_id}; refusing to remap to {requested_id}."
        )


class GeminiCliError(GeminiMcpError):
    """Base exception for gemini executable failures."""


class GeminiCliNotFoundError(GeminiCliError):
    """Raised when the gemini executable cannot be found."""


class GeminiCliExecutionError(GeminiCliError):
    """Raised when the gemini process exits with a non-zero code."""

    def __init__(self, returncode: int | None, stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f'gemini exited with code {returncode}: {stderr}')


class GeminiCliTimeoutError(GeminiCliError):
    """Raised when the gemini process does not finish within the timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f'gemini did not finish within {timeout:g} seconds')


class UnsupportedFileTypeError(GeminiMcpError):
    """Raised when analyzeFile is given a file extension it cannot handle."""

    def __init__(self, extension: str, message: str) -> None:
        self.extension = extension
        super().__init__(message)
