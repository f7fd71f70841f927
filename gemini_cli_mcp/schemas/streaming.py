"""
Stream event schemas for `gemini --output-format stream-json`.

The CLI writes one JSON object per line while a task runs. Each object carries
a `type` tag and a `timestamp`.

Event sequence (typical):
    init -> message(user) -> [message(assistant, delta) | tool_use -> tool_result]* ->
    result

With 'error' events interspersed for non-fatal problems.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

import pydantic
from pydantic import Discriminator

from gemini_cli_mcp.schemas.base import StrictModel
from gemini_cli_mcp.schemas.types import PermissiveModel, TaskStatus, ToolCallStatus

StreamEventType = Literal['init', 'message', 'tool_use', 'tool_result', 'error', 'result']


# ==============================================================================
# Event Types
# ==============================================================================


class StreamEventBase(PermissiveModel):
    """Fields shared by every stream event."""

    timestamp: str | None = None


class InitEvent(StreamEventBase):
    """Session initialization - first event of a run."""

    type: Literal['init']
    session_id: str
    model: str


class MessageEvent(StreamEventBase):
    """
    User or assistant message.

    Assistant output arrives either as a complete message or as a series of
    delta fragments (`delta: true`) to be concatenated.
    """

    type: Literal['message']
    role: Literal['user', 'assistant']
    content: str
    delta: bool | None = None


class ToolUseEvent(StreamEventBase):
    """Tool call request issued by the model."""

    type: Literal['tool_use']
    tool_name: str
    tool_id: str
    parameters: Mapping[str, Any] = pydantic.Field(default_factory=dict)


class ToolResultEvent(StreamEventBase):
    """Tool execution result, matched to its ToolUseEvent by tool_id."""

    type: Literal['tool_result']
    tool_id: str
    status: Literal['success', 'error']
    output: str | None = None
    error: str | None = None


class ErrorEvent(StreamEventBase):
    """Non-fatal error reported mid-stream."""

    type: Literal['error']
    message: str
    code: int | None = None


class ResultStats(PermissiveModel):
    """Aggregate statistics reported with the final result event."""

    total_tokens: int | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    duration_ms: int | None = None
    tool_calls: int | None = None


class ResultEvent(StreamEventBase):
    """Final result - expected exactly once, at stream end."""

    type: Literal['result']
    status: Literal['success', 'error']
    stats: ResultStats | None = None


# Union of all event types
StreamEvent = Annotated[
    InitEvent | MessageEvent | ToolUseEvent | ToolResultEvent | ErrorEvent | ResultEvent,
    Discriminator('type'),
]

StreamEventAdapter: pydantic.TypeAdapter[StreamEvent] = pydantic.TypeAdapter(StreamEvent)


# ==============================================================================
# Aggregated Result
# ==============================================================================


class ToolCallRecord(StrictModel):
    """One tool invocation observed in a stream, in first-seen order."""

    tool_name: str
    tool_id: str
    status: ToolCallStatus
    output: str | None = None
    error: str | None = None


class StreamingTaskResult(StrictModel):
    """Structured result folded from a stream of events."""

    session_id: str | None = None
    model: str | None = None
    events: Sequence[StreamEvent] = ()
    tool_calls: Sequence[ToolCallRecord] = ()
    final_response: str | None = None
    status: TaskStatus = 'unknown'
    stats: ResultStats | None = None
    errors: Sequence[str] = ()
