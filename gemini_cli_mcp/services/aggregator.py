"""
Stream aggregator - folds stream events into a StreamingTaskResult.

Pure and synchronous: one left-to-right pass, all state in local accumulators,
so the same event sequence always yields an equal result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import assert_never

from gemini_cli_mcp.schemas.streaming import (
    ErrorEvent,
    InitEvent,
    MessageEvent,
    ResultEvent,
    ResultStats,
    StreamEvent,
    StreamingTaskResult,
    ToolCallRecord,
    ToolResultEvent,
    ToolUseEvent,
)
from gemini_cli_mcp.schemas.types import TaskStatus

logger = logging.getLogger(__name__)


def aggregate_stream_events(events: Sequence[StreamEvent]) -> StreamingTaskResult:
    """
    Aggregate stream events into a structured result.

    Reduction rules per event type:
    - init: session id and model (latest wins)
    - message: assistant complete message replaces the final response,
      assistant delta appends to it; user messages are ignored
    - tool_use: appends a pending tool call; the first position seen for a
      tool id is the one later results update
    - tool_result: updates the matching tool call in place; results for
      unknown tool ids are dropped
    - error: appended to errors, status unchanged
    - result: status and stats (latest wins)

    Args:
        events: Ordered events, as produced by parse_stream_output

    Returns:
        Frozen StreamingTaskResult
    """
    session_id: str | None = None
    model: str | None = None
    final_response: str | None = None
    status: TaskStatus = 'unknown'
    stats: ResultStats | None = None
    tool_calls: list[ToolCallRecord] = []
    errors: list[str] = []

    # tool_id -> index into tool_calls
    tool_index: dict[str, int] = {}

    for event in events:
        match event:
            case InitEvent():
                session_id = event.session_id
                model = event.model

            case MessageEvent():
                if event.role == 'assistant':
                    if event.delta:
                        final_response = (final_response or '') + event.content
                    else:
                        final_response = event.content

            case ToolUseEvent():
                tool_index.setdefault(event.tool_id, len(tool_calls))
                tool_calls.append(
                    ToolCallRecord(tool_name=event.tool_name, tool_id=event.tool_id, status='pending')
                )

            case ToolResultEvent():
                index = tool_index.get(event.tool_id)
                if index is None:
                    logger.debug('Dropping tool_result for unknown tool_id %r', event.tool_id)
                    continue
                tool_calls[index] = tool_calls[index].model_copy(
                    update={'status': event.status, 'output': event.output, 'error': event.error}
                )

            case ErrorEvent():
                errors.append(event.message)

            case ResultEvent():
                status = event.status
                stats = event.stats

            case _:
                assert_never(event)

    return StreamingTaskResult(
        session_id=session_id,
        model=model,
        events=list(events),
        tool_calls=tool_calls,
        final_response=final_response,
        status=status,
        stats=stats,
        errors=errors,
    )
