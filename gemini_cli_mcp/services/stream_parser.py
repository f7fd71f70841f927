"""
Stream parser - decodes `gemini --output-format stream-json` output.

Line-oriented and lenient: a subprocess stream can contain partial writes or
unrelated diagnostic text, so undecodable lines are dropped rather than raised.
"""

from __future__ import annotations

import json
import logging

import pydantic

from gemini_cli_mcp.schemas.streaming import StreamEvent, StreamEventAdapter

logger = logging.getLogger(__name__)


def parse_stream_line(line: str) -> StreamEvent | None:
    """
    Parse a single line of stream-json output.

    Args:
        line: One line of text, possibly empty or whitespace-only

    Returns:
        The typed event, or None if the line is blank, not JSON, or not a
        recognized event. Never raises.
    """
    trimmed = line.strip()
    if not trimmed:
        return None

    try:
        raw = json.loads(trimmed)
    except json.JSONDecodeError:
        logger.debug('Dropping non-JSON stream line: %.80s', trimmed)
        return None

    if not isinstance(raw, dict) or not raw.get('type'):
        logger.debug('Dropping stream line without a type tag: %.80s', trimmed)
        return None

    try:
        return StreamEventAdapter.validate_python(raw)
    except pydantic.ValidationError as e:
        logger.debug('Dropping unrecognized %r event: %s', raw.get('type'), e.errors(include_url=False))
        return None


def parse_stream_output(output: str) -> list[StreamEvent]:
    """
    Parse complete stream-json output into events.

    Args:
        output: Newline-delimited text

    Returns:
        Successfully parsed events in input order
    """
    events = []
    for line in output.split('\n'):
        event = parse_stream_line(line)
        if event is not None:
            events.append(event)
    return events
