"""
Tests for the stream-json line parser.

Malformed input is never an error: every undecodable line is dropped and the
surrounding lines still parse.
"""

from __future__ import annotations

import json

import pytest

from gemini_cli_mcp.schemas.streaming import (
    ErrorEvent,
    InitEvent,
    MessageEvent,
    ResultEvent,
    ToolResultEvent,
    ToolUseEvent,
)
from gemini_cli_mcp.services.stream_parser import parse_stream_line, parse_stream_output


def test_parses_message_line() -> None:
    event = parse_stream_line('{"type":"message","role":"assistant","content":"hi","timestamp":"t"}')

    assert isinstance(event, MessageEvent)
    assert event.content == 'hi'
    assert event.role == 'assistant'
    assert event.timestamp == 't'
    assert event.delta is None


@pytest.mark.parametrize(
    'line',
    [
        'not json',
        '',
        '   \t  ',
        '{"type":"message","role":"assistant"',  # truncated write
        '[1, 2, 3]',
        '"just a string"',
        '{"role":"assistant","content":"no type"}',
        '{"type":"","content":"empty type"}',
        '{"type":"heartbeat","timestamp":"t"}',  # unknown kind
        '{"type":"tool_use","timestamp":"t"}',  # known kind, missing tool fields
    ],
    ids=[
        'not-json',
        'empty',
        'whitespace',
        'truncated',
        'array',
        'string',
        'missing-type',
        'empty-type',
        'unknown-type',
        'incomplete-tool-use',
    ],
)
def test_drops_unusable_lines(line: str) -> None:
    assert parse_stream_line(line) is None


def test_trims_surrounding_whitespace() -> None:
    event = parse_stream_line('   {"type":"init","session_id":"s-1","model":"gemini-2.5-flash"}  \r')

    assert isinstance(event, InitEvent)
    assert event.session_id == 's-1'
    assert event.model == 'gemini-2.5-flash'


def test_keeps_unknown_fields_on_known_events() -> None:
    event = parse_stream_line('{"type":"error","message":"quota","code":429,"retry_after":30}')

    assert isinstance(event, ErrorEvent)
    assert event.code == 429
    assert event.get_extra_fields() == {'retry_after': 30}


def test_parses_every_event_kind() -> None:
    lines = [
        {'type': 'init', 'timestamp': 't0', 'session_id': 's-1', 'model': 'gemini-3-pro-preview'},
        {'type': 'message', 'timestamp': 't1', 'role': 'user', 'content': 'list files'},
        {'type': 'tool_use', 'timestamp': 't2', 'tool_name': 'ls', 'tool_id': 'ls-1', 'parameters': {'path': '.'}},
        {'type': 'tool_result', 'timestamp': 't3', 'tool_id': 'ls-1', 'status': 'success', 'output': 'a.txt'},
        {'type': 'error', 'timestamp': 't4', 'message': 'slow down'},
        {'type': 'result', 'timestamp': 't5', 'status': 'success', 'stats': {'total_tokens': 42}},
    ]

    events = parse_stream_output('\n'.join(json.dumps(line) for line in lines))

    assert [type(e) for e in events] == [
        InitEvent,
        MessageEvent,
        ToolUseEvent,
        ToolResultEvent,
        ErrorEvent,
        ResultEvent,
    ]
    tool_use = events[2]
    assert isinstance(tool_use, ToolUseEvent)
    assert tool_use.parameters == {'path': '.'}
    result = events[5]
    assert isinstance(result, ResultEvent)
    assert result.stats is not None
    assert result.stats.total_tokens == 42


def test_output_skips_garbage_and_preserves_order() -> None:
    output = '\n'.join(
        [
            'Loaded cached credentials.',
            '{"type":"message","role":"assistant","content":"one","delta":true}',
            '',
            '{"type":"message","role":"assistant","content":"tw',
            '{"type":"message","role":"assistant","content":"two","delta":true}',
            'DeprecationWarning: something',
        ]
    )

    events = parse_stream_output(output)

    assert [e.content for e in events if isinstance(e, MessageEvent)] == ['one', 'two']


def test_output_of_empty_text_is_empty() -> None:
    assert parse_stream_output('') == []
