"""
Tests for stream-json fixtures.

Fixtures in fixtures/stream_json/ are captured `gemini --output-format
stream-json` transcripts. Every JSON line must validate as a StreamEvent, and
the parser must recover every one of them.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gemini_cli_mcp.schemas.streaming import StreamEventAdapter
from gemini_cli_mcp.services.stream_parser import parse_stream_output

# Path to fixtures directory (relative to repo root)
FIXTURES_DIR = Path(__file__).parent.parent / 'fixtures'
STREAM_JSON_DIR = FIXTURES_DIR / 'stream_json'


def iter_json_lines(fixture_path: Path) -> list[tuple[int, dict[str, object]]]:
    """Load all JSON object lines from a transcript, skipping CLI noise.

    Returns list of (line_number, record_dict) tuples.
    """
    records = []
    with fixture_path.open(encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if line.startswith('{'):
                records.append((line_num, json.loads(line)))
    return records


def get_fixture_files() -> list[Path]:
    """Get all transcript fixture files."""
    return sorted(STREAM_JSON_DIR.glob('*.jsonl'))


@pytest.mark.parametrize('fixture_path', get_fixture_files(), ids=lambda p: p.stem)
def test_fixture_records_validate(fixture_path: Path) -> None:
    """Every JSON line in the fixture validates against the event union."""
    for line_num, record in iter_json_lines(fixture_path):
        try:
            StreamEventAdapter.validate_python(record)
        except Exception as e:
            pytest.fail(f'{fixture_path.name}:{line_num}: {e}')


@pytest.mark.parametrize('fixture_path', get_fixture_files(), ids=lambda p: p.stem)
def test_parser_recovers_every_event(fixture_path: Path) -> None:
    text = fixture_path.read_text(encoding='utf-8')

    assert len(parse_stream_output(text)) == len(iter_json_lines(fixture_path))


def test_fixtures_exist() -> None:
    assert get_fixture_files(), f'No fixtures found in {STREAM_JSON_DIR}'
