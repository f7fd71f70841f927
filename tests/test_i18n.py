"""Tests for locale detection, loading and translation lookup."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import pytest

from gemini_cli_mcp import i18n


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('MCP_LANGUAGE', raising=False)
    monkeypatch.delenv('LANG', raising=False)
    monkeypatch.setattr(i18n, '_locale_cache', {})


@pytest.mark.parametrize(
    ('mcp_language', 'lang', 'expected'),
    [
        (None, None, 'en'),
        ('ja', None, 'ja'),
        ('Japanese', 'en_US.UTF-8', 'ja'),
        ('en', 'ja_JP.UTF-8', 'en'),
        ('english', None, 'en'),
        (None, 'ja_JP.UTF-8', 'ja'),
        (None, 'de_DE.UTF-8', 'en'),
        ('fr', 'ja_JP.UTF-8', 'ja'),  # unrecognized override falls through to LANG
    ],
)
def test_detect_language(
    monkeypatch: pytest.MonkeyPatch, mcp_language: str | None, lang: str | None, expected: str
) -> None:
    if mcp_language is not None:
        monkeypatch.setenv('MCP_LANGUAGE', mcp_language)
    if lang is not None:
        monkeypatch.setenv('LANG', lang)

    assert i18n.detect_language() == expected


def test_shipped_locales_describe_the_same_tools() -> None:
    en = i18n.load_locale('en')
    ja = i18n.load_locale('ja')

    assert set(en.tools) == {'googleSearch', 'chat', 'listSessions', 'analyzeFile', 'executeTask'}
    assert set(ja.tools) == set(en.tools)
    for name, tool in en.tools.items():
        assert set(ja.tools[name].params) == set(tool.params), name


def test_translate_with_substitution() -> None:
    assert i18n.t('errors.unsupportedFileType', extension='.zip') == 'Unsupported file type: .zip'


def test_translate_japanese(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('MCP_LANGUAGE', 'ja')

    assert i18n.t('errors.images') == '画像'


def test_missing_key_returns_key(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger='gemini_cli_mcp.i18n'):
        assert i18n.t('errors.doesNotExist') == 'errors.doesNotExist'

    assert 'Translation key not found: errors.doesNotExist' in caplog.text


def test_non_string_key_returns_key() -> None:
    assert i18n.t('tools.chat') == 'tools.chat'


def test_missing_locale_falls_back_to_english(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    shutil.copy(i18n.LOCALES_DIR / 'en.json', tmp_path / 'en.json')
    monkeypatch.setattr(i18n, 'LOCALES_DIR', tmp_path)

    assert i18n.load_locale('ja') == i18n.load_locale('en')


def test_missing_english_locale_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(i18n, 'LOCALES_DIR', tmp_path)

    with pytest.raises(FileNotFoundError, match='English locale'):
        i18n.load_locale('en')


def test_locale_is_cached(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    locale_file = tmp_path / 'en.json'
    shutil.copy(i18n.LOCALES_DIR / 'en.json', locale_file)
    monkeypatch.setattr(i18n, 'LOCALES_DIR', tmp_path)

    first = i18n.load_locale('en')
    data = json.loads(locale_file.read_text(encoding='utf-8'))
    data['errors']['images'] = 'Pictures'
    locale_file.write_text(json.dumps(data), encoding='utf-8')

    assert i18n.load_locale('en') is first
    assert first.errors.images == 'Images'
