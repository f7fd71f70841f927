"""
Locale strings for tool descriptions and error messages.

Locales live in gemini_cli_mcp/locales/<lang>.json. The language is chosen
from the environment at lookup time:

    MCP_LANGUAGE (explicit override) > LANG > 'en'
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from gemini_cli_mcp.schemas.base import StrictModel

logger = logging.getLogger(__name__)

SupportedLanguage = Literal['en', 'ja']

LOCALES_DIR = Path(__file__).parent / 'locales'


class LocaleErrors(StrictModel):
    """Error and hint strings."""

    gemini_not_found: str
    install_gemini: str
    unsupported_file_type: str  # Placeholder: {extension}
    images: str
    text: str
    documents: str


class ToolStrings(StrictModel):
    """Description of one tool and its parameters."""

    description: str
    params: Mapping[str, str]


class LocaleData(StrictModel):
    """Contents of one locale file."""

    errors: LocaleErrors
    tools: Mapping[str, ToolStrings]


_locale_cache: dict[SupportedLanguage, LocaleData] = {}


def detect_language() -> SupportedLanguage:
    """Detect the current language from environment variables."""
    mcp_lang = os.environ.get('MCP_LANGUAGE', '').lower()
    if mcp_lang in ('ja', 'japanese'):
        return 'ja'
    if mcp_lang in ('en', 'english'):
        return 'en'

    if os.environ.get('LANG', '').lower().startswith('ja'):
        return 'ja'

    return 'en'


def load_locale(lang: SupportedLanguage) -> LocaleData:
    """
    Load locale data for a language, falling back to English.

    Raises:
        FileNotFoundError: If the English locale itself is missing
    """
    cached = _locale_cache.get(lang)
    if cached is not None:
        return cached

    locale_path = LOCALES_DIR / f'{lang}.json'
    if not locale_path.exists():
        if lang != 'en':
            logger.warning("Locale '%s' not found, falling back to English.", lang)
            return load_locale('en')
        raise FileNotFoundError(f'Failed to load English locale from {locale_path}')

    with locale_path.open(encoding='utf-8') as f:
        data = LocaleData.model_validate(json.load(f))

    _locale_cache[lang] = data
    return data


def get_locale() -> LocaleData:
    """Get the locale data for the current language."""
    return load_locale(detect_language())


def t(key: str, **variables: str) -> str:
    """
    Get a translated string with {name} substitution.

    Args:
        key: Dotted path into the locale file, e.g. 'errors.geminiNotFound'
        **variables: Values substituted for {name} placeholders

    Returns:
        The translated string, or the key itself if it is missing or not a string
    """
    value: object = get_locale().model_dump(by_alias=True)

    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            logger.warning('Translation key not found: %s', key)
            return key
        value = value[part]

    if not isinstance(value, str):
        logger.warning('Translation key is not a string: %s', key)
        return key

    for name, replacement in variables.items():
        value = value.replace(f'{{{name}}}', replacement)

    return value
