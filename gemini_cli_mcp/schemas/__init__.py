"""
Schema definitions for gemini-cli-mcp.

This package contains Pydantic models for:
- streaming: `gemini --output-format stream-json` events and the aggregated task result
- operations: MCP tool parameters and results
"""

from __future__ import annotations

from gemini_cli_mcp.schemas.base import StrictModel
from gemini_cli_mcp.schemas.types import BaseStrictModel, PermissiveModel

__all__ = [
    'BaseStrictModel',
    'PermissiveModel',
    'StrictModel',
]
