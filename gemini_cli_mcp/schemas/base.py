"""
Shared Pydantic base model for operation schemas.

All parameter and result models exchanged with MCP clients inherit from
StrictModel. Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import pydantic
from pydantic.alias_generators import to_camel

from gemini_cli_mcp.schemas.types import BaseStrictModel


class StrictModel(BaseStrictModel):
    """Operations-layer strict model.

    Inherits from BaseStrictModel (extra='forbid', strict=True, frozen=True)
    and adds camelCase aliases, accepting either spelling on input.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
    )

    def to_wire_json(self) -> str:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
