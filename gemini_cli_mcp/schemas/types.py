"""
Foundation models and aliases for every schema module.

streaming.py and operations/ build on these; schemas/base.py adds the
camelCase wire naming used for tool parameters and results.
"""

from __future__ import annotations

from typing import Literal

import pydantic

# ==============================================================================
# Base Strict Model (Foundation)
# ==============================================================================


class BaseStrictModel(pydantic.BaseModel):
    """Immutable model that rejects unknown fields and type coercion."""

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


# ==============================================================================
# Permissive Model (Foundation)
# ==============================================================================


class PermissiveModel(pydantic.BaseModel):
    """
    Immutable model for data produced by gemini-cli. Unknown fields are kept.

    The CLI's stream-json output gains fields between releases. Modeling those
    events permissively keeps a newer CLI from turning every line into a drop.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',
        strict=True,  # Applies to declared fields only
        frozen=True,
    )

    def get_extra_fields(self) -> dict[str, object]:
        """Fields present in the input but not declared on the model."""
        return dict(self.__pydantic_extra__) if self.__pydantic_extra__ else {}


# ==============================================================================
# Primitive Types
# ==============================================================================

ToolCallStatus = Literal['pending', 'success', 'error']
TaskStatus = Literal['success', 'error', 'unknown']
