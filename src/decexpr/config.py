"""
Configuration for ExpressionEngine instances.

Accepts snake_case or camelCase keys so configuration can come straight
from JSON-style dictionaries.
"""

from __future__ import annotations

import re
from dataclasses import fields
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .arithmetic import RoundingMode
from .limits import ExpressionLimits

_LIMIT_FIELDS = {f.name for f in fields(ExpressionLimits)}


def _to_snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


class EngineConfig(BaseModel):
    """Configuration for creating an ExpressionEngine."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    # Significant digits for division, remainder, power and literals
    precision: int = Field(default=16, gt=0)

    # Rounding mode applied whenever a result must be rounded
    rounding_mode: RoundingMode = Field(
        default=RoundingMode.HALF_EVEN, alias="roundingMode"
    )

    # Expression limits for parsing and evaluation
    expression_limits: Optional[ExpressionLimits] = Field(
        default=None, alias="expressionLimits"
    )

    # Variables defined after the pi and e constants
    variables: Dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("rounding_mode", mode="before")
    @classmethod
    def _parse_rounding_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return RoundingMode.from_name(value)
        return value

    @field_validator("expression_limits", mode="before")
    @classmethod
    def _parse_expression_limits(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value

        normalized = {_to_snake_case(key): item for key, item in value.items()}
        unknown = sorted(set(normalized) - _LIMIT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown expression limits: {', '.join(unknown)}")
        return ExpressionLimits(**normalized)


def load_config(config: EngineConfig | Dict[str, Any] | None) -> EngineConfig:
    """Normalizes a config object, a plain dictionary or None."""
    if config is None:
        return EngineConfig()
    if isinstance(config, EngineConfig):
        return config
    return EngineConfig.model_validate(config)
