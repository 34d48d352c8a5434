"""Shared error codes and error values for tolerance lookups.

Every public lookup/evaluation returns either a result model or a
``ToleranceError`` value; invalid input never raises.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    INVALID_CATEGORY = "INVALID_CATEGORY"  # Not a string, or empty
    UNKNOWN_CATEGORY = "UNKNOWN_CATEGORY"  # Matches none of the keywords
    UNKNOWN_DESIGNATION = "UNKNOWN_DESIGNATION"
    INVALID_MEASUREMENT = "INVALID_MEASUREMENT"
    NO_MATCHING_SPECIFICATION = "NO_MATCHING_SPECIFICATION"
    INVALID_MEASUREMENT_BATCH = "INVALID_MEASUREMENT_BATCH"


class ToleranceError(BaseModel):
    """Structured failure returned in place of a result."""

    error: ErrorCode = Field(description="Machine readable error code")
    message: str = Field(description="Human-readable explanation")
    details: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return True


class ToleranceTableError(ValueError):
    """Raised when reference data cannot be loaded or is malformed."""


def is_error(value: Any) -> bool:
    """Return True when ``value`` is a ``ToleranceError``."""
    return isinstance(value, ToleranceError)


__all__ = ["ErrorCode", "ToleranceError", "ToleranceTableError", "is_error"]
