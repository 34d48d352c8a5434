"""
Nominal size resolution.

Shafts are made at or below their nominal (upper deviation zero), so a
shaft measurement normally rounds up. Bores are made at or above their
nominal (lower deviation zero), so a bore measurement normally rounds down.
A measurement that sits ``threshold`` mm or more away from that rounding
belongs to the neighbouring nominal instead.
"""

import math
from numbers import Real
from typing import Any, Optional, Union

from src.core.config import get_settings
from src.core.errors import ErrorCode, ToleranceError

from .categories import MaterialCategory

# Decimals kept when measuring overshoot, removes float noise only
NOISE_DECIMALS = 6


def validate_measurement(measurement: Any) -> Optional[ToleranceError]:
    """Return a ToleranceError when ``measurement`` is unusable, else None."""
    maximum = get_settings().MEASUREMENT_MAX_MM
    if isinstance(measurement, bool) or not isinstance(measurement, Real):
        return ToleranceError(
            error=ErrorCode.INVALID_MEASUREMENT,
            message="Measurement must be a number.",
            details={"measurement": repr(measurement)},
        )
    try:
        value = float(measurement)
    except (OverflowError, ValueError):
        return ToleranceError(
            error=ErrorCode.INVALID_MEASUREMENT,
            message="Measurement is too large to be a diameter.",
            details={"measurement": repr(measurement)},
        )
    if not math.isfinite(value) or value < 0 or value >= maximum:
        return ToleranceError(
            error=ErrorCode.INVALID_MEASUREMENT,
            message=f"Measurement must be a finite number in [0, {maximum:g}), got {measurement}.",
            details={"measurement": value, "maximum": maximum},
        )
    return None


def resolve_nominal(
    measurement: Any,
    category: Any,
    threshold: Optional[float] = None,
) -> Union[int, ToleranceError]:
    """
    Derive the integer nominal size of a measurement.

    Args:
        measurement: Measured diameter in mm
        category: MaterialCategory of the part
        threshold: Overshoot/undershoot in mm that moves to the neighbouring
            nominal (default: NOMINAL_THRESHOLD_MM, 0.9)

    Returns:
        Nominal size in whole mm, or ToleranceError for an invalid measurement

    Example:
        >>> resolve_nominal(24.982, MaterialCategory.SHAFT)
        25
        >>> resolve_nominal(240.05, MaterialCategory.HOUSING_BORE)
        240
    """
    invalid = validate_measurement(measurement)
    if invalid is not None:
        return invalid

    if threshold is None:
        threshold = get_settings().NOMINAL_THRESHOLD_MM
    value = float(measurement)

    if not isinstance(category, MaterialCategory):
        return int(round(value))

    if category.is_bore:
        floor = math.floor(value)
        if round(value - floor, NOISE_DECIMALS) >= threshold:
            return math.ceil(value)
        return floor

    ceiling = math.ceil(value)
    if round(ceiling - value, NOISE_DECIMALS) >= threshold:
        return math.floor(value)
    return ceiling
