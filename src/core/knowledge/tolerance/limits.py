"""
Specification matching and limit computation.

A shaft nominal sits at the top of its bracket (min < nominal <= max),
a bore nominal at the bottom (min <= nominal < max).
"""

from typing import Iterable, Optional, Tuple

from pydantic import BaseModel

from .categories import MaterialCategory
from .table import ToleranceRow

DECIMALS = 3


class Bounds(BaseModel):
    """Numeric limits in mm, rounded to 3 decimals."""

    upper: float
    lower: float


class DisplayBounds(BaseModel):
    """Limits rendered as ``nominal +/- deviation`` for reports."""

    upper: str
    lower: str


def match_specification(
    nominal: float,
    rows: Iterable[ToleranceRow],
    category: MaterialCategory,
) -> Optional[ToleranceRow]:
    """Return the first row whose bracket contains ``nominal``, or None."""
    for row in rows:
        if category.is_bore:
            if row.minimum_diameter <= nominal < row.maximum_diameter:
                return row
        elif row.minimum_diameter < nominal <= row.maximum_diameter:
            return row
    return None


def format_limit(nominal: float, deviation: float) -> str:
    sign = "-" if deviation < 0 else "+"
    return f"{nominal:.{DECIMALS}f} {sign} {abs(deviation):.{DECIMALS}f}"


def compute_bounds(nominal: float, row: ToleranceRow) -> Tuple[Bounds, DisplayBounds]:
    """
    Compute numeric and display limits for a nominal.

    The lower deviation is added, not subtracted, so its sign comes straight
    from the table.

    Example:
        >>> bounds, display = compute_bounds(25, row)  # h9 shaft row
        >>> bounds.lower, display.lower
        (24.97, '25.000 - 0.030')
    """
    bounds = Bounds(
        upper=round(nominal + row.upper_deviation, DECIMALS),
        lower=round(nominal + row.lower_deviation, DECIMALS),
    )
    display = DisplayBounds(
        upper=format_limit(nominal, row.upper_deviation),
        lower=format_limit(nominal, row.lower_deviation),
    )
    return bounds, display
