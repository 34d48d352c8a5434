"""
Measurement Evaluation.

Checks measurements against the Camco standard designation of their
category. A single measurement is judged against its own limits; a batch
is additionally judged on spread (max - min) against the category's IT
grade at the most common nominal.
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from src.core.errors import ErrorCode, ToleranceError

from .categories import MaterialCategory, normalize_material_type
from .limits import Bounds, DisplayBounds, compute_bounds, match_specification
from .nominal import resolve_nominal, validate_measurement
from .table import RowSet, ToleranceRow, ToleranceTable, default_table

logger = logging.getLogger(__name__)

# Decimals kept when computing a batch spread, removes float noise only
SPREAD_DECIMALS = 6


class Outcome(str, Enum):
    """Size classification of a measurement against its limits."""

    OVER_SIZED = "over-sized"
    UNDER_SIZED = "under-sized"
    ACCEPTABLE = "acceptable"


class EvaluationResult(BaseModel):
    """Result of checking one measurement."""

    material_type: str
    designation: str
    it_grade: str
    measurement: float
    nominal: int
    specification: ToleranceRow
    bounds: Bounds
    display_bounds: DisplayBounds
    meets_spec: bool
    reason: str
    outcome: Outcome

    @property
    def is_error(self) -> bool:
        return False


class BatchResult(BaseModel):
    """Result of checking a set of measurements of one part category."""

    material_type: str
    designation: str
    it_grade: str
    measurements: List[float]
    items: List[Union[EvaluationResult, ToleranceError]] = Field(
        description="Per-measurement results, in input order"
    )
    reference_nominal: int
    reference_specification: Optional[ToleranceRow] = None
    reference_bounds: Optional[Bounds] = None
    reference_display_bounds: Optional[DisplayBounds] = None
    farthest_measurement: float
    farthest_outcome: Optional[Outcome] = None
    spread: float
    it_tolerance: Optional[float] = None
    meets_spec: bool
    meets_it_tolerance: bool
    meets_final_compliance: bool
    message: str

    @property
    def is_error(self) -> bool:
        return False


def classify(measurement: float, bounds: Bounds) -> Outcome:
    if measurement > bounds.upper:
        return Outcome.OVER_SIZED
    if measurement < bounds.lower:
        return Outcome.UNDER_SIZED
    return Outcome.ACCEPTABLE


def _no_specification(category: MaterialCategory, designation: str, nominal: int, measurement: float) -> ToleranceError:
    logger.warning(
        "No specification for nominal",
        extra={"material_type": category.value, "designation": designation, "nominal": nominal},
    )
    return ToleranceError(
        error=ErrorCode.NO_MATCHING_SPECIFICATION,
        message=f"No {designation} specification found for nominal {nominal} ({category.value}).",
        details={
            "material_type": category.value,
            "designation": designation,
            "nominal": nominal,
            "measurement": measurement,
        },
    )


def _camco_rows(category: MaterialCategory, table: ToleranceTable) -> Union[RowSet, ToleranceError]:
    rows = table.rows(category, category.camco_designation)
    if rows is None:
        return ToleranceError(
            error=ErrorCode.UNKNOWN_DESIGNATION,
            message=f"Reference table has no {category.camco_designation} data for {category.value}.",
            details={
                "material_type": category.value,
                "designation": category.camco_designation,
                "available_designations": table.designations(category),
            },
        )
    return rows


def _evaluate(
    category: MaterialCategory,
    rows: RowSet,
    measurement: float,
    threshold: Optional[float],
) -> Union[EvaluationResult, ToleranceError]:
    designation = category.camco_designation
    nominal = resolve_nominal(measurement, category, threshold)
    if isinstance(nominal, ToleranceError):
        return nominal

    row = match_specification(nominal, rows, category)
    if row is None:
        return _no_specification(category, designation, nominal, measurement)

    bounds, display = compute_bounds(nominal, row)
    outcome = classify(measurement, bounds)
    meets_spec = outcome is Outcome.ACCEPTABLE
    verdict = "within" if meets_spec else "outside"
    reason = (
        f"Measurement {measurement} is {verdict} {designation} limits "
        f"[{bounds.lower:.3f}, {bounds.upper:.3f}] ({outcome.value})."
    )
    logger.debug(
        reason,
        extra={
            "material_type": category.value,
            "designation": designation,
            "nominal": nominal,
            "measurement": measurement,
            "stage": "evaluate",
        },
    )
    return EvaluationResult(
        material_type=category.value,
        designation=designation,
        it_grade=category.camco_it_grade,
        measurement=measurement,
        nominal=nominal,
        specification=row,
        bounds=bounds,
        display_bounds=display,
        meets_spec=meets_spec,
        reason=reason,
        outcome=outcome,
    )


def check_one_measurement_for(
    material_type: Any,
    measurement: Any,
    threshold: Optional[float] = None,
    table: Optional[ToleranceTable] = None,
) -> Union[EvaluationResult, ToleranceError]:
    """
    Check one measurement against the Camco standard of its category.

    Args:
        material_type: Free-form material type ("housing", "shell", "shaft")
        measurement: Measured diameter in mm, 0 <= measurement < 1000
        threshold: Optional nominal rounding threshold in mm
        table: Optional table; defaults to the reference table

    Returns:
        EvaluationResult, or ToleranceError (invalid category or
        measurement, no matching specification)

    Example:
        >>> result = check_one_measurement_for("shaft", 24.982)
        >>> result.nominal, result.bounds.lower, result.meets_spec
        (25, 24.97, True)
    """
    category = normalize_material_type(material_type)
    if isinstance(category, ToleranceError):
        return category

    invalid = validate_measurement(measurement)
    if invalid is not None:
        return invalid

    rows = _camco_rows(category, table or default_table())
    if isinstance(rows, ToleranceError):
        return rows
    return _evaluate(category, rows, float(measurement), threshold)


def _invalid_batch(message: str, measurements: Any, invalid_indices: Optional[List[int]] = None) -> ToleranceError:
    details: dict = {"measurements": repr(measurements)}
    if invalid_indices is not None:
        details["invalid_indices"] = invalid_indices
    return ToleranceError(error=ErrorCode.INVALID_MEASUREMENT_BATCH, message=message, details=details)


def _most_common_nominal(nominals: Sequence[int]) -> int:
    # Counter keeps insertion order, so ties go to the first nominal seen
    return Counter(nominals).most_common(1)[0][0]


def check_multiple_measurements_for(
    material_type: Any,
    measurements: Any,
    threshold: Optional[float] = None,
    table: Optional[ToleranceTable] = None,
) -> Union[BatchResult, ToleranceError]:
    """
    Check a batch of measurements of one part category.

    Every measurement is checked against its own limits. The spread of the
    batch is checked against the category's IT grade, read from the row of
    the most common nominal. Final compliance requires both.

    Args:
        material_type: Free-form material type
        measurements: Non-empty list of measurements in mm
        threshold: Optional nominal rounding threshold in mm
        table: Optional table; defaults to the reference table

    Returns:
        BatchResult, or ToleranceError when the category or the batch is
        invalid. A measurement without a matching specification is reported
        in its own slot of ``items``.
    """
    category = normalize_material_type(material_type)
    if isinstance(category, ToleranceError):
        return category

    if not isinstance(measurements, (list, tuple)):
        return _invalid_batch("Measurements must be a list of numbers.", measurements)
    if not measurements:
        return _invalid_batch("Measurements list cannot be empty.", measurements, [])

    invalid_indices = [i for i, m in enumerate(measurements) if validate_measurement(m) is not None]
    if invalid_indices:
        return _invalid_batch(
            f"Invalid measurements at indices {invalid_indices}.", measurements, invalid_indices
        )

    rows = _camco_rows(category, table or default_table())
    if isinstance(rows, ToleranceError):
        return rows

    values = [float(m) for m in measurements]
    designation = category.camco_designation
    it_grade = category.camco_it_grade
    items = [_evaluate(category, rows, value, threshold) for value in values]

    nominals = [resolve_nominal(value, category, threshold) for value in values]
    reference_nominal = _most_common_nominal(nominals)
    farthest = max(values, key=lambda value: abs(value - reference_nominal))
    spread = round(max(values) - min(values), SPREAD_DECIMALS)

    meets_spec = all(isinstance(item, EvaluationResult) and item.meets_spec for item in items)

    reference_row = match_specification(reference_nominal, rows, category)
    reference_bounds = reference_display = farthest_outcome = it_tolerance = None
    if reference_row is None:
        meets_it_tolerance = False
        size_note = f"No {designation} specification found for nominal {reference_nominal}."
        it_note = f"{it_grade} tolerance cannot be checked without a specification."
    else:
        reference_bounds, reference_display = compute_bounds(reference_nominal, reference_row)
        farthest_outcome = classify(farthest, reference_bounds)
        size_note = (
            f"Farthest measurement {farthest} from nominal {reference_nominal} is "
            f"{farthest_outcome.value} against {designation} limits "
            f"[{reference_bounds.lower:.3f}, {reference_bounds.upper:.3f}]."
        )
        it_tolerance = reference_row.it_value(it_grade)
        if it_tolerance is None:
            meets_it_tolerance = False
            it_note = f"No {it_grade} value in the {designation} specification for nominal {reference_nominal}."
        else:
            meets_it_tolerance = spread <= it_tolerance
            it_note = (
                f"Spread {spread:.3f} is {'within' if meets_it_tolerance else 'outside'} "
                f"{it_grade} tolerance {it_tolerance:.3f}."
            )

    if not meets_spec:
        failed = [i for i, item in enumerate(items) if not (isinstance(item, EvaluationResult) and item.meets_spec)]
        size_note += f" Measurements at indices {failed} do not meet {designation}."

    meets_final = meets_spec and meets_it_tolerance
    message = " ".join(
        [size_note, it_note, "Batch meets final compliance." if meets_final else "Batch fails final compliance."]
    )
    logger.info(
        message,
        extra={
            "material_type": category.value,
            "designation": designation,
            "nominal": reference_nominal,
            "measurement_count": len(values),
            "stage": "batch",
        },
    )
    return BatchResult(
        material_type=category.value,
        designation=designation,
        it_grade=it_grade,
        measurements=values,
        items=items,
        reference_nominal=reference_nominal,
        reference_specification=reference_row,
        reference_bounds=reference_bounds,
        reference_display_bounds=reference_display,
        farthest_measurement=farthest,
        farthest_outcome=farthest_outcome,
        spread=spread,
        it_tolerance=it_tolerance,
        meets_spec=meets_spec,
        meets_it_tolerance=meets_it_tolerance,
        meets_final_compliance=meets_final,
        message=message,
    )
