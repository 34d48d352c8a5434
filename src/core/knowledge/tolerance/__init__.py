"""
Camco Tolerance Knowledge Module.

Looks up housing bore, shell bore and shaft tolerances (H7, H8, H9, h6-h9
with IT5-IT7 magnitudes) and checks measurements against the Camco
standard designation of each category.

Reference Standards:
- ISO 286-1:2010 - Geometrical product specifications (GPS) - ISO code system
- ISO 286-2:2010 - Tables of standard tolerance classes and limit deviations
"""

from .categories import (
    MaterialCategory,
    normalize_material_type,
    VALID_KEYWORDS,
)
from .table import (
    ToleranceRow,
    ToleranceTable,
    TolerancesLookup,
    DesignationLookup,
    CamcoStandardLookup,
    default_table,
    get_all_tolerances_for,
    get_tolerances_for,
    get_camco_standard_tolerances_for,
    list_designations,
)
from .nominal import (
    resolve_nominal,
    validate_measurement,
)
from .limits import (
    Bounds,
    DisplayBounds,
    match_specification,
    compute_bounds,
)
from .evaluation import (
    Outcome,
    EvaluationResult,
    BatchResult,
    check_one_measurement_for,
    check_multiple_measurements_for,
)

__all__ = [
    # Categories
    "MaterialCategory",
    "normalize_material_type",
    "VALID_KEYWORDS",
    # Table
    "ToleranceRow",
    "ToleranceTable",
    "TolerancesLookup",
    "DesignationLookup",
    "CamcoStandardLookup",
    "default_table",
    "get_all_tolerances_for",
    "get_tolerances_for",
    "get_camco_standard_tolerances_for",
    "list_designations",
    # Nominal
    "resolve_nominal",
    "validate_measurement",
    # Limits
    "Bounds",
    "DisplayBounds",
    "match_specification",
    "compute_bounds",
    # Evaluation
    "Outcome",
    "EvaluationResult",
    "BatchResult",
    "check_one_measurement_for",
    "check_multiple_measurements_for",
]
