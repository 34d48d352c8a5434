"""
Part categories and their Camco standard designations.

Each category fixes the designation and IT grade applied by default, and
whether the part behaves as a bore (nominal at the bottom of the bracket)
or a shaft (nominal at the top of the bracket).
"""

from enum import Enum
from typing import Any, List, Tuple, Union

from src.core.errors import ErrorCode, ToleranceError


class MaterialCategory(str, Enum):
    """Part categories covered by the reference table."""

    HOUSING_BORE = "housing bore"
    SHELL_BORE = "shell bore"
    SHAFT = "shaft"

    @property
    def table_key(self) -> str:
        return _CATEGORY_PROFILES[self][0]

    @property
    def camco_designation(self) -> str:
        return _CATEGORY_PROFILES[self][1]

    @property
    def camco_it_grade(self) -> str:
        return _CATEGORY_PROFILES[self][2]

    @property
    def is_bore(self) -> bool:
        return self is not MaterialCategory.SHAFT


# (table key, Camco designation, Camco IT grade)
_CATEGORY_PROFILES = {
    MaterialCategory.HOUSING_BORE: ("housingBores", "H8", "IT6"),
    MaterialCategory.SHELL_BORE: ("shell", "H9", "IT6"),
    MaterialCategory.SHAFT: ("shafts", "h9", "IT5"),
}

# Checked in order; "housing shaft" resolves to a housing bore
CATEGORY_KEYWORDS: List[Tuple[str, MaterialCategory]] = [
    ("housing", MaterialCategory.HOUSING_BORE),
    ("shaft", MaterialCategory.SHAFT),
    ("shell", MaterialCategory.SHELL_BORE),
]

VALID_KEYWORDS: List[str] = [keyword for keyword, _ in CATEGORY_KEYWORDS]


def normalize_material_type(material_type: Any) -> Union[MaterialCategory, ToleranceError]:
    """
    Resolve a free-form material type to a category.

    Matching is a case-insensitive substring test, so "Housing Bore" and
    "shaft rod" both resolve.

    Args:
        material_type: Caller supplied material type

    Returns:
        MaterialCategory, or ToleranceError when the input is not usable

    Example:
        >>> normalize_material_type("  Shell bore ")
        <MaterialCategory.SHELL_BORE: 'shell bore'>
    """
    if isinstance(material_type, MaterialCategory):
        return material_type

    if not isinstance(material_type, str):
        return ToleranceError(
            error=ErrorCode.INVALID_CATEGORY,
            message="Material type must be a string.",
            details={"material_type": repr(material_type)},
        )

    normalized = material_type.strip().lower()
    if not normalized:
        return ToleranceError(
            error=ErrorCode.INVALID_CATEGORY,
            message="Material type is required and cannot be empty.",
            details={"material_type": material_type},
        )

    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in normalized:
            return category

    return ToleranceError(
        error=ErrorCode.UNKNOWN_CATEGORY,
        message=(
            f"Unknown material type: {material_type}. "
            "Valid types are 'housing', 'shaft', or 'shell'."
        ),
        details={"material_type": material_type, "valid_types": list(VALID_KEYWORDS)},
    )
