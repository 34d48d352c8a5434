"""
Tolerance Table Accessor.

Holds the reference rows (per category, per designation) as an immutable
structure and exposes the lookups used by the evaluators. The default
table is built once from the shipped reference data, or from the JSON file
named by ``TOLERANCE_TABLE_PATH``.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.core.config import get_settings
from src.core.errors import ErrorCode, ToleranceError, ToleranceTableError

from .categories import MaterialCategory, normalize_material_type
from .reference_data import build_reference_tolerances

logger = logging.getLogger(__name__)

_IT_GRADE = re.compile(r"^IT\d{1,2}$", re.IGNORECASE)


class ToleranceRow(BaseModel):
    """One diameter bracket of a designation, values in mm.

    IT-grade magnitudes (``IT5``, ``IT6``...) are carried as extra fields.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    minimum_diameter: float
    maximum_diameter: float
    upper_deviation: float
    lower_deviation: float

    @model_validator(mode="after")
    def _check_row(self) -> "ToleranceRow":
        if self.minimum_diameter >= self.maximum_diameter:
            raise ValueError(
                f"minimum_diameter {self.minimum_diameter} must be below "
                f"maximum_diameter {self.maximum_diameter}"
            )
        if self.lower_deviation > self.upper_deviation:
            raise ValueError("lower_deviation must not exceed upper_deviation")
        for name, value in (self.model_extra or {}).items():
            if _IT_GRADE.match(name) and not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be numeric, got {value!r}")
        return self

    @property
    def it_grades(self) -> Dict[str, float]:
        return {
            name: float(value)
            for name, value in (self.model_extra or {}).items()
            if _IT_GRADE.match(name)
        }

    def it_value(self, grade: str) -> Optional[float]:
        """Return the IT magnitude (mm) for ``grade`` or None when absent."""
        value = self.it_grades.get(grade)
        if value is None:
            value = self.it_grades.get(grade.upper())
        return value


RowSet = Tuple[ToleranceRow, ...]


def _build_rows(table_key: str, designation: str, raw_rows: Any) -> RowSet:
    if not isinstance(raw_rows, list) or not raw_rows:
        raise ToleranceTableError(f"{table_key}/{designation}: expected a non-empty list of rows")
    try:
        rows = tuple(ToleranceRow.model_validate(raw) for raw in raw_rows)
    except ValidationError as exc:
        raise ToleranceTableError(f"{table_key}/{designation}: invalid row: {exc}") from exc

    for previous, current in zip(rows, rows[1:]):
        if current.minimum_diameter != previous.maximum_diameter:
            raise ToleranceTableError(
                f"{table_key}/{designation}: brackets must be contiguous and ordered, "
                f"{previous.maximum_diameter} is followed by {current.minimum_diameter}"
            )
    return rows


class ToleranceTable:
    """Read-only reference table: ``table_key -> designation -> rows``."""

    def __init__(self, partitions: Mapping[str, Mapping[str, RowSet]]):
        self._partitions: Mapping[str, Mapping[str, RowSet]] = MappingProxyType(
            {key: MappingProxyType(dict(value)) for key, value in partitions.items()}
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToleranceTable":
        """Build a table from the external JSON shape."""
        if not isinstance(data, Mapping):
            raise ToleranceTableError("tolerance table must be a mapping of categories")
        partitions: Dict[str, Dict[str, RowSet]] = {}
        for table_key, designations in data.items():
            if not isinstance(designations, Mapping):
                raise ToleranceTableError(f"{table_key}: expected a mapping of designations")
            partitions[table_key] = {
                designation: _build_rows(table_key, designation, raw_rows)
                for designation, raw_rows in designations.items()
            }
        return cls(partitions)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ToleranceTable":
        file_path = Path(path)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ToleranceTableError(f"Cannot load tolerance table {file_path}: {exc}") from exc
        table = cls.from_dict(data)
        logger.info(f"Loaded tolerance table from {file_path}")
        return table

    def partition(self, category: MaterialCategory) -> Mapping[str, RowSet]:
        return self._partitions.get(category.table_key, MappingProxyType({}))

    def designations(self, category: MaterialCategory) -> List[str]:
        return list(self.partition(category).keys())

    def rows(self, category: MaterialCategory, designation: str) -> Optional[RowSet]:
        return self.partition(category).get(designation)

    def to_dict(self) -> Dict[str, Dict[str, List[Dict[str, float]]]]:
        return {
            key: {
                designation: [row.model_dump() for row in rows]
                for designation, rows in designations.items()
            }
            for key, designations in self._partitions.items()
        }


_default_table: Optional[ToleranceTable] = None


def default_table() -> ToleranceTable:
    """Return the process-wide reference table, building it on first use."""
    global _default_table
    if _default_table is None:
        path = get_settings().TOLERANCE_TABLE_PATH
        if path:
            _default_table = ToleranceTable.from_json(path)
        else:
            _default_table = ToleranceTable.from_dict(build_reference_tolerances())
    return _default_table


def reset_default_table() -> None:
    global _default_table
    _default_table = None


class TolerancesLookup(BaseModel):
    """All designations of one category."""

    type: str = Field(description="Category display name, e.g. 'housing bore'")
    specifications: Dict[str, List[ToleranceRow]]

    @property
    def is_error(self) -> bool:
        return False


class DesignationLookup(BaseModel):
    """Row-set of a single designation."""

    type: str
    designation: str
    specification: List[ToleranceRow]

    @property
    def is_error(self) -> bool:
        return False


class CamcoStandardLookup(DesignationLookup):
    it_grade: str = Field(description="IT grade applied to spread checks")


def _resolve(
    material_type: Any, table: Optional[ToleranceTable]
) -> Union[Tuple[MaterialCategory, ToleranceTable], ToleranceError]:
    category = normalize_material_type(material_type)
    if isinstance(category, ToleranceError):
        return category
    return category, table or default_table()


def _unknown_designation(
    category: MaterialCategory, designation: Any, table: ToleranceTable
) -> ToleranceError:
    available = table.designations(category)
    return ToleranceError(
        error=ErrorCode.UNKNOWN_DESIGNATION,
        message=(
            f"Unknown designation {designation!r} for {category.value}. "
            f"Available designations: {', '.join(available) or 'none'}."
        ),
        details={
            "material_type": category.value,
            "designation": designation,
            "available_designations": available,
        },
    )


def get_all_tolerances_for(
    material_type: Any,
    table: Optional[ToleranceTable] = None,
) -> Union[TolerancesLookup, ToleranceError]:
    """
    Get every designation row-set for a material type.

    Args:
        material_type: Free-form material type ("housing", "shaft rod"...)
        table: Optional table; defaults to the reference table

    Returns:
        TolerancesLookup, or ToleranceError for an unusable material type

    Example:
        >>> sorted(get_all_tolerances_for("shaft").specifications)
        ['h6', 'h7', 'h8', 'h9']
    """
    resolved = _resolve(material_type, table)
    if isinstance(resolved, ToleranceError):
        return resolved
    category, table = resolved
    return TolerancesLookup(
        type=category.value,
        specifications={
            designation: list(rows) for designation, rows in table.partition(category).items()
        },
    )


def get_tolerances_for(
    material_type: Any,
    designation: Optional[str] = None,
    table: Optional[ToleranceTable] = None,
) -> Union[TolerancesLookup, DesignationLookup, ToleranceError]:
    """Get all row-sets for a material type, or one designation's row-set."""
    if designation is None:
        return get_all_tolerances_for(material_type, table)

    resolved = _resolve(material_type, table)
    if isinstance(resolved, ToleranceError):
        return resolved
    category, table = resolved

    rows = table.rows(category, designation) if isinstance(designation, str) else None
    if rows is None:
        return _unknown_designation(category, designation, table)
    return DesignationLookup(type=category.value, designation=designation, specification=list(rows))


def get_camco_standard_tolerances_for(
    material_type: Any,
    table: Optional[ToleranceTable] = None,
) -> Union[CamcoStandardLookup, ToleranceError]:
    """
    Get the Camco standard row-set for a material type.

    Housing bores use H8, shell bores H9 and shafts h9.
    """
    resolved = _resolve(material_type, table)
    if isinstance(resolved, ToleranceError):
        return resolved
    category, table = resolved

    rows = table.rows(category, category.camco_designation)
    if rows is None:
        return _unknown_designation(category, category.camco_designation, table)
    return CamcoStandardLookup(
        type=category.value,
        designation=category.camco_designation,
        it_grade=category.camco_it_grade,
        specification=list(rows),
    )


def list_designations(
    material_type: Any,
    table: Optional[ToleranceTable] = None,
) -> Union[List[str], ToleranceError]:
    """List the designations available for a material type."""
    resolved = _resolve(material_type, table)
    if isinstance(resolved, ToleranceError):
        return resolved
    category, table = resolved
    return table.designations(category)
