"""
Camco Reference Tolerance Data.

Deviation and IT-grade values for housing bores, shell bores and shafts,
per diameter bracket. Hole designations follow ISO 286-2 (H: lower
deviation zero, upper deviation = IT). Shafts h6-h8 follow ISO 286-2
(upper deviation zero).

The Camco h9 shaft envelope (CAMCO_SHAFT_H9_UM) holds placeholder values
until the Camco tolerance table is supplied: ISO IT8 magnitudes, with the
18-30 mm bracket set to 30 um to give the 25 mm h9 limits 24.970/25.000.
Load the real table through TOLERANCE_TABLE_PATH to replace it.

Reference:
- ISO 286-1:2010 Table 1 - Standard tolerance values
- ISO 286-2:2010 - Limit deviations for holes H and shafts h
"""

from typing import Dict, List, Tuple

# Diameter brackets in mm (minimum_diameter, maximum_diameter)
BRACKETS: List[Tuple[float, float]] = [
    (0, 3),
    (3, 6),
    (6, 10),
    (10, 18),
    (18, 30),
    (30, 50),
    (50, 80),
    (80, 120),
    (120, 180),
    (180, 250),
    (250, 315),
    (315, 400),
    (400, 500),
    (500, 630),
    (630, 800),
    (800, 1000),
]

# Standard tolerance values in micrometers, one entry per bracket
IT_GRADES_UM: Dict[str, List[float]] = {
    "IT5": [4, 5, 6, 8, 9, 11, 13, 15, 18, 20, 23, 25, 27, 32, 36, 40],
    "IT6": [6, 8, 9, 11, 13, 16, 19, 22, 25, 29, 32, 36, 40, 44, 50, 56],
    "IT7": [10, 12, 15, 18, 21, 25, 30, 35, 40, 46, 52, 57, 63, 70, 80, 90],
    "IT8": [14, 18, 22, 27, 33, 39, 46, 54, 63, 72, 81, 89, 97, 110, 125, 140],
    "IT9": [25, 30, 36, 43, 52, 62, 74, 87, 100, 115, 130, 140, 155, 175, 200, 230],
}

# IT grades published on every row for spread checks
ROW_IT_GRADES: List[str] = ["IT5", "IT6", "IT7"]

# Placeholder Camco h9 shaft envelope (lower deviation magnitude, um): IT8 with 18-30 set to 30
CAMCO_SHAFT_H9_UM: List[float] = [14, 18, 22, 27, 30, 39, 46, 54, 63, 72, 81, 89, 97, 110, 125, 140]

# Format: {table_key: {designation: (upper deviations um, lower deviations um)}}
DESIGNATIONS_UM: Dict[str, Dict[str, Tuple[List[float], List[float]]]] = {
    "housingBores": {
        "H7": (IT_GRADES_UM["IT7"], [0] * len(BRACKETS)),
        "H8": (IT_GRADES_UM["IT8"], [0] * len(BRACKETS)),
        "H9": (IT_GRADES_UM["IT9"], [0] * len(BRACKETS)),
    },
    "shell": {
        "H8": (IT_GRADES_UM["IT8"], [0] * len(BRACKETS)),
        "H9": (IT_GRADES_UM["IT9"], [0] * len(BRACKETS)),
    },
    "shafts": {
        "h6": ([0] * len(BRACKETS), [-v for v in IT_GRADES_UM["IT6"]]),
        "h7": ([0] * len(BRACKETS), [-v for v in IT_GRADES_UM["IT7"]]),
        "h8": ([0] * len(BRACKETS), [-v for v in IT_GRADES_UM["IT8"]]),
        "h9": ([0] * len(BRACKETS), [-v for v in CAMCO_SHAFT_H9_UM]),
    },
}


def _um_to_mm(value_um: float) -> float:
    return round(value_um / 1000.0, 3)


def build_reference_tolerances() -> Dict[str, Dict[str, List[Dict[str, float]]]]:
    """
    Build the reference table in its external (JSON) shape.

    Returns:
        {table_key: {designation: [row, ...]}} with every value in mm

    Example:
        >>> data = build_reference_tolerances()
        >>> data["shafts"]["h9"][4]["lower_deviation"]
        -0.03
    """
    tolerances: Dict[str, Dict[str, List[Dict[str, float]]]] = {}
    for table_key, designations in DESIGNATIONS_UM.items():
        tolerances[table_key] = {}
        for designation, (uppers, lowers) in designations.items():
            rows = []
            for i, (minimum, maximum) in enumerate(BRACKETS):
                row = {
                    "minimum_diameter": float(minimum),
                    "maximum_diameter": float(maximum),
                    "upper_deviation": _um_to_mm(uppers[i]),
                    "lower_deviation": _um_to_mm(lowers[i]),
                }
                for grade in ROW_IT_GRADES:
                    row[grade] = _um_to_mm(IT_GRADES_UM[grade][i])
                rows.append(row)
            tolerances[table_key][designation] = rows
    return tolerances
