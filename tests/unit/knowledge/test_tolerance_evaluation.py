"""Tests for single and batch measurement evaluation."""

import logging

import pytest

from src.core.errors import ErrorCode, ToleranceError, is_error
from src.core.knowledge.tolerance import (
    BatchResult,
    EvaluationResult,
    Outcome,
    ToleranceTable,
    check_multiple_measurements_for,
    check_one_measurement_for,
)
from src.core.knowledge.tolerance.reference_data import build_reference_tolerances

HOUSING_BATCH = [240.05, 240.07, 240.09, 240.05, 240.06, 240.02, 240.09]


class TestCheckOneMeasurement:
    """Tests for check_one_measurement_for."""

    def test_shaft_scenario(self):
        result = check_one_measurement_for("shaft", 24.982)

        assert isinstance(result, EvaluationResult)
        assert result.nominal == 25
        assert result.designation == "h9"
        assert result.it_grade == "IT5"
        assert result.bounds.lower == 24.97
        assert result.bounds.upper == 25.0
        assert result.display_bounds.lower == "25.000 - 0.030"
        assert result.display_bounds.upper == "25.000 + 0.000"
        assert result.meets_spec is True
        assert result.outcome == Outcome.ACCEPTABLE
        assert "24.982" in result.reason
        assert "24.970" in result.reason and "25.000" in result.reason

    def test_housing_uses_h8(self):
        result = check_one_measurement_for("housing bore", 240.05)
        assert result.designation == "H8"
        assert result.nominal == 240
        assert result.specification.minimum_diameter == 180
        assert result.bounds.upper == 240.072
        assert result.bounds.lower == 240.0
        assert result.meets_spec is True

    def test_shell_uses_h9(self):
        result = check_one_measurement_for("Shell", 100.05)
        assert result.designation == "H9"
        assert result.bounds.upper == 100.087
        assert result.meets_spec is True

    @pytest.mark.parametrize("measurement", [24.97, 25.0])
    def test_limits_are_inclusive(self, measurement):
        result = check_one_measurement_for("shaft", measurement)
        assert result.meets_spec is True
        assert result.outcome == Outcome.ACCEPTABLE

    def test_over_sized(self):
        result = check_one_measurement_for("housing", 240.09)
        assert result.meets_spec is False
        assert result.outcome == Outcome.OVER_SIZED
        assert "outside" in result.reason

    def test_under_sized(self):
        # Overshoots 29 by 0.99, so the nominal is 30 and the bore is too small
        result = check_one_measurement_for("housing", 29.99)
        assert result.nominal == 30
        assert result.outcome == Outcome.UNDER_SIZED
        assert result.meets_spec is False

    def test_overshoot_at_threshold_moves_nominal(self):
        # 24.9 sits exactly 0.9 above 24, so it belongs to the 25 bore
        result = check_one_measurement_for("housing", 24.9)
        assert result.nominal == 25
        assert result.outcome == Outcome.UNDER_SIZED
        assert check_one_measurement_for("shaft", 24.1).nominal == 24

    def test_shaft_above_nominal_is_over_sized(self):
        result = check_one_measurement_for("shaft", 25.001)
        assert result.nominal == 25
        assert result.outcome == Outcome.OVER_SIZED

    def test_idempotent(self):
        assert check_one_measurement_for("shaft", 24.982) == check_one_measurement_for("shaft", 24.982)

    def test_measurement_at_limit_is_invalid(self):
        result = check_one_measurement_for("housing", 1000)
        assert isinstance(result, ToleranceError)
        assert result.error == ErrorCode.INVALID_MEASUREMENT

    @pytest.mark.parametrize("measurement", ["bad", "25.0", None, -1, float("nan"), float("inf"), False, 10**400])
    def test_invalid_measurement(self, measurement):
        result = check_one_measurement_for("shaft", measurement)
        assert result.is_error
        assert result.error == ErrorCode.INVALID_MEASUREMENT

    def test_invalid_category_checked_first(self):
        assert check_one_measurement_for("bracket", "bad").error == ErrorCode.UNKNOWN_CATEGORY
        assert check_one_measurement_for(7, 25).error == ErrorCode.INVALID_CATEGORY

    def test_no_matching_specification(self):
        # Rounds up to nominal 1000, beyond the last bore bracket
        result = check_one_measurement_for("housing", 999.95)
        assert result.error == ErrorCode.NO_MATCHING_SPECIFICATION
        assert result.details["nominal"] == 1000

    def test_no_matching_specification_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            check_one_measurement_for("housing", 999.95)
        assert any(getattr(r, "nominal", None) == 1000 for r in caplog.records)

    def test_shaft_at_zero_has_no_bracket(self):
        assert check_one_measurement_for("shaft", 0).error == ErrorCode.NO_MATCHING_SPECIFICATION

    def test_threshold_override(self):
        result = check_one_measurement_for("shaft", 24.5, threshold=0.4)
        assert result.nominal == 24
        assert result.outcome == Outcome.OVER_SIZED

    def test_injected_table(self):
        data = build_reference_tolerances()
        data["shafts"]["h9"] = [
            {"minimum_diameter": 0, "maximum_diameter": 100, "upper_deviation": 0, "lower_deviation": -0.5, "IT5": 0.1}
        ]
        table = ToleranceTable.from_dict(data)
        result = check_one_measurement_for("shaft", 24.6, table=table)
        assert result.bounds.lower == 24.5
        assert result.meets_spec is True

    def test_missing_camco_designation(self):
        table = ToleranceTable.from_dict({"housingBores": {"H7": build_reference_tolerances()["housingBores"]["H7"]}})
        result = check_one_measurement_for("housing", 25, table=table)
        assert result.error == ErrorCode.UNKNOWN_DESIGNATION

    def test_result_serializes(self):
        dumped = check_one_measurement_for("shaft", 24.982).model_dump(mode="json")
        assert dumped["outcome"] == "acceptable"
        assert dumped["bounds"] == {"upper": 25.0, "lower": 24.97}
        assert dumped["specification"]["IT5"] == 0.009


class TestCheckMultipleMeasurements:
    """Tests for check_multiple_measurements_for."""

    def test_housing_scenario(self):
        result = check_multiple_measurements_for("housing", HOUSING_BATCH)

        assert isinstance(result, BatchResult)
        assert result.reference_nominal == 240
        assert result.spread == 0.07
        # IT6 for the 180-250 bracket is 29 um
        assert result.it_tolerance == 0.029
        assert result.meets_it_tolerance is False
        assert result.farthest_measurement == 240.09
        assert result.farthest_outcome == Outcome.OVER_SIZED
        assert result.meets_spec is False
        assert result.meets_final_compliance is False
        assert len(result.items) == len(HOUSING_BATCH)
        assert "over-sized" in result.message
        assert "fails final compliance" in result.message

    def test_compliant_batch(self):
        result = check_multiple_measurements_for("shaft", [24.99, 24.995, 24.992])
        assert result.reference_nominal == 25
        assert result.spread == 0.005
        assert result.it_tolerance == 0.009
        assert result.meets_spec is True
        assert result.meets_it_tolerance is True
        assert result.meets_final_compliance is True
        assert result.farthest_measurement == 24.99
        assert result.farthest_outcome == Outcome.ACCEPTABLE
        assert "meets final compliance" in result.message

    def test_spread_equal_to_it_grade_passes(self):
        result = check_multiple_measurements_for("shaft", [24.98, 24.989])
        assert result.spread == 0.009
        assert result.meets_it_tolerance is True

    def test_spec_ok_but_spread_too_wide(self):
        result = check_multiple_measurements_for("shaft", [24.975, 24.995])
        assert result.meets_spec is True
        assert result.meets_it_tolerance is False
        assert result.meets_final_compliance is False

    def test_every_item_must_meet_spec(self):
        # 25.001 resolves to nominal 25 and is over-sized; spread is tiny
        result = check_multiple_measurements_for("shaft", [24.998, 25.001, 24.999])
        assert result.meets_it_tolerance is True
        assert result.meets_spec is False
        assert result.meets_final_compliance is False
        assert "[1]" in result.message

    def test_final_compliance_is_conjunction(self):
        for batch in ([24.99, 24.995], [24.975, 24.995], HOUSING_BATCH, [24.998, 25.001]):
            result = check_multiple_measurements_for("shaft", batch)
            assert result.meets_final_compliance == (result.meets_spec and result.meets_it_tolerance)

    def test_most_common_nominal(self):
        result = check_multiple_measurements_for("shaft", [25.5, 24.99, 25.9, 25.95])
        assert result.reference_nominal == 26

    def test_tie_goes_to_first_nominal(self):
        assert check_multiple_measurements_for("shaft", [24.99, 25.99]).reference_nominal == 25
        assert check_multiple_measurements_for("shaft", [25.99, 24.99]).reference_nominal == 26

    def test_farthest_tie_goes_to_first(self):
        # Both sit 0.0625 from nominal 240
        result = check_multiple_measurements_for("housing", [240.0625, 239.9375, 240.0])
        assert result.reference_nominal == 240
        assert result.farthest_measurement == 240.0625
        result = check_multiple_measurements_for("housing", [239.9375, 240.0625, 240.0])
        assert result.farthest_measurement == 239.9375

    def test_tuple_accepted(self):
        result = check_multiple_measurements_for("shaft", (24.99, 24.995))
        assert result.measurements == [24.99, 24.995]

    def test_empty_batch(self):
        result = check_multiple_measurements_for("housing", [])
        assert result.error == ErrorCode.INVALID_MEASUREMENT_BATCH
        assert result.details["invalid_indices"] == []

    @pytest.mark.parametrize("measurements", ["240.05", 240.05, None, {240.05}])
    def test_not_a_list(self, measurements):
        result = check_multiple_measurements_for("housing", measurements)
        assert result.error == ErrorCode.INVALID_MEASUREMENT_BATCH

    def test_invalid_items_listed(self):
        result = check_multiple_measurements_for("housing", [240.05, "x", -1, float("nan"), 1000, 10**400])
        assert result.error == ErrorCode.INVALID_MEASUREMENT_BATCH
        assert result.details["invalid_indices"] == [1, 2, 3, 4, 5]

    def test_invalid_category(self):
        assert check_multiple_measurements_for("", [25]).error == ErrorCode.INVALID_CATEGORY

    def test_item_without_specification_is_embedded(self):
        result = check_multiple_measurements_for("housing", [999.95, 999.1, 999.2])
        assert result.reference_nominal == 999
        assert is_error(result.items[0])
        assert result.items[0].error == ErrorCode.NO_MATCHING_SPECIFICATION
        assert isinstance(result.items[1], EvaluationResult)
        assert result.meets_spec is False
        assert result.meets_final_compliance is False

    def test_reference_nominal_without_specification(self):
        result = check_multiple_measurements_for("housing", [999.95, 999.96, 999.0])
        assert result.reference_nominal == 1000
        assert result.reference_specification is None
        assert result.reference_bounds is None
        assert result.it_tolerance is None
        assert result.meets_it_tolerance is False
        assert result.meets_final_compliance is False
        assert "No H8 specification found for nominal 1000" in result.message

    def test_reference_row_without_it_grade(self):
        data = {
            "shafts": {
                "h9": [{"minimum_diameter": 0, "maximum_diameter": 100, "upper_deviation": 0, "lower_deviation": -0.05}]
            }
        }
        result = check_multiple_measurements_for("shaft", [24.99, 24.995], table=ToleranceTable.from_dict(data))
        assert result.meets_spec is True
        assert result.it_tolerance is None
        assert result.meets_it_tolerance is False

    def test_batch_logs_verdict(self, caplog):
        with caplog.at_level(logging.INFO, logger="src.core.knowledge.tolerance.evaluation"):
            check_multiple_measurements_for("housing", HOUSING_BATCH)
        batch_records = [r for r in caplog.records if getattr(r, "stage", None) == "batch"]
        assert len(batch_records) == 1
        assert batch_records[0].measurement_count == len(HOUSING_BATCH)
