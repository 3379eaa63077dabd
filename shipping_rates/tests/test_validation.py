"""
Tests for Rate Matrix Validation

Run with: pytest shipping_rates/tests/test_validation.py -v
"""

import polars as pl
import pytest

from shipping_rates.data import load_rate_matrix
from shipping_rates.models import TariffRow, TariffRowDraft
from shipping_rates.validation import validate_rate, validate_rate_matrix


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def valid_row() -> TariffRow:
    return TariffRow(
        weight_min_kg=0.01,
        weight_max_kg=5,
        first_weight_kg=1,
        first_weight_fee=10,
        additional_weight_step_kg=0.5,
        additional_fee_per_step=3,
        fuel_surcharge_percent=5,
        remote_area_surcharge=2,
        min_charge=20,
        currency="USD",
        estimated_delivery_days_min=5,
        estimated_delivery_days_max=9,
    )


@pytest.fixture
def reference_rates() -> pl.DataFrame:
    return load_rate_matrix()


# =============================================================================
# TESTS: SINGLE ROW
# =============================================================================

class TestValidateRate:
    """Tests for validate_rate()."""

    def test_valid_row(self, valid_row):
        assert validate_rate(valid_row) == []

    def test_empty_draft_reports_every_required_field(self):
        errors = validate_rate(TariffRowDraft())
        assert errors == [
            "Minimum weight must be greater than 0",
            "Maximum weight must be greater than 0",
            "First weight must be greater than 0",
            "First weight fee is required",
            "Additional weight step must be greater than 0",
            "Additional fee per step is required",
        ]

    def test_zero_fees_are_present_values(self, valid_row):
        """A free first weight or free step is valid; only None counts as missing."""
        row = valid_row._replace(first_weight_fee=0, additional_fee_per_step=0)
        assert validate_rate(row) == []

    def test_negative_fees(self, valid_row):
        row = valid_row._replace(first_weight_fee=-1, additional_fee_per_step=-0.5)
        assert validate_rate(row) == [
            "First weight fee cannot be negative",
            "Additional fee per step cannot be negative",
        ]

    def test_one_message_per_violation(self, valid_row):
        row = valid_row._replace(weight_min_kg=5, weight_max_kg=2, fuel_surcharge_percent=-1)
        errors = validate_rate(row._replace(min_charge=-1))
        assert len(errors) == 3
        assert "Minimum weight must be less than maximum weight" in errors
        assert "Fuel surcharge percentage cannot be negative" in errors
        assert "Minimum charge cannot be negative" in errors

    def test_equal_band_bounds_rejected(self, valid_row):
        errors = validate_rate(valid_row._replace(weight_min_kg=5))
        assert errors == ["Minimum weight must be less than maximum weight"]

    def test_zero_lower_bound_rejected(self, valid_row):
        errors = validate_rate(valid_row._replace(weight_min_kg=0))
        assert errors == ["Minimum weight must be greater than 0"]

    def test_zero_step_rejected(self, valid_row):
        errors = validate_rate(valid_row._replace(additional_weight_step_kg=0))
        assert errors == ["Additional weight step must be greater than 0"]

    def test_delivery_days_order(self, valid_row):
        row = valid_row._replace(estimated_delivery_days_min=10, estimated_delivery_days_max=5)
        assert validate_rate(row) == [
            "Minimum delivery days must be less than or equal to maximum"
        ]

    def test_same_day_delivery_range_ok(self, valid_row):
        row = valid_row._replace(estimated_delivery_days_min=3, estimated_delivery_days_max=3)
        assert validate_rate(row) == []

    def test_optional_fields_may_be_absent(self):
        draft = TariffRowDraft(
            weight_min_kg=1,
            weight_max_kg=2,
            first_weight_kg=0.5,
            first_weight_fee=4,
            additional_weight_step_kg=0.5,
            additional_fee_per_step=1,
        )
        assert validate_rate(draft) == []

    def test_draft_from_dict_ignores_unknown_keys(self):
        draft = TariffRowDraft.from_dict({"weight_min_kg": 1, "notes": "form field"})
        assert draft.weight_min_kg == 1
        assert draft.weight_max_kg is None


# =============================================================================
# TESTS: RATE MATRIX
# =============================================================================

class TestValidateRateMatrix:
    """Tests for validate_rate_matrix()."""

    def test_reference_matrix_is_valid(self, reference_rates):
        assert validate_rate_matrix(reference_rates) == []

    def test_row_numbers_are_one_based(self, reference_rates):
        df = reference_rates.with_columns(
            pl.when(pl.col("rate_id") == "R-1003")
            .then(None)
            .otherwise(pl.col("first_weight_fee"))
            .alias("first_weight_fee")
        )
        assert validate_rate_matrix(df) == ["Row 3: First weight fee is required"]

    def test_overlapping_bands_reported(self, reference_rates):
        """A 1-5 kg DHL row collides with both existing DHL US bands."""
        extra = reference_rates.filter(pl.col("rate_id") == "R-1001").with_columns(
            pl.lit("R-1009").alias("rate_id"),
            pl.lit(1.0).alias("weight_min_kg"),
            pl.lit(5.0).alias("weight_max_kg"),
        )
        errors = validate_rate_matrix(pl.concat([reference_rates, extra]))

        assert len(errors) == 2
        assert errors[0].startswith("Row 1: weight band")
        assert errors[1].startswith("Row 2: weight band")
        assert all("overlaps row 10" in e for e in errors)

    def test_adjacent_bands_not_reported(self, reference_rates):
        """R-1001 (0.01-2) and R-1002 (2-30) share only the 2 kg boundary."""
        df = reference_rates.filter(pl.col("rate_id").is_in(["R-1001", "R-1002"]))
        assert validate_rate_matrix(df) == []

    def test_inactive_rows_ignored_for_overlap(self, reference_rates):
        """R-0907 overlaps R-1005 but is retired."""
        assert validate_rate_matrix(reference_rates) == []

        reactivated = reference_rates.with_columns(pl.lit(True).alias("is_active"))
        errors = validate_rate_matrix(reactivated)
        assert len(errors) == 1
        assert errors[0].startswith("Row 5:")
        assert "overlaps row 9" in errors[0]

    def test_pricing_only_frame(self):
        """Without group columns only the per-row rules run."""
        df = pl.DataFrame({
            "weight_min_kg": [0.01, 3.0],
            "weight_max_kg": [5.0, 2.0],
            "first_weight_kg": [1.0, 1.0],
            "first_weight_fee": [10.0, 10.0],
            "additional_weight_step_kg": [0.5, 0.5],
            "additional_fee_per_step": [3.0, 3.0],
        })
        assert validate_rate_matrix(df) == [
            "Row 2: Minimum weight must be less than maximum weight"
        ]
