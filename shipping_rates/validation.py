"""
Rate Matrix Validation

Advisory checks for tariff rows and admin form drafts. Every rule is evaluated
and each violation yields one message, so a form can report all problems at
once. Nothing here raises for bad data.
"""

import polars as pl

from .models import TariffRow, TariffRowDraft
from .data import RATE_MATRIX_SCHEMA
from .ranges import GROUP_COLS, find_overlapping_bands


def validate_rate(row: TariffRow | TariffRowDraft) -> list[str]:
    """
    Validate a tariff row or draft.

    Absent means None; zero is a present value.

    Returns:
        Error messages, empty when the row is usable by the calculator
    """
    errors = []

    weight_min = row.weight_min_kg
    weight_max = row.weight_max_kg

    if weight_min is None or weight_min <= 0:
        errors.append("Minimum weight must be greater than 0")

    if weight_max is None or weight_max <= 0:
        errors.append("Maximum weight must be greater than 0")

    if weight_min is not None and weight_max is not None and weight_min >= weight_max:
        errors.append("Minimum weight must be less than maximum weight")

    if row.first_weight_kg is None or row.first_weight_kg <= 0:
        errors.append("First weight must be greater than 0")

    if row.first_weight_fee is None:
        errors.append("First weight fee is required")
    elif row.first_weight_fee < 0:
        errors.append("First weight fee cannot be negative")

    if row.additional_weight_step_kg is None or row.additional_weight_step_kg <= 0:
        errors.append("Additional weight step must be greater than 0")

    if row.additional_fee_per_step is None:
        errors.append("Additional fee per step is required")
    elif row.additional_fee_per_step < 0:
        errors.append("Additional fee per step cannot be negative")

    if row.fuel_surcharge_percent is not None and row.fuel_surcharge_percent < 0:
        errors.append("Fuel surcharge percentage cannot be negative")

    if row.min_charge is not None and row.min_charge < 0:
        errors.append("Minimum charge cannot be negative")

    days_min = row.estimated_delivery_days_min
    days_max = row.estimated_delivery_days_max
    if days_min is not None and days_max is not None and days_min > days_max:
        errors.append("Minimum delivery days must be less than or equal to maximum")

    return errors


def validate_rate_matrix(df: pl.DataFrame) -> list[str]:
    """
    Validate every row of a rate matrix before import.

    Row numbers in messages are 1-based, in frame order. Rows in the same
    warehouse/channel/destination group with colliding weight bands are
    reported as well, since they make rate selection ambiguous.
    """
    errors = []

    draft_fields = [c for c in df.columns if c in TariffRowDraft._fields]
    for n, record in enumerate(df.select(draft_fields).iter_rows(named=True), start=1):
        errors.extend(f"Row {n}: {message}" for message in validate_rate(TariffRowDraft(**record)))

    band_cols = ["weight_min_kg", "weight_max_kg"]
    if all(c in df.columns for c in GROUP_COLS + band_cols):
        bands = (
            df.cast({c: RATE_MATRIX_SCHEMA[c] for c in band_cols})
            .with_row_index("row_number", offset=1)
        )
        # Inactive rows never compete for a shipment
        if "is_active" in bands.columns:
            bands = bands.filter(pl.col("is_active"))
        for pair in find_overlapping_bands(bands, id_col="row_number").iter_rows(named=True):
            errors.append(
                f"Row {pair['row_number']}: weight band "
                f"{pair['weight_min_kg']}-{pair['weight_max_kg']}kg overlaps row "
                f"{pair['row_number_other']} "
                f"({pair['weight_min_kg_other']}-{pair['weight_max_kg_other']}kg)"
            )

    return errors


__all__ = [
    "validate_rate",
    "validate_rate_matrix",
]
