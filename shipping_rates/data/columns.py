"""
Column Schema Definitions

Documents the rate matrix columns and the columns added by calculate_costs().
"""

import polars as pl


# =============================================================================
# RATE MATRIX COLUMNS (must be present from any source)
# =============================================================================

PRICING_COLS = [
    "weight_min_kg",                # Band lower bound (inclusive)
    "weight_max_kg",                # Band upper bound (inclusive)
    "first_weight_kg",              # Weight covered by first_weight_fee
    "first_weight_fee",             # Flat fee up to first_weight_kg
    "additional_weight_step_kg",    # Billable increment beyond first weight
    "additional_fee_per_step",      # Fee per increment (partial steps round up)
    "fuel_surcharge_percent",       # Percent of base freight
    "remote_area_surcharge",        # Flat addend
    "min_charge",                   # Floor on the final total
    "currency",                     # ISO currency code
    "estimated_delivery_days_min",
    "estimated_delivery_days_max",
]


# =============================================================================
# OPTIONAL COLUMNS (passed through when present)
# =============================================================================

IDENTITY_COLS = [
    "rate_id",
    "warehouse_id",
    "channel_id",
    "destination_country",
    "carrier_name",
    "channel_name",
]

LIFECYCLE_COLS = [
    "is_active",
    "effective_from",
    "effective_until",
]


RATE_MATRIX_SCHEMA = {
    "rate_id": pl.Utf8,
    "warehouse_id": pl.Utf8,
    "channel_id": pl.Utf8,
    "carrier_name": pl.Utf8,
    "channel_name": pl.Utf8,
    "destination_country": pl.Utf8,
    "weight_min_kg": pl.Float64,
    "weight_max_kg": pl.Float64,
    "first_weight_kg": pl.Float64,
    "first_weight_fee": pl.Float64,
    "additional_weight_step_kg": pl.Float64,
    "additional_fee_per_step": pl.Float64,
    "fuel_surcharge_percent": pl.Float64,
    "remote_area_surcharge": pl.Float64,
    "min_charge": pl.Float64,
    "currency": pl.Utf8,
    "estimated_delivery_days_min": pl.Int64,
    "estimated_delivery_days_max": pl.Int64,
    "is_active": pl.Boolean,
    "effective_from": pl.Date,
    "effective_until": pl.Date,
}


# =============================================================================
# CALCULATION COLUMNS (added by calculate_costs)
# =============================================================================

CALCULATION_COLS = [
    "weight_kg",
    "additional_weight_kg",
    "additional_steps",
    "additional_fees",
    "base_freight",
    "fuel_surcharge",
    "remote_surcharge",
    "subtotal",
    "total_freight",
    "calculator_version",
]


def missing_columns(df: pl.DataFrame, required: list[str] = PRICING_COLS) -> list[str]:
    """Return required columns absent from df, in schema order."""
    return [c for c in required if c not in df.columns]


__all__ = [
    "PRICING_COLS",
    "IDENTITY_COLS",
    "LIFECYCLE_COLS",
    "RATE_MATRIX_SCHEMA",
    "CALCULATION_COLS",
    "missing_columns",
]
