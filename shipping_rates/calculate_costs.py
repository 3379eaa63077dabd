"""
Shipping Cost Calculator

Converts a weight and a tariff row into a full cost breakdown. Two entry points
compute identical numbers:

    calculate_cost(weight_kg, row)     - one TariffRow in, one CostBreakdown out
    calculate_costs(rates, weight_kg)  - rate matrix DataFrame in, same DataFrame
                                         with calculation columns appended

Both are pure: no I/O, no shared state, safe to call from any thread.

ALGORITHM
---------
    1. additional_weight_kg = max(0, weight_kg - first_weight_kg)
    2. additional_steps     = ceil(additional_weight_kg / additional_weight_step_kg)
                              (0 when there is no additional weight)
    3. additional_fees      = additional_steps * additional_fee_per_step
    4. base_freight         = first_weight_fee + additional_fees
    5. fuel_surcharge       = base_freight * (fuel_surcharge_percent / 100)
    6. remote_surcharge     = remote_area_surcharge
    7. subtotal             = base_freight + fuel_surcharge + remote_surcharge
    8. total_freight        = max(subtotal, min_charge)

Fuel is charged on base freight only. The minimum charge floors the grand
total, after all surcharges.

OUTPUT COLUMNS ADDED (calculate_costs)
--------------------------------------
    weight_kg, additional_weight_kg, additional_steps, additional_fees,
    base_freight, fuel_surcharge, remote_surcharge, subtotal, total_freight,
    calculator_version

USAGE
-----
    from shipping_rates.calculate_costs import calculate_cost
    breakdown = calculate_cost(2.3, row)
"""

import math

import polars as pl

from .version import VERSION
from .models import CostBreakdown, RangeError, TariffRow
from .data import coerce_rate_matrix


# =============================================================================
# SINGLE ROW
# =============================================================================

def calculate_cost(weight_kg: float, row: TariffRow) -> CostBreakdown:
    """
    Calculate the shipping cost of one weight against one tariff row.

    Raises:
        RangeError: If weight_kg is outside [weight_min_kg, weight_max_kg]
    """
    # NaN falls outside every band
    if not (row.weight_min_kg <= weight_kg <= row.weight_max_kg):
        raise RangeError(
            f"Weight {weight_kg}kg is outside the valid range "
            f"{row.weight_min_kg}-{row.weight_max_kg}kg"
        )

    additional_weight_kg = max(0.0, weight_kg - row.first_weight_kg)

    # Partial steps round up
    additional_steps = (
        math.ceil(additional_weight_kg / row.additional_weight_step_kg)
        if additional_weight_kg > 0
        else 0
    )

    additional_fees = additional_steps * row.additional_fee_per_step
    base_freight = row.first_weight_fee + additional_fees
    fuel_surcharge = base_freight * (row.fuel_surcharge_percent / 100)
    remote_surcharge = row.remote_area_surcharge
    subtotal = base_freight + fuel_surcharge + remote_surcharge
    total_freight = max(subtotal, row.min_charge)

    return CostBreakdown(
        weight_kg=weight_kg,
        first_weight_kg=row.first_weight_kg,
        first_weight_fee=row.first_weight_fee,
        additional_weight_kg=additional_weight_kg,
        additional_steps=additional_steps,
        additional_weight_step_kg=row.additional_weight_step_kg,
        additional_fee_per_step=row.additional_fee_per_step,
        additional_fees=additional_fees,
        base_freight=base_freight,
        fuel_surcharge_percent=row.fuel_surcharge_percent,
        fuel_surcharge=fuel_surcharge,
        remote_surcharge=remote_surcharge,
        subtotal=subtotal,
        min_charge=row.min_charge,
        total_freight=total_freight,
        currency=row.currency,
        weight_min_kg=row.weight_min_kg,
        weight_max_kg=row.weight_max_kg,
        estimated_delivery_days_min=row.estimated_delivery_days_min,
        estimated_delivery_days_max=row.estimated_delivery_days_max,
        rate_id=row.rate_id,
        warehouse_id=row.warehouse_id,
        channel_id=row.channel_id,
        destination_country=row.destination_country,
        carrier_name=row.carrier_name,
        channel_name=row.channel_name,
        calculator_version=VERSION,
    )


# =============================================================================
# RATE MATRIX FRAME
# =============================================================================

def calculate_costs(rates: pl.DataFrame, weight_kg: float) -> pl.DataFrame:
    """
    Calculate the shipping cost of one weight against every row of a rate matrix.

    Args:
        rates: Rate matrix rows (see data.columns.PRICING_COLS)
        weight_kg: Shipment weight

    Returns:
        rates with calculation columns appended, row order preserved

    Raises:
        RangeError: If any row's weight band excludes weight_kg
        ValueError: If a pricing column is missing

    Processing order:
        1. Weight band check  - all rows, before any computation
        2. Additional weight  - weight beyond first weight, billable steps
        3. Base freight       - first weight fee + step fees
        4. Surcharges         - fuel on base freight, flat remote surcharge
        5. Minimum charge     - floor on the subtotal
    """
    df = coerce_rate_matrix(rates).with_columns(
        pl.lit(weight_kg, dtype=pl.Float64).alias("weight_kg")
    )

    _check_weight_band(df)

    df = _add_additional_weight(df)
    df = _add_base_freight(df)
    df = _add_surcharges(df)
    df = _apply_min_charge(df)
    df = _stamp_version(df)

    return df


def _check_weight_band(df: pl.DataFrame) -> None:
    """Raise if any row's inclusive band excludes the weight."""
    outside = df.filter(
        pl.col("weight_kg").is_null() |
        pl.col("weight_kg").is_nan() |
        (pl.col("weight_kg") < pl.col("weight_min_kg")) |
        (pl.col("weight_kg") > pl.col("weight_max_kg"))
    )

    if len(outside) > 0:
        weight = outside["weight_kg"][0]
        raise RangeError(
            f"{len(outside)} rate row(s) do not cover weight {weight}kg. "
            f"Check weight_min_kg and weight_max_kg values."
        )


def _add_additional_weight(df: pl.DataFrame) -> pl.DataFrame:
    """Add weight beyond the first weight and the billable step count."""
    df = df.with_columns(
        pl.max_horizontal(pl.lit(0.0), pl.col("weight_kg") - pl.col("first_weight_kg"))
        .alias("additional_weight_kg")
    )

    return df.with_columns(
        pl.when(pl.col("additional_weight_kg") > 0)
        .then((pl.col("additional_weight_kg") / pl.col("additional_weight_step_kg")).ceil())
        .otherwise(pl.lit(0.0))
        .cast(pl.Int64)
        .alias("additional_steps")
    )


def _add_base_freight(df: pl.DataFrame) -> pl.DataFrame:
    """Add step fees and base freight (kept as separate steps so each is rounded once)."""
    df = df.with_columns(
        (pl.col("additional_steps") * pl.col("additional_fee_per_step"))
        .alias("additional_fees")
    )

    return df.with_columns(
        (pl.col("first_weight_fee") + pl.col("additional_fees")).alias("base_freight")
    )


def _add_surcharges(df: pl.DataFrame) -> pl.DataFrame:
    """Add fuel (on base freight only), remote surcharge and subtotal."""
    df = df.with_columns([
        (pl.col("base_freight") * (pl.col("fuel_surcharge_percent") / 100))
        .alias("fuel_surcharge"),

        pl.col("remote_area_surcharge").alias("remote_surcharge"),
    ])

    return df.with_columns(
        (pl.col("base_freight") + pl.col("fuel_surcharge") + pl.col("remote_surcharge"))
        .alias("subtotal")
    )


def _apply_min_charge(df: pl.DataFrame) -> pl.DataFrame:
    """Floor the subtotal at the row's minimum charge."""
    return df.with_columns(
        pl.max_horizontal("subtotal", "min_charge").alias("total_freight")
    )


def _stamp_version(df: pl.DataFrame) -> pl.DataFrame:
    """Stamp calculator version on output."""
    return df.with_columns(pl.lit(VERSION).alias("calculator_version"))


# =============================================================================
# CONVERSION
# =============================================================================

_BREAKDOWN_DEFAULTS = {
    "rate_id": None,
    "warehouse_id": None,
    "channel_id": None,
    "destination_country": None,
    "carrier_name": "Unknown Carrier",
    "channel_name": "Unknown Channel",
}


def to_breakdowns(df: pl.DataFrame) -> list[CostBreakdown]:
    """Convert calculate_costs() output to CostBreakdown values, preserving order."""
    breakdowns = []
    for record in df.iter_rows(named=True):
        values = {**_BREAKDOWN_DEFAULTS, **{k: v for k, v in record.items() if v is not None}}
        breakdowns.append(CostBreakdown(**{f: values[f] for f in CostBreakdown._fields}))
    return breakdowns


__all__ = [
    "calculate_cost",
    "calculate_costs",
    "to_breakdowns",
]
