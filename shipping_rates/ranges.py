"""
Weight Band Overlap

Two tariff rows for the same warehouse, channel and destination must not have
colliding weight bands, otherwise rate selection is ambiguous. Bands that only
touch at a single point (max of one == min of the other) do not overlap.
"""

import polars as pl

from .models import WeightRange


GROUP_COLS = ["warehouse_id", "channel_id", "destination_country"]


def overlaps(range1: WeightRange, range2: WeightRange) -> bool:
    """
    Check if two (min, max) weight bands overlap.

    Strict on both sides, so overlaps(a, b) == overlaps(b, a) and adjacent
    bands return False.
    """
    min1, max1 = range1
    min2, max2 = range2
    return min1 < max2 and min2 < max1


def find_overlapping_bands(
    rates: pl.DataFrame,
    id_col: str = "rate_id",
    group_cols: list[str] = GROUP_COLS
) -> pl.DataFrame:
    """
    Find pairs of rows in the same group whose weight bands overlap.

    Args:
        rates: Rate matrix with id_col, group_cols and the band columns
        id_col: Column labelling a row in the output (may hold nulls or
            duplicates; rows are paired by position)
        group_cols: Columns defining rows that compete for the same shipment

    Returns:
        One row per overlapping pair, earlier row first: id_col, group_cols,
        weight_min_kg, weight_max_kg and the same id/band columns of the
        other row suffixed with "_other"
    """
    bands = (
        rates
        .select([id_col, *group_cols, "weight_min_kg", "weight_max_kg"])
        .with_row_index("_position")
    )

    return (
        bands
        .join(bands, on=group_cols, how="inner", suffix="_other")
        .filter(
            (pl.col("_position") < pl.col("_position_other")) &
            (pl.col("weight_min_kg") < pl.col("weight_max_kg_other")) &
            (pl.col("weight_min_kg_other") < pl.col("weight_max_kg"))
        )
        .sort(["_position", "_position_other"])
        .drop(["_position", "_position_other"])
    )


__all__ = [
    "overlaps",
    "find_overlapping_bands",
    "GROUP_COLS",
]
