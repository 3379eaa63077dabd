"""
Rate Matrix Frames

Conversion between rate matrix DataFrames and TariffRow values.
"""

import polars as pl

from ..models import TariffRow
from .columns import PRICING_COLS, RATE_MATRIX_SCHEMA, missing_columns


def coerce_rate_matrix(df: pl.DataFrame) -> pl.DataFrame:
    """
    Cast known rate matrix columns to their schema dtypes.

    Database sources return DECIMAL columns; CSVs may infer integers for
    whole-number prices. Unknown columns are left untouched.

    Raises:
        ValueError: If any pricing column is missing
    """
    missing = missing_columns(df)
    if missing:
        raise ValueError(f"Rate matrix is missing required columns: {', '.join(missing)}")

    return df.cast({c: t for c, t in RATE_MATRIX_SCHEMA.items() if c in df.columns})


def rows_from_frame(df: pl.DataFrame) -> list[TariffRow]:
    """
    Convert a rate matrix DataFrame to TariffRow values, preserving row order.

    Null identity/lifecycle values fall back to TariffRow defaults.

    Raises:
        ValueError: If a pricing column is missing or holds nulls
    """
    df = coerce_rate_matrix(df)

    null_count = df.select(pl.any_horizontal(pl.col(PRICING_COLS).is_null()).sum()).item()
    if null_count:
        raise ValueError(
            f"{null_count} rate matrix row(s) have missing pricing values. "
            f"Run validate_rate_matrix() to see which fields."
        )

    fields = [c for c in df.columns if c in TariffRow._fields]
    return [
        TariffRow(**{k: v for k, v in record.items() if v is not None})
        for record in df.select(fields).iter_rows(named=True)
    ]


__all__ = [
    "coerce_rate_matrix",
    "rows_from_frame",
]
