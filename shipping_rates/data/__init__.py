"""
Rate Matrix Data

Reference data, repositories and loaders for tariff rows.

Structure:
    - reference/: Static reference data (sample rate matrix, limits)
    - loaders/: Database-backed repository and saved quote persistence
"""

import polars as pl
from pathlib import Path

from .columns import RATE_MATRIX_SCHEMA
from .frames import coerce_rate_matrix, rows_from_frame
from .repository import RateMatrixRepository, FrameRateMatrixRepository, candidate_filter
from .reference.limits import MAX_WEIGHT_KG, CACHE_TTL_SECONDS, CACHE_MAX_ENTRIES

# Re-export loaders for convenience
from .loaders import (
    DatabaseRateMatrixRepository,
    save_shipping_quotes,
    select_shipping_quote,
    load_shipping_quotes,
)


REFERENCE_DIR = Path(__file__).parent / "reference"


def load_rate_matrix(path: Path | str | None = None) -> pl.DataFrame:
    """
    Load a rate matrix CSV (the bundled reference matrix by default).

    Returns:
        DataFrame with the columns in RATE_MATRIX_SCHEMA that the file has,
        in file order
    """
    path = Path(path) if path is not None else REFERENCE_DIR / "rate_matrix.csv"
    return coerce_rate_matrix(
        pl.read_csv(path, schema_overrides=RATE_MATRIX_SCHEMA)
    )


__all__ = [
    # Reference data
    "load_rate_matrix",
    "REFERENCE_DIR",
    "RATE_MATRIX_SCHEMA",
    # Frames
    "coerce_rate_matrix",
    "rows_from_frame",
    # Repositories
    "RateMatrixRepository",
    "FrameRateMatrixRepository",
    "DatabaseRateMatrixRepository",
    "candidate_filter",
    # Saved quotes
    "save_shipping_quotes",
    "select_shipping_quote",
    "load_shipping_quotes",
    # Limits
    "MAX_WEIGHT_KG",
    "CACHE_TTL_SECONDS",
    "CACHE_MAX_ENTRIES",
]
