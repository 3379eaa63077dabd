"""
Loaders Package

Database-backed rate matrix repository and saved quote persistence.
"""

from .database import (
    DatabaseRateMatrixRepository,
    save_shipping_quotes,
    select_shipping_quote,
    load_shipping_quotes,
    RATE_MATRIX_TABLE,
    QUOTES_TABLE,
)

__all__ = [
    "DatabaseRateMatrixRepository",
    "save_shipping_quotes",
    "select_shipping_quote",
    "load_shipping_quotes",
    "RATE_MATRIX_TABLE",
    "QUOTES_TABLE",
]
