"""
Rate Matrix Repositories

The calculator never reads storage itself. Callers hand it TariffRows fetched
through a RateMatrixRepository: active rows whose effective window covers the
quote date and whose weight band contains the requested weight, in the
source's natural order.
"""

from datetime import date
from typing import Protocol

import polars as pl

from shared.periods import in_effect
from ..models import TariffRow
from .frames import coerce_rate_matrix, rows_from_frame


class RateMatrixRepository(Protocol):
    """Read-only source of candidate tariff rows."""

    def fetch_candidate_rates(
        self,
        warehouse_id: str,
        destination_country: str,
        weight_kg: float,
        on_date: date | None = None,
    ) -> list[TariffRow]:
        ...


def candidate_filter(
    warehouse_id: str,
    destination_country: str,
    weight_kg: float,
    on_date: date,
) -> pl.Expr:
    """Polars expression selecting candidate rows (band bounds inclusive)."""
    return (
        (pl.col("warehouse_id") == warehouse_id) &
        (pl.col("destination_country") == destination_country) &
        pl.col("is_active") &
        in_effect(on_date) &
        (pl.col("weight_min_kg") <= weight_kg) &
        (pl.col("weight_max_kg") >= weight_kg)
    )


class FrameRateMatrixRepository:
    """
    In-memory repository over a rate matrix DataFrame.

    Rows without lifecycle columns are treated as active and always in effect.
    """

    def __init__(self, rates: pl.DataFrame):
        rates = coerce_rate_matrix(rates)

        if "is_active" not in rates.columns:
            rates = rates.with_columns(pl.lit(True).alias("is_active"))
        for col in ("effective_from", "effective_until"):
            if col not in rates.columns:
                rates = rates.with_columns(pl.lit(None, dtype=pl.Date).alias(col))

        self.rates = rates

    def candidate_frame(
        self,
        warehouse_id: str,
        destination_country: str,
        weight_kg: float,
        on_date: date | None = None,
    ) -> pl.DataFrame:
        """Candidate rows as a DataFrame, ready for calculate_costs()."""
        on_date = on_date or date.today()
        return self.rates.filter(
            candidate_filter(warehouse_id, destination_country, weight_kg, on_date)
        )

    def fetch_candidate_rates(
        self,
        warehouse_id: str,
        destination_country: str,
        weight_kg: float,
        on_date: date | None = None,
    ) -> list[TariffRow]:
        return rows_from_frame(
            self.candidate_frame(warehouse_id, destination_country, weight_kg, on_date)
        )


__all__ = [
    "RateMatrixRepository",
    "FrameRateMatrixRepository",
    "candidate_filter",
]
