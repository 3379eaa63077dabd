"""
Rate Matrix and Shipping Quote Database Access

Pulls candidate tariff rows from the rate_matrix table and persists confirmed
shipping quotes to rfq_shipping_quotes.
"""

from datetime import date
from pathlib import Path

import polars as pl

from shared.database import execute_query, format_value, pull_data, push_data
from ...models import SavedShippingQuote, TariffRow
from ..frames import rows_from_frame


SQL_DIR = Path(__file__).parent / "sql"

RATE_MATRIX_TABLE = "sourcing.rate_matrix"
CHANNELS_TABLE = "sourcing.shipping_channels"
CARRIERS_TABLE = "sourcing.shipping_carriers"
QUOTES_TABLE = "sourcing.rfq_shipping_quotes"


# =============================================================================
# RATE MATRIX
# =============================================================================

class DatabaseRateMatrixRepository:
    """RateMatrixRepository backed by the rate_matrix table."""

    def __init__(
        self,
        rate_matrix_table: str = RATE_MATRIX_TABLE,
        channels_table: str = CHANNELS_TABLE,
        carriers_table: str = CARRIERS_TABLE,
    ):
        self.rate_matrix_table = rate_matrix_table
        self.channels_table = channels_table
        self.carriers_table = carriers_table

    def build_query(
        self,
        warehouse_id: str,
        destination_country: str,
        weight_kg: float,
        on_date: date,
    ) -> str:
        return (SQL_DIR / "candidate_rates.sql").read_text().format(
            rate_matrix_table=self.rate_matrix_table,
            channels_table=self.channels_table,
            carriers_table=self.carriers_table,
            warehouse_id=format_value(warehouse_id),
            destination_country=format_value(destination_country),
            weight_kg=format_value(float(weight_kg)),
            on_date=format_value(on_date),
        )

    def fetch_candidate_rates(
        self,
        warehouse_id: str,
        destination_country: str,
        weight_kg: float,
        on_date: date | None = None,
    ) -> list[TariffRow]:
        """
        Load candidate rows, most recently created first.

        Raises:
            RuntimeError: If the query fails
        """
        query = self.build_query(
            warehouse_id, destination_country, weight_kg, on_date or date.today()
        )
        df = pull_data(query)
        if df.is_empty():
            return []
        return rows_from_frame(df)


# =============================================================================
# SAVED QUOTES
# =============================================================================

def save_shipping_quotes(
    quotes: list[SavedShippingQuote],
    table_name: str = QUOTES_TABLE,
    verbose: bool = False
) -> int:
    """Append quotes to the saved quote table. Returns rows written."""
    if not quotes:
        return 0
    df = pl.DataFrame([q._asdict() for q in quotes])
    return push_data(df, table_name, verbose=verbose)


def select_shipping_quote(
    rfq_id: str,
    quote_id: str,
    table_name: str = QUOTES_TABLE
) -> None:
    """Mark one quote as the RFQ's selection, clearing any previous selection."""
    rfq = format_value(rfq_id)
    execute_query(
        f"UPDATE {table_name} SET is_selected = FALSE WHERE rfq_id = {rfq}",
        commit=False,
    )
    execute_query(
        f"UPDATE {table_name} SET is_selected = TRUE "
        f"WHERE id = {format_value(quote_id)} AND rfq_id = {rfq}"
    )


def load_shipping_quotes(rfq_id: str, table_name: str = QUOTES_TABLE) -> pl.DataFrame:
    """Saved quotes for an RFQ, cheapest first."""
    return pull_data(
        f"SELECT * FROM {table_name} "
        f"WHERE rfq_id = {format_value(rfq_id)} "
        f"ORDER BY total_freight ASC"
    )


__all__ = [
    "DatabaseRateMatrixRepository",
    "save_shipping_quotes",
    "select_shipping_quote",
    "load_shipping_quotes",
    "RATE_MATRIX_TABLE",
    "QUOTES_TABLE",
]
