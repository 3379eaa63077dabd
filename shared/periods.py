"""
Effective Periods

Helpers for configuration rows that are only valid inside a date window.
"""

from datetime import date

import polars as pl


def in_effect(
    on_date: date,
    from_col: str = "effective_from",
    until_col: str = "effective_until"
) -> pl.Expr:
    """
    Check if a row's effective window covers a date.

    Both ends are inclusive. A null start means "always started", a null
    end means open-ended.

    Args:
        on_date: Date to test against
        from_col: Column holding the window start
        until_col: Column holding the window end

    Returns:
        Polars expression evaluating to True if the row is in effect
    """
    started = pl.col(from_col).is_null() | (pl.col(from_col) <= on_date)
    not_ended = pl.col(until_col).is_null() | (pl.col(until_col) >= on_date)
    return started & not_ended


__all__ = [
    "in_effect",
]
