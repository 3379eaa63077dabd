"""
Quote Comparison

Select and rank cost breakdowns across channels. Ties keep the order the
breakdowns were given in (the data source's natural order). No currency
conversion is ever done: ranking by price is only defined among breakdowns
in a single currency.
"""

from typing import Literal

from .models import CostBreakdown


def _check_single_currency(breakdowns: list[CostBreakdown]) -> None:
    currencies = {b.currency for b in breakdowns}
    if len(currencies) > 1:
        raise ValueError(
            f"Cannot compare prices across currencies: {', '.join(sorted(currencies))}"
        )


def cheapest(breakdowns: list[CostBreakdown]) -> CostBreakdown | None:
    """
    Lowest total_freight, first seen on ties. None for no options.

    Raises:
        ValueError: If breakdowns are in more than one currency
    """
    if not breakdowns:
        return None
    _check_single_currency(breakdowns)
    # min() returns the first minimal element
    return min(breakdowns, key=lambda b: b.total_freight)


def fastest(breakdowns: list[CostBreakdown]) -> CostBreakdown | None:
    """Lowest estimated_delivery_days_min, first seen on ties. None for no options."""
    if not breakdowns:
        return None
    return min(breakdowns, key=lambda b: b.estimated_delivery_days_min)


def rank(
    breakdowns: list[CostBreakdown],
    by: Literal["price", "speed"] = "price"
) -> list[CostBreakdown]:
    """
    Stable sort by total_freight ("price") or estimated_delivery_days_min ("speed").

    Raises:
        ValueError: For an unknown sort key, or mixed currencies when by="price"
    """
    if by == "price":
        _check_single_currency(breakdowns)
        return sorted(breakdowns, key=lambda b: b.total_freight)
    if by == "speed":
        return sorted(breakdowns, key=lambda b: b.estimated_delivery_days_min)
    raise ValueError(f"by must be 'price' or 'speed', got '{by}'")


__all__ = [
    "cheapest",
    "fastest",
    "rank",
]
