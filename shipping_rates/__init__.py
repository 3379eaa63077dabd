"""
Shipping Rates

Tariff calculator for cross-border shipping quotes: (warehouse, destination,
weight) in, ranked cost breakdowns across carrier channels out.
"""

from .calculate_costs import calculate_cost, calculate_costs, to_breakdowns
from .compare import cheapest, fastest, rank
from .models import (
    CostBreakdown,
    RangeError,
    SavedShippingQuote,
    TariffRow,
    TariffRowDraft,
    WeightRange,
)
from .quotes import calculate_quote, calculate_quotes
from .ranges import find_overlapping_bands, overlaps
from .validation import validate_rate, validate_rate_matrix
from .version import VERSION

__all__ = [
    "calculate_cost",
    "calculate_costs",
    "to_breakdowns",
    "cheapest",
    "fastest",
    "rank",
    "CostBreakdown",
    "RangeError",
    "SavedShippingQuote",
    "TariffRow",
    "TariffRowDraft",
    "WeightRange",
    "calculate_quote",
    "calculate_quotes",
    "find_overlapping_bands",
    "overlaps",
    "validate_rate",
    "validate_rate_matrix",
    "VERSION",
]
