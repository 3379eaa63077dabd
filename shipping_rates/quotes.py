"""
Shipping Quote Service

Ties a rate matrix repository to the calculator:

    request -> repository.fetch_candidate_rates -> calculate_cost per row
            -> breakdowns sorted by total_freight

An empty candidate list is a normal "no shipping options" outcome and returns
[]. A row whose band turns out not to cover the weight is skipped, not
clamped, and the channel's next row is tried. Repository failures propagate
to the caller.
"""

import logging
from datetime import date

from .calculate_costs import calculate_cost
from .compare import rank
from .data import MAX_WEIGHT_KG, RateMatrixRepository
from .models import CostBreakdown, RangeError


logger = logging.getLogger(__name__)


def check_request(
    weight_kg: float,
    warehouse_id: str,
    destination_country: str,
) -> None:
    """
    Validate quote request parameters.

    Raises:
        ValueError: If weight is not in (0, MAX_WEIGHT_KG] or an id is missing
    """
    if weight_kg is None or not weight_kg > 0:
        raise ValueError("Weight must be greater than 0")
    if not weight_kg <= MAX_WEIGHT_KG:
        raise ValueError(f"Weight exceeds maximum limit ({MAX_WEIGHT_KG}kg)")
    if not warehouse_id or not destination_country:
        raise ValueError("Warehouse and destination are required")


def first_per_channel(rows: list) -> list:
    """
    Keep the first row (or breakdown) for each channel, in input order.

    Bands are inclusive on both ends, so a weight on a shared boundary matches
    two rows of one channel. The repository's order decides which one wins.
    """
    seen = set()
    selected = []
    for row in rows:
        if row.channel_id in seen:
            continue
        seen.add(row.channel_id)
        selected.append(row)
    return selected


def calculate_quotes(
    weight_kg: float,
    warehouse_id: str,
    destination_country: str,
    repository: RateMatrixRepository,
    on_date: date | None = None,
) -> list[CostBreakdown]:
    """
    Quote every channel serving a warehouse and destination, cheapest first.

    Raises:
        ValueError: For invalid request parameters or mixed-currency candidates
    """
    check_request(weight_kg, warehouse_id, destination_country)

    rows = repository.fetch_candidate_rates(
        warehouse_id, destination_country, weight_kg, on_date=on_date
    )
    if not rows:
        logger.info(
            "No shipping options for %skg from %s to %s",
            weight_kg, warehouse_id, destination_country,
        )
        return []

    # First row per channel that covers the weight, in repository order
    quoted = {}
    for row in rows:
        if row.channel_id in quoted:
            continue
        try:
            quoted[row.channel_id] = calculate_cost(weight_kg, row)
        except RangeError as e:
            logger.warning("Skipping rate %s (%s): %s", row.rate_id, row.channel_name, e)

    return rank(list(quoted.values()), by="price")


def calculate_quote(
    weight_kg: float,
    warehouse_id: str,
    channel_id: str,
    destination_country: str,
    repository: RateMatrixRepository,
    on_date: date | None = None,
) -> CostBreakdown | None:
    """
    Quote a single channel from its first row covering the weight.
    None when no rate applies.

    Raises:
        ValueError: For invalid request parameters or a missing channel_id
    """
    check_request(weight_kg, warehouse_id, destination_country)
    if not channel_id:
        raise ValueError("Channel is required")

    rows = [
        row for row in repository.fetch_candidate_rates(
            warehouse_id, destination_country, weight_kg, on_date=on_date
        )
        if row.channel_id == channel_id
    ]
    for row in rows:
        try:
            return calculate_cost(weight_kg, row)
        except RangeError as e:
            logger.warning("Skipping rate %s (%s): %s", row.rate_id, row.channel_name, e)

    logger.warning(
        "No applicable rate found for: %skg, %s, %s, %s",
        weight_kg, warehouse_id, channel_id, destination_country,
    )
    return None


__all__ = [
    "check_request",
    "first_per_channel",
    "calculate_quotes",
    "calculate_quote",
]
