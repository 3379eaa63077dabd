"""
Rate Matrix Models

Value types shared by the calculator, validator, comparator and quote service.

    TariffRow         - one configured pricing rule (strict, all pricing fields set)
    TariffRowDraft    - the same fields, all optional (admin form drafts)
    CostBreakdown     - every quantity used to reach total_freight for one row
    WeightRange       - (min, max) band used by the overlap checker
    SavedShippingQuote - persisted record of a confirmed quote
"""

import json
from datetime import date, datetime
from typing import NamedTuple


class RangeError(ValueError):
    """Requested weight lies outside a tariff row's weight band."""


# =============================================================================
# TARIFF ROWS
# =============================================================================

class TariffRow(NamedTuple):
    """
    One rate matrix entry for a (warehouse, channel, destination, weight band).

    Identity fields are opaque to the calculator and only passed through.
    """

    # Weight band (inclusive on both ends)
    weight_min_kg: float
    weight_max_kg: float

    # Pricing
    first_weight_kg: float
    first_weight_fee: float
    additional_weight_step_kg: float
    additional_fee_per_step: float
    fuel_surcharge_percent: float
    remote_area_surcharge: float
    min_charge: float
    currency: str

    # Delivery estimate
    estimated_delivery_days_min: int
    estimated_delivery_days_max: int

    # Identity (pass-through)
    rate_id: str | None = None
    warehouse_id: str | None = None
    channel_id: str | None = None
    destination_country: str | None = None
    carrier_name: str = "Unknown Carrier"
    channel_name: str = "Unknown Channel"

    # Lifecycle
    is_active: bool = True
    effective_from: date | None = None
    effective_until: date | None = None

    @property
    def weight_range(self) -> "WeightRange":
        return WeightRange(self.weight_min_kg, self.weight_max_kg)


class TariffRowDraft(NamedTuple):
    """Partially filled tariff row, as entered in an admin form."""

    weight_min_kg: float | None = None
    weight_max_kg: float | None = None
    first_weight_kg: float | None = None
    first_weight_fee: float | None = None
    additional_weight_step_kg: float | None = None
    additional_fee_per_step: float | None = None
    fuel_surcharge_percent: float | None = None
    remote_area_surcharge: float | None = None
    min_charge: float | None = None
    currency: str | None = None
    estimated_delivery_days_min: int | None = None
    estimated_delivery_days_max: int | None = None

    @classmethod
    def from_dict(cls, values: dict) -> "TariffRowDraft":
        """Build a draft from a mapping, ignoring keys that are not draft fields."""
        return cls(**{k: v for k, v in values.items() if k in cls._fields})


class WeightRange(NamedTuple):
    min: float
    max: float


# =============================================================================
# COST BREAKDOWN
# =============================================================================

# Quantities persisted as calculation_details, in display order
DETAIL_FIELDS = (
    "weight_kg",
    "first_weight_kg",
    "first_weight_fee",
    "additional_weight_kg",
    "additional_steps",
    "additional_weight_step_kg",
    "additional_fee_per_step",
    "additional_fees",
    "base_freight",
    "fuel_surcharge_percent",
    "fuel_surcharge",
    "remote_surcharge",
    "subtotal",
    "min_charge",
    "total_freight",
    "currency",
)


class CostBreakdown(NamedTuple):
    """Shipping cost for one tariff row and one weight."""

    # Input
    weight_kg: float

    # First weight
    first_weight_kg: float
    first_weight_fee: float

    # Additional weight
    additional_weight_kg: float
    additional_steps: int
    additional_weight_step_kg: float
    additional_fee_per_step: float
    additional_fees: float

    # Freight and surcharges
    base_freight: float
    fuel_surcharge_percent: float
    fuel_surcharge: float
    remote_surcharge: float
    subtotal: float
    min_charge: float
    total_freight: float
    currency: str

    # Copied through from the row
    weight_min_kg: float
    weight_max_kg: float
    estimated_delivery_days_min: int
    estimated_delivery_days_max: int
    rate_id: str | None
    warehouse_id: str | None
    channel_id: str | None
    destination_country: str | None
    carrier_name: str
    channel_name: str

    calculator_version: str

    def details(self) -> dict:
        """Calculation quantities keyed by their persisted field names."""
        return {name: getattr(self, name) for name in DETAIL_FIELDS}

    def display_total(self) -> str:
        return f"{self.total_freight:.2f} {self.currency}"


# =============================================================================
# SAVED QUOTES
# =============================================================================

class SavedShippingQuote(NamedTuple):
    """A shipping quote confirmed for an RFQ (rfq_shipping_quotes row)."""

    rfq_id: str
    warehouse_id: str | None
    channel_id: str | None
    destination_country: str | None
    product_weight_kg: float
    base_freight: float
    fuel_surcharge: float
    remote_surcharge: float
    total_freight: float
    currency: str
    estimated_delivery_days_min: int
    estimated_delivery_days_max: int
    calculation_details: str
    is_selected: bool
    is_manual: bool
    calculated_at: datetime

    @classmethod
    def from_breakdown(
        cls,
        rfq_id: str,
        breakdown: CostBreakdown,
        is_selected: bool = False,
        is_manual: bool = False,
        calculated_at: datetime | None = None,
    ) -> "SavedShippingQuote":
        """Money fields are stored verbatim; rounding is a display concern."""
        return cls(
            rfq_id=rfq_id,
            warehouse_id=breakdown.warehouse_id,
            channel_id=breakdown.channel_id,
            destination_country=breakdown.destination_country,
            product_weight_kg=breakdown.weight_kg,
            base_freight=breakdown.base_freight,
            fuel_surcharge=breakdown.fuel_surcharge,
            remote_surcharge=breakdown.remote_surcharge,
            total_freight=breakdown.total_freight,
            currency=breakdown.currency,
            estimated_delivery_days_min=breakdown.estimated_delivery_days_min,
            estimated_delivery_days_max=breakdown.estimated_delivery_days_max,
            calculation_details=json.dumps(breakdown.details()),
            is_selected=is_selected,
            is_manual=is_manual,
            calculated_at=calculated_at or datetime.now(),
        )


__all__ = [
    "RangeError",
    "TariffRow",
    "TariffRowDraft",
    "WeightRange",
    "CostBreakdown",
    "DETAIL_FIELDS",
    "SavedShippingQuote",
]
