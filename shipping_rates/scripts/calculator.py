"""
Shipping Rate Calculator
========================

Interactive CLI tool to compare shipping options for a single shipment.

Usage:
    python -m shipping_rates.scripts.calculator
    python -m shipping_rates.scripts.calculator --rates path/to/rate_matrix.csv
"""

import argparse
from datetime import date

import polars as pl

from shipping_rates.calculate_costs import calculate_costs, to_breakdowns
from shipping_rates.compare import cheapest, fastest, rank
from shipping_rates.data import FrameRateMatrixRepository, load_rate_matrix
from shipping_rates.models import CostBreakdown
from shipping_rates.quotes import check_request, first_per_channel
from shipping_rates.validation import validate_rate_matrix
from shipping_rates.version import VERSION


def get_user_input(rates: pl.DataFrame) -> dict:
    """Prompt user for shipment details."""
    print("\n=== Shipping Rate Calculator ===")
    print(f"Version: {VERSION}\n")

    warehouses = sorted(rates["warehouse_id"].unique().to_list())
    print("Warehouses: " + ", ".join(warehouses))
    warehouse_id = input("Warehouse: ").strip()

    destinations = sorted(
        rates.filter(pl.col("warehouse_id") == warehouse_id)["destination_country"]
        .unique()
        .to_list()
    )
    print("Destinations: " + (", ".join(destinations) or "none configured"))
    destination_country = input("Destination country (ISO code): ").strip().upper()

    weight_kg = float(input("Weight (kg): "))

    date_input = input(f"Quote date (YYYY-MM-DD) [default: {date.today()}]: ").strip()
    on_date = date.fromisoformat(date_input) if date_input else date.today()

    return {
        "warehouse_id": warehouse_id,
        "destination_country": destination_country,
        "weight_kg": weight_kg,
        "on_date": on_date,
    }


def quote_shipment(repository: FrameRateMatrixRepository, shipment: dict) -> list[CostBreakdown]:
    """Run candidate rows through the calculator, one row per channel, cheapest first."""
    check_request(
        shipment["weight_kg"], shipment["warehouse_id"], shipment["destination_country"]
    )
    candidates = repository.candidate_frame(
        shipment["warehouse_id"],
        shipment["destination_country"],
        shipment["weight_kg"],
        on_date=shipment["on_date"],
    )
    breakdowns = to_breakdowns(calculate_costs(candidates, shipment["weight_kg"]))
    return rank(first_per_channel(breakdowns), by="price")


def print_results(breakdowns: list[CostBreakdown], shipment: dict) -> None:
    """Print ranked options and the breakdown of each."""
    print("\n" + "=" * 60)
    print("SHIPPING OPTIONS")
    print("=" * 60)
    print(
        f"\n{shipment['weight_kg']} kg from {shipment['warehouse_id']} "
        f"to {shipment['destination_country']} on {shipment['on_date']}"
    )

    if not breakdowns:
        print("\nNo shipping options available.")
        print()
        return

    best = cheapest(breakdowns)
    quickest = fastest(breakdowns)

    for n, b in enumerate(breakdowns, start=1):
        tags = []
        if b is best:
            tags.append("cheapest")
        if b is quickest:
            tags.append("fastest")
        tag_text = f"  [{', '.join(tags)}]" if tags else ""

        print(f"\n{n}. {b.carrier_name} - {b.channel_name}{tag_text}")
        print(f"   Delivery: {b.estimated_delivery_days_min}-{b.estimated_delivery_days_max} days")
        print(f"   First weight ({b.first_weight_kg} kg):  {b.first_weight_fee:>9.2f}")
        if b.additional_steps > 0:
            print(
                f"   Additional {b.additional_steps} x {b.additional_weight_step_kg} kg:"
                f"  {b.additional_fees:>9.2f}"
            )
        print(f"   Base freight:           {b.base_freight:>9.2f}")
        if b.fuel_surcharge > 0:
            print(f"   Fuel surcharge ({b.fuel_surcharge_percent}%): {b.fuel_surcharge:>9.2f}")
        if b.remote_surcharge > 0:
            print(f"   Remote area:            {b.remote_surcharge:>9.2f}")
        print(f"   Subtotal:               {b.subtotal:>9.2f}")
        if b.total_freight > b.subtotal:
            print(f"   Minimum charge applied: {b.min_charge:>9.2f}")
        print(f"   TOTAL:                  {b.display_total()}")
    print()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Compare shipping options for one shipment")
    parser.add_argument("--rates", help="Rate matrix CSV (defaults to the bundled reference matrix)")
    args = parser.parse_args()

    try:
        rates = load_rate_matrix(args.rates)

        errors = validate_rate_matrix(rates)
        if errors:
            print(f"\nWarning: rate matrix has {len(errors)} problem(s):")
            for error in errors:
                print(f"  {error}")

        shipment = get_user_input(rates)
        breakdowns = quote_shipment(FrameRateMatrixRepository(rates), shipment)
        print_results(breakdowns, shipment)

    except KeyboardInterrupt:
        print("\n\nCancelled.")
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
