#!/usr/bin/env python3
"""
Example usage of TripQuote
Demonstrates pricing a quotation and applying vendor pricing to it.
"""

import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tripquote import NeedsClarification, NeedsConversionRate, RowOption, Workspace, price_summary


def create_sample_vendor_pricing():
    """Pricing as an extraction service would return it for a Thailand package."""
    return {
        "currency": "THB",
        "totalPax": 3,
        "unifiedLineItems": [
            {"description": "Hotel Phuket 3N (DBL)", "quantity": 2,
             "costOption1": 9000, "costOption2": 12600, "costOption3": 18900},
            {"description": "Child No Bed", "quantity": 1,
             "costOption1": 2400, "costOption2": 2400, "costOption3": 3000},
            {"description": "Transfers and Phi Phi tour (SIC)", "quantity": 3,
             "costOption1": 2200, "costOption2": 2200, "costOption3": 2200},
        ],
        "addOns": [
            {"type": "Flight", "costPerPax": 18500},
            {"type": "Visa", "costPerPax": 0},
        ],
    }


def print_blocks(workspace):
    result = workspace.calculate()
    for block in result.blocks:
        print(f"{block.label}: subtotal {block.subtotal:.2f}, land {block.land_package_total:.2f}, "
              f"grand {block.grand_total:.2f}, rounded {block.rounded_total}, "
              f"per person {block.per_person:.2f}")
        for entry in block.child_costs:
            print(f"    {entry.label}: {entry.net_cost} per child")


def demonstrate_manual_quotation():
    """Price a quotation entered by hand."""
    print("=" * 60)
    print("DEMONSTRATION: Manual Quotation")
    print("=" * 60)

    workspace = Workspace()
    for index, markup in enumerate((8, 10, 12)):
        workspace.update_config(index, markup_pct=markup)

    workspace.add_row("Adult (DBL sharing)", [
        RowOption(quantity=2, rate=25000),
        RowOption(quantity=2, rate=32000),
        RowOption(quantity=2, rate=41000),
    ])
    workspace.add_child_rows()

    print_blocks(workspace)
    return workspace


def demonstrate_vendor_pricing():
    """Apply foreign-currency vendor pricing and print the price list."""
    print("\n" + "=" * 60)
    print("DEMONSTRATION: Vendor Pricing")
    print("=" * 60)

    workspace = Workspace()
    outcome = workspace.receive(create_sample_vendor_pricing())

    if isinstance(outcome, NeedsClarification):
        for question in outcome.questions:
            print(f"Question: {question}")
        return

    if isinstance(outcome, NeedsConversionRate):
        print(f"Pricing is in {outcome.currency}; converting at 2.45 {outcome.home_currency}")
        workspace.confirm_conversion(2.45)

    print_blocks(workspace)

    summaries = price_summary(workspace.commit(), workspace.configs[0].passenger_count)
    print("\nPrice list:")
    print(json.dumps([summary.to_dict() for summary in summaries], indent=2))

    output_file = "sample_workspace.json"
    workspace.save(output_file)
    print(f"\nWorkspace saved to: {output_file}")


def main():
    """Run all demonstrations."""
    demonstrate_manual_quotation()
    demonstrate_vendor_pricing()


if __name__ == "__main__":
    main()
