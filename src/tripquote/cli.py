#!/usr/bin/env python3
"""
TripQuote CLI
Prices a saved quotation workspace and lays extracted vendor pricing over it.
"""

import json
import logging
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .exceptions import QuoteEngineError
from .financial_calculator import CalculationResult
from .money import format_currency, to_json_number
from .quotation import OptionPriceSummary, price_summary
from .reconciler import NeedsClarification, NeedsConversionRate
from .vendor_data import VendorParsedPricing
from .workspace import Workspace

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()


def _blocks_to_json(result: CalculationResult) -> List[dict]:
    return [
        {
            "label": block.label,
            "subtotal": to_json_number(block.subtotal),
            "markupAmount": to_json_number(block.markup_amount),
            "amountWithMarkup": to_json_number(block.with_markup),
            "gstAmount": to_json_number(block.gst_amount),
            "amountWithGST": to_json_number(block.with_gst),
            "tcsAmount": to_json_number(block.tcs_amount),
            "landPackageTotal": to_json_number(block.land_package_total),
            "addOnsTotal": to_json_number(block.add_on_total),
            "grandTotal": to_json_number(block.grand_total),
            "roundedTotal": to_json_number(block.rounded_total),
            "perPerson": to_json_number(block.per_person),
            "childCosts": [entry.to_dict() for entry in block.child_costs],
        }
        for block in result.blocks
    ]


def _render_blocks(result: CalculationResult, currency: str) -> None:
    table = Table(title="Option Totals")
    table.add_column("", style="bold")
    for block in result.blocks:
        table.add_column(block.label, justify="right")

    lines = [
        ("Subtotal", "subtotal"),
        ("Markup", "markup_amount"),
        ("With markup", "with_markup"),
        ("GST", "gst_amount"),
        ("TCS", "tcs_amount"),
        ("Land package", "land_package_total"),
        ("Flights / visas", "add_on_total"),
        ("Grand total", "grand_total"),
        ("Rounded total", "rounded_total"),
        ("Per person", "per_person"),
    ]
    for title, attr in lines:
        table.add_row(title, *(format_currency(getattr(block, attr), currency) for block in result.blocks))
    console.print(table)

    for block in result.blocks:
        if not block.child_costs:
            continue
        child_table = Table(title=f"{block.label} - per child")
        for column in ("Row", "Base", "GST", "TCS", "Net"):
            child_table.add_column(column, justify="left" if column == "Row" else "right")
        for entry in block.child_costs:
            child_table.add_row(
                entry.label,
                format_currency(entry.base_cost, currency),
                format_currency(entry.gst_amount, currency),
                format_currency(entry.tcs_amount, currency),
                format_currency(entry.net_cost, currency),
            )
        console.print(child_table)


def _render_summary(summaries: List[OptionPriceSummary], currency: str) -> None:
    table = Table(title="Quotation Price List")
    for column in ("Option", "Per person", "GST", "TCS", "Net per person", "Flights / visas", "Net payable"):
        table.add_column(column, justify="left" if column == "Option" else "right")
    for summary in summaries:
        table.add_row(
            summary.label,
            format_currency(summary.per_person_cost, currency),
            format_currency(summary.gst_amount, currency),
            format_currency(summary.tcs_amount, currency),
            format_currency(summary.net_cost_per_person, currency),
            format_currency(summary.add_on_cost, currency),
            format_currency(summary.net_payable, currency),
        )
    console.print(table)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """TripQuote - three-option travel quotation calculator."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument('snapshot', type=click.Path())
def init(snapshot: str):
    """Write a fresh workspace snapshot with default settings."""
    Workspace().save(snapshot)
    click.echo(f"Workspace created: {snapshot}")


@cli.command()
@click.argument('snapshot', type=click.Path(exists=True))
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
def calculate(snapshot: str, as_json: bool):
    """Price all three options of a workspace snapshot."""
    workspace = Workspace.load(snapshot)
    result = workspace.calculate()

    if as_json:
        click.echo(json.dumps(_blocks_to_json(result), indent=2, ensure_ascii=False))
    else:
        _render_blocks(result, workspace.engine.currency)


@cli.command()
@click.argument('snapshot', type=click.Path(exists=True))
@click.argument('pricing', type=click.Path(exists=True))
@click.option('--rate', type=float, help='Conversion rate to the home currency')
@click.option('--output', '-o', type=click.Path(), help='Write the result here instead of SNAPSHOT')
def reconcile(snapshot: str, pricing: str, rate: Optional[float], output: Optional[str]):
    """Apply extracted vendor pricing (JSON) to a workspace snapshot."""
    workspace = Workspace.load(snapshot)
    with open(pricing, 'r', encoding='utf-8') as f:
        data = VendorParsedPricing.from_dict(json.load(f))

    try:
        outcome = workspace.receive(data)

        if isinstance(outcome, NeedsClarification):
            console.print(Panel(
                "\n".join(f"• {question}" for question in outcome.questions),
                title="Clarification needed",
                border_style="yellow",
            ))
            click.echo("Resubmit the vendor text with your answers for fresh pricing.", err=True)
            sys.exit(2)

        if isinstance(outcome, NeedsConversionRate):
            if rate is None:
                rate = click.prompt(
                    f"Pricing is in {outcome.currency}. Rate to convert 1 {outcome.currency} "
                    f"into {outcome.home_currency}",
                    type=float,
                )
            workspace.confirm_conversion(rate)

    except QuoteEngineError as e:
        click.echo(f"Error reconciling vendor pricing: {e}", err=True)
        raise click.Abort()

    workspace.save(output or snapshot)
    click.echo(f"Applied {len(data.line_items)} line items and {len(data.add_ons)} add-ons.")


@cli.command()
@click.argument('snapshot', type=click.Path(exists=True))
@click.option('--pax', type=int, help='Passenger count for net payable (default: Option 1 pax)')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
def summary(snapshot: str, pax: Optional[int], as_json: bool):
    """Commit the priced options and print the quotation price list."""
    workspace = Workspace.load(snapshot)
    if pax is None:
        pax = workspace.configs[0].passenger_count
    summaries = price_summary(workspace.commit(), pax)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2, ensure_ascii=False))
    else:
        _render_summary(summaries, workspace.engine.currency)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
