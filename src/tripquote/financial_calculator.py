#!/usr/bin/env python3
"""
Financial Calculator for Quotations
Prices the row and add-on matrices into three side-by-side options, each
with its own markup, GST and TCS cascade, rounding and per-person average.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .child_costs import ChildCostExtractor
from .config import settings
from .exceptions import InvalidConfigurationError
from .matrix import AddOnMatrix, RowMatrix
from .models import (
    OPTION_COUNT, OPTION_LABELS, AddOnOption, AddOnOptionTotals, AddOnRow,
    AddOnTotals, BlockConfig, BlockResult, ChildCostEntry, Row, RowOption,
    RowOptionTotals, RowTotals,
)
from .money import ZERO, percent, round_up_to_step
from .tax_cascade import cascade, per_person_average

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    rows: Tuple[RowTotals, ...]
    add_ons: Tuple[AddOnTotals, ...]
    blocks: Tuple[BlockResult, BlockResult, BlockResult]


class CalculationEngine:
    """
    Handles the option-by-option pricing of a quotation workspace.

    The engine holds no state between calls; the same inputs always give
    the same result.
    """

    def __init__(self, currency: Optional[str] = None,
                 addon_markup_tax_pct: Optional[Decimal] = None,
                 rounding_step: Optional[int] = None):
        self.currency = currency or settings.home_currency
        if addon_markup_tax_pct is None:
            addon_markup_tax_pct = settings.addon_markup_tax_pct
        self.addon_markup_tax_rate = percent(addon_markup_tax_pct)
        self.rounding_step = rounding_step or settings.rounding_step
        self.child_extractor = ChildCostExtractor(self.currency)

    def calculate(self, rows: RowMatrix, add_ons: AddOnMatrix,
                  configs: Sequence[BlockConfig]) -> CalculationResult:
        """
        Calculate all three option blocks.
        """
        if len(configs) != OPTION_COUNT:
            raise InvalidConfigurationError(
                f"Expected {OPTION_COUNT} block configs, got {len(configs)}"
            )

        row_totals = tuple(self.calculate_row(row) for row in rows)
        add_on_totals = tuple(self.calculate_add_on(row) for row in add_ons)

        blocks = []
        for index, config in enumerate(configs):
            subtotal = sum((totals.options[index].option_cost for totals in row_totals), ZERO)
            add_on_total = sum((totals.options[index].final_cost for totals in add_on_totals), ZERO)
            child_costs = self.child_extractor.extract(row_totals, index, config)
            blocks.append(self.calculate_block(index, subtotal, add_on_total, config, child_costs))

        return CalculationResult(rows=row_totals, add_ons=add_on_totals, blocks=tuple(blocks))

    def calculate_row(self, row: Row) -> RowTotals:
        return RowTotals(row=row, options=tuple(self._row_option(option) for option in row.options))

    def _row_option(self, option: RowOption) -> RowOptionTotals:
        line_total = option.quantity * option.rate
        # Multiplier is row-and-option specific (conversion, nights, ...)
        return RowOptionTotals(line_total=line_total, option_cost=line_total * option.multiplier)

    def calculate_add_on(self, row: AddOnRow) -> AddOnTotals:
        return AddOnTotals(row=row, options=tuple(self._add_on_option(option) for option in row.options))

    def _add_on_option(self, option: AddOnOption) -> AddOnOptionTotals:
        net_amount = option.quantity * option.net_rate
        total_markup = option.quantity * option.markup_per_unit
        # Reporting only: output tax assumed inside the markup, never cascaded
        gst_on_markup = total_markup * self.addon_markup_tax_rate
        return AddOnOptionTotals(
            net_amount=net_amount,
            total_markup=total_markup,
            gst_on_markup=gst_on_markup,
            net_margin=total_markup - gst_on_markup,
            final_cost=net_amount + total_markup,
        )

    def calculate_block(self, index: int, subtotal: Decimal, add_on_total: Decimal,
                        config: BlockConfig,
                        child_costs: Optional[List[ChildCostEntry]] = None) -> BlockResult:
        stack = cascade(subtotal, config, self.currency)

        grand_total = stack.net_total + add_on_total
        rounded_total = round_up_to_step(grand_total, self.rounding_step)
        per_person = per_person_average(rounded_total, config.passenger_count)

        logger.debug(f"{OPTION_LABELS[index]}: subtotal={subtotal}, land={stack.net_total}, "
                     f"add-ons={add_on_total}, rounded={rounded_total}")

        return BlockResult(
            label=OPTION_LABELS[index],
            subtotal=stack.subtotal,
            markup_amount=stack.markup_amount,
            with_markup=stack.with_markup,
            gst_amount=stack.gst_amount,
            with_gst=stack.with_gst,
            tcs_amount=stack.tcs_amount,
            land_package_total=stack.net_total,
            add_on_total=add_on_total,
            grand_total=grand_total,
            rounded_total=rounded_total,
            per_person=per_person,
            child_costs=list(child_costs or []),
        )


def calculate_all_financials(rows: RowMatrix, add_ons: AddOnMatrix,
                             configs: Sequence[BlockConfig]) -> CalculationResult:
    """
    Convenience function to price a workspace with default settings.
    """
    return CalculationEngine().calculate(rows, add_ons, configs)
