"""
Child cost extraction.

Rows tagged as child pricing (explicitly, or by a "Child" / "CWB" / "CNB"
label) are re-run through the tax cascade on their own and reported as a
per-child cost next to the block average.
"""

import logging
from typing import Iterable, List, Optional

from .models import BlockConfig, ChildCostEntry, RowTotals
from .money import ONE, round_whole
from .tax_cascade import cascade

logger = logging.getLogger(__name__)


def is_child_row(totals: RowTotals, option_index: int) -> bool:
    """Child-priced in this option: child category and a positive cost."""
    if not totals.row.effective_category.is_child:
        return False
    return totals.options[option_index].option_cost > 0


class ChildCostExtractor:
    """
    Derives per-child costs for one option.

    Each stage of the row's own cascade is rounded to whole currency units
    (half up) and then divided by the row quantity for that option.
    """

    def __init__(self, currency: Optional[str] = None):
        self.currency = currency

    def extract(self, rows: Iterable[RowTotals], option_index: int,
                config: BlockConfig) -> List[ChildCostEntry]:
        entries = []
        for totals in rows:
            if not is_child_row(totals, option_index):
                continue

            option_cost = totals.options[option_index].option_cost
            stack = cascade(option_cost, config, self.currency)

            quantity = totals.row.options[option_index].quantity or ONE
            entries.append(ChildCostEntry(
                label=totals.row.label,
                base_cost=round_whole(stack.with_markup) / quantity,
                gst_amount=round_whole(stack.gst_amount) / quantity,
                tcs_amount=round_whole(stack.tcs_amount) / quantity,
                net_cost=round_whole(stack.net_total) / quantity,
            ))
            logger.debug(f"Child cost for '{totals.row.label}' (option {option_index + 1}): "
                         f"{entries[-1].net_cost} per child")
        return entries


def extract_child_costs(rows: Iterable[RowTotals], option_index: int,
                        config: BlockConfig) -> List[ChildCostEntry]:
    """
    Convenience function to extract child costs for one option.
    """
    return ChildCostExtractor().extract(rows, option_index, config)
