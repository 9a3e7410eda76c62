"""
Turns calculated blocks into the price list shown on a quotation.

The adult figure is an average: the whole block divided by the total
passenger count, children included. Child figures are per child and come
from their own rows. The two are not additive and no adult-only rate is
derived here.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from .financial_calculator import CalculationResult
from .models import OPTION_LABELS, BlockConfig, ChildCostEntry
from .money import ZERO, round_whole, to_decimal, to_json_number

logger = logging.getLogger(__name__)


@dataclass
class FinancialOption:
    """Per-person price of one option, as committed to the quotation."""
    label: str
    land_base_cost: Decimal = ZERO
    land_gst: Decimal = ZERO
    land_tcs: Decimal = ZERO
    add_on_cost: Decimal = ZERO
    child_costs: List[ChildCostEntry] = field(default_factory=list)
    # Exact per-person net read back from a restored document
    extracted_net_cost: Optional[Decimal] = None

    @property
    def net_cost_per_person(self) -> Decimal:
        if self.extracted_net_cost:
            return self.extracted_net_cost
        return self.land_base_cost + self.land_gst + self.land_tcs

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "label": self.label,
            "landBaseCost": to_json_number(self.land_base_cost),
            "landGST": to_json_number(self.land_gst),
            "landTCS": to_json_number(self.land_tcs),
            "addOnCost": to_json_number(self.add_on_cost),
            "childCosts": [entry.to_dict() for entry in self.child_costs],
        }
        if self.extracted_net_cost is not None:
            result["extractedNetCost"] = to_json_number(self.extracted_net_cost)
        return result

    @classmethod
    def from_dict(cls, data) -> "FinancialOption":
        extracted = data.get("extractedNetCost")
        return cls(
            label=str(data.get("label", "")),
            land_base_cost=to_decimal(data.get("landBaseCost")),
            land_gst=to_decimal(data.get("landGST")),
            land_tcs=to_decimal(data.get("landTCS")),
            add_on_cost=to_decimal(data.get("addOnCost")),
            child_costs=[ChildCostEntry.from_dict(entry) for entry in data.get("childCosts") or []],
            extracted_net_cost=to_decimal(extracted) if extracted is not None else None,
        )


@dataclass(frozen=True)
class OptionPriceSummary:
    label: str
    per_person_cost: Decimal
    gst_amount: Decimal
    tcs_amount: Decimal
    net_cost_per_person: Decimal
    add_on_cost: Decimal
    net_payable: Decimal
    child_costs: List[ChildCostEntry]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "perPersonCost": to_json_number(self.per_person_cost),
            "gstAmount": to_json_number(self.gst_amount),
            "tcsAmount": to_json_number(self.tcs_amount),
            "netCostPerPerson": to_json_number(self.net_cost_per_person),
            "addOnCost": to_json_number(self.add_on_cost),
            "netPayable": to_json_number(self.net_payable),
            "childCosts": [entry.to_dict() for entry in self.child_costs],
        }


def commit_to_quotation(result: CalculationResult,
                        configs: Sequence[BlockConfig]) -> List[FinancialOption]:
    """
    Average each priced option per passenger.

    Options with a zero grand total are left out; if none is priced a
    single empty "Option 1" is returned.
    """
    options = []
    for block, config in zip(result.blocks, configs):
        if block.grand_total == 0:
            continue
        pax = config.passenger_count or 1
        options.append(FinancialOption(
            label=block.label,
            land_base_cost=block.with_markup / pax,
            land_gst=block.gst_amount / pax,
            land_tcs=block.tcs_amount / pax,
            add_on_cost=block.add_on_total / pax,
            child_costs=list(block.child_costs),
        ))

    if not options:
        logger.info("No priced options; committing an empty Option 1")
        options.append(FinancialOption(label=OPTION_LABELS[0]))

    return options


def price_summary(options: Sequence[FinancialOption], pax_count: int) -> List[OptionPriceSummary]:
    """Per-option figures handed to document and spreadsheet generators."""
    summaries = []
    for option in options:
        net_cost = option.net_cost_per_person
        summaries.append(OptionPriceSummary(
            label=option.label,
            per_person_cost=round_whole(option.land_base_cost),
            gst_amount=round_whole(option.land_gst),
            tcs_amount=round_whole(option.land_tcs),
            net_cost_per_person=round_whole(net_cost),
            add_on_cost=round_whole(option.add_on_cost),
            net_payable=round_whole((net_cost + option.add_on_cost) * pax_count),
            child_costs=list(option.child_costs),
        ))
    return summaries
