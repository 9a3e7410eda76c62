"""
Vendor pricing as handed over by the extraction service.

The payload is loosely typed JSON; ``VendorParsedPricing.from_dict`` reads it
leniently and ``to_dict`` writes it back in the same camelCase shape so it
can be stored in a workspace snapshot.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import OPTION_COUNT, AddOnCategory
from .money import ONE, to_count, to_decimal, to_json_number

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True)
class VendorLineItem:
    description: str
    quantity: Decimal
    costs: Tuple[Decimal, Decimal, Decimal]
    # None where the extraction gave no multiplier for that option
    multipliers: Tuple[Optional[Decimal], Optional[Decimal], Optional[Decimal]] = (None, None, None)

    @property
    def has_multipliers(self) -> bool:
        return any(m is not None for m in self.multipliers)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VendorLineItem":
        costs = tuple(to_decimal(data.get(f"costOption{i}")) for i in range(1, OPTION_COUNT + 1))
        multipliers = tuple(
            to_decimal(data[key], ONE) if data.get(key) is not None else None
            for key in (f"multiplierOption{i}" for i in range(1, OPTION_COUNT + 1))
        )
        return cls(
            description=str(data.get("description") or "").strip(),
            quantity=to_decimal(data.get("quantity")),
            costs=costs,
            multipliers=multipliers,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "description": self.description,
            "quantity": to_json_number(self.quantity),
        }
        for i, cost in enumerate(self.costs, start=1):
            result[f"costOption{i}"] = to_json_number(cost)
        for i, multiplier in enumerate(self.multipliers, start=1):
            if multiplier is not None:
                result[f"multiplierOption{i}"] = to_json_number(multiplier)
        return result


@dataclass(frozen=True)
class VendorAddOn:
    category: AddOnCategory
    cost_per_pax: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.category.value, "costPerPax": to_json_number(self.cost_per_pax)}


@dataclass(frozen=True)
class ExtractedConfigs:
    """Markup / tax percentages read back from a previously issued sheet."""
    markup_pct: Decimal
    gst_pct: Decimal
    tcs_pct: Decimal

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractedConfigs":
        return cls(
            markup_pct=to_decimal(data.get("markupPct")),
            gst_pct=to_decimal(data.get("gstPct")),
            tcs_pct=to_decimal(data.get("tcsPct")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "markupPct": to_json_number(self.markup_pct),
            "gstPct": to_json_number(self.gst_pct),
            "tcsPct": to_json_number(self.tcs_pct),
        }


@dataclass(frozen=True)
class VendorParsedPricing:
    currency: str = DEFAULT_CURRENCY
    total_pax: int = 0
    line_items: Tuple[VendorLineItem, ...] = ()
    add_ons: Tuple[VendorAddOn, ...] = ()
    extracted_configs: Optional[ExtractedConfigs] = None
    questions: Tuple[str, ...] = ()

    @property
    def needs_clarification(self) -> bool:
        return bool(self.questions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VendorParsedPricing":
        """Read the extraction payload; malformed values fall back to defaults."""
        currency = str(data.get("currency") or DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY

        line_items = tuple(
            VendorLineItem.from_dict(item)
            for item in _as_list(data.get("unifiedLineItems"))
            if isinstance(item, Mapping)
        )

        add_ons = []
        for item in _as_list(data.get("addOns")):
            if not isinstance(item, Mapping):
                continue
            category = AddOnCategory.parse(item.get("type"))
            if category is None:
                logger.warning(f"Ignoring add-on of unknown type: {item.get('type')!r}")
                continue
            add_ons.append(VendorAddOn(category=category, cost_per_pax=to_decimal(item.get("costPerPax"))))

        configs = data.get("extractedConfigs")
        extracted_configs = ExtractedConfigs.from_dict(configs) if isinstance(configs, Mapping) else None

        questions = tuple(
            str(question).strip()
            for question in _as_list(data.get("questions"))
            if str(question or "").strip()
        )

        return cls(
            currency=currency,
            total_pax=to_count(data.get("totalPax")),
            line_items=line_items,
            add_ons=tuple(add_ons),
            extracted_configs=extracted_configs,
            questions=questions,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "currency": self.currency,
            "totalPax": self.total_pax,
            "unifiedLineItems": [item.to_dict() for item in self.line_items],
            "addOns": [add_on.to_dict() for add_on in self.add_ons],
        }
        if self.questions:
            result["questions"] = list(self.questions)
        if self.extracted_configs is not None:
            result["extractedConfigs"] = self.extracted_configs.to_dict()
        return result


def _as_list(value) -> List:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []
