"""
Data models for the quotation calculator.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from .money import ONE, ZERO, to_count, to_decimal, to_json_number

OPTION_COUNT = 3
OPTION_LABELS = ("Option 1", "Option 2", "Option 3")

_CHILD_MARKERS = ('child', 'cwb', 'cnb')
_NO_BED_MARKERS = ('cnb', 'no bed', 'without bed')


class RowCategory(str, Enum):
    STANDARD = "Standard"
    CHILD_WITH_BED = "ChildWithBed"
    CHILD_NO_BED = "ChildNoBed"

    @property
    def is_child(self) -> bool:
        return self is not RowCategory.STANDARD

    @classmethod
    def from_label(cls, label: str) -> "RowCategory":
        """Classify a free-text row label (Child / CWB / CNB)."""
        label = (label or '').lower()
        if not any(marker in label for marker in _CHILD_MARKERS):
            return cls.STANDARD
        if any(marker in label for marker in _NO_BED_MARKERS):
            return cls.CHILD_NO_BED
        return cls.CHILD_WITH_BED


class AddOnCategory(str, Enum):
    FLIGHT = "Flight"
    VISA = "Visa"

    @classmethod
    def parse(cls, value) -> Optional["AddOnCategory"]:
        if isinstance(value, cls):
            return value
        text = str(value or '').strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None


@dataclass
class BlockConfig:
    """Per-option pricing configuration."""
    passenger_count: int = 2
    markup_pct: Decimal = ZERO
    gst_pct: Decimal = Decimal("5")
    tcs_pct: Decimal = Decimal("5")

    def __post_init__(self):
        self.passenger_count = to_count(self.passenger_count)
        self.markup_pct = to_decimal(self.markup_pct)
        self.gst_pct = to_decimal(self.gst_pct)
        self.tcs_pct = to_decimal(self.tcs_pct)


@dataclass
class RowOption:
    """Quantity, rate and multiplier of one row in one option."""
    quantity: Decimal = ZERO
    rate: Decimal = ZERO
    multiplier: Decimal = ONE

    def __post_init__(self):
        self.quantity = to_decimal(self.quantity)
        self.rate = to_decimal(self.rate)
        self.multiplier = to_decimal(self.multiplier, ONE)


def _three(options, factory) -> tuple:
    options = tuple(options or ())[:OPTION_COUNT]
    return options + tuple(factory() for _ in range(OPTION_COUNT - len(options)))


@dataclass
class Row:
    """
    One cost line item, priced side by side in all three options.

    ``category`` is an explicit tag; when it is None the category is derived
    from the label.
    """
    id: int
    label: str
    options: Tuple[RowOption, RowOption, RowOption] = ()
    category: Optional[RowCategory] = None

    def __post_init__(self):
        self.label = str(self.label or "")
        self.options = _three(self.options, RowOption)
        if self.category is not None:
            self.category = RowCategory(self.category)

    @property
    def effective_category(self) -> RowCategory:
        if self.category is not None:
            return self.category
        return RowCategory.from_label(self.label)

    @classmethod
    def blank(cls, row_id: int, label: str, category: Optional[RowCategory] = None) -> "Row":
        return cls(id=row_id, label=label, category=category)


@dataclass
class AddOnOption:
    """Quantity, net rate and per-unit markup of one add-on in one option."""
    quantity: Decimal = ZERO
    net_rate: Decimal = ZERO
    markup_per_unit: Decimal = ZERO

    def __post_init__(self):
        self.quantity = to_decimal(self.quantity)
        self.net_rate = to_decimal(self.net_rate)
        self.markup_per_unit = to_decimal(self.markup_per_unit)


@dataclass
class AddOnRow:
    """Ancillary cost item (flight or visa)."""
    id: int
    category: AddOnCategory
    options: Tuple[AddOnOption, AddOnOption, AddOnOption] = ()

    def __post_init__(self):
        self.category = AddOnCategory(self.category)
        self.options = _three(self.options, AddOnOption)


# Derived values -- recomputed on every calculation, never persisted

@dataclass(frozen=True)
class RowOptionTotals:
    line_total: Decimal
    option_cost: Decimal


@dataclass(frozen=True)
class RowTotals:
    row: Row
    options: Tuple[RowOptionTotals, ...]


@dataclass(frozen=True)
class AddOnOptionTotals:
    net_amount: Decimal
    total_markup: Decimal
    gst_on_markup: Decimal
    net_margin: Decimal
    final_cost: Decimal


@dataclass(frozen=True)
class AddOnTotals:
    row: AddOnRow
    options: Tuple[AddOnOptionTotals, ...]


@dataclass(frozen=True)
class ChildCostEntry:
    """Per-child cost of one child-priced row."""
    label: str
    base_cost: Decimal
    gst_amount: Decimal
    tcs_amount: Decimal
    net_cost: Decimal

    def to_dict(self):
        return {
            "label": self.label,
            "landBaseCost": to_json_number(self.base_cost),
            "landGST": to_json_number(self.gst_amount),
            "landTCS": to_json_number(self.tcs_amount),
            "netCost": to_json_number(self.net_cost),
        }

    @classmethod
    def from_dict(cls, data) -> "ChildCostEntry":
        return cls(
            label=str(data.get("label", "")),
            base_cost=to_decimal(data.get("landBaseCost")),
            gst_amount=to_decimal(data.get("landGST")),
            tcs_amount=to_decimal(data.get("landTCS")),
            net_cost=to_decimal(data.get("netCost")),
        )


@dataclass(frozen=True)
class BlockResult:
    """Totals for one pricing option."""
    label: str
    subtotal: Decimal
    markup_amount: Decimal
    with_markup: Decimal
    gst_amount: Decimal
    with_gst: Decimal
    tcs_amount: Decimal
    land_package_total: Decimal
    add_on_total: Decimal
    grand_total: Decimal
    rounded_total: Decimal
    per_person: Decimal
    child_costs: List[ChildCostEntry] = field(default_factory=list)
