"""
Markup / GST / TCS cascade.

Each stage is charged on the output of the previous one: GST on cost plus
markup, TCS on cost plus markup plus GST. The order changes the invoice
amount and must stay fixed.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from prices import Money, TaxedMoney, flat_tax

from .config import settings
from .models import BlockConfig
from .money import ZERO, percent, safe_divide, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeResult:
    subtotal: Decimal
    markup_amount: Decimal
    with_markup: Decimal
    gst_amount: Decimal
    with_gst: Decimal
    tcs_amount: Decimal
    net_total: Decimal
    currency: str

    @property
    def land(self) -> TaxedMoney:
        """Land amount as taxed money: net of GST/TCS vs. fully taxed."""
        return TaxedMoney(
            net=Money(self.with_markup, self.currency),
            gross=Money(self.net_total, self.currency),
        )


def cascade(subtotal, config: BlockConfig, currency: Optional[str] = None) -> CascadeResult:
    """Apply markup, then GST, then TCS to ``subtotal``."""
    currency = currency or settings.home_currency
    base = Money(to_decimal(subtotal), currency)

    marked_up = flat_tax(base, percent(config.markup_pct))
    with_gst = flat_tax(marked_up.gross, percent(config.gst_pct))
    with_tcs = flat_tax(with_gst.gross, percent(config.tcs_pct))

    return CascadeResult(
        subtotal=base.amount,
        markup_amount=marked_up.tax.amount,
        with_markup=marked_up.gross.amount,
        gst_amount=with_gst.tax.amount,
        with_gst=with_gst.gross.amount,
        tcs_amount=with_tcs.tax.amount,
        net_total=with_tcs.gross.amount,
        currency=currency,
    )


def per_person_average(rounded_total: Decimal, passenger_count: int) -> Decimal:
    """Average per passenger; zero when there are no passengers."""
    if passenger_count <= 0:
        return ZERO
    return safe_divide(rounded_total, passenger_count)
