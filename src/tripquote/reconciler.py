"""
Vendor data reconciliation.

Maps extracted vendor pricing back onto the row matrix, the add-on matrix
and the block configs. The flow has two phases:

    propose(data)  -> NeedsClarification | NeedsConversionRate | Resolved
    apply(data, ...) -> ReconciledMatrix

``propose`` never changes anything. A ``NeedsClarification`` outcome means
the caller has to collect an answer and send the original text plus the
answer (see ``clarification_prompt``) back to the extraction service for
fresh pricing. ``apply`` builds new matrices and returns them; the inputs
are left untouched.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from .config import settings
from .exceptions import ClarificationPendingError, ConversionRateRequiredError
from .matrix import AddOnMatrix, LineItemUpdate, RowMatrix
from .models import BlockConfig, RowOption
from .money import ONE, to_decimal
from .vendor_data import VendorParsedPricing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolved:
    data: VendorParsedPricing


@dataclass(frozen=True)
class NeedsClarification:
    questions: Tuple[str, ...]


@dataclass(frozen=True)
class NeedsConversionRate:
    data: VendorParsedPricing
    currency: str
    home_currency: str


ProposeOutcome = Union[Resolved, NeedsClarification, NeedsConversionRate]


@dataclass(frozen=True)
class ReconciledMatrix:
    rows: RowMatrix
    add_ons: AddOnMatrix
    configs: Tuple[BlockConfig, BlockConfig, BlockConfig]


class VendorDataReconciler:
    """Deterministically lays vendor pricing over a quotation workspace."""

    def __init__(self, home_currency: Optional[str] = None):
        self.home_currency = (home_currency or settings.home_currency).upper()

    def requires_conversion(self, data: VendorParsedPricing) -> bool:
        return data.currency.upper() != self.home_currency

    def propose(self, data: VendorParsedPricing) -> ProposeOutcome:
        if data.needs_clarification:
            logger.info(f"Vendor pricing needs clarification: {len(data.questions)} question(s)")
            return NeedsClarification(questions=data.questions)

        if self.requires_conversion(data):
            logger.info(f"Vendor pricing is in {data.currency}; waiting for a conversion rate")
            return NeedsConversionRate(data=data, currency=data.currency,
                                       home_currency=self.home_currency)

        return Resolved(data=data)

    def resolve_rate(self, data: VendorParsedPricing, conversion_rate=None) -> Decimal:
        """The rate applied to items without their own multipliers."""
        if not self.requires_conversion(data):
            return ONE

        rate = to_decimal(conversion_rate)
        if conversion_rate is None or rate <= 0:
            raise ConversionRateRequiredError(data.currency, self.home_currency)
        return rate

    def reconcile_configs(self, data: VendorParsedPricing,
                          configs: Sequence[BlockConfig]) -> Tuple[BlockConfig, ...]:
        extracted = data.extracted_configs

        if extracted is not None:
            # Restoring a previous sheet: all options share its percentages
            logger.info(f"Restoring configs: markup={extracted.markup_pct}%, "
                        f"GST={extracted.gst_pct}%, TCS={extracted.tcs_pct}%")
            return tuple(
                replace(config,
                        markup_pct=extracted.markup_pct,
                        gst_pct=extracted.gst_pct,
                        tcs_pct=extracted.tcs_pct,
                        passenger_count=data.total_pax or config.passenger_count)
                for config in configs
            )

        if data.total_pax > 0:
            return tuple(replace(config, passenger_count=data.total_pax) for config in configs)

        return tuple(configs)

    def line_item_updates(self, data: VendorParsedPricing, rate: Decimal) -> List[LineItemUpdate]:
        updates = []
        for item in data.line_items:
            options = tuple(
                RowOption(
                    quantity=item.quantity,
                    rate=cost,
                    multiplier=multiplier if multiplier is not None else rate,
                )
                for cost, multiplier in zip(item.costs, item.multipliers)
            )
            updates.append((item.description, options))
        return updates

    def apply(self, data: VendorParsedPricing, rows: RowMatrix, add_ons: AddOnMatrix,
              configs: Sequence[BlockConfig], conversion_rate=None) -> ReconciledMatrix:
        """
        Build the reconciled matrices.

        Raises ClarificationPendingError if ``data`` still carries questions
        and ConversionRateRequiredError for foreign-currency pricing without
        a positive ``conversion_rate``. Nothing is built in either case.
        """
        if data.needs_clarification:
            raise ClarificationPendingError(data.questions)

        rate = self.resolve_rate(data, conversion_rate)
        new_configs = self.reconcile_configs(data, configs)
        new_rows = rows.merge_line_items(self.line_item_updates(data, rate))

        quantity = Decimal(data.total_pax or 1)
        new_add_ons = add_ons.merge_add_ons(
            [(add_on.category, add_on.cost_per_pax) for add_on in data.add_ons],
            quantity,
        )

        logger.info(f"Applied vendor pricing: {len(data.line_items)} line items, "
                    f"{len(data.add_ons)} add-ons, rate {rate}")
        return ReconciledMatrix(rows=new_rows, add_ons=new_add_ons, configs=new_configs)


def clarification_prompt(original_text: str, answer: str) -> str:
    """Text to resubmit to the extraction service after a clarification."""
    return (
        "ORIGINAL DATA:\n"
        f"{original_text.strip()}\n\n"
        "USER CLARIFICATION TO YOUR PREVIOUS QUESTIONS:\n"
        f"{answer.strip()}\n"
    )
