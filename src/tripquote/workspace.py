"""
Quotation workspace: the calculator state of one quotation.

Holds the block configs, the row and add-on matrices and the vendor
pricing being worked on, drives the clarification / conversion flow
against an extraction callable, and reads and writes the snapshot the
surrounding application persists.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import settings
from .exceptions import (
    InvalidConfigurationError, ProcessingFailedError, ReconciliationError,
)
from .financial_calculator import CalculationEngine, CalculationResult
from .matrix import AddOnMatrix, RowMatrix, default_add_on_matrix, default_configs
from .models import (
    OPTION_COUNT, AddOnOption, AddOnRow, BlockConfig, Row, RowCategory, RowOption,
)
from .money import ONE, to_count, to_decimal, to_json_number
from .quotation import FinancialOption, commit_to_quotation
from .reconciler import (
    NeedsClarification, NeedsConversionRate, ProposeOutcome, ReconciledMatrix,
    Resolved, VendorDataReconciler, clarification_prompt,
)
from .vendor_data import VendorParsedPricing

logger = logging.getLogger(__name__)

# Snapshot column names of (quantity, rate, multiplier) for each option
ROW_COLUMNS = (("colC", "colD", "colF"), ("colL", "colM", "colO"), ("colU", "colV", "colX"))

Extractor = Callable[[str], Union[VendorParsedPricing, Mapping[str, Any]]]


class Workspace:
    """
    Calculator state of a single quotation.

    One workspace is edited by one actor at a time. Vendor pricing is
    applied all-or-nothing: the matrices are swapped only after the new
    ones have been fully built.
    """

    def __init__(self, configs: Optional[Sequence[BlockConfig]] = None,
                 rows: Optional[RowMatrix] = None,
                 add_ons: Optional[AddOnMatrix] = None,
                 vendor_text: str = "",
                 detected_currency: Optional[str] = None,
                 conversion_rate=ONE,
                 ai_parsed_data: Optional[VendorParsedPricing] = None,
                 engine: Optional[CalculationEngine] = None,
                 reconciler: Optional[VendorDataReconciler] = None):
        self.configs: Tuple[BlockConfig, ...] = tuple(configs) if configs is not None else default_configs()
        if len(self.configs) != OPTION_COUNT:
            raise InvalidConfigurationError(f"Expected {OPTION_COUNT} block configs, got {len(self.configs)}")
        self.rows = rows if rows is not None else RowMatrix()
        self.add_ons = add_ons if add_ons is not None else default_add_on_matrix()
        self.vendor_text = vendor_text
        self.detected_currency = detected_currency or settings.home_currency
        self.conversion_rate = to_decimal(conversion_rate, ONE)
        self.ai_parsed_data = ai_parsed_data
        self.pending_questions: Tuple[str, ...] = ()
        self.pending_conversion: Optional[NeedsConversionRate] = None
        self.engine = engine or CalculationEngine()
        self.reconciler = reconciler or VendorDataReconciler()

    # --- Editing ---

    def update_config(self, index: int, **changes) -> BlockConfig:
        configs = list(self.configs)
        configs[index] = replace(configs[index], **changes)
        self.configs = tuple(configs)
        return configs[index]

    def update_row(self, row: Row) -> None:
        self.rows = self.rows.replace(row)

    def add_row(self, label: str, options: Sequence[RowOption] = (),
                category: Optional[RowCategory] = None) -> Row:
        self.rows = self.rows.append(label, options, category)
        return self.rows[-1]

    def add_child_rows(self) -> None:
        self.rows = self.rows.add_child_rows()

    # --- Calculation ---

    def calculate(self) -> CalculationResult:
        return self.engine.calculate(self.rows, self.add_ons, self.configs)

    def commit(self) -> List[FinancialOption]:
        return commit_to_quotation(self.calculate(), self.configs)

    # --- Vendor pricing ---

    def process_vendor_text(self, extract: Extractor,
                            vendor_text: Optional[str] = None) -> ProposeOutcome:
        """Send the vendor text to ``extract`` and take in the result."""
        if vendor_text is not None:
            self.vendor_text = vendor_text
        if not self.vendor_text.strip():
            raise ReconciliationError("No vendor text to process")
        return self.receive(self._run_extractor(extract, self.vendor_text))

    def submit_clarification(self, extract: Extractor, answer: str) -> ProposeOutcome:
        """Resubmit the original vendor text together with the user's answer."""
        if not answer.strip():
            logger.warning("Empty clarification answer; still waiting")
            return NeedsClarification(questions=self.pending_questions)
        self.pending_questions = ()
        return self.receive(self._run_extractor(extract, clarification_prompt(self.vendor_text, answer)))

    def receive(self, data: Union[VendorParsedPricing, Mapping[str, Any]]) -> ProposeOutcome:
        """Take in extracted pricing; applies it at once when nothing is pending."""
        data = _as_pricing(data)
        outcome = self.reconciler.propose(data)

        if isinstance(outcome, NeedsClarification):
            self.pending_questions = outcome.questions
            return outcome

        self.pending_questions = ()
        self.ai_parsed_data = data
        self.detected_currency = data.currency
        self.pending_conversion = outcome if isinstance(outcome, NeedsConversionRate) else None

        if isinstance(outcome, Resolved):
            self._install(self.reconciler.apply(data, self.rows, self.add_ons, self.configs))
        return outcome

    def confirm_conversion(self, rate) -> ReconciledMatrix:
        """Apply the pricing waiting on a currency conversion rate."""
        if self.ai_parsed_data is None:
            raise ReconciliationError("No vendor pricing is waiting for a conversion rate")

        reconciled = self.reconciler.apply(self.ai_parsed_data, self.rows, self.add_ons,
                                           self.configs, conversion_rate=rate)
        self.conversion_rate = to_decimal(rate)
        self.pending_conversion = None
        self._install(reconciled)
        return reconciled

    @property
    def awaiting_conversion(self) -> bool:
        return self.pending_conversion is not None

    def _run_extractor(self, extract: Extractor, text: str) -> VendorParsedPricing:
        try:
            return _as_pricing(extract(text))
        except Exception as e:
            logger.error(f"Vendor data processing failed: {e}")
            raise ProcessingFailedError("Failed to process vendor data") from e

    def _install(self, reconciled: ReconciledMatrix) -> None:
        self.rows = reconciled.rows
        self.add_ons = reconciled.add_ons
        self.configs = reconciled.configs

    # --- Snapshot ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "configs": {
                f"block{i}": _config_to_dict(config) for i, config in enumerate(self.configs, start=1)
            },
            "rows": [_row_to_dict(row) for row in self.rows],
            "addOnRows": [_add_on_to_dict(row) for row in self.add_ons],
            "vendorText": self.vendor_text,
            "detectedCurrency": self.detected_currency,
            "conversionRate": to_json_number(self.conversion_rate),
            "aiParsedData": self.ai_parsed_data.to_dict() if self.ai_parsed_data else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **kwargs) -> "Workspace":
        configs_data = data.get("configs") or {}
        defaults = default_configs()
        configs = tuple(
            _config_from_dict(configs_data[f"block{i}"]) if isinstance(configs_data.get(f"block{i}"), Mapping)
            else defaults[i - 1]
            for i in range(1, OPTION_COUNT + 1)
        )
        add_on_rows = data.get("addOnRows")
        ai_parsed = data.get("aiParsedData")
        return cls(
            configs=configs,
            rows=RowMatrix(_row_from_dict(row) for row in data.get("rows") or []),
            add_ons=(AddOnMatrix(_add_on_from_dict(row) for row in add_on_rows)
                     if add_on_rows is not None else default_add_on_matrix()),
            vendor_text=str(data.get("vendorText") or ""),
            detected_currency=data.get("detectedCurrency"),
            conversion_rate=data.get("conversionRate", 1),
            ai_parsed_data=VendorParsedPricing.from_dict(ai_parsed) if isinstance(ai_parsed, Mapping) else None,
            **kwargs,
        )

    @classmethod
    def load(cls, path: Union[str, Path], **kwargs) -> "Workspace":
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f), **kwargs)

    def save(self, path: Union[str, Path]) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Workspace saved to: {path}")


def _as_pricing(data) -> VendorParsedPricing:
    if isinstance(data, VendorParsedPricing):
        return data
    if isinstance(data, Mapping):
        return VendorParsedPricing.from_dict(data)
    raise TypeError(f"Unexpected vendor pricing payload: {type(data).__name__}")


def _config_to_dict(config: BlockConfig) -> Dict[str, Any]:
    return {
        "pax": config.passenger_count,
        "markupPct": to_json_number(config.markup_pct),
        "gstPct": to_json_number(config.gst_pct),
        "tcsPct": to_json_number(config.tcs_pct),
    }


def _config_from_dict(data: Mapping[str, Any]) -> BlockConfig:
    return BlockConfig(
        passenger_count=to_count(data.get("pax")),
        markup_pct=data.get("markupPct"),
        gst_pct=data.get("gstPct"),
        tcs_pct=data.get("tcsPct"),
    )


def _row_to_dict(row: Row) -> Dict[str, Any]:
    result: Dict[str, Any] = {"id": row.id, "label": row.label}
    for option, (qty_key, rate_key, mult_key) in zip(row.options, ROW_COLUMNS):
        result[qty_key] = to_json_number(option.quantity)
        result[rate_key] = to_json_number(option.rate)
        result[mult_key] = to_json_number(option.multiplier)
    if row.category is not None:
        result["category"] = row.category.value
    return result


def _row_from_dict(data: Mapping[str, Any]) -> Row:
    category = data.get("category")
    return Row(
        id=int(data["id"]),
        label=data.get("label", ""),
        options=tuple(
            RowOption(quantity=data.get(qty_key), rate=data.get(rate_key), multiplier=data.get(mult_key))
            for qty_key, rate_key, mult_key in ROW_COLUMNS
        ),
        category=RowCategory(category) if category else None,
    )


def _add_on_to_dict(row: AddOnRow) -> Dict[str, Any]:
    result: Dict[str, Any] = {"id": row.id, "type": row.category.value}
    for i, option in enumerate(row.options, start=1):
        result[f"qty{i}"] = to_json_number(option.quantity)
        result[f"netRate{i}"] = to_json_number(option.net_rate)
        result[f"markupPerPax{i}"] = to_json_number(option.markup_per_unit)
    return result


def _add_on_from_dict(data: Mapping[str, Any]) -> AddOnRow:
    return AddOnRow(
        id=int(data["id"]),
        category=data.get("type"),
        options=tuple(
            AddOnOption(
                quantity=data.get(f"qty{i}"),
                net_rate=data.get(f"netRate{i}"),
                markup_per_unit=data.get(f"markupPerPax{i}"),
            )
            for i in range(1, OPTION_COUNT + 1)
        ),
    )
