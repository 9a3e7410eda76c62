"""
TripQuote

Three-option travel quotation calculator with vendor pricing reconciliation.
"""

__version__ = "1.0.0"

from .financial_calculator import CalculationEngine, CalculationResult, calculate_all_financials
from .matrix import AddOnMatrix, RowMatrix
from .models import AddOnCategory, AddOnOption, AddOnRow, BlockConfig, Row, RowCategory, RowOption
from .quotation import FinancialOption, commit_to_quotation, price_summary
from .reconciler import NeedsClarification, NeedsConversionRate, Resolved, VendorDataReconciler
from .tax_cascade import cascade
from .vendor_data import VendorParsedPricing
from .workspace import Workspace

__all__ = [
    "AddOnCategory",
    "AddOnMatrix",
    "AddOnOption",
    "AddOnRow",
    "BlockConfig",
    "CalculationEngine",
    "CalculationResult",
    "FinancialOption",
    "NeedsClarification",
    "NeedsConversionRate",
    "Resolved",
    "Row",
    "RowCategory",
    "RowMatrix",
    "RowOption",
    "VendorDataReconciler",
    "VendorParsedPricing",
    "Workspace",
    "calculate_all_financials",
    "cascade",
    "commit_to_quotation",
    "price_summary",
]
