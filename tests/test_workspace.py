#!/usr/bin/env python3
"""
Tests for the quotation workspace: vendor pricing flow and snapshots.
"""

import os
import tempfile
import unittest
from decimal import Decimal

from tripquote.exceptions import (
    ConversionRateRequiredError, InvalidConfigurationError, ProcessingFailedError,
    ReconciliationError,
)
from tripquote.financial_calculator import CalculationEngine
from tripquote.models import BlockConfig, RowCategory, RowOption
from tripquote.reconciler import NeedsClarification, NeedsConversionRate, Resolved, VendorDataReconciler
from tripquote.workspace import Workspace

THB_PRICING = {
    "currency": "THB",
    "totalPax": 2,
    "unifiedLineItems": [
        {"description": "Hotel Phuket (3N)", "quantity": 2,
         "costOption1": 3000, "costOption2": 4000, "costOption3": 5500},
    ],
    "addOns": [{"type": "Flight", "costPerPax": 18000}],
}

INR_PRICING = {
    "currency": "INR",
    "totalPax": 3,
    "unifiedLineItems": [
        {"description": "Adult (TPL sharing)", "quantity": 3,
         "costOption1": 20000, "costOption2": 25000, "costOption3": 30000},
    ],
    "addOns": [],
}


def make_workspace():
    configs = (
        BlockConfig(passenger_count=2, markup_pct=10, gst_pct=5, tcs_pct=5),
        BlockConfig(passenger_count=2, markup_pct=10, gst_pct=5, tcs_pct=5),
        BlockConfig(passenger_count=2, markup_pct=10, gst_pct=5, tcs_pct=5),
    )
    workspace = Workspace(
        configs=configs,
        engine=CalculationEngine(currency="INR", addon_markup_tax_pct=18, rounding_step=100),
        reconciler=VendorDataReconciler(home_currency="INR"),
    )
    workspace.add_row("Existing hotel", [RowOption(quantity=2, rate=1000)] * 3)
    return workspace


class TestEditing(unittest.TestCase):

    def test_add_rows_and_configs(self):
        workspace = make_workspace()
        workspace.update_config(1, markup_pct=15)
        workspace.add_child_rows()

        self.assertEqual(workspace.configs[1].markup_pct, Decimal("15"))
        self.assertEqual(workspace.configs[0].markup_pct, Decimal("10"))
        self.assertEqual(workspace.rows.ids, [0, 1, 2])
        self.assertEqual(workspace.rows[2].category, RowCategory.CHILD_NO_BED)

    def test_calculate_and_commit(self):
        workspace = make_workspace()
        result = workspace.calculate()

        self.assertEqual(result.blocks[0].land_package_total, Decimal("2425.5"))
        self.assertEqual(result.blocks[0].rounded_total, Decimal("2500"))
        self.assertEqual([o.label for o in workspace.commit()], ["Option 1", "Option 2", "Option 3"])

    def test_wrong_number_of_configs(self):
        with self.assertRaises(InvalidConfigurationError):
            Workspace(configs=[BlockConfig()])


class TestVendorPricingFlow(unittest.TestCase):

    def test_home_currency_applied_at_once(self):
        workspace = make_workspace()
        outcome = workspace.receive(INR_PRICING)

        self.assertIsInstance(outcome, Resolved)
        self.assertFalse(workspace.awaiting_conversion)
        self.assertEqual(workspace.rows[0].label, "Adult (TPL sharing)")
        self.assertEqual(workspace.rows.ids, [0])
        self.assertEqual([c.passenger_count for c in workspace.configs], [3, 3, 3])

    def test_foreign_currency_waits_for_rate(self):
        workspace = make_workspace()
        outcome = workspace.receive(THB_PRICING)

        self.assertIsInstance(outcome, NeedsConversionRate)
        self.assertTrue(workspace.awaiting_conversion)
        self.assertEqual(workspace.detected_currency, "THB")
        self.assertEqual(workspace.rows[0].label, "Existing hotel")

        workspace.confirm_conversion(2.5)

        self.assertFalse(workspace.awaiting_conversion)
        self.assertEqual(workspace.conversion_rate, Decimal("2.5"))
        self.assertEqual(workspace.rows[0].label, "Hotel Phuket (3N)")
        for option in workspace.rows[0].options:
            self.assertEqual(option.multiplier, Decimal("2.5"))
        self.assertEqual(workspace.add_ons[0].options[0].net_rate, Decimal("18000"))
        # 2 x 3000 x 2.5
        self.assertEqual(workspace.calculate().blocks[0].subtotal, Decimal("15000"))

    def test_bad_rate_changes_nothing(self):
        workspace = make_workspace()
        workspace.receive(THB_PRICING)
        rows = workspace.rows

        with self.assertRaises(ConversionRateRequiredError):
            workspace.confirm_conversion(0)
        self.assertIs(workspace.rows, rows)
        self.assertTrue(workspace.awaiting_conversion)

    def test_confirm_without_pricing(self):
        with self.assertRaises(ReconciliationError):
            make_workspace().confirm_conversion(2.5)

    def test_clarification_round_trip(self):
        workspace = make_workspace()
        prompts = []

        def extract(text):
            prompts.append(text)
            if len(prompts) == 1:
                return {"currency": "INR", "questions": ["Is the hotel rate per room or per person?"]}
            return INR_PRICING

        outcome = workspace.process_vendor_text(extract, "Hotel 20000 / 25000 / 30000")

        self.assertIsInstance(outcome, NeedsClarification)
        self.assertEqual(workspace.pending_questions, ("Is the hotel rate per room or per person?",))
        self.assertEqual(workspace.rows[0].label, "Existing hotel")
        self.assertIsNone(workspace.ai_parsed_data)

        blank = workspace.submit_clarification(extract, "   ")
        self.assertIsInstance(blank, NeedsClarification)
        self.assertEqual(len(prompts), 1)

        outcome = workspace.submit_clarification(extract, "Per person")

        self.assertIsInstance(outcome, Resolved)
        self.assertEqual(workspace.pending_questions, ())
        self.assertIn("ORIGINAL DATA:\nHotel 20000 / 25000 / 30000", prompts[1])
        self.assertIn("Per person", prompts[1])
        self.assertEqual(workspace.rows[0].label, "Adult (TPL sharing)")

    def test_extraction_failure_changes_nothing(self):
        workspace = make_workspace()

        def extract(text):
            raise ConnectionError("service unavailable")

        with self.assertRaises(ProcessingFailedError):
            workspace.process_vendor_text(extract, "Hotel 1000")
        self.assertEqual(workspace.rows[0].label, "Existing hotel")
        self.assertIsNone(workspace.ai_parsed_data)

    def test_empty_vendor_text(self):
        with self.assertRaises(ReconciliationError):
            make_workspace().process_vendor_text(lambda text: INR_PRICING, "  ")


class TestSnapshot(unittest.TestCase):

    def test_dict_round_trip(self):
        workspace = make_workspace()
        workspace.add_child_rows()
        workspace.receive(THB_PRICING)
        workspace.confirm_conversion(2.5)
        workspace.vendor_text = "Hotel Phuket 3000 THB"

        data = workspace.to_dict()
        restored = Workspace.from_dict(data)

        self.assertEqual(restored.to_dict(), data)
        self.assertEqual(restored.rows, workspace.rows)
        self.assertEqual(data["rows"][0]["colX"], 2.5)
        self.assertEqual(data["configs"]["block1"]["pax"], 2)
        self.assertEqual(data["aiParsedData"]["currency"], "THB")

    def test_missing_fields_use_defaults(self):
        workspace = Workspace.from_dict({"rows": [{"id": 4, "label": "Transfers", "colC": "2", "colD": "750"}]})

        self.assertEqual(len(workspace.configs), 3)
        self.assertEqual(len(workspace.add_ons), 4)
        self.assertEqual(workspace.rows[0].options[0].quantity, Decimal("2"))
        self.assertEqual(workspace.rows[0].options[0].multiplier, Decimal("1"))
        self.assertIsNone(workspace.ai_parsed_data)

    def test_save_and_load(self):
        workspace = make_workspace()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "quote.json")
            workspace.save(path)
            loaded = Workspace.load(path)

        self.assertEqual(loaded.to_dict(), workspace.to_dict())


if __name__ == "__main__":
    unittest.main()
