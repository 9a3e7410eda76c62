#!/usr/bin/env python3
"""
Tests for vendor data reconciliation.
"""

import unittest
from decimal import Decimal

from tripquote.exceptions import ClarificationPendingError, ConversionRateRequiredError
from tripquote.matrix import RowMatrix, default_add_on_matrix
from tripquote.models import AddOnCategory, BlockConfig, Row, RowOption
from tripquote.reconciler import (
    NeedsClarification, NeedsConversionRate, Resolved, VendorDataReconciler, clarification_prompt,
)
from tripquote.vendor_data import VendorParsedPricing


def pricing(**overrides):
    payload = {
        "currency": "INR",
        "totalPax": 4,
        "unifiedLineItems": [
            {"description": "Adult (DBL Basis)", "quantity": 4,
             "costOption1": 5000, "costOption2": 6500, "costOption3": 8000},
        ],
        "addOns": [],
    }
    payload.update(overrides)
    return VendorParsedPricing.from_dict(payload)


class TestPropose(unittest.TestCase):
    """Test cases for the propose phase."""

    def setUp(self):
        self.reconciler = VendorDataReconciler(home_currency="INR")

    def test_questions_need_clarification(self):
        outcome = self.reconciler.propose(pricing(currency="USD", questions=["Which hotel is Option 2?"]))
        self.assertIsInstance(outcome, NeedsClarification)
        self.assertEqual(outcome.questions, ("Which hotel is Option 2?",))

    def test_foreign_currency_needs_rate(self):
        outcome = self.reconciler.propose(pricing(currency="THB"))
        self.assertIsInstance(outcome, NeedsConversionRate)
        self.assertEqual(outcome.currency, "THB")
        self.assertEqual(outcome.home_currency, "INR")

    def test_home_currency_is_resolved(self):
        data = pricing(currency="inr")
        outcome = self.reconciler.propose(data)
        self.assertIsInstance(outcome, Resolved)
        self.assertIs(outcome.data, data)


class TestApply(unittest.TestCase):
    """Test cases for the apply phase."""

    def setUp(self):
        self.reconciler = VendorDataReconciler(home_currency="INR")
        self.configs = (
            BlockConfig(passenger_count=2, markup_pct=8, gst_pct=5, tcs_pct=5),
            BlockConfig(passenger_count=2, markup_pct=10, gst_pct=5, tcs_pct=5),
            BlockConfig(passenger_count=2, markup_pct=12, gst_pct=5, tcs_pct=0),
        )
        self.rows = RowMatrix([
            Row(id=0, label="Old hotel", options=(RowOption(quantity=2, rate=100, multiplier=3),) * 3),
            Row(id=1, label="Old transfer", options=(RowOption(quantity=1, rate=50),) * 3),
        ])
        self.add_ons = default_add_on_matrix()

    def apply(self, data, rate=None):
        return self.reconciler.apply(data, self.rows, self.add_ons, self.configs, conversion_rate=rate)

    def test_conversion_rate_applies_to_all_options(self):
        data = pricing(currency="THB", unifiedLineItems=[
            {"description": "Hotel Phuket", "quantity": 2,
             "costOption1": 3000, "costOption2": 4000, "costOption3": 5500},
        ])
        result = self.apply(data, rate=2.5)

        for option in result.rows[0].options:
            self.assertEqual(option.multiplier, Decimal("2.5"))
            self.assertEqual(option.quantity, Decimal("2"))
        self.assertEqual([o.rate for o in result.rows[0].options],
                         [Decimal("3000"), Decimal("4000"), Decimal("5500")])

    def test_foreign_currency_without_rate_is_refused(self):
        data = pricing(currency="USD")
        with self.assertRaises(ConversionRateRequiredError):
            self.apply(data)
        for bad_rate in (0, -1, "abc"):
            with self.subTest(rate=bad_rate), self.assertRaises(ConversionRateRequiredError):
                self.apply(data, rate=bad_rate)

    def test_home_currency_uses_unit_multiplier(self):
        result = self.apply(pricing())
        for option in result.rows[0].options:
            self.assertEqual(option.multiplier, 1)

    def test_restored_multipliers_are_used_verbatim(self):
        data = pricing(currency="THB", unifiedLineItems=[
            {"description": "Hotel", "quantity": 2, "costOption1": 3000, "costOption2": 4000,
             "costOption3": 5000, "multiplierOption1": 2.41, "multiplierOption3": 7},
        ])
        result = self.apply(data, rate=2.5)
        multipliers = [option.multiplier for option in result.rows[0].options]
        self.assertEqual(multipliers, [Decimal("2.41"), Decimal("2.5"), Decimal("7")])

    def test_extracted_configs_overwrite_all_blocks(self):
        data = pricing(extractedConfigs={"markupPct": 0, "gstPct": 5, "tcsPct": 0}, totalPax=6)
        result = self.apply(data)

        for config in result.configs:
            self.assertEqual(config.markup_pct, 0)
            self.assertEqual(config.gst_pct, 5)
            self.assertEqual(config.tcs_pct, 0)
            self.assertEqual(config.passenger_count, 6)

    def test_extracted_configs_keep_pax_when_missing(self):
        data = pricing(extractedConfigs={"markupPct": 15, "gstPct": 5, "tcsPct": 5}, totalPax=0)
        result = self.apply(data)
        self.assertEqual([c.passenger_count for c in result.configs], [2, 2, 2])

    def test_fresh_autofill_only_sets_pax(self):
        result = self.apply(pricing(totalPax=5))

        self.assertEqual([c.passenger_count for c in result.configs], [5, 5, 5])
        self.assertEqual([c.markup_pct for c in result.configs], [8, 10, 12])
        self.assertEqual([c.tcs_pct for c in result.configs], [5, 5, 0])

    def test_rows_overwritten_by_position(self):
        result = self.apply(pricing())

        self.assertEqual(result.rows.ids, [0, 1])
        self.assertEqual(result.rows[0].label, "Adult (DBL Basis)")
        self.assertEqual(result.rows[1].label, "Item 2")
        self.assertEqual(result.rows[1].options[0].rate, 0)

    def test_inputs_are_not_mutated(self):
        self.apply(pricing(totalPax=9, addOns=[{"type": "Flight", "costPerPax": 12000}]))

        self.assertEqual(self.rows[0].label, "Old hotel")
        self.assertEqual(self.configs[0].passenger_count, 2)
        self.assertEqual(self.add_ons[0].options[0].net_rate, 0)

    def test_add_ons_by_category(self):
        data = pricing(totalPax=3, addOns=[
            {"type": "Flight", "costPerPax": 18000},
            {"type": "Visa", "costPerPax": 2500},
            {"type": "Flight", "costPerPax": 22000},
            {"type": "Flight", "costPerPax": 30000},
            {"type": "Visa", "costPerPax": 2700},
            {"type": "Visa", "costPerPax": 9999},
        ])
        result = self.apply(data)

        self.assertEqual([row.options[2].net_rate for row in result.add_ons],
                         [Decimal("18000"), Decimal("22000"), Decimal("2500"), Decimal("2700")])
        for row in result.add_ons:
            for option in row.options:
                self.assertEqual(option.quantity, Decimal("3"))
                self.assertEqual(option.markup_per_unit, 0)

    def test_add_on_quantity_defaults_to_one_without_pax(self):
        data = pricing(totalPax=0, addOns=[{"type": "Visa", "costPerPax": 2500}])
        result = self.apply(data)
        self.assertEqual(result.add_ons[2].options[0].quantity, Decimal("1"))
        self.assertEqual(result.add_ons[2].category, AddOnCategory.VISA)

    def test_pending_questions_block_apply(self):
        with self.assertRaises(ClarificationPendingError) as ctx:
            self.apply(pricing(questions=["Per person or per room?"]))
        self.assertEqual(ctx.exception.questions, ("Per person or per room?",))

    def test_apply_is_deterministic(self):
        data = pricing(currency="THB", addOns=[{"type": "Flight", "costPerPax": 15000}])
        self.assertEqual(self.apply(data, rate=2.5), self.apply(data, rate=2.5))


class TestClarificationPrompt(unittest.TestCase):

    def test_includes_original_text_and_answer(self):
        prompt = clarification_prompt("Hotel A 4500 THB pp\n", " Rates are per person. ")
        self.assertIn("ORIGINAL DATA:\nHotel A 4500 THB pp", prompt)
        self.assertIn("USER CLARIFICATION TO YOUR PREVIOUS QUESTIONS:\nRates are per person.", prompt)


if __name__ == "__main__":
    unittest.main()
