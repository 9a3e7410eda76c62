#!/usr/bin/env python3
"""
Tests for the numeric helpers.
"""

import unittest
from decimal import Decimal

from tripquote.money import (
    format_currency, round_up_to_step, round_whole, safe_divide, to_count,
    to_decimal, to_json_number,
)


class TestToDecimal(unittest.TestCase):

    def test_coercion(self):
        cases = [
            (5, Decimal("5")),
            (0.1, Decimal("0.1")),
            ("1,250.50", Decimal("1250.50")),
            (" 42 ", Decimal("42")),
            ("₹1,000", Decimal("1000")),
            ("-3.5", Decimal("-3.5")),
            (Decimal("7.25"), Decimal("7.25")),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(to_decimal(value), expected)

    def test_malformed_values_use_default(self):
        for value in (None, "", "abc", True, float("nan"), float("inf"), [1], "1.2.3"):
            with self.subTest(value=value):
                self.assertEqual(to_decimal(value), 0)
        self.assertEqual(to_decimal("x", Decimal("1")), Decimal("1"))

    def test_to_count(self):
        self.assertEqual(to_count("3"), 3)
        self.assertEqual(to_count(2.5), 3)
        self.assertEqual(to_count(-4), 0)
        self.assertEqual(to_count(None), 0)


class TestRounding(unittest.TestCase):

    def test_round_up_to_step(self):
        self.assertEqual(round_up_to_step(Decimal("2425.5")), Decimal("2500"))
        self.assertEqual(round_up_to_step(Decimal("2400")), Decimal("2400"))
        self.assertEqual(round_up_to_step(Decimal("0.01")), Decimal("100"))
        self.assertEqual(round_up_to_step(Decimal("0")), 0)
        self.assertEqual(round_up_to_step(Decimal("1201"), 500), Decimal("1500"))

    def test_round_whole_half_up(self):
        self.assertEqual(round_whole(Decimal("27.5")), Decimal("28"))
        self.assertEqual(round_whole(Decimal("28.875")), Decimal("29"))
        self.assertEqual(round_whole(Decimal("10.49")), Decimal("10"))

    def test_safe_divide(self):
        self.assertEqual(safe_divide(Decimal("2500"), 2), Decimal("1250"))
        self.assertEqual(safe_divide(Decimal("2500"), 0), 0)

    def test_to_json_number(self):
        self.assertEqual(to_json_number(Decimal("2500.00")), 2500)
        self.assertIsInstance(to_json_number(Decimal("2500.00")), int)
        self.assertEqual(to_json_number(Decimal("57.75")), 57.75)


class TestFormatCurrency(unittest.TestCase):

    def test_formats(self):
        self.assertEqual(format_currency(Decimal("1234.5"), "INR"), "₹1,234.50")
        self.assertEqual(format_currency(Decimal("0"), "USD"), "$0.00")
        self.assertEqual(format_currency(Decimal("99.999"), "EUR"), "100.00 €")
        self.assertEqual(format_currency(Decimal("10"), "xyz"), "XYZ 10.00")


if __name__ == "__main__":
    unittest.main()
