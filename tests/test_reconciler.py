"""
Unit tests for duplicate charge detection.
"""
import unittest
from datetime import date

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis.profile import VendorProfile
from parsers.base_parser import Transaction
from reconciler.duplicate_checker import DuplicateChargeFinder


def make_profile(key, charges):
    """Build a profile directly from (date, amount) pairs."""
    transactions = [Transaction(date=d, raw_description=key.upper(), amount=a) for d, a in charges]
    dates = [d for d, _ in charges]
    amounts = [a for _, a in charges]
    return VendorProfile(
        canonical_key=key,
        name=key.upper(),
        display_name=key.title(),
        first_seen=min(dates),
        last_seen=max(dates),
        total_amount=sum(amounts),
        transaction_count=len(amounts),
        min_amount=min(amounts),
        max_amount=max(amounts),
        transactions=transactions,
    )


class TestDuplicateChargeFinder(unittest.TestCase):
    """Tests for DuplicateChargeFinder."""

    def setUp(self):
        self.finder = DuplicateChargeFinder()

    def test_same_day_same_amount(self):
        profile = make_profile("corner cafe", [
            (date(2024, 3, 1), 4.50),
            (date(2024, 3, 1), 4.50),
            (date(2024, 3, 1), 4.50),
            (date(2024, 3, 2), 4.50),
        ])
        duplicates = self.finder.find([profile])

        self.assertEqual(len(duplicates), 1)
        self.assertEqual(duplicates[0].vendor, "Corner Cafe")
        self.assertEqual(duplicates[0].count, 3)
        self.assertEqual(duplicates[0].date, date(2024, 3, 1))
        self.assertEqual(duplicates[0].extra_amount, 9.00)

    def test_different_amounts_not_duplicates(self):
        profile = make_profile("corner cafe", [
            (date(2024, 3, 1), 4.50),
            (date(2024, 3, 1), 5.25),
        ])
        self.assertEqual(self.finder.find([profile]), [])

    def test_different_vendors_not_duplicates(self):
        first = make_profile("corner cafe", [(date(2024, 3, 1), 4.50)])
        second = make_profile("bagel barn", [(date(2024, 3, 1), 4.50)])
        self.assertEqual(self.finder.find([first, second]), [])

    def test_sorted_by_date(self):
        later = make_profile("corner cafe", [(date(2024, 3, 5), 4.50)] * 2)
        earlier = make_profile("bagel barn", [(date(2024, 3, 1), 3.00)] * 2)
        duplicates = self.finder.find([later, earlier])
        self.assertEqual([d.canonical_key for d in duplicates], ["bagel barn", "corner cafe"])

    def test_summary(self):
        profile = make_profile("corner cafe", [(date(2024, 3, 1), 4.50)] * 2)
        summary = self.finder.get_summary(self.finder.find([profile]))
        self.assertEqual(summary['duplicate_groups'], 1)
        self.assertEqual(summary['duplicate_transactions'], 1)
        self.assertEqual(summary['potential_overcharge'], 4.50)
        self.assertEqual(summary['status'], "FAIL - Review Required")

        self.assertEqual(self.finder.get_summary([])['status'], "PASS")


if __name__ == '__main__':
    unittest.main()
