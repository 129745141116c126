"""
Unit tests for configuration and custom rules.
"""
import os
import sys
import tempfile
import unittest
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis.analyzer import SpendingAnalyzer
from config import get_config, load_rules_file
from parsers.base_parser import Transaction
from unmasker.processors import build_processor_rule
from unmasker.report import generate_obscured_vendor_report
from unmasker.unmasker import VendorUnmasker


class TestConfig(unittest.TestCase):
    """Tests for the Config singleton."""

    def test_singleton(self):
        self.assertIs(get_config(), get_config())

    def test_defaults_and_overrides(self):
        config = get_config()
        self.assertEqual(config.get("missing_key", "fallback"), "fallback")
        config.set("forecast_days", 45)
        try:
            self.assertEqual(config.get("forecast_days"), 45)
        finally:
            config.reload()

    def test_load_rules_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("custom_vendors:\n  ACMECO: Acme Corporation\n")
            path = f.name
        try:
            rules = load_rules_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(rules, {'custom_vendors': {'ACMECO': 'Acme Corporation'}})

    def test_load_rules_file_missing(self):
        self.assertEqual(load_rules_file("/nonexistent/custom_rules.yaml"), {})

    def test_load_rules_file_invalid_yaml(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("custom_vendors: [unclosed\n")
            path = f.name
        try:
            with self.assertLogs('config', level='WARNING'):
                rules = load_rules_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(rules, {})

    def test_review_threshold_setting(self):
        config = get_config()
        self.assertFalse(VendorUnmasker(custom_rules={}).unmask("PAYPAL *GRUBHUB").needs_manual_review)

        config.set("review_confidence_threshold", 0.95)
        try:
            result = VendorUnmasker(custom_rules={}).unmask("PAYPAL *GRUBHUB")
        finally:
            config.reload()
        self.assertTrue(result.needs_manual_review)
        self.assertEqual(result.confidence, 0.9)

    def test_max_review_items_setting(self):
        unmasker = VendorUnmasker(custom_rules={})
        results = [unmasker.unmask("SQ *%d" % (1000000 + i)) for i in range(5)]

        config = get_config()
        config.set("max_review_items", 3)
        try:
            report = generate_obscured_vendor_report(results)
        finally:
            config.reload()
        self.assertEqual(len(report.needing_review), 3)
        self.assertEqual(len(generate_obscured_vendor_report(results, max_review_items=2).needing_review), 2)


class TestCustomRules(unittest.TestCase):
    """Tests for custom vendor and processor rules."""

    def test_custom_processor_and_vendor(self):
        unmasker = VendorUnmasker(custom_rules={
            'custom_vendors': {'acmeco': 'Acme Corporation'},
            'custom_processors': [{
                'name': 'PayNow',
                'patterns': [r'^PNW\*'],
                'method': 'delimiter',
                'confidence': 0.9,
            }],
        })
        result = unmasker.unmask("PNW*ACMECO")
        self.assertEqual(result.matched_processor, "PayNow")
        self.assertEqual(result.extracted_vendor, "Acme Corporation")
        self.assertEqual(result.confidence, 0.9)

    def test_custom_processor_takes_precedence(self):
        unmasker = VendorUnmasker(custom_rules={
            'custom_processors': [{'name': 'MyWallet', 'patterns': ['^PAYPAL']}],
        })
        self.assertEqual(unmasker.unmask("PAYPAL *GRUBHUB").matched_processor, "MyWallet")

    def test_custom_category_hints(self):
        unmasker = VendorUnmasker(custom_rules={'category_hints': {'Pets': ['petco']}})
        result = unmasker.unmask("PETCO ANIMAL SUPPLIES")
        self.assertEqual(result.inferred_category, "Pets")

    def test_rules_from_path(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(
                "custom_processors:\n"
                "  - name: PayNow\n"
                "    patterns: ['^PNW\\*']\n"
                "    method: regex\n"
                "    capture: 'PNW\\*(.+)'\n"
                "    confidence: 0.85\n"
            )
            path = f.name
        try:
            unmasker = VendorUnmasker(custom_rules_path=path)
        finally:
            os.unlink(path)

        result = unmasker.unmask("PNW*BLUE BOTTLE")
        self.assertEqual(result.matched_processor, "PayNow")
        self.assertEqual(result.extraction_method, "regex")
        self.assertEqual(result.extracted_vendor, "Blue Bottle")

    def test_subscription_keywords_from_rules_path(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("subscription_keywords:\n  - zorblax\n")
            path = f.name
        try:
            unmasker = VendorUnmasker(custom_rules_path=path)
        finally:
            os.unlink(path)

        self.assertEqual(unmasker.custom_rules, {'subscription_keywords': ['zorblax']})
        analysis = SpendingAnalyzer(unmasker=unmasker).analyze([
            Transaction(date=date(2024, 1, 5), raw_description="ZORBLAX CLOUD", amount=9.00),
        ])
        self.assertTrue(analysis.profiles["zorblax cloud"].subscription_flag)

    def test_invalid_processor_rules_skipped(self):
        with self.assertLogs('unmasker.processors', level='WARNING'):
            self.assertIsNone(build_processor_rule({'name': 'Bad', 'patterns': ['([']}))
        with self.assertLogs('unmasker.processors', level='WARNING'):
            self.assertIsNone(build_processor_rule({'name': 'NoPatterns'}))
        with self.assertLogs('unmasker.processors', level='WARNING'):
            self.assertIsNone(build_processor_rule({
                'name': 'NoCapture', 'patterns': ['^X'], 'method': 'regex',
            }))
        with self.assertLogs('unmasker.processors', level='WARNING'):
            self.assertIsNone(build_processor_rule({
                'name': 'BadNumber', 'patterns': ['^X'], 'confidence': 'high',
            }))

    def test_lookup_processor(self):
        rule = build_processor_rule({'name': 'Wallet', 'patterns': ['^WLT '], 'method': 'lookup'})
        unmasker = VendorUnmasker(custom_rules={})
        unmasker.processor_rules.insert(0, rule)
        result = unmasker.unmask("WLT 0042", extended_details="order via doordash")
        self.assertEqual(result.matched_processor, "Wallet")
        self.assertEqual(result.extracted_vendor, "DoorDash Food Delivery")


if __name__ == '__main__':
    unittest.main()
