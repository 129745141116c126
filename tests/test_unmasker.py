"""
Unit tests for vendor unmasking.
"""
import re
import unittest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from unmasker.confidence import ConfidenceResolver, is_suspicious_extraction
from unmasker.extractor import (
    extract_by_delimiter,
    extract_by_lookup,
    extract_by_position,
    extract_by_regex,
)
from unmasker.processors import PROCESSOR_RULES
from unmasker.report import generate_obscured_vendor_report, identify_pattern
from unmasker.unmasker import VendorUnmasker


class TestProcessorDetection(unittest.TestCase):
    """Tests for processor signature matching."""

    def setUp(self):
        self.unmasker = VendorUnmasker(custom_rules={})

    def test_every_processor_is_detected(self):
        """Each built-in processor is recognised and marked obscured."""
        samples = [
            ("PAYPAL *GRUBHUB", "PayPal"),
            ("SQ *BLUE BOTTLE", "Square"),
            ("STRIPE: SUBSTACK", "Stripe"),
            ("VENMO JOHN SMITH", "Venmo"),
            ("CASH APP*JOHN", "CashApp"),
            ("ZELLE TO JANE DOE", "Zelle"),
            ("TST* JOES PIZZA", "Toast"),
            ("CLOVER CAFE*MAIN", "Clover"),
            ("APPLE PAY CORNER MARKET", "Apple Pay"),
            ("GOOGLE *YOUTUBE", "Google Pay"),
        ]
        for description, processor in samples:
            with self.subTest(description=description):
                result = self.unmasker.unmask(description)
                self.assertEqual(result.matched_processor, processor)
                self.assertTrue(result.is_obscured)

    def test_table_order(self):
        """The processor table keeps its documented order."""
        names = [rule.name for rule in PROCESSOR_RULES]
        self.assertEqual(names, [
            "PayPal", "Square", "Stripe", "Venmo", "CashApp",
            "Zelle", "Toast", "Clover", "Apple Pay", "Google Pay",
        ])

    def test_detection_is_case_insensitive(self):
        """Lowercase descriptions still match."""
        result = self.unmasker.unmask("paypal *grubhub")
        self.assertEqual(result.matched_processor, "PayPal")


class TestUnmasking(unittest.TestCase):
    """Tests for end-to-end unmasking of single descriptions."""

    def setUp(self):
        self.unmasker = VendorUnmasker(custom_rules={})

    def test_paypal_grubhub(self):
        """PayPal merchant maps to its canonical name."""
        result = self.unmasker.unmask("PAYPAL *GRUBHUB")
        self.assertEqual(result.matched_processor, "PayPal")
        self.assertIn("Grubhub", result.extracted_vendor)
        self.assertEqual(result.extracted_vendor, "Grubhub Food Delivery")
        self.assertEqual(result.confidence, 0.9)
        self.assertFalse(result.needs_manual_review)
        self.assertEqual(result.extraction_method, "delimiter")

    def test_square_numeric_only(self):
        """A Square charge with only a reference number needs review."""
        result = self.unmasker.unmask("SQ *8472639")
        self.assertEqual(result.matched_processor, "Square")
        self.assertEqual(result.extracted_vendor, "Unknown Vendor")
        self.assertTrue(result.needs_manual_review)
        self.assertLess(result.confidence, 0.9)
        self.assertEqual(result.confidence, 0.1)

    def test_degenerate_extraction_capped(self):
        """Very short extractions are capped and flagged."""
        result = self.unmasker.unmask("SQ *AB")
        self.assertEqual(result.confidence, 0.4)
        self.assertTrue(result.needs_manual_review)

    def test_toast_restaurant(self):
        """Toast extraction keeps the restaurant and infers the category."""
        result = self.unmasker.unmask("TST* JOES PIZZA")
        self.assertEqual(result.extracted_vendor, "Joes Pizza")
        self.assertEqual(result.confidence, 0.9)
        self.assertEqual(result.inferred_category, "Food & Dining")

    def test_stripe_regex_capture(self):
        """Stripe descriptions use the capture group and canonical map."""
        result = self.unmasker.unmask("STRIPE: NOTION LABS 1234567890")
        self.assertEqual(result.extraction_method, "regex")
        self.assertEqual(result.extracted_vendor, "Notion Workspace")
        self.assertEqual(result.confidence, 0.85)

    def test_zelle_regex_capture(self):
        """Zelle recipients are captured after TO."""
        result = self.unmasker.unmask("ZELLE TO JANE DOE")
        self.assertEqual(result.extracted_vendor, "Jane Doe")
        self.assertEqual(result.confidence, 0.8)

    def test_low_confidence_processor_needs_review(self):
        """Processors below the review threshold always need review."""
        result = self.unmasker.unmask("APPLE PAY CORNER MARKET STORE")
        self.assertTrue(result.needs_manual_review)
        self.assertLessEqual(result.confidence, 0.75)

    def test_direct_description(self):
        """Descriptions without a processor name the merchant directly."""
        result = self.unmasker.unmask("STARBUCKS STORE #123")
        self.assertEqual(result.matched_processor, "Direct")
        self.assertFalse(result.is_obscured)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.extracted_vendor, "Starbucks Store")
        self.assertNotIn("#123", result.extracted_vendor)

    def test_generic_descriptor_recovery(self):
        """Generic descriptors recover a vendor from the other fields."""
        result = self.unmasker.unmask(
            "PAYMENT",
            extended_details="support@acmewidgets.com",
        )
        self.assertEqual(result.matched_processor, "Unknown")
        self.assertEqual(result.extraction_method, "suspicious_pattern")
        self.assertEqual(result.extracted_vendor, "Acmewidgets")
        self.assertEqual(result.confidence, 0.3)
        self.assertTrue(result.needs_manual_review)
        self.assertTrue(result.is_obscured)

    def test_letter_code_descriptor(self):
        """Letter codes followed by digits are treated as generic."""
        result = self.unmasker.unmask("AB123")
        self.assertEqual(result.matched_processor, "Unknown")
        self.assertEqual(result.confidence, 0.3)

    def test_empty_description(self):
        """An empty description falls back without raising."""
        result = self.unmasker.unmask("")
        self.assertEqual(result.matched_processor, "Direct")
        self.assertEqual(result.extracted_vendor, "")

    def test_confidence_bounds(self):
        """Confidence always stays within [0, 1]."""
        for description in ["PAYPAL *", "SQ *", "VENMO", "12345678", "GOOGLE *X", "COFFEE"]:
            with self.subTest(description=description):
                result = self.unmasker.unmask(description)
                self.assertGreaterEqual(result.confidence, 0.0)
                self.assertLessEqual(result.confidence, 1.0)
                self.assertLessEqual(len(result.possible_vendors), 5)


class TestExtractionStrategies(unittest.TestCase):
    """Tests for the individual extraction strategies."""

    def test_delimiter_takes_second_token(self):
        self.assertEqual(extract_by_delimiter("A*B*C", "*"), "B")

    def test_delimiter_missing(self):
        self.assertEqual(extract_by_delimiter("NO DELIMITER", "*"), "")

    def test_position_drops_leading_words(self):
        cleanup = (re.compile(r'^VENMO\s+', re.IGNORECASE),)
        self.assertEqual(extract_by_position("VENMO JOHN SMITH", 1, cleanup), "SMITH")

    def test_regex_without_pattern(self):
        self.assertEqual(extract_by_regex("ANYTHING", None), "")

    def test_regex_no_match(self):
        regex = re.compile(r'ZELLE\s+(.+)')
        self.assertEqual(extract_by_regex("VENMO X", regex), "")

    def test_lookup_scans_context(self):
        self.assertEqual(
            extract_by_lookup("online order grubhub 555"),
            "Grubhub Food Delivery"
        )

    def test_lookup_no_hit(self):
        self.assertEqual(extract_by_lookup("nothing known here"), "")


class TestConfidenceResolver(unittest.TestCase):
    """Tests for confidence resolution, recovery and suggestions."""

    def setUp(self):
        self.resolver = ConfidenceResolver()

    def test_suspicious_extraction(self):
        """Degenerate extractions are detected."""
        self.assertTrue(is_suspicious_extraction("AB"))
        self.assertTrue(is_suspicious_extraction("12345"))
        self.assertTrue(is_suspicious_extraction("ABCD"))
        self.assertTrue(is_suspicious_extraction("PAYMENT"))
        self.assertFalse(is_suspicious_extraction("Blue Bottle"))

    def test_resolve_empty(self):
        resolution = self.resolver.resolve("", 0.9, "SQ *")
        self.assertEqual(resolution.vendor, "Unknown Vendor")
        self.assertEqual(resolution.confidence, 0.1)
        self.assertTrue(resolution.needs_manual_review)

    def test_resolve_clean(self):
        resolution = self.resolver.resolve("Blue Bottle", 0.9, "SQ *BLUE BOTTLE")
        self.assertEqual(resolution.confidence, 0.9)
        self.assertFalse(resolution.needs_manual_review)
        self.assertEqual(resolution.possible_vendors, [])

    def test_resolve_checks_raw_case(self):
        """Upper-case codes are caught before title-casing hides them."""
        resolution = self.resolver.resolve("Abc", 0.9, "SQ *ABC", raw_vendor="ABC")
        self.assertEqual(resolution.confidence, 0.4)
        self.assertTrue(resolution.needs_manual_review)

    def test_recovery_from_url(self):
        self.assertEqual(
            self.resolver.attempt_vendor_recovery("PURCHASE widgetworld.com 123456"),
            "Widgetworld"
        )

    def test_recovery_from_capitalized_words(self):
        self.assertEqual(
            self.resolver.attempt_vendor_recovery("TRANSFER 99887766 to Acme Hardware store"),
            "Acme Hardware"
        )

    def test_recovery_gives_up(self):
        self.assertEqual(
            self.resolver.attempt_vendor_recovery("PAYMENT 12345678"),
            "Unknown Vendor"
        )

    def test_suggestions_with_subscription_amount(self):
        suggestions = self.resolver.suggest_possible_vendors("GRUBHUB ORDER", 12.99)
        self.assertEqual(suggestions, [
            "Grubhub Food Delivery",
            "Possible subscription service",
        ])

    def test_suggestions_with_food_amount(self):
        suggestions = self.resolver.suggest_possible_vendors("coffee run", 7.50)
        self.assertEqual(suggestions, [
            "Local Coffee Shop",
            "Likely Food & Dining vendor",
            "Possible food/coffee purchase",
        ])

    def test_suggestions_amount_from_context(self):
        suggestions = self.resolver.suggest_possible_vendors("charge $14.99")
        self.assertIn("Possible subscription service", suggestions)

    def test_suggestions_capped(self):
        context = "grubhub doordash instacart ebay etsy coffee cafe"
        self.assertEqual(len(self.resolver.suggest_possible_vendors(context)), 5)


class TestObscuredVendorReport(unittest.TestCase):
    """Tests for the obscured vendor report."""

    def test_identify_pattern(self):
        self.assertEqual(identify_pattern("12345"), "Numeric only")
        self.assertEqual(identify_pattern("ABC"), "Uppercase abbreviation")
        self.assertEqual(identify_pattern("Ab"), "Too short")
        self.assertEqual(identify_pattern("payment"), "Generic descriptor")
        self.assertEqual(identify_pattern("Some Vendor"), "Other suspicious")

    def test_report(self):
        unmasker = VendorUnmasker(custom_rules={})
        results = [unmasker.unmask(d) for d in [
            "SQ *8472639",
            "SQ *AB",
            "PAYPAL *GRUBHUB",
            "STARBUCKS STORE #123",
        ]]
        report = generate_obscured_vendor_report(results)

        self.assertEqual(report.total_obscured, 3)
        self.assertEqual(report.by_processor, {"Square": 2, "PayPal": 1})
        self.assertEqual(len(report.needing_review), 2)
        self.assertEqual(sum(c.count for c in report.suspicious_patterns), 2)

    def test_report_sorted_and_capped(self):
        unmasker = VendorUnmasker(custom_rules={})
        descriptions = ["SQ *%d" % (1000000 + i) for i in range(60)] + ["SQ *AB"]
        report = generate_obscured_vendor_report([unmasker.unmask(d) for d in descriptions])

        self.assertEqual(report.total_obscured, 61)
        self.assertEqual(len(report.needing_review), 50)
        counts = [c.count for c in report.suspicious_patterns]
        self.assertEqual(counts, sorted(counts, reverse=True))
        self.assertEqual(counts[0], 60)
        for cluster in report.suspicious_patterns:
            self.assertLessEqual(len(cluster.examples), 3)

    def test_report_to_dict(self):
        report = generate_obscured_vendor_report([])
        self.assertEqual(report.to_dict(), {
            'total_obscured': 0,
            'by_processor': {},
            'needing_review': [],
            'suspicious_patterns': [],
        })


if __name__ == '__main__':
    unittest.main()
