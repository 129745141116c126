#!/usr/bin/env python3
"""
Card Vendor Insights - Main Entry Point

Loads card transactions from a canonical CSV file, unmasks vendors hidden
behind payment processors, and prints a spending report covering
subscriptions, recurring charges, anomalies and processors.

Usage:
    python main.py --input <transactions.csv> [options]

Examples:
    python main.py --input transactions.csv
    python main.py --input transactions.csv --rules custom_rules.yaml --verbose
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from config import APP_NAME, APP_VERSION, get_config
from parsers.base_parser import LoadError
from parsers.csv_parser import CSVParser
from analysis.analyzer import SpendingAnalysis, SpendingAnalyzer
from analysis.forecast import (
    find_duplicate_subscriptions,
    find_unused_subscriptions,
    predict_next_charges,
)
from unmasker.unmasker import VendorUnmasker

MAX_LISTED = 10


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Unmask card vendors and analyze recurring spending.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --input transactions.csv
  python main.py --input transactions.csv --rules custom_rules.yaml
  python main.py --input transactions.csv --days-ahead 60 --verbose

Expected CSV columns:
  date, description, amount (required)
  extended_details, statement_description, category (optional)

Environment Variables:
  UNMASK_ACCEPT_CONFIDENCE     - Minimum confidence to trust an unmasked name (default: 0.5)
  REVIEW_CONFIDENCE_THRESHOLD  - Processor confidence below which review is needed (default: 0.8)
        """
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the transactions CSV file'
    )
    parser.add_argument(
        '--rules', '-r',
        default=None,
        help='Path to a custom_rules.yaml file (defaults to the discovered one)'
    )
    parser.add_argument(
        '--days-ahead',
        type=int,
        default=None,
        help='Look-ahead window for upcoming charges in days (default: 30)'
    )
    parser.add_argument(
        '--unused-days',
        type=int,
        default=90,
        help='Days without a charge before a recurring vendor counts as unused (default: 90)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    return parser.parse_args(argv)


def print_report(analysis: SpendingAnalysis, days_ahead: int, unused_days: int) -> None:
    """Print the spending report."""
    start, end = analysis.date_range
    print(f"\n--- Spending Summary ---")
    print(f"Date range: {start} to {end}")
    print(f"Transactions: {analysis.transaction_count}")
    print(f"Vendors: {analysis.vendor_count}")
    print(f"Total spent: ${analysis.total_spent:,.2f}")
    print(f"Subscriptions: {analysis.subscription_count} (${analysis.subscription_total:,.2f})")

    if analysis.top_vendors:
        print(f"\n--- Top Vendors ---")
        for profile in analysis.top_vendors[:MAX_LISTED]:
            print(f"  {profile.display_name}: ${profile.total_amount:,.2f} "
                  f"({profile.transaction_count} charges, {profile.category})")

    if analysis.recurring_charges:
        print(f"\n--- Recurring Charges ---")
        for profile in analysis.recurring_charges[:MAX_LISTED]:
            pattern = profile.recurrence_pattern
            print(f"  {profile.display_name}: ${pattern.expected_amount:,.2f} {pattern.frequency} "
                  f"(next {pattern.next_expected_date})")

    upcoming = predict_next_charges(analysis, days_ahead=days_ahead)
    if upcoming:
        print(f"\n--- Expected In The Next {days_ahead} Days ---")
        for charge in upcoming:
            print(f"  {charge['expected_date']}: {charge['vendor']} ${charge['expected_amount']:,.2f}")

    unused = find_unused_subscriptions(analysis, unused_days=unused_days)
    if unused:
        print(f"\n--- Possibly Unused ---")
        for item in unused:
            print(f"  {item['vendor']}: last charged {item['last_charge']} "
                  f"(${item['monthly_cost']:,.2f}/month)")

    if analysis.anomalies:
        print(f"\n--- Anomalies ---")
        for anomaly in analysis.anomalies:
            print(f"  [{anomaly.severity.upper()}] {anomaly.vendor}: {anomaly.reason}")

    if analysis.duplicate_charges:
        print(f"\n--- Possible Duplicate Charges ---")
        for dup in analysis.duplicate_charges:
            print(f"  {dup.date}: {dup.vendor} ${dup.amount:,.2f} x{dup.count}")

    similar = find_duplicate_subscriptions(analysis)
    if similar:
        print(f"\n--- Possible Duplicate Subscriptions ---")
        for pair in similar:
            names = " / ".join(
                f"{v['vendor']} (${v['monthly_cost']:,.2f}/month)" for v in pair['vendors']
            )
            print(f"  {pair['category']}: {names} ({pair['similarity']:.0%} similar)")

    report = analysis.unmasking_report
    if report.total_obscured:
        print(f"\n--- Payment Processors ---")
        print(f"Obscured transactions: {report.total_obscured}")
        for processor, count in report.by_processor.items():
            print(f"  {processor}: {count}")
        print(f"Needing manual review: {len(report.needing_review)}")
        for cluster in report.suspicious_patterns:
            print(f"  {cluster.pattern}: {cluster.count} (e.g. {', '.join(cluster.examples)})")

    if analysis.insights:
        print(f"\n--- Insights ---")
        for insight in analysis.insights:
            print(f"  - {insight.message}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Validate input file
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        return 1

    if args.rules and not os.path.exists(args.rules):
        print(f"Error: Rules file not found: {args.rules}")
        return 1

    days_ahead = args.days_ahead
    if days_ahead is None:
        days_ahead = get_config().get("forecast_days", 30)

    print(f"\n{'='*60}")
    print(f"{APP_NAME} v{APP_VERSION}")
    print(f"{'='*60}")
    print(f"Input file: {args.input}")
    if args.rules:
        print(f"Custom rules: {args.rules}")
    print(f"{'='*60}\n")

    parser = CSVParser(args.input)
    try:
        transactions = parser.parse()
    except LoadError as e:
        print(f"Error: {e}")
        return 1

    if not transactions:
        print("Error: No transactions found in the file")
        return 1

    # Validate transactions
    issues = parser.validate()
    if issues:
        print(f"Validation warnings ({len(issues)}):")
        for issue in issues[:MAX_LISTED]:
            print(f"  - Row {issue.row_numbers}: {issue.message}")
        if len(issues) > MAX_LISTED:
            print(f"  ... and {len(issues) - MAX_LISTED} more")
        print()

    unmasker = VendorUnmasker(custom_rules_path=args.rules) if args.rules else VendorUnmasker()
    analysis = SpendingAnalyzer(unmasker=unmasker).analyze(transactions)

    print_report(analysis, days_ahead, args.unused_days)

    print(f"\n{'='*60}")
    print("Analysis complete!")
    print(f"{'='*60}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
