"""
Spending analysis orchestrator.

Runs the full pipeline over a batch of transactions:
unmask -> aggregate -> recurrence -> subscription -> fraud -> summary.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from config import MAX_TOP_VENDORS, get_config
from parsers.base_parser import Transaction
from analysis.aggregator import VendorAggregator
from analysis.fraud import ANOMALY_THRESHOLD, FraudScorer
from analysis.profile import MONTHLY, VendorProfile
from analysis.recurrence import RecurrenceAnalyzer, population_std_dev
from analysis.subscription import SubscriptionClassifier
from reconciler.duplicate_checker import DuplicateCharge, DuplicateChargeFinder
from unmasker.report import ObscuredVendorReport, generate_obscured_vendor_report
from unmasker.unmasker import VendorUnmasker

logger = logging.getLogger(__name__)

SUBSCRIPTION_COST_ALERT = 200.0
SUBSCRIPTION_SAVINGS_RATE = 0.2
HIGH_VALUE_VENDOR_TOTAL = 1000.0


@dataclass
class Anomaly:
    """A vendor whose anomaly score crossed the reporting threshold."""
    vendor: str
    reason: str
    amount: float
    date: date
    severity: str  # "high", "medium" or "low"


@dataclass
class Insight:
    """A human-readable observation about the spending."""
    type: str
    message: str
    actionable: bool
    savings_opportunity: Optional[float] = None


@dataclass
class SpendingAnalysis:
    """Complete result of one analysis run."""
    profiles: Dict[str, VendorProfile]
    date_range: Tuple[Optional[date], Optional[date]]
    total_spent: float = 0.0
    vendor_count: int = 0
    transaction_count: int = 0
    subscription_count: int = 0
    subscription_total: float = 0.0
    top_vendors: List[VendorProfile] = field(default_factory=list)
    category_breakdown: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    recurring_charges: List[VendorProfile] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
    duplicate_charges: List[DuplicateCharge] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    unmasking_report: ObscuredVendorReport = field(default_factory=ObscuredVendorReport)
    as_of: Optional[date] = None


def anomaly_severity(score: float) -> str:
    if score > 0.8:
        return "high"
    if score > 0.6:
        return "medium"
    return "low"


def anomaly_reason(profile: VendorProfile) -> str:
    """Explain why a profile was flagged as anomalous."""
    reasons = []

    if profile.fraud_flag:
        reasons.append("Potential fraud detected")

    if profile.transaction_count > 2:
        average = profile.average_amount
        if population_std_dev(profile.amounts) > average * 0.5:
            reasons.append("High variance in transaction amounts")

        if profile.latest_transaction.amount > average * 2:
            reasons.append("Recent amount spike")

    if profile.is_recurring and not reasons:
        reasons.append("Irregular recurring pattern")

    return '; '.join(reasons) or "Unusual activity detected"


class SpendingAnalyzer:
    """
    Analyzes card spending by vendor.

    Every call to analyze() starts from fresh aggregation state, so the same
    transactions always produce the same analysis.
    """

    def __init__(
        self,
        unmasker: Optional[VendorUnmasker] = None,
        subscription_keywords: Optional[List[str]] = None
    ):
        """
        Initialize the analyzer.

        Args:
            unmasker: Vendor unmasker (a default one is built if omitted)
            subscription_keywords: Extra subscription keywords; defaults to
                the ones in the unmasker's custom rules
        """
        self.unmasker = unmasker or VendorUnmasker()
        if subscription_keywords is None:
            subscription_keywords = self.unmasker.custom_rules.get('subscription_keywords') or []
        self.recurrence = RecurrenceAnalyzer()
        self.subscriptions = SubscriptionClassifier(subscription_keywords)
        self.fraud = FraudScorer()
        self.duplicates = DuplicateChargeFinder()
        self.unused_days = get_config().get("unused_subscription_days", 60)

    def build_profiles(self, transactions: List[Transaction]) -> Dict[str, VendorProfile]:
        """Aggregate and run the per-profile analyzers, without the summary."""
        profiles, _ = self._run_phases(transactions)
        return profiles

    def analyze(
        self,
        transactions: List[Transaction],
        as_of: Optional[date] = None
    ) -> SpendingAnalysis:
        """
        Analyze a batch of transactions.

        Args:
            transactions: Transactions to analyze
            as_of: Reference date for time-relative insights (defaults to the
                latest transaction date)

        Returns:
            SpendingAnalysis for the batch
        """
        profiles, report = self._run_phases(transactions)

        if not transactions:
            return SpendingAnalysis(profiles=profiles, date_range=(None, None), unmasking_report=report)

        dates = [t.date for t in transactions]
        if as_of is None:
            as_of = max(dates)

        all_profiles = list(profiles.values())
        legit = [p for p in all_profiles if not p.fraud_flag]
        subscriptions = [p for p in legit if p.subscription_flag]

        total_spent = sum(p.total_amount for p in legit)
        category_breakdown = self._category_breakdown(legit, total_spent)

        analysis = SpendingAnalysis(
            profiles=profiles,
            date_range=(min(dates), max(dates)),
            total_spent=round(total_spent, 2),
            vendor_count=len(legit),
            transaction_count=len(transactions),
            subscription_count=len(subscriptions),
            subscription_total=round(sum(p.total_amount for p in subscriptions), 2),
            top_vendors=sorted(legit, key=lambda p: p.total_amount, reverse=True)[:MAX_TOP_VENDORS],
            category_breakdown=category_breakdown,
            recurring_charges=[p for p in legit if p.is_recurring],
            anomalies=self._anomalies(all_profiles),
            duplicate_charges=self.duplicates.find(all_profiles),
            unmasking_report=report,
            as_of=as_of,
        )
        analysis.insights = self._insights(legit, subscriptions, category_breakdown, report, as_of)

        logger.info(
            "Analysis complete: %d vendors, %d subscriptions, %d anomalies",
            analysis.vendor_count, analysis.subscription_count, len(analysis.anomalies),
        )
        return analysis

    def _run_phases(
        self,
        transactions: List[Transaction]
    ) -> Tuple[Dict[str, VendorProfile], ObscuredVendorReport]:
        aggregator = VendorAggregator(self.unmasker)
        profiles, results = aggregator.aggregate(transactions)

        # Fixed order: subscription and fraud rules read the recurrence pattern
        for profile in profiles.values():
            self.recurrence.analyze(profile)
        for profile in profiles.values():
            self.subscriptions.classify(profile)
        for profile in profiles.values():
            self.fraud.score(profile)

        return profiles, generate_obscured_vendor_report(results)

    @staticmethod
    def _category_breakdown(
        profiles: List[VendorProfile],
        total_spent: float
    ) -> Dict[str, Dict[str, Any]]:
        breakdown: Dict[str, Dict[str, Any]] = {}
        for profile in profiles:
            entry = breakdown.setdefault(profile.category, {
                'total': 0.0,
                'count': 0,
                'percentage': 0.0,
                'vendors': [],
            })
            entry['total'] += profile.total_amount
            entry['count'] += profile.transaction_count
            entry['vendors'].append(profile.display_name)

        for entry in breakdown.values():
            entry['total'] = round(entry['total'], 2)
            entry['percentage'] = (entry['total'] / total_spent * 100) if total_spent else 0.0

        return breakdown

    @staticmethod
    def _anomalies(profiles: List[VendorProfile]) -> List[Anomaly]:
        return [
            Anomaly(
                vendor=p.display_name,
                reason=anomaly_reason(p),
                amount=round(p.total_amount, 2),
                date=p.last_seen,
                severity=anomaly_severity(p.anomaly_score),
            )
            for p in profiles
            if p.anomaly_score > ANOMALY_THRESHOLD
        ]

    def _insights(
        self,
        vendors: List[VendorProfile],
        subscriptions: List[VendorProfile],
        category_breakdown: Dict[str, Dict[str, Any]],
        report: ObscuredVendorReport,
        as_of: date
    ) -> List[Insight]:
        insights: List[Insight] = []

        monthly_cost = sum(
            s.average_amount for s in subscriptions
            if s.recurrence_pattern is not None and s.recurrence_pattern.frequency == MONTHLY
        )
        if monthly_cost > SUBSCRIPTION_COST_ALERT:
            insights.append(Insight(
                type="subscription_cost",
                message=f"Your monthly subscriptions total ${monthly_cost:.2f}. "
                        f"Consider reviewing unused services.",
                actionable=True,
                savings_opportunity=round(monthly_cost * SUBSCRIPTION_SAVINGS_RATE, 2),
            ))

        if category_breakdown:
            top_name, top = max(category_breakdown.items(), key=lambda item: item[1]['total'])
            insights.append(Insight(
                type="spending_pattern",
                message=f"{top_name} is your highest spending category at "
                        f"${top['total']:.2f} ({top['percentage']:.1f}%)",
                actionable=False,
            ))

        unused = [
            s for s in subscriptions
            if s.recurrence_pattern is not None and (as_of - s.last_seen).days > self.unused_days
        ]
        if unused:
            insights.append(Insight(
                type="unused_subscriptions",
                message=f"{len(unused)} subscriptions haven't charged in over {self.unused_days} days. "
                        f"They may be cancelled or paused.",
                actionable=True,
                savings_opportunity=round(sum(s.average_amount for s in unused), 2),
            ))

        high_value = [v for v in vendors if v.total_amount > HIGH_VALUE_VENDOR_TOTAL]
        if high_value:
            insights.append(Insight(
                type="high_value_vendors",
                message=f"{len(high_value)} vendors account for over $1000 in spending each.",
                actionable=False,
            ))

        if report.total_obscured > 0:
            insights.append(Insight(
                type="obscured_vendors",
                message=f"Found {report.total_obscured} transactions through payment processors. "
                        f"{len(report.needing_review)} need manual review to identify the actual vendor.",
                actionable=True,
            ))

            top_processor = max(report.by_processor.items(), key=lambda item: item[1])
            insights.append(Insight(
                type="payment_processor_usage",
                message=f"{top_processor[0]} is your most used payment processor with "
                        f"{top_processor[1]} transactions. Consider reviewing these for "
                        f"subscription services.",
                actionable=False,
            ))

        return insights
