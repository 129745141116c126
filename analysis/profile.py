"""
Vendor profile data model.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from config import DEFAULT_CATEGORY
from parsers.base_parser import Transaction

# Frequency buckets
DAILY = "daily"
WEEKLY = "weekly"
BIWEEKLY = "biweekly"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
ANNUAL = "annual"

# Multipliers converting one charge at a given frequency to a monthly cost
MONTHLY_MULTIPLIERS: Dict[str, float] = {
    DAILY: 30.0,
    WEEKLY: 4.33,
    BIWEEKLY: 2.17,
    MONTHLY: 1.0,
    QUARTERLY: 1 / 3,
    ANNUAL: 1 / 12,
}

# Tags
TAG_SUBSCRIPTION = "subscription"
TAG_POTENTIAL_FRAUD = "potential_fraud"
TAG_ANOMALY = "anomaly_detected"


@dataclass
class RecurrencePattern:
    """Detected recurring cadence for a vendor."""
    frequency: str
    expected_amount: float
    interval_variance: float
    confidence: float
    next_expected_date: date

    @property
    def monthly_equivalent(self) -> float:
        """Expected amount normalized to a monthly cost."""
        return self.expected_amount * MONTHLY_MULTIPLIERS.get(self.frequency, 1.0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert pattern to dictionary."""
        return {
            'frequency': self.frequency,
            'expected_amount': self.expected_amount,
            'interval_variance': self.interval_variance,
            'confidence': self.confidence,
            'next_expected_date': self.next_expected_date,
            'monthly_equivalent': self.monthly_equivalent,
        }


@dataclass
class UnmaskingMetadata:
    """How the profile's vendor was identified (from its first transaction)."""
    matched_processor: str
    confidence: float
    is_obscured: bool
    needs_manual_review: bool
    original_description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return {
            'matched_processor': self.matched_processor,
            'confidence': self.confidence,
            'is_obscured': self.is_obscured,
            'needs_manual_review': self.needs_manual_review,
            'original_description': self.original_description,
        }


@dataclass
class VendorProfile:
    """
    Aggregated spending for one vendor identity.

    Created by the aggregator on first sight of a canonical key, then
    enriched in order by the recurrence, subscription and fraud analyzers.
    """
    canonical_key: str
    name: str
    display_name: str
    first_seen: date
    last_seen: date
    total_amount: float = 0.0
    transaction_count: int = 0
    min_amount: float = float('inf')
    max_amount: float = 0.0
    category: str = DEFAULT_CATEGORY
    unmasking_metadata: Optional[UnmaskingMetadata] = None
    transactions: List[Transaction] = field(default_factory=list)

    # Analysis fields (populated later)
    recurrence_pattern: Optional[RecurrencePattern] = None
    is_recurring: bool = False
    subscription_flag: bool = False
    fraud_score: float = 0.0
    anomaly_score: float = 0.0
    fraud_flag: bool = False
    tags: List[str] = field(default_factory=list)

    @property
    def average_amount(self) -> float:
        """Mean charge amount."""
        if self.transaction_count == 0:
            return 0.0
        return self.total_amount / self.transaction_count

    @property
    def amounts(self) -> List[float]:
        """Charge amounts in stored order."""
        return [t.amount for t in self.transactions]

    @property
    def latest_transaction(self) -> Optional[Transaction]:
        """Last charge in date order; ties keep arrival order."""
        if not self.transactions:
            return None
        return sorted(self.transactions, key=lambda t: t.date)[-1]

    def add_tag(self, tag: str) -> None:
        """Add a tag once."""
        if tag not in self.tags:
            self.tags.append(tag)

    def to_dict(self) -> Dict[str, Any]:
        """Convert profile to dictionary (transactions omitted)."""
        return {
            'canonical_key': self.canonical_key,
            'name': self.name,
            'display_name': self.display_name,
            'total_amount': round(self.total_amount, 2),
            'transaction_count': self.transaction_count,
            'average_amount': round(self.average_amount, 2),
            'min_amount': self.min_amount,
            'max_amount': self.max_amount,
            'first_seen': self.first_seen,
            'last_seen': self.last_seen,
            'category': self.category,
            'is_recurring': self.is_recurring,
            'recurrence_pattern': self.recurrence_pattern.to_dict() if self.recurrence_pattern else None,
            'subscription_flag': self.subscription_flag,
            'fraud_score': self.fraud_score,
            'anomaly_score': self.anomaly_score,
            'fraud_flag': self.fraud_flag,
            'tags': list(self.tags),
            'unmasking_metadata': self.unmasking_metadata.to_dict() if self.unmasking_metadata else None,
        }
