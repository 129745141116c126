"""
Analysis module for vendor spending, recurrence and fraud heuristics.
"""
from .profile import RecurrencePattern, UnmaskingMetadata, VendorProfile
from .aggregator import VendorAggregator
from .recurrence import RecurrenceAnalyzer
from .subscription import SubscriptionClassifier
from .fraud import FraudScorer
from .analyzer import SpendingAnalysis, SpendingAnalyzer
from .forecast import (
    calculate_subscription_savings,
    find_duplicate_subscriptions,
    find_related_vendors,
    find_unused_subscriptions,
    predict_next_charges,
    processor_usage,
)

__all__ = [
    'RecurrencePattern',
    'UnmaskingMetadata',
    'VendorProfile',
    'VendorAggregator',
    'RecurrenceAnalyzer',
    'SubscriptionClassifier',
    'FraudScorer',
    'SpendingAnalysis',
    'SpendingAnalyzer',
    'calculate_subscription_savings',
    'find_duplicate_subscriptions',
    'find_related_vendors',
    'find_unused_subscriptions',
    'predict_next_charges',
    'processor_usage',
]
