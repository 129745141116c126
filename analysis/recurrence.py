"""
Recurring charge detection.

Classifies the gaps between a vendor's charges into a frequency bucket by
their mean and spread.
"""
import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from analysis.profile import (
    ANNUAL,
    BIWEEKLY,
    DAILY,
    MONTHLY,
    QUARTERLY,
    WEEKLY,
    RecurrencePattern,
    VendorProfile,
)

logger = logging.getLogger(__name__)

# (frequency, min mean gap, max mean gap, std dev ceiling, confidence)
# Checked in order; the first bucket that fits wins
FREQUENCY_BUCKETS: List[Tuple[str, float, float, float, float]] = [
    (DAILY, 1, 2, 1, 0.9),
    (WEEKLY, 6, 8, 2, 0.85),
    (BIWEEKLY, 13, 15, 3, 0.85),
    (MONTHLY, 28, 32, 5, 0.9),
    (QUARTERLY, 85, 95, 10, 0.8),
    (ANNUAL, 350, 380, 30, 0.85),
]

EXPECTED_INTERVALS = {
    DAILY: 1,
    WEEKLY: 7,
    BIWEEKLY: 14,
    MONTHLY: 30,
    QUARTERLY: 90,
    ANNUAL: 365,
}

MIN_RECURRING_CONFIDENCE = 0.7


def mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def population_std_dev(values: List[float]) -> float:
    """Standard deviation over the whole population (divides by n)."""
    if not values:
        return 0.0
    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return variance ** 0.5


def day_gaps(profile: VendorProfile) -> List[int]:
    """Days between consecutive charges, in date order."""
    dates = sorted(t.date for t in profile.transactions)
    return [(dates[i] - dates[i - 1]).days for i in range(1, len(dates))]


def classify_interval(mean_gap: float, std_dev: float) -> Optional[Tuple[str, float]]:
    """
    Match a mean gap and spread against the frequency buckets.

    Returns:
        Tuple of (frequency, confidence), or None when no bucket fits
    """
    for frequency, low, high, max_std, confidence in FREQUENCY_BUCKETS:
        if low <= mean_gap <= high and std_dev < max_std:
            return frequency, confidence
    return None


class RecurrenceAnalyzer:
    """Attaches a RecurrencePattern to vendors that charge on a cadence."""

    def analyze(self, profile: VendorProfile) -> Optional[RecurrencePattern]:
        """
        Detect the recurrence pattern of one profile.

        Sorts the profile's transactions by date in place. The pattern is
        recomputed from the full history on every call.

        Args:
            profile: Profile to analyze (updated in place)

        Returns:
            The detected pattern, or None
        """
        profile.recurrence_pattern = None
        profile.is_recurring = False

        if profile.transaction_count < 2 or len(profile.transactions) < 2:
            return None

        profile.transactions.sort(key=lambda t: t.date)
        gaps = day_gaps(profile)

        mean_gap = mean(gaps)
        std_dev = population_std_dev(gaps)

        match = classify_interval(mean_gap, std_dev)
        if match is None:
            return None

        frequency, confidence = match
        if confidence <= MIN_RECURRING_CONFIDENCE:
            return None

        pattern = RecurrencePattern(
            frequency=frequency,
            expected_amount=profile.average_amount,
            interval_variance=std_dev,
            confidence=confidence,
            next_expected_date=profile.last_seen + timedelta(days=int(mean_gap + 0.5)),
        )
        profile.recurrence_pattern = pattern
        profile.is_recurring = True

        logger.debug(
            "%s recurs %s (mean gap %.1f days, std dev %.2f)",
            profile.canonical_key, frequency, mean_gap, std_dev,
        )
        return pattern

    def analyze_all(self, profiles: List[VendorProfile]) -> int:
        """
        Analyze every profile.

        Returns:
            Number of recurring profiles found
        """
        return sum(1 for profile in profiles if self.analyze(profile) is not None)
