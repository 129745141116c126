"""
Fraud and anomaly scoring.

Fraud score is additive over rule hits (0-100); anomaly score combines the
fraud score with statistical irregularities in amounts and timing (0-1).
"""
import logging
import re
from collections import Counter
from typing import List

from analysis.profile import TAG_ANOMALY, TAG_POTENTIAL_FRAUD, VendorProfile
from analysis.recurrence import EXPECTED_INTERVALS, day_gaps, population_std_dev

logger = logging.getLogger(__name__)

# Amounts commonly used in scam charges
SUSPICIOUS_AMOUNTS: List[float] = [999.0, 399.0, 299.0, 199.0, 99.99]
SUSPICIOUS_AMOUNT_POINTS = 20

SAME_DAY_THRESHOLD = 100.0
SAME_DAY_POINTS = 50

BLACKLIST_KEYWORDS: List[str] = ['verify', 'urgent', 'suspended', 'locked']
BLACKLIST_POINTS = 30

SCAM_PATTERN = re.compile(r'\b(prize|winner|claim|verify account|suspended)\b', re.IGNORECASE)
SCAM_POINTS = 40

GENERIC_NAME_PATTERN = re.compile(r'^(email|mail|account|verify|service)$')
GENERIC_NAME_POINTS = 25

MAX_FRAUD_SCORE = 100
FRAUD_THRESHOLD = 50
ANOMALY_THRESHOLD = 0.5

# Anomaly weights
HIGH_VARIANCE_WEIGHT = 0.2
AMOUNT_SPIKE_WEIGHT = 0.3
INTERVAL_DEVIATION_WEIGHT = 0.15


class FraudScorer:
    """
    Scores vendor profiles for fraud indicators and anomalies.

    Fraud rules:
    - Charges at common scam price points
    - Several large charges on the same day
    - Blacklisted words or scam phrases in the vendor name
    - A bare generic vendor name

    Anomaly rules:
    - Amount spread above half the average (more than two charges)
    - Latest charge more than twice the average (more than two charges)
    - Latest gap of a recurring vendor off the expected cadence by more than 30%
    """

    def fraud_score(self, profile: VendorProfile) -> int:
        """Compute the uncapped fraud score for a profile."""
        score = 0

        for txn in profile.transactions:
            if round(txn.amount, 2) in SUSPICIOUS_AMOUNTS:
                score += SUSPICIOUS_AMOUNT_POINTS

        large_per_day = Counter(
            t.date for t in profile.transactions if t.amount > SAME_DAY_THRESHOLD
        )
        if any(count >= 2 for count in large_per_day.values()):
            score += SAME_DAY_POINTS

        name = profile.name.lower()
        if any(keyword in name for keyword in BLACKLIST_KEYWORDS):
            score += BLACKLIST_POINTS
        if SCAM_PATTERN.search(name):
            score += SCAM_POINTS
        if GENERIC_NAME_PATTERN.match(name.strip()):
            score += GENERIC_NAME_POINTS

        return score

    def anomaly_points(self, profile: VendorProfile) -> float:
        """Sum the statistical anomaly weights for a profile."""
        points = 0.0

        if profile.transaction_count > 2:
            amounts = profile.amounts
            average = profile.average_amount
            if population_std_dev(amounts) > average * 0.5:
                points += HIGH_VARIANCE_WEIGHT

            if profile.latest_transaction.amount > average * 2:
                points += AMOUNT_SPIKE_WEIGHT

        if profile.is_recurring and profile.recurrence_pattern is not None:
            expected = EXPECTED_INTERVALS[profile.recurrence_pattern.frequency]
            gaps = day_gaps(profile)
            if gaps and abs(gaps[-1] - expected) > expected * 0.3:
                points += INTERVAL_DEVIATION_WEIGHT

        return points

    def score(self, profile: VendorProfile) -> None:
        """Score one profile in place and apply tags."""
        raw_score = self.fraud_score(profile)
        profile.fraud_score = min(raw_score, MAX_FRAUD_SCORE)
        profile.fraud_flag = raw_score > FRAUD_THRESHOLD
        if profile.fraud_flag:
            profile.add_tag(TAG_POTENTIAL_FRAUD)
            logger.info("Potential fraud: %s (score %d)", profile.display_name, raw_score)

        anomaly = max(profile.fraud_score / MAX_FRAUD_SCORE, self.anomaly_points(profile))
        profile.anomaly_score = min(anomaly, 1.0)
        if profile.anomaly_score > ANOMALY_THRESHOLD:
            profile.add_tag(TAG_ANOMALY)
