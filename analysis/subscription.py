"""
Subscription classification.
"""
from typing import List, Optional

from analysis.profile import ANNUAL, MONTHLY, QUARTERLY, TAG_SUBSCRIPTION, VendorProfile
from config import get_config
from normalizer.vendor_name import match_keyword

SUBSCRIPTION_KEYWORDS: List[str] = [
    'subscription', 'membership', 'premium', 'plan', 'recurring',
    'auto-renew', 'renewal', 'monthly', 'annual', 'weekly',
    'netflix', 'spotify', 'hulu', 'disney', 'amazon prime',
    'adobe', 'microsoft', 'google', 'apple', 'dropbox',
    'gym', 'fitness', 'club', 'insurance', 'software',
]

SUBSCRIPTION_FREQUENCIES = (MONTHLY, QUARTERLY, ANNUAL)
MIN_SUBSCRIPTION_CONFIDENCE = 0.8


class SubscriptionClassifier:
    """
    Flags vendors that look like subscriptions.

    A vendor is a subscription if its name or latest description mentions a
    subscription keyword, or if it recurs monthly/quarterly/annually with
    high confidence at a consistent price.
    """

    def __init__(self, extra_keywords: Optional[List[str]] = None):
        if extra_keywords is None:
            extra_keywords = get_config().subscription_keywords
        self.keywords = SUBSCRIPTION_KEYWORDS + [k for k in extra_keywords if k]

    def has_keyword(self, profile: VendorProfile) -> bool:
        """Check the key, name and latest description for subscription keywords."""
        texts = [profile.canonical_key, profile.name]
        if profile.transactions:
            texts.append(profile.latest_transaction.raw_description)

        return any(
            match_keyword(text, keyword)
            for text in texts if text
            for keyword in self.keywords
        )

    @staticmethod
    def has_consistent_recurrence(profile: VendorProfile) -> bool:
        """Check for a confident long-cadence pattern with stable pricing."""
        pattern = profile.recurrence_pattern
        if not profile.is_recurring or pattern is None:
            return False
        if pattern.confidence <= MIN_SUBSCRIPTION_CONFIDENCE:
            return False
        if pattern.frequency not in SUBSCRIPTION_FREQUENCIES:
            return False

        distinct_amounts = len(set(profile.amounts))
        return distinct_amounts == 1 or (distinct_amounts <= 2 and profile.transaction_count > 3)

    def classify(self, profile: VendorProfile) -> bool:
        """
        Classify one profile, tagging it when it is a subscription.

        Returns:
            The subscription flag
        """
        profile.subscription_flag = self.has_keyword(profile) or self.has_consistent_recurrence(profile)
        if profile.subscription_flag:
            profile.add_tag(TAG_SUBSCRIPTION)
        return profile.subscription_flag
