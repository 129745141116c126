"""
Helpers over a finished SpendingAnalysis: charge forecasts, savings, and
vendor identity checks (near-duplicate subscriptions, related vendors).
"""
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from rapidfuzz.distance import Levenshtein

from analysis.analyzer import SpendingAnalysis
from analysis.profile import VendorProfile

DUPLICATE_SIMILARITY = 0.6
RELATED_NAME_SIMILARITY = 0.5
RELATED_AMOUNT_TOLERANCE = 0.2
MAX_RELATED_VENDORS = 10

# Relationship scores
SAME_CATEGORY_SCORE = 0.5
SIMILAR_AMOUNT_SCORE = 0.6
SAME_PROCESSOR_SCORE = 0.7


def _reference_date(analysis: SpendingAnalysis, as_of: Optional[date]) -> date:
    if as_of is not None:
        return as_of
    if analysis.as_of is not None:
        return analysis.as_of
    return analysis.date_range[1] or date.today()


def predict_next_charges(
    analysis: SpendingAnalysis,
    days_ahead: int = 30,
    as_of: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    List recurring charges expected within the next days_ahead days.

    Args:
        analysis: Completed analysis
        days_ahead: Size of the look-ahead window in days
        as_of: Start of the window (defaults to the analysis reference date)

    Returns:
        Predicted charges sorted by expected date
    """
    start = _reference_date(analysis, as_of)
    end = start + timedelta(days=days_ahead)

    predictions = []
    for profile in analysis.recurring_charges:
        pattern = profile.recurrence_pattern
        if pattern is None:
            continue
        if start <= pattern.next_expected_date <= end:
            predictions.append({
                'vendor': profile.display_name,
                'expected_date': pattern.next_expected_date,
                'expected_amount': round(pattern.expected_amount, 2),
                'frequency': pattern.frequency,
                'confidence': pattern.confidence,
            })

    predictions.sort(key=lambda p: p['expected_date'])
    return predictions


def find_unused_subscriptions(
    analysis: SpendingAnalysis,
    unused_days: int = 90,
    as_of: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    Find recurring charges that have gone quiet.

    Returns:
        Vendors whose last charge is older than unused_days, most expensive first
    """
    cutoff = _reference_date(analysis, as_of) - timedelta(days=unused_days)

    unused: List[VendorProfile] = [
        p for p in analysis.recurring_charges
        if p.recurrence_pattern is not None and p.last_seen < cutoff
    ]
    unused.sort(key=lambda p: p.recurrence_pattern.monthly_equivalent, reverse=True)

    return [
        {
            'vendor': p.display_name,
            'last_charge': p.last_seen,
            'frequency': p.recurrence_pattern.frequency,
            'monthly_cost': round(p.recurrence_pattern.monthly_equivalent, 2),
            'total_spent': round(p.total_amount, 2),
        }
        for p in unused
    ]


def calculate_subscription_savings(
    analysis: SpendingAnalysis,
    vendor_names: List[str]
) -> Dict[str, Any]:
    """
    Estimate savings from cancelling the named recurring vendors.

    Names match case-insensitively as substrings of the display name.
    """
    wanted = [name.lower() for name in vendor_names if name]
    matched = []
    monthly_savings = 0.0

    for profile in analysis.recurring_charges:
        pattern = profile.recurrence_pattern
        if pattern is None:
            continue
        display = profile.display_name.lower()
        if any(name in display for name in wanted):
            monthly = pattern.monthly_equivalent
            monthly_savings += monthly
            matched.append({
                'vendor': profile.display_name,
                'frequency': pattern.frequency,
                'monthly_cost': round(monthly, 2),
            })

    return {
        'vendors': matched,
        'monthly_savings': round(monthly_savings, 2),
        'annual_savings': round(monthly_savings * 12, 2),
    }


def processor_usage(analysis: SpendingAnalysis) -> Dict[str, Dict[str, Any]]:
    """
    Summarize spending routed through each payment processor.

    Returns:
        Mapping of processor name to total, transaction count and vendor names
    """
    usage: Dict[str, Dict[str, Any]] = {}

    for profile in analysis.profiles.values():
        metadata = profile.unmasking_metadata
        if metadata is None or not metadata.is_obscured:
            continue

        entry = usage.setdefault(metadata.matched_processor, {
            'total': 0.0,
            'count': 0,
            'vendors': [],
        })
        entry['total'] = round(entry['total'] + profile.total_amount, 2)
        entry['count'] += profile.transaction_count
        entry['vendors'].append(profile.display_name)

    return usage


def name_similarity(first: str, second: str) -> float:
    """Edit-distance similarity of two names, scaled by the longer one (0-1)."""
    return Levenshtein.normalized_similarity(first, second)


def _monthly_cost(profile: VendorProfile) -> float:
    pattern = profile.recurrence_pattern
    return round(pattern.monthly_equivalent, 2) if pattern else 0.0


def find_duplicate_subscriptions(
    analysis: SpendingAnalysis,
    min_similarity: float = DUPLICATE_SIMILARITY
) -> List[Dict[str, Any]]:
    """
    Find recurring vendors that may be the same service billed twice.

    Pairs recurring vendors within one category whose canonical keys are
    more similar than min_similarity.

    Returns:
        Candidate pairs, most similar first
    """
    by_category: Dict[str, List[VendorProfile]] = {}
    for profile in analysis.recurring_charges:
        by_category.setdefault(profile.category, []).append(profile)

    duplicates = []
    for category, profiles in by_category.items():
        for i, first in enumerate(profiles):
            for second in profiles[i + 1:]:
                similarity = name_similarity(first.canonical_key, second.canonical_key)
                if similarity > min_similarity:
                    duplicates.append({
                        'category': category,
                        'similarity': similarity,
                        'vendors': [
                            {'vendor': p.display_name, 'monthly_cost': _monthly_cost(p)}
                            for p in (first, second)
                        ],
                    })

    duplicates.sort(key=lambda d: d['similarity'], reverse=True)
    return duplicates


def find_related_vendors(
    analysis: SpendingAnalysis,
    vendor_name: str,
    limit: int = MAX_RELATED_VENDORS
) -> List[Dict[str, Any]]:
    """
    Find vendors related to the named one.

    The target is the first profile whose canonical key or display name
    contains vendor_name (case-insensitive). Other vendors relate to it by
    category, average amount within 20%, name similarity or a shared
    payment processor; each vendor keeps its best relationship score.

    Returns:
        Related vendors sorted by score (empty when the target is unknown)
    """
    wanted = vendor_name.lower()
    target = next(
        (p for p in analysis.profiles.values()
         if wanted in p.canonical_key or wanted in p.display_name.lower()),
        None,
    )
    if target is None:
        return []

    target_processor = None
    if target.unmasking_metadata and target.unmasking_metadata.is_obscured:
        target_processor = target.unmasking_metadata.matched_processor

    related: Dict[str, Dict[str, Any]] = {}
    for profile in analysis.profiles.values():
        if profile.canonical_key == target.canonical_key:
            continue

        reasons = []
        if profile.category == target.category:
            reasons.append(("Same category", SAME_CATEGORY_SCORE))

        if target.average_amount > 0:
            amount_diff = abs(profile.average_amount - target.average_amount) / target.average_amount
            if amount_diff < RELATED_AMOUNT_TOLERANCE:
                reasons.append(("Similar transaction amounts", SIMILAR_AMOUNT_SCORE))

        similarity = name_similarity(profile.canonical_key, target.canonical_key)
        if similarity > RELATED_NAME_SIMILARITY:
            reasons.append(("Similar name", similarity))

        metadata = profile.unmasking_metadata
        if (target_processor and metadata and metadata.is_obscured
                and metadata.matched_processor == target_processor):
            reasons.append(("Same payment processor", SAME_PROCESSOR_SCORE))

        if reasons:
            related[profile.canonical_key] = {
                'vendor': profile.display_name,
                'reasons': [reason for reason, _ in reasons],
                'score': max(score for _, score in reasons),
                'total_spent': round(profile.total_amount, 2),
            }

    ranked = sorted(related.values(), key=lambda r: r['score'], reverse=True)
    return ranked[:limit]
