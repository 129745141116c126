"""
Confidence resolution, fallback recovery and vendor suggestions.

Decides how far an extracted vendor name can be trusted, recovers a best
guess from generic descriptors, and proposes candidate vendors for manual
review.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import (
    DEGENERATE_EXTRACTION_CONFIDENCE,
    EMPTY_EXTRACTION_CONFIDENCE,
    MAX_SUGGESTIONS,
    REVIEW_CONFIDENCE_THRESHOLD,
    UNKNOWN_VENDOR,
)
from normalizer.vendor_name import clean_vendor_name, match_keyword
from unmasker.rules import CATEGORY_HINTS, VENDOR_MAPPINGS, is_suspicious_descriptor

_NOISE_PATTERNS = [
    re.compile(r'\b\d{4,}\b'),
    re.compile(r'\bPAYMENT\b', re.IGNORECASE),
    re.compile(r'\bTRANSFER\b', re.IGNORECASE),
    re.compile(r'\bPURCHASE\b', re.IGNORECASE),
]
_EMAIL = re.compile(r'[\w.-]+@[\w.-]+')
_URL = re.compile(r'[\w-]+\.(?:com|net|org|io)', re.IGNORECASE)
_DOLLAR_AMOUNT = re.compile(r'\$(\d+\.\d{2})')


@dataclass
class Resolution:
    """Final vendor name and confidence for one extraction."""
    vendor: str
    confidence: float
    needs_manual_review: bool
    possible_vendors: List[str] = field(default_factory=list)


def is_suspicious_extraction(vendor: str) -> bool:
    """Check if an extraction is too degenerate to trust."""
    return (
        len(vendor) < 3
        or vendor.isdigit()
        or bool(re.fullmatch(r'[A-Z]{2,4}', vendor))
        or is_suspicious_descriptor(vendor)
    )


class ConfidenceResolver:
    """
    Combines processor confidence with extraction-quality heuristics.

    Rules:
    1. Empty extraction -> "Unknown Vendor" at a fixed low confidence
    2. Degenerate extraction -> confidence capped, manual review
    3. Low-confidence processor -> manual review at base confidence
    4. Otherwise -> processor base confidence
    """

    def __init__(
        self,
        vendor_mappings: Optional[Dict[str, str]] = None,
        category_hints: Optional[Dict[str, List[str]]] = None,
        review_threshold: float = REVIEW_CONFIDENCE_THRESHOLD
    ):
        self.vendor_mappings = VENDOR_MAPPINGS if vendor_mappings is None else vendor_mappings
        self.category_hints = CATEGORY_HINTS if category_hints is None else category_hints
        self.review_threshold = review_threshold

    def resolve(
        self,
        vendor: str,
        base_confidence: float,
        full_context: str,
        amount: Optional[float] = None,
        raw_vendor: Optional[str] = None
    ) -> Resolution:
        """
        Resolve confidence for a normalized, canonicalized vendor name.

        Args:
            vendor: Extracted vendor after normalization (may be empty)
            base_confidence: The matched processor's base confidence
            full_context: All description fields joined together
            amount: Transaction amount, used for suggestion heuristics
            raw_vendor: Extraction before title-casing; when given, quality
                checks run on it so upper-case codes are still caught

        Returns:
            Resolution with the final name, confidence and review flag
        """
        if not vendor:
            return Resolution(
                vendor=UNKNOWN_VENDOR,
                confidence=EMPTY_EXTRACTION_CONFIDENCE,
                needs_manual_review=True,
                possible_vendors=self.suggest_possible_vendors(full_context, amount),
            )

        degenerate = is_suspicious_extraction(raw_vendor if raw_vendor else vendor)
        confidence = base_confidence
        if degenerate:
            confidence = min(base_confidence, DEGENERATE_EXTRACTION_CONFIDENCE)

        needs_review = degenerate or base_confidence < self.review_threshold
        suggestions = self.suggest_possible_vendors(full_context, amount) if needs_review else []

        return Resolution(
            vendor=vendor,
            confidence=confidence,
            needs_manual_review=needs_review,
            possible_vendors=suggestions,
        )

    def attempt_vendor_recovery(self, full_context: str) -> str:
        """
        Recover a vendor name from a generic description's full context.

        Looks for an email domain, then a URL, then the first run of
        capitalized words.
        """
        cleaned = full_context
        for pattern in _NOISE_PATTERNS:
            cleaned = pattern.sub('', cleaned)

        email = _EMAIL.search(cleaned)
        if email:
            domain = email.group(0).split('@')[1].split('.')[0]
            recovered = clean_vendor_name(domain)
            if recovered:
                return recovered

        url = _URL.search(cleaned)
        if url:
            return clean_vendor_name(url.group(0).split('.')[0])

        run: List[str] = []
        for word in cleaned.split():
            if len(word) > 2 and word[0].isupper():
                run.append(word)
            elif run:
                break

        if run:
            return ' '.join(run)

        return UNKNOWN_VENDOR

    def suggest_possible_vendors(
        self,
        context: str,
        amount: Optional[float] = None
    ) -> List[str]:
        """
        Suggest candidate vendors for manual review.

        Returns:
            Up to MAX_SUGGESTIONS unique suggestions in discovery order
        """
        suggestions: List[str] = []

        def add(suggestion: str) -> None:
            if suggestion not in suggestions:
                suggestions.append(suggestion)

        for key, mapped in self.vendor_mappings.items():
            if match_keyword(context, key):
                add(mapped)

        for category, keywords in self.category_hints.items():
            if any(match_keyword(context, kw) for kw in keywords):
                add(f"Likely {category} vendor")

        if amount is None:
            match = _DOLLAR_AMOUNT.search(context)
            if match:
                amount = float(match.group(1))

        if amount is not None:
            cents = round(amount * 100) % 100
            if 9.99 <= amount <= 19.99 and cents == 99:
                add("Possible subscription service")
            elif 5 <= amount <= 15:
                add("Possible food/coffee purchase")

        return suggestions[:MAX_SUGGESTIONS]
