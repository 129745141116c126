"""
Obscured vendor report.

Summarises unmasking results for manual review: how many transactions went
through processors, which ones need a human, and which kinds of bad
extractions keep recurring.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import MAX_PATTERN_EXAMPLES, get_config
from unmasker.rules import is_suspicious_descriptor
from unmasker.unmasker import UnmaskResult


@dataclass
class PatternCluster:
    """A group of review items whose extractions look alike."""
    pattern: str
    count: int
    examples: List[str] = field(default_factory=list)


@dataclass
class ObscuredVendorReport:
    """Aggregate report over the unmasking results of one analysis run."""
    total_obscured: int = 0
    by_processor: Dict[str, int] = field(default_factory=dict)
    needing_review: List[UnmaskResult] = field(default_factory=list)
    suspicious_patterns: List[PatternCluster] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            'total_obscured': self.total_obscured,
            'by_processor': dict(self.by_processor),
            'needing_review': [r.to_dict() for r in self.needing_review],
            'suspicious_patterns': [
                {'pattern': c.pattern, 'count': c.count, 'examples': list(c.examples)}
                for c in self.suspicious_patterns
            ],
        }


def identify_pattern(text: str) -> str:
    """Name the kind of suspicious extraction a vendor string represents."""
    if re.fullmatch(r'[0-9]+', text):
        return "Numeric only"
    if re.fullmatch(r'[A-Z]{2,5}', text):
        return "Uppercase abbreviation"
    if len(text) < 3:
        return "Too short"
    if is_suspicious_descriptor(text):
        return "Generic descriptor"
    return "Other suspicious"


def generate_obscured_vendor_report(
    results: List[UnmaskResult],
    max_review_items: Optional[int] = None
) -> ObscuredVendorReport:
    """
    Build the obscured vendor report.

    Args:
        results: Unmask results, one per transaction, in input order
        max_review_items: Cap on the review list (defaults to the
            max_review_items setting)

    Returns:
        ObscuredVendorReport with processor counts, the capped review list
        and pattern clusters sorted by size
    """
    if max_review_items is None:
        max_review_items = get_config().get("max_review_items")
    obscured = [r for r in results if r.is_obscured]
    needing_review = [r for r in obscured if r.needs_manual_review]

    by_processor: Dict[str, int] = {}
    for result in obscured:
        by_processor[result.matched_processor] = by_processor.get(result.matched_processor, 0) + 1

    clusters: Dict[str, List[str]] = {}
    for result in needing_review:
        pattern = identify_pattern(result.extracted_vendor)
        clusters.setdefault(pattern, []).append(result.original_description)

    suspicious_patterns = sorted(
        (
            PatternCluster(
                pattern=pattern,
                count=len(examples),
                examples=examples[:MAX_PATTERN_EXAMPLES],
            )
            for pattern, examples in clusters.items()
        ),
        key=lambda c: c.count,
        reverse=True,
    )

    return ObscuredVendorReport(
        total_obscured=len(obscured),
        by_processor=by_processor,
        needing_review=needing_review[:max_review_items],
        suspicious_patterns=suspicious_patterns,
    )
