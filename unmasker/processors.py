"""
Payment processor signature table.

Each processor carries the regexes that recognise it in a card description,
the strategy used to pull the real merchant out of the description, and the
base confidence for that strategy. The table is evaluated in order; the first
processor whose signature matches wins.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

# Extraction strategies
METHOD_DELIMITER = "delimiter"
METHOD_POSITION = "position"
METHOD_REGEX = "regex"
METHOD_LOOKUP = "lookup"

EXTRACTION_METHODS = (METHOD_DELIMITER, METHOD_POSITION, METHOD_REGEX, METHOD_LOOKUP)


@dataclass(frozen=True)
class ProcessorRule:
    """A payment processor signature and its extraction rule."""
    name: str
    signatures: Tuple[Pattern, ...]
    method: str
    confidence: float
    delimiter: str = "*"
    position: int = 0
    capture: Optional[Pattern] = None
    cleanup_patterns: Tuple[Pattern, ...] = field(default_factory=tuple)

    def matches(self, description: str) -> bool:
        """Check if any signature matches the description."""
        return any(sig.search(description) for sig in self.signatures)


def _rx(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# =============================================================================
# Processor Rules
# Ordered: table order is the tie-break when several signatures match
# =============================================================================

PROCESSOR_RULES: List[ProcessorRule] = [
    ProcessorRule(
        name="PayPal",
        signatures=_rx(r'^PAYPAL\s*\*', r'^PP\*\d+', r'^PAYPAL\s+', r'\bPAYPAL\b.*\*'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^PAYPAL\s*\*', r'^\d+\s*'),
        confidence=0.9,
    ),
    ProcessorRule(
        name="Square",
        signatures=_rx(r'^SQ\s*\*', r'^SQUARE\s*\*', r'^SQU\*\d+', r'\bSQUARE\b.*\*', r'^GOSQ\.COM'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^SQ\w*\s*\*', r'^\d+\s*'),
        confidence=0.9,
    ),
    ProcessorRule(
        name="Stripe",
        signatures=_rx(r'^STRIPE', r'^STR\*', r'\bSTRIPE\.COM\b', r'STRIPE\s+CHARGE'),
        method=METHOD_REGEX,
        capture=re.compile(r'(?:STR\*|STRIPE[:\s]+)(.+?)(?:\s+\d{10,})?$', re.IGNORECASE),
        cleanup_patterns=_rx(r'\s+CHARGE$'),
        confidence=0.85,
    ),
    ProcessorRule(
        name="Venmo",
        signatures=_rx(r'^VENMO\s+', r'^VENMO\s*\*', r'\bVENMO\b.*PAYMENT'),
        method=METHOD_POSITION,
        position=1,
        cleanup_patterns=_rx(r'^VENMO\s+', r'\s+PAYMENT$'),
        confidence=0.8,
    ),
    ProcessorRule(
        name="CashApp",
        signatures=_rx(r'^CASH\s*APP', r'^CASH-APP', r'^CA\*\d+', r'\bCASHAPP\b'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^CA\w*\s*\*'),
        confidence=0.85,
    ),
    ProcessorRule(
        name="Zelle",
        signatures=_rx(r'^ZELLE\s+', r'\bZELLE\b.*PAYMENT', r'^ZELLE\s*TO\s+'),
        method=METHOD_REGEX,
        capture=re.compile(r'ZELLE\s+(?:TO\s+)?(.+?)(?:\s+\d{10,})?$', re.IGNORECASE),
        confidence=0.8,
    ),
    ProcessorRule(
        name="Toast",
        signatures=_rx(r'^TST\*', r'^TOAST\s+', r'\bTOASTPOS\b'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^TST\s*\*'),
        confidence=0.9,
    ),
    ProcessorRule(
        name="Clover",
        signatures=_rx(r'^CLOVER\s+', r'^CLV\*', r'\bCLOVER\b.*\*'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^CL\w+\s*\*'),
        confidence=0.85,
    ),
    ProcessorRule(
        name="Apple Pay",
        signatures=_rx(r'^APPLE\s*PAY', r'^APL\*\s*', r'\bAPPLE\.COM/BILL\b'),
        method=METHOD_POSITION,
        position=2,
        cleanup_patterns=_rx(r'^APPLE\s*PAY\s*'),
        confidence=0.75,
    ),
    ProcessorRule(
        name="Google Pay",
        signatures=_rx(r'^GOOGLE\s*PAY', r'^GOOGLE\s*\*', r'^G\.CO/'),
        method=METHOD_DELIMITER,
        cleanup_patterns=_rx(r'^GOOGLE\s*\w*\s*\*'),
        confidence=0.8,
    ),
]


def build_processor_rule(entry: Dict[str, Any]) -> Optional[ProcessorRule]:
    """
    Build a ProcessorRule from a custom_rules.yaml entry.

    Entries with a missing name, no signatures, an unknown method or an
    invalid regex are skipped.
    """
    if not isinstance(entry, dict):
        return None

    name = entry.get('name')
    method = entry.get('method', METHOD_DELIMITER)
    patterns = entry.get('patterns') or []

    if not name or not patterns or method not in EXTRACTION_METHODS:
        logger.warning("Skipping invalid processor rule: %r", entry)
        return None

    try:
        signatures = _rx(*patterns)
        cleanup = _rx(*(entry.get('cleanup_patterns') or []))
        capture = entry.get('capture')
        capture_rx = re.compile(capture, re.IGNORECASE) if capture else None
        confidence = min(max(float(entry.get('confidence', 0.8)), 0.0), 1.0)
        position = int(entry.get('position', 0))
    except re.error as e:
        logger.warning("Skipping processor rule %s: bad pattern (%s)", name, e)
        return None
    except (TypeError, ValueError) as e:
        logger.warning("Skipping processor rule %s: bad number (%s)", name, e)
        return None

    if method == METHOD_REGEX and capture_rx is None:
        logger.warning("Skipping processor rule %s: regex method needs 'capture'", name)
        return None

    return ProcessorRule(
        name=str(name),
        signatures=signatures,
        method=method,
        confidence=confidence,
        delimiter=str(entry.get('delimiter', '*')),
        position=position,
        capture=capture_rx,
        cleanup_patterns=cleanup,
    )
