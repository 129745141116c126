"""
Main vendor unmasking orchestrator.

Detects payment processors in card descriptions, extracts the real merchant,
and scores how far the result can be trusted.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import (
    DEFAULT_CATEGORY,
    DIRECT_CONFIDENCE,
    SUSPICIOUS_CONFIDENCE,
    get_config,
    load_rules_file,
)
from normalizer.vendor_name import clean_vendor_name
from unmasker.confidence import ConfidenceResolver
from unmasker.extractor import extract_vendor
from unmasker.processors import PROCESSOR_RULES, ProcessorRule, build_processor_rule
from unmasker.rules import (
    CATEGORY_HINTS,
    VENDOR_MAPPINGS,
    infer_category,
    is_suspicious_descriptor,
    lookup_known_vendor,
)

logger = logging.getLogger(__name__)

PROCESSOR_DIRECT = "Direct"
PROCESSOR_UNKNOWN = "Unknown"

METHOD_DIRECT = "direct"
METHOD_SUSPICIOUS = "suspicious_pattern"


@dataclass
class UnmaskResult:
    """Result of unmasking one transaction description."""
    original_description: str
    matched_processor: str
    extracted_vendor: str
    confidence: float
    needs_manual_review: bool
    is_obscured: bool
    extraction_method: str
    inferred_category: str = DEFAULT_CATEGORY
    possible_vendors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            'original_description': self.original_description,
            'matched_processor': self.matched_processor,
            'extracted_vendor': self.extracted_vendor,
            'confidence': self.confidence,
            'needs_manual_review': self.needs_manual_review,
            'is_obscured': self.is_obscured,
            'extraction_method': self.extraction_method,
            'inferred_category': self.inferred_category,
            'possible_vendors': list(self.possible_vendors),
        }


class VendorUnmasker:
    """
    Exposes real vendors hidden behind payment processors.

    Strategy:
    1. Match the description against the processor table (first match wins)
    2. If a processor matches, extract, normalize and resolve confidence
    3. If no processor matches but the description is generic, try to
       recover a vendor from the other fields at low confidence
    4. Otherwise the description names the merchant directly
    """

    def __init__(
        self,
        custom_rules_path: Optional[str] = None,
        custom_rules: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the unmasker.

        Args:
            custom_rules_path: Path to custom_rules.yaml (optional)
            custom_rules: Already-loaded custom rules (optional). If neither
                is given, rules come from the Config singleton.
        """
        if custom_rules is None:
            if custom_rules_path is not None:
                custom_rules = load_rules_file(custom_rules_path)
            else:
                custom_rules = get_config().custom_rules
        self.custom_rules: Dict[str, Any] = custom_rules

        self.vendor_mappings: Dict[str, str] = dict(VENDOR_MAPPINGS)
        for key, vendor in (custom_rules.get('custom_vendors') or {}).items():
            self.vendor_mappings[str(key).upper()] = str(vendor)

        self.category_hints: Dict[str, List[str]] = {
            category: list(keywords) for category, keywords in CATEGORY_HINTS.items()
        }
        for category, keywords in (custom_rules.get('category_hints') or {}).items():
            self.category_hints.setdefault(category, []).extend(keywords or [])

        custom_processors = [
            rule for rule in (
                build_processor_rule(entry)
                for entry in custom_rules.get('custom_processors') or []
            )
            if rule is not None
        ]
        self.processor_rules: List[ProcessorRule] = custom_processors + PROCESSOR_RULES

        if custom_processors:
            logger.info("Loaded %d custom processor rule(s)", len(custom_processors))

        self.resolver = ConfidenceResolver(
            vendor_mappings=self.vendor_mappings,
            category_hints=self.category_hints,
            review_threshold=get_config().get("review_confidence_threshold"),
        )

    def detect_processor(self, description: str) -> Optional[ProcessorRule]:
        """Return the first processor rule matching the description."""
        for rule in self.processor_rules:
            if rule.matches(description):
                return rule
        return None

    def unmask(
        self,
        description: str,
        extended_details: Optional[str] = None,
        statement_description: Optional[str] = None,
        amount: Optional[float] = None
    ) -> UnmaskResult:
        """
        Unmask the vendor behind a card description.

        Args:
            description: Raw card description
            extended_details: Extra merchant details, if the issuer provides them
            statement_description: "Appears on your statement as" text
            amount: Transaction amount, used for suggestion heuristics

        Returns:
            UnmaskResult for the description
        """
        description = description or ""
        full_context = ' '.join(
            part for part in (description, extended_details, statement_description) if part
        )

        rule = self.detect_processor(description)
        if rule is not None:
            return self._extract_from_processor(description, rule, full_context, amount)

        if is_suspicious_descriptor(description):
            logger.debug("Generic descriptor %r, attempting recovery", description)
            return UnmaskResult(
                original_description=description,
                matched_processor=PROCESSOR_UNKNOWN,
                extracted_vendor=self.resolver.attempt_vendor_recovery(full_context),
                confidence=SUSPICIOUS_CONFIDENCE,
                needs_manual_review=True,
                is_obscured=True,
                extraction_method=METHOD_SUSPICIOUS,
                inferred_category=infer_category(full_context, self.category_hints),
                possible_vendors=self.resolver.suggest_possible_vendors(full_context, amount),
            )

        return UnmaskResult(
            original_description=description,
            matched_processor=PROCESSOR_DIRECT,
            extracted_vendor=clean_vendor_name(description),
            confidence=DIRECT_CONFIDENCE,
            needs_manual_review=False,
            is_obscured=False,
            extraction_method=METHOD_DIRECT,
            inferred_category=infer_category(description, self.category_hints),
        )

    def _extract_from_processor(
        self,
        description: str,
        rule: ProcessorRule,
        full_context: str,
        amount: Optional[float]
    ) -> UnmaskResult:
        """Extract and score the vendor behind a matched processor."""
        raw = extract_vendor(rule, description, full_context, self.vendor_mappings)
        vendor = clean_vendor_name(raw)

        mapped = lookup_known_vendor(vendor, self.vendor_mappings)
        if mapped:
            vendor = mapped

        resolution = self.resolver.resolve(
            vendor,
            rule.confidence,
            full_context,
            amount=amount,
            raw_vendor=None if mapped else ' '.join(raw.split()),
        )

        logger.debug(
            "%s -> %s via %s (confidence %.2f)",
            description, resolution.vendor, rule.name, resolution.confidence,
        )

        return UnmaskResult(
            original_description=description,
            matched_processor=rule.name,
            extracted_vendor=resolution.vendor,
            confidence=resolution.confidence,
            needs_manual_review=resolution.needs_manual_review,
            is_obscured=True,
            extraction_method=rule.method,
            inferred_category=infer_category(vendor or full_context, self.category_hints),
            possible_vendors=resolution.possible_vendors,
        )
