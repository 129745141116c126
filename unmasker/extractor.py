"""
Vendor extraction strategies.

Each strategy takes a raw processor description and returns the candidate
merchant text, or an empty string when nothing usable is found.
"""
from typing import Dict, Iterable, Optional, Pattern

from normalizer.vendor_name import match_keyword
from unmasker.processors import (
    METHOD_DELIMITER,
    METHOD_LOOKUP,
    METHOD_POSITION,
    METHOD_REGEX,
    ProcessorRule,
)
from unmasker.rules import VENDOR_MAPPINGS


def apply_cleanup(text: str, cleanup_patterns: Iterable[Pattern]) -> str:
    """Remove each cleanup pattern from text in order."""
    for pattern in cleanup_patterns:
        text = pattern.sub('', text, count=1).strip()
    return text


def extract_by_delimiter(
    text: str,
    delimiter: str,
    cleanup_patterns: Iterable[Pattern] = ()
) -> str:
    """Take the token after the first delimiter and clean it up."""
    parts = text.split(delimiter)
    if len(parts) < 2:
        return ""

    return apply_cleanup(parts[1].strip(), cleanup_patterns)


def extract_by_position(
    text: str,
    position: int,
    cleanup_patterns: Iterable[Pattern] = ()
) -> str:
    """Clean up the text, then drop the first `position` words."""
    vendor = apply_cleanup(text, cleanup_patterns)
    return ' '.join(vendor.split()[position:])


def extract_by_regex(
    text: str,
    regex: Optional[Pattern],
    cleanup_patterns: Iterable[Pattern] = ()
) -> str:
    """Use the first capture group of regex as the vendor."""
    if regex is None:
        return ""

    match = regex.search(text)
    if not match or not match.group(1):
        return ""

    return apply_cleanup(match.group(1).strip(), cleanup_patterns)


def extract_by_lookup(
    full_context: str,
    mappings: Optional[Dict[str, str]] = None
) -> str:
    """Return the canonical vendor for the first known key found in context."""
    mappings = VENDOR_MAPPINGS if mappings is None else mappings
    for key, vendor in mappings.items():
        if match_keyword(full_context, key):
            return vendor
    return ""


def extract_vendor(
    rule: ProcessorRule,
    description: str,
    full_context: str,
    mappings: Optional[Dict[str, str]] = None
) -> str:
    """
    Run the extraction strategy configured for a processor.

    Args:
        rule: The matched processor rule
        description: Raw card description
        full_context: Description plus extended/statement details
        mappings: Canonical vendor map used by the lookup strategy

    Returns:
        The raw extracted vendor text (may be empty)
    """
    if rule.method == METHOD_DELIMITER:
        return extract_by_delimiter(description, rule.delimiter, rule.cleanup_patterns)
    if rule.method == METHOD_POSITION:
        return extract_by_position(description, rule.position, rule.cleanup_patterns)
    if rule.method == METHOD_REGEX:
        return extract_by_regex(description, rule.capture, rule.cleanup_patterns)
    if rule.method == METHOD_LOOKUP:
        return extract_by_lookup(full_context, mappings)
    return ""
