"""
Vendor name normalization.

Cleans candidate vendor strings pulled out of card descriptions and reduces
them to the canonical keys used to merge description variants of one vendor.
"""
import re
from typing import Dict, Optional

from config import UNKNOWN_VENDOR

# Company name normalization map (ticker-style and shorthand names)
COMPANY_NORMALIZATION: Dict[str, str] = {
    "amazonses": "Amazon",
    "aws": "Amazon Web Services",
    "msft": "Microsoft",
    "goog": "Google",
    "aapl": "Apple",
    "nflx": "Netflix",
    "spfy": "Spotify",
    "adbe": "Adobe",
    "uber": "Uber",
    "lyft": "Lyft",
    "amzn": "Amazon",
    "wmt": "Walmart",
    "tgt": "Target",
    "sbux": "Starbucks",
}

_LEGAL_SUFFIX = re.compile(r'\s+(inc|llc|ltd|corp|company|co)\.?$', re.IGNORECASE)
_LEADING_TOKENS = re.compile(r'^([a-z]+(?:\s+[a-z]+)?)')


def match_keyword(text: str, keyword: str) -> bool:
    """
    Check if a keyword occurs in text.

    Very short keywords (1-2 chars) must be whitespace delimited and short
    keywords (3-4 chars) must sit on word boundaries; longer keywords match
    as plain substrings. Both arguments are compared case-insensitively.
    """
    keyword = keyword.lower().strip()
    text = text.lower()
    if not keyword:
        return False

    if len(keyword) <= 2:
        pattern = r'(?:^|\s)' + re.escape(keyword) + r'(?:\s|$)'
        return bool(re.search(pattern, text))

    if len(keyword) <= 4:
        pattern = r'\b' + re.escape(keyword) + r'\b'
        return bool(re.search(pattern, text))

    return keyword in text


def title_case(text: str) -> str:
    """Upper-case the first letter of each space-separated word, lower the rest."""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in text.split(' '))


def clean_vendor_name(vendor: str) -> str:
    """
    Clean up an extracted vendor name.

    - Remove trailing numeric IDs and store numbers
    - Remove LLC/INC/CORP suffixes
    - Drop punctuation other than & ' -
    - Collapse whitespace and title-case
    """
    if not vendor:
        return ""

    vendor = re.sub(r'\s+\d{4,}$', '', vendor)
    vendor = re.sub(r'\s+#\d+$', '', vendor)
    vendor = re.sub(r'\s+LLC$', '', vendor, flags=re.IGNORECASE)
    vendor = re.sub(r'\s+INC$', '', vendor, flags=re.IGNORECASE)
    vendor = re.sub(r'\s+CORP$', '', vendor, flags=re.IGNORECASE)
    vendor = re.sub(r"[^\w\s&'-]", ' ', vendor)
    vendor = ' '.join(vendor.split())

    return title_case(vendor)


def strip_statement_noise(name: str) -> str:
    """Remove trailing *1234 references, MM/DD dates and #store numbers."""
    name = re.sub(r'\*\d+$', '', name)
    name = re.sub(r'\s+\d{2}/\d{2}$', '', name)
    name = re.sub(r'\s+#\d+$', '', name)
    return name.strip()


def lookup_company(normalized: str) -> Optional[str]:
    """
    Return the canonical company name for a normalized vendor, if known.

    Shorthands must start a word but may run into the rest of it, so
    "ubereats" and "amznmktp" resolve while "laws" does not hit "aws".
    """
    for pattern, company in COMPANY_NORMALIZATION.items():
        if re.search(r'\b' + re.escape(pattern), normalized):
            return company
    return None


def canonical_key(name: str) -> str:
    """
    Reduce a vendor name to its canonical key.

    The key is lowercase, has legal suffixes removed, and is either the known
    company name or the leading one or two alphabetic tokens.
    """
    normalized = ' '.join(name.lower().split())
    normalized = _LEGAL_SUFFIX.sub('', normalized)

    company = lookup_company(normalized)
    if company:
        return company.lower()

    match = _LEADING_TOKENS.match(normalized)
    key = match.group(1) if match else normalized
    return key or UNKNOWN_VENDOR.lower()


def display_name(name: str) -> str:
    """Create a clean display name for a vendor."""
    key = canonical_key(name)
    for company in COMPANY_NORMALIZATION.values():
        if key == company.lower():
            return company
    return title_case(' '.join(name.split()))
