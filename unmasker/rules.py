"""
Static lookup tables for vendor unmasking.

Contains the canonical vendor map, category keyword hints and the patterns
for generic descriptors that hide the real merchant.
"""
import re
from typing import Dict, List, Optional, Pattern

from config import DEFAULT_CATEGORY
from normalizer.vendor_name import match_keyword

# =============================================================================
# Known Vendor Mappings
# Keys are upper-case fragments seen behind processors; values are canonical
# vendor names. Order matters for substring lookups.
# =============================================================================

VENDOR_MAPPINGS: Dict[str, str] = {
    # Common PayPal merchants
    "GRUBHUB": "Grubhub Food Delivery",
    "DOORDASH": "DoorDash Food Delivery",
    "UBEREATS": "Uber Eats",
    "INSTACART": "Instacart Grocery Delivery",
    "EBAY": "eBay Marketplace",
    "ETSY": "Etsy Marketplace",

    # Common Square merchants (often local businesses)
    "COFFEE": "Local Coffee Shop",
    "CAFE": "Local Cafe",
    "RESTAURANT": "Local Restaurant",
    "BOUTIQUE": "Local Boutique",
    "SALON": "Local Salon",
    "BARBER": "Local Barber Shop",

    # Subscription services often billed through Stripe
    "SUBSTACK": "Substack Newsletter",
    "PATREON": "Patreon Creator Support",
    "MEDIUM": "Medium Subscription",
    "NOTION": "Notion Workspace",
    "CANVA": "Canva Design Tool",

    # Other commonly obscured vendors
    "ONLYFANS": "OnlyFans Subscription",
    "OF": "OnlyFans Subscription",
    "FANSLY": "Fansly Subscription",
    "TWITCH": "Twitch Subscription",
    "DISCORD": "Discord Nitro",
    "GITHUB": "GitHub Subscription",
    "CHATGPT": "ChatGPT Plus",
    "OPENAI": "OpenAI Services",
}

# =============================================================================
# Category Hints
# =============================================================================

CATEGORY_HINTS: Dict[str, List[str]] = {
    "Food & Dining": [
        "restaurant", "cafe", "coffee", "pizza", "burger", "sushi",
        "tacos", "deli", "bakery", "kitchen", "grill", "diner",
    ],
    "Transportation": ["uber", "lyft", "taxi", "parking", "toll", "metro", "transit"],
    "Entertainment": ["netflix", "spotify", "hulu", "disney", "hbo", "games", "theater", "cinema"],
    "Shopping": ["amazon", "ebay", "etsy", "walmart", "target", "shop", "store", "boutique"],
    "Subscriptions": ["subscription", "monthly", "annual", "membership", "premium", "pro", "plus"],
    "Adult Content": ["onlyfans", "of", "fansly", "manyvids", "chaturbate", "cam"],
    "Crypto/Trading": ["coinbase", "binance", "kraken", "robinhood", "etrade", "crypto", "bitcoin"],
    "Gaming": ["steam", "xbox", "playstation", "nintendo", "epic", "twitch", "discord"],
}

# =============================================================================
# Suspicious Descriptors
# Generic descriptions that say nothing about the merchant
# =============================================================================

SUSPICIOUS_DESCRIPTORS: List[Pattern] = [
    re.compile(r'^PAYMENT$', re.IGNORECASE),
    re.compile(r'^TRANSFER$', re.IGNORECASE),
    re.compile(r'^PURCHASE$', re.IGNORECASE),
    re.compile(r'^TRANSACTION$', re.IGNORECASE),
    re.compile(r'^CHARGE$', re.IGNORECASE),
    re.compile(r'^DEBIT$', re.IGNORECASE),
    re.compile(r'^POS\s+PURCHASE$', re.IGNORECASE),
    re.compile(r'^ONLINE\s+PAYMENT$', re.IGNORECASE),
    re.compile(r'^WEB\s+PAYMENT$', re.IGNORECASE),
    re.compile(r'^RECURRING$', re.IGNORECASE),
    re.compile(r'^\d+$'),
    re.compile(r'^[A-Z]{2,4}\d+$'),
]


def is_suspicious_descriptor(text: str) -> bool:
    """Check whether a description is a generic descriptor."""
    text = text.strip()
    return any(pattern.search(text) for pattern in SUSPICIOUS_DESCRIPTORS)


def lookup_known_vendor(
    vendor: str,
    mappings: Optional[Dict[str, str]] = None
) -> Optional[str]:
    """
    Map an extracted vendor name to its canonical name.

    Tries an exact key first, then substring matches in either direction.
    Keys of four characters or fewer only match on word boundaries.
    """
    if not vendor:
        return None

    mappings = VENDOR_MAPPINGS if mappings is None else mappings
    vendor_upper = vendor.upper()

    if vendor_upper in mappings:
        return mappings[vendor_upper]

    for key, mapped in mappings.items():
        if match_keyword(vendor_upper, key):
            return mapped
        if len(vendor_upper) >= 3 and vendor_upper in key:
            return mapped

    return None


def infer_category(
    text: str,
    hints: Optional[Dict[str, List[str]]] = None
) -> str:
    """
    Infer a spending category from keyword hints.

    Returns:
        The first category with a matching keyword, or the default category
    """
    if not text:
        return DEFAULT_CATEGORY

    hints = CATEGORY_HINTS if hints is None else hints
    for category, keywords in hints.items():
        for keyword in keywords:
            if match_keyword(text, keyword):
                return category

    return DEFAULT_CATEGORY
