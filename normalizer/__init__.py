"""
Normalizer module for cleaning vendor names and building canonical keys.
"""
from .vendor_name import (
    canonical_key,
    clean_vendor_name,
    display_name,
    match_keyword,
    strip_statement_noise,
    title_case,
)

__all__ = [
    'canonical_key',
    'clean_vendor_name',
    'display_name',
    'match_keyword',
    'strip_statement_noise',
    'title_case',
]
