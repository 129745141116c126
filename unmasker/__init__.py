"""
Unmasker module for recovering merchants hidden behind payment processors.
"""
from .processors import PROCESSOR_RULES, ProcessorRule
from .unmasker import UnmaskResult, VendorUnmasker
from .report import ObscuredVendorReport, generate_obscured_vendor_report

__all__ = [
    'PROCESSOR_RULES',
    'ProcessorRule',
    'UnmaskResult',
    'VendorUnmasker',
    'ObscuredVendorReport',
    'generate_obscured_vendor_report',
]
