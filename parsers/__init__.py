"""
Parsers module for loading card transactions.
"""
from .base_parser import BaseParser, LoadError, Transaction, ValidationIssue
from .csv_parser import CSVParser

__all__ = ['BaseParser', 'CSVParser', 'LoadError', 'Transaction', 'ValidationIssue']
