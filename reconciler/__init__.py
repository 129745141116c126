"""Reconciliation module for duplicate charge detection."""
from reconciler.duplicate_checker import DuplicateCharge, DuplicateChargeFinder

__all__ = ["DuplicateCharge", "DuplicateChargeFinder"]
