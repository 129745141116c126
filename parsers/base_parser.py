"""
Abstract base class for transaction loaders.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Transaction:
    """
    Represents a single card transaction.

    Transactions are read-only once loaded; everything downstream derives
    new objects from them.
    """
    date: date
    raw_description: str
    amount: float
    extended_details: Optional[str] = None
    statement_description: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to dictionary."""
        return {
            'date': self.date,
            'raw_description': self.raw_description,
            'amount': self.amount,
            'extended_details': self.extended_details,
            'statement_description': self.statement_description,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Create transaction from dictionary."""
        return cls(
            date=data['date'],
            raw_description=data.get('raw_description', ''),
            amount=abs(float(data.get('amount', 0.0))),
            extended_details=data.get('extended_details'),
            statement_description=data.get('statement_description'),
            category=data.get('category'),
        )


@dataclass
class ValidationIssue:
    """
    Represents a validation issue found while loading.
    """
    row_numbers: List[int]
    issue_type: str
    message: str
    severity: str = "warning"  # "warning" or "error"


class LoadError(Exception):
    """Raised when a transaction file cannot be loaded at all."""
    pass


class BaseParser(ABC):
    """
    Abstract base class for transaction loaders.
    """

    def __init__(self, filepath: str):
        """
        Initialize the parser with a file path.

        Args:
            filepath: Path to the transaction file
        """
        self.filepath = filepath
        self._transactions: List[Transaction] = []
        self._validation_issues: List[ValidationIssue] = []

    @abstractmethod
    def parse(self) -> List[Transaction]:
        """
        Parse the file and return transactions.

        Returns:
            List of Transaction objects
        """
        pass

    def validate(self) -> List[ValidationIssue]:
        """
        Check the parsed transactions for suspicious but loadable values.

        Issues recorded during parsing (dropped rows) are kept.

        Returns:
            List of ValidationIssue objects
        """
        issues = [i for i in self._validation_issues if i.severity == "error"]

        for i, txn in enumerate(self._transactions):
            if not txn.raw_description.strip():
                issues.append(ValidationIssue(
                    row_numbers=[i + 1],
                    issue_type="missing_description",
                    message=f"Transaction {i+1} has no description",
                ))

            if txn.amount == 0:
                issues.append(ValidationIssue(
                    row_numbers=[i + 1],
                    issue_type="zero_amount",
                    message=f"Transaction {i+1} has a zero amount",
                ))

        self._validation_issues = issues
        return issues

    @property
    def transactions(self) -> List[Transaction]:
        """Get the parsed transactions."""
        return self._transactions

    @property
    def validation_issues(self) -> List[ValidationIssue]:
        """Get validation issues."""
        return self._validation_issues

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the parsed transactions.

        Returns:
            Dictionary with summary statistics
        """
        if not self._transactions:
            return {
                'total_transactions': 0,
                'total_amount': 0.0,
                'date_range': (None, None),
            }

        dates = [t.date for t in self._transactions]

        return {
            'total_transactions': len(self._transactions),
            'total_amount': round(sum(t.amount for t in self._transactions), 2),
            'date_range': (min(dates), max(dates)),
        }
