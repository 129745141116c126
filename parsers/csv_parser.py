"""
CSV loader for canonical-column transaction files.

Expects a header row with at least date, description and amount columns.
Statement dialect detection is handled upstream; this loader only reads the
canonical layout in one pass.
"""
import logging
from typing import List, Optional

import pandas as pd

from config import OPTIONAL_COLUMNS, REQUIRED_COLUMNS, get_config
from parsers.base_parser import BaseParser, LoadError, Transaction, ValidationIssue

logger = logging.getLogger(__name__)


def _optional_text(value) -> Optional[str]:
    """Return a stripped string, or None for blanks and NaN."""
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


class CSVParser(BaseParser):
    """
    Parser for CSV files with canonical column names.

    Rows whose date or amount cannot be parsed are dropped and reported as
    validation issues. Amounts are stored as absolute values; currency
    symbols and thousands separators are stripped.
    """

    def __init__(self, filepath: str, encoding: Optional[str] = None):
        """
        Initialize the CSV parser.

        Args:
            filepath: Path to the CSV file
            encoding: File encoding (defaults to the configured encoding)
        """
        super().__init__(filepath)
        self.encoding = encoding or get_config().get("file_encoding", "utf-8-sig")

    def parse(self) -> List[Transaction]:
        """
        Parse the CSV file and return transactions.

        Returns:
            List of Transaction objects in file order

        Raises:
            LoadError: If the file cannot be read or lacks required columns
        """
        logger.info("Parsing CSV file: %s", self.filepath)

        try:
            df = pd.read_csv(self.filepath, dtype=str, encoding=self.encoding)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise LoadError(f"Could not read {self.filepath}: {e}") from e
        except pd.errors.EmptyDataError:
            raise LoadError(f"{self.filepath} is empty")

        df.columns = [str(c).strip().lower().replace(' ', '_') for c in df.columns]

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise LoadError(
                f"{self.filepath} is missing required column(s): {', '.join(missing)}"
            )

        for column in OPTIONAL_COLUMNS:
            if column not in df.columns:
                df[column] = None

        dates = pd.to_datetime(df['date'], errors='coerce', format='mixed')
        amounts = pd.to_numeric(
            df['amount'].astype(str).str.replace(r'[$,\s]', '', regex=True),
            errors='coerce',
        )

        transactions: List[Transaction] = []
        issues: List[ValidationIssue] = []

        # Row numbers are 1-based and count the header row
        for idx in range(len(df)):
            row_number = idx + 2
            row = df.iloc[idx]

            if pd.isna(dates.iloc[idx]):
                issues.append(ValidationIssue(
                    row_numbers=[row_number],
                    issue_type="invalid_date",
                    message=f"Row {row_number}: could not parse date {row['date']!r}",
                    severity="error",
                ))
                continue

            if pd.isna(amounts.iloc[idx]):
                issues.append(ValidationIssue(
                    row_numbers=[row_number],
                    issue_type="invalid_amount",
                    message=f"Row {row_number}: could not parse amount {row['amount']!r}",
                    severity="error",
                ))
                continue

            transactions.append(Transaction(
                date=dates.iloc[idx].date(),
                raw_description=_optional_text(row['description']) or "",
                amount=abs(float(amounts.iloc[idx])),
                extended_details=_optional_text(row['extended_details']),
                statement_description=_optional_text(row['statement_description']),
                category=_optional_text(row['category']),
            ))

        if issues:
            logger.warning("Dropped %d unparseable row(s) from %s", len(issues), self.filepath)

        self._transactions = transactions
        self._validation_issues = issues
        logger.info("Loaded %d transactions", len(transactions))

        return self._transactions
