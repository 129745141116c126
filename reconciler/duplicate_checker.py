"""
Duplicate charge detection.

Flags charges that hit the same vendor for the same amount on the same day,
which usually means a double swipe or a processor retry.
"""
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Dict, List, Tuple

if TYPE_CHECKING:
    from analysis.profile import VendorProfile


@dataclass
class DuplicateCharge:
    """A group of identical same-day charges to one vendor."""
    vendor: str
    canonical_key: str
    date: date
    amount: float
    count: int

    @property
    def extra_amount(self) -> float:
        """Amount charged beyond the first occurrence."""
        return round(self.amount * (self.count - 1), 2)

    def to_dict(self) -> dict:
        """Convert duplicate to dictionary."""
        return {
            'vendor': self.vendor,
            'canonical_key': self.canonical_key,
            'date': self.date,
            'amount': self.amount,
            'count': self.count,
            'extra_amount': self.extra_amount,
        }


class DuplicateChargeFinder:
    """
    Finds duplicate charges within vendor profiles.

    Two charges are duplicates when they share the calendar date, the
    amount to the cent and the canonical vendor key.
    """

    def find(self, profiles: List['VendorProfile']) -> List[DuplicateCharge]:
        """
        Find duplicate charges.

        Args:
            profiles: Aggregated vendor profiles

        Returns:
            Duplicate groups sorted by date, then vendor
        """
        duplicates: List[DuplicateCharge] = []

        for profile in profiles:
            grouped: Dict[Tuple[date, float], int] = {}
            for txn in profile.transactions:
                key = (txn.date, round(txn.amount, 2))
                grouped[key] = grouped.get(key, 0) + 1

            for (charge_date, amount), count in grouped.items():
                if count > 1:
                    duplicates.append(DuplicateCharge(
                        vendor=profile.display_name,
                        canonical_key=profile.canonical_key,
                        date=charge_date,
                        amount=amount,
                        count=count,
                    ))

        duplicates.sort(key=lambda d: (d.date, d.canonical_key))
        return duplicates

    def get_summary(self, duplicates: List[DuplicateCharge]) -> dict:
        """
        Summarize duplicate findings.

        Returns:
            Dictionary with group count and total overcharge
        """
        return {
            'duplicate_groups': len(duplicates),
            'duplicate_transactions': sum(d.count - 1 for d in duplicates),
            'potential_overcharge': round(sum(d.extra_amount for d in duplicates), 2),
            'status': "PASS" if not duplicates else "FAIL - Review Required",
        }
