"""
Vendor aggregation.

Groups transactions into vendor profiles keyed by canonical vendor identity,
using the unmasker to see through payment processors.
"""
import logging
from typing import Dict, List, Optional, Tuple

from config import DEFAULT_CATEGORY, UNKNOWN_VENDOR, get_config
from normalizer.vendor_name import canonical_key, display_name, strip_statement_noise
from parsers.base_parser import Transaction
from analysis.profile import UnmaskingMetadata, VendorProfile
from unmasker.unmasker import UnmaskResult, VendorUnmasker

logger = logging.getLogger(__name__)


class VendorAggregator:
    """
    Builds one VendorProfile per canonical key.

    Holds state for a single analysis run; create a new aggregator for
    every batch of transactions.
    """

    def __init__(
        self,
        unmasker: Optional[VendorUnmasker] = None,
        accept_confidence: Optional[float] = None
    ):
        """
        Initialize the aggregator.

        Args:
            unmasker: Unmasker to use (a default one is built if omitted)
            accept_confidence: Minimum unmasking confidence for an extracted
                vendor name to be used as the profile identity
        """
        self.unmasker = unmasker or VendorUnmasker()
        if accept_confidence is None:
            accept_confidence = get_config().get("unmask_accept_confidence")
        self.accept_confidence = accept_confidence

        self.profiles: Dict[str, VendorProfile] = {}
        self.unmask_results: List[UnmaskResult] = []

        self._stats = {
            'total': 0,
            'obscured': 0,
            'unmasked': 0,
        }

    def aggregate(
        self,
        transactions: List[Transaction]
    ) -> Tuple[Dict[str, VendorProfile], List[UnmaskResult]]:
        """
        Aggregate transactions in input order.

        Args:
            transactions: Transactions to aggregate

        Returns:
            Tuple of (profiles by canonical key, unmask result per transaction)
        """
        for txn in transactions:
            self.add(txn)

        logger.info(
            "Aggregated %d transactions into %d vendors (%d obscured, %d unmasked)",
            self._stats['total'], len(self.profiles),
            self._stats['obscured'], self._stats['unmasked'],
        )
        return self.profiles, self.unmask_results

    def add(self, txn: Transaction) -> VendorProfile:
        """
        Unmask one transaction and fold it into its vendor profile.

        Returns:
            The profile the transaction was added to
        """
        result = self.unmasker.unmask(
            txn.raw_description,
            extended_details=txn.extended_details,
            statement_description=txn.statement_description,
            amount=txn.amount,
        )
        self.unmask_results.append(result)

        self._stats['total'] += 1
        if result.is_obscured:
            self._stats['obscured'] += 1

        name = self._vendor_name(txn, result)
        key = canonical_key(name)

        profile = self.profiles.get(key)
        if profile is None:
            profile = VendorProfile(
                canonical_key=key,
                name=name,
                display_name=display_name(name),
                first_seen=txn.date,
                last_seen=txn.date,
                category=self._category(txn, result),
                unmasking_metadata=UnmaskingMetadata(
                    matched_processor=result.matched_processor,
                    confidence=result.confidence,
                    is_obscured=result.is_obscured,
                    needs_manual_review=result.needs_manual_review,
                    original_description=result.original_description,
                ),
            )
            self.profiles[key] = profile
        elif profile.category == DEFAULT_CATEGORY:
            profile.category = self._category(txn, result)

        profile.total_amount += txn.amount
        profile.transaction_count += 1
        profile.min_amount = min(profile.min_amount, txn.amount)
        profile.max_amount = max(profile.max_amount, txn.amount)
        profile.first_seen = min(profile.first_seen, txn.date)
        profile.last_seen = max(profile.last_seen, txn.date)
        profile.transactions.append(txn)

        return profile

    def _vendor_name(self, txn: Transaction, result: UnmaskResult) -> str:
        """Pick the identity name for a transaction."""
        if result.is_obscured and result.confidence > self.accept_confidence:
            self._stats['unmasked'] += 1
            return result.extracted_vendor

        for candidate in (txn.statement_description, txn.raw_description, txn.extended_details):
            if candidate and candidate.strip():
                cleaned = strip_statement_noise(candidate.strip())
                if cleaned:
                    return cleaned

        return UNKNOWN_VENDOR

    @staticmethod
    def _category(txn: Transaction, result: UnmaskResult) -> str:
        if result.inferred_category != DEFAULT_CATEGORY:
            return result.inferred_category
        return txn.category or DEFAULT_CATEGORY

    def get_stats(self) -> dict:
        """Get aggregation statistics."""
        return self._stats.copy()
