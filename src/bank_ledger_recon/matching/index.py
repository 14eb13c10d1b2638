"""
Lookup structure over ledger transactions for one reconciliation run.

Ledger transactions are grouped by (account, exact amount) and each group is
kept sorted by date, so a bank transaction only ever looks at the few ledger
entries that share its account and amount instead of the whole ledger.
"""

from bisect import bisect_left, bisect_right
from datetime import date
from typing import Iterable, Optional
import logging

from ..models.transaction import MatchCandidateKey, NormalizedTransaction

logger = logging.getLogger(__name__)


def _date_window(center: date, tolerance_days: int) -> tuple[date, date]:
    """Inclusive [center - tolerance, center + tolerance], clamped to the date range."""
    start = center.toordinal() - tolerance_days
    end = center.toordinal() + tolerance_days
    return (
        date.fromordinal(max(start, date.min.toordinal())),
        date.fromordinal(min(end, date.max.toordinal())),
    )


class _DateBucket:
    """Ledger transactions sharing one candidate key, in ascending date order."""

    __slots__ = ("dates", "transactions")

    def __init__(self, transactions: list[NormalizedTransaction]):
        # sorted() is stable: same-day entries keep their ledger order
        ordered = sorted(transactions, key=lambda t: t.date)
        self.transactions = ordered
        self.dates = [t.date for t in ordered]

    def window(self, start: date, end: date) -> tuple[int, int]:
        return bisect_left(self.dates, start), bisect_right(self.dates, end)

    def remove(self, txn: NormalizedTransaction) -> bool:
        lo, hi = self.window(txn.date, txn.date)
        for i in range(lo, hi):
            if self.transactions[i].id == txn.id:
                del self.transactions[i]
                del self.dates[i]
                return True
        return False

    def __len__(self) -> int:
        return len(self.transactions)


class MatchingIndex:
    """
    Ledger transactions bucketed by MatchCandidateKey.

    Built fresh for every run and discarded afterwards. ``claim`` removes a
    ledger transaction so it cannot satisfy a second bank transaction; the
    caller's input sequences are never modified.
    """

    def __init__(self, buckets: dict[MatchCandidateKey, _DateBucket]):
        self._buckets = buckets

    @classmethod
    def build(cls, ledger_transactions: Iterable[NormalizedTransaction]) -> "MatchingIndex":
        grouped: dict[MatchCandidateKey, list[NormalizedTransaction]] = {}
        for txn in ledger_transactions:
            grouped.setdefault(txn.candidate_key, []).append(txn)

        buckets = {key: _DateBucket(txns) for key, txns in grouped.items()}
        logger.debug(
            f"Built matching index: {sum(len(b) for b in buckets.values())} ledger "
            f"transactions in {len(buckets)} buckets"
        )
        return cls(buckets)

    def candidates_for(self, txn: NormalizedTransaction) -> tuple[NormalizedTransaction, ...]:
        """Date-sorted ledger transactions with the same account and amount."""
        bucket = self._buckets.get(txn.candidate_key)
        if bucket is None:
            return ()
        return tuple(bucket.transactions)

    def closest_within(
        self, txn: NormalizedTransaction, tolerance_days: int
    ) -> Optional[NormalizedTransaction]:
        """
        Nearest-dated candidate no more than ``tolerance_days`` away.

        The window is inclusive at both ends. On equal distance the earliest
        ledger entry wins (earlier date, then earlier position in the ledger).
        """
        bucket = self._buckets.get(txn.candidate_key)
        if not bucket:
            return None

        lo, hi = bucket.window(*_date_window(txn.date, tolerance_days))

        best: Optional[NormalizedTransaction] = None
        best_distance = tolerance_days + 1
        for candidate in bucket.transactions[lo:hi]:
            distance = abs((candidate.date - txn.date).days)
            if distance < best_distance:
                best, best_distance = candidate, distance
        return best

    def claim(self, txn: NormalizedTransaction) -> None:
        """Take a ledger transaction out of circulation for the rest of the run."""
        bucket = self._buckets.get(txn.candidate_key)
        if bucket is None or not bucket.remove(txn):
            raise KeyError(f"Ledger transaction {txn.id} is not available in the index")
        if not bucket:
            del self._buckets[txn.candidate_key]

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
