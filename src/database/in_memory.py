"""
In-memory store backends.

Implement the repository interfaces for tests, demos and local development.
Thread-safe but not persistent - data lost on restart.
"""

import threading
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from domain.repositories import CorrectionStore, ProfileStore, TransactionStore
from models.correction import CorrectionRecord
from models.tax_calculation import TaxCalculationResult
from models.tax_profile import TaxProfile
from models.transaction import ClassifiedTransaction, TransactionType


class InMemoryTransactionStore(TransactionStore):
    """Classified transactions and tax snapshots held in process memory."""

    def __init__(self):
        self._transactions: Dict[str, List[ClassifiedTransaction]] = defaultdict(list)
        self._snapshots: Dict[str, List[TaxCalculationResult]] = defaultdict(list)
        self._lock = threading.Lock()

    def add(self, user_id: str, transaction: ClassifiedTransaction) -> None:
        """Add a classified transaction (test/demo helper)."""
        with self._lock:
            transaction.user_id = user_id
            self._transactions[user_id].append(transaction)

    def add_many(self, user_id: str, transactions: List[ClassifiedTransaction]) -> None:
        for transaction in transactions:
            self.add(user_id, transaction)

    async def query(
        self,
        user_id: str,
        start: date,
        end: date,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[ClassifiedTransaction]:
        with self._lock:
            rows = [
                t for t in self._transactions.get(user_id, [])
                if start <= t.date <= end
            ]
        if transaction_type is not None:
            rows = [t for t in rows if t.type == transaction_type]
        return sorted(rows, key=lambda t: t.date)

    async def save(self, result: TaxCalculationResult) -> None:
        with self._lock:
            self._snapshots[result.user_id].append(result)

    async def latest(
        self,
        user_id: str,
        year: int,
        quarter: Optional[int] = None,
    ) -> Optional[TaxCalculationResult]:
        with self._lock:
            matches = [
                s for s in self._snapshots.get(user_id, [])
                if s.period.year == year and s.period.quarter == quarter
            ]
        if not matches:
            return None
        return max(matches, key=lambda s: s.calculated_at)

    async def history(self, user_id: str) -> List[TaxCalculationResult]:
        with self._lock:
            snapshots = list(self._snapshots.get(user_id, []))
        return sorted(snapshots, key=lambda s: s.calculated_at, reverse=True)


class InMemoryCorrectionStore(CorrectionStore):
    """Append-only correction log held in process memory."""

    def __init__(self):
        self._records: Dict[str, List[CorrectionRecord]] = defaultdict(list)
        self._lock = threading.Lock()

    async def append(self, record: CorrectionRecord) -> None:
        with self._lock:
            self._records[record.user_id].append(record)

    async def count(self, user_id: str) -> int:
        with self._lock:
            return len(self._records.get(user_id, []))

    async def recent(self, user_id: str, limit: int) -> List[CorrectionRecord]:
        with self._lock:
            records = list(self._records.get(user_id, []))
        # Insertion order breaks timestamp ties
        ordered = list(reversed(records))
        ordered.sort(key=lambda r: r.created_at, reverse=True)
        return ordered[:limit]

    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._records.clear()


class InMemoryProfileStore(ProfileStore):
    """Tax profiles held in process memory."""

    def __init__(self, profiles: Optional[Dict[str, TaxProfile]] = None):
        self._profiles: Dict[str, TaxProfile] = dict(profiles or {})
        self._lock = threading.Lock()

    def put(self, user_id: str, profile: TaxProfile) -> None:
        with self._lock:
            self._profiles[user_id] = profile

    async def get(self, user_id: str) -> Optional[TaxProfile]:
        with self._lock:
            return self._profiles.get(user_id)
