"""
Repository Interfaces for the classification and tax estimation engine.

Repository interfaces define the contract for data access. The engine only
ever talks to these abstractions; storage backends live outside this core.

This abstraction allows:
1. Swapping storage backends without touching classification or tax logic
2. Testing with in-memory implementations (see database.in_memory)
3. Clear separation between pure computation and async I/O

Store failures propagate unchanged; retries belong to the store client.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from models.correction import CorrectionRecord
from models.tax_calculation import TaxCalculationResult
from models.tax_profile import TaxProfile
from models.transaction import ClassifiedTransaction, TransactionType


class TransactionStore(ABC):
    """
    Access to a user's classified transactions and tax snapshots.
    """

    @abstractmethod
    async def query(
        self,
        user_id: str,
        start: date,
        end: date,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[ClassifiedTransaction]:
        """
        Retrieve classified transactions dated within [start, end].

        Args:
            user_id: Owner of the transactions
            start: First day, inclusive
            end: Last day, inclusive
            transaction_type: Optional filter on income/expense/transfer

        Returns:
            Matching transactions
        """
        pass

    @abstractmethod
    async def save(self, result: TaxCalculationResult) -> None:
        """
        Persist a tax calculation snapshot. Earlier snapshots are retained.

        Args:
            result: The snapshot to store
        """
        pass

    @abstractmethod
    async def latest(
        self,
        user_id: str,
        year: int,
        quarter: Optional[int] = None,
    ) -> Optional[TaxCalculationResult]:
        """
        Most recently calculated snapshot for a period.

        Returns:
            The snapshot if one exists, None otherwise
        """
        pass

    @abstractmethod
    async def history(self, user_id: str) -> List[TaxCalculationResult]:
        """All snapshots for a user, newest first."""
        pass


class CorrectionStore(ABC):
    """Append-only log of user classification corrections."""

    @abstractmethod
    async def append(self, record: CorrectionRecord) -> None:
        """Append a correction record."""
        pass

    @abstractmethod
    async def count(self, user_id: str) -> int:
        """Total corrections recorded for a user."""
        pass

    @abstractmethod
    async def recent(self, user_id: str, limit: int) -> List[CorrectionRecord]:
        """The user's most recent corrections, newest first."""
        pass


class ProfileStore(ABC):
    """Read access to user tax profiles."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[TaxProfile]:
        """
        Retrieve a user's tax profile.

        Returns:
            The profile if found, None otherwise
        """
        pass
