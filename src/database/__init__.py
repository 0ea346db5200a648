"""
Storage backends for the engine's repository interfaces.

Only in-memory implementations ship with this package; production stores
implement domain.repositories against their own persistence layer.
"""

from .in_memory import (
    InMemoryCorrectionStore,
    InMemoryProfileStore,
    InMemoryTransactionStore,
)

__all__ = [
    "InMemoryCorrectionStore",
    "InMemoryProfileStore",
    "InMemoryTransactionStore",
]
