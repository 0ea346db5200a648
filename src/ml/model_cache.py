"""
Bounded, thread-safe cache of per-user classifier models.

Models are trained from stored corrections and live only in process memory.
The least recently used model is evicted once the cache is full; an
evicted user falls back to rule-based classification until the next
retrain.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from ml.classifiers.base import TextClassifier

logger = logging.getLogger(__name__)


@dataclass
class UserClassifierModel:
    """A trained per-user classifier. Replaced wholesale on retrain."""

    user_id: str
    classifier: "TextClassifier"
    training_examples: int
    labels: List[str] = field(default_factory=list)
    last_trained: datetime = field(default_factory=datetime.utcnow)

    def info(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "classifier": self.classifier.name,
            "training_examples": self.training_examples,
            "labels": list(self.labels),
            "last_trained": self.last_trained.isoformat(),
        }


class UserModelCache:
    """LRU map of user id to UserClassifierModel."""

    def __init__(self, max_size: int = 256):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._models: "OrderedDict[str, UserClassifierModel]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserClassifierModel]:
        with self._lock:
            model = self._models.get(user_id)
            if model is not None:
                self._models.move_to_end(user_id)
            return model

    def put(self, model: UserClassifierModel) -> None:
        """Insert or replace a user's model (last write wins)."""
        with self._lock:
            self._models[model.user_id] = model
            self._models.move_to_end(model.user_id)
            while len(self._models) > self.max_size:
                evicted, _ = self._models.popitem(last=False)
                logger.info(f"Evicted classifier model for user {evicted}")

    def evict(self, user_id: str) -> bool:
        with self._lock:
            return self._models.pop(user_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._models.clear()

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._models

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)
