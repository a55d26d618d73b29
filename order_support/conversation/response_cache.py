"""
Response cache keyed by the full conversation transcript.

Identical conversational trajectories get identical replies, which keeps
the scripted experience deterministic and saves repeated model calls.
Entries are never evicted: the cache grows for the process lifetime.
"""

import json
import logging
import threading
from typing import Optional, Sequence

from order_support.schemas.session_schema import ChatMessage

logger = logging.getLogger(__name__)


class ResponseCache:
    """Thread-safe transcript -> reply map."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, str] = {}

    @staticmethod
    def make_key(history: Sequence[ChatMessage]) -> str:
        """Serialize the ordered (role, content) pairs of a transcript."""
        return json.dumps(
            [m.to_dict() for m in history], ensure_ascii=False, separators=(",", ":")
        )

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value
        logger.debug("Cached reply (%d entries)", len(self))

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._items
