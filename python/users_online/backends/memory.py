"""
In-memory presence store for development, tests and single-node deployments.
"""

import copy
import logging
import time
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

from .base import PresenceStore

logger = logging.getLogger(__name__)


class InMemoryPresenceStore(PresenceStore):
    """
    Thread-safe in-memory expiring store.

    Data structure::

        _entries = {
            "UserOnline-42": ({"recorded_at": 1700000000, "snapshot": {...}}, 1700000300.0),
            ...
        }

    Each entry is ``(value, expires_at)``. Expired entries are dropped when
    they are next touched, or in bulk by ``cleanup_expired()``.

    ``clock`` defaults to ``time.time``; pass a fake one to simulate time.

    Limitations:
        - Single-process only: other workers won't see this data.
        - Data lost on restart.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._clock = clock or time.time
        self._lock = RLock()

    def _live(self, key: str) -> Optional[Tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: Dict[str, Any], ttl: int) -> bool:
        # Copy so later mutation by the caller can't reach the stored value
        with self._lock:
            self._entries[key] = (copy.deepcopy(value), self._clock() + ttl)
        return True

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._live(key)
            return copy.deepcopy(entry[0]) if entry else None

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def cleanup_expired(self) -> int:
        """Drop every expired entry. Returns count removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Cleaned %d expired presence entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            total = len(self._entries)
        return {
            "status": "healthy",
            "backend": "memory",
            "total_entries": total,
        }
