"""
Abstract base class for presence stores.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class PresenceStore(ABC):
    """
    Abstract interface for an expiring key/value store.

    A key written with ``ttl`` seconds must stop being visible to ``get`` and
    ``has`` once that many seconds have passed. Passive expiry on access is
    enough; nothing requires active eviction. Implementations may raise on
    infrastructure errors; the tracker turns those into safe defaults.
    """

    @abstractmethod
    def put(self, key: str, value: Dict[str, Any], ttl: int) -> bool:
        """Write ``value`` under ``key`` for ``ttl`` seconds, overwriting. Returns success."""
        ...

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the live value for ``key`` or None."""
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return whether ``key`` currently holds a live value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error."""
        ...

    def health_check(self) -> Dict[str, Any]:
        """Check store health. Override for store-specific checks."""
        return {"status": "healthy", "backend": self.__class__.__name__}
