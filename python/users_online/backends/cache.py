"""
Django cache presence store.

Delegates to one of the caches configured in ``settings.CACHES`` so presence
lives wherever the project already keeps its cache (Redis, Memcached,
database, local memory). Expiry is the cache's own ``timeout``.
"""

import logging
from typing import Any, Dict, Optional

from django.core.cache import DEFAULT_CACHE_ALIAS, caches

from .base import PresenceStore

logger = logging.getLogger(__name__)


class DjangoCachePresenceStore(PresenceStore):
    """
    Presence store backed by ``django.core.cache.caches[alias]``.

    The cache is looked up on every call rather than held, so
    ``override_settings(CACHES=...)`` in tests is picked up.
    """

    def __init__(self, alias: Optional[str] = None) -> None:
        self.alias = alias or DEFAULT_CACHE_ALIAS

    @property
    def cache(self):
        return caches[self.alias]

    def put(self, key: str, value: Dict[str, Any], ttl: int) -> bool:
        self.cache.set(key, value, timeout=ttl)
        return True

    def get(self, key: str) -> Any:
        return self.cache.get(key)

    def has(self, key: str) -> bool:
        return self.cache.has_key(key)

    def remove(self, key: str) -> None:
        self.cache.delete(key)

    def health_check(self) -> Dict[str, Any]:
        try:
            backend = type(self.cache).__name__
        except Exception as e:
            logger.warning("Presence cache %r unavailable: %s", self.alias, e)
            return {
                "status": "unhealthy",
                "backend": "cache",
                "alias": self.alias,
                "error": str(e),
            }
        return {
            "status": "healthy",
            "backend": "cache",
            "alias": self.alias,
            "cache_class": backend,
        }
