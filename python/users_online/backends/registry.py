"""
Process-wide presence store and tracker registry.

Reads USERS_ONLINE['store_backend'] from Django settings:
    'cache' (default) — DjangoCachePresenceStore on USERS_ONLINE['cache_store']
    'memory'          — InMemoryPresenceStore
    'redis'           — RedisPresenceStore on USERS_ONLINE['redis_url']

Both objects are built once, on first use, and reset when the
USERS_ONLINE setting changes.
"""

import logging
from typing import Optional

from django.core.exceptions import ImproperlyConfigured

from .base import PresenceStore

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("cache", "memory", "redis")

_store: Optional[PresenceStore] = None
_tracker = None


def build_presence_store(config=None) -> PresenceStore:
    """
    Build a new store from configuration.

    Configuration in settings.py::

        USERS_ONLINE = {
            'store_backend': 'redis',
            'redis_url': 'redis://localhost:6379/2',
            'redis_key_prefix': 'site1:',
        }
    """
    if config is None:
        from ..config import get_config

        config = get_config()

    backend_type = config.get("store_backend", "cache")

    if backend_type == "cache":
        from .cache import DjangoCachePresenceStore

        store = DjangoCachePresenceStore(alias=config.cache_store)
    elif backend_type == "memory":
        from .memory import InMemoryPresenceStore

        store = InMemoryPresenceStore()
    elif backend_type == "redis":
        from .redis import RedisPresenceStore

        store = RedisPresenceStore(
            redis_url=config.get("redis_url", "redis://localhost:6379/0"),
            key_prefix=config.get("redis_key_prefix", ""),
        )
    else:
        raise ImproperlyConfigured(
            f"USERS_ONLINE['store_backend'] must be one of {', '.join(STORE_BACKENDS)}; "
            f"got {backend_type!r}."
        )

    logger.info("Initialized presence store: %s", backend_type)
    return store


def get_presence_store() -> PresenceStore:
    """Get or initialize the configured presence store."""
    global _store
    if _store is None:
        _store = build_presence_store()
    return _store


def set_presence_store(store: PresenceStore) -> None:
    """Manually set the presence store (useful for testing)."""
    global _store
    _store = store


def reset_presence_store() -> None:
    """Reset to force re-initialization on next access."""
    global _store
    _store = None


def get_presence_tracker():
    """Get or initialize the tracker used by the auth signal handlers."""
    global _tracker
    if _tracker is None:
        from ..presence import PresenceTracker

        _tracker = PresenceTracker.from_settings()
    return _tracker


def set_presence_tracker(tracker) -> None:
    """Manually set the process-wide tracker (useful for testing)."""
    global _tracker
    _tracker = tracker


def reset_presence_tracker() -> None:
    global _tracker
    _tracker = None
