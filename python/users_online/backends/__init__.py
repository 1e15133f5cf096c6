"""
users_online.backends — Pluggable expiring stores for presence records.

Configured via USERS_ONLINE['store_backend']:
    'cache'   — Django cache alias (default)
    'memory'  — In-process dict (single-node only)
    'redis'   — Redis-backed (multi-node production)
"""

from .base import PresenceStore
from .cache import DjangoCachePresenceStore
from .memory import InMemoryPresenceStore
from .registry import (
    get_presence_store,
    get_presence_tracker,
    reset_presence_store,
    reset_presence_tracker,
    set_presence_store,
    set_presence_tracker,
)

__all__ = [
    "PresenceStore",
    "DjangoCachePresenceStore",
    "InMemoryPresenceStore",
    "get_presence_store",
    "get_presence_tracker",
    "reset_presence_store",
    "reset_presence_tracker",
    "set_presence_store",
    "set_presence_tracker",
]
