"""
users_online: know which users of a Django site are online right now.

A login writes an expiring presence record to the cache; a logout or the
cache's own expiry removes it. ``PresenceTracker`` manages single records,
``PresenceQuery`` lists and orders who is online.
"""

from .entities import PresenceAware
from .exceptions import InvalidDuration, InvalidIdentity, StoreFailure, UsersOnlineError
from .presence import PresenceTracker
from .query import PresenceQuery
from .records import PresenceRecord

__version__ = "1.0.0"

__all__ = [
    "PresenceAware",
    "PresenceQuery",
    "PresenceRecord",
    "PresenceTracker",
    "InvalidDuration",
    "InvalidIdentity",
    "StoreFailure",
    "UsersOnlineError",
]
