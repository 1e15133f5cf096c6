"""
Queries over the set of known entities: who is online, in which order.

The engine never writes. It takes a universe of entities (by default every
user of ``AUTH_USER_MODEL``, ordered by primary key), asks the tracker about
each one, and returns plain lists.

Example usage:

    from users_online.query import PresenceQuery

    query = PresenceQuery()
    query.all_present()               # [<User: ada>, <User: bob>]
    query.most_recently_present()     # newest login first
    query.least_recently_present()    # oldest login first
"""

import logging
from typing import Any, Callable, Iterable, List, Optional

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def all_users():
    """Default universe: every user, ordered by primary key."""
    User = get_user_model()
    return User._default_manager.order_by("pk")


def get_universe_provider() -> Callable[[], Iterable[Any]]:
    """
    Resolve USERS_ONLINE['universe'] to a callable.

    Configuration in settings.py::

        USERS_ONLINE = {
            'universe': 'accounts.presence.active_members',
        }
    """
    from .config import get_config

    provider = get_config().get("universe")
    if provider is None:
        return all_users
    if isinstance(provider, str):
        logger.debug("Presence universe from %s", provider)
        return import_string(provider)
    return provider


class PresenceQuery:
    """
    Filters and orders a universe of entities by presence.

    Args:
        tracker: PresenceTracker used for every per-entity read; defaults to
            the process-wide tracker
        universe: Zero-argument callable returning all known entities;
            defaults to USERS_ONLINE['universe'] or all users
    """

    def __init__(self, tracker=None, universe: Optional[Callable[[], Iterable[Any]]] = None):
        if tracker is None:
            from .backends.registry import get_presence_tracker

            tracker = get_presence_tracker()
        self.tracker = tracker
        self._universe = universe

    def get_universe(self) -> Iterable[Any]:
        provider = self._universe or get_universe_provider()
        return provider()

    def all_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        """
        Entities with a live presence record, in the universe's own order.
        """
        if universe is None:
            universe = self.get_universe()
        return [entity for entity in universe if self.tracker.is_present(entity)]

    def _by_last_seen(self, universe, newest_first: bool) -> List[Any]:
        present = self.all_present(universe)
        # One read per entity; sorted() is stable in both directions
        stamped = [(self.tracker.last_seen_at(entity), entity) for entity in present]
        stamped.sort(key=lambda pair: pair[0], reverse=newest_first)
        return [entity for _, entity in stamped]

    def most_recently_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        """
        Present entities, newest ``last_seen_at`` first.

        Ties keep universe order. A record with a corrupt timestamp counts
        as 0 and sorts last.
        """
        return self._by_last_seen(universe, newest_first=True)

    def least_recently_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        """Present entities, oldest ``last_seen_at`` first. Ties keep universe order."""
        return self._by_last_seen(universe, newest_first=False)

    def count_present(self, universe: Optional[Iterable[Any]] = None) -> int:
        return len(self.all_present(universe))

    def present_keys(self, universe: Optional[Iterable[Any]] = None) -> List[str]:
        """Presence keys of the entities currently online."""
        return [self.tracker.presence_key(entity) for entity in self.all_present(universe)]

    # ------------------------------------------------------------------
    # Async variants
    # ------------------------------------------------------------------

    async def aall_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        return await sync_to_async(self.all_present)(universe)

    async def amost_recently_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        return await sync_to_async(self.most_recently_present)(universe)

    async def aleast_recently_present(self, universe: Optional[Iterable[Any]] = None) -> List[Any]:
        return await sync_to_async(self.least_recently_present)(universe)
