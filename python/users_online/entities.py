"""
Entity helpers: identity, snapshots and the PresenceAware wrapper.

An entity is anything with an identifier: a Django model instance, a plain
object, or a mapping with an ``"id"`` key. Presence behaviour is attached by
wrapping, not by inheriting from a base class::

    online = PresenceAware(request.user, tracker)
    if not online.is_online():
        online.mark_online()
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from .exceptions import InvalidIdentity

_MISSING = object()


def resolve_identity(entity: Any) -> str:
    """
    Return the entity's identifier as a string.

    Looks at ``get_presence_id()``, then ``pk``, then ``id`` (or the ``"id"``
    key of a mapping). Raises InvalidIdentity if none yields a value.
    """
    if entity is None:
        raise InvalidIdentity(entity)

    getter = getattr(entity, "get_presence_id", None)
    if callable(getter):
        identity = getter()
    elif isinstance(entity, Mapping):
        identity = entity.get("id")
    else:
        identity = getattr(entity, "pk", None)
        if identity is None:
            identity = getattr(entity, "id", None)

    if identity is None:
        raise InvalidIdentity(entity)
    identity = str(identity)
    if not identity.strip():
        raise InvalidIdentity(entity)
    return identity


def _read_field(entity: Any, name: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(name, _MISSING)
    return getattr(entity, name, _MISSING)


def build_snapshot(entity: Any, fields: Iterable[str]) -> Dict[str, Any]:
    """
    Shallow copy of the configured fields only.

    Fields the entity does not carry are left out rather than set to None.
    """
    snapshot = {}
    for name in fields:
        value = _read_field(entity, name)
        if value is _MISSING or callable(value):
            continue
        snapshot[name] = value
    return snapshot


class PresenceAware:
    """
    Presence capability for a single entity.

    Wraps any entity with an identifier and forwards to a PresenceTracker,
    so host code can ask ``user.is_online()``-style questions without the
    user class knowing anything about presence.
    """

    def __init__(self, entity: Any, tracker=None):
        if tracker is None:
            from .backends.registry import get_presence_tracker

            tracker = get_presence_tracker()
        self.entity = entity
        self.tracker = tracker

    def __repr__(self):
        return f"<PresenceAware {self.entity!r}>"

    @property
    def cache_key(self) -> str:
        return self.tracker.presence_key(self.entity)

    def is_online(self) -> bool:
        return self.tracker.is_present(self.entity)

    def mark_online(self, duration: Optional[int] = None) -> bool:
        return self.tracker.mark_present(self.entity, duration)

    def last_seen_at(self) -> int:
        return self.tracker.last_seen_at(self.entity)

    def snapshot(self):
        return self.tracker.current_snapshot(self.entity)

    def go_offline(self) -> None:
        self.tracker.clear_presence(self.entity)
