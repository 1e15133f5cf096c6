"""
Presence tracking for authenticated users.

A user is online exactly while a presence record exists under their key in
an expiring store. Writing the record marks them online; the store's TTL or
an explicit clear takes them offline. There is no separate "online" flag and
nothing here polls or evicts.

Example usage:

    from users_online.presence import PresenceTracker

    tracker = PresenceTracker.from_settings()
    tracker.mark_present(request.user, duration=600)

    tracker.is_present(request.user)     # True
    tracker.last_seen_at(request.user)   # 1700000000
    tracker.current_snapshot(request.user).snapshot
    # {'id': 42, 'name': 'Ada', 'email': 'ada@example.com'}

    tracker.clear_presence(request.user)

Store errors never escape these calls. They are logged and reported as
"offline" / ``0`` / ``False`` so a cache outage can't take down requests.
"""

import logging
import math
import time
from typing import Any, Callable, Iterable, Optional

from asgiref.sync import sync_to_async

from .backends.base import PresenceStore
from .entities import build_snapshot, resolve_identity
from .exceptions import InvalidDuration, StoreFailure
from .records import PresenceRecord
from .signals import presence_cleared, presence_marked

logger = logging.getLogger(__name__)

# Fallbacks when neither arguments nor settings provide a value
DEFAULT_PREFIX = "UserOnline"
DEFAULT_DURATION = 300  # seconds
DEFAULT_USER_FIELDS = ("id", "name", "email")


def validate_duration(duration: Any) -> int:
    """Return ``duration`` as whole seconds, or raise InvalidDuration."""
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidDuration(duration)
    if not math.isfinite(duration) or duration <= 0:
        raise InvalidDuration(duration)
    seconds = int(duration)
    if seconds <= 0:
        # Sub-second TTLs round down to nothing
        raise InvalidDuration(duration)
    return seconds


class PresenceTracker:
    """
    Builds, writes, reads and invalidates per-entity presence records.

    The store is passed in, never looked up globally, so tests can hand in
    an ``InMemoryPresenceStore`` with a fake clock.

    Args:
        store: Expiring key/value store holding the records
        default_duration: TTL used when a call does not give one
        prefix: Key namespace, keys look like ``"{prefix}-{id}"``
        user_fields: Entity attributes copied into each snapshot
        login_duration: TTL used by ``on_authenticated`` when the caller
            passes none; falls back to ``default_duration``
        clock: Returns the current time in seconds; defaults to ``time.time``
    """

    def __init__(
        self,
        store: PresenceStore,
        *,
        default_duration: int = DEFAULT_DURATION,
        prefix: str = DEFAULT_PREFIX,
        user_fields: Iterable[str] = DEFAULT_USER_FIELDS,
        login_duration: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.default_duration = default_duration
        self.prefix = prefix
        self.user_fields = tuple(user_fields)
        self.login_duration = login_duration
        self._clock = clock or time.time

    @classmethod
    def from_settings(cls, store: Optional[PresenceStore] = None, **kwargs) -> "PresenceTracker":
        """Build a tracker from ``settings.USERS_ONLINE`` and the configured store."""
        from .backends.registry import get_presence_store
        from .config import get_config

        config = get_config()
        options = {
            "default_duration": config.default_duration,
            "prefix": config.cache_prefix,
            "user_fields": config.user_fields,
            "login_duration": config.get("login_duration"),
        }
        options.update(kwargs)
        return cls(store if store is not None else get_presence_store(), **options)

    def __repr__(self):
        return f"<PresenceTracker prefix={self.prefix!r} store={type(self.store).__name__}>"

    # ------------------------------------------------------------------
    # Keys and records
    # ------------------------------------------------------------------

    def presence_key(self, entity: Any) -> str:
        """
        Get the store key for an entity.

        Raises:
            InvalidIdentity: If the entity has no identifier.
        """
        return self._identify(entity)[1]

    def _identify(self, entity: Any):
        entity_id = resolve_identity(entity)
        return entity_id, f"{self.prefix}-{entity_id}"

    def build_record(self, entity: Any) -> PresenceRecord:
        """Fresh record for ``entity`` stamped with the current time. Not written."""
        return PresenceRecord.build(self._clock(), build_snapshot(entity, self.user_fields))

    def _guarded(self, operation: str, key: str, entity_id: str, call, default, level=logging.WARNING, **context):
        """
        Run one store call, converting any failure into ``default``.

        Every store touch goes through here so failures are logged the same
        way: message plus entity id, operation and error in ``extra``.
        """
        try:
            return call()
        except Exception as e:
            failure = StoreFailure(operation, key, e)
            failure.__cause__ = e
            logger.log(
                level,
                "%s (entity %s)",
                failure.message,
                entity_id,
                extra={
                    "entity_id": entity_id,
                    "operation": operation,
                    "presence_key": key,
                    "error": str(e),
                    **context,
                },
            )
            return default

    # ------------------------------------------------------------------
    # Record manager operations
    # ------------------------------------------------------------------

    def mark_present(self, entity: Any, duration: Optional[int] = None) -> bool:
        """
        Mark an entity online for ``duration`` seconds.

        Overwrites any existing record, which restarts the expiry countdown
        and moves ``last_seen_at`` forward.

        Args:
            entity: Object with an identifier
            duration: TTL in seconds, defaults to ``default_duration``

        Returns:
            True if the store accepted the write

        Raises:
            InvalidDuration: If the duration is not positive.
            InvalidIdentity: If the entity has no identifier.
        """
        seconds = validate_duration(self.default_duration if duration is None else duration)
        entity_id, key = self._identify(entity)
        record = self.build_record(entity)

        failed = object()
        written = self._guarded(
            "put",
            key,
            entity_id,
            lambda: self.store.put(key, record.to_stored(), seconds),
            failed,
            level=logging.ERROR,
            duration=seconds,
        )
        if written is failed:
            return False
        if not written:
            logger.warning(
                "Presence store declined write for entity %s",
                entity_id,
                extra={
                    "entity_id": entity_id,
                    "operation": "put",
                    "presence_key": key,
                    "duration": seconds,
                },
            )
            return False

        logger.debug("Entity %s marked present for %ds", entity_id, seconds)
        presence_marked.send(
            sender=self.__class__,
            entity=entity,
            entity_id=entity_id,
            key=key,
            duration=seconds,
            record=record,
        )
        return True

    def mark_present_with_config(self, entity: Any, duration: Optional[int] = None) -> bool:
        """Same as ``mark_present``; spelled out for callers relying on the configured default."""
        return self.mark_present(entity, duration if duration is not None else self.default_duration)

    def is_present(self, entity: Any) -> bool:
        """Whether a live record exists for the entity. Store errors read as offline."""
        entity_id, key = self._identify(entity)
        return bool(self._guarded("has", key, entity_id, lambda: self.store.has(key), False))

    def last_seen_at(self, entity: Any) -> int:
        """
        When the entity's record was last written, in POSIX seconds.

        Returns 0 when there is no record, when its timestamp is missing or
        unparseable, or when the store can't be read.
        """
        entity_id, key = self._identify(entity)
        stored = self._guarded("get", key, entity_id, lambda: self.store.get(key), None)
        if stored is None:
            return 0
        return PresenceRecord.from_stored(stored).recorded_at

    def current_snapshot(self, entity: Any) -> PresenceRecord:
        """
        The stored record if there is one, else a freshly built one.

        A freshly built record is not written; call ``mark_present`` to
        persist it.
        """
        entity_id, key = self._identify(entity)
        stored = self._guarded("get", key, entity_id, lambda: self.store.get(key), None)
        if stored is None:
            return self.build_record(entity)
        return PresenceRecord.from_stored(stored)

    def clear_presence(self, entity: Any) -> None:
        """Remove the entity's record. Clearing an absent record is fine."""
        entity_id, key = self._identify(entity)
        sentinel = object()
        result = self._guarded("remove", key, entity_id, lambda: self.store.remove(key), sentinel)
        if result is sentinel:
            return

        logger.debug("Entity %s presence cleared", entity_id)
        presence_cleared.send(sender=self.__class__, entity=entity, entity_id=entity_id, key=key)

    # ------------------------------------------------------------------
    # Authentication ports
    # ------------------------------------------------------------------

    def on_authenticated(self, entity: Any, duration: Optional[int] = None) -> bool:
        """Inbound port for a successful login."""
        if duration is None:
            duration = self.login_duration
        return self.mark_present(entity, duration)

    def on_deauthenticated(self, entity: Any) -> None:
        """Inbound port for a logout."""
        self.clear_presence(entity)

    # ------------------------------------------------------------------
    # Async variants
    # ------------------------------------------------------------------

    async def amark_present(self, entity: Any, duration: Optional[int] = None) -> bool:
        return await sync_to_async(self.mark_present)(entity, duration)

    async def ais_present(self, entity: Any) -> bool:
        return await sync_to_async(self.is_present)(entity)

    async def alast_seen_at(self, entity: Any) -> int:
        return await sync_to_async(self.last_seen_at)(entity)

    async def acurrent_snapshot(self, entity: Any) -> PresenceRecord:
        return await sync_to_async(self.current_snapshot)(entity)

    async def aclear_presence(self, entity: Any) -> None:
        await sync_to_async(self.clear_presence)(entity)
