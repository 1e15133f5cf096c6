"""
Redis-backed presence store for multi-node production deployments.

One plain string key per entity, written with ``SET key value EX ttl`` so
Redis itself expires it. Values are JSON, which keeps them readable from
other languages and from ``redis-cli``.

Requires: pip install redis
"""

import json
import logging
import time
from typing import Any, Dict

from django.core.serializers.json import DjangoJSONEncoder

from .base import PresenceStore

logger = logging.getLogger(__name__)


class RedisPresenceStore(PresenceStore):
    """
    Redis presence store.

    Redis keys used per entity:
        {key_prefix}{presence_key}   — JSON presence record, TTL = duration

    ``key_prefix`` comes from USERS_ONLINE['redis_key_prefix'] and defaults to
    empty; the presence key already carries the configured ``cache_prefix``.
    Set it to share one Redis database between sites.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "",
    ):
        try:
            import redis as redis_lib
        except ImportError:
            raise ImportError(
                "redis is required for RedisPresenceStore. "
                "Install with: pip install django-users-online[redis]"
            )

        self._client = redis_lib.from_url(redis_url, decode_responses=True)
        self._prefix = key_prefix
        logger.info("RedisPresenceStore configured for %s", redis_url)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def put(self, key: str, value: Dict[str, Any], ttl: int) -> bool:
        payload = json.dumps(value, cls=DjangoJSONEncoder)
        return bool(self._client.set(self._key(key), payload, ex=ttl))

    def get(self, key: str) -> Any:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            # Unreadable payload: hand back the raw value, readers treat it as corrupt
            logger.debug("Non-JSON presence value at %s", key)
            return raw

    def has(self, key: str) -> bool:
        return bool(self._client.exists(self._key(key)))

    def remove(self, key: str) -> None:
        self._client.delete(self._key(key))

    def health_check(self) -> Dict[str, Any]:
        """PING the server. Used by the users_online.W002 deploy check."""
        report: Dict[str, Any] = {"backend": "redis", "status": "healthy"}
        started = time.perf_counter()
        try:
            self._client.ping()
        except Exception as e:
            logger.warning("Redis presence store unreachable: %s", e)
            report.update(status="unhealthy", error=str(e))
        report["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
        return report
