"""
Presence records: the value stored under each presence key.

Stored form::

    {"recorded_at": 1700000000, "snapshot": {"id": 42, "name": "Ada"}}

A plain dict keeps the value picklable for Django's cache and JSON-encodable
for Redis. Reads go through ``PresenceRecord.from_stored`` which never raises:
anything that is not a sane timestamp reads back as 0.
"""

import datetime
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from django.utils.dateparse import parse_datetime

RECORDED_AT = "recorded_at"
SNAPSHOT = "snapshot"


def parse_timestamp(value: Any) -> int:
    """
    Coerce a stored ``recorded_at`` value into POSIX seconds.

    Returns 0 for anything missing, negative or unparseable.

    Examples:
        >>> parse_timestamp(1640995200)
        1640995200
        >>> parse_timestamp("1640995200")
        1640995200
        >>> parse_timestamp("invalid-data")
        0
        >>> parse_timestamp(None)
        0
    """
    if isinstance(value, bool):
        return 0

    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        seconds = int(value.timestamp())
        return seconds if seconds >= 0 else 0

    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = parse_datetime(text)
            except ValueError:
                # Well formatted but not a real date, e.g. month 13
                return 0
            return parse_timestamp(parsed) if parsed is not None else 0

    if isinstance(value, (int, float)):
        if value != value or value in (float("inf"), float("-inf")) or value < 0:
            return 0
        return int(value)

    return 0


@dataclass(frozen=True)
class PresenceRecord:
    """An entity's presence marker: when it was written and what it held."""

    recorded_at: int
    snapshot: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "snapshot", MappingProxyType(dict(self.snapshot)))

    @classmethod
    def build(cls, recorded_at: float, snapshot: Mapping[str, Any]) -> "PresenceRecord":
        return cls(recorded_at=int(recorded_at), snapshot=snapshot)

    @classmethod
    def from_stored(cls, value: Any) -> "PresenceRecord":
        """Rebuild a record from whatever the store returned, tolerating corruption."""
        if not isinstance(value, Mapping):
            return cls(recorded_at=0)
        snapshot = value.get(SNAPSHOT)
        if not isinstance(snapshot, Mapping):
            snapshot = {}
        return cls(recorded_at=parse_timestamp(value.get(RECORDED_AT)), snapshot=snapshot)

    def to_stored(self) -> Dict[str, Any]:
        return {RECORDED_AT: self.recorded_at, SNAPSHOT: dict(self.snapshot)}

    @property
    def recorded_datetime(self) -> datetime.datetime:
        """``recorded_at`` as an aware UTC datetime."""
        return datetime.datetime.fromtimestamp(self.recorded_at, tz=datetime.timezone.utc)
