"""Django signals emitted by users_online.

These let host code react to presence changes (push a websocket update,
refresh a sidebar) without subclassing the tracker.
"""

from django.dispatch import Signal

# Sent after a presence record was written successfully.  Receivers get
# keyword arguments:
#
#   sender     – the PresenceTracker class
#   entity     – the entity that was marked present
#   entity_id  – str, the resolved identifier
#   key        – str, the presence key written
#   duration   – int, TTL in seconds
#   record     – PresenceRecord that was stored
presence_marked = Signal()

presence_cleared = Signal()
"""
Sent after a presence record was removed without a store error.

Kwargs sent:
    sender    (type)  — the PresenceTracker class
    entity    (Any)   — the entity that went offline
    entity_id (str)   — the resolved identifier
    key       (str)   — the presence key removed
"""
