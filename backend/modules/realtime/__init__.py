"""
Real-time broadcast module.

The push channel (WebSocket fan-out) lives outside this backend. The core
only notifies it of two events, fire-and-forget:
- an identity's online status changed
- a new activity record was stored

Public API:
- IBroadcaster: Interface for the push channel
- LoggingBroadcaster: Default implementation that only logs
"""

from .interfaces import IBroadcaster
from .service import LoggingBroadcaster

__all__ = [
    "IBroadcaster",
    "LoggingBroadcaster",
]
