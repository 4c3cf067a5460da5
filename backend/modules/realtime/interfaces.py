"""
Real-time broadcast interface.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modules.activity.models import ActivityRecord


@runtime_checkable
class IBroadcaster(Protocol):
    """
    Contract of the external push channel.

    Implementations must not block and must not raise: callers do not wait
    for an acknowledgement.
    """

    def user_status_changed(self, user_id: str, is_online: bool) -> None:
        """Notify subscribers that an identity went online or offline."""
        ...

    def activity_recorded(self, record: "ActivityRecord") -> None:
        """Notify subscribers (admin dashboards) of a new activity record."""
        ...
