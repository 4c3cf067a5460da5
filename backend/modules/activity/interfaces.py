"""
Activity module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import ActivityRecord, ActivityType


@runtime_checkable
class IActivityStore(Protocol):
    """
    Append-only storage for activity records.

    No update or delete: the audit trail is read-only once written.
    """

    def insert(self, record: ActivityRecord) -> ActivityRecord:
        """Append a record and return it as stored."""
        ...

    def list_recent(
        self,
        limit: int = 50,
        user_id: Optional[str] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> list[ActivityRecord]:
        """Most recent records first, optionally filtered."""
        ...
