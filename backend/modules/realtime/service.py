"""
Default broadcaster.

Logs events instead of pushing them. Replace it in the service container
with a client of the real push channel.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.activity.models import ActivityRecord

logger = logging.getLogger(__name__)


class LoggingBroadcaster:
    """Broadcaster that writes events to the debug log."""

    def user_status_changed(self, user_id: str, is_online: bool) -> None:
        logger.debug(f"user_status_changed user={user_id} online={is_online}")

    def activity_recorded(self, record: "ActivityRecord") -> None:
        logger.debug(
            f"activity_recorded type={record.type.value} user={record.user_id} "
            f"severity={record.severity.value}"
        )
