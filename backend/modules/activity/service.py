"""
Activity logger.

Writes audit-trail records without ever affecting the request that
produced them. Each write runs as a detached task with its own error
boundary; failures are logged as warnings and dropped.
"""

import asyncio
import logging
from typing import Any, Optional

from starlette.requests import Request

from modules.realtime.interfaces import IBroadcaster
from .interfaces import IActivityStore
from .models import ActivityRecord, ActivityType, Severity

logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> Optional[str]:
    """Best-known client address of a request."""
    if request is None or request.client is None:
        return None
    return request.client.host


class ActivityLogger:
    """
    Fire-and-forget activity recorder.

    record() returns immediately. The store insert runs in a worker
    thread inside a task that is never awaited by the request path.
    """

    def __init__(
        self,
        store: IActivityStore,
        broadcaster: Optional[IBroadcaster] = None,
    ):
        self._store = store
        self._broadcaster = broadcaster
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        return len(self._pending)

    def record(
        self,
        actor_id: str,
        activity_type: ActivityType,
        description: str,
        request: Optional[Request] = None,
        metadata: Optional[dict[str, Any]] = None,
        severity: Severity = Severity.LOW,
    ) -> Optional[asyncio.Task]:
        """
        Record an activity in the background.

        Args:
            actor_id: ID of the acting identity
            activity_type: What happened
            description: Human-readable summary
            request: Request to capture IP and user agent from
            metadata: Free-form details
            severity: Call-site severity

        Returns:
            The detached write task, or None if nothing was scheduled
        """
        try:
            entry = ActivityRecord(
                user_id=actor_id,
                type=activity_type,
                description=description,
                ip=client_ip(request),
                user_agent=request.headers.get("user-agent") if request is not None else None,
                metadata=metadata or {},
                severity=severity,
            )
            loop = asyncio.get_running_loop()
        except Exception as e:
            logger.warning(f"Activity logging error ({activity_type}): {e}")
            return None

        task = loop.create_task(self._write(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight write (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _write(self, entry: ActivityRecord) -> None:
        try:
            stored = await asyncio.to_thread(self._store.insert, entry)
        except Exception as e:
            logger.warning(
                f"Activity logging error ({entry.type.value} by {entry.user_id}): {e}"
            )
            return

        if self._broadcaster is None:
            return
        try:
            self._broadcaster.activity_recorded(stored)
        except Exception as e:
            logger.warning(f"Activity broadcast error ({entry.type.value}): {e}")
