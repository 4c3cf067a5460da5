"""
Activity repository for database access.

Provides both a Supabase-backed repository (for production) and an
in-memory store (for testing and development).
"""

from typing import Optional

from supabase import Client

from shared.repository import BaseRepository
from .models import ActivityRecord, ActivityType


class ActivityRepository(BaseRepository[ActivityRecord]):
    """Repository for the activities table."""

    def __init__(self, db: Client, table: str = "activities") -> None:
        super().__init__(db, table)

    def insert(self, record: ActivityRecord) -> ActivityRecord:
        result = self._query().insert(record.model_dump(mode="json")).execute()
        return ActivityRecord.model_validate(result.data[0])

    def list_recent(
        self,
        limit: int = 50,
        user_id: Optional[str] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> list[ActivityRecord]:
        query = self._query().select("*")
        if user_id:
            query = query.eq("user_id", user_id)
        if activity_type:
            query = query.eq("type", ActivityType(activity_type).value)

        result = query.order("created_at", desc=True).limit(limit).execute()
        return [ActivityRecord.model_validate(row) for row in result.data or []]


class InMemoryActivityStore:
    """
    Activity store with in-memory storage.

    For testing and development. Use ActivityRepository for production.
    """

    def __init__(self) -> None:
        self._records: list[ActivityRecord] = []

    @property
    def records(self) -> list[ActivityRecord]:
        return list(self._records)

    def insert(self, record: ActivityRecord) -> ActivityRecord:
        self._records.append(record)
        return record

    def list_recent(
        self,
        limit: int = 50,
        user_id: Optional[str] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> list[ActivityRecord]:
        records = self._records
        if user_id:
            records = [r for r in records if r.user_id == user_id]
        if activity_type:
            records = [r for r in records if r.type is ActivityType(activity_type)]
        return sorted(records, key=lambda r: r.created_at, reverse=True)[:limit]
