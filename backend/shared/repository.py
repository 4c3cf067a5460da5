"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

from typing import Any, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - The table name via self._table
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class IdentityRepository(BaseRepository[Identity]):
            def find_by_id(self, identity_id: str) -> Optional[Identity]:
                result = self._query().select("*").eq("id", identity_id).execute()
                if not result.data:
                    return None
                return Identity.model_validate(result.data[0])
    """

    def __init__(self, db: Client, table: str) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
            table: Name of the table this repository manages.
        """
        self._db = db
        self._table = table

    def _query(self) -> Any:
        """Start a query builder on this repository's table."""
        return self._db.table(self._table)
