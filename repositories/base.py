"""
Base repository with common functionality.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, TypeVar, Generic
from pydantic import BaseModel

from core.exceptions import AppException, DatabaseError, NotFoundError
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T', bound=BaseModel)


def utc_now() -> str:
    """Timestamp for `*_at` columns."""
    return datetime.now(timezone.utc).isoformat()


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.

    Every table the face pipeline touches is soft-deleted through a
    boolean `deleted` column; `active()` starts a query that skips
    deleted rows.

    Subclasses should:
    - Set `table_name` class attribute
    - Set `entity_name` class attribute
    - Implement `_to_model` and domain-specific methods
    """

    table_name: str = None
    entity_name: str = None

    def __init__(self, supabase_client):
        """
        Initialize repository.

        Args:
            supabase_client: SupabaseClient instance (from infrastructure/)
        """
        self.client = supabase_client
        self.logger = get_logger(f"repo.{self.__class__.__name__}")

    @property
    def table(self):
        """Get table reference for queries."""
        return self.client.table(self.table_name)

    def active(self, columns: str = "*"):
        """Select query restricted to non-deleted rows."""
        return self.table.select(columns).eq("deleted", False)

    # ============================================================
    # Generic Operations
    # ============================================================

    async def get_owned(self, id: str, user_id: str) -> Optional[T]:
        """Get an active record by ID only if it belongs to user_id."""
        try:
            response = self.active().eq("id", id).eq("user_id", user_id).execute()
            if not response.data:
                return None
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("get_owned", e)

    async def create(self, data: Dict[str, Any]) -> T:
        """Insert a row and return it."""
        try:
            clean_data = self.client.clean_for_json(data)
            response = self.table.insert(clean_data).execute()

            if not response.data:
                raise DatabaseError("Insert returned no data", operation=f"{self.table_name}.create")

            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("create", e)

    async def update(self, id: str, data: Dict[str, Any]) -> T:
        """Update a row by ID and return it."""
        try:
            clean_data = self.client.clean_for_json(data)
            response = self.table.update(clean_data).eq("id", id).execute()

            if not response.data:
                raise NotFoundError(self.entity_name, id)

            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("update", e)

    async def soft_delete(self, id: str) -> bool:
        """Mark a row deleted. Rows are never removed."""
        try:
            response = (
                self.table
                .update({"deleted": True, "updated_at": utc_now()})
                .eq("id", id)
                .execute()
            )
            return len(response.data) > 0
        except Exception as e:
            self._handle_error("soft_delete", e)

    # ============================================================
    # Helper Methods
    # ============================================================

    def _to_model(self, data: Dict) -> T:
        raise NotImplementedError

    def _to_models(self, rows: Optional[List[Dict]]) -> List[T]:
        return [self._to_model(row) for row in rows or []]

    def _handle_error(self, operation: str, error: Exception):
        """
        Log and re-raise as DatabaseError. Application errors raised
        inside the try block pass through untouched.
        """
        if isinstance(error, AppException):
            raise error
        self.logger.error(f"{operation} failed: {error}")
        raise DatabaseError(str(error), operation=f"{self.table_name}.{operation}")
