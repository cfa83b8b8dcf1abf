"""
Supabase client wrapper.
Owns the connection; repositories build their queries on top of it.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Any
from supabase import create_client, Client

from core.config import Settings
from core.exceptions import DatabaseError
from core.logging import get_logger

logger = get_logger(__name__)


class SupabaseClient:
    """
    Supabase client for all database operations.

    Provides:
    - Connection management
    - Type conversion utilities
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[Client] = None
        self._connect()

    def _connect(self):
        """Establish connection to Supabase."""
        try:
            self._client = create_client(
                self._settings.supabase_url,
                self._settings.supabase_service_role_key
            )
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to connect to Supabase: {e}")
            raise DatabaseError(str(e), operation="connect")

    @property
    def client(self) -> Client:
        """Get raw Supabase client for direct queries."""
        if not self._client:
            self._connect()
        return self._client

    def table(self, name: str):
        """Get table reference for chaining."""
        return self.client.table(name)

    # ============================================================
    # Type Conversion Utilities
    # ============================================================

    @staticmethod
    def parse_json(value: Any) -> Dict:
        """Parse a JSON column that may come back as a string."""
        if isinstance(value, str):
            return json.loads(value)
        return value or {}

    @staticmethod
    def clean_for_json(data: Dict) -> Dict:
        """Clean dict values for JSON serialization."""
        result = {}
        for key, value in data.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, Enum):
                result[key] = value.value
            elif hasattr(value, "model_dump"):
                result[key] = value.model_dump()
            else:
                result[key] = value
        return result
