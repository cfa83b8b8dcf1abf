"""
Collections repository - local mirror of Rekognition collections.
"""

from typing import Optional, Dict

from repositories.base import BaseRepository, utc_now
from models.domain.common import Lifecycle
from models.domain.collection import FaceCollection
from core.exceptions import DatabaseError
from core.logging import get_logger

logger = get_logger(__name__)


class CollectionsRepository(BaseRepository):
    """
    Repository for face_collections table. One row per user.
    """

    table_name = "face_collections"
    entity_name = "Collection"

    async def get_for_user(self, user_id: str) -> Optional[FaceCollection]:
        try:
            response = self.active().eq("user_id", user_id).limit(1).execute()
            if not response.data:
                return None
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("get_for_user", e)

    async def upsert(
        self,
        user_id: str,
        collection_id: str,
        arn: Optional[str],
        face_count: int = 0,
    ) -> FaceCollection:
        """
        Insert or update the mirror row keyed on user_id. Last write wins.
        """
        try:
            response = (
                self.table
                .upsert({
                    "user_id": user_id,
                    "aws_collection_id": collection_id,
                    "rekognition_arn": arn,
                    "face_count": face_count,
                    "last_indexed_at": utc_now(),
                    "deleted": False,
                }, on_conflict="user_id")
                .execute()
            )
            if not response.data:
                raise DatabaseError("Upsert returned no data", operation="face_collections.upsert")
            logger.debug(f"Collection mirror saved for user {user_id}: {collection_id}")
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("upsert", e)

    async def mark_deleted(self, user_id: str) -> bool:
        try:
            response = (
                self.table
                .update({"deleted": True})
                .eq("user_id", user_id)
                .execute()
            )
            return len(response.data or []) > 0
        except Exception as e:
            self._handle_error("mark_deleted", e)

    def _to_model(self, data: Dict) -> FaceCollection:
        return FaceCollection(
            user_id=data["user_id"],
            collection_id=data["aws_collection_id"],
            arn=data.get("rekognition_arn"),
            face_count=data.get("face_count") or 0,
            last_indexed_at=data.get("last_indexed_at"),
            lifecycle=Lifecycle.from_deleted_flag(data.get("deleted")),
            created_at=data.get("created_at"),
        )
