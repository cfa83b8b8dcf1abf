"""
Assets repository - read access to photos plus the face detection summary.
"""

from typing import Optional, List, Dict

from repositories.base import BaseRepository, utc_now
from models.domain.collection import Asset
from core.logging import get_logger

logger = get_logger(__name__)

FACE_DETECTION_PROVIDER = "aws_rekognition_collections"
ASSET_COLUMNS = "id, user_id, storage_url, thumbnail_url, file_name, title, created_at"


class AssetsRepository(BaseRepository):
    """
    Repository for assets table. Assets are owned by the upload flow;
    the face pipeline only reads them and writes the detection summary.
    """

    table_name = "assets"
    entity_name = "Asset"

    async def get_many(self, asset_ids: List[str]) -> Dict[str, Asset]:
        """Assets by id, for joining display fields onto faces."""
        ids = list({asset_id for asset_id in asset_ids if asset_id})
        if not ids:
            return {}
        try:
            response = self.table.select(ASSET_COLUMNS).in_("id", ids).execute()
            return {row["id"]: self._to_model(row) for row in response.data or []}
        except Exception as e:
            self._handle_error("get_many", e)

    async def list_images_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Asset]:
        """Active image assets with a storage URL, oldest first."""
        try:
            query = (
                self.active(ASSET_COLUMNS)
                .eq("user_id", user_id)
                .like("mime_type", "image/%")
                .not_.is_("storage_url", "null")
                .order("created_at")
            )
            if limit:
                query = query.limit(limit)
            response = query.execute()
            return self._to_models(response.data)
        except Exception as e:
            self._handle_error("list_images_for_user", e)

    async def list_owner_ids(self, page_size: int = 1000) -> List[str]:
        """Distinct owners of active image assets, in first-seen order."""
        owners: Dict[str, None] = {}
        offset = 0
        try:
            while True:
                response = (
                    self.active("user_id")
                    .like("mime_type", "image/%")
                    .order("created_at")
                    .range(offset, offset + page_size - 1)
                    .execute()
                )
                batch = response.data or []
                for row in batch:
                    owners.setdefault(row["user_id"], None)
                if len(batch) < page_size:
                    break
                offset += page_size
            return list(owners)
        except Exception as e:
            self._handle_error("list_owner_ids", e)

    async def save_face_summary(
        self,
        asset_id: str,
        user_id: str,
        faces_detected: int,
        auto_assigned: int,
        needs_user_input: int,
    ) -> None:
        """Denormalized per-photo face counts for list views."""
        try:
            self.table.update({
                "face_detection_data": {
                    "facesDetected": faces_detected,
                    "autoAssigned": auto_assigned,
                    "needsUserInput": needs_user_input,
                },
                "face_detection_provider": FACE_DETECTION_PROVIDER,
                "face_detection_processed_at": utc_now(),
            }).eq("id", asset_id).eq("user_id", user_id).execute()
        except Exception as e:
            self._handle_error("save_face_summary", e)

    def _to_model(self, data: Dict) -> Asset:
        return Asset(
            id=data["id"],
            user_id=data["user_id"],
            storage_url=data.get("storage_url"),
            thumbnail_url=data.get("thumbnail_url"),
            file_name=data.get("file_name"),
            title=data.get("title"),
            created_at=data.get("created_at"),
        )
