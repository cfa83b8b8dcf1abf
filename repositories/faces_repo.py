"""
Faces repository - handles faces table operations.
"""

from typing import Optional, List, Dict, Set, Iterable

from repositories.base import BaseRepository, utc_now
from models.domain.common import Lifecycle
from models.domain.face import Face, BoundingBox
from models.domain.recognition import DetectedFace
from core.logging import get_logger

logger = get_logger(__name__)


class FacesRepository(BaseRepository):
    """
    Repository for faces table.
    """

    table_name = "faces"
    entity_name = "Face"

    # ============================================================
    # Query Methods
    # ============================================================

    async def list_for_asset(self, asset_id: str, user_id: str) -> List[Face]:
        """Active faces of user_id already indexed for a photo."""
        try:
            response = self.active().eq("asset_id", asset_id).eq("user_id", user_id).execute()
            return self._to_models(response.data)
        except Exception as e:
            self._handle_error("list_for_asset", e)

    async def owned_provider_ids(self, user_id: str, provider_face_ids: Iterable[str]) -> Set[str]:
        """
        Subset of provider face ids that belong to active faces of user_id.
        """
        provider_face_ids = list(provider_face_ids)
        if not provider_face_ids:
            return set()
        try:
            response = (
                self.active("rekognition_face_id")
                .in_("rekognition_face_id", provider_face_ids)
                .eq("user_id", user_id)
                .execute()
            )
            return {row["rekognition_face_id"] for row in response.data or []}
        except Exception as e:
            self._handle_error("owned_provider_ids", e)

    async def get_by_provider_id(self, user_id: str, provider_face_id: str) -> Optional[Face]:
        try:
            response = (
                self.active()
                .eq("rekognition_face_id", provider_face_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            if not response.data:
                return None
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("get_by_provider_id", e)

    async def list_unassigned(self, user_id: str, limit: int = 50) -> List[Face]:
        """Faces awaiting a user decision, newest first."""
        try:
            response = (
                self.active()
                .eq("user_id", user_id)
                .eq("needs_assignment", True)
                .eq("skipped", False)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return self._to_models(response.data)
        except Exception as e:
            self._handle_error("list_unassigned", e)

    async def list_for_user(self, user_id: str) -> List[Face]:
        """All active faces of a user, newest first."""
        try:
            response = (
                self.active()
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            return self._to_models(response.data)
        except Exception as e:
            self._handle_error("list_for_user", e)

    # ============================================================
    # Write Methods
    # ============================================================

    async def save_face(
        self,
        user_id: str,
        asset_id: str,
        detected: DetectedFace,
        needs_assignment: bool,
        auto_assigned: bool,
    ) -> Face:
        """Store a freshly indexed face."""
        return await self.create({
            "user_id": user_id,
            "asset_id": asset_id,
            "rekognition_face_id": detected.provider_face_id,
            "rekognition_image_id": asset_id,
            "bounding_box": detected.bbox.model_dump(),
            "confidence": detected.confidence_ratio,
            "needs_assignment": needs_assignment,
            "auto_assigned": auto_assigned,
            "skipped": False,
            "deleted": False,
        })

    async def update_flags(
        self,
        face_id: str,
        needs_assignment: bool = None,
        auto_assigned: bool = None,
        skipped: bool = None,
    ) -> Face:
        """Change assignment flags; None leaves a flag untouched."""
        data = {"updated_at": utc_now()}
        if needs_assignment is not None:
            data["needs_assignment"] = needs_assignment
        if auto_assigned is not None:
            data["auto_assigned"] = auto_assigned
        if skipped is not None:
            data["skipped"] = skipped
        return await self.update(face_id, data)

    # ============================================================
    # Model Conversion
    # ============================================================

    def _to_model(self, data: Dict) -> Face:
        bbox_data = self.client.parse_json(data.get("bounding_box"))
        bbox = BoundingBox(
            left=bbox_data.get("left", bbox_data.get("Left", 0.0)) or 0.0,
            top=bbox_data.get("top", bbox_data.get("Top", 0.0)) or 0.0,
            width=bbox_data.get("width", bbox_data.get("Width", 0.0)) or 0.0,
            height=bbox_data.get("height", bbox_data.get("Height", 0.0)) or 0.0,
        )

        return Face(
            id=data["id"],
            user_id=data["user_id"],
            asset_id=data["asset_id"],
            provider_face_id=data["rekognition_face_id"],
            bbox=bbox,
            confidence=data.get("confidence") or 0.0,
            needs_assignment=bool(data.get("needs_assignment", True)) and not data.get("skipped", False),
            auto_assigned=bool(data.get("auto_assigned", False)),
            skipped=bool(data.get("skipped", False)),
            lifecycle=Lifecycle.from_deleted_flag(data.get("deleted")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
