"""
Face-person links repository - handles face_person_links table operations.
"""

from collections import Counter
from typing import Optional, List, Dict

from repositories.base import BaseRepository, utc_now
from models.domain.common import Lifecycle
from models.domain.link import FacePersonLink, AssignedBy
from core.logging import get_logger

logger = get_logger(__name__)


class LinksRepository(BaseRepository):
    """
    Repository for face_person_links table.

    Only the active link of a face is ever returned; retired links stay in
    the table as history.
    """

    table_name = "face_person_links"
    entity_name = "Assignment"

    async def get_active_for_face(self, face_id: str) -> Optional[FacePersonLink]:
        try:
            response = (
                self.active()
                .eq("face_id", face_id)
                .order("assigned_at", desc=True)
                .limit(1)
                .execute()
            )
            if not response.data:
                return None
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("get_active_for_face", e)

    async def create_link(
        self,
        face_id: str,
        person_id: str,
        confidence: float,
        assigned_by: AssignedBy,
    ) -> FacePersonLink:
        return await self.create({
            "face_id": face_id,
            "person_group_id": person_id,
            "confidence": confidence,
            "assigned_by": assigned_by,
            "assigned_at": utc_now(),
            "deleted": False,
        })

    async def retire_for_face(self, face_id: str, keep_link_id: Optional[str] = None) -> int:
        """Soft-delete every active link of a face except keep_link_id. Returns how many."""
        try:
            query = (
                self.table
                .update({"deleted": True, "updated_at": utc_now()})
                .eq("face_id", face_id)
                .eq("deleted", False)
            )
            if keep_link_id:
                query = query.neq("id", keep_link_id)
            response = query.execute()
            return len(response.data or [])
        except Exception as e:
            self._handle_error("retire_for_face", e)

    async def retire_for_person(self, person_id: str) -> int:
        """Soft-delete every active link pointing at a person."""
        try:
            response = (
                self.table
                .update({"deleted": True, "updated_at": utc_now()})
                .eq("person_group_id", person_id)
                .eq("deleted", False)
                .execute()
            )
            return len(response.data or [])
        except Exception as e:
            self._handle_error("retire_for_person", e)

    async def count_by_person(self, person_ids: List[str]) -> Dict[str, int]:
        """Active link count per person."""
        if not person_ids:
            return {}
        try:
            response = (
                self.active("person_group_id")
                .in_("person_group_id", person_ids)
                .execute()
            )
            return dict(Counter(row["person_group_id"] for row in response.data or []))
        except Exception as e:
            self._handle_error("count_by_person", e)

    def _to_model(self, data: Dict) -> FacePersonLink:
        return FacePersonLink(
            id=data["id"],
            face_id=data["face_id"],
            person_id=data["person_group_id"],
            confidence=data.get("confidence") if data.get("confidence") is not None else 1.0,
            assigned_by=data.get("assigned_by") or AssignedBy.USER,
            assigned_at=data.get("assigned_at"),
            lifecycle=Lifecycle.from_deleted_flag(data.get("deleted")),
        )
