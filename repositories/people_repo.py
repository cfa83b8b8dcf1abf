"""
People repository - handles person_groups table operations.
"""

from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository, utc_now
from models.domain.common import Lifecycle
from models.domain.person import Person
from core.logging import get_logger

logger = get_logger(__name__)


class PeopleRepository(BaseRepository):
    """
    Repository for person_groups table.
    """

    table_name = "person_groups"
    entity_name = "Person"

    # ============================================================
    # Query Methods
    # ============================================================

    async def find_by_name(
        self,
        user_id: str,
        name: str,
        exclude_id: str = None
    ) -> Optional[Person]:
        """Active person of user_id with exactly this name."""
        try:
            query = self.active().eq("user_id", user_id).eq("name", name)
            if exclude_id:
                query = query.neq("id", exclude_id)
            response = query.limit(1).execute()
            if not response.data:
                return None
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("find_by_name", e)

    async def list_for_user(self, user_id: str) -> List[Person]:
        """Active people ordered by name."""
        try:
            response = (
                self.active()
                .eq("user_id", user_id)
                .order("name")
                .execute()
            )
            return self._to_models(response.data)
        except Exception as e:
            self._handle_error("list_for_user", e)

    # ============================================================
    # Write Methods
    # ============================================================

    async def create_person(
        self,
        user_id: str,
        name: str,
        display_name: str = None,
        description: str = None,
        relationship: str = None,
        is_primary_person: bool = False,
    ) -> Person:
        return await self.create({
            "user_id": user_id,
            "name": name,
            "display_name": display_name or name,
            "description": description,
            "relationship": relationship,
            "is_primary_person": is_primary_person,
            "deleted": False,
        })

    async def update_person(self, person_id: str, changes: Dict[str, Any]) -> Person:
        data = dict(changes)
        data["updated_at"] = utc_now()
        return await self.update(person_id, data)

    async def set_avatar(self, person_id: str, face_id: str) -> Person:
        return await self.update(person_id, {"avatar_face_id": face_id, "updated_at": utc_now()})

    # ============================================================
    # Model Conversion
    # ============================================================

    def _to_model(self, data: Dict) -> Person:
        return Person(
            id=data["id"],
            user_id=data["user_id"],
            name=data["name"],
            display_name=data.get("display_name"),
            description=data.get("description"),
            relationship=data.get("relationship"),
            is_primary_person=bool(data.get("is_primary_person", False)),
            avatar_face_id=data.get("avatar_face_id"),
            lifecycle=Lifecycle.from_deleted_flag(data.get("deleted")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
