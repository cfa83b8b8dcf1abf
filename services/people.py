"""
People management: the named identities faces are linked to.
"""

from typing import List, Optional

from core.exceptions import DuplicatePersonNameError, PersonNotFoundError, ValidationError
from core.logging import get_logger
from models.domain.person import Person
from repositories.links_repo import LinksRepository
from repositories.people_repo import PeopleRepository

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "display_name", "description", "relationship", "is_primary_person")


class PeopleService:
    def __init__(self, people: PeopleRepository, links: LinksRepository):
        self.people = people
        self.links = links

    async def get_person(self, user_id: str, person_id: str) -> Person:
        person = await self.people.get_owned(person_id, user_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    async def list_people(self, user_id: str) -> List[Person]:
        """Active people ordered by name, with their active face counts."""
        people = await self.people.list_for_user(user_id)
        counts = await self.links.count_by_person([p.id for p in people])
        return [p.model_copy(update={"face_count": counts.get(p.id, 0)}) for p in people]

    async def create_person(
        self,
        user_id: str,
        name: str,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        relationship: Optional[str] = None,
        is_primary_person: bool = False,
    ) -> Person:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Person name is required", field="name")

        if await self.people.find_by_name(user_id, name):
            raise DuplicatePersonNameError(name)

        person = await self.people.create_person(
            user_id=user_id,
            name=name,
            display_name=display_name,
            description=description,
            relationship=relationship,
            is_primary_person=is_primary_person,
        )
        logger.info(f"Created person {person.id} ({name}) for user {user_id}")
        return person

    async def update_person(self, user_id: str, person_id: str, **changes) -> Person:
        """Apply the given fields; fields passed as None are left alone."""
        existing = await self.get_person(user_id, person_id)

        data = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        if "name" in data:
            data["name"] = data["name"].strip()
            if not data["name"]:
                raise ValidationError("Person name is required", field="name")
            if data["name"] != existing.name and await self.people.find_by_name(
                user_id, data["name"], exclude_id=person_id
            ):
                raise DuplicatePersonNameError(data["name"])

        if not data:
            return existing

        person = await self.people.update_person(person_id, data)
        logger.info(f"Updated person {person_id} for user {user_id}")
        return person

    async def delete_person(self, user_id: str, person_id: str) -> int:
        """
        Soft-delete a person and retire its links.
        Returns the number of links retired.
        """
        await self.get_person(user_id, person_id)
        await self.people.soft_delete(person_id)
        retired = await self.links.retire_for_person(person_id)
        logger.info(f"Deleted person {person_id} for user {user_id} ({retired} links retired)")
        return retired
