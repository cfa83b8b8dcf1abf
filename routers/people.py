"""
People API
CRUD for the named people the caller's faces are assigned to.
"""

from fastapi import APIRouter, Depends

from core.logging import get_logger
from core.responses import ApiResponse
from models.requests.people import CreatePersonRequest, UpdatePersonRequest
from models.responses.faces import PersonView
from services.auth import AuthUser, require_auth
from services.people import PeopleService

from routers.dependencies import get_people_service

logger = get_logger(__name__)
router = APIRouter()


@router.get("")
async def get_people(
    user: AuthUser = Depends(require_auth),
    people: PeopleService = Depends(get_people_service),
):
    """Active people ordered by name, with face counts."""
    result = await people.list_people(user.id)
    return ApiResponse.ok(
        [PersonView.from_person(p).to_json() for p in result],
        meta={"count": len(result)},
    )


@router.get("/{person_id}")
async def get_person(
    person_id: str,
    user: AuthUser = Depends(require_auth),
    people: PeopleService = Depends(get_people_service),
):
    person = await people.get_person(user.id, person_id)
    return ApiResponse.ok(PersonView.from_person(person).to_json())


@router.post("")
async def create_person(
    data: CreatePersonRequest,
    user: AuthUser = Depends(require_auth),
    people: PeopleService = Depends(get_people_service),
):
    person = await people.create_person(
        user.id,
        data.name,
        display_name=data.display_name,
        description=data.description,
        relationship=data.relationship,
        is_primary_person=data.is_primary_person,
    )
    return ApiResponse.ok(PersonView.from_person(person).to_json())


@router.put("/{person_id}")
async def update_person(
    person_id: str,
    data: UpdatePersonRequest,
    user: AuthUser = Depends(require_auth),
    people: PeopleService = Depends(get_people_service),
):
    person = await people.update_person(user.id, person_id, **data.model_dump(exclude_none=True))
    return ApiResponse.ok(PersonView.from_person(person).to_json())


@router.delete("/{person_id}")
async def delete_person(
    person_id: str,
    user: AuthUser = Depends(require_auth),
    people: PeopleService = Depends(get_people_service),
):
    """Soft-delete a person; its face links are retired with it."""
    retired = await people.delete_person(user.id, person_id)
    return ApiResponse.ok({"deleted": True, "linksRetired": retired})
