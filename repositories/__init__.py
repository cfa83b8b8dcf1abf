"""
Repositories package - data access layer.

Repositories handle all database operations.
No business logic - only queries and data transformation.

Usage:
    from repositories import FacesRepository

    repo = FacesRepository(supabase_client)
    faces = await repo.list_for_asset(asset_id, user_id)
"""

from dataclasses import dataclass

from repositories.base import BaseRepository
from repositories.faces_repo import FacesRepository
from repositories.people_repo import PeopleRepository
from repositories.links_repo import LinksRepository
from repositories.collections_repo import CollectionsRepository
from repositories.assets_repo import AssetsRepository


@dataclass
class Repositories:
    """Bundle of the repositories the face pipeline depends on."""

    faces: FacesRepository
    people: PeopleRepository
    links: LinksRepository
    collections: CollectionsRepository
    assets: AssetsRepository

    @classmethod
    def from_client(cls, supabase_client) -> "Repositories":
        return cls(
            faces=FacesRepository(supabase_client),
            people=PeopleRepository(supabase_client),
            links=LinksRepository(supabase_client),
            collections=CollectionsRepository(supabase_client),
            assets=AssetsRepository(supabase_client),
        )


__all__ = [
    'BaseRepository',
    'FacesRepository',
    'PeopleRepository',
    'LinksRepository',
    'CollectionsRepository',
    'AssetsRepository',
    'Repositories',
]
