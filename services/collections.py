"""
Collection Manager.

Each user gets an isolated Rekognition collection named
`<prefix><user_id>`. Face search never crosses collections, which is
what keeps one user's faces out of another user's matches.
"""

from typing import List

from core.exceptions import CollectionNotFoundError
from core.logging import get_logger
from infrastructure.rekognition import RekognitionClient
from models.responses.faces import CollectionInfo
from repositories.collections_repo import CollectionsRepository

logger = get_logger(__name__)

DEFAULT_COLLECTION_PREFIX = "savta-user-"


class CollectionManager:
    """Lazily creates per-user collections and mirrors them locally."""

    def __init__(
        self,
        rekognition: RekognitionClient,
        collections: CollectionsRepository,
        prefix: str = DEFAULT_COLLECTION_PREFIX,
    ):
        self.rekognition = rekognition
        self.collections = collections
        self.prefix = prefix

    def collection_id_for(self, user_id: str) -> str:
        return f"{self.prefix}{user_id}"

    async def ensure_collection(self, user_id: str) -> CollectionInfo:
        """
        Describe the user's collection, creating it when missing, then
        upsert the local mirror row.

        Provider errors other than "not found" propagate unchanged.
        """
        collection_id = self.collection_id_for(user_id)

        try:
            description = await self.rekognition.describe_collection(collection_id)
            already_existed = True
            logger.debug(f"Collection exists: {collection_id} ({description.face_count} faces)")
        except CollectionNotFoundError:
            logger.info(f"Creating new collection: {collection_id}")
            description = await self.rekognition.create_collection(collection_id)
            already_existed = False

        await self.collections.upsert(
            user_id=user_id,
            collection_id=collection_id,
            arn=description.arn,
            face_count=description.face_count,
        )

        return CollectionInfo(
            collection_id=collection_id,
            already_existed=already_existed,
            face_count=description.face_count,
            arn=description.arn,
        )

    async def delete_collection(self, user_id: str) -> bool:
        """
        Account teardown: drop the provider collection and retire the mirror.
        Returns whether the provider collection existed.
        """
        collection_id = self.collection_id_for(user_id)
        existed = await self.rekognition.delete_collection(collection_id)
        await self.collections.mark_deleted(user_id)
        logger.info(f"Collection {collection_id} torn down (existed={existed})")
        return existed

    async def remove_faces(self, user_id: str, provider_face_ids: List[str]) -> List[str]:
        """Remove faces from the user's collection."""
        if not provider_face_ids:
            return []
        return await self.rekognition.delete_faces(self.collection_id_for(user_id), provider_face_ids)
