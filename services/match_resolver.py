"""
Match Resolver.

Searches the user's collection for faces similar to a freshly indexed one
and keeps only matches backed by the user's own active face records.
"""

from typing import List

from core.exceptions import ProviderError
from core.logging import get_logger
from infrastructure.rekognition import RekognitionClient
from models.domain.recognition import FaceMatch
from repositories.faces_repo import FacesRepository

logger = get_logger(__name__)


class MatchResolver:
    def __init__(
        self,
        rekognition: RekognitionClient,
        faces: FacesRepository,
        similarity_floor: float = 80.0,
        max_matches: int = 5,
    ):
        self.rekognition = rekognition
        self.faces = faces
        self.similarity_floor = similarity_floor
        self.max_matches = max_matches

    async def find_matches(self, collection_id: str, face_id: str, user_id: str) -> List[FaceMatch]:
        """
        User-owned matches for a provider face id, most similar first.

        A failed search (typically the first face in a fresh collection)
        yields no matches rather than an error.
        """
        try:
            matches = await self.rekognition.search_faces(
                collection_id,
                face_id,
                threshold=self.similarity_floor,
                max_faces=self.max_matches,
            )
        except ProviderError as e:
            logger.warning(f"Search failed for face {face_id}, continuing without matches: {e.message}")
            return []

        logger.debug(f"Found {len(matches)} raw matches for face {face_id}")
        return await self.filter_user_matches(matches, user_id)

    async def filter_user_matches(self, matches: List[FaceMatch], user_id: str) -> List[FaceMatch]:
        """Drop matches whose face record is not an active face of user_id."""
        if not matches:
            return []
        owned = await self.faces.owned_provider_ids(user_id, [m.face_id for m in matches])
        kept = [m for m in matches if m.face_id in owned]
        if len(kept) != len(matches):
            logger.info(f"Dropped {len(matches) - len(kept)} matches not owned by user {user_id}")
        return kept
