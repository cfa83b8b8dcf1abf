"""
Face Indexer.

Submits a photo to the user's collection and keeps the faces large enough
to matter. An asset that already has active faces is never sent to the
provider again, so retries cannot create duplicate provider-side faces.
"""

from typing import List, Optional, Tuple

from core.exceptions import ValidationError
from core.logging import get_logger
from infrastructure.rekognition import RekognitionClient
from infrastructure.storage import PhotoFetcher
from models.domain.recognition import DetectedFace, IndexedFaces
from repositories.faces_repo import FacesRepository
from services.collections import CollectionManager

logger = get_logger(__name__)


def filter_small_faces(
    faces: List[DetectedFace],
    min_width: float,
    min_height: float,
) -> Tuple[List[DetectedFace], List[DetectedFace]]:
    """
    Split faces into (kept, dropped). A face is dropped only when it is
    both narrower than min_width and shorter than min_height.
    """
    kept, dropped = [], []
    for face in faces:
        if face.bbox.meets_min_size(min_width, min_height):
            kept.append(face)
        else:
            dropped.append(face)
    return kept, dropped


class FaceIndexer:
    def __init__(
        self,
        rekognition: RekognitionClient,
        collection_manager: CollectionManager,
        faces: FacesRepository,
        fetcher: Optional[PhotoFetcher] = None,
        max_faces: int = 10,
        min_face_width: float = 0.03,
        min_face_height: float = 0.03,
    ):
        self.rekognition = rekognition
        self.collection_manager = collection_manager
        self.faces = faces
        self.fetcher = fetcher or PhotoFetcher()
        self.max_faces = max_faces
        self.min_face_width = min_face_width
        self.min_face_height = min_face_height

    async def index_faces(
        self,
        user_id: str,
        asset_id: str,
        image_bytes: Optional[bytes] = None,
        image_url: Optional[str] = None,
    ) -> IndexedFaces:
        """
        Index the faces of one photo.

        Bytes are downloaded from image_url only when the asset has not
        been indexed yet and no bytes were passed in.

        Raises:
            ValidationError: no image source
            InvalidImageError: provider rejected the image
            ProviderError: provider unreachable or unauthorized
        """
        existing = await self.faces.list_for_asset(asset_id, user_id)
        if existing:
            logger.info(f"Asset {asset_id} already has {len(existing)} face(s) indexed - skipping")
            return IndexedFaces(
                asset_id=asset_id,
                faces_detected=len(existing),
                already_processed=True,
            )

        if not image_bytes and not image_url:
            raise ValidationError("Photo bytes or URL are required", field="imageUrl")

        collection = await self.collection_manager.ensure_collection(user_id)

        if not image_bytes:
            image_bytes = await self.fetcher.fetch(image_url)

        result = await self.rekognition.index_faces(
            collection.collection_id,
            image_bytes,
            external_image_id=asset_id,
            max_faces=self.max_faces,
        )
        logger.info(f"IndexFaces detected {len(result.faces)} faces in asset {asset_id}")

        kept, dropped = filter_small_faces(result.faces, self.min_face_width, self.min_face_height)
        for face in dropped:
            logger.debug(
                f"Skipping tiny face {face.provider_face_id} "
                f"({face.bbox.width * 100:.1f}% x {face.bbox.height * 100:.1f}%)"
            )
        if dropped:
            logger.info(f"Filtered out {len(dropped)} tiny faces, {len(kept)} remain")

        return IndexedFaces(
            asset_id=asset_id,
            collection_id=collection.collection_id,
            faces_detected=len(kept),
            candidates=kept,
            filtered_out=len(dropped),
        )
