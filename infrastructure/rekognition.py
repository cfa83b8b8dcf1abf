"""
AWS Rekognition adapter.

Wraps the boto3 client used for per-user face collections and turns
botocore failures into application exceptions:
- ResourceNotFoundException on describe -> CollectionNotFoundError
- malformed image on IndexFaces -> InvalidImageError (HTTP 400)
- anything else -> ProviderError (HTTP 500) carrying the AWS message

boto3 calls block, so every public method runs the call in a worker thread.
"""

import asyncio
from typing import List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import Settings
from core.exceptions import CollectionNotFoundError, InvalidImageError, ProviderError
from core.logging import get_logger
from models.domain.face import BoundingBox
from models.domain.recognition import (
    CollectionDescription,
    DetectedFace,
    FaceMatch,
    IndexFacesResult,
)

logger = get_logger(__name__)

NOT_FOUND = "ResourceNotFoundException"
INVALID_IMAGE_CODES = {
    "InvalidImageFormatException",
    "ImageTooLargeException",
    "InvalidParameterException",
}


def create_rekognition_client(settings: Settings):
    """Build the raw boto3 client from settings."""
    kwargs = {"region_name": settings.aws_region}
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    return boto3.client("rekognition", **kwargs)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message") or str(error)


class RekognitionClient:
    """Face collection operations against AWS Rekognition."""

    def __init__(self, client):
        """
        Args:
            client: boto3 Rekognition client (see create_rekognition_client)
        """
        self._client = client

    def _provider_error(self, operation: str, error: Exception) -> ProviderError:
        if isinstance(error, ClientError):
            code = _error_code(error)
            message = _error_message(error)
        else:
            code = type(error).__name__
            message = str(error)
        logger.error(f"Rekognition {operation} failed: {code} {message}")
        return ProviderError(message, operation=operation, provider_code=code)

    # ============================================================
    # Collections
    # ============================================================

    def _describe_collection(self, collection_id: str) -> CollectionDescription:
        try:
            response = self._client.describe_collection(CollectionId=collection_id)
        except ClientError as e:
            if _error_code(e) == NOT_FOUND:
                raise CollectionNotFoundError(collection_id)
            raise self._provider_error("describe_collection", e)
        except BotoCoreError as e:
            raise self._provider_error("describe_collection", e)

        return CollectionDescription(
            collection_id=collection_id,
            arn=response.get("CollectionARN"),
            face_count=response.get("FaceCount", 0) or 0,
        )

    async def describe_collection(self, collection_id: str) -> CollectionDescription:
        return await asyncio.to_thread(self._describe_collection, collection_id)

    def _create_collection(self, collection_id: str) -> CollectionDescription:
        try:
            response = self._client.create_collection(CollectionId=collection_id)
        except (ClientError, BotoCoreError) as e:
            raise self._provider_error("create_collection", e)

        logger.info(f"Created Rekognition collection {collection_id}")
        return CollectionDescription(
            collection_id=collection_id,
            arn=response.get("CollectionArn"),
            face_count=0,
        )

    async def create_collection(self, collection_id: str) -> CollectionDescription:
        return await asyncio.to_thread(self._create_collection, collection_id)

    def _delete_collection(self, collection_id: str) -> bool:
        try:
            self._client.delete_collection(CollectionId=collection_id)
        except ClientError as e:
            if _error_code(e) == NOT_FOUND:
                return False
            raise self._provider_error("delete_collection", e)
        except BotoCoreError as e:
            raise self._provider_error("delete_collection", e)

        logger.info(f"Deleted Rekognition collection {collection_id}")
        return True

    async def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection. Returns False when it did not exist."""
        return await asyncio.to_thread(self._delete_collection, collection_id)

    # ============================================================
    # Faces
    # ============================================================

    def _index_faces(
        self,
        collection_id: str,
        image_bytes: bytes,
        external_image_id: str,
        max_faces: int,
    ) -> IndexFacesResult:
        try:
            response = self._client.index_faces(
                CollectionId=collection_id,
                Image={"Bytes": image_bytes},
                ExternalImageId=external_image_id,
                DetectionAttributes=["DEFAULT"],
                MaxFaces=max_faces,
                QualityFilter="AUTO",
            )
        except ClientError as e:
            if _error_code(e) in INVALID_IMAGE_CODES:
                logger.warning(f"Rekognition rejected image {external_image_id}: {_error_message(e)}")
                raise InvalidImageError(_error_message(e))
            raise self._provider_error("index_faces", e)
        except BotoCoreError as e:
            raise self._provider_error("index_faces", e)

        faces = []
        for record in response.get("FaceRecords", []):
            face = record.get("Face", {})
            faces.append(DetectedFace(
                provider_face_id=face["FaceId"],
                bbox=BoundingBox.from_provider(face.get("BoundingBox")),
                confidence=face.get("Confidence", 0.0),
            ))

        return IndexFacesResult(
            faces=faces,
            unindexed_count=len(response.get("UnindexedFaces", [])),
        )

    async def index_faces(
        self,
        collection_id: str,
        image_bytes: bytes,
        external_image_id: str,
        max_faces: int = 10,
    ) -> IndexFacesResult:
        """Detect faces in the image and add them to the collection."""
        return await asyncio.to_thread(
            self._index_faces, collection_id, image_bytes, external_image_id, max_faces
        )

    def _search_faces(
        self,
        collection_id: str,
        face_id: str,
        threshold: float,
        max_faces: int,
    ) -> List[FaceMatch]:
        try:
            response = self._client.search_faces(
                CollectionId=collection_id,
                FaceId=face_id,
                FaceMatchThreshold=threshold,
                MaxFaces=max_faces,
            )
        except (ClientError, BotoCoreError) as e:
            raise self._provider_error("search_faces", e)

        return [
            FaceMatch(face_id=match["Face"]["FaceId"], similarity=match.get("Similarity", 0.0))
            for match in response.get("FaceMatches", [])
        ]

    async def search_faces(
        self,
        collection_id: str,
        face_id: str,
        threshold: float = 80.0,
        max_faces: int = 5,
    ) -> List[FaceMatch]:
        """Faces in the collection similar to face_id, most similar first."""
        return await asyncio.to_thread(
            self._search_faces, collection_id, face_id, threshold, max_faces
        )

    def _delete_faces(self, collection_id: str, face_ids: List[str]) -> List[str]:
        try:
            response = self._client.delete_faces(CollectionId=collection_id, FaceIds=face_ids)
        except (ClientError, BotoCoreError) as e:
            raise self._provider_error("delete_faces", e)
        deleted = response.get("DeletedFaces", [])
        logger.info(f"Deleted {len(deleted)} faces from {collection_id}")
        return deleted

    async def delete_faces(self, collection_id: str, face_ids: List[str]) -> List[str]:
        if not face_ids:
            return []
        return await asyncio.to_thread(self._delete_faces, collection_id, face_ids)
