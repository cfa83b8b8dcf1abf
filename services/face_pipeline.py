"""
Face pipeline orchestration.

index_photo runs Indexer -> Match Resolver -> Assignment Engine for one
photo, one face at a time in provider order. Indexing for the same user is
serialized inside this process so two concurrent requests cannot both read
the user's face history before either writes.
"""

import asyncio
import weakref
from typing import Optional

from core.exceptions import AssetNotFoundError, ValidationError
from core.logging import get_logger, log_error
from models.domain.recognition import FaceWithMatches
from models.responses.faces import (
    AlreadyProcessed,
    AutoAssigned,
    CollectionStatistics,
    CollectionStatus,
    FaceView,
    IndexedPhoto,
    NeedsUserInput,
    PersonView,
    PhotoIndexResult,
    ReindexError,
    ReindexSummary,
    SkippedProcessing,
)
from repositories import Repositories
from services.assignment import AssignmentEngine
from services.face_indexer import FaceIndexer
from services.match_resolver import MatchResolver
from services.people import PeopleService

logger = get_logger(__name__)

RECENT_FACES = 5


class UserLocks:
    """One asyncio.Lock per user id, dropped once nobody holds a reference."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_user(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


class FacePipeline:
    def __init__(
        self,
        indexer: FaceIndexer,
        resolver: MatchResolver,
        engine: AssignmentEngine,
        people_service: PeopleService,
        repos: Repositories,
    ):
        self.indexer = indexer
        self.resolver = resolver
        self.engine = engine
        self.people_service = people_service
        self.repos = repos
        self._locks = UserLocks()

    async def index_photo(
        self,
        user_id: str,
        asset_id: str,
        image_url: Optional[str] = None,
        image_bytes: Optional[bytes] = None,
        process_faces: bool = True,
    ) -> PhotoIndexResult:
        if not asset_id:
            raise ValidationError("Missing required parameter: assetId", field="assetId")
        if not image_url and not image_bytes:
            raise ValidationError("Missing required parameter: imageUrl", field="imageUrl")

        # Another user's photo looks exactly like a missing one
        if await self.repos.assets.get_owned(asset_id, user_id) is None:
            logger.warning(f"Asset {asset_id} not found for user {user_id}")
            raise AssetNotFoundError(asset_id)

        if not process_faces:
            logger.info(f"Skipping face recognition for asset {asset_id} (not requested)")
            return SkippedProcessing(asset_id=asset_id)

        async with self._locks.for_user(user_id):
            return await self._index_locked(user_id, asset_id, image_url, image_bytes)

    async def _index_locked(self, user_id, asset_id, image_url, image_bytes) -> PhotoIndexResult:
        logger.info(f"Starting face indexing for asset {asset_id}")

        indexed = await self.indexer.index_faces(
            user_id, asset_id, image_bytes=image_bytes, image_url=image_url
        )
        if indexed.already_processed:
            return AlreadyProcessed(asset_id=asset_id, faces_detected=indexed.faces_detected)

        result = IndexedPhoto(
            asset_id=asset_id,
            faces_detected=indexed.faces_detected,
            filtered_out=indexed.filtered_out,
        )
        if not indexed.candidates:
            logger.info(f"No meaningful faces in asset {asset_id}")
            return result

        for detected in indexed.candidates:
            try:
                matches = await self.resolver.find_matches(
                    indexed.collection_id, detected.provider_face_id, user_id
                )
                outcome = await self.engine.process_face(
                    user_id, asset_id, FaceWithMatches(face=detected, matches=matches)
                )
            except Exception as e:
                # One bad face must not block the rest of the photo
                log_error(
                    logger, e, context="index",
                    user_id=user_id, asset_id=asset_id, face_id=detected.provider_face_id,
                )
                result.failed += 1
                continue

            if isinstance(outcome, AutoAssigned):
                result.auto_assigned.append(outcome)
            elif isinstance(outcome, NeedsUserInput):
                result.needs_user_input.append(outcome)

        await self.repos.assets.save_face_summary(
            asset_id,
            user_id,
            faces_detected=result.faces_detected,
            auto_assigned=len(result.auto_assigned),
            needs_user_input=len(result.needs_user_input),
        )

        logger.info(
            f"Face indexing complete for asset {asset_id}: "
            f"{len(result.auto_assigned)} auto-assigned, "
            f"{len(result.needs_user_input)} need input, {result.failed} failed"
        )
        return result

    async def reindex_user(self, user_id: str, limit: Optional[int] = None) -> ReindexSummary:
        """
        Index every image of a user, oldest first. A failing photo is
        recorded in the summary and the run continues.
        """
        assets = await self.repos.assets.list_images_for_user(user_id, limit=limit)
        summary = ReindexSummary(total=len(assets))
        logger.info(f"Reindexing {len(assets)} photos for user {user_id}")

        for position, asset in enumerate(assets, start=1):
            logger.debug(f"Processing asset {asset.id} ({position}/{len(assets)})")
            try:
                result = await self.index_photo(user_id, asset.id, image_url=asset.storage_url)
            except Exception as e:
                message = getattr(e, "message", None) or str(e)
                log_error(logger, e, context="reindex", user_id=user_id, asset_id=asset.id)
                summary.errors.append(ReindexError(asset_id=asset.id, file_name=asset.file_name, error=message))
                continue

            summary.processed += 1
            if isinstance(result, (IndexedPhoto, AlreadyProcessed)):
                summary.faces_detected += result.faces_detected
                summary.auto_assigned += len(result.auto_assigned)
                summary.needs_user_input += len(result.needs_user_input)

        logger.info(f"Reindex complete for user {user_id}: {summary.message}")
        return summary

    async def collection_status(self, user_id: str) -> CollectionStatus:
        collection = await self.repos.collections.get_for_user(user_id)
        faces = await self.repos.faces.list_for_user(user_id)
        people = await self.people_service.list_people(user_id)

        average = sum(f.confidence for f in faces) / len(faces) if faces else 0.0
        recent = sorted(faces, key=lambda f: f.created_at.timestamp() if f.created_at else 0, reverse=True)
        recent = recent[:RECENT_FACES]

        return CollectionStatus(
            has_collection=collection is not None,
            collection=CollectionStatus.describe_collection(collection),
            statistics=CollectionStatistics(
                total_faces=len(faces),
                total_people=len(people),
                average_confidence=round(average, 2),
                recent_activity=len(recent),
            ),
            recent_faces=[FaceView.from_face(f) for f in recent],
            people=[PersonView.from_person(p) for p in people],
        )
