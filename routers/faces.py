"""
Faces API
Indexing, assignment decisions and collection status for the caller's photos.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.exceptions import ConflictError, FaceNotFoundError, PersonNotFoundError
from core.logging import get_logger
from core.responses import ApiResponse
from models.requests.faces import (
    AssignFaceRequest,
    CreatePersonFromFaceRequest,
    FaceIdRequest,
    IndexFacesRequest,
    ReindexRequest,
)
from models.responses.faces import AssignConflict, AssignNotFound
from services.assignment import AssignmentEngine
from services.auth import AuthUser, require_auth
from services.face_pipeline import FacePipeline

from routers.dependencies import get_engine, get_pipeline

logger = get_logger(__name__)
router = APIRouter()


@router.post("/index")
async def index_faces(
    data: IndexFacesRequest,
    user: AuthUser = Depends(require_auth),
    pipeline: FacePipeline = Depends(get_pipeline),
):
    """
    Detect, match and assign the faces of one photo.

    data.status tells which branch ran:
    - indexed: autoAssigned / needsUserInput buckets, filteredOut count
    - already_processed: the photo was indexed before, nothing changed
    - skipped: processFaces was false
    """
    result = await pipeline.index_photo(
        user.id,
        data.asset_id,
        image_url=data.image_url,
        process_faces=data.process_faces,
    )
    return ApiResponse.ok(result.to_json())


@router.post("/assign")
async def assign_face(
    data: AssignFaceRequest,
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    """Assign a face to a person. 409 if it already is, 404 if either is not yours."""
    outcome = await engine.assign(
        user.id,
        data.face_id,
        data.person_id,
        confidence=data.confidence,
        assigned_by=data.assigned_by,
    )

    if isinstance(outcome, AssignConflict):
        raise ConflictError(outcome.message, details={"faceId": outcome.face_id, "personId": outcome.person_id})
    if isinstance(outcome, AssignNotFound):
        if outcome.entity == "face":
            raise FaceNotFoundError(outcome.identifier)
        raise PersonNotFoundError(outcome.identifier)

    return ApiResponse.ok(outcome.to_json())


@router.post("/create-person")
async def create_person_from_face(
    data: CreatePersonFromFaceRequest,
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    created = await engine.create_person_from_face(
        user.id,
        data.face_id,
        data.person_name,
        display_name=data.display_name,
        relationship=data.relationship,
    )
    return ApiResponse.ok(created.to_json())


@router.post("/unassign")
async def unassign_face(
    data: FaceIdRequest,
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    face = await engine.unassign(user.id, data.face_id)
    return ApiResponse.ok(face.to_json())


@router.post("/skip")
async def skip_face(
    data: FaceIdRequest,
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    """Permanently ignore a face (strangers, background people)."""
    face = await engine.skip(user.id, data.face_id)
    return ApiResponse.ok(face.to_json())


@router.post("/search-matches")
async def search_face_matches(
    data: FaceIdRequest,
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    """
    Search again for an indexed face that has no person yet.

    data.action is auto_assigned when one person clearly wins,
    otherwise needs_user_input with the candidates grouped per person.
    """
    result = await engine.rematch(user.id, data.face_id)
    return ApiResponse.ok(result.to_json(), meta={"matchCount": result.match_count})


@router.get("/unassigned")
async def get_unassigned_faces(
    limit: int = Query(50, ge=1, le=500),
    user: AuthUser = Depends(require_auth),
    engine: AssignmentEngine = Depends(get_engine),
):
    faces = await engine.list_unassigned(user.id, limit=limit)
    return ApiResponse.ok(
        [face.to_json() for face in faces],
        meta={"count": len(faces), "limit": limit},
    )


@router.get("/collection-status")
async def get_collection_status(
    user: AuthUser = Depends(require_auth),
    pipeline: FacePipeline = Depends(get_pipeline),
):
    status = await pipeline.collection_status(user.id)
    return ApiResponse.ok(status.to_json())


@router.post("/reindex")
async def reindex_photos(
    data: Optional[ReindexRequest] = None,
    user: AuthUser = Depends(require_auth),
    pipeline: FacePipeline = Depends(get_pipeline),
):
    """Index every photo of the caller that has no faces yet."""
    limit = data.limit if data else None
    logger.info(f"Reindex requested by user {user.id} (limit={limit})")
    summary = await pipeline.reindex_user(user.id, limit=limit)
    return ApiResponse.ok(summary.to_json(), meta={"message": summary.message})
