"""
Face pipeline request models.
Bodies arrive with camelCase keys; snake_case is accepted as well.
"""

from typing import Optional
from pydantic import Field

from models.domain.link import AssignedBy
from models.responses.common import CamelModel


class IndexFacesRequest(CamelModel):
    """Index the faces of one photo."""

    asset_id: str = Field(..., min_length=1, description="Photo ID")
    image_url: Optional[str] = Field(None, description="URL the photo bytes are fetched from")
    process_faces: bool = Field(True, description="False skips face processing entirely")


class AssignFaceRequest(CamelModel):
    face_id: str = Field(..., min_length=1)
    person_id: str = Field(..., min_length=1)
    confidence: float = Field(1.0, ge=0, le=1)
    assigned_by: AssignedBy = AssignedBy.USER


class CreatePersonFromFaceRequest(CamelModel):
    face_id: str = Field(..., min_length=1)
    person_name: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    relationship: Optional[str] = None


class FaceIdRequest(CamelModel):
    """Body of unassign/skip calls."""

    face_id: str = Field(..., min_length=1)


class ReindexRequest(CamelModel):
    limit: Optional[int] = Field(None, ge=1, description="Process at most this many photos")
