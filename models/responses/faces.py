"""
Face pipeline response models.

Indexing, assignment and bulk results are tagged unions so callers can
branch on `status` / `kind` / `outcome` instead of probing boolean flags.
"""

from typing import Optional, List, Union, Literal, Dict, Any, Annotated
from datetime import datetime
from pydantic import Field

from models.domain.face import Face, BoundingBox
from models.domain.person import Person
from models.domain.link import FacePersonLink, AssignedBy
from models.domain.collection import Asset, FaceCollection
from models.responses.common import CamelModel


# ============================================================
# Views
# ============================================================

class AssetView(CamelModel):
    id: str
    storage_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetView":
        return cls(
            id=asset.id,
            storage_url=asset.storage_url,
            thumbnail_url=asset.thumbnail_url,
            title=asset.title,
        )


class FaceView(CamelModel):
    id: str
    asset_id: str
    provider_face_id: str
    bounding_box: BoundingBox
    confidence: float
    needs_assignment: bool
    auto_assigned: bool
    skipped: bool
    created_at: Optional[datetime] = None
    asset: Optional[AssetView] = None

    @classmethod
    def from_face(cls, face: Face, asset: Optional[Asset] = None) -> "FaceView":
        return cls(
            id=face.id,
            asset_id=face.asset_id,
            provider_face_id=face.provider_face_id,
            bounding_box=face.bbox,
            confidence=face.confidence,
            needs_assignment=face.needs_assignment,
            auto_assigned=face.auto_assigned,
            skipped=face.skipped,
            created_at=face.created_at,
            asset=AssetView.from_asset(asset) if asset else None,
        )


class PersonView(CamelModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    relationship: Optional[str] = None
    is_primary_person: bool = False
    avatar_face_id: Optional[str] = None
    face_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_person(cls, person: Person) -> "PersonView":
        return cls(
            id=person.id,
            name=person.name,
            display_name=person.display_name,
            description=person.description,
            relationship=person.relationship,
            is_primary_person=person.is_primary_person,
            avatar_face_id=person.avatar_face_id,
            face_count=person.face_count,
            created_at=person.created_at,
            updated_at=person.updated_at,
        )


class LinkView(CamelModel):
    id: str
    face_id: str
    person_id: str
    confidence: float
    assigned_by: AssignedBy
    assigned_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link: FacePersonLink) -> "LinkView":
        return cls(
            id=link.id,
            face_id=link.face_id,
            person_id=link.person_id,
            confidence=link.confidence,
            assigned_by=link.assigned_by,
            assigned_at=link.assigned_at,
        )


# ============================================================
# Per-face outcomes
# ============================================================

class Suggestion(CamelModel):
    person: PersonView
    similarity: float
    face_id: str = Field(..., description="Provider face id of the matched face")


class AutoAssigned(CamelModel):
    kind: Literal["auto_assigned"] = "auto_assigned"
    face: FaceView
    person: PersonView
    similarity: float


class NeedsUserInput(CamelModel):
    kind: Literal["needs_user_input"] = "needs_user_input"
    face: FaceView
    suggestions: List[Suggestion] = Field(default_factory=list)


FaceOutcome = Annotated[Union[AutoAssigned, NeedsUserInput], Field(discriminator="kind")]


# ============================================================
# Per-photo results
# ============================================================

class IndexedPhoto(CamelModel):
    status: Literal["indexed"] = "indexed"
    asset_id: str
    faces_detected: int = 0
    filtered_out: int = 0
    failed: int = 0
    auto_assigned: List[AutoAssigned] = Field(default_factory=list)
    needs_user_input: List[NeedsUserInput] = Field(default_factory=list)


class AlreadyProcessed(CamelModel):
    status: Literal["already_processed"] = "already_processed"
    asset_id: str
    already_processed: bool = True
    faces_detected: int = 0
    auto_assigned: List[AutoAssigned] = Field(default_factory=list)
    needs_user_input: List[NeedsUserInput] = Field(default_factory=list)


class SkippedProcessing(CamelModel):
    status: Literal["skipped"] = "skipped"
    asset_id: str
    skipped: bool = True
    message: str = "Face recognition not requested"


PhotoIndexResult = Annotated[
    Union[IndexedPhoto, AlreadyProcessed, SkippedProcessing],
    Field(discriminator="status"),
]


# ============================================================
# Assignment outcomes
# ============================================================

class AssignSuccess(CamelModel):
    outcome: Literal["success"] = "success"
    link: LinkView
    person: PersonView


class AssignConflict(CamelModel):
    outcome: Literal["conflict"] = "conflict"
    face_id: str
    person_id: str
    message: str = "Face is already assigned to this person"


class AssignNotFound(CamelModel):
    outcome: Literal["not_found"] = "not_found"
    entity: Literal["face", "person"]
    identifier: str


AssignOutcome = Annotated[
    Union[AssignSuccess, AssignConflict, AssignNotFound],
    Field(discriminator="outcome"),
]


class CreatedPerson(CamelModel):
    person: PersonView
    face_id: str
    link_id: str


# ============================================================
# Re-search of an indexed face
# ============================================================

class PersonCandidate(CamelModel):
    """All matches of one person, folded together."""

    person: PersonView
    match_count: int = 0
    max_similarity: float = 0.0
    average_similarity: float = 0.0


class RematchResult(CamelModel):
    action: Literal["auto_assigned", "needs_user_input"]
    face: FaceView
    person: Optional[PersonView] = None
    similarity: Optional[float] = None
    match_count: int = 0
    candidates: List[PersonCandidate] = Field(default_factory=list)


# ============================================================
# Collections and bulk operations
# ============================================================

class CollectionInfo(CamelModel):
    collection_id: str
    already_existed: bool
    face_count: int = 0
    arn: Optional[str] = None


class CollectionStatistics(CamelModel):
    total_faces: int = 0
    total_people: int = 0
    average_confidence: float = 0.0
    recent_activity: int = 0


class CollectionStatus(CamelModel):
    has_collection: bool
    collection: Optional[Dict[str, Any]] = None
    statistics: CollectionStatistics
    recent_faces: List[FaceView] = Field(default_factory=list)
    people: List[PersonView] = Field(default_factory=list)

    @staticmethod
    def describe_collection(collection: Optional[FaceCollection]) -> Optional[Dict[str, Any]]:
        if collection is None:
            return None
        return {
            "collectionId": collection.collection_id,
            "arn": collection.arn,
            "faceCount": collection.face_count,
            "lastIndexedAt": collection.last_indexed_at.isoformat() if collection.last_indexed_at else None,
        }


class ReindexError(CamelModel):
    asset_id: str
    file_name: Optional[str] = None
    error: str


class ReindexSummary(CamelModel):
    processed: int = 0
    total: int = 0
    faces_detected: int = 0
    auto_assigned: int = 0
    needs_user_input: int = 0
    errors: List[ReindexError] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Processed {self.processed} photos. {self.faces_detected} faces detected, "
            f"{self.auto_assigned} auto-assigned, {self.needs_user_input} need your review."
        )
