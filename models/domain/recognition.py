"""
Vision provider value objects.
Shapes returned by the Rekognition adapter, independent of boto3 dicts.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from models.domain.face import BoundingBox


class DetectedFace(BaseModel):
    """One face record returned by IndexFaces."""

    provider_face_id: str
    bbox: BoundingBox
    confidence: float = Field(..., ge=0, le=100, description="Provider confidence, percent")

    @property
    def confidence_ratio(self) -> float:
        return self.confidence / 100


class FaceMatch(BaseModel):
    """One similar face returned by SearchFaces."""

    face_id: str = Field(..., description="Provider face id of the matched face")
    similarity: float = Field(..., ge=0, le=100, description="Similarity, percent")


class CollectionDescription(BaseModel):
    collection_id: str
    arn: Optional[str] = None
    face_count: int = 0


class IndexFacesResult(BaseModel):
    faces: List[DetectedFace] = Field(default_factory=list)
    unindexed_count: int = 0


class IndexedFaces(BaseModel):
    """Face indexer output for one photo."""

    asset_id: str
    collection_id: Optional[str] = None
    faces_detected: int = 0
    candidates: List[DetectedFace] = Field(default_factory=list)
    filtered_out: int = 0
    already_processed: bool = False


class FaceWithMatches(BaseModel):
    """A freshly indexed face and the user-owned faces it resembles."""

    face: DetectedFace
    matches: List[FaceMatch] = Field(default_factory=list)

    @property
    def best_match(self) -> Optional[FaceMatch]:
        return self.matches[0] if self.matches else None
