"""
Face domain model.
Represents a detected face in a user's photo.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from models.domain.common import Lifecycle


class BoundingBox(BaseModel):
    """
    Face bounding box as fractions of the image dimensions.

    Left/top may fall slightly outside 0-1 for faces cut by the image edge.
    """

    left: float = Field(0.0, description="Left edge as a fraction of image width")
    top: float = Field(0.0, description="Top edge as a fraction of image height")
    width: float = Field(0.0, ge=0, description="Width as a fraction of image width")
    height: float = Field(0.0, ge=0, description="Height as a fraction of image height")

    def meets_min_size(self, min_width: float, min_height: float) -> bool:
        """A face is kept when it is wide enough OR tall enough."""
        return self.width >= min_width or self.height >= min_height

    @classmethod
    def from_provider(cls, data: Optional[dict]) -> "BoundingBox":
        """Create from a Rekognition BoundingBox dict (capitalized keys)."""
        data = data or {}
        return cls(
            left=data.get("Left", 0.0) or 0.0,
            top=data.get("Top", 0.0) or 0.0,
            width=data.get("Width", 0.0) or 0.0,
            height=data.get("Height", 0.0) or 0.0,
        )

    class Config:
        frozen = True  # Immutable


class Face(BaseModel):
    """Detected face stored for a user."""

    id: str = Field(..., description="Local face ID")
    user_id: str = Field(..., description="Owning user")
    asset_id: str = Field(..., description="Photo this face belongs to")
    provider_face_id: str = Field(..., description="Rekognition FaceId")

    bbox: BoundingBox = Field(default_factory=BoundingBox, description="Face location in image")
    confidence: float = Field(0.0, ge=0, le=1, description="Detection confidence")

    # Assignment state
    needs_assignment: bool = Field(True, description="Awaiting a user decision")
    auto_assigned: bool = Field(False, description="Linked by the system without confirmation")
    skipped: bool = Field(False, description="Permanently ignored by the user")

    lifecycle: Lifecycle = Field(Lifecycle.ACTIVE)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _skipped_faces_need_nothing(self) -> "Face":
        if self.skipped and self.needs_assignment:
            raise ValueError("a skipped face cannot need assignment")
        return self
