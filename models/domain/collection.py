"""
Collection and asset domain models.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from models.domain.common import Lifecycle


class FaceCollection(BaseModel):
    """Local mirror of a user's Rekognition collection."""

    user_id: str
    collection_id: str = Field(..., description="Rekognition CollectionId")
    arn: Optional[str] = Field(None, description="Collection ARN")
    face_count: int = Field(0, ge=0)
    last_indexed_at: Optional[datetime] = None
    lifecycle: Lifecycle = Field(Lifecycle.ACTIVE)
    created_at: Optional[datetime] = None


class Asset(BaseModel):
    """Uploaded photo. Only the fields the face pipeline reads."""

    id: str
    user_id: str
    storage_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    file_name: Optional[str] = None
    title: Optional[str] = None
    created_at: Optional[datetime] = None
