"""
Person domain model.
A named identity a user links faces to ("Grandma", "Me").
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from models.domain.common import Lifecycle


class Person(BaseModel):
    """Full person model."""

    id: str = Field(..., description="Unique person ID")
    user_id: str = Field(..., description="Owning user")

    name: str = Field(..., description="Unique per user among active people")
    display_name: Optional[str] = None
    description: Optional[str] = None
    relationship: Optional[str] = Field(None, description="Relationship label, e.g. 'grandmother'")
    is_primary_person: bool = False
    avatar_face_id: Optional[str] = Field(None, description="Face used as avatar")

    lifecycle: Lifecycle = Field(Lifecycle.ACTIVE)

    # Filled by list queries only
    face_count: Optional[int] = Field(None, ge=0)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
