"""
Face-to-person link domain model.
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from models.domain.common import Lifecycle


class AssignedBy(str, Enum):
    SYSTEM = "system"
    USER = "user"
    AI = "ai"


class FacePersonLink(BaseModel):
    """
    Assignment of a face to a person.
    A face has at most one active link; a new assignment retires the old one.
    """

    id: str
    face_id: str
    person_id: str
    confidence: float = Field(1.0, ge=0, le=1)
    assigned_by: AssignedBy = AssignedBy.USER
    assigned_at: Optional[datetime] = None
    lifecycle: Lifecycle = Field(Lifecycle.ACTIVE)
