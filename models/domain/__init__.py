"""
Domain models - core business entities.

These are the source of truth for data structures.
All other layers (requests, responses, repositories) derive from these.
"""

from models.domain.common import Lifecycle
from models.domain.face import Face, BoundingBox
from models.domain.person import Person
from models.domain.link import FacePersonLink, AssignedBy
from models.domain.collection import FaceCollection, Asset
from models.domain.recognition import (
    DetectedFace,
    FaceMatch,
    CollectionDescription,
    IndexFacesResult,
    IndexedFaces,
    FaceWithMatches,
)

__all__ = [
    'Lifecycle',
    'Face',
    'BoundingBox',
    'Person',
    'FacePersonLink',
    'AssignedBy',
    'FaceCollection',
    'Asset',
    'DetectedFace',
    'FaceMatch',
    'CollectionDescription',
    'IndexFacesResult',
    'IndexedFaces',
    'FaceWithMatches',
]
