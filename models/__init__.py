"""
Models package - data structures for the application.

Subpackages:
- domain/ - Domain models (core business entities)
- requests/ - Request DTOs (API input)
- responses/ - Response DTOs (API output)
"""

from models.domain import (
    Lifecycle,
    Face,
    BoundingBox,
    Person,
    FacePersonLink,
    AssignedBy,
    FaceCollection,
    Asset,
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
]
