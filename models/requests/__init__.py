"""
Request DTOs (API input).
"""

from models.requests.faces import (
    IndexFacesRequest,
    AssignFaceRequest,
    CreatePersonFromFaceRequest,
    FaceIdRequest,
    ReindexRequest,
)
from models.requests.people import CreatePersonRequest, UpdatePersonRequest

__all__ = [
    'IndexFacesRequest',
    'AssignFaceRequest',
    'CreatePersonFromFaceRequest',
    'FaceIdRequest',
    'ReindexRequest',
    'CreatePersonRequest',
    'UpdatePersonRequest',
]
