"""
Response DTOs (API output).
"""

from models.responses.common import CamelModel
from models.responses.faces import (
    AssetView,
    FaceView,
    PersonView,
    LinkView,
    Suggestion,
    AutoAssigned,
    NeedsUserInput,
    FaceOutcome,
    IndexedPhoto,
    AlreadyProcessed,
    SkippedProcessing,
    PhotoIndexResult,
    AssignSuccess,
    AssignConflict,
    AssignNotFound,
    AssignOutcome,
    CreatedPerson,
    PersonCandidate,
    RematchResult,
    CollectionInfo,
    CollectionStatistics,
    CollectionStatus,
    ReindexError,
    ReindexSummary,
)

__all__ = [
    'CamelModel',
    'AssetView',
    'FaceView',
    'PersonView',
    'LinkView',
    'Suggestion',
    'AutoAssigned',
    'NeedsUserInput',
    'FaceOutcome',
    'IndexedPhoto',
    'AlreadyProcessed',
    'SkippedProcessing',
    'PhotoIndexResult',
    'AssignSuccess',
    'AssignConflict',
    'AssignNotFound',
    'AssignOutcome',
    'CreatedPerson',
    'PersonCandidate',
    'RematchResult',
    'CollectionInfo',
    'CollectionStatistics',
    'CollectionStatus',
    'ReindexError',
    'ReindexSummary',
]
