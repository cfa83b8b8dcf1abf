"""
Services package - business logic of the face pipeline.

build_services() wires every service from one Settings object; the app
factory and the backfill script both go through it.
"""

from dataclasses import dataclass

from core.config import Settings
from core.logging import get_logger
from infrastructure import PhotoFetcher, RekognitionClient, SupabaseClient, create_rekognition_client
from repositories import Repositories
from services.assignment import AssignmentEngine
from services.collections import CollectionManager
from services.face_indexer import FaceIndexer
from services.face_pipeline import FacePipeline
from services.match_resolver import MatchResolver
from services.people import PeopleService

logger = get_logger(__name__)


@dataclass
class FaceServices:
    repos: Repositories
    collections: CollectionManager
    people: PeopleService
    engine: AssignmentEngine
    pipeline: FacePipeline


def assemble_services(
    settings: Settings,
    repos: Repositories,
    rekognition: RekognitionClient,
    fetcher: PhotoFetcher,
) -> FaceServices:
    """Wire services over already-built adapters."""
    collections = CollectionManager(rekognition, repos.collections, prefix=settings.collection_prefix)
    people = PeopleService(repos.people, repos.links)
    indexer = FaceIndexer(
        rekognition,
        collections,
        repos.faces,
        fetcher=fetcher,
        max_faces=settings.max_faces_per_image,
        min_face_width=settings.min_face_width,
        min_face_height=settings.min_face_height,
    )
    resolver = MatchResolver(
        rekognition,
        repos.faces,
        similarity_floor=settings.match_similarity_floor,
        max_matches=settings.max_matches,
    )
    engine = AssignmentEngine(
        repos.faces,
        repos.people,
        repos.links,
        repos.assets,
        people,
        auto_assign_similarity=settings.auto_assign_similarity,
        similarity_floor=settings.match_similarity_floor,
        max_suggestions=settings.max_suggestions,
        resolver=resolver,
        collections=repos.collections,
        rematch_min_matches=settings.rematch_min_matches,
        rematch_single_similarity=settings.rematch_single_similarity,
    )
    pipeline = FacePipeline(indexer, resolver, engine, people, repos)
    return FaceServices(
        repos=repos,
        collections=collections,
        people=people,
        engine=engine,
        pipeline=pipeline,
    )


def build_services(settings: Settings) -> FaceServices:
    """Create Supabase, Rekognition and storage adapters and wire services."""
    supabase_client = SupabaseClient(settings)
    rekognition = RekognitionClient(create_rekognition_client(settings))
    fetcher = PhotoFetcher(timeout=settings.image_fetch_timeout)
    logger.info("✓ Created Supabase, Rekognition and storage adapters")
    return assemble_services(settings, Repositories.from_client(supabase_client), rekognition, fetcher)


__all__ = [
    'FaceServices',
    'assemble_services',
    'build_services',
    'AssignmentEngine',
    'CollectionManager',
    'FaceIndexer',
    'FacePipeline',
    'MatchResolver',
    'PeopleService',
]
