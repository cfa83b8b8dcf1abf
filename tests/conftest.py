import httpx
import pytest

from infrastructure.rekognition import RekognitionClient
from infrastructure.storage import PhotoFetcher
from repositories import Repositories
from services import assemble_services

from tests.fakes import PHOTO_BYTES, USER, FakeRekognitionApi, InMemorySupabase, make_settings


def photo_transport(request):
    if request.url.path.endswith("/missing.jpg"):
        return httpx.Response(404)
    return httpx.Response(200, content=PHOTO_BYTES)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def supabase():
    return InMemorySupabase()


@pytest.fixture
def db(supabase):
    return supabase.db


@pytest.fixture
def api():
    return FakeRekognitionApi()


@pytest.fixture
def repos(supabase):
    return Repositories.from_client(supabase)


@pytest.fixture
def services(settings, repos, api):
    fetcher = PhotoFetcher(transport=httpx.MockTransport(photo_transport))
    return assemble_services(settings, repos, RekognitionClient(api), fetcher)


@pytest.fixture
def seed_person(db):
    def _seed(name, user_id=USER, **fields):
        return db.seed("person_groups", user_id=user_id, name=name, display_name=name, **fields)
    return _seed


@pytest.fixture
def seed_face(db):
    """Stored face, optionally linked to a person."""
    def _seed(provider_face_id, user_id=USER, asset_id="old-photo", person_id=None, **fields):
        row = {
            "user_id": user_id,
            "asset_id": asset_id,
            "rekognition_face_id": provider_face_id,
            "rekognition_image_id": asset_id,
            "bounding_box": {"left": 0.1, "top": 0.1, "width": 0.2, "height": 0.2},
            "confidence": 0.99,
            "needs_assignment": person_id is None,
            "auto_assigned": False,
            "skipped": False,
        }
        row.update(fields)
        face = db.seed("faces", **row)
        if person_id:
            db.seed(
                "face_person_links",
                face_id=face["id"],
                person_group_id=person_id,
                confidence=1.0,
                assigned_by="user",
                assigned_at=db.next_timestamp(),
            )
        return face
    return _seed


@pytest.fixture
def seed_asset(db):
    def _seed(asset_id, user_id=USER, **fields):
        row = {
            "user_id": user_id,
            "mime_type": "image/jpeg",
            "storage_url": f"https://cdn.test/{asset_id}.jpg",
            "file_name": f"{asset_id}.jpg",
        }
        row.update(fields)
        return db.seed("assets", id=asset_id, **row)
    return _seed
