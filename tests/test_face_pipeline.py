"""End-to-end tests of index_photo, reindex_user and collection status."""
import asyncio

import pytest

from core.exceptions import AssetNotFoundError, ValidationError
from models.responses.faces import AlreadyProcessed, IndexedPhoto, SkippedProcessing

from tests.fakes import OTHER_USER, PHOTO_BYTES, USER, face_record, run

COLLECTION = "savta-user-user-a"


@pytest.fixture
def grandma(db, api, seed_person, seed_face):
    """A known person with one assigned face already in the collection."""
    person = seed_person("Grandma")
    seed_face("known", person_id=person["id"])
    api.collections[COLLECTION] = ["known"]
    return person


@pytest.fixture
def family_photo(db, api):
    db.seed("assets", id="photo-1", user_id=USER, mime_type="image/jpeg",
            storage_url="https://cdn.test/photo-1.jpg", file_name="photo-1.jpg")
    api.photos["photo-1"] = [
        face_record("tiny", width=0.02, height=0.02),
        face_record("grandma-again", confidence=99.0),
        face_record("stranger", confidence=98.0),
    ]
    api.similarity("grandma-again", "known", 97.0)
    return "photo-1"


def test_three_detections_split_into_buckets(services, db, grandma, family_photo):
    result = run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))

    assert isinstance(result, IndexedPhoto)
    assert result.faces_detected == 2
    assert result.filtered_out == 1
    assert result.failed == 0

    auto, = result.auto_assigned
    assert auto.person.id == grandma["id"]
    assert auto.similarity == 97.0
    assert auto.face.provider_face_id == "grandma-again"

    pending, = result.needs_user_input
    assert pending.face.provider_face_id == "stranger"
    assert pending.suggestions == []

    asset, = db.active_rows("assets", id=family_photo)
    assert asset["face_detection_data"] == {"facesDetected": 2, "autoAssigned": 1, "needsUserInput": 1}
    assert asset["face_detection_provider"] == "aws_rekognition_collections"
    assert asset["face_detection_processed_at"]
    assert db.active_rows("faces", rekognition_face_id="tiny") == []


def test_result_serializes_with_camel_case(services, grandma, family_photo):
    result = run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))
    data = result.to_json()
    assert data["status"] == "indexed"
    assert data["facesDetected"] == 2
    assert data["autoAssigned"][0]["face"]["boundingBox"]["width"] == pytest.approx(0.2)
    assert data["needsUserInput"][0]["kind"] == "needs_user_input"


def test_second_run_reports_already_processed(services, api, grandma, family_photo):
    run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))
    again = run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))

    assert isinstance(again, AlreadyProcessed)
    assert again.faces_detected == 2
    assert api.count("index_faces") == 1


def test_concurrent_requests_for_same_photo_index_once(services, api, grandma, family_photo):
    async def both():
        return await asyncio.gather(
            services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES),
            services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES),
        )

    results = run(both())

    assert sorted(r.status for r in results) == ["already_processed", "indexed"]
    assert api.count("index_faces") == 1


def test_processing_not_requested(services, api, seed_asset):
    seed_asset("photo-1")
    result = run(services.pipeline.index_photo(USER, "photo-1", image_bytes=PHOTO_BYTES, process_faces=False))
    assert isinstance(result, SkippedProcessing)
    assert api.calls == []


@pytest.mark.parametrize("asset_id, kwargs", [
    ("", {"image_bytes": PHOTO_BYTES}),
    ("photo-1", {}),
])
def test_missing_inputs_are_rejected(services, api, asset_id, kwargs):
    with pytest.raises(ValidationError):
        run(services.pipeline.index_photo(USER, asset_id, **kwargs))
    assert api.calls == []


def test_photo_without_usable_faces(services, db, api, seed_asset):
    seed_asset("photo-1")
    api.photos["photo-1"] = [face_record("tiny", width=0.01, height=0.01)]
    result = run(services.pipeline.index_photo(USER, "photo-1", image_bytes=PHOTO_BYTES))
    assert isinstance(result, IndexedPhoto)
    assert result.faces_detected == 0
    assert result.filtered_out == 1
    assert api.count("search_faces") == 0


def test_photo_of_another_user_is_not_found(services, db, api, seed_asset):
    seed_asset("a-photo", user_id=USER)
    api.photos["a-photo"] = [face_record("f-1")]

    with pytest.raises(AssetNotFoundError):
        run(services.pipeline.index_photo(OTHER_USER, "a-photo", image_bytes=PHOTO_BYTES))
    with pytest.raises(AssetNotFoundError):
        run(services.pipeline.index_photo(OTHER_USER, "a-photo", image_bytes=PHOTO_BYTES, process_faces=False))
    assert api.calls == []

    result = run(services.pipeline.index_photo(USER, "a-photo", image_bytes=PHOTO_BYTES))

    assert isinstance(result, IndexedPhoto)
    assert result.faces_detected == 1
    assert {f["user_id"] for f in db.active_rows("faces", asset_id="a-photo")} == {USER}


def test_unknown_photo_is_not_found(services, api):
    with pytest.raises(AssetNotFoundError):
        run(services.pipeline.index_photo(USER, "nope", image_bytes=PHOTO_BYTES))
    assert api.calls == []


def test_faces_of_another_user_do_not_mark_photo_processed(services, api, seed_asset, seed_face):
    seed_asset("photo-1")
    seed_face("stray", user_id=OTHER_USER, asset_id="photo-1")
    api.photos["photo-1"] = [face_record("f-1")]

    result = run(services.pipeline.index_photo(USER, "photo-1", image_bytes=PHOTO_BYTES))

    assert isinstance(result, IndexedPhoto)
    assert api.count("index_faces") == 1


def test_face_summary_only_touches_callers_photo(services, db, seed_asset):
    mine = seed_asset("photo-1")
    theirs = seed_asset("photo-1-copy", user_id=OTHER_USER)
    theirs["id"] = "photo-1"

    run(services.repos.assets.save_face_summary("photo-1", USER, faces_detected=2, auto_assigned=1, needs_user_input=1))

    assert mine["face_detection_data"]["facesDetected"] == 2
    assert "face_detection_data" not in theirs


def test_one_failing_face_does_not_stop_the_photo(services, db, grandma, family_photo, monkeypatch):
    original = services.engine.process_face

    async def flaky(user_id, asset_id, candidate):
        if candidate.face.provider_face_id == "grandma-again":
            raise RuntimeError("boom")
        return await original(user_id, asset_id, candidate)

    monkeypatch.setattr(services.engine, "process_face", flaky)

    result = run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))

    assert result.failed == 1
    assert result.auto_assigned == []
    assert [o.face.provider_face_id for o in result.needs_user_input] == ["stranger"]
    asset, = db.active_rows("assets", id=family_photo)
    assert asset["face_detection_data"]["needsUserInput"] == 1


def test_reindex_continues_past_failures(services, db, api):
    db.seed("assets", id="a1", user_id=USER, mime_type="image/jpeg",
            storage_url="https://cdn.test/a1.jpg", file_name="a1.jpg")
    db.seed("assets", id="a2", user_id=USER, mime_type="image/png",
            storage_url="https://cdn.test/missing.jpg", file_name="a2.png")
    db.seed("assets", id="a3", user_id=USER, mime_type="image/jpeg",
            storage_url="https://cdn.test/a3.jpg", file_name="a3.jpg")
    db.seed("assets", id="video", user_id=USER, mime_type="video/mp4",
            storage_url="https://cdn.test/v.mp4", file_name="v.mp4")
    db.seed("assets", id="theirs", user_id=OTHER_USER, mime_type="image/jpeg",
            storage_url="https://cdn.test/t.jpg", file_name="t.jpg")
    api.photos["a1"] = [face_record("x1"), face_record("x2")]
    api.photos["a3"] = [face_record("x3")]

    summary = run(services.pipeline.reindex_user(USER))

    assert summary.total == 3
    assert summary.processed == 2
    assert summary.faces_detected == 3
    assert summary.auto_assigned == 0
    assert summary.needs_user_input == 3
    error, = summary.errors
    assert error.asset_id == "a2"
    assert error.file_name == "a2.png"
    assert "fetch" in error.error.lower()
    assert "3 faces detected" in summary.message


def test_reindex_limit(services, db, api):
    for n in range(3):
        db.seed("assets", id=f"a{n}", user_id=USER, mime_type="image/jpeg",
                storage_url=f"https://cdn.test/a{n}.jpg", file_name=f"a{n}.jpg")
    summary = run(services.pipeline.reindex_user(USER, limit=2))
    assert summary.total == 2
    assert api.count("index_faces") == 2


def test_collection_status(services, grandma, family_photo):
    empty = run(services.pipeline.collection_status(OTHER_USER))
    assert empty.has_collection is False
    assert empty.statistics.total_faces == 0

    run(services.pipeline.index_photo(USER, family_photo, image_bytes=PHOTO_BYTES))
    status = run(services.pipeline.collection_status(USER))

    assert status.has_collection is True
    assert status.collection["collectionId"] == COLLECTION
    assert status.statistics.total_faces == 3
    assert status.statistics.total_people == 1
    assert status.statistics.average_confidence == 0.99
    assert len(status.recent_faces) == 3
    person, = status.people
    assert person.face_count == 2
