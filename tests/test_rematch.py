"""Tests for searching again for an already indexed, unassigned face."""
import pytest

from core.exceptions import ConflictError, FaceNotFoundError, NotFoundError

from tests.fakes import OTHER_USER, USER, run

COLLECTION = "savta-user-user-a"


@pytest.fixture
def collection(db, api):
    db.seed("face_collections", user_id=USER, aws_collection_id=COLLECTION)
    api.collections[COLLECTION] = []
    return COLLECTION


@pytest.fixture
def indexed_face(api, collection, seed_face):
    """Stored face that is also present in the user's provider collection."""
    def _seed(provider_face_id, **kwargs):
        face = seed_face(provider_face_id, **kwargs)
        api.collections[COLLECTION].append(provider_face_id)
        return face
    return _seed


def active_links(db, face_id):
    return db.active_rows("face_person_links", face_id=face_id)


def test_two_strong_matches_auto_assign(services, db, api, seed_person, indexed_face):
    alice = seed_person("Alice")
    indexed_face("a1", person_id=alice["id"])
    indexed_face("a2", person_id=alice["id"])
    face = indexed_face("new")
    api.similarity("new", "a1", 95.5)
    api.similarity("new", "a2", 95.0)

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "auto_assigned"
    assert result.person.id == alice["id"]
    assert result.similarity == 95.5
    assert result.match_count == 2
    assert result.face.needs_assignment is False
    assert result.face.auto_assigned is True
    link, = active_links(db, face["id"])
    assert link["person_group_id"] == alice["id"]
    assert link["assigned_by"] == "system"
    assert link["confidence"] == pytest.approx(0.955)


def test_single_match_needs_very_high_similarity(services, db, api, seed_person, indexed_face):
    alice = seed_person("Alice")
    indexed_face("a1", person_id=alice["id"])
    face = indexed_face("new")
    api.similarity("new", "a1", 96.0)

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "needs_user_input"
    candidate, = result.candidates
    assert candidate.person.id == alice["id"]
    assert candidate.match_count == 1
    assert candidate.max_similarity == 96.0
    assert active_links(db, face["id"]) == []


def test_single_very_high_match_auto_assigns(services, api, seed_person, indexed_face):
    alice = seed_person("Alice")
    indexed_face("a1", person_id=alice["id"])
    face = indexed_face("new")
    api.similarity("new", "a1", 97.0)

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "auto_assigned"
    assert result.person.id == alice["id"]


def test_candidates_grouped_per_person(services, api, seed_person, indexed_face):
    alice, bob = seed_person("Alice"), seed_person("Bob")
    indexed_face("a1", person_id=alice["id"])
    indexed_face("a2", person_id=alice["id"])
    indexed_face("b1", person_id=bob["id"])
    indexed_face("nobody")
    face = indexed_face("new")
    api.similarity("new", "a1", 93.0)
    api.similarity("new", "a2", 90.0)
    api.similarity("new", "b1", 94.0)
    api.similarity("new", "nobody", 99.0)

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "needs_user_input"
    assert result.match_count == 4
    assert [(c.person.name, c.match_count, c.max_similarity) for c in result.candidates] == [
        ("Bob", 1, 94.0),
        ("Alice", 2, 93.0),
    ]
    assert result.candidates[1].average_similarity == 91.5


def test_faces_of_other_users_are_ignored(services, api, seed_person, indexed_face):
    mallory = seed_person("Mallory", user_id=OTHER_USER)
    indexed_face("theirs", user_id=OTHER_USER, person_id=mallory["id"])
    face = indexed_face("new")
    api.similarity("new", "theirs", 99.9)

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "needs_user_input"
    assert result.candidates == []
    assert result.match_count == 0


def test_no_matches_returns_face_with_photo(services, db, indexed_face):
    db.seed("assets", id="photo-9", user_id=USER, storage_url="https://cdn.test/9.jpg", title="Picnic")
    face = indexed_face("new", asset_id="photo-9")

    result = run(services.engine.rematch(USER, face["id"]))

    assert result.action == "needs_user_input"
    assert result.candidates == []
    assert result.face.asset.title == "Picnic"


def test_assigned_face_is_a_conflict(services, seed_person, indexed_face):
    alice = seed_person("Alice")
    face = indexed_face("f-1", person_id=alice["id"])
    with pytest.raises(ConflictError):
        run(services.engine.rematch(USER, face["id"]))


def test_face_of_another_user_is_not_found(services, indexed_face):
    face = indexed_face("theirs", user_id=OTHER_USER)
    with pytest.raises(FaceNotFoundError):
        run(services.engine.rematch(USER, face["id"]))


def test_user_without_collection(services, api, seed_face):
    face = seed_face("f-1")
    with pytest.raises(NotFoundError):
        run(services.engine.rematch(USER, face["id"]))
    assert api.calls == []
