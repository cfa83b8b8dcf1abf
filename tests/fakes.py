"""
In-memory stand-ins for Supabase and the Rekognition API.

InMemorySupabase answers the subset of the postgrest query builder the
repositories use, so repositories and services run unchanged on top of it.
FakeRekognitionApi mimics the boto3 client surface that RekognitionClient
calls, with scripted detections per photo and scripted similarities.
"""

import asyncio
import re
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from botocore.exceptions import ClientError

from core.config import Settings
from infrastructure.supabase import SupabaseClient

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

USER = "user-a"
OTHER_USER = "user-b"
PHOTO_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def run(coro):
    return asyncio.run(coro)


def make_settings(**overrides):
    values = {
        "SUPABASE_URL": "http://supabase.test",
        "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
        "SUPABASE_JWT_SECRET": "test-jwt-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class SimulatedFailure(RuntimeError):
    pass


class InMemoryDatabase:
    def __init__(self):
        self.tables = {}
        self.failures = set()
        self._tick = 0

    def rows(self, name):
        return self.tables.setdefault(name, [])

    def active_rows(self, name, /, **filters):
        return [
            row for row in self.rows(name)
            if not row.get("deleted") and all(row.get(k) == v for k, v in filters.items())
        ]

    def fail_on(self, table, operation):
        """Make every query of this kind on table raise."""
        self.failures.add((table, operation))

    def next_timestamp(self):
        self._tick += 1
        return (EPOCH + timedelta(seconds=self._tick)).isoformat()

    def seed(self, table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.next_timestamp())
        row.setdefault("deleted", False)
        self.rows(table).append(row)
        return row

    def table(self, name):
        return Query(self, name)


class _Negation:
    def __init__(self, query):
        self._query = query

    def is_(self, column, value):
        return self._query._filter(lambda row: not _is(row.get(column), value))


def _is(actual, value):
    if value in ("null", None):
        return actual is None
    return actual is value


def _like(pattern):
    return re.compile("^" + re.escape(pattern).replace("%", ".*") + "$")


class Query:
    def __init__(self, db, name):
        self.db = db
        self.name = name
        self.mode = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.ordering = []
        self.row_limit = None
        self.row_range = None

    # --- verbs ---

    def select(self, columns="*"):
        self.mode = "select"
        return self

    def insert(self, data):
        self.mode, self.payload = "insert", dict(data)
        return self

    def update(self, data):
        self.mode, self.payload = "update", dict(data)
        return self

    def upsert(self, data, on_conflict=None):
        self.mode, self.payload, self.on_conflict = "upsert", dict(data), on_conflict
        return self

    # --- filters ---

    def _filter(self, predicate):
        self.filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._filter(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._filter(lambda row: row.get(column) != value)

    def in_(self, column, values):
        values = list(values)
        return self._filter(lambda row: row.get(column) in values)

    def like(self, column, pattern):
        regex = _like(pattern)
        return self._filter(lambda row: row.get(column) is not None and bool(regex.match(str(row[column]))))

    def is_(self, column, value):
        return self._filter(lambda row: _is(row.get(column), value))

    @property
    def not_(self):
        return _Negation(self)

    def order(self, column, desc=False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def range(self, start, end):
        self.row_range = (start, end)
        return self

    # --- execution ---

    def _matching(self):
        return [row for row in self.db.rows(self.name) if all(f(row) for f in self.filters)]

    def execute(self):
        if (self.name, self.mode) in self.db.failures:
            raise SimulatedFailure(f"{self.mode} on {self.name} failed")
        return SimpleNamespace(data=getattr(self, f"_execute_{self.mode}")())

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.ordering):
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column) or ""), reverse=desc)
        if self.row_range:
            rows = rows[self.row_range[0]:self.row_range[1] + 1]
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        return [dict(row) for row in rows]

    def _execute_insert(self):
        return [dict(self.db.seed(self.name, **self.payload))]

    def _execute_update(self):
        rows = self._matching()
        for row in rows:
            row.update(self.payload)
        return [dict(row) for row in rows]

    def _execute_upsert(self):
        key = self.on_conflict or "id"
        for row in self.db.rows(self.name):
            if row.get(key) == self.payload.get(key):
                row.update(self.payload)
                return [dict(row)]
        return self._execute_insert()


class InMemorySupabase(SupabaseClient):
    """SupabaseClient whose connection is an InMemoryDatabase."""

    def __init__(self, db=None):
        self._settings = None
        self._client = db or InMemoryDatabase()

    @property
    def db(self) -> InMemoryDatabase:
        return self._client


def client_error(code, message="", operation="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


def face_record(face_id, width=0.2, height=0.25, confidence=99.5, left=0.1, top=0.1):
    return {
        "FaceId": face_id,
        "BoundingBox": {"Width": width, "Height": height, "Left": left, "Top": top},
        "Confidence": confidence,
    }


class FakeRekognitionApi:
    """
    Scripted boto3 Rekognition client.

    photos maps ExternalImageId -> list of face_record() dicts returned by
    index_faces. similarity(a, b, value) sets the score between two faces.
    """

    def __init__(self):
        self.collections = {}
        self.photos = {}
        self.scores = {}
        self.calls = []
        self.errors = {}

    def _call(self, name, **kwargs):
        self.calls.append((name, kwargs))
        if name in self.errors:
            raise self.errors[name]

    def count(self, name):
        return sum(1 for call, _ in self.calls if call == name)

    def similarity(self, face_a, face_b, value):
        self.scores[frozenset((face_a, face_b))] = value

    def describe_collection(self, CollectionId):
        self._call("describe_collection", CollectionId=CollectionId)
        if CollectionId not in self.collections:
            raise client_error("ResourceNotFoundException", operation="DescribeCollection")
        return {
            "CollectionARN": f"aws:rekognition:us-east-1:000000000000:collection/{CollectionId}",
            "FaceCount": len(self.collections[CollectionId]),
        }

    def create_collection(self, CollectionId):
        self._call("create_collection", CollectionId=CollectionId)
        self.collections[CollectionId] = []
        return {
            "StatusCode": 200,
            "CollectionArn": f"aws:rekognition:us-east-1:000000000000:collection/{CollectionId}",
        }

    def delete_collection(self, CollectionId):
        self._call("delete_collection", CollectionId=CollectionId)
        if self.collections.pop(CollectionId, None) is None:
            raise client_error("ResourceNotFoundException", operation="DeleteCollection")
        return {"StatusCode": 200}

    def index_faces(self, CollectionId, Image, ExternalImageId, DetectionAttributes, MaxFaces, QualityFilter):
        self._call("index_faces", CollectionId=CollectionId, ExternalImageId=ExternalImageId, MaxFaces=MaxFaces)
        records = self.photos.get(ExternalImageId, [])[:MaxFaces]
        self.collections.setdefault(CollectionId, []).extend(r["FaceId"] for r in records)
        return {"FaceRecords": [{"Face": dict(r)} for r in records], "UnindexedFaces": []}

    def search_faces(self, CollectionId, FaceId, FaceMatchThreshold, MaxFaces):
        self._call("search_faces", CollectionId=CollectionId, FaceId=FaceId)
        matches = []
        for other in self.collections.get(CollectionId, []):
            if other == FaceId:
                continue
            score = self.scores.get(frozenset((FaceId, other)))
            if score is not None and score >= FaceMatchThreshold:
                matches.append({"Similarity": score, "Face": {"FaceId": other}})
        matches.sort(key=lambda m: m["Similarity"], reverse=True)
        return {"SearchedFaceId": FaceId, "FaceMatches": matches[:MaxFaces]}

    def delete_faces(self, CollectionId, FaceIds):
        self._call("delete_faces", CollectionId=CollectionId, FaceIds=FaceIds)
        faces = self.collections.get(CollectionId, [])
        deleted = [f for f in FaceIds if f in faces]
        self.collections[CollectionId] = [f for f in faces if f not in FaceIds]
        return {"DeletedFaces": deleted}
