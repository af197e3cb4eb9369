"""Shared fakes and fixtures for unit and router tests."""

import copy
import math

import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import ConflictError

from .config import Settings
from .lib.elasticsearch import SearchIndex

EARTH_RADIUS_KM = 6371.0087714


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _lookup(source: dict, field: str):
    value = source
    for part in field.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _matches(source: dict, query: dict) -> bool:
    if "term" in query:
        (field, value), = query["term"].items()
        return _lookup(source, field) == value
    if "range" in query:
        (field, bounds), = query["range"].items()
        value = _lookup(source, field)
        if not isinstance(value, (int, float)):
            return False
        ops = {
            "gte": lambda a, b: a >= b,
            "gt": lambda a, b: a > b,
            "lte": lambda a, b: a <= b,
            "lt": lambda a, b: a < b,
        }
        return all(ops[op](value, bound) for op, bound in bounds.items())
    if "geo_distance" in query:
        clause = dict(query["geo_distance"])
        limit_km = float(clause.pop("distance").removesuffix("km"))
        clause.pop("distance_type", None)
        (field, centre), = clause.items()
        point = _lookup(source, field)
        if not isinstance(point, dict):
            return False
        return haversine_km(centre["lat"], centre["lon"], point["lat"], point["lon"]) <= limit_km
    raise AssertionError(f"Unsupported query: {query}")


def conflict_error(index: str, doc_id: str) -> ConflictError:
    meta = ApiResponseMeta(
        status=409,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )
    return ConflictError(
        f"[{doc_id}]: version conflict, document already exists",
        meta=meta,
        body={"error": {"type": "version_conflict_engine_exception", "index": index}},
    )


class FakeIndices:
    def __init__(self, es: "InMemoryEs"):
        self._es = es
        self.mappings: dict[str, dict] = {}

    async def exists(self, *, index=None, **kwargs):
        return index in self._es.documents

    async def create(self, *, index=None, mappings=None, **kwargs):
        self._es.documents.setdefault(index, {})
        self.mappings[index] = mappings
        return {"acknowledged": True}


class InMemoryEs:
    """Fake ``AsyncElasticsearch`` holding documents in memory.

    Evaluates ``term``, ``range`` and ``geo_distance`` clauses the way the
    real cluster does for single-clause queries.  Set ``fail`` to an
    exception to make every call raise it.
    """

    def __init__(self):
        self.documents: dict[str, dict[str, dict]] = {}
        self.indices = FakeIndices(self)
        self.calls: list[dict] = []
        self.fail: Exception | None = None

    def _check(self, op: str, **kwargs):
        self.calls.append({"op": op, **kwargs})
        if self.fail is not None:
            raise self.fail

    async def ping(self, **kwargs):
        self._check("ping")
        return True

    async def index(self, *, index=None, id=None, document=None, **kwargs):
        self._check("index", index=index, id=id, document=document)
        self.documents.setdefault(index, {})[id] = copy.deepcopy(document)
        return {"_index": index, "_id": id, "result": "created"}

    async def create(self, *, index=None, id=None, document=None, **kwargs):
        self._check("create", index=index, id=id, document=document)
        docs = self.documents.setdefault(index, {})
        if id in docs:
            raise conflict_error(index, id)
        docs[id] = copy.deepcopy(document)
        return {"_index": index, "_id": id, "result": "created"}

    async def search(self, *, index=None, query=None, size=None, **kwargs):
        self._check("search", index=index, query=query, size=size)
        hits = [
            {"_index": index, "_id": doc_id, "_score": 1.0, "_source": copy.deepcopy(src)}
            for doc_id, src in self.documents.get(index, {}).items()
            if _matches(src, query)
        ]
        return {"hits": {"total": {"value": len(hits)}, "hits": hits[:size]}}

    async def count(self, *, index=None, query=None, **kwargs):
        self._check("count", index=index, query=query)
        docs = self.documents.get(index, {}).values()
        return {"count": sum(1 for src in docs if _matches(src, query))}


class FakeStore:
    """In-memory stand-in for ``ObjectStore``."""

    def __init__(self, bucket_name: str = "test-bucket"):
        self.bucket_name = bucket_name
        self.objects: dict[str, bytes] = {}
        self.fail: Exception | None = None

    def internal_address(self, key: str) -> str:
        return f"gs://{self.bucket_name}/{key}"

    async def put(self, key, stream, content_type=None) -> str:
        if self.fail is not None:
            raise self.fail
        self.objects[key] = stream.read()
        return f"https://storage.googleapis.com/{self.bucket_name}/{key}"


class FakeScorer:
    """Returns ``confidence`` for every address, or raises ``fail``."""

    def __init__(self, confidence: float = 0.0):
        self.confidence = confidence
        self.fail: Exception | None = None
        self.addresses: list[str] = []

    async def score(self, address: str) -> float:
        self.addresses.append(address)
        if self.fail is not None:
            raise self.fail
        return self.confidence


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def es():
    return InMemoryEs()


@pytest.fixture
def index(es):
    return SearchIndex(es)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def scorer():
    return FakeScorer()


@pytest.fixture
def settings():
    return Settings(jwt_signing_key="test-signing-key", bucket_name="test-bucket")


@pytest.fixture
def app(settings, es, index, store, scorer):
    """The FastAPI app with fake collaborators attached to ``app.state``."""
    from .main import app

    app.state.settings = settings
    app.state.es = es
    app.state.index = index
    app.state.store = store
    app.state.scorer = scorer
    yield app
    for name in ("settings", "es", "index", "store", "scorer"):
        try:
            delattr(app.state, name)
        except (AttributeError, KeyError):
            pass
