"""
Shared fixtures and configuration for logmongo tests.
"""

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timezone

from starlette.datastructures import Headers


# =============================================================================
# Clock Fixtures
# =============================================================================

class SequenceClock:
    """Monotonic clock returning preset nanosecond readings in order."""

    def __init__(self, *readings):
        self._readings = list(readings)
        self.calls = 0

    def __call__(self) -> int:
        value = self._readings[min(self.calls, len(self._readings) - 1)]
        self.calls += 1
        return value


FIXED_WALL = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_tracker():
    """Tracker whose response mark lands 12.345ms after the request mark."""
    from logmongo.core.lifecycle import LifecycleTracker
    return LifecycleTracker(
        clock=SequenceClock(1_000_000_000, 1_012_345_000),
        wall_clock=lambda: FIXED_WALL,
    )


# =============================================================================
# Registry / Catalog Fixtures
# =============================================================================

@pytest.fixture
def registry():
    """Fresh registry with the built-in tokens."""
    from logmongo.core.tokens import create_default_registry
    return create_default_registry()


@pytest.fixture
def catalog():
    """Fresh catalog with the built-in formats."""
    from logmongo.core.formats import FormatCatalog
    return FormatCatalog()


@pytest.fixture
def isolated_globals(monkeypatch):
    """Reset process-wide registry, catalog and settings for one test."""
    import logmongo.core.tokens as tokens
    import logmongo.core.formats as formats
    import logmongo.config.settings as settings
    monkeypatch.setattr(tokens, "_registry", None)
    monkeypatch.setattr(formats, "_catalog", None)
    monkeypatch.setattr(settings, "_settings", None)


# =============================================================================
# Exchange Helpers
# =============================================================================

def make_headers(*pairs) -> Headers:
    """Build starlette Headers from (name, value) pairs, repeats allowed."""
    return Headers(raw=[
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in pairs
    ])


def make_request(method="GET", url="/foo", headers=(), **kwargs):
    """Create a RequestView."""
    from logmongo.core.exchange import RequestView
    return RequestView(
        method=method,
        url=url,
        headers=make_headers(*headers),
        **kwargs
    )


def make_response(status_code=200, headers=(), headers_sent=True, **kwargs):
    """Create a ResponseView."""
    from logmongo.core.exchange import ResponseView
    return ResponseView(
        status_code=status_code,
        headers=make_headers(*headers),
        headers_sent=headers_sent,
        **kwargs
    )


def http_scope(path="/foo", method="GET", headers=(), **overrides):
    """Minimal ASGI HTTP scope."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers
        ],
        "client": ("10.0.0.7", 52100),
        "server": ("testserver", 80),
    }
    scope.update(overrides)
    return scope


# =============================================================================
# Database Fixtures
# =============================================================================

class FakeCursor:
    """Small stand-in for a motor cursor over in-memory documents."""

    def __init__(self, documents):
        self._documents = list(documents)
        self._sort = []
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        self._sort = list(keys)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        documents = list(self._documents)
        for key, direction in reversed(self._sort):
            documents.sort(key=lambda d: d.get(key), reverse=direction < 0)
        documents = documents[self._skip:]
        if self._limit:
            documents = documents[:self._limit]
        return documents


class FakeCollection:
    """In-memory collection supporting insert_many and equality find."""

    def __init__(self):
        self.documents = []

    async def insert_many(self, documents):
        inserted_ids = []
        for document in documents:
            document.setdefault("_id", len(self.documents) + 1)
            self.documents.append(dict(document))
            inserted_ids.append(document["_id"])
        return MagicMock(inserted_ids=inserted_ids)

    def find(self, query=None):
        query = query or {}
        return FakeCursor(
            doc for doc in self.documents
            if all(doc.get(key) == value for key, value in query.items())
        )


class FakeMotorClient:
    """Client whose every database/collection lookup hits one FakeCollection."""

    instances = []

    def __init__(self, collection):
        self.collection = collection
        self.closed = False
        FakeMotorClient.instances.append(self)

    def __getitem__(self, name):
        database = MagicMock()
        database.__getitem__.return_value = self.collection
        return database

    def close(self):
        self.closed = True


@pytest.fixture
def fake_collection():
    """Shared in-memory collection."""
    return FakeCollection()


@pytest.fixture
def fake_motor(fake_collection):
    """Patch AsyncIOMotorClient with an in-memory client."""
    from unittest.mock import patch
    FakeMotorClient.instances = []
    with patch(
        "logmongo.database.mongodb.AsyncIOMotorClient",
        side_effect=lambda *args, **kwargs: FakeMotorClient(fake_collection),
    ) as client_class:
        yield client_class


@pytest.fixture
def mock_sink():
    """Sink double recording submitted batches."""
    sink = MagicMock()
    sink.configured = True
    sink.pending = 0
    return sink
