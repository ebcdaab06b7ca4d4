"""
Shared test fixtures.

Two kinds of doubles live here:
- MockSupabaseClient: chainable query/storage mock for the Supabase adapters
- In-memory record store, object store and HTTP fetcher for pipeline tests
"""

import os
import sys
import threading
from pathlib import Path

# Required settings must exist before config is imported
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("IMPORT_TOKEN_SECRET", "test-import-secret-0123456789")

# Add project directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator, Optional, Union

from exceptions import RecordCreationError, StorageError
from models.asset import AssetCreate, FetchResponse
from models.record import RecordCreate, RecordResponse


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        rows = []
        for i, item in enumerate(data, start=1):
            row = dict(item)
            row.setdefault("id", f"test-uuid-{i}")
            row["created_at"] = _now()
            row["updated_at"] = _now()
            rows.append(row)
        self._data = rows
        return self

    def upsert(self, data, **kwargs):
        self._data = [dict(data)] if isinstance(data, dict) else [dict(d) for d in data]
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        updated_data = []
        for item in self._data:
            merged = {**item, **data}
            merged["updated_at"] = _now()
            updated_data.append(merged)
        self._data = updated_data if updated_data else [data]
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def limit(self, count):
        self._data = self._data[:count]
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses. Writes are recorded on the client."""

    def __init__(self, name: str, client: "MockSupabaseClient"):
        config = client._tables.get(name, {"data": [], "count": None, "error": None})
        self._name = name
        self._client = client
        self._data = config["data"]
        self._count = config["count"]
        self._error = config["error"]

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._data.copy(), self._count, self._error)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        self._client.writes.append((self._name, "insert", data))
        return self._query().insert(data)

    def upsert(self, data, **kwargs):
        self._client.writes.append((self._name, "upsert", data))
        return self._query().upsert(data, **kwargs)

    def update(self, data):
        self._client.writes.append((self._name, "update", data))
        return self._query().update(data)


class MockStorageBucket:
    """Mock Supabase Storage bucket."""

    def __init__(self, name: str, storage: "MockSupabaseStorage"):
        self.name = name
        self._storage = storage

    def upload(self, path: str, file: bytes, file_options: Optional[dict] = None):
        if self._storage.error is not None:
            raise self._storage.error
        self._storage.uploads.append({
            "bucket": self.name,
            "path": path,
            "content": file,
            "options": file_options or {},
        })
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path: str) -> str:
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"


class MockSupabaseStorage:
    """Mock Supabase Storage API."""

    def __init__(self):
        self.uploads: list[dict] = []
        self.error: Optional[Exception] = None

    def from_(self, bucket: str) -> MockStorageBucket:
        return MockStorageBucket(bucket, self)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.writes: list[tuple] = []
        self.storage = MockSupabaseStorage()

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(name, self)


# ===================
# IN-MEMORY COLLABORATORS
# ===================

class InMemoryRecordStore:
    """Record store double. Titles in fail_titles make create() fail."""

    def __init__(self):
        self.records: dict[str, RecordResponse] = {}
        self.fields: dict[str, dict[str, str]] = {}
        self.primary_images: dict[str, str] = {}
        self.fail_titles: set[str] = set()
        self.create_calls = 0

    def create(self, data: RecordCreate) -> RecordResponse:
        self.create_calls += 1
        if data.title in self.fail_titles:
            raise RecordCreationError(data.title, "insert rejected")
        record = RecordResponse(
            id=f"rec-{len(self.records) + 1}",
            title=data.title,
            status=data.status,
            type=data.type,
        )
        self.records[record.id] = record
        self.fields[record.id] = {}
        return record

    def set_primary_image(self, record_id: str, asset_id: str) -> None:
        self.primary_images[record_id] = asset_id

    def set_custom_field(self, record_id: str, key: str, value: str) -> None:
        self.fields[record_id][key] = value

    def by_title(self, title: str) -> list[RecordResponse]:
        return [r for r in self.records.values() if r.title == title]


class InMemoryObjectStore:
    """Object store double with a source-URL index."""

    PUBLIC_BASE = "https://cdn.test/media/"

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.assets: dict[str, AssetCreate] = {}
        self.fail_writes = False
        self.lookups = 0
        self._lock = threading.Lock()

    def write_bytes(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = False
    ) -> str:
        if self.fail_writes:
            raise StorageError("write", "bucket unavailable")
        path = f"uploads/2026/10/{filename}"
        if path in self.objects and not overwrite:
            raise StorageError("write", "object exists")
        self.objects[path] = content
        return path

    def register_asset(self, data: AssetCreate) -> str:
        with self._lock:
            asset_id = f"asset-{len(self.assets) + 1}"
            self.assets[asset_id] = data
        return asset_id

    def lookup_asset_by_source_url(self, url: str) -> Optional[str]:
        self.lookups += 1
        with self._lock:
            assets = list(self.assets.items())
        for asset_id, asset in assets:
            if asset.source_url == url:
                return asset_id
        return None

    def get_public_url(self, asset_id: str) -> Optional[str]:
        asset = self.assets.get(asset_id)
        return self.PUBLIC_BASE + asset.storage_path if asset else None

    def assets_for(self, url: str) -> list[AssetCreate]:
        return [a for a in self.assets.values() if a.source_url == url]


class FakeHttpFetcher:
    """HTTP double: url → FetchResponse, or an exception to raise."""

    def __init__(self):
        self.routes: dict[str, Union[FetchResponse, Exception]] = {}
        self.calls: list[tuple[str, Optional[float]]] = []

    def add(self, url: str, response: Union[FetchResponse, Exception]) -> None:
        self.routes[url] = response

    def get(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        self.calls.append((url, timeout))
        response = self.routes.get(url)
        if response is None:
            return FetchResponse(status_code=404, body=b"not found", headers={"content-type": "text/plain"})
        if isinstance(response, Exception):
            raise response
        return response

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("records", [
                {"id": "1", "title": "Widget", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("assets", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.record_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.storage_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def fake_http() -> FakeHttpFetcher:
    return FakeHttpFetcher()


@pytest.fixture
def asset_fetcher(object_store, fake_http):
    """AssetFetcher wired to the in-memory object store and fake HTTP."""
    from services.asset_fetcher import AssetFetcher

    return AssetFetcher(storage=object_store, http=fake_http)


@pytest.fixture
def record_importer(record_store, object_store, asset_fetcher):
    """RecordImporter wired to in-memory collaborators."""
    from services.record_importer import RecordImporter

    return RecordImporter(
        records=record_store,
        storage=object_store,
        fetcher=asset_fetcher,
    )


@pytest.fixture
def authorizer():
    """Authorizer with the test secret and no actor restriction."""
    from services.auth_service import ImportAuthorizer

    return ImportAuthorizer(secret="test-import-secret-0123456789", allowed_actors=[])


@pytest.fixture
def import_service(record_importer, authorizer):
    """Sequential ImportService over in-memory collaborators."""
    from services.import_service import ImportService

    return ImportService(record_importer, authorizer=authorizer, max_workers=1, strict_field_count=False)


@pytest.fixture
def admin_token(authorizer) -> str:
    """Valid import token for actor 'admin'."""
    return authorizer.issue_token("admin")


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_import_service(import_service):
    """
    Create FastAPI test client whose routes use the in-memory import service.

    Usage:
        def test_endpoint(test_client_with_import_service):
            response = test_client_with_import_service.post("/api/import/report", ...)
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.importer.get_import_service", return_value=import_service):
        yield TestClient(app)
