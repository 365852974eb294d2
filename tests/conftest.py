"""
Shared test fixtures.

Database access is replaced by an in-memory Supabase double; image
storage and product creation by the fakes in tests/factories.py.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require these at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("GEMINI_API_KEY", "")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    eq() filters the configured rows, so lookups by id or key behave like
    the real table.
    """

    def __init__(self, table: "MockSupabaseTable", data: list = None, count: int = None):
        self._table = table
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        rows = []
        for item in data:
            row = dict(item)
            row.setdefault("id", "test-uuid-123")
            row.setdefault("created_at", datetime.utcnow().isoformat() + "Z")
            row.setdefault("updated_at", datetime.utcnow().isoformat() + "Z")
            rows.append(row)
        self._table.rows.extend(rows)
        self._data = rows
        return self

    def upsert(self, data):
        if isinstance(data, dict):
            data = [data]
        for item in data:
            self._table.rows[:] = [r for r in self._table.rows if r.get("key") != item.get("key")]
            self._table.rows.append(dict(item))
        self._data = list(data)
        return self

    def update(self, data):
        self._update = data
        return self

    def delete(self):
        self._delete = True
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def neq(self, column, value):
        self._data = [row for row in self._data if row.get(column) != value]
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        self._data = self._data[:count]
        return self

    def execute(self) -> MockSupabaseResponse:
        if getattr(self, "_delete", False):
            self._table.rows[:] = [r for r in self._table.rows if r not in self._data]
            return MockSupabaseResponse(data=self._data)

        update = getattr(self, "_update", None)
        if update is not None:
            updated = []
            for row in self._data:
                row.update(update)
                row["updated_at"] = datetime.utcnow().isoformat() + "Z"
                updated.append(row)
            return MockSupabaseResponse(data=updated)

        count = self._count
        return MockSupabaseResponse(data=list(self._data), count=count)


class MockSupabaseTable:
    """Mock Supabase table backed by a shared list of rows."""

    def __init__(self, rows: list, count: int = None):
        self.rows = rows
        self._count = count

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, list(self.rows), self._count)

    def insert(self, data):
        return MockSupabaseQuery(self).insert(data)

    def upsert(self, data):
        return MockSupabaseQuery(self).upsert(data)

    def update(self, data):
        return MockSupabaseQuery(self, list(self.rows)).update(data)

    def delete(self):
        return MockSupabaseQuery(self, list(self.rows)).delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": list(data), "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.setdefault(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"])

    def rows(self, table_name: str) -> list:
        return self._tables.get(table_name, {"data": []})["data"]


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_service_singletons():
    """Drop cached service instances so each test gets its own mocks."""
    import services.product_service as product_service
    import services.storage_service as storage_service
    import services.marketing_service as marketing_service
    import services.wizard_session_service as wizard_session_service

    for module in (product_service, storage_service, marketing_service, wizard_session_service):
        module._service = None
    yield
    for module in (product_service, storage_service, marketing_service, wizard_session_service):
        module._service = None


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "name": "Clay Pot", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.product_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.draft_store.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product row as stored in the products table."""
    return {
        "id": "test-uuid-123",
        "artisan_id": "test-artisan-id",
        "name": "Terracotta Water Pot",
        "description": "Hand-thrown terracotta pot that keeps water cool.",
        "category": "pottery",
        "price": 850.0,
        "currency": "INR",
        "stock_quantity": 4,
        "materials": ["clay"],
        "tags": ["Handmade"],
        "dimensions": {"length": 30, "width": 30, "height": 40, "weight": 2.5},
        "image_urls": ["https://cdn.example.com/pot-1.jpg"],
        "thumbnail_url": "https://cdn.example.com/pot-1.jpg",
        "customizable": False,
        "is_active": True,
        "created_at": "2025-12-05T10:00:00Z",
        "updated_at": "2025-12-05T10:00:00Z"
    }


@pytest.fixture
def sample_products_list(sample_product_data) -> list:
    """Sample list of products for testing."""
    return [
        {**sample_product_data, "id": "uuid-1"},
        {**sample_product_data, "id": "uuid-2", "name": "Banarasi Silk Dupatta", "category": "textiles"},
        {**sample_product_data, "id": "uuid-3", "name": "Brass Diya", "category": "metalwork"},
    ]


@pytest.fixture
def valid_product_payload() -> dict:
    """Creation payload as sent by the wizard's publish step."""
    return {
        "name": "Terracotta Water Pot",
        "description": "Hand-thrown terracotta pot that keeps water cool.",
        "category": "pottery",
        "price": 850,
        "currency": "INR",
        "stockQuantity": 4,
        "materials": ["clay"],
        "tags": ["handmade"],
        "dimensions": {"length": 30, "width": 30, "height": 40, "weight": 2.5},
        "imageUrls": ["https://cdn.example.com/pot-1.jpg"],
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/products")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
