"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Required settings must exist before config is imported
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from unittest.mock import MagicMock, patch
from typing import Generator

from postgrest.exceptions import APIError

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

    ilike, gte, lte, range and limit are applied to the rows so pagination
    and filters behave like PostgREST. Ordering by a column listed in
    rejected_order_columns raises APIError on execute.
    """

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._data = list(table._data)
        self._start = None
        self._end = None
        self._limit = None
        self._order_error = None

    def select(self, *args, **kwargs):
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self._data = [row for row in self._data if needle in str(row.get(column) or "").lower()]
        self._table.calls.append(("ilike", column, pattern))
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def gte(self, column, value):
        self._table.calls.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self._table.calls.append(("lte", column, value))
        return self

    def order(self, column, **kwargs):
        self._table.calls.append(("order", column, kwargs.get("desc", False)))
        if column in self._table.rejected_order_columns:
            self._order_error = column
        return self

    def range(self, start, end):
        self._table.calls.append(("range", start, end))
        self._start, self._end = start, end
        return self

    def limit(self, count):
        self._table.calls.append(("limit", count))
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._order_error:
            raise APIError({
                "message": f"column {self._order_error} does not exist",
                "code": "42703",
                "hint": None,
                "details": None,
            })

        rows = self._data
        if self._start is not None:
            rows = rows[self._start:self._end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]
        return MockSupabaseResponse(data=rows, count=self._table._count)


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, rejected_order_columns=()):
        self._data = data or []
        self._count = count
        self.rejected_order_columns = set(rejected_order_columns)
        self.calls = []

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self).select(*args, **kwargs)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(
        self,
        table_name: str,
        data: list,
        count: int = None,
        rejected_order_columns=()
    ) -> MockSupabaseTable:
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data, count, rejected_order_columns)
        return self._tables[table_name]

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("Inventario", [
                {"idx": 1, "producto": "GEL PYTHON", "cantidad": 4, "tienda": "ALL STARS"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("Inventario", [...])
            # Now any service using get_supabase_client() gets the mock
    """
    import services.inventory_service as inventory_module
    import services.order_service as order_module

    inventory_module._inventory_service = None
    order_module._order_service = None

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.inventory_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.order_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase

    inventory_module._inventory_service = None
    order_module._order_service = None


@pytest.fixture
def mapping_store(tmp_path):
    """JSON mapping store in a temporary directory."""
    from services.mapping_store import JsonMappingStore
    return JsonMappingStore(str(tmp_path / "store"))


@pytest.fixture
def mock_mirror():
    """DictionaryMirror double that records notifications."""
    from services.dictionary_mirror import DictionaryMirror, MirrorResult
    mirror = MagicMock(spec=DictionaryMirror)
    mirror.notify_mapping.return_value = MirrorResult(delivered=True, status=200)
    mirror.notify_combo.return_value = MirrorResult(delivered=True, status=200)
    return mirror


@pytest.fixture
def reconciliation_service(mapping_store, mock_mirror) -> Generator:
    """
    ReconciliationService over a temporary store, installed as the singleton.
    """
    import services.reconciliation_service as module
    from services.reconciliation_service import ReconciliationService

    service = ReconciliationService(store=mapping_store, mirror=mock_mirror)
    module._reconciliation_service = service
    yield service
    module._reconciliation_service = None


@pytest.fixture
def sample_inventory_rows() -> list:
    """Inventory rows across two stores."""
    return [
        {"idx": 1, "producto": "GEL PYTHON", "cantidad": 12, "tienda": "ALL STARS"},
        {"idx": 2, "producto": "TURKESTERONE 60 CAPS", "cantidad": 3, "tienda": "ALL STARS"},
        {"idx": 3, "producto": "Café Orgánico", "cantidad": 0, "tienda": "NATURAL"},
        {"idx": 4, "producto": "CREATINA 300G", "cantidad": 150, "tienda": "NATURAL"},
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/inventory")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("main.check_connection", return_value={"status": "healthy", "inventory_count": 0}):
        yield TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("Inventario", [...])
            response = test_client_with_mock_db.get("/api/inventory")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
