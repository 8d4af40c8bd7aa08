"""Unit tests for AssistantStore class."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import MagicMock, patch
from models.assistant import AssistantProfile
from services.assistant_store import AssistantStore
from services.errors import NotFoundError, StorageError


class FakeTable:
    """Minimal stand-in for a Supabase table with auto-increment ids."""

    def __init__(self):
        self.rows = []
        self._next_id = 1

    def insert(self, record):
        row = {"id": self._next_id, **record}
        self._next_id += 1
        self.rows.append(row)
        return self._result([dict(row)])

    def select(self, columns):
        query = MagicMock()
        query.order.return_value.execute.return_value = MagicMock(data=[dict(r) for r in self.rows])
        query.eq.side_effect = lambda column, value: self._result(
            [dict(r) for r in self.rows if r[column] == value]
        )
        return query

    @staticmethod
    def _result(data):
        builder = MagicMock()
        builder.execute.return_value = MagicMock(data=data)
        return builder


class TestAssistantStore:
    """Test suite for AssistantStore."""

    @pytest.fixture
    def fake_table(self):
        return FakeTable()

    @pytest.fixture
    def store(self, fake_table):
        with patch('services.assistant_store.create_client') as mock_create_client:
            mock_client = MagicMock()
            mock_client.table.return_value = fake_table
            mock_create_client.return_value = mock_client
            yield AssistantStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

    @patch('services.assistant_store.create_client')
    def test_initialization_success(self, mock_create_client):
        """Test successful initialization with credentials."""
        store = AssistantStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

        assert store.table_name == "assistants"
        mock_create_client.assert_called_once_with("https://test.supabase.co", "test_key")

    def test_initialization_without_credentials(self):
        """Test initialization fails without Supabase credentials."""
        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            AssistantStore(supabase_url=None, supabase_key="test_key")

        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            AssistantStore(supabase_url="https://test.supabase.co", supabase_key=None)

    def test_create_then_get_round_trip(self, store):
        created = store.create({"name": "A", "description": "d", "user_role": "r", "model_info": "m"})

        fetched = store.get_by_id(created.id)

        assert fetched == AssistantProfile(id=created.id, name="A", description="d", user_role="r", model_info="m")

    def test_create_assigns_unique_ids(self, store):
        first = store.create({"name": "A"})
        second = store.create({"name": "B"})

        assert first.id != second.id

    def test_create_accepts_missing_fields(self, store, fake_table):
        created = store.create({})

        assert created.name is None
        assert fake_table.rows[0] == {
            "id": created.id, "name": None, "description": None, "user_role": None, "model_info": None
        }

    def test_create_ignores_unknown_fields(self, store, fake_table):
        store.create({"name": "A", "id": 99, "extra": "x"})

        assert "extra" not in fake_table.rows[0]
        assert fake_table.rows[0]["id"] == 1

    def test_list_returns_insertion_order(self, store):
        store.create({"name": "first"})
        store.create({"name": "second"})

        assert [a.name for a in store.list()] == ["first", "second"]

    def test_list_empty(self, store):
        assert store.list() == []

    def test_get_unknown_id_raises_not_found(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.get_by_id(12345)

        error = exc_info.value.error
        assert error.code == "NOT_FOUND"
        assert error.details["assistant_id"] == 12345

    @patch('services.assistant_store.create_client')
    def test_storage_failure_raises_storage_error(self, mock_create_client):
        mock_client = MagicMock()
        mock_client.table.return_value.select.return_value.order.return_value.execute.side_effect = Exception(
            "connection lost"
        )
        mock_create_client.return_value = mock_client
        store = AssistantStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

        with pytest.raises(StorageError) as exc_info:
            store.list()

        error = exc_info.value.error
        assert error.code == "STORAGE_ERROR"
        assert "connection lost" in error.message

    @patch('services.assistant_store.create_client')
    def test_insert_without_rows_raises_storage_error(self, mock_create_client):
        mock_client = MagicMock()
        mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
        mock_create_client.return_value = mock_client
        store = AssistantStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

        with pytest.raises(StorageError):
            store.create({"name": "A"})
