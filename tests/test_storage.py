"""
Tests for storage backends and transaction support
"""

import pytest
import tempfile
from pathlib import Path

from kyc_registry.storage import (
    InMemoryStorage, SQLiteStorage, StorageInterface, create_storage
)


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    """Each test runs against both backends"""
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(":memory:")
    yield backend
    backend.close()


class TestStorageOperations:
    """Basic CRUD behaviour shared by all backends"""

    def test_save_and_load(self, storage):
        storage.save("banks", "0x1", {"identity": "0x1", "name": "Bank A"})
        assert storage.load("banks", "0x1") == {"identity": "0x1", "name": "Bank A"}

    def test_load_missing_returns_none(self, storage):
        assert storage.load("banks", "0xdead") is None
        assert not storage.exists("banks", "0xdead")

    def test_save_overwrites(self, storage):
        storage.save("banks", "0x1", {"name": "Bank A"})
        storage.save("banks", "0x1", {"name": "Bank A2"})
        assert storage.load("banks", "0x1") == {"name": "Bank A2"}
        assert storage.count("banks") == 1

    def test_delete(self, storage):
        storage.save("banks", "0x1", {"name": "Bank A"})
        assert storage.delete("banks", "0x1")
        assert not storage.delete("banks", "0x1")
        assert storage.count("banks") == 0

    def test_find_and_load_all(self, storage):
        storage.save("customers", "alice", {"user_name": "alice", "bank": "0x1"})
        storage.save("customers", "bob", {"user_name": "bob", "bank": "0x2"})
        storage.save("customers", "carol", {"user_name": "carol", "bank": "0x1"})

        assert len(storage.load_all("customers")) == 3
        owned = storage.find("customers", {"bank": "0x1"})
        assert sorted(r["user_name"] for r in owned) == ["alice", "carol"]

    def test_loaded_records_are_copies(self, storage):
        storage.save("banks", "0x1", {"name": "Bank A"})
        loaded = storage.load("banks", "0x1")
        loaded["name"] = "changed"
        assert storage.load("banks", "0x1")["name"] == "Bank A"


class TestTransactions:
    """Atomic blocks commit together or not at all"""

    def test_atomic_commit(self, storage):
        with storage.atomic():
            storage.save("banks", "0x1", {"name": "Bank A"})
            storage.save("banks", "0x2", {"name": "Bank B"})
        assert storage.count("banks") == 2

    def test_atomic_rollback(self, storage):
        storage.save("banks", "0x1", {"name": "Bank A"})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("banks", "0x2", {"name": "Bank B"})
                storage.delete("banks", "0x1")
                raise RuntimeError("boom")

        assert storage.exists("banks", "0x1")
        assert not storage.exists("banks", "0x2")

    def test_nested_atomic_joins_outer(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                with storage.atomic():
                    storage.save("banks", "0x1", {"name": "Bank A"})
                raise RuntimeError("outer failure")

        assert not storage.exists("banks", "0x1")


class TestSQLitePersistence:

    def test_data_survives_reopen(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            db_path = Path(temp_dir) / "registry.db"
            storage = SQLiteStorage(db_path)
            storage.save("banks", "0x1", {"name": "Bank A"})
            storage.close()

            reopened = SQLiteStorage(db_path)
            assert reopened.load("banks", "0x1") == {"name": "Bank A"}
            reopened.close()


class TestCreateStorage:

    def test_memory_url(self):
        assert isinstance(create_storage("memory://"), InMemoryStorage)

    def test_sqlite_url(self):
        storage = create_storage("sqlite:///:memory:")
        assert isinstance(storage, SQLiteStorage)
        assert isinstance(storage, StorageInterface)
        storage.close()

    def test_unsupported_url(self):
        with pytest.raises(ValueError):
            create_storage("postgresql://localhost/registry")
