"""Tests for worktrack.store.json_store and worktrack.store.locking modules."""

import json
import logging
import threading

import pytest

from worktrack.lib.config import EngineConfig
from worktrack.lib.errors import StoreUnavailable
from worktrack.models import ItemKind, ItemStatus
from worktrack.store import JsonFileStore, LockTimeout
from worktrack.store.locking import file_lock, lock_path_for

from conftest import NOW, make_item


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "items.json"


class TestLoad:
    """Tests for JsonFileStore.load()."""

    def test_missing_file_is_empty(self, store_path):
        """No file yet means an empty collection."""
        assert JsonFileStore(store_path).load() == []

    def test_blank_file_is_empty(self, store_path):
        """A whitespace-only file is treated as empty."""
        store_path.write_text("  \n")
        assert JsonFileStore(store_path).load() == []

    def test_corrupt_json(self, store_path):
        """Unparseable JSON raises StoreUnavailable."""
        store_path.write_text("{not json")
        with pytest.raises(StoreUnavailable) as exc_info:
            JsonFileStore(store_path).load()
        assert "Invalid JSON" in str(exc_info.value)

    def test_schema_violation(self, store_path):
        """A document failing the schema raises StoreUnavailable."""
        store_path.write_text(json.dumps({
            "version": 1,
            "items": [{"id": "r1", "kind": "ticket", "creator": "alice", "status": "pending"}],
        }))
        with pytest.raises(StoreUnavailable) as exc_info:
            JsonFileStore(store_path).load()
        assert "schema validation" in str(exc_info.value)

    def test_bare_array_layout(self, store_path):
        """A bare array of items is read as the item list."""
        store_path.write_text(json.dumps([
            {"id": "r1", "kind": "request", "creator": "alice", "status": "pending"},
        ]))
        items = JsonFileStore(store_path).load()
        assert [i.id for i in items] == ["r1"]

    def test_inconsistent_record_loaded_with_warning(self, store_path, caplog):
        """Invariant breaks are logged, not rejected."""
        caplog.set_level(logging.WARNING)
        store_path.write_text(json.dumps({
            "version": 1,
            "items": [{"id": "p1", "kind": "project", "creator": "alice",
                       "status": "pending", "archived": True, "archivedAt": None}],
        }))
        items = JsonFileStore(store_path).load()
        assert items[0].archived is True
        assert "archived without archivedAt" in caplog.text


class TestSave:
    """Tests for JsonFileStore.save()."""

    def test_round_trip(self, store_path):
        """Saved items load back equal."""
        store = JsonFileStore(store_path)
        items = [
            make_item("r1"),
            make_item("p1", ItemKind.PROJECT, archived=True, archived_at=NOW),
            make_item("r2", status=ItemStatus.REJECTED, last_status_update=NOW),
        ]
        store.save(items)
        assert store.load() == items

    def test_versioned_document(self, store_path):
        """Files are written in the versioned layout."""
        JsonFileStore(store_path).save([make_item("r1")])
        data = json.loads(store_path.read_text())
        assert data["version"] == 1
        assert data["items"][0]["id"] == "r1"

    def test_bare_array_rewritten_on_save(self, store_path):
        """Saving after reading a bare array writes the versioned layout."""
        store_path.write_text(json.dumps([
            {"id": "r1", "kind": "request", "creator": "alice", "status": "pending"},
        ]))
        store = JsonFileStore(store_path)
        store.save(store.load())
        assert json.loads(store_path.read_text())["version"] == 1

    def test_no_temp_files_left(self, store_path):
        """The temp file is renamed into place."""
        JsonFileStore(store_path).save([make_item("r1")])
        leftovers = [p.name for p in store_path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    def test_creates_parent_directory(self, tmp_path):
        """A missing parent directory is created on first save."""
        store = JsonFileStore(tmp_path / "data" / "items.json")
        store.save([make_item("r1")])
        assert [i.id for i in store.load()] == ["r1"]

    def test_write_failure(self, tmp_path):
        """OS errors on write become StoreUnavailable."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        store = JsonFileStore(blocker / "items.json")
        with pytest.raises(StoreUnavailable):
            store.save([make_item("r1")])

    def test_from_config(self, store_path):
        """Path and lock timeout come from the engine config."""
        config = EngineConfig(store_path=store_path, lock_timeout_seconds=2.5)
        store = JsonFileStore.from_config(config)
        assert store.path == store_path
        assert store.lock_timeout == 2.5


class TestLocking:
    """Tests for the store's serialization point."""

    def test_lock_path_for(self, store_path):
        """The sidecar sits next to the store file."""
        assert lock_path_for(store_path).name == "items.json.lock"

    def test_transaction_holds_file_lock(self, store_path):
        """The file lock is held for the whole transaction and released after."""
        store = JsonFileStore(store_path)
        with store.transaction():
            with pytest.raises(LockTimeout):
                with file_lock(store.lock_path, timeout=0.1):
                    pass
        with file_lock(store.lock_path, timeout=0.1):
            pass

    def test_nested_transaction_reenters(self, store_path):
        """A nested transaction on the same store does not deadlock."""
        store = JsonFileStore(store_path)
        with store.transaction():
            with store.transaction() as inner:
                inner.commit([make_item("r1")])
        assert [i.id for i in store.load()] == ["r1"]

    def test_lock_timeout(self, store_path):
        """A held lock makes the transaction time out."""
        store = JsonFileStore(store_path, lock_timeout=0.1)
        with file_lock(store.lock_path, timeout=1):
            with pytest.raises(LockTimeout):
                with store.transaction():
                    pass

    def test_lock_timeout_is_store_unavailable(self):
        """Callers handle lock timeouts as StoreUnavailable."""
        assert issubclass(LockTimeout, StoreUnavailable)

    def test_threads_serialized(self, store_path):
        """Concurrent read-modify-write steps must not lose updates."""
        store = JsonFileStore(store_path)
        store.save([])

        def add_items(prefix):
            for n in range(10):
                with store.transaction() as txn:
                    txn.commit(txn.items + [make_item(f"{prefix}{n}")])

        threads = [threading.Thread(target=add_items, args=(p,)) for p in ("a", "b", "c")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.load()) == 30
