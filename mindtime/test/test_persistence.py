import json
import logging
import sqlite3

import pytest

from mindtime.core.GraphPrimitives import Document, Edge, MindNode, NodeData, Position, seed_document
from mindtime.storage.kv_store import KeyValueStore
from mindtime.storage.persistence import DEFAULT_STORAGE_KEY, PersistenceStore


class FlakyStore(KeyValueStore):
    """A real store whose operations can be switched to fail like a full disk."""

    def __init__(self):
        super().__init__(":memory:")
        self.fail_writes = False
        self.fail_reads = False

    def set(self, key, value):
        if self.fail_writes:
            raise sqlite3.OperationalError("database or disk is full")
        super().set(key, value)

    def get(self, key):
        if self.fail_reads:
            raise sqlite3.OperationalError("unable to open database file")
        return super().get(key)

    def contains(self, key):
        if self.fail_reads:
            raise sqlite3.OperationalError("unable to open database file")
        return super().contains(key)


def _sample():
    return Document.of(
        [
            MindNode(id="1", position=Position(0, 0), data=NodeData(label="root", icon="🎯")),
            MindNode(id="2", position=Position(5.5, 8), data=NodeData(label="child", completed=True)),
        ],
        [Edge("e1-2", "1", "2")],
    )


class TestKeyValueStore:

    def test_set_get_delete(self):
        kv = KeyValueStore()
        assert kv.get("k") is None
        kv.set("k", "v1")
        kv.set("k", "v2")
        assert kv.get("k") == "v2"
        assert kv.contains("k")
        kv.delete("k")
        assert not kv.contains("k")

    def test_file_backed_store_survives_reopen(self, tmp_path):
        path = tmp_path / "nested" / "store.sqlite3"
        kv = KeyValueStore(path)
        kv.set("k", "v")
        kv.close()
        assert KeyValueStore(path).get("k") == "v"


class TestPersistenceStore:

    def setup_method(self):
        self.backend = FlakyStore()
        self.store = PersistenceStore(self.backend)

    def test_default_key(self):
        assert self.store.key == DEFAULT_STORAGE_KEY == "mindtime-mindmap-data"

    def test_load_without_save(self):
        assert self.store.load() is None
        assert self.store.exists() is False

    def test_save_then_load(self):
        doc = _sample()
        assert self.store.save(doc) is True
        snapshot = self.store.load()
        assert snapshot.document == doc
        assert snapshot.last_updated
        assert self.store.exists() is True

    def test_saved_shape(self):
        self.store.save(seed_document())
        raw = json.loads(self.backend.get(DEFAULT_STORAGE_KEY))
        assert set(raw) == {"nodes", "edges", "lastUpdated"}
        assert raw["nodes"][0]["data"]["label"] == "Yoffix"
        assert raw["edges"] == []

    def test_save_replaces_previous(self):
        self.store.save(seed_document())
        self.store.save(_sample())
        assert self.store.load().document == _sample()

    def test_empty_document_round_trip(self):
        self.store.save(Document())
        assert self.store.load().document == Document()

    def test_clear(self):
        self.store.save(_sample())
        self.store.clear()
        assert self.store.load() is None
        assert self.store.exists() is False

    def test_keys_are_independent(self):
        other = PersistenceStore(self.backend, key="another-map")
        self.store.save(_sample())
        assert other.load() is None

    @pytest.mark.parametrize("stored", [
        "not json at all",
        json.dumps([1, 2, 3]),
        json.dumps({"nodes": [], "lastUpdated": "x"}),
        json.dumps({"nodes": {}, "edges": []}),
        json.dumps({"nodes": [], "edges": "nope"}),
        json.dumps({"nodes": ["bad-node"], "edges": []}),
    ])
    def test_malformed_snapshot_is_absence(self, stored, caplog):
        self.backend.set(DEFAULT_STORAGE_KEY, stored)
        with caplog.at_level(logging.WARNING):
            assert self.store.load() is None
        assert caplog.records

    def test_write_failure_is_swallowed_and_keeps_prior_value(self, caplog):
        self.store.save(seed_document())
        self.backend.fail_writes = True
        with caplog.at_level(logging.ERROR):
            assert self.store.save(_sample()) is False
        assert "Failed to save mindmap" in caplog.text
        self.backend.fail_writes = False
        assert self.store.load().document == seed_document()

    def test_read_failure(self):
        self.store.save(seed_document())
        self.backend.fail_reads = True
        assert self.store.load() is None
        assert self.store.exists() is False
