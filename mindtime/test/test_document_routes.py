import json
import re

import pytest
from fastapi.testclient import TestClient

from mindtime.exchange.mindmap_config import dumps_config, sample_document
from mindtime.server.main import create_app
from mindtime.server.state import MindMapState
from mindtime.storage.kv_store import KeyValueStore
from mindtime.storage.persistence import PersistenceStore


class TestDocumentRoutes:

    @pytest.fixture
    def state(self):
        return MindMapState(PersistenceStore(KeyValueStore()))

    @pytest.fixture
    def client(self, state):
        return TestClient(create_app(state=state))

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_get_document(self, client):
        body = client.get("/api/document").json()
        assert [n["data"]["label"] for n in body["nodes"]] == ["Yoffix"]
        assert body["edges"] == []

    def test_create_child_then_propagate(self, client, state):
        resp = client.post("/api/nodes/1/children", json={"x": 100, "y": 200})
        assert resp.status_code == 201
        body = resp.json()
        assert len(body["nodes"]) == 2
        new_id = body["nodes"][1]["id"]
        assert body["edges"][0]["source"] == "1"
        assert body["edges"][0]["target"] == new_id

        body = client.post("/api/nodes/1/color", json={"color": "#e3f2fd"}).json()
        assert [n["data"]["backgroundColor"] for n in body["nodes"]] == ["#e3f2fd", "#e3f2fd"]
        assert state.store.load().document == state.document

    def test_update_field(self, client):
        body = client.put("/api/nodes/1/fields/completed", json={"value": True}).json()
        assert body["nodes"][0]["data"]["completed"] is True

    def test_update_unknown_field(self, client):
        resp = client.put("/api/nodes/1/fields/colour", json={"value": "x"})
        assert resp.status_code == 400
        assert "colour" in resp.json()["detail"]

    def test_unknown_node_is_404(self, client, state):
        before = state.document
        assert client.put("/api/nodes/nope/fields/label", json={"value": "x"}).status_code == 404
        assert client.delete("/api/nodes/nope").status_code == 404
        assert client.post("/api/nodes/nope/color", json={"color": "#000"}).status_code == 404
        assert state.document is before

    def test_move_node(self, client):
        body = client.put("/api/nodes/1/position", json={"x": 3.5, "y": -1}).json()
        assert body["nodes"][0]["position"] == {"x": 3.5, "y": -1.0}

    def test_connect_and_delete_edges(self, client):
        client.post("/api/nodes/1/children", json={"x": 0, "y": 0})
        child = client.get("/api/document").json()["nodes"][1]["id"]

        resp = client.post("/api/edges", json={"source": child, "target": "1"})
        assert resp.status_code == 201
        edges = resp.json()["edges"]
        assert len(edges) == 2

        body = client.delete(f"/api/edges/{edges[1]['id']}").json()
        assert len(body["edges"]) == 1
        assert client.delete("/api/edges/unknown").status_code == 404

    def test_delete_node(self, client):
        client.post("/api/nodes/1/children", json={"x": 0, "y": 0})
        body = client.delete("/api/nodes/1").json()
        assert len(body["nodes"]) == 1
        assert body["edges"] == []

    def test_export(self, client):
        resp = client.get("/api/export", params={"title": "Road Map", "description": "d"})
        assert resp.status_code == 200
        disposition = resp.headers["content-disposition"]
        assert re.search(r'filename="mindmap-road_map-\d{4}-\d{2}-\d{2}\.json"', disposition)
        body = json.loads(resp.content.decode("utf-8"))
        assert body["metadata"]["title"] == "Road Map"
        assert body["metadata"]["version"] == "1.0.0"

    def test_import(self, client, state):
        resp = client.post("/api/import", content=dumps_config(sample_document(), "S").encode("utf-8"))
        assert resp.status_code == 200
        assert resp.json()["metadata"]["title"] == "S"
        assert state.document == sample_document()

    def test_import_rejected_keeps_document(self, client, state):
        before = state.document
        bad = json.loads(dumps_config(sample_document()))
        bad["nodes"][0].pop("position")
        resp = client.post("/api/import", content=json.dumps(bad))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid node structure in configuration file"
        assert state.document is before

    def test_import_strict(self, client):
        config = json.loads(dumps_config(sample_document()))
        config["edges"].append({"id": "dangling", "source": "1", "target": "404"})
        resp = client.post("/api/import?strict=true", content=json.dumps(config))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid edge reference in configuration file"

    def test_sample_and_reset(self, client):
        assert len(client.post("/api/sample").json()["nodes"]) == 3
        body = client.post("/api/reset").json()
        assert [n["id"] for n in body["nodes"]] == ["1"]
