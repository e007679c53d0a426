import pytest

from mindtime.core.GraphPrimitives import (
    Document,
    Edge,
    MindNode,
    NodeData,
    Position,
    seed_document,
)
from mindtime.core.Types import NodeField, UnknownFieldError


def _doc(node_ids, edges):
    return Document.of(
        [MindNode(id=n) for n in node_ids],
        [Edge(f"e{i}", s, t) for i, (s, t) in enumerate(edges)],
    )


class TestNodeData:

    def test_defaults(self):
        data = NodeData()
        assert data.label == ""
        assert data.description == ""
        assert data.startDate == ""
        assert data.endDate == ""
        assert data.backgroundColor == "#ffffff"
        assert data.completed is False
        assert data.icon == ""

    def test_with_field_returns_copy(self):
        data = NodeData(label="a")
        changed = data.with_field(NodeField.LABEL, "b")
        assert changed.label == "b"
        assert data.label == "a"

    def test_from_dict_drops_unknown_keys(self):
        data = NodeData.from_dict({"label": "x", "onDataChange": "callback", "completed": True})
        assert data == NodeData(label="x", completed=True)

    def test_parse_field_by_wire_name(self):
        assert NodeField.parse("backgroundColor") is NodeField.BACKGROUND_COLOR
        assert NodeField.parse(NodeField.ICON) is NodeField.ICON

    def test_parse_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            NodeField.parse("color")


class TestDocumentQueries:

    def test_seed_document(self):
        doc = seed_document()
        assert doc.node_ids() == ["1"]
        assert doc.find_node("1").data.label == "Yoffix"
        assert doc.find_node("1").position == Position(250, 5)
        assert doc.edges == ()

    def test_find_node_missing(self):
        assert seed_document().find_node("nope") is None

    def test_children_of(self):
        doc = _doc(["a", "b", "c"], [("a", "b"), ("a", "c"), ("b", "c")])
        assert [e.target for e in doc.children_of("a")] == ["b", "c"]
        assert doc.children_of("c") == []

    def test_descendants_of_tree(self):
        doc = _doc(["a", "b", "c", "d", "x"], [("a", "b"), ("b", "c"), ("a", "d"), ("x", "a")])
        assert doc.descendants_of("a") == {"b", "c", "d"}
        assert doc.descendants_of("c") == set()

    def test_descendants_of_diamond(self):
        doc = _doc(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        assert doc.descendants_of("a") == {"b", "c", "d"}

    def test_descendants_of_cycle_terminates(self):
        doc = _doc(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])
        assert doc.descendants_of("a") == {"a", "b", "c"}

    def test_descendants_of_self_loop(self):
        doc = _doc(["a"], [("a", "a")])
        assert doc.descendants_of("a") == {"a"}

    def test_descendants_skip_dangling_targets(self):
        doc = _doc(["a", "b"], [("a", "ghost"), ("a", "b")])
        assert doc.descendants_of("a") == {"b"}

    def test_descendants_use_current_edges(self):
        doc = _doc(["a", "b"], [("a", "b")])
        without_edge = Document(doc.nodes, ())
        assert doc.descendants_of("a") == {"b"}
        assert without_edge.descendants_of("a") == set()

    def test_validate_reports_problems(self):
        doc = Document.of(
            [MindNode(id="a"), MindNode(id="a")],
            [Edge("e", "a", "a"), Edge("e", "a", "zz")],
        )
        problems = doc.validate()
        assert "duplicate node id 'a'" in problems
        assert "duplicate edge id 'e'" in problems
        assert "edge 'e' references a missing node" in problems

    def test_validate_clean_document(self):
        assert seed_document().validate() == []


class TestWireShape:

    def test_node_to_dict(self):
        node = MindNode(id="7", position=Position(1.5, -2), data=NodeData(label="L", icon="⭐"))
        assert node.to_dict() == {
            "id": "7",
            "type": "customNode",
            "position": {"x": 1.5, "y": -2},
            "data": {
                "label": "L",
                "description": "",
                "startDate": "",
                "endDate": "",
                "backgroundColor": "#ffffff",
                "completed": False,
                "icon": "⭐",
            },
        }

    def test_document_round_trip(self):
        doc = Document.of(
            [
                MindNode(id="1", position=Position(0, 0), data=NodeData(label="root", completed=True)),
                MindNode(id="2", position=Position(10, 20), type="editableNode"),
            ],
            [Edge("e1-2", "1", "2")],
        )
        assert Document.from_dict(doc.to_dict()) == doc

    def test_from_dict_fills_missing_fields(self):
        doc = Document.from_dict({"nodes": [{"id": "1", "data": {"label": "x"}}], "edges": []})
        node = doc.find_node("1")
        assert node.position == Position(0.0, 0.0)
        assert node.type == "customNode"
        assert node.data.backgroundColor == "#ffffff"
