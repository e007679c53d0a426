from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Set, Tuple

from .Types import DEFAULT_BACKGROUND_COLOR, DEFAULT_NODE_TYPE, NodeField

from logging import getLogger
logger = getLogger(__name__)


# Edge is immutable and hashable; the edge list is the single source of truth
# for parent/child relationships.
class Edge(NamedTuple):
    id: str
    source: str
    target: str

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Edge':
        return cls(str(raw["id"]), str(raw["source"]), str(raw["target"]))

    def __repr__(self):
        return f"Edge({self.id}: {self.source} -> {self.target})"


class Position(NamedTuple):
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Position':
        return cls(raw.get("x", 0.0), raw.get("y", 0.0))


@dataclass(frozen=True)
class NodeData:
    label: str = ""
    description: str = ""
    startDate: str = ""
    endDate: str = ""
    backgroundColor: str = DEFAULT_BACKGROUND_COLOR
    completed: bool = False
    icon: str = ""

    def with_field(self, node_field: NodeField, value: Any) -> 'NodeData':
        return replace(self, **{node_field.value: value})

    def to_dict(self) -> Dict[str, Any]:
        return {f.value: getattr(self, f.value) for f in NodeField}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'NodeData':
        # Unknown keys (e.g. runtime callbacks a renderer stashed in the
        # payload) are dropped; missing keys take their defaults.
        known = {f.value: raw[f.value] for f in NodeField if f.value in raw}
        return cls(**known)


@dataclass(frozen=True)
class MindNode:
    id: str
    position: Position = field(default_factory=Position)
    data: NodeData = field(default_factory=NodeData)
    type: str = DEFAULT_NODE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'MindNode':
        return cls(
            id=str(raw["id"]),
            position=Position.from_dict(raw.get("position") or {}),
            data=NodeData.from_dict(raw.get("data") or {}),
            type=raw.get("type") or DEFAULT_NODE_TYPE,
        )

    def __repr__(self):
        return f"MindNode({self.id}, {self.data.label!r})"


@dataclass(frozen=True)
class Document:
    """
    Immutable snapshot of a mindmap.

    Node order is display order only. All queries derive relationships from
    ``edges`` on every call; nothing is cached.
    """
    nodes: Tuple[MindNode, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @classmethod
    def of(cls, nodes: Iterable[MindNode] = (), edges: Iterable[Edge] = ()) -> 'Document':
        return cls(tuple(nodes), tuple(edges))

    # ── Queries ──────────────────────────────────────────────────────────────

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def find_node(self, node_id: str) -> Optional[MindNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def find_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def children_of(self, node_id: str) -> List[Edge]:
        """Outgoing edges of *node_id*, in edge order."""
        return [e for e in self.edges if e.source == node_id]

    def descendants_of(self, node_id: str) -> Set[str]:
        """
        Ids of every node reachable from *node_id* along source -> target.

        Breadth-first with a visited set, so cycles and diamonds are each
        walked once. The start node is included only when a cycle leads back
        to it. Edge targets missing from the document are skipped.
        """
        adjacency: Dict[str, List[str]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.source, []).append(edge.target)

        present = set(self.node_ids())
        visited: Set[str] = set()
        queue = deque([node_id])
        while queue:
            current = queue.popleft()
            for target in adjacency.get(current, []):
                if target in visited:
                    continue
                if target not in present:
                    logger.debug(f"Skipping dangling edge target '{target}' from '{current}'")
                    continue
                visited.add(target)
                queue.append(target)
        return visited

    def dangling_edges(self) -> List[Edge]:
        present = set(self.node_ids())
        return [e for e in self.edges if e.source not in present or e.target not in present]

    def validate(self) -> List[str]:
        """Return a list of invariant violations (empty when consistent)."""
        problems: List[str] = []
        seen_nodes: Set[str] = set()
        for node in self.nodes:
            if node.id in seen_nodes:
                problems.append(f"duplicate node id '{node.id}'")
            seen_nodes.add(node.id)
        seen_edges: Set[str] = set()
        for edge in self.edges:
            if edge.id in seen_edges:
                problems.append(f"duplicate edge id '{edge.id}'")
            seen_edges.add(edge.id)
        for edge in self.dangling_edges():
            problems.append(f"edge '{edge.id}' references a missing node")
        return problems

    # ── Wire shape ───────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Document':
        return cls.of(
            (MindNode.from_dict(n) for n in raw.get("nodes", [])),
            (Edge.from_dict(e) for e in raw.get("edges", [])),
        )


def seed_document() -> Document:
    """The single-node document a fresh session starts from."""
    return Document.of([
        MindNode(id="1", position=Position(250, 5), data=NodeData(label="Yoffix")),
    ])
