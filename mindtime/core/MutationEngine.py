from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Callable, Optional

from .GraphPrimitives import Document, Edge, MindNode, NodeData, Position
from .Types import NEW_NODE_LABEL, NodeField

from logging import getLogger
logger = getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class MutationEngine:
    """
    Applies edits to a Document and returns the resulting Document.

    Every operation is a pure function of (document, arguments): the input is
    never modified, and an operation that references an unknown node or edge
    returns the input document itself. The only source of non-determinism is
    the id factory, which callers may replace.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self.id_factory = id_factory or _new_id

    # ── Field edits ──────────────────────────────────────────────────────────

    def update_node_field(self, document: Document, node_id: str, field: Any, value: Any) -> Document:
        node_field = NodeField.parse(field)
        node = document.find_node(node_id)
        if node is None:
            return document

        updated = replace(node, data=node.data.with_field(node_field, value))
        logger.debug(f"update_node_field: {node_id}.{node_field.value} = {value!r}")
        return replace(document, nodes=tuple(updated if n.id == node_id else n for n in document.nodes))

    def move_node(self, document: Document, node_id: str, position: Position) -> Document:
        node = document.find_node(node_id)
        if node is None:
            return document
        moved = replace(node, position=Position(*position))
        return replace(document, nodes=tuple(moved if n.id == node_id else n for n in document.nodes))

    # ── Structural edits ─────────────────────────────────────────────────────

    def create_connected_node(self, document: Document, source_node_id: str, position: Position) -> Document:
        if not document.has_node(source_node_id):
            logger.debug(f"create_connected_node: source '{source_node_id}' not found")
            return document

        new_node = MindNode(
            id=self._unused_node_id(document),
            position=Position(*position),
            data=NodeData(label=NEW_NODE_LABEL),
        )
        edge = Edge(self._unused_edge_id(document), source_node_id, new_node.id)
        logger.debug(f"create_connected_node: {source_node_id} -> {new_node.id}")
        return Document(document.nodes + (new_node,), document.edges + (edge,))

    def connect_existing(self, document: Document, source_id: str, target_id: str) -> Document:
        # Parallel edges are allowed: connecting the same pair twice yields two edges.
        if not (document.has_node(source_id) and document.has_node(target_id)):
            return document
        edge = Edge(self._unused_edge_id(document), source_id, target_id)
        logger.debug(f"connect_existing: {edge}")
        return replace(document, edges=document.edges + (edge,))

    def delete_node(self, document: Document, node_id: str) -> Document:
        """Remove a node and every edge touching it. Children are left in place."""
        if not document.has_node(node_id):
            return document
        logger.debug(f"delete_node: {node_id}")
        return Document(
            tuple(n for n in document.nodes if n.id != node_id),
            tuple(e for e in document.edges if not e.touches(node_id)),
        )

    def delete_edge(self, document: Document, edge_id: str) -> Document:
        if document.find_edge(edge_id) is None:
            return document
        return replace(document, edges=tuple(e for e in document.edges if e.id != edge_id))

    # ── Cascading edits ──────────────────────────────────────────────────────

    def propagate_color(self, document: Document, node_id: str, color: str) -> Document:
        """Set backgroundColor on *node_id* and on its whole descendant subtree."""
        if not document.has_node(node_id):
            return document

        targets = document.descendants_of(node_id)
        targets.add(node_id)
        logger.debug(f"propagate_color: {color} -> {len(targets)} node(s) from '{node_id}'")

        nodes = tuple(
            replace(n, data=n.data.with_field(NodeField.BACKGROUND_COLOR, color)) if n.id in targets else n
            for n in document.nodes
        )
        return replace(document, nodes=nodes)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _unused_node_id(self, document: Document) -> str:
        taken = set(document.node_ids())
        new_id = self.id_factory()
        while new_id in taken:
            new_id = self.id_factory()
        return new_id

    def _unused_edge_id(self, document: Document) -> str:
        taken = {e.id for e in document.edges}
        new_id = self.id_factory()
        while new_id in taken:
            new_id = self.id_factory()
        return new_id
