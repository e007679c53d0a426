"""
MindMapState: owns the one current Document for a running app.

Every intent from the rendering layer comes through here: the engine
produces the next snapshot, the snapshot is written through to the
PersistenceStore, and a change event is fired. Operations that resolve to a
no-op (unknown ids) do not save or fire.
"""
from __future__ import annotations

from typing import Any, Optional

from mindtime.core.GraphPrimitives import Document, Position, seed_document
from mindtime.core.MutationEngine import MutationEngine
from mindtime.exchange.mindmap_config import (
    ConfigMetadata,
    ImportedConfig,
    dumps_config,
    parse_config,
    sample_document,
)
from mindtime.server.events.change_emitter import ChangeEmitter
from mindtime.storage.persistence import PersistenceStore

from logging import getLogger
logger = getLogger(__name__)


class MindMapState:
    """Holds the current document and routes every change through storage."""

    def __init__(
        self,
        store: PersistenceStore,
        engine: Optional[MutationEngine] = None,
        emitter: Optional[ChangeEmitter] = None,
    ) -> None:
        self.store = store
        self.engine = engine or MutationEngine()
        self.emitter = emitter or ChangeEmitter()
        self.metadata = ConfigMetadata()
        self.document: Document = self._restore()

    def _restore(self) -> Document:
        snapshot = self.store.load()
        if snapshot is None:
            logger.info("No saved mindmap found, starting from the seed document")
            return seed_document()
        logger.info(
            f"Restored mindmap ({len(snapshot.document.nodes)} nodes, "
            f"{len(snapshot.document.edges)} edges) saved at {snapshot.last_updated}"
        )
        return snapshot.document

    def _commit(self, document: Document, event: str) -> Document:
        if document is self.document:
            return document
        self.document = document
        self.store.save(document)
        self.emitter.fire({"type": event, "document": document.to_dict()})
        return document

    # ── Node edits ───────────────────────────────────────────────────────────

    def update_node_field(self, node_id: str, field: str, value: Any) -> Document:
        return self._commit(
            self.engine.update_node_field(self.document, node_id, field, value), "NODE_UPDATED"
        )

    def move_node(self, node_id: str, x: float, y: float) -> Document:
        return self._commit(self.engine.move_node(self.document, node_id, Position(x, y)), "NODE_MOVED")

    def create_connected_node(self, source_node_id: str, x: float, y: float) -> Document:
        return self._commit(
            self.engine.create_connected_node(self.document, source_node_id, Position(x, y)),
            "NODE_CREATED",
        )

    def delete_node(self, node_id: str) -> Document:
        return self._commit(self.engine.delete_node(self.document, node_id), "NODE_DELETED")

    def propagate_color(self, node_id: str, color: str) -> Document:
        return self._commit(self.engine.propagate_color(self.document, node_id, color), "COLOR_PROPAGATED")

    # ── Edge edits ───────────────────────────────────────────────────────────

    def connect_existing(self, source_id: str, target_id: str) -> Document:
        return self._commit(self.engine.connect_existing(self.document, source_id, target_id), "EDGE_CREATED")

    def delete_edge(self, edge_id: str) -> Document:
        return self._commit(self.engine.delete_edge(self.document, edge_id), "EDGE_DELETED")

    # ── Whole-document replacement ───────────────────────────────────────────

    def import_text(self, text: str, *, strict: bool = False) -> ImportedConfig:
        """Replace the document with a parsed exchange file. Raises ConfigError untouched."""
        imported = parse_config(text, strict=strict)
        self.apply_import(imported)
        return imported

    def apply_import(self, imported: ImportedConfig) -> Document:
        self.metadata = imported.metadata
        return self.replace_document(imported.document, "DOCUMENT_IMPORTED")

    def load_sample(self) -> Document:
        return self.replace_document(sample_document(), "DOCUMENT_LOADED")

    def reset(self) -> Document:
        """Forget the stored snapshot and go back to the seed document."""
        self.store.clear()
        self.metadata = ConfigMetadata()
        self.document = seed_document()
        self.emitter.fire({"type": "DOCUMENT_RESET", "document": self.document.to_dict()})
        return self.document

    def replace_document(self, document: Document, event: str = "DOCUMENT_REPLACED") -> Document:
        self.document = document
        self.store.save(document)
        self.emitter.fire({"type": event, "document": document.to_dict()})
        return document

    def export_text(self, title: Optional[str] = None, description: Optional[str] = None) -> str:
        return dumps_config(
            self.document,
            title if title is not None else self.metadata.title,
            description if description is not None else self.metadata.description,
        )
