"""
PersistenceStore: durable snapshot of the current mindmap.

One document lives under one key. The stored value is the JSON object
``{"nodes": [...], "edges": [...], "lastUpdated": "<ISO-8601>"}``.

Nothing here raises to the caller: write failures are logged and the prior
value is kept, and anything unreadable on load is reported as "no data".
"""
from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from mindtime.core.GraphPrimitives import Document
from mindtime.storage.kv_store import KeyValueStore

from logging import getLogger
logger = getLogger(__name__)


DEFAULT_STORAGE_KEY = "mindtime-mindmap-data"


@dataclass(frozen=True)
class Snapshot:
    document: Document
    last_updated: str


class PersistenceStore:

    def __init__(self, backend: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.backend = backend
        self.key = key

    def save(self, document: Document) -> bool:
        """Write *document* through to the backend. Returns False on failure."""
        try:
            payload: Dict[str, Any] = document.to_dict()
            payload["lastUpdated"] = datetime.now(timezone.utc).isoformat()
            self.backend.set(self.key, json.dumps(payload, ensure_ascii=False))
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error(f"Failed to save mindmap under '{self.key}': {exc}")
            return False
        return True

    def load(self) -> Optional[Snapshot]:
        try:
            stored = self.backend.get(self.key)
        except sqlite3.Error as exc:
            logger.error(f"Failed to load mindmap from '{self.key}': {exc}")
            return None
        if not stored:
            return None

        try:
            data = json.loads(stored)
        except ValueError as exc:
            logger.error(f"Stored mindmap under '{self.key}' is not valid JSON: {exc}")
            return None

        if (
            not isinstance(data, dict)
            or not isinstance(data.get("nodes"), list)
            or not isinstance(data.get("edges"), list)
        ):
            logger.warning("Invalid mindmap data in storage, ignoring")
            return None

        try:
            document = Document.from_dict(data)
        except (KeyError, TypeError, AttributeError) as exc:
            logger.warning(f"Invalid node or edge record in storage, ignoring: {exc}")
            return None
        return Snapshot(document, str(data.get("lastUpdated", "")))

    def clear(self) -> None:
        try:
            self.backend.delete(self.key)
        except sqlite3.Error as exc:
            logger.error(f"Failed to clear mindmap under '{self.key}': {exc}")

    def exists(self) -> bool:
        try:
            return self.backend.contains(self.key)
        except sqlite3.Error:
            return False
