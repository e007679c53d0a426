"""
MindMap configuration files: export / import of a whole document.

Pipeline
--------
    Document  →  [serialize_config]  →  dict  →  [dumps_config]  →  .json text
    .json text  →  [parse_config]  →  schema.validate  →  ImportedConfig

Export regenerates ``metadata.exportDate`` and ``metadata.version`` every time;
``nodes`` and ``edges`` round-trip unchanged. Importing never touches the
caller's current document: a failed import raises (or reports through the
error continuation) before anything is built.
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from mindtime.core.GraphPrimitives import Document, Edge, MindNode, NodeData, Position

from .schema import FORMAT_VERSION, PARSE_FAILED, READ_FAILED, ConfigError, validate

from logging import getLogger
logger = getLogger(__name__)


DEFAULT_TITLE = "Untitled MindMap"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ConfigMetadata:
    exportDate: str = ""
    version: str = FORMAT_VERSION
    title: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportDate": self.exportDate,
            "version": self.version,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> 'ConfigMetadata':
        if not isinstance(raw, dict):
            return cls()
        return cls(
            exportDate=str(raw.get("exportDate", "")),
            version=str(raw.get("version", FORMAT_VERSION)),
            title=raw.get("title"),
            description=raw.get("description"),
        )


@dataclass(frozen=True)
class ImportedConfig:
    document: Document
    metadata: ConfigMetadata = field(default_factory=ConfigMetadata)

    @property
    def nodes(self):
        return self.document.nodes

    @property
    def edges(self):
        return self.document.edges


# ── Export ────────────────────────────────────────────────────────────────────

def serialize_config(
    document: Document,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the exchange dict for *document* with freshly stamped metadata."""
    metadata = ConfigMetadata(
        exportDate=_now_iso(),
        version=FORMAT_VERSION,
        title=title or DEFAULT_TITLE,
        description=description or "",
    )
    config = document.to_dict()
    config["metadata"] = metadata.to_dict()
    return config


def dumps_config(
    document: Document,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    return json.dumps(serialize_config(document, title, description), indent=2, ensure_ascii=False)


def export_filename(title: Optional[str] = None, when: Optional[date] = None) -> str:
    """Suggested download name: ``mindmap-<slug>-<yyyy-mm-dd>.json``."""
    slug = re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() if title else "export"
    stamp = (when or datetime.now(timezone.utc).date()).isoformat()
    return f"mindmap-{slug}-{stamp}.json"


def write_config_file(
    path: Union[str, Path],
    document: Document,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Path:
    path = Path(path)
    path.write_text(dumps_config(document, title, description), encoding="utf-8")
    logger.info(f"Exported {len(document.nodes)} node(s) to {path}")
    return path


# ── Import ────────────────────────────────────────────────────────────────────

def parse_config(text: str, *, strict: bool = False) -> ImportedConfig:
    """
    Parse and validate exchange-file text.

    Raises:
        ConfigError: With the message of the first failed check.
    """
    try:
        data = json.loads(text)
    except ValueError:
        raise ConfigError(PARSE_FAILED) from None

    validate(data, strict=strict)

    try:
        document = Document.of(
            (MindNode.from_dict(n) for n in data["nodes"]),
            (Edge.from_dict(e) for e in data["edges"]),
        )
    except (TypeError, AttributeError, KeyError):
        raise ConfigError(PARSE_FAILED) from None

    problems = document.validate()
    if problems:
        logger.warning(f"Imported mindmap has {len(problems)} consistency issue(s): {problems}")

    return ImportedConfig(document, ConfigMetadata.from_dict(data["metadata"]))


async def import_config_file(
    path: Union[str, Path],
    on_success: Callable[[ImportedConfig], Any],
    on_error: Callable[[str], Any],
    *,
    strict: bool = False,
) -> None:
    """
    Read and parse *path* without blocking the event loop.

    Exactly one of *on_success* / *on_error* is invoked. Neither is invoked
    with a partially built document.
    """
    try:
        text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"Failed to read mindmap file {path}: {exc}")
        on_error(READ_FAILED)
        return

    try:
        imported = parse_config(text, strict=strict)
    except ConfigError as exc:
        on_error(str(exc))
        return
    on_success(imported)


# ── Sample ────────────────────────────────────────────────────────────────────

def create_sample_config() -> Dict[str, Any]:
    """A fixed three-node example document, in exchange-file shape."""
    document = Document.of(
        [
            MindNode(
                id="1",
                position=Position(250, 100),
                data=NodeData(
                    label="Main Topic",
                    description="This is the central topic of your mindmap",
                    icon="🎯",
                ),
                type="editableNode",
            ),
            MindNode(
                id="2",
                position=Position(100, 200),
                data=NodeData(
                    label="Subtopic 1",
                    description="First branch of ideas",
                    backgroundColor="#e3f2fd",
                    icon="⭐",
                ),
                type="editableNode",
            ),
            MindNode(
                id="3",
                position=Position(400, 200),
                data=NodeData(
                    label="Subtopic 2",
                    description="Second branch of ideas",
                    backgroundColor="#f3e5f5",
                    completed=True,
                    icon="📝",
                ),
                type="editableNode",
            ),
        ],
        [
            Edge("e1-2", "1", "2"),
            Edge("e1-3", "1", "3"),
        ],
    )
    return serialize_config(document, "Sample MindMap", "A sample mindmap to get you started")


def sample_document() -> Document:
    return Document.from_dict(create_sample_config())
