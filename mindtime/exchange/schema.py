"""
MindMap configuration file: format + validator
===============================================
The portable exchange format for a mindmap. Validation runs in a fixed order
and stops at the first failure, so a given bad file always reports the same
message.

Format
------

    {
      "nodes": [
        {
          "id":       "1",                              // non-empty (required)
          "type":     "customNode",                     // renderer tag (optional)
          "position": { "x": 250, "y": 100 },           // required
          "data": {                                     // required
            "label": "Main Topic", "description": "",
            "startDate": "", "endDate": "",
            "backgroundColor": "#ffffff", "completed": false, "icon": "🎯"
          }
        }
      ],
      "edges": [
        { "id": "e1-2", "source": "1", "target": "2" }  // all non-empty (required)
      ],
      "metadata": {
        "exportDate":  "2024-01-01T00:00:00.000Z",
        "version":     "1.0.0",
        "title":       "Sample MindMap",
        "description": ""
      }
    }
"""

from __future__ import annotations

import warnings
from typing import Any


FORMAT_VERSION = "1.0.0"

INVALID_FORMAT = "Invalid mindmap configuration file format"
INVALID_NODES = "Invalid nodes data in configuration file"
INVALID_EDGES = "Invalid edges data in configuration file"
INVALID_NODE = "Invalid node structure in configuration file"
INVALID_EDGE = "Invalid edge structure in configuration file"
INVALID_EDGE_REFERENCE = "Invalid edge reference in configuration file"
PARSE_FAILED = "Failed to parse configuration file"
READ_FAILED = "Failed to read the file"


class ConfigError(ValueError):
    """Raised when a configuration file fails structural validation."""


def _require(condition: Any, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _present(value: Any) -> bool:
    # Empty lists and dicts count as present; only missing, null, false, 0 and
    # "" are treated as absent.
    return value not in (None, False, 0, "")


def validate(data: Any, *, strict: bool = False) -> None:
    """
    Validate a parsed configuration dict.

    Args:
        data:   The result of ``json.loads`` on the file contents.
        strict: When True, edges whose source/target is not a node id in the
                file raise ConfigError. When False (default) they only warn.

    Raises:
        ConfigError: On the first structural violation.
    """
    _require(isinstance(data, dict), INVALID_FORMAT)
    _require(all(_present(data.get(key)) for key in ("nodes", "edges", "metadata")), INVALID_FORMAT)

    _require(isinstance(data["nodes"], list), INVALID_NODES)
    _require(isinstance(data["edges"], list), INVALID_EDGES)

    for node in data["nodes"]:
        _require(isinstance(node, dict), INVALID_NODE)
        _require(all(_present(node.get(key)) for key in ("id", "data", "position")), INVALID_NODE)

    for edge in data["edges"]:
        _require(isinstance(edge, dict), INVALID_EDGE)
        _require(all(_present(edge.get(key)) for key in ("id", "source", "target")), INVALID_EDGE)

    node_ids = {str(node["id"]) for node in data["nodes"]}
    for edge in data["edges"]:
        if str(edge["source"]) in node_ids and str(edge["target"]) in node_ids:
            continue
        if strict:
            raise ConfigError(INVALID_EDGE_REFERENCE)
        warnings.warn(f"edge '{edge['id']}' references a node that is not in the file", stacklevel=2)


__all__ = [
    "ConfigError",
    "FORMAT_VERSION",
    "INVALID_EDGE",
    "INVALID_EDGE_REFERENCE",
    "INVALID_EDGES",
    "INVALID_FORMAT",
    "INVALID_NODE",
    "INVALID_NODES",
    "PARSE_FAILED",
    "READ_FAILED",
    "validate",
]
