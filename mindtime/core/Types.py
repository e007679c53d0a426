from enum import Enum
from typing import Any


DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_NODE_TYPE = "customNode"
NEW_NODE_LABEL = "New Node"


class NodeField(Enum):
    """Editable payload fields on a node, keyed by their wire name."""
    LABEL = "label"
    DESCRIPTION = "description"
    START_DATE = "startDate"
    END_DATE = "endDate"
    BACKGROUND_COLOR = "backgroundColor"
    COMPLETED = "completed"
    ICON = "icon"

    @staticmethod
    def parse(name: Any) -> 'NodeField':
        if isinstance(name, NodeField):
            return name
        try:
            return NodeField(name)
        except ValueError:
            raise UnknownFieldError(f"Unknown node field '{name}'") from None


class UnknownFieldError(ValueError):
    """Raised when a field edit names something that is not a payload field."""
