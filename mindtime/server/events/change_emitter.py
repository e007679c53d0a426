"""
ChangeEmitter: fan-out of document change events to registered listeners
(the Socket.IO bridge, loggers, tests).
"""
from __future__ import annotations

import time
from typing import Any, Callable, Dict, List

from logging import getLogger
logger = getLogger(__name__)


class ChangeEmitter:
    def __init__(self) -> None:
        self._listeners: List[Callable[[Dict[str, Any]], None]] = []

    def on_change(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        """Register a callback that receives every emitted change event."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def fire(self, payload: Dict[str, Any]) -> None:
        """Stamp the payload with a millisecond timestamp and broadcast it."""
        if "ts" not in payload:
            payload["ts"] = _now_ms()
        for cb in list(self._listeners):
            try:
                cb(payload)
            except Exception:
                # a broken listener must not undo a mutation that already happened
                logger.exception(f"Change listener {cb!r} failed")


def _now_ms() -> int:
    return int(time.time() * 1000)
