"""
Socket.IO bridge: pushes every document change to connected renderers.

Uses python-socketio in ASGI mode so it can wrap FastAPI.
`create_socket_app(fastapi_app, emitter)` returns the composite ASGI
application to pass to uvicorn.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict

import socketio

from .change_emitter import ChangeEmitter

from logging import getLogger
logger = getLogger(__name__)

# ---------------------------------------------------------------------------
# Socket.IO instance (async, ASGI mode)
# ---------------------------------------------------------------------------

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    logger=False,
    engineio_logger=False,
)


def _on_change(event: Dict[str, Any]) -> None:
    """
    Called synchronously by ChangeEmitter.fire().
    We schedule an async emit on the running event loop.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return  # no loop (CLI, tests): nobody to push to
    loop.create_task(sio.emit("document", event))


@sio.event
async def connect(sid: str, environ: dict) -> None:
    logger.debug(f"renderer connected: {sid}")


@sio.event
async def disconnect(sid: str) -> None:
    logger.debug(f"renderer disconnected: {sid}")


def create_socket_app(fastapi_app: Any, emitter: ChangeEmitter) -> socketio.ASGIApp:
    """Wrap *fastapi_app* inside a Socket.IO ASGI application."""
    emitter.on_change(_on_change)
    return socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
