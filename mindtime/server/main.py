"""
FastAPI + Socket.IO server for the mindmap renderer.

Start with:
    mindtime serve

Or via uvicorn directly:
    uvicorn mindtime.server.main:create_asgi_app --factory --port 3001 --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindtime.config import Settings
from mindtime.server.events.socket_server import create_socket_app
from mindtime.server.routes.document_routes import router
from mindtime.server.state import MindMapState
from mindtime.storage.kv_store import KeyValueStore
from mindtime.storage.persistence import PersistenceStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_state(settings: Settings) -> MindMapState:
    store = PersistenceStore(KeyValueStore(settings.db_path), key=settings.storage_key)
    return MindMapState(store)


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

def create_app(state: Optional[MindMapState] = None, settings: Optional[Settings] = None) -> FastAPI:
    if state is None:
        state = build_state(settings or Settings.from_env())

    app = FastAPI(title="MindTime API", version="1.0.0")
    app.state.mindmap = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


def create_asgi_app(settings: Optional[Settings] = None):
    """FastAPI app wrapped in the Socket.IO ASGI layer."""
    app = create_app(settings=settings)
    return create_socket_app(app, app.state.mindmap.emitter)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(settings: Optional[Settings] = None, reload: bool = False) -> None:
    import uvicorn

    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    if reload:
        uvicorn.run(
            "mindtime.server.main:create_asgi_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            reload=True,
        )
    else:
        uvicorn.run(create_asgi_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
