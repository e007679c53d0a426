"""
Document REST routes: the rendering layer's only way to change the mindmap.

All routes are mounted under /api by main.py. Every mutating route returns
the complete new document so the renderer can re-render from it.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel

from mindtime.core.Types import UnknownFieldError
from mindtime.exchange.mindmap_config import export_filename
from mindtime.exchange.schema import READ_FAILED, ConfigError
from mindtime.server.state import MindMapState

from logging import getLogger
logger = getLogger(__name__)

router = APIRouter()


def get_state(request: Request) -> MindMapState:
    return request.app.state.mindmap


def _require_node(state: MindMapState, node_id: str) -> None:
    if not state.document.has_node(node_id):
        raise HTTPException(status_code=404, detail="Node not found")


# ── GET /document ─────────────────────────────────────────────────────────────

@router.get("/document")
async def get_document(state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    return state.document.to_dict()


# ── PUT /nodes/:id/fields/:field ──────────────────────────────────────────────

class FieldValueBody(BaseModel):
    value: Any


@router.put("/nodes/{node_id}/fields/{field}")
async def update_node_field(
    node_id: str, field: str, body: FieldValueBody, state: MindMapState = Depends(get_state)
) -> Dict[str, Any]:
    _require_node(state, node_id)
    try:
        return state.update_node_field(node_id, field, body.value).to_dict()
    except UnknownFieldError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ── PUT /nodes/:id/position ───────────────────────────────────────────────────

class PositionBody(BaseModel):
    x: float
    y: float


@router.put("/nodes/{node_id}/position")
async def move_node(
    node_id: str, body: PositionBody, state: MindMapState = Depends(get_state)
) -> Dict[str, Any]:
    _require_node(state, node_id)
    return state.move_node(node_id, body.x, body.y).to_dict()


# ── POST /nodes/:id/children ──────────────────────────────────────────────────

@router.post("/nodes/{node_id}/children", status_code=201)
async def create_connected_node(
    node_id: str, body: PositionBody, state: MindMapState = Depends(get_state)
) -> Dict[str, Any]:
    _require_node(state, node_id)
    return state.create_connected_node(node_id, body.x, body.y).to_dict()


# ── DELETE /nodes/:id ─────────────────────────────────────────────────────────

@router.delete("/nodes/{node_id}")
async def delete_node(node_id: str, state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    _require_node(state, node_id)
    return state.delete_node(node_id).to_dict()


# ── POST /nodes/:id/color ─────────────────────────────────────────────────────

class ColorBody(BaseModel):
    color: str


@router.post("/nodes/{node_id}/color")
async def propagate_color(
    node_id: str, body: ColorBody, state: MindMapState = Depends(get_state)
) -> Dict[str, Any]:
    _require_node(state, node_id)
    return state.propagate_color(node_id, body.color).to_dict()


# ── POST /edges ───────────────────────────────────────────────────────────────

class EdgeBody(BaseModel):
    source: str
    target: str


@router.post("/edges", status_code=201)
async def connect_existing(body: EdgeBody, state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    _require_node(state, body.source)
    _require_node(state, body.target)
    return state.connect_existing(body.source, body.target).to_dict()


# ── DELETE /edges/:id ─────────────────────────────────────────────────────────

@router.delete("/edges/{edge_id}")
async def delete_edge(edge_id: str, state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    if state.document.find_edge(edge_id) is None:
        raise HTTPException(status_code=404, detail="Edge not found")
    return state.delete_edge(edge_id).to_dict()


# ── GET /export ───────────────────────────────────────────────────────────────

@router.get("/export")
async def export_document(
    title: Optional[str] = Query(None),
    description: Optional[str] = Query(None),
    state: MindMapState = Depends(get_state),
) -> Response:
    text = state.export_text(title, description)
    filename = export_filename(title or state.metadata.title)
    return Response(
        content=text.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── POST /import ──────────────────────────────────────────────────────────────
# The file contents are posted as the raw request body.

@router.post("/import")
async def import_document(
    request: Request,
    strict: bool = Query(False, description="Reject edges that reference missing nodes"),
    state: MindMapState = Depends(get_state),
) -> Dict[str, Any]:
    try:
        text = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail=READ_FAILED)
    try:
        imported = state.import_text(text, strict=strict)
    except ConfigError as exc:
        logger.info(f"Rejected mindmap import: {exc}")
        raise HTTPException(status_code=400, detail=str(exc))
    result = imported.document.to_dict()
    result["metadata"] = imported.metadata.to_dict()
    return result


# ── POST /sample ──────────────────────────────────────────────────────────────

@router.post("/sample")
async def load_sample(state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    return state.load_sample().to_dict()


# ── POST /reset ───────────────────────────────────────────────────────────────

@router.post("/reset")
async def reset_document(state: MindMapState = Depends(get_state)) -> Dict[str, Any]:
    return state.reset().to_dict()
