"""
Graph REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Response
from pydantic import BaseModel

from neuroflow.compiler import TARGETS, CompileError
from neuroflow.compiler.schema import SchemaError
from neuroflow.server.serializers.graph_serializer import (
    serialize_node_kinds,
    serialize_snapshot,
)
from neuroflow.server.state import graph_state

logger = logging.getLogger(__name__)

router = APIRouter()


# ── GET /graph ────────────────────────────────────────────────────────────────

@router.get("/graph")
async def get_graph() -> Dict[str, Any]:
    return serialize_snapshot(graph_state.snapshot)


# ── PUT /graph ────────────────────────────────────────────────────────────────

@router.put("/graph")
async def put_graph(data: Dict[str, Any] = Body(...), strict: bool = False) -> Dict[str, Any]:
    try:
        snapshot = graph_state.replace(data, strict=strict)
    except (SchemaError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return serialize_snapshot(snapshot)


# ── DELETE /graph ─────────────────────────────────────────────────────────────

@router.delete("/graph", status_code=204)
async def clear_graph() -> Response:
    graph_state.clear()
    return Response(status_code=204)


# ── POST /graph/import ────────────────────────────────────────────────────────

@router.post("/graph/import")
async def import_graph(schema: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    try:
        snapshot = graph_state.load_ui_schema(schema)
    except SchemaError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return serialize_snapshot(snapshot)


# ── POST /compile ─────────────────────────────────────────────────────────────

class CompileBody(BaseModel):
    target: str = "event"
    graph: Optional[Dict[str, Any]] = None


@router.post("/compile")
async def compile_code(body: CompileBody) -> Dict[str, Any]:
    try:
        code = graph_state.compile(body.target, body.graph)
    except CompileError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict())
    except (SchemaError, ValueError) as exc:
        raise HTTPException(
            status_code=400,
            detail={"reason": "invalid_snapshot", "message": str(exc)},
        )
    logger.info(f"Python Logic Code Generated ({body.target})")
    return {"target": body.target, "code": code}


# ── GET /targets ──────────────────────────────────────────────────────────────

@router.get("/targets")
async def get_targets() -> List[str]:
    return list(TARGETS)


# ── GET /node-kinds ───────────────────────────────────────────────────────────

@router.get("/node-kinds")
async def get_node_kinds() -> List[Dict[str, Any]]:
    return serialize_node_kinds()
