"""
NeuroFlow Compiler — JSON Deserialiser
=======================================
Converts a serialised editor graph (file path or dict) into an immutable
GraphSnapshot.

Pipeline
--------
    graph.json    →  [schema.validate]                 →  checked dict
    checked dict  →  [deserialiser.json_to_snapshot]   →  GraphSnapshot
    GraphSnapshot →  [event_emitter / sim_emitter]     →  Python source str

Recoverable input problems are resolved here, once, so that the emitters
only ever see known node kinds:
  - nodes of an unknown type are dropped;
  - edges touching a dropped or missing node are dropped;
  - an edge without a handle uses the first port of that direction declared
    for the node kind (legacy editor graphs omit handles).

See schema.py for the full JSON format.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from neuroflow.core.Types import NodeKind, PortDirection, default_port

from .ir import BranchCase, GraphEdge, GraphNode, GraphSnapshot
from .schema import validate

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_NAME = "neuroflow-graph"


def _parse_position(raw: Any) -> tuple:
    raw = raw or {}
    return (float(raw.get("x") or 0), float(raw.get("y") or 0))


def _parse_node(node_spec: Dict[str, Any]) -> Optional[GraphNode]:
    """Convert a JSON node dict → GraphNode, or None for an unknown type."""
    kind = NodeKind.from_wire(node_spec["type"])
    if kind is None:
        logger.warning(f"Dropping node '{node_spec['id']}': unknown type '{node_spec['type']}'")
        return None

    data = node_spec.get("data") or {}
    cases = tuple(
        BranchCase(id=c["id"], value="" if c.get("value") is None else str(c["value"]))
        for c in (data.get("cases") or [])
    )

    return GraphNode(
        id=node_spec["id"],
        kind=kind,
        label=data.get("label") or "",
        custom_name=data.get("customName") or None,
        variable_name=data.get("variableName") or None,
        value=data.get("value"),
        operation=data.get("operation"),
        purpose=data.get("purpose"),
        cases=cases,
        is_locked=data.get("isLocked") is True,
        is_bypassed=data.get("isBypassed") is True,
        is_action=data.get("isAction"),
        is_observation=data.get("isObservation"),
        position=_parse_position(node_spec.get("position")),
    )


def _parse_edge(edge_spec: Dict[str, Any], node_map: Dict[str, GraphNode]) -> Optional[GraphEdge]:
    """Convert a JSON edge dict → GraphEdge.  Returns None if either endpoint is missing."""
    source = node_map.get(edge_spec["source"])
    target = node_map.get(edge_spec["target"])
    if source is None or target is None:
        logger.debug(
            f"Dropping edge {edge_spec['source']} -> {edge_spec['target']}: endpoint not in graph"
        )
        return None

    source_handle = edge_spec.get("sourceHandle") or default_port(source.kind, PortDirection.OUTPUT)
    target_handle = edge_spec.get("targetHandle") or default_port(target.kind, PortDirection.INPUT)
    if source_handle is None or target_handle is None:
        logger.debug(
            f"Dropping edge {source.id} -> {target.id}: no port to attach to"
        )
        return None

    edge_id = edge_spec.get("id") or f"{source.id}:{source_handle}→{target.id}:{target_handle}"
    return GraphEdge(
        id=edge_id,
        source=source.id,
        source_handle=source_handle,
        target=target.id,
        target_handle=target_handle,
    )


# ── Public entry point ────────────────────────────────────────────────────────

def json_to_snapshot(
    source: Union[str, Path, Dict[str, Any]],
    *,
    strict: bool = False,
) -> GraphSnapshot:
    """
    Parse a graph JSON description and return a GraphSnapshot.

    Args:
        source: One of:
            - A file path (str or Path) to a JSON file.
            - A pre-parsed dict matching the graph JSON schema.
        strict: Forwarded to schema.validate().

    Raises:
        FileNotFoundError: If a path is given and the file does not exist.
        SchemaError: If the JSON structure is invalid.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    else:
        data = source

    validate(data, strict=strict)

    node_map: Dict[str, GraphNode] = {}
    for node_spec in data["nodes"]:
        node = _parse_node(node_spec)
        if node is not None:
            node_map[node.id] = node

    edges: List[GraphEdge] = []
    for edge_spec in data["edges"]:
        edge = _parse_edge(edge_spec, node_map)
        if edge is not None:
            edges.append(edge)

    return GraphSnapshot(
        nodes=tuple(node_map.values()),
        edges=tuple(edges),
        name=data.get("name") or DEFAULT_GRAPH_NAME,
    )


__all__ = ["json_to_snapshot", "DEFAULT_GRAPH_NAME"]
