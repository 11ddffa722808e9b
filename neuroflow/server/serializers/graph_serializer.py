"""
Graph serializer — converts a GraphSnapshot back into the editor's wire JSON.

The output is the exact shape accepted by compiler.deserialiser, so
``json_to_snapshot(serialize_snapshot(s))`` rebuilds an equal snapshot.
"""
from __future__ import annotations

from typing import Any, Dict, List

from neuroflow.compiler.ir import GraphEdge, GraphNode, GraphSnapshot
from neuroflow.core.Types import KIND_PORTS, NodeKind, PortDirection

# ── Wire shapes (dicts, not TypedDicts, for easy JSON serialisation) ──────────
# SerializedNode keys:  id, type, data, position
# SerializedEdge keys:  id, source, sourceHandle, target, targetHandle
# SerializedGraph keys: name, nodes, edges


def _serialize_node(node: GraphNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "label": node.label,
        "isLocked": node.is_locked,
        "isBypassed": node.is_bypassed,
    }
    optional = {
        "customName": node.custom_name,
        "variableName": node.variable_name,
        "value": node.value,
        "operation": node.operation,
        "purpose": node.purpose,
        "isAction": node.is_action,
        "isObservation": node.is_observation,
    }
    data.update({k: v for k, v in optional.items() if v is not None})
    if node.cases:
        data["cases"] = [{"id": c.id, "value": c.value} for c in node.cases]

    return {
        "id": node.id,
        "type": node.kind.value,
        "data": data,
        "position": {"x": node.position[0], "y": node.position[1]},
    }


def _serialize_edge(edge: GraphEdge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "sourceHandle": edge.source_handle,
        "target": edge.target,
        "targetHandle": edge.target_handle,
    }


# ── Public API ─────────────────────────────────────────────────────────────────

def serialize_snapshot(snapshot: GraphSnapshot) -> Dict[str, Any]:
    """Serialize *snapshot* into a SerializedGraph dict."""
    return {
        "name": snapshot.name,
        "nodes": [_serialize_node(n) for n in snapshot.nodes],
        "edges": [_serialize_edge(e) for e in snapshot.edges],
    }


def serialize_node_kinds() -> List[Dict[str, Any]]:
    """Port catalogue for every node kind, for the editor palette."""
    result = []
    for kind in NodeKind:
        ports = KIND_PORTS[kind]
        result.append(
            {
                "type": kind.value,
                "name": kind.name,
                "isTrigger": kind.is_trigger(),
                "inputs": [p for p, s in ports.items() if s["direction"] == PortDirection.INPUT],
                "outputs": [p for p, s in ports.items() if s["direction"] == PortDirection.OUTPUT],
            }
        )
    return result
