"""
NeuroFlow Compiler — Graph JSON Schema + Validator
===================================================
Defines the editor's graph serialisation format and a lightweight validator
that runs without any third-party JSON Schema library.

Canonical JSON format
---------------------

    {
      "name": "reach-target",                      // graph label (str, optional)
      "nodes": [
        {
          "id":   "agent_pos",                     // unique within this graph (str, required)
          "type": "player",                        // node kind wire string (str, required)
          "data": {                                // (object, optional)
            "label":        "AGENT POS",
            "customName":   "Agent",               // display name override
            "variableName": "agent_pos",
            "value":        0,                     // number or string
            "operation":    "-",                   // math / compare only
            "cases":        [{"id": "case-0", "value": "1"}],   // if_else only
            "purpose":      "Agent x position",
            "isLocked":     false,                 // presentation only
            "isBypassed":   false,                 // presentation only
            "isAction":     true,                  // simulation action input
            "isObservation": false                 // simulation observation
          },
          "position": {"x": 0, "y": 0}             // editor layout (optional)
        }
      ],
      "edges": [
        {
          "id":           "e1",                    // (str, optional)
          "source":       "agent_pos",             // (str, required)
          "sourceHandle": "current_value",         // (str, optional → kind default)
          "target":       "distance",              // (str, required)
          "targetHandle": "a"                      // (str, optional → kind default)
        }
      ]
    }

Recoverable problems (unknown node types, unknown port names, edges whose
endpoints are missing) are reported as warnings; the compiler treats the
affected nodes/edges as absent.  ``strict=True`` turns them into errors.
"""

from __future__ import annotations

import json
import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from neuroflow.core.Types import NodeKind, PortDirection, is_valid_port

logger = logging.getLogger(__name__)


KNOWN_NODE_TYPES: frozenset = frozenset(k.value for k in NodeKind)


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when graph JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


def _soft_fail(message: str, strict: bool) -> None:
    if strict:
        raise SchemaError(message)
    logger.warning(message)
    warnings.warn(message, stacklevel=3)


def _optional_str(obj: Dict, key: str, context: str) -> None:
    if obj.get(key) is not None:
        _require(isinstance(obj[key], str), f"{context}.{key} must be a string")


def _optional_bool(obj: Dict, key: str, context: str) -> None:
    if obj.get(key) is not None:
        _require(isinstance(obj[key], bool), f"{context}.{key} must be true or false")


def _optional_number(obj: Dict, key: str, context: str) -> None:
    value = obj.get(key)
    if value is not None:
        _require(
            isinstance(value, (int, float)) and not isinstance(value, bool),
            f"{context}.{key} must be a number",
        )


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a parsed graph JSON dict.

    Args:
        data:   A pre-parsed dict (result of json.load / json.loads).
        strict: When True, raise SchemaError for unknown node types, unknown
                port names and dangling edges.
                When False (default), those produce a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "graph JSON must be a JSON object at the top level")
    _require_keys(data, ["nodes", "edges"], "graph root")

    _optional_str(data, "name", "graph")
    _require(isinstance(data["nodes"], list), "nodes must be a list")
    _require(isinstance(data["edges"], list), "edges must be a list")

    # ── Validate nodes ──────────────────────────────────────────────────────

    kinds: Dict[str, NodeKind] = {}
    case_counts: Dict[str, int] = {}
    node_ids: Set[str] = set()

    for i, node in enumerate(data["nodes"]):
        ctx = f"nodes[{i}]"
        _require(isinstance(node, dict), f"{ctx}: each node must be a JSON object")
        _require_keys(node, ["id", "type"], ctx)
        _require(isinstance(node["id"],   str), f"{ctx}.id must be a string")
        _require(isinstance(node["type"], str), f"{ctx}.type must be a string")
        _require(
            node["id"] not in node_ids,
            f"{ctx}: duplicate node id '{node['id']}'",
        )
        node_ids.add(node["id"])

        node_data = node.get("data", {})
        _require(isinstance(node_data, dict), f"{ctx}.data must be an object")
        for key in ("label", "customName", "variableName", "operation", "purpose"):
            _optional_str(node_data, key, f"{ctx}.data")
        for key in ("isLocked", "isBypassed", "isAction", "isObservation"):
            _optional_bool(node_data, key, f"{ctx}.data")

        cases = node_data.get("cases") or []
        _require(isinstance(cases, list), f"{ctx}.data.cases must be a list")
        case_ids: Set[str] = set()
        for j, case in enumerate(cases):
            cctx = f"{ctx}.data.cases[{j}]"
            _require(isinstance(case, dict), f"{cctx}: each case must be a JSON object")
            _require_keys(case, ["id"], cctx)
            _require(isinstance(case["id"], str), f"{cctx}.id must be a string")
            _require(case["id"] not in case_ids, f"{cctx}: duplicate case id '{case['id']}'")
            case_ids.add(case["id"])

        if "position" in node:
            _require(isinstance(node["position"], dict), f"{ctx}.position must be an object")
            for key in ("x", "y"):
                _optional_number(node["position"], key, f"{ctx}.position")

        kind = NodeKind.from_wire(node["type"])
        if kind is None:
            _soft_fail(f"{ctx}: unknown node type '{node['type']}'", strict)
            continue
        kinds[node["id"]] = kind
        case_counts[node["id"]] = len(cases)

    # ── Validate edges ──────────────────────────────────────────────────────

    for i, edge in enumerate(data["edges"]):
        ctx = f"edges[{i}]"
        _require(isinstance(edge, dict), f"{ctx}: each edge must be a JSON object")
        _require_keys(edge, ["source", "target"], ctx)

        for field in ("source", "target"):
            _require(isinstance(edge[field], str), f"{ctx}.{field} must be a string")
        for field in ("id", "sourceHandle", "targetHandle"):
            _optional_str(edge, field, ctx)

        for field, handle, direction in (
            ("source", "sourceHandle", PortDirection.OUTPUT),
            ("target", "targetHandle", PortDirection.INPUT),
        ):
            node_id = edge[field]
            if node_id not in node_ids:
                _soft_fail(f"{ctx}: {field} '{node_id}' not found in nodes", strict)
                continue
            kind = kinds.get(node_id)
            port = edge.get(handle)
            if kind is None or port is None:
                continue
            if not is_valid_port(kind, port, direction, case_counts[node_id]):
                _soft_fail(f"{ctx}: '{kind.value}' node has no {field} port '{port}'", strict)


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and validate a graph JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the graph structure is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    validate(data, strict=strict)
    return data


__all__ = ["KNOWN_NODE_TYPES", "SchemaError", "validate", "validate_file"]
