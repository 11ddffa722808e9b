"""
NeuroFlow — UI schema import
=============================
Turns an exported UI description into a fresh graph of unconnected nodes:

    {"elements": [{"id": "start_btn", "type": "Action_Button", "purpose": "..."}]}

Element ``i`` is placed on a 4-column grid (column = i % 4, row = i // 4).
The whole schema is validated before any node is built, so a malformed
schema never yields a partial graph.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Set, Tuple

from neuroflow.core.Types import NodeKind

from .ir import GraphNode, GraphSnapshot
from .schema import SchemaError

logger = logging.getLogger(__name__)

ELEMENT_KINDS: Dict[str, NodeKind] = {
    "Action_Button":   NodeKind.ACTION,
    "Data_Display":    NodeKind.STATE,
    "Media_Container": NodeKind.MEDIA,
}
FALLBACK_KIND = NodeKind.NAV

GRID_COLUMNS = 4
CELL_WIDTH = 220
CELL_HEIGHT = 200


def grid_cell(index: int) -> Tuple[int, int]:
    """(column, row) of the *index*-th imported element."""
    return index % GRID_COLUMNS, index // GRID_COLUMNS


def _validate(schema: Any) -> List[Dict[str, Any]]:
    if not isinstance(schema, dict) or not isinstance(schema.get("elements"), list):
        raise SchemaError("Invalid UI Schema provided: expected an object with an 'elements' list")

    seen: Set[str] = set()
    for i, element in enumerate(schema["elements"]):
        ctx = f"elements[{i}]"
        if not isinstance(element, dict):
            raise SchemaError(f"{ctx}: each element must be a JSON object")
        for key in ("id", "type"):
            if not isinstance(element.get(key), str) or not element[key]:
                raise SchemaError(f"{ctx}: missing required string field '{key}'")
        if element["id"] in seen:
            raise SchemaError(f"{ctx}: duplicate element id '{element['id']}'")
        if element.get("purpose") is not None and not isinstance(element["purpose"], str):
            raise SchemaError(f"{ctx}.purpose must be a string")
        seen.add(element["id"])
    return schema["elements"]


def import_ui_schema(schema: Any, name: str = "imported-ui") -> GraphSnapshot:
    """
    Build a snapshot with one node per UI element and no edges.

    Raises:
        SchemaError: If the schema is malformed.  Nothing is built.
    """
    elements = _validate(schema)

    nodes: List[GraphNode] = []
    for index, element in enumerate(elements):
        column, row = grid_cell(index)
        kind = ELEMENT_KINDS.get(element["type"], FALLBACK_KIND)
        nodes.append(
            GraphNode(
                id=element["id"],
                kind=kind,
                label=element["id"].replace("_", " ").upper(),
                variable_name=element["id"],
                purpose=element.get("purpose"),
                value=0,
                position=(float(column * CELL_WIDTH), float(row * CELL_HEIGHT)),
            )
        )

    logger.info(f"Imported {len(nodes)} UI elements as nodes.")
    return GraphSnapshot(nodes=tuple(nodes), edges=(), name=name)
