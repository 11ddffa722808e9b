"""
NeuroFlow Compiler — Graph Snapshot
====================================
GraphSnapshot is the immutable structural value handed to the compiler for a
single compile call.

    editor JSON  →  [deserialiser]  →  GraphSnapshot
                                            ↓
                                  [naming / resolver / branch]
                                            ↓
                                   [event / sim emitter]  →  Python source str

Design goals:
  - Frozen dataclasses only; the compiler never mutates its input.
  - Node and edge order is preserved exactly as declared by the editor,
    because fan-in order, case order and simulation step order depend on it.
  - Dangling edges are allowed in the snapshot; consumers treat them as
    absent input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from neuroflow.core.Types import NodeKind


# ── Branch case ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BranchCase:
    id: str
    value: str


# ── Node ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GraphNode:
    id: str
    kind: NodeKind
    label: str = ""

    custom_name: Optional[str]   = None
    variable_name: Optional[str] = None
    value: Any                   = None
    operation: Optional[str]     = None
    purpose: Optional[str]       = None
    cases: Tuple[BranchCase, ...] = ()

    # Presentation-only flags: never influence compiled output.
    is_locked: bool   = False
    is_bypassed: bool = False

    # Simulation flags.  None means "use the kind default".
    is_action: Optional[bool]      = None
    is_observation: Optional[bool] = None

    position: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        case_ids = [c.id for c in self.cases]
        if len(case_ids) != len(set(case_ids)):
            raise ValueError(f"node '{self.id}': duplicate branch case id")

    @property
    def display_name(self) -> str:
        return self.custom_name or self.label or self.id

    @property
    def action_flagged(self) -> bool:
        if self.is_action is not None:
            return self.is_action
        return self.kind == NodeKind.PLAYER

    @property
    def observation_flagged(self) -> bool:
        if self.is_observation is not None:
            return self.is_observation
        return self.kind == NodeKind.OBJECT


# ── Edge ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GraphEdge:
    id: str
    source: str
    source_handle: str
    target: str
    target_handle: str


# ── Snapshot ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GraphSnapshot:
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    name: str = "neuroflow-graph"

    _index: Dict[str, GraphNode] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples.
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

        index: Dict[str, GraphNode] = {}
        for node in self.nodes:
            if node.id in index:
                raise ValueError(f"duplicate node id '{node.id}'")
            index[node.id] = node
        object.__setattr__(self, "_index", index)

    # ── Convenience queries ────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._index.get(node_id)

    def nodes_of(self, *kinds: NodeKind) -> List[GraphNode]:
        return [n for n in self.nodes if n.kind in kinds]

    def get_outgoing(self, node_id: str, port: str) -> List[GraphEdge]:
        return [e for e in self.edges
                if e.source == node_id and e.source_handle == port]

    def get_incoming(self, node_id: str, *ports: str) -> List[GraphEdge]:
        """Edges into any of *ports* on *node_id*, in declaration order."""
        return [e for e in self.edges
                if e.target == node_id and e.target_handle in ports]
