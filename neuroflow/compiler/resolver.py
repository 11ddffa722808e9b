"""
NeuroFlow Compiler — Port resolution
=====================================
One-hop lookup of the nodes feeding an input port, plus the explicit fan-in
reduction policies used when several writers share one port.

Resolution order for an input port:
  1. Every edge targeting (node, port) or one of its aliases, in edge
     declaration order, whose source node exists in the snapshot.
  2. Nothing wired → the caller substitutes its kind-specific default.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Sequence

from neuroflow.core.Types import PORT_ALIASES

from .ir import GraphNode, GraphSnapshot

logger = logging.getLogger(__name__)


class FanIn(Enum):
    """How several incoming expressions on one port are combined."""
    SUM = "sum"       # writers are added: (a + b + c)
    FIRST = "first"   # first declared writer wins


def combine(exprs: Sequence[str], policy: FanIn, default: str) -> str:
    """Reduce the source expressions of one port into a single expression."""
    if not exprs:
        return default
    if policy == FanIn.FIRST or len(exprs) == 1:
        return exprs[0]
    return "(" + " + ".join(exprs) + ")"


class PortResolver:
    def __init__(self, snapshot: GraphSnapshot):
        self.snapshot = snapshot

    def resolve(self, node: GraphNode, port_name: str) -> List[GraphNode]:
        """Return the source nodes wired into *port_name* on *node*."""
        ports = PORT_ALIASES.get(port_name, (port_name,))
        sources: List[GraphNode] = []
        for edge in self.snapshot.get_incoming(node.id, *ports):
            src = self.snapshot.get_node(edge.source)
            if src is None:
                logger.debug(f"Ignoring dangling edge '{edge.id}' into '{node.id}.{port_name}'")
                continue
            sources.append(src)
        return sources
