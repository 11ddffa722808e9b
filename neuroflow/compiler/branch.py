"""
NeuroFlow Compiler — Branch emitter
====================================
Recursively renders the statements reachable from a node along its outgoing
edges.  Node kinds are dispatched through templates.TEMPLATE_REGISTRY.

Termination
-----------
The walk follows outgoing edges only and stops where a port has no edge.
Graphs are user-editable, so a path can loop back onto a node that is still
being emitted.  The ids on the current recursion path are threaded through
every call as a frozenset; a repeat emits ``pass`` instead of recursing.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Set

from neuroflow.core.Types import DEFAULT_BRANCH_PORT, VALUE_KINDS, NodeKind, case_port

from .ir import GraphNode, GraphSnapshot
from .naming import NameTable
from .resolver import FanIn, PortResolver, combine
from .templates import CodeWriter, get_template

logger = logging.getLogger(__name__)


def declares_variable(node: GraphNode) -> bool:
    """True when *node* owns a ``self.<name>`` variable in generated code."""
    return (
        node.kind in VALUE_KINDS
        or node.action_flagged
        or node.observation_flagged
    )


def body_ports(node: GraphNode) -> List[str]:
    """Output ports whose targets are emitted inline beneath *node*."""
    if node.kind.is_trigger():
        return ["trigger"]
    if node.kind == NodeKind.IF_ELSE:
        return [case_port(i) for i in range(len(node.cases))] + [DEFAULT_BRANCH_PORT]
    return []


class BranchEmitter:
    def __init__(self, snapshot: GraphSnapshot, names: NameTable):
        self.snapshot = snapshot
        self.names = names
        self.resolver = PortResolver(snapshot)

    # ── Expressions ───────────────────────────────────────────────────────

    def target(self, node: GraphNode) -> str:
        return f"self.{self.names[node.id]}"

    def value_expr(self, node: GraphNode) -> str:
        """Expression that reads *node*'s current value."""
        if declares_variable(node):
            return self.target(node)
        if node.kind.is_trigger():
            return "1.0"
        return "0"

    def input_expr(self, node: GraphNode, port: str, policy: FanIn, default: str) -> str:
        sources = self.resolver.resolve(node, port)
        return combine([self.value_expr(s) for s in sources], policy, default)

    # ── Recursive emission ────────────────────────────────────────────────

    def emit(self, node_id: str, depth: int, visited: FrozenSet[str] = frozenset()) -> List[str]:
        """Render *node_id* and everything beneath it at indent *depth*."""
        writer = CodeWriter(indent=depth)
        self._emit_node(node_id, writer, visited)
        return writer.lines()

    def emit_targets(self, node: GraphNode, port: str, depth: int) -> List[str]:
        """Render every node wired to *port*; ``pass`` when nothing is emitted."""
        writer = CodeWriter(indent=depth)
        self.emit_port(node, port, writer, frozenset({node.id}))
        if not writer.lines():
            writer.writeln("pass")
        return writer.lines()

    def emit_port(
        self,
        node: GraphNode,
        port: str,
        writer: CodeWriter,
        visited: FrozenSet[str],
    ) -> None:
        for edge in self.snapshot.get_outgoing(node.id, port):
            self._emit_node(edge.target, writer, visited)

    def emit_body(
        self,
        node: GraphNode,
        port: str,
        writer: CodeWriter,
        visited: FrozenSet[str],
    ) -> None:
        """Emit a clause body one level deeper; never leaves it empty."""
        writer.push()
        before = len(writer.lines())
        self.emit_port(node, port, writer, visited)
        if len(writer.lines()) == before:
            writer.writeln("pass")
        writer.pop()

    def _emit_node(self, node_id: str, writer: CodeWriter, visited: FrozenSet[str]) -> None:
        node = self.snapshot.get_node(node_id)
        if node is None:
            logger.debug(f"Skipping missing node '{node_id}'")
            return
        if node_id in visited:
            logger.debug(f"Cycle detected at node '{node_id}'; emitting no-op")
            writer.writeln(f"pass  # cycle: {self.names[node_id]}")
            return
        get_template(node.kind).emit_inline(node, self, writer, visited | {node_id})

    # ── Reachability ──────────────────────────────────────────────────────

    def nested(self, node_id: str) -> Set[str]:
        """Ids of every node emitted somewhere beneath *node_id*."""
        found: Set[str] = set()
        stack = [node_id]
        while stack:
            node = self.snapshot.get_node(stack.pop())
            if node is None:
                continue
            for port in body_ports(node):
                for edge in self.snapshot.get_outgoing(node.id, port):
                    if edge.target not in found:
                        found.add(edge.target)
                        stack.append(edge.target)
        return found
