"""
NeuroFlow Compiler — Entry points
==================================
Finds the nodes that begin an independently compiled procedure and drives
the BranchEmitter once per entry point.

  event target       one EntryPoint per trigger-capable node, in node order
  simulation target  fixed lifecycle hooks (reset / step); see sim_emitter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from neuroflow.core.Types import TRIGGER_KINDS

from .branch import BranchEmitter
from .ir import GraphNode

# Procedure bodies sit inside ``class …:`` → ``def …:``.
BODY_DEPTH = 2

SIM_HOOKS = ("reset", "step")

HANDLER_FORMAT = "on_{}_trigger"


@dataclass
class EntryPoint:
    node: GraphNode
    method_name: str
    body: List[str] = field(default_factory=list)


class EntryPointCollector:
    def __init__(self, emitter: BranchEmitter):
        self.emitter = emitter

    def method_name(self, node: GraphNode) -> str:
        return HANDLER_FORMAT.format(self.emitter.names[node.id])

    def collect(self) -> List[EntryPoint]:
        """One entry point per trigger node; bodies are never empty."""
        entry_points: List[EntryPoint] = []
        for node in self.emitter.snapshot.nodes_of(*TRIGGER_KINDS):
            body = self.emitter.emit_targets(node, "trigger", BODY_DEPTH)
            entry_points.append(
                EntryPoint(node=node, method_name=self.method_name(node), body=body)
            )
        return entry_points
