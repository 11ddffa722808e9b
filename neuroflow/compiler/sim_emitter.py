"""
NeuroFlow Compiler — Simulation backend
========================================
Renders a snapshot as a Gymnasium-style stepping environment:

    class NeuroFlowSimEnv:
        def __init__(self): ...            # one attribute per declared node
        def get_observation(self): ...     # observation-flagged attributes
        def reset(self): ...               # re-initialise Object / Player nodes
        def step(self, action): ...        # apply action, evaluate, reward

Action-vector contract
----------------------
``action[i]`` is added to the i-th action-flagged node, counted in node-array
order.

Evaluation order
----------------
step() evaluates every Math / Compare / IfElse node once, in node-array
order.  A node wired beneath an IfElse branch port is evaluated only inside
that branch, so an untaken branch leaves it unchanged.  This is NOT a
dependency sort: a consumer placed before its producer reads the producer's
value from the previous step.  Authors must order nodes producers-first.
"""

from __future__ import annotations

import logging
from typing import List, Set

from neuroflow.core.Types import RESETTABLE_KINDS, STEP_KINDS, NodeKind

from .branch import BranchEmitter, declares_variable
from .entrypoints import SIM_HOOKS
from .ir import GraphNode, GraphSnapshot
from .naming import NameTable
from .resolver import FanIn
from .templates import CodeWriter, comment_text, render_literal

logger = logging.getLogger(__name__)

CLASS_NAME = "NeuroFlowSimEnv"
RESERVED_NAMES = SIM_HOOKS + ("get_observation",)

# Statements inside ``class …:`` → ``def step(…):``
STEP_DEPTH = 2


def _header(snapshot: GraphSnapshot) -> List[str]:
    return [
        "# NeuroFlow Auto-Generated Simulation Environment",
        f"# Graph: {comment_text(snapshot.name)}",
        "# Do not edit by hand: regenerate from the graph editor.",
        "import numpy as np",
        "",
        "",
    ]


def _step_roots(snapshot: GraphSnapshot, emitter: BranchEmitter) -> List[GraphNode]:
    """Evaluated nodes step() emits at top level, in node-array order.

    A node reachable from an IfElse branch port is emitted inside that
    branch only.  A branch-only cycle has no outside entry, so its first
    node in array order is promoted to a root.
    """
    evaluated = [n for n in snapshot.nodes if n.kind in STEP_KINDS]
    nested: Set[str] = set()
    for node in snapshot.nodes_of(NodeKind.IF_ELSE):
        nested |= emitter.nested(node.id)

    roots = [n for n in evaluated if n.id not in nested]
    covered = {n.id for n in roots}
    for node in roots:
        covered |= emitter.nested(node.id)
    for node in evaluated:
        if node.id not in covered:
            roots.append(node)
            covered |= {node.id} | emitter.nested(node.id)

    order = {n.id: i for i, n in enumerate(snapshot.nodes)}
    return sorted(roots, key=lambda n: order[n.id])


def emit(snapshot: GraphSnapshot) -> str:
    names = NameTable(snapshot, reserved=RESERVED_NAMES)
    emitter = BranchEmitter(snapshot, names)

    declared = [n for n in snapshot.nodes if declares_variable(n)]
    actions = [n for n in snapshot.nodes if n.action_flagged]
    observations = [n for n in snapshot.nodes if n.observation_flagged]
    resettable = [n for n in snapshot.nodes if n.kind in RESETTABLE_KINDS]
    evaluated = _step_roots(snapshot, emitter)
    rewards = snapshot.nodes_of(NodeKind.REWARD)

    w = CodeWriter(indent=0)
    w.extend(_header(snapshot))
    w.writeln(f"class {CLASS_NAME}:")
    w.push()

    # ── __init__ ──────────────────────────────────────────────────────────
    w.writeln("def __init__(self):")
    w.push()
    for node in declared:
        w.writeln(f"self.{names[node.id]} = {render_literal(node.value)}")
    if not declared:
        w.writeln("pass")
    w.pop()
    w.blank()

    # ── get_observation ───────────────────────────────────────────────────
    obs = ", ".join(f"self.{names[n.id]}" for n in observations)
    w.writeln("def get_observation(self):")
    w.push()
    w.writeln(f"return np.array([{obs}], dtype=np.float32)")
    w.pop()
    w.blank()

    # ── reset ─────────────────────────────────────────────────────────────
    w.writeln("def reset(self):")
    w.push()
    for node in resettable:
        w.writeln(f"self.{names[node.id]} = {render_literal(node.value)}")
    w.writeln("return self.get_observation()")
    w.pop()
    w.blank()

    # ── step ──────────────────────────────────────────────────────────────
    w.writeln("def step(self, action):")
    w.push()
    for idx, node in enumerate(actions):
        w.writeln(f"self.{names[node.id]} += float(action[{idx}])")
    for node in evaluated:
        w.extend_raw(emitter.emit(node.id, STEP_DEPTH))

    reward_expr = "0.0"
    if rewards:
        if len(rewards) > 1:
            logger.warning(
                f"{len(rewards)} Reward nodes found; only '{rewards[0].id}' is read"
            )
        reward_expr = emitter.input_expr(rewards[0], "value", FanIn.SUM, "0.0")
    w.writeln(f"reward = float({reward_expr})")
    w.writeln("return self.get_observation(), reward, False, False, {}")
    w.pop()

    w.pop()

    logger.info(
        f"Simulation backend: {len(actions)} action inputs, "
        f"{len(observations)} observations, {len(evaluated)} top-level step nodes"
    )
    return w.result() + "\n"
