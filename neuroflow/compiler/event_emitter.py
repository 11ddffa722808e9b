"""
NeuroFlow Compiler — Event backend
===================================
Renders a snapshot as a class of independent UI event handlers:

    class NeuroFlowEnv:
        def __init__(self): ...          # one attribute per declared node
        def get_state(self): ...         # dict of every declared attribute
        def on_<trigger>_trigger(self):  # one per trigger node
            ...

Output is a pure function of the snapshot: no timestamps, no ids that are
not derived from the snapshot itself.
"""

from __future__ import annotations

import logging
from typing import List

from neuroflow.core.Types import TRIGGER_KINDS

from .branch import BranchEmitter, declares_variable
from .entrypoints import HANDLER_FORMAT, EntryPointCollector
from .ir import GraphSnapshot
from .naming import NameTable
from .templates import CodeWriter, comment_text, render_literal

logger = logging.getLogger(__name__)

CLASS_NAME = "NeuroFlowEnv"
RESERVED_NAMES = ("get_state",)


def _header(snapshot: GraphSnapshot) -> List[str]:
    return [
        "# NeuroFlow Auto-Generated Logic Engine",
        f"# Graph: {comment_text(snapshot.name)}",
        "# Do not edit by hand: regenerate from the graph editor.",
        "",
        "",
    ]


def _docstring_text(text: str) -> str:
    return comment_text(text).replace("\\", "\\\\").replace('"', "'")


def emit(snapshot: GraphSnapshot) -> str:
    names = NameTable(
        snapshot,
        reserved=RESERVED_NAMES,
        handler_kinds=TRIGGER_KINDS,
        handler_format=HANDLER_FORMAT,
    )
    emitter = BranchEmitter(snapshot, names)
    declared = [n for n in snapshot.nodes if declares_variable(n)]

    w = CodeWriter(indent=0)
    w.extend(_header(snapshot))
    w.writeln(f"class {CLASS_NAME}:")
    w.push()

    # ── __init__ ──────────────────────────────────────────────────────────
    w.writeln("def __init__(self):")
    w.push()
    if declared:
        w.comment("UI State Variables (Mapped from Graph)")
    for node in declared:
        line = f"self.{names[node.id]} = {render_literal(node.value)}"
        if node.purpose:
            line += f"  # {comment_text(node.purpose)}"
        w.writeln(line)
    if not declared:
        w.writeln("pass")
    w.pop()
    w.blank()

    # ── get_state ─────────────────────────────────────────────────────────
    w.writeln("def get_state(self):")
    w.push()
    if declared:
        w.writeln("return {")
        w.push()
        for node in declared:
            name = names[node.id]
            w.writeln(f'"{name}": self.{name},')
        w.pop()
        w.writeln("}")
    else:
        w.writeln("return {}")
    w.pop()

    # ── trigger handlers ──────────────────────────────────────────────────
    entry_points = EntryPointCollector(emitter).collect()
    for entry in entry_points:
        w.blank()
        w.writeln(f"def {entry.method_name}(self):")
        w.push()
        w.writeln(f'"""Logic triggered by {_docstring_text(entry.node.display_name)}"""')
        w.pop()
        w.extend_raw(entry.body)

    w.pop()

    logger.info(
        f"Event backend: {len(declared)} state variables, {len(entry_points)} trigger handlers"
    )
    return w.result() + "\n"
