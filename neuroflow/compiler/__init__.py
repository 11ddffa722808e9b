"""
NeuroFlow Graph Compiler
========================
Compiles an immutable graph snapshot into standalone Python source.

Pipeline:
    graph JSON    →  [deserialiser]                 →  GraphSnapshot
    GraphSnapshot →  [naming + branch + entrypoints]
                  →  [event_emitter | sim_emitter]  →  Python source str

Targets
-------
    "event"       class NeuroFlowEnv with one on_<name>_trigger() per trigger node
    "simulation"  class NeuroFlowSimEnv with reset() / step(action)

Public API
----------
    from neuroflow.compiler import compile_graph, compile_json

    source = compile_json("graphs/reach_target.json", target="simulation")
    print(source)

Every call is independent: no state survives between calls, and identical
snapshots always produce byte-identical source.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Union

from . import event_emitter, sim_emitter
from .deserialiser import json_to_snapshot
from .ir import GraphSnapshot
from .schema import SchemaError

logger = logging.getLogger(__name__)

TARGETS: Dict[str, Callable[[GraphSnapshot], str]] = {
    "event":      event_emitter.emit,
    "simulation": sim_emitter.emit,
}


class CompileError(ValueError):
    """A compile call failed; *reason* is a short machine-readable code."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"reason": self.reason, "message": self.message}


def compile_graph(snapshot: GraphSnapshot, target: str = "event") -> str:
    """
    Compile *snapshot* into Python source for *target*.

    Raises:
        CompileError: unknown target, a graph nested too deeply to emit, or
                      emitted text that failed to parse.
    """
    emit = TARGETS.get(target)
    if emit is None:
        raise CompileError(
            "unknown_target",
            f"unknown target '{target}' (expected one of: {', '.join(TARGETS)})",
        )

    try:
        source = emit(snapshot)
        ast.parse(source)
    except RecursionError as exc:
        logger.error(f"Graph '{snapshot.name}' is nested too deeply for target '{target}'")
        raise CompileError(
            "too_deep", "graph nests triggers or branches too deeply to compile"
        ) from exc
    except SyntaxError as exc:
        logger.error(f"Generated {target} source for '{snapshot.name}' does not parse: {exc}")
        raise CompileError("syntax", f"generated source is not valid Python: {exc}") from exc

    logger.info(
        f"Compiled '{snapshot.name}' ({len(snapshot.nodes)} nodes, "
        f"{len(snapshot.edges)} edges) for target '{target}'"
    )
    return source


def compile_json(
    source: Union[str, Path, Dict[str, Any]],
    target: str = "event",
    *,
    strict: bool = False,
) -> str:
    """
    Load a graph JSON file or dict and compile it.

    Raises:
        FileNotFoundError: If a path is given and the file does not exist.
        CompileError: Invalid graph (reason ``invalid_snapshot``) or any
                      compile_graph() failure.
    """
    try:
        snapshot = json_to_snapshot(source, strict=strict)
    except ValueError as exc:  # SchemaError, duplicate ids, malformed JSON
        raise CompileError("invalid_snapshot", str(exc)) from exc
    return compile_graph(snapshot, target)


__all__ = ["TARGETS", "CompileError", "SchemaError", "compile_graph", "compile_json"]
