"""
NeuroFlow Compiler — Node Code Templates
=========================================
A NodeTemplate renders the statements for one node kind:

  emit_inline(node, emitter, writer, visited)
      Writes the node's statements at the writer's current indent.
      Control-flow kinds recurse back into the BranchEmitter for their
      branch bodies; *visited* is the set of node ids on the current path.

  fan_in
      Reduction policy applied when several sources feed one input port.

Every NodeKind must have exactly one registered template; the registry is
checked when this module is imported so that a new kind cannot be added
without a matching template.

Adding a new node kind
----------------------
1. Add the member to core.Types.NodeKind and its ports to KIND_PORTS.
2. Subclass NodeTemplate and override emit_inline.
3. Register: TEMPLATE_REGISTRY[NodeKind.MY_KIND] = MyKindTemplate()
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List

from neuroflow.core.Types import (
    COMPARE_OPERATORS,
    DEFAULT_BRANCH_PORT,
    MATH_OPERATORS,
    NodeKind,
    case_port,
)

from .ir import GraphNode
from .resolver import FanIn, combine

if TYPE_CHECKING:
    from .branch import BranchEmitter


# Added to every divisor in generated code.
EPSILON = "1e-8"


# ── Code writer ───────────────────────────────────────────────────────────────

class CodeWriter:
    """Simple indented string accumulator."""

    def __init__(self, indent: int = 0):
        self._lines: List[str] = []
        self._indent = indent

    def writeln(self, line: str = "") -> "CodeWriter":
        if line:
            self._lines.append("    " * self._indent + line)
        else:
            self._lines.append("")
        return self

    def blank(self) -> "CodeWriter":
        return self.writeln()

    def comment(self, text: str) -> "CodeWriter":
        return self.writeln(f"# {text}")

    def push(self) -> "CodeWriter":
        self._indent += 1
        return self

    def pop(self) -> "CodeWriter":
        self._indent = max(0, self._indent - 1)
        return self

    def extend(self, lines: List[str]) -> "CodeWriter":
        for line in lines:
            self.writeln(line)
        return self

    def extend_raw(self, lines: List[str]) -> "CodeWriter":
        """Append already-indented lines verbatim."""
        self._lines.extend(lines)
        return self

    def lines(self) -> List[str]:
        return self._lines

    def result(self) -> str:
        return "\n".join(self._lines)


# ── Literal rendering ─────────────────────────────────────────────────────────

def render_literal(value: Any, default: str = "0") -> str:
    """
    Render an editor value as a Python literal.

    Numeric text becomes a number, any other text a quoted string; raw user
    text is never pasted into the generated program.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return "1.0" if value else "0.0"
    if isinstance(value, int):
        return repr(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return f"float('{value}')"
        return repr(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            return repr(int(text))
        except ValueError:
            pass
        try:
            return render_literal(float(text), default)
        except ValueError:
            return repr(value)
    return repr(value)


def comment_text(text: Any) -> str:
    """Collapse *text* onto one line so it can follow a ``#``."""
    return " ".join(str(text).split())


# ── Base template ─────────────────────────────────────────────────────────────

class NodeTemplate:
    """Base class — emits nothing."""

    fan_in: FanIn = FanIn.SUM

    def emit_inline(
        self,
        node: GraphNode,
        emitter: "BranchEmitter",
        writer: CodeWriter,
        visited: FrozenSet[str],
    ) -> None:
        pass


# ── Triggers (Action / Nav) ───────────────────────────────────────────────────

class TriggerTemplate(NodeTemplate):
    """A trigger reached inside a body continues inline with its own targets."""

    def emit_inline(self, node, emitter, writer, visited) -> None:
        emitter.emit_port(node, "trigger", writer, visited)


# ── Assignable state ──────────────────────────────────────────────────────────

class AssignTemplate(NodeTemplate):
    """``self.x = <sources>`` when the set port is wired; nothing otherwise."""

    fan_in = FanIn.SUM

    def __init__(self, set_port: str):
        self.set_port = set_port

    def emit_inline(self, node, emitter, writer, visited) -> None:
        sources = emitter.resolver.resolve(node, self.set_port)
        if not sources:
            return
        expr = combine([emitter.value_expr(s) for s in sources], self.fan_in, "0")
        writer.writeln(f"{emitter.target(node)} = {expr}")


# ── Math ──────────────────────────────────────────────────────────────────────

class MathTemplate(NodeTemplate):
    """``self.m = a <op> b``; division guards the denominator with EPSILON."""

    fan_in = FanIn.SUM

    def emit_inline(self, node, emitter, writer, visited) -> None:
        op = node.operation if node.operation in MATH_OPERATORS else "+"
        a = emitter.input_expr(node, "a", self.fan_in, "0")
        b = emitter.input_expr(node, "b", self.fan_in, "0")
        if op == "/":
            writer.writeln(f"{emitter.target(node)} = {a} / ({b} + {EPSILON})")
        else:
            writer.writeln(f"{emitter.target(node)} = {a} {op} {b}")


# ── Compare ───────────────────────────────────────────────────────────────────

class CompareTemplate(NodeTemplate):
    """``self.c = 1.0 if a <op> b else 0.0``"""

    fan_in = FanIn.SUM

    def emit_inline(self, node, emitter, writer, visited) -> None:
        op = node.operation if node.operation in COMPARE_OPERATORS else "=="
        a = emitter.input_expr(node, "a", self.fan_in, "0")
        b = emitter.input_expr(node, "b", self.fan_in, "0")
        writer.writeln(f"{emitter.target(node)} = 1.0 if {a} {op} {b} else 0.0")


# ── If / Else ─────────────────────────────────────────────────────────────────

class IfElseTemplate(NodeTemplate):
    """
    One ``if`` per first case, ``elif`` per later case, mandatory ``else``.

    Each clause body is the recursive emission of the nodes wired to that
    case's ``case_out_<index>`` port (``default_branch`` for the else),
    or ``pass`` when nothing is wired.
    """

    fan_in = FanIn.FIRST

    def emit_inline(self, node, emitter, writer, visited) -> None:
        value = emitter.input_expr(node, "input_val", self.fan_in, "0")

        if not node.cases:
            emitter.emit_port(node, DEFAULT_BRANCH_PORT, writer, visited)
            return

        for idx, case in enumerate(node.cases):
            clause = "if" if idx == 0 else "elif"
            literal = render_literal(case.value, default="''")
            writer.writeln(f"{clause} {value} == {literal}:")
            emitter.emit_body(node, case_port(idx), writer, visited)

        writer.writeln("else:")
        emitter.emit_body(node, DEFAULT_BRANCH_PORT, writer, visited)


# ── Reward ────────────────────────────────────────────────────────────────────

class RewardTemplate(NodeTemplate):
    """Terminal node; read by the simulation backend, never emitted inline."""


# ── Registry ──────────────────────────────────────────────────────────────────

TEMPLATE_REGISTRY: Dict[NodeKind, NodeTemplate] = {
    NodeKind.ACTION:   TriggerTemplate(),
    NodeKind.NAV:      TriggerTemplate(),
    NodeKind.STATE:    AssignTemplate("set_value"),
    NodeKind.MEDIA:    AssignTemplate("set_value"),
    NodeKind.OBJECT:   AssignTemplate("set_value"),
    NodeKind.PLAYER:   AssignTemplate("set_value"),
    NodeKind.VARIABLE: AssignTemplate("set"),
    NodeKind.MATH:     MathTemplate(),
    NodeKind.COMPARE:  CompareTemplate(),
    NodeKind.IF_ELSE:  IfElseTemplate(),
    NodeKind.REWARD:   RewardTemplate(),
}

_missing = [k.name for k in NodeKind if k not in TEMPLATE_REGISTRY]
if _missing:
    raise RuntimeError(f"No code template registered for node kinds: {', '.join(_missing)}")


def get_template(kind: NodeKind) -> NodeTemplate:
    return TEMPLATE_REGISTRY[kind]
