"""
NeuroFlow Compiler — Identifier naming
=======================================
Maps free-form node labels onto safe Python identifiers.

    sanitize("Player X-Pos")  →  "player_x_pos"
    sanitize("1st")           →  "_1st"
    sanitize("class")         →  "class_"
    sanitize("")              →  "node"

NameTable precomputes one identifier per node of a snapshot and resolves
collisions by appending a numeric suffix to every later claimant.
"""

from __future__ import annotations

import keyword
import logging
import re
from typing import Dict, Iterable, Optional, Set

from neuroflow.core.Types import NodeKind

from .ir import GraphNode, GraphSnapshot

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9_]")

DEFAULT_FALLBACK = "node"


def _clean(raw: str) -> str:
    name = _UNSAFE.sub("_", raw.lower())
    if not name:
        return name
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def sanitize(raw: str, fallback: str = DEFAULT_FALLBACK) -> str:
    """
    Convert *raw* into a safe identifier matching ``[a-z0-9_]+``.

    Never returns an empty string: an empty result is replaced by the
    sanitised *fallback* (normally the node id), then by ``"node"``.
    Idempotent: ``sanitize(sanitize(x)) == sanitize(x)``.
    """
    name = _clean(raw or "")
    if name:
        return name
    name = _clean(fallback or "")
    return name or DEFAULT_FALLBACK


def raw_name(node: GraphNode) -> str:
    """Precedence: custom display name, then variable name, then node id."""
    return node.custom_name or node.variable_name or node.id


class NameTable:
    """
    Identifier for every node of a snapshot, assigned in node-array order.

    The first node to claim a name keeps it; later claimants (and any node
    whose name hits a *reserved* member name of the generated class) get the
    first free ``<name>_<n>`` suffix starting at 2.

    With *handler_format* set, each node of *handler_kinds* also claims the
    method name ``handler_format.format(name)``.  Any other node holding
    that name is moved to a suffixed one.
    """

    def __init__(
        self,
        snapshot: GraphSnapshot,
        reserved: Iterable[str] = (),
        handler_kinds: Iterable[NodeKind] = (),
        handler_format: Optional[str] = None,
    ):
        self._names: Dict[str, str] = {}
        taken: Set[str] = set(reserved)

        for node in snapshot.nodes:
            self._names[node.id] = self._claim(node, sanitize(raw_name(node), fallback=node.id), taken)

        if handler_format is None:
            return
        kinds = frozenset(handler_kinds)
        handlers = {
            handler_format.format(self._names[n.id]) for n in snapshot.nodes if n.kind in kinds
        }
        taken |= handlers
        for node in snapshot.nodes:
            if node.kind not in kinds and self._names[node.id] in handlers:
                self._names[node.id] = self._claim(node, self._names[node.id], taken)

    @staticmethod
    def _claim(node: GraphNode, base: str, taken: Set[str]) -> str:
        name = base
        suffix = 2
        while name in taken:
            name = f"{base}_{suffix}"
            suffix += 1
        if name != base:
            logger.debug(f"Identifier collision: node '{node.id}' renamed '{base}' -> '{name}'")
        taken.add(name)
        return name

    def __getitem__(self, node_id: str) -> str:
        return self._names[node_id]

    def get(self, node_id: str, default: str = DEFAULT_FALLBACK) -> str:
        return self._names.get(node_id, default)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._names

    def __len__(self) -> int:
        return len(self._names)
