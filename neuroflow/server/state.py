"""
GraphState — server-side holder of the editor's current graph.

The held GraphSnapshot is immutable; every edit swaps in a whole new
snapshot, so a compile running against the old one can never observe a
half-applied change.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from neuroflow.compiler import compile_graph
from neuroflow.compiler.deserialiser import json_to_snapshot
from neuroflow.compiler.ir import GraphSnapshot
from neuroflow.compiler.ui_import import import_ui_schema

logger = logging.getLogger(__name__)


class GraphState:
    """Holds the current graph snapshot shown in the editor."""

    def __init__(self, seed_path: Optional[str] = None) -> None:
        self.snapshot: GraphSnapshot = GraphSnapshot()
        if seed_path:
            self._seed(seed_path)

    # ── Seed graph ──────────────────────────────────────────────────────────

    def _seed(self, seed_path: str) -> None:
        path = Path(seed_path)
        if not path.exists():
            logger.warning(f"Seed graph '{path}' not found; starting with an empty graph")
            return
        self.snapshot = json_to_snapshot(path)
        logger.info(f"Loaded seed graph '{self.snapshot.name}' from {path}")

    # ── Edits ───────────────────────────────────────────────────────────────

    def replace(self, data: Dict[str, Any], strict: bool = False) -> GraphSnapshot:
        """Validate *data* and swap it in.  The held graph is untouched on failure."""
        snapshot = json_to_snapshot(data, strict=strict)
        self.snapshot = snapshot
        logger.info(f"Graph replaced: {len(snapshot.nodes)} nodes, {len(snapshot.edges)} edges")
        return snapshot

    def load_ui_schema(self, schema: Any) -> GraphSnapshot:
        """Replace the graph with an imported UI schema; all-or-nothing."""
        snapshot = import_ui_schema(schema)
        self.snapshot = snapshot
        return snapshot

    def clear(self) -> None:
        self.snapshot = GraphSnapshot()
        logger.warning("Workspace cleared.")

    # ── Compile ─────────────────────────────────────────────────────────────

    def compile(self, target: str, data: Optional[Dict[str, Any]] = None) -> str:
        """Compile *data* when given, otherwise the held snapshot."""
        snapshot = json_to_snapshot(data) if data is not None else self.snapshot
        return compile_graph(snapshot, target)


graph_state = GraphState(os.environ.get("NEUROFLOW_GRAPH"))
