"""
compile_from_json.py — CLI for the NeuroFlow graph compiler
============================================================
Compiles a serialised editor graph JSON file into a standalone Python module.

Usage
-----
    python -m neuroflow.compile_from_json <graph.json> [options]

Options
-------
    --target  {event,simulation}  Output target (default: event)
                                    event      — NeuroFlowEnv with on_<name>_trigger() handlers
                                    simulation — NeuroFlowSimEnv with reset() / step(action)
    --out     <dir>               Output directory (default: compiled/)
    --print                       Print the generated source to stdout instead of writing a file
    --strict                      Treat unknown node types and bad ports as errors

Examples
--------
    # Compile the bundled reach-target graph to a simulation environment:
    python -m neuroflow.compile_from_json neuroflow/graphs/reach_target.json --target simulation

    # Print the event handlers of the menu demo without writing a file:
    python -m neuroflow.compile_from_json neuroflow/graphs/menu_events.json --print
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from neuroflow.compiler import TARGETS, CompileError, compile_graph
from neuroflow.compiler.deserialiser import json_to_snapshot
from neuroflow.compiler.naming import sanitize
from neuroflow.compiler.schema import SchemaError, validate_file


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="compile_from_json",
        description="Compile a NeuroFlow graph JSON file to standalone Python.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="graph.json",
        help="Path to the graph JSON file to compile.",
    )
    p.add_argument(
        "--target",
        choices=list(TARGETS),
        default="event",
        help="Output target. event (default) = UI handlers. simulation = RL environment.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default="compiled",
        help="Output directory for the compiled .py file (default: compiled/).",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown node types and invalid ports as errors rather than warnings.",
    )
    return p


def _graph_name_to_filename(graph_name: str) -> str:
    """Turn 'reach-target demo' → 'reach_target_demo.py'; never leaves the output dir."""
    return f"{sanitize(graph_name, fallback='graph')}.py"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate JSON ────────────────────────────────────────────────────────
    try:
        data = validate_file(json_path, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] Not valid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    graph_name = data.get("name") or json_path.stem
    print(f"[compile_from_json] graph  : {graph_name}")
    print(f"[compile_from_json] target : {args.target}")

    # ── Deserialise JSON → GraphSnapshot ─────────────────────────────────────
    try:
        snapshot = json_to_snapshot(data, strict=args.strict)
    except ValueError as exc:
        print(f"[error] Invalid graph: {exc}", file=sys.stderr)
        return 1
    print(f"[compile_from_json] nodes  : {len(snapshot.nodes)}")
    print(f"[compile_from_json] edges  : {len(snapshot.edges)}")

    # ── Emit ─────────────────────────────────────────────────────────────────
    try:
        source = compile_graph(snapshot, args.target)
    except CompileError as exc:
        print(f"[error] Compile failed ({exc.reason}): {exc.message}", file=sys.stderr)
        return 1

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        print(source)
        return 0

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _graph_name_to_filename(graph_name)
    out_path.write_text(source, encoding="utf-8")

    print(f"[compile_from_json] wrote  : {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
